"""
Entry point for running multirust as a module.

Usage: python -m multirust [command] [options]
"""

from multirust.cli.parser import main

if __name__ == "__main__":
    main()
