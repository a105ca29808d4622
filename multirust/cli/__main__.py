"""
Entry point for running the multirust CLI as a module.

Usage: python -m multirust.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
