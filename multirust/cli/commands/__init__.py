"""
CLI command implementations.

Each handler takes the ConfigStore and the parsed arguments and returns an
exit code.
"""
