"""
multirust - manage multiple compiler toolchains per user and per directory.

Installs named toolchains under a managed home directory, pins directory
overrides, falls back to a global default and forwards tool invocations
through generated proxy scripts.
"""

__version__ = "0.8.0"
