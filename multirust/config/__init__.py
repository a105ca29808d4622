"""
Persistent state for multirust: settings, metadata, overrides and the
ConfigStore that ties them to a home directory.
"""

from .metadata import METADATA_VERSION, MetadataFile
from .overrides import Override, OverrideStore
from .settings import Settings
from .store import ConfigStore

__all__ = [
    "METADATA_VERSION",
    "MetadataFile",
    "Override",
    "OverrideStore",
    "Settings",
    "ConfigStore",
]
