"""
Mod Folders Package

Keeps an in-memory view of each character's mod folders in sync with
the filesystem and enables/disables mods by renaming their folders.

Features:
- Disabled-prefix naming convention with a legacy marker
- Watchdog-based reconciliation of external create/delete/rename
- Rename-based enable/disable with watcher suppression
- Stable entry ids across renames
- Synchronous ModsChanged observers
"""

from .models import (
    Character,
    SkinMod,
    ModEntry,
    ModFolderChangeType,
    ModFolderChangedArgs,
    RawFSEvent,
    ExpectedEcho,
)

from .naming import (
    DisabledPrefixCodec,
    DEFAULT_DISABLED_PREFIX,
    DEFAULT_ALT_DISABLED_PREFIX,
    is_disabled_name,
    strip_disabled_marker,
    apply_disabled_marker,
)

from .config import ModListConfig

from .exceptions import (
    ModListError,
    ModNotTrackedError,
    ModAlreadyTrackedError,
    InvalidTransitionError,
    NameCollisionError,
    ModListDisposedError,
    ConfigError,
    WatcherError,
)

from .fs_watcher import WatchAdapter, FolderWatcher, FolderEventHandler, DisableWatcher
from .deletion import FolderDeleter
from .mod_list import CharacterModList
from .registry import ModListRegistry


__all__ = [
    # Models
    "Character",
    "SkinMod",
    "ModEntry",
    "ModFolderChangeType",
    "ModFolderChangedArgs",
    "RawFSEvent",
    "ExpectedEcho",
    # Naming
    "DisabledPrefixCodec",
    "DEFAULT_DISABLED_PREFIX",
    "DEFAULT_ALT_DISABLED_PREFIX",
    "is_disabled_name",
    "strip_disabled_marker",
    "apply_disabled_marker",
    # Config
    "ModListConfig",
    # Exceptions
    "ModListError",
    "ModNotTrackedError",
    "ModAlreadyTrackedError",
    "InvalidTransitionError",
    "NameCollisionError",
    "ModListDisposedError",
    "ConfigError",
    "WatcherError",
    # Components
    "WatchAdapter",
    "FolderWatcher",
    "FolderEventHandler",
    "DisableWatcher",
    "FolderDeleter",
    "CharacterModList",
    "ModListRegistry",
]

__version__ = "0.1.0"
