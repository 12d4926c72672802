"""Data models for the mod folder package."""

import os
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import NameCollisionError
from .naming import DisabledPrefixCodec, default_codec


class ModFolderChangeType(Enum):
    """Types of mod folder changes published by a mod list."""
    CREATED = "created"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class Character:
    """
    The owner a mod list belongs to.

    Attributes:
        internal_name: Stable key, e.g. the character's folder name
        display_name: User-facing name used in logs and listings
    """
    internal_name: str
    display_name: str = ""

    def __post_init__(self):
        if not self.internal_name:
            raise ValueError("internal_name must not be empty")
        if not self.display_name:
            object.__setattr__(self, "display_name", self.internal_name)

    def __str__(self) -> str:
        return self.display_name


class SkinMod:
    """
    Identity and metadata for one mod folder.

    The folder path is the source of truth for the on-disk name; the
    custom name is a user-facing label unrelated to the naming convention.
    """

    def __init__(
        self,
        path: Path,
        custom_name: str = "",
        mod_id: Optional[uuid.UUID] = None,
        codec: Optional[DisabledPrefixCodec] = None,
    ):
        path = Path(path)
        if not path.is_absolute():
            raise ValueError(f"path must be absolute: {path}")
        if not path.name:
            raise ValueError(f"path has no folder name: {path}")
        self._path = path
        self.custom_name = custom_name
        self.id = mod_id or uuid.uuid4()
        self.codec = codec or default_codec

    @property
    def path(self) -> Path:
        return self._path

    @property
    def folder_name(self) -> str:
        return self._path.name

    @property
    def display_name(self) -> str:
        """Custom name if set, else the folder name without a disabled marker."""
        if self.custom_name:
            return self.custom_name
        return self.codec.strip_disabled_marker(self.folder_name) or self.folder_name

    @property
    def is_disabled_folder(self) -> bool:
        return self.codec.is_disabled_name(self.folder_name)

    def exists(self) -> bool:
        return self._path.is_dir()

    def rename(self, new_folder_name: str) -> Path:
        """
        Rename the folder on disk, keeping it in the same parent directory.

        Args:
            new_folder_name: New folder name (no path separators)

        Returns:
            The new absolute path

        Raises:
            ValueError: If the name is empty or contains a separator
            NameCollisionError: If a sibling already uses the name
            OSError: If the rename itself fails
        """
        if not new_folder_name or os.sep in new_folder_name or (os.altsep and os.altsep in new_folder_name):
            raise ValueError(f"Invalid folder name: {new_folder_name!r}")

        target = self._path.parent / new_folder_name
        if target.exists() and not _same_entry(target, self._path):
            raise NameCollisionError(
                f"Cannot rename '{self.folder_name}': '{new_folder_name}' already exists",
                target_path=target,
            )

        self._path.rename(target)
        self._path = target
        return target

    def with_path(self, path: Path) -> "SkinMod":
        """Build a descriptor for a new path, carrying over id and custom name."""
        return SkinMod(path, custom_name=self.custom_name, mod_id=self.id, codec=self.codec)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SkinMod):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"SkinMod({str(self._path)!r}, custom_name={self.custom_name!r})"


def _same_entry(a: Path, b: Path) -> bool:
    # Case-only renames on case-insensitive filesystems see the source as the target.
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


class ModEntry:
    """
    A tracked mod: descriptor, enabled state and a stable entry id.

    The enabled flag is only changed by the owning mod list.
    """

    def __init__(self, mod: SkinMod, mod_list, is_enabled: bool, entry_id: Optional[uuid.UUID] = None):
        self.id = entry_id or uuid.uuid4()
        self._mod = mod
        self._is_enabled = is_enabled
        self.mod_list = mod_list

    @property
    def mod(self) -> SkinMod:
        return self._mod

    @property
    def is_enabled(self) -> bool:
        return self._is_enabled

    @property
    def path(self) -> Path:
        return self._mod.path

    @property
    def folder_name(self) -> str:
        return self._mod.folder_name

    def set_custom_name(self, name: str = "") -> None:
        self._mod.custom_name = name

    def _set_enabled(self, value: bool) -> None:
        self._is_enabled = value

    def _replace_mod(self, mod: SkinMod, is_enabled: bool) -> None:
        self._mod = mod
        self._is_enabled = is_enabled

    def __repr__(self) -> str:
        state = "enabled" if self._is_enabled else "disabled"
        return f"ModEntry({self.folder_name!r}, {state}, id={self.id})"


@dataclass(frozen=True)
class ModFolderChangedArgs:
    """
    Domain event published after a confirmed mod folder change.

    Attributes:
        change_type: CREATED, DELETED or RENAMED
        new_path: Current path (for DELETED, the removed path)
        old_path: Previous path, required for RENAMED
        timestamp: Unix timestamp when the change was published
    """
    change_type: ModFolderChangeType
    new_path: Path
    old_path: Optional[Path] = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.new_path is None:
            raise ValueError("new_path must be provided")
        if self.change_type == ModFolderChangeType.RENAMED and self.old_path is None:
            raise ValueError("old_path must be provided when change type is renamed")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "change_type": self.change_type.value,
            "new_path": str(self.new_path),
            "old_path": str(self.old_path) if self.old_path else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ModFolderChangedArgs":
        """Create from dictionary."""
        return cls(
            change_type=ModFolderChangeType(data["change_type"]),
            new_path=Path(data["new_path"]),
            old_path=Path(data["old_path"]) if data.get("old_path") else None,
            timestamp=data.get("timestamp", time.time()),
        )


@dataclass
class RawFSEvent:
    """
    Raw event from the filesystem watcher before reconciliation.

    Attributes:
        event_type: Raw event type string (created, deleted, moved)
        src_path: Source path of the event
        dest_path: Destination path (for move events)
        is_directory: Whether this is a directory event
        timestamp: Unix timestamp when the event occurred
    """
    event_type: str
    src_path: Path
    dest_path: Optional[Path] = None
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ExpectedEcho:
    """
    Signature of the OS notification a self-initiated change will produce.

    Attributes:
        event_type: "moved" for a rename, "deleted" for a removal
        src_path: Folder path before the change
        dest_path: Folder path after a rename
    """
    event_type: str
    src_path: Path
    dest_path: Optional[Path] = None

    @classmethod
    def rename(cls, old_path: Path, new_path: Path) -> "ExpectedEcho":
        return cls("moved", Path(old_path), Path(new_path))

    @classmethod
    def delete(cls, path: Path) -> "ExpectedEcho":
        return cls("deleted", Path(path))

    def matches(self, raw_event: RawFSEvent) -> bool:
        if raw_event.src_path != self.src_path:
            return False
        if self.event_type == "moved":
            return raw_event.event_type == "moved" and raw_event.dest_path == self.dest_path
        if raw_event.event_type == "deleted":
            return True
        # Recycling on the same volume is reported as a move out of the folder
        return (
            raw_event.event_type == "moved"
            and raw_event.dest_path is not None
            and raw_event.dest_path.parent != self.src_path.parent
        )
