"""
Authoritative in-memory view of one character's mod folder.

The directory on disk is the source of truth. A CharacterModList keeps
its entries in step with it through a FolderWatcher, and performs
enable/disable/delete itself with the watcher muted so its own changes
are not applied a second time when the OS reports them.
"""

import logging
import os
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .config import ModListConfig
from .deletion import FolderDeleter
from .exceptions import (
    InvalidTransitionError,
    ModAlreadyTrackedError,
    ModListDisposedError,
    ModNotTrackedError,
    NameCollisionError,
)
from .fs_watcher import DisableWatcher, FolderWatcher, WatchAdapter
from .models import (
    Character,
    ExpectedEcho,
    ModEntry,
    ModFolderChangedArgs,
    ModFolderChangeType,
    SkinMod,
)


ModsChangedCallback = Callable[[ModFolderChangedArgs], None]
WatcherErrorCallback = Callable[[Exception], None]


class CharacterModList:
    """
    Tracks the mod folders of one character and keeps them in sync with disk.

    All mutations, programmatic or watcher driven, run under one
    reentrant lock. ModsChanged observers are called synchronously while
    the lock is held, after the change is applied.
    """

    def __init__(
        self,
        character: Character,
        folder: Path,
        config: Optional[ModListConfig] = None,
        watcher_factory: Optional[Callable[..., WatchAdapter]] = None,
        deleter: Optional[FolderDeleter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the mod list. The watcher is created but not started.

        Args:
            character: Owner of this mod list
            folder: Directory holding the character's mod folders
            config: Mod list configuration
            watcher_factory: Builds the watch adapter; defaults to FolderWatcher
            deleter: Object with delete(path, move_to_recycle_bin)
            logger: Logger to use instead of the module logger
        """
        self.character = character
        self.config = config or ModListConfig()
        self.codec = self.config.codec()
        self.abs_mods_folder_path = Path(os.path.abspath(folder))
        self._deleter = deleter or FolderDeleter()
        self._logger = logger or logging.getLogger(__name__)

        self._entries: Dict[uuid.UUID, ModEntry] = {}
        self._observers: List[ModsChangedCallback] = []
        self._error_observers: List[WatcherErrorCallback] = []
        self._suppress_depth = 0
        self._disposed = False
        self._lock = threading.RLock()

        factory = watcher_factory or FolderWatcher
        self._watcher = factory(
            self.abs_mods_folder_path,
            on_created=self._on_mod_created,
            on_deleted=self._on_mod_deleted,
            on_renamed=self._on_mod_renamed,
            on_error=self._on_watcher_error,
            config=self.config,
        )

    @property
    def disabled_prefix(self) -> str:
        return self.codec.disabled_prefix

    @property
    def suppressed(self) -> bool:
        with self._lock:
            return self._suppress_depth > 0

    @property
    def watcher(self) -> WatchAdapter:
        return self._watcher

    @property
    def mods(self) -> Tuple[ModEntry, ...]:
        """Snapshot of the tracked entries in insertion order."""
        with self._lock:
            return tuple(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[ModEntry]:
        return iter(self.mods)

    def __contains__(self, item) -> bool:
        with self._lock:
            if isinstance(item, ModEntry):
                return self._entries.get(item.id) is item
            if isinstance(item, SkinMod):
                return self._find_by_path(item.path) is not None
            return item in self._entries

    def __str__(self) -> str:
        return f"{self.character.display_name} ({len(self)} mods)"

    # Observers

    def subscribe(self, callback: ModsChangedCallback) -> None:
        """Register a ModsChanged observer."""
        with self._lock:
            if callback not in self._observers:
                self._observers.append(callback)

    def unsubscribe(self, callback: ModsChangedCallback) -> bool:
        """Remove a ModsChanged observer. Returns False if it was not registered."""
        with self._lock:
            if callback in self._observers:
                self._observers.remove(callback)
                return True
            return False

    def subscribe_errors(self, callback: WatcherErrorCallback) -> None:
        """Register an observer for watcher errors."""
        with self._lock:
            if callback not in self._error_observers:
                self._error_observers.append(callback)

    def _emit(
        self,
        change_type: ModFolderChangeType,
        new_path: Path,
        old_path: Optional[Path] = None,
    ) -> None:
        if self._suppress_depth > 0:
            return
        args = ModFolderChangedArgs(change_type, new_path, old_path)
        for callback in list(self._observers):
            try:
                callback(args)
            except Exception:
                self._logger.exception(
                    f"ModsChanged observer failed for {change_type.value} {new_path}"
                )

    # Lifecycle

    def start(self) -> None:
        """Start delivering watcher events."""
        self._check_not_disposed()
        self._watcher.start()

    def dispose(self) -> None:
        """Release the watcher. The entries stay readable."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
        self._watcher.dispose()

    @property
    def is_disposed(self) -> bool:
        with self._lock:
            return self._disposed

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    def _check_not_disposed(self) -> None:
        if self._disposed:
            raise ModListDisposedError(f"Mod list for {self.character} has been disposed")

    # Suppression

    @contextmanager
    def disable_watcher(self, echoes=()):
        """
        Mute watcher delivery for the duration of the block.

        Holds the mod list lock, so watcher callbacks and other mutations
        wait until the block ends. A late notification matching one of
        the echoes, or one added via the yielded gate's add_echo, is
        still dropped once within the configured echo window.
        """
        with self._lock:
            self._suppress_depth += 1
            try:
                with DisableWatcher(self._watcher, echoes) as gate:
                    yield gate
            finally:
                self._suppress_depth -= 1

    # Tracking

    def _find_by_path(self, path: Path) -> Optional[ModEntry]:
        path = Path(path)
        for entry in self._entries.values():
            if entry.path == path:
                return entry
        return None

    def _log_extra(self, path: Path) -> dict:
        return {"mod_name": Path(path).name, "character": self.character.display_name, "path": str(path)}

    def track(self, mod: SkinMod) -> ModEntry:
        """
        Start tracking a mod folder.

        The enabled flag is derived from the folder name.

        Args:
            mod: Descriptor of a direct child folder of this mod list's root

        Returns:
            The new entry

        Raises:
            ModAlreadyTrackedError: If the folder is already tracked
            ValueError: If the folder is not a direct child of the root
        """
        with self._lock:
            if mod.path.parent != self.abs_mods_folder_path:
                raise ValueError(f"{mod.path} is not inside {self.abs_mods_folder_path}")
            if self._find_by_path(mod.path) is not None:
                raise ModAlreadyTrackedError(f"Mod already added: {mod.folder_name}")

            entry = ModEntry(mod, self, is_enabled=not self.codec.is_disabled_name(mod.folder_name))
            self._entries[entry.id] = entry
            self._logger.debug(
                f"Tracking {mod.folder_name} in {self.character} modList",
                extra=self._log_extra(mod.path),
            )
            return entry

    def untrack(self, mod: SkinMod) -> bool:
        """
        Stop tracking a mod folder without touching disk.

        Returns:
            False if the mod was not tracked
        """
        with self._lock:
            entry = self._find_by_path(mod.path)
            if entry is None:
                self._logger.warning(
                    f"Mod {mod.folder_name} was not tracked in {self.character} modList",
                    extra=self._log_extra(mod.path),
                )
                return False

            del self._entries[entry.id]
            self._logger.debug(
                f"Stopped tracking {mod.folder_name} in {self.character} modList",
                extra=self._log_extra(mod.path),
            )
            return True

    def scan(self) -> List[ModEntry]:
        """
        Track every untracked, non-ignored child folder of the root.

        Returns:
            The entries added, in folder name order
        """
        with self._lock:
            added = []
            for child in sorted(self.abs_mods_folder_path.iterdir(), key=lambda p: p.name.lower()):
                if not child.is_dir() or self.config.should_ignore(child):
                    continue
                if self._find_by_path(child) is not None:
                    continue
                added.append(self.track(SkinMod(child, codec=self.codec)))
            return added

    # Queries

    def get_entry(self, entry_id: uuid.UUID) -> ModEntry:
        """
        Look up an entry by id.

        Raises:
            ModNotTrackedError: If no entry has this id
        """
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                raise ModNotTrackedError(f"Mod entry not found: {entry_id}")
            return entry

    def find_by_path(self, path: Path) -> Optional[ModEntry]:
        with self._lock:
            return self._find_by_path(path)

    def is_enabled(self, mod: SkinMod) -> bool:
        """
        Return the enabled state of a tracked mod.

        Raises:
            ModNotTrackedError: If the mod is not tracked
        """
        with self._lock:
            entry = self._find_by_path(mod.path)
            if entry is None:
                raise ModNotTrackedError(f"Mod not added: {mod.folder_name}")
            return entry.is_enabled

    def is_multiple_mods_active(self) -> bool:
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.is_enabled) > 1

    def folder_name_collides(self, folder_name: str) -> bool:
        """
        Check whether a folder name is taken in either enabled or disabled form.

        Args:
            folder_name: Candidate folder name; a full path is reduced to its name

        Returns:
            True if creating or renaming to this name would collide
        """
        name = Path(folder_name).name
        if not name:
            return False

        candidates = [self.codec.strip_disabled_marker(name), self.codec.apply_disabled_marker(name)]
        return any(
            (self.abs_mods_folder_path / candidate).is_dir()
            for candidate in candidates
            if candidate
        )

    # Mutations

    def set_custom_mod_name(self, entry_id: uuid.UUID, new_name: str = "") -> None:
        """
        Set the user-facing name of a mod. An empty name clears it.

        Raises:
            ModNotTrackedError: If no entry has this id
        """
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                self._logger.warning(f"Renamed mod {entry_id} was not tracked in mod list")
                raise ModNotTrackedError(f"Mod entry not found: {entry_id}")
            entry.set_custom_name(new_name)

    def enable(self, entry_id: uuid.UUID) -> None:
        """
        Enable a mod by removing the disabled marker from its folder name.

        Raises:
            ModNotTrackedError: If no entry has this id
            InvalidTransitionError: If the mod is already enabled
            NameCollisionError: If the enabled folder name is taken
            OSError: If the rename fails; the entry is left unchanged
        """
        with self._lock:
            self._check_not_disposed()
            entry = self.get_entry(entry_id)
            if entry.is_enabled:
                raise InvalidTransitionError(f"Cannot enable an enabled mod: {entry.folder_name}")

            new_name = self.codec.strip_disabled_marker(entry.folder_name)
            if not new_name:
                raise InvalidTransitionError(
                    f"Cannot enable {entry.folder_name}: name is only a disabled marker"
                )
            self._rename_entry(entry, new_name, is_enabled=True)

    def disable(self, entry_id: uuid.UUID) -> None:
        """
        Disable a mod by adding the disabled marker to its folder name.

        Raises:
            ModNotTrackedError: If no entry has this id
            InvalidTransitionError: If the mod is already disabled
            NameCollisionError: If the disabled folder name is taken
            OSError: If the rename fails; the entry is left unchanged
        """
        with self._lock:
            self._check_not_disposed()
            entry = self.get_entry(entry_id)
            if not entry.is_enabled:
                raise InvalidTransitionError(f"Cannot disable a disabled mod: {entry.folder_name}")

            new_name = self.codec.apply_disabled_marker(entry.folder_name)
            self._rename_entry(entry, new_name, is_enabled=False)

    def _rename_entry(self, entry: ModEntry, new_name: str, is_enabled: bool) -> None:
        old_path = entry.path
        target = self.abs_mods_folder_path / new_name
        if target.exists():
            raise NameCollisionError(
                f"Cannot rename {entry.folder_name}: {new_name} already exists in {self.character} folder",
                target_path=target,
            )

        with self.disable_watcher((ExpectedEcho.rename(old_path, target),)):
            entry.mod.rename(new_name)
            entry._set_enabled(is_enabled)

        self._logger.info(
            f"{'Enabled' if is_enabled else 'Disabled'} mod {old_path.name} -> {new_name}",
            extra=self._log_extra(target),
        )
        self._emit(ModFolderChangeType.RENAMED, entry.path, old_path)

    def delete_entry(self, entry_id: uuid.UUID, move_to_recycle_bin: bool = True) -> None:
        """
        Stop tracking a mod and remove its folder from disk.

        Raises:
            ModNotTrackedError: If no entry has this id; nothing is deleted
            OSError: If deletion fails; the entry stays tracked
        """
        with self._lock:
            self._check_not_disposed()
            entry = self._entries.get(entry_id)
            if entry is None:
                raise ModNotTrackedError(f"Skin entry not found: {entry_id}")

            path = entry.path
            previous = dict(self._entries)
            with self.disable_watcher((ExpectedEcho.delete(path),)):
                del self._entries[entry_id]
                try:
                    self._deleter.delete(path, move_to_recycle_bin)
                except Exception:
                    self._entries = previous
                    raise

            self._logger.info(
                f"{'Recycled' if move_to_recycle_bin else 'Deleted'} mod {entry.folder_name} "
                f"from {self.character} modList",
                extra=self._log_extra(path),
            )
            self._emit(ModFolderChangeType.DELETED, path)

    # Watcher reconciliation

    def _on_mod_created(self, path: Path) -> None:
        with self._lock:
            if self._suppress_depth > 0 or self._disposed:
                return

            self._logger.info(
                f"Mod {path.name} was created in {self.character} folder",
                extra=self._log_extra(path),
            )
            if self._find_by_path(path) is not None:
                self._logger.warning(
                    f"Created folder {path.name} was already tracked in {self.character} mod list",
                    extra=self._log_extra(path),
                )
            else:
                self.track(SkinMod(path, codec=self.codec))

            self._emit(ModFolderChangeType.CREATED, path)

    def _on_mod_deleted(self, path: Path) -> None:
        with self._lock:
            if self._suppress_depth > 0 or self._disposed:
                return

            self._logger.info(
                f"Mod {path.name} in {self.character} folder was deleted",
                extra=self._log_extra(path),
            )
            entry = self._find_by_path(path)
            if entry is not None:
                del self._entries[entry.id]
            else:
                self._logger.warning(
                    f"Deleted folder {path} was not tracked in mod list",
                    extra=self._log_extra(path),
                )

            self._emit(ModFolderChangeType.DELETED, path)

    def _on_mod_renamed(self, old_path: Path, new_path: Path) -> None:
        with self._lock:
            if self._suppress_depth > 0 or self._disposed:
                return

            self._logger.info(
                f"Mod {old_path.name} renamed to {new_path.name}",
                extra=self._log_extra(new_path),
            )
            entry = self._find_by_path(old_path)
            if entry is None:
                self._logger.warning(
                    f"Renamed folder {old_path} was not tracked in mod list",
                    extra=self._log_extra(old_path),
                )
            elif self._find_by_path(new_path) is not None:
                # Already tracking the destination; keep one entry per path.
                del self._entries[entry.id]
            else:
                new_mod = entry.mod.with_path(new_path)
                entry._replace_mod(new_mod, is_enabled=not self.codec.is_disabled_name(new_mod.folder_name))

            self._emit(ModFolderChangeType.RENAMED, new_path, old_path)

    def _on_watcher_error(self, error: Exception) -> None:
        self._logger.error(
            f"Error in folder watcher for {self.character}: {error}",
            exc_info=error,
            extra=self._log_extra(self.abs_mods_folder_path),
        )
        with self._lock:
            observers = list(self._error_observers)
        for callback in observers:
            try:
                callback(error)
            except Exception:
                self._logger.exception("Watcher error observer failed")
