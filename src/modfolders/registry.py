"""Thread-safe registry of mod lists, one per character."""

import logging
import threading
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import ModListConfig
from .exceptions import ModAlreadyTrackedError
from .fs_watcher import WatchAdapter
from .mod_list import CharacterModList
from .models import Character, ModEntry

logger = logging.getLogger(__name__)


class ModListRegistry:
    """
    Owns the CharacterModList of every character.

    Provides lookups across all lists and disposes their watchers
    together on shutdown.
    """

    def __init__(
        self,
        config: Optional[ModListConfig] = None,
        watcher_factory: Optional[Callable[..., WatchAdapter]] = None,
        deleter=None,
    ):
        """
        Initialize the registry.

        Args:
            config: Configuration shared by every mod list
            watcher_factory: Passed through to each CharacterModList
            deleter: Passed through to each CharacterModList
        """
        self.config = config or ModListConfig()
        self._watcher_factory = watcher_factory
        self._deleter = deleter
        self._mod_lists: Dict[str, CharacterModList] = {}
        self._lock = threading.RLock()

    def add_character(
        self,
        character: Character,
        folder: Path,
        start_watching: bool = True,
    ) -> CharacterModList:
        """
        Create, populate and start the mod list for a character.

        Args:
            character: Character to register
            folder: The character's mod folder; created if missing
            start_watching: Whether to start the folder watcher

        Returns:
            The new mod list

        Raises:
            ModAlreadyTrackedError: If the character is already registered
        """
        with self._lock:
            if character.internal_name in self._mod_lists:
                raise ModAlreadyTrackedError(f"Character already registered: {character}")

            folder = Path(folder)
            folder.mkdir(parents=True, exist_ok=True)

            mod_list = CharacterModList(
                character,
                folder,
                config=self.config,
                watcher_factory=self._watcher_factory,
                deleter=self._deleter,
            )
            if start_watching:
                mod_list.start()
            try:
                mod_list.scan()
            except OSError:
                mod_list.dispose()
                raise

            self._mod_lists[character.internal_name] = mod_list
            logger.info(f"Registered {mod_list} at {mod_list.abs_mods_folder_path}")
            return mod_list

    def remove_character(self, character: Character) -> bool:
        """
        Dispose and forget a character's mod list.

        Returns:
            False if the character was not registered
        """
        with self._lock:
            mod_list = self._mod_lists.pop(character.internal_name, None)
        if mod_list is None:
            return False
        mod_list.dispose()
        return True

    def get_mod_list(self, character: Character) -> Optional[CharacterModList]:
        with self._lock:
            return self._mod_lists.get(character.internal_name)

    def get_mod_entry_by_id(self, entry_id: uuid.UUID) -> Optional[ModEntry]:
        """Find an entry by id in any character's mod list."""
        for mod_list in self.mod_lists():
            for entry in mod_list.mods:
                if entry.id == entry_id:
                    return entry
        return None

    def characters(self) -> List[Character]:
        with self._lock:
            return [mod_list.character for mod_list in self._mod_lists.values()]

    def mod_lists(self) -> List[CharacterModList]:
        with self._lock:
            return list(self._mod_lists.values())

    def dispose_all(self) -> int:
        """
        Dispose every mod list.

        Returns:
            Number of mod lists disposed
        """
        with self._lock:
            mod_lists = list(self._mod_lists.values())
            self._mod_lists.clear()

        for mod_list in mod_lists:
            mod_list.dispose()
        return len(mod_lists)

    def __len__(self) -> int:
        with self._lock:
            return len(self._mod_lists)

    def __contains__(self, character: Character) -> bool:
        with self._lock:
            return character.internal_name in self._mod_lists

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose_all()
        return False
