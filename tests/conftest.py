"""Shared fixtures: a synchronous stand-in for the folder watcher."""

import time
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from modfolders.fs_watcher import WatchAdapter
from modfolders.mod_list import CharacterModList
from modfolders.models import Character, ExpectedEcho


class FakeWatcher(WatchAdapter):
    """Watch adapter whose events are fired by the test on the calling thread."""

    def __init__(self, root, on_created, on_deleted, on_renamed, on_error=None, config=None):
        self.root = Path(root)
        self.on_created = on_created
        self.on_deleted = on_deleted
        self.on_renamed = on_renamed
        self.on_error = on_error
        self.config = config
        self.started = False
        self._disposed = False
        self.depth = 0
        self.echoes: List[ExpectedEcho] = []
        self.dropped: List[tuple] = []

    def start(self):
        self.started = True

    def disable_raising_events(self):
        self.depth += 1

    def enable_raising_events(self, echoes=()):
        if self.depth == 0:
            return
        self.depth -= 1
        self.echoes.extend(echoes)

    @property
    def raising_events(self):
        return self.depth == 0 and not self._disposed

    def dispose(self):
        self._disposed = True

    @property
    def is_disposed(self):
        return self._disposed

    def _deliver(self, kind, callback, *paths):
        if not self.raising_events:
            self.dropped.append((kind,) + paths)
            return
        callback(*paths)

    def fire_created(self, path):
        self._deliver("created", self.on_created, Path(path))

    def fire_deleted(self, path):
        self._deliver("deleted", self.on_deleted, Path(path))

    def fire_renamed(self, old_path, new_path):
        self._deliver("renamed", self.on_renamed, Path(old_path), Path(new_path))

    def fire_error(self, error):
        self.on_error(error)


class RecordingDeleter:
    """Deleter that records calls and optionally fails."""

    def __init__(self, error: Optional[Exception] = None):
        self.calls = []
        self.error = error

    def delete(self, path, move_to_recycle_bin=True):
        self.calls.append((Path(path), move_to_recycle_bin))
        if self.error is not None:
            raise self.error


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.05) -> bool:
    """Poll until predicate is true or the timeout expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def character():
    return Character("keqing", "Keqing")


@pytest.fixture
def mods_folder(tmp_path):
    folder = tmp_path / "Keqing"
    folder.mkdir()
    return folder


@pytest.fixture
def deleter():
    return RecordingDeleter()


@pytest.fixture
def mod_list(character, mods_folder, deleter):
    mod_list = CharacterModList(character, mods_folder, watcher_factory=FakeWatcher, deleter=deleter)
    mod_list.start()
    yield mod_list
    mod_list.dispose()


@pytest.fixture
def events(mod_list):
    received = []
    mod_list.subscribe(received.append)
    return received
