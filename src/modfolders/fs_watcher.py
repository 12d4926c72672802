"""Directory watcher for one mod folder using the watchdog library."""

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEventHandler,
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
)

from .config import ModListConfig
from .exceptions import WatcherError
from .models import ExpectedEcho, RawFSEvent

logger = logging.getLogger(__name__)

PathCallback = Callable[[Path], None]
RenameCallback = Callable[[Path, Path], None]
ErrorCallback = Callable[[Exception], None]


class WatchAdapter(ABC):
    """
    Abstract event source for the direct children of one directory.

    Implementations report created, deleted and renamed children and
    errors through the callbacks given at construction, and can be muted
    while the owner mutates the directory itself.
    """

    @abstractmethod
    def start(self) -> None:
        """Begin delivering events."""
        pass

    @abstractmethod
    def disable_raising_events(self) -> None:
        """Stop delivering events until the matching enable call."""
        pass

    @abstractmethod
    def enable_raising_events(self, echoes: Iterable[ExpectedEcho] = ()) -> None:
        """
        Resume delivering events.

        Args:
            echoes: Changes made while muted; a late notification matching
                one of them is dropped once, within a short window
        """
        pass

    @property
    @abstractmethod
    def raising_events(self) -> bool:
        """Return True if events are currently delivered."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Stop delivery permanently and release the underlying resources."""
        pass

    @property
    @abstractmethod
    def is_disposed(self) -> bool:
        pass


class DisableWatcher:
    """
    Scoped suppression of a watch adapter.

    Events are muted on enter and resumed on exit, including when the
    block raises. Echoes registered with add_echo are handed to the
    adapter on exit.
    """

    def __init__(self, adapter: WatchAdapter, echoes: Iterable[ExpectedEcho] = ()):
        self._adapter = adapter
        self._echoes = list(echoes)

    def add_echo(self, echo: ExpectedEcho) -> None:
        self._echoes.append(echo)

    def __enter__(self) -> "DisableWatcher":
        self._adapter.disable_raising_events()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._adapter.enable_raising_events(self._echoes)
        return False


class FolderEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog events to RawFSEvent."""

    def __init__(
        self,
        callback: Callable[[RawFSEvent], None],
        error_callback: Optional[ErrorCallback] = None,
    ):
        super().__init__()
        self.callback = callback
        self.error_callback = error_callback

    def _emit(self, event_type: str, src_path, dest_path=None, is_directory: bool = False):
        """Emit a RawFSEvent to the callback, routing failures to the error callback."""
        raw_event = RawFSEvent(
            event_type=event_type,
            src_path=Path(os.fsdecode(src_path)),
            dest_path=Path(os.fsdecode(dest_path)) if dest_path else None,
            is_directory=is_directory,
            timestamp=time.time(),
        )
        try:
            self.callback(raw_event)
        except Exception as e:
            if self.error_callback is None:
                raise
            error = WatcherError(f"Failed to handle {event_type} event for {raw_event.src_path}: {e}")
            error.__cause__ = e
            self.error_callback(error)

    def on_created(self, event):
        self._emit("created", event.src_path, is_directory=isinstance(event, DirCreatedEvent))

    def on_deleted(self, event):
        self._emit("deleted", event.src_path, is_directory=isinstance(event, DirDeletedEvent))

    def on_moved(self, event):
        self._emit(
            "moved",
            event.src_path,
            event.dest_path,
            is_directory=isinstance(event, DirMovedEvent),
        )


class FolderWatcher(WatchAdapter):
    """
    Non-recursive watchdog observer for one mod folder.

    Suppression is reference counted, so nested disable/enable pairs
    behave like a single pair.
    """

    def __init__(
        self,
        root: Path,
        on_created: PathCallback,
        on_deleted: PathCallback,
        on_renamed: RenameCallback,
        on_error: Optional[ErrorCallback] = None,
        config: Optional[ModListConfig] = None,
    ):
        """
        Initialize the folder watcher.

        Args:
            root: Directory whose direct children are watched
            on_created: Called with the path of a new child
            on_deleted: Called with the path of a removed child
            on_renamed: Called with the old and new path of a renamed child
            on_error: Called with a WatcherError when event handling fails
            config: Mod list configuration
        """
        self.root = Path(os.path.abspath(root))
        self.config = config or ModListConfig()
        self._on_created = on_created
        self._on_deleted = on_deleted
        self._on_renamed = on_renamed
        self._on_error = on_error or self._log_error

        self._handler = FolderEventHandler(self._dispatch, self._on_error)
        self._observer: Optional[Observer] = None
        self._suspend_depth = 0
        # Events seen while muted, and echoes handed over by nested enables,
        # are kept until the outermost enable settles them.
        self._muted_events: List[RawFSEvent] = []
        self._pending_echoes: List[ExpectedEcho] = []
        self._echoes: List[Tuple[ExpectedEcho, float]] = []
        self._disposed = False
        self._lock = threading.Lock()

    @staticmethod
    def _log_error(error: Exception) -> None:
        logger.error(f"Error in folder watcher: {error}", exc_info=error)

    def start(self) -> None:
        """
        Start the watchdog observer.

        Raises:
            WatcherError: If the watcher was disposed or the root cannot be watched
        """
        with self._lock:
            if self._disposed:
                raise WatcherError(f"Watcher for {self.root} has been disposed")
            if self._observer is not None:
                return

            observer = Observer()
            try:
                observer.schedule(self._handler, str(self.root), recursive=False)
                observer.start()
            except OSError as e:
                raise WatcherError(f"Cannot watch {self.root}: {e}") from e
            self._observer = observer
        logger.debug(f"Started watching {self.root}")

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._observer is not None and not self._disposed

    def disable_raising_events(self) -> None:
        with self._lock:
            self._suspend_depth += 1

    def enable_raising_events(self, echoes: Iterable[ExpectedEcho] = ()) -> None:
        with self._lock:
            if self._suspend_depth == 0:
                return
            self._suspend_depth -= 1
            self._pending_echoes.extend(echoes)
            if self._suspend_depth > 0:
                return

            # An echo already dropped while muted must not swallow a later event.
            muted = self._muted_events
            deadline = time.monotonic() + self.config.echo_window_ms / 1000.0
            for echo in self._pending_echoes:
                seen = next((event for event in muted if echo.matches(event)), None)
                if seen is not None:
                    muted.remove(seen)
                else:
                    self._echoes.append((echo, deadline))
            self._pending_echoes = []
            self._muted_events = []

    @property
    def raising_events(self) -> bool:
        with self._lock:
            return self._suspend_depth == 0 and not self._disposed

    @property
    def is_disposed(self) -> bool:
        with self._lock:
            return self._disposed

    def dispose(self) -> None:
        """Stop the observer and drop every further event. Safe to call twice."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            observer = self._observer
            self._observer = None
            self._echoes.clear()
            self._muted_events.clear()
            self._pending_echoes.clear()

        if observer is not None:
            observer.stop()
            observer.join(timeout=self.config.observer_join_timeout)
        logger.debug(f"Stopped watching {self.root}")

    def _is_muted(self, raw_event: RawFSEvent) -> bool:
        """
        Check suppression and pending echoes for an incoming event.

        An event matching a pending echo is dropped and consumes it, so
        only the one notification the muted change caused is filtered.
        """
        with self._lock:
            if self._disposed:
                return True
            if self._suspend_depth > 0:
                self._muted_events.append(raw_event)
                return True

            if not self._echoes:
                return False

            now = time.monotonic()
            self._echoes = [(echo, deadline) for echo, deadline in self._echoes if deadline > now]
            for index, (echo, _) in enumerate(self._echoes):
                if echo.matches(raw_event):
                    del self._echoes[index]
                    return True
            return False

    def _is_child(self, path: Optional[Path]) -> bool:
        """True for a non-ignored direct child of the root."""
        if path is None:
            return False
        return path.parent == self.root and not self.config.should_ignore(path)

    def _dispatch(self, raw_event: RawFSEvent) -> None:
        """Route a raw event to the created/deleted/renamed callbacks."""
        if self._is_muted(raw_event):
            logger.debug(f"Dropped suppressed {raw_event.event_type} event: {raw_event.src_path}")
            return

        # A removed folder is gone before Windows reports it, so watchdog
        # flags it as a file; deletions are never filtered by kind.
        if (
            self.config.directories_only
            and not raw_event.is_directory
            and raw_event.event_type != "deleted"
        ):
            return

        if raw_event.event_type == "created":
            if self._is_child(raw_event.src_path):
                self._on_created(raw_event.src_path)
        elif raw_event.event_type == "deleted":
            if self._is_child(raw_event.src_path):
                self._on_deleted(raw_event.src_path)
        elif raw_event.event_type == "moved":
            src_inside = self._is_child(raw_event.src_path)
            dest_inside = self._is_child(raw_event.dest_path)
            if src_inside and dest_inside:
                self._on_renamed(raw_event.src_path, raw_event.dest_path)
            elif src_inside:
                self._on_deleted(raw_event.src_path)
            elif dest_inside:
                self._on_created(raw_event.dest_path)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False
