"""Custom exceptions for the mod folder package."""


class ModListError(Exception):
    """Base exception for all mod list errors."""
    pass


class ModNotTrackedError(ModListError):
    """Mod or entry is not tracked by the mod list."""
    pass


class ModAlreadyTrackedError(ModListError):
    """Mod folder is already tracked by the mod list."""
    pass


class InvalidTransitionError(ModListError):
    """Mod is already in the requested enabled/disabled state."""
    pass


class NameCollisionError(ModListError):
    """Target folder name is already occupied by a sibling folder."""
    def __init__(self, message: str, target_path=None):
        super().__init__(message)
        self.target_path = target_path


class ModListDisposedError(ModListError):
    """Mod list has been disposed and no longer accepts operations."""
    pass


class ConfigError(ModListError):
    """Invalid configuration value."""
    pass


class WatcherError(ModListError):
    """Error raised by the underlying filesystem notification source."""
    pass
