"""Configuration for the mod folder package."""

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .exceptions import ConfigError
from .naming import DEFAULT_ALT_DISABLED_PREFIX, DEFAULT_DISABLED_PREFIX, DisabledPrefixCodec


@dataclass
class ModListConfig:
    """
    Configuration options for character mod lists.

    Attributes:
        disabled_prefix: Primary folder name marker for disabled mods
        alt_disabled_prefix: Legacy marker, same meaning, still recognized
        ignore_patterns: Glob patterns for folder names that are never tracked
        echo_window_ms: How long a self-initiated change is still filtered
            out of the watcher after suppression ends
        observer_join_timeout: Seconds to wait for the observer thread on dispose
        directories_only: Whether file (non-directory) events are ignored
    """
    disabled_prefix: str = DEFAULT_DISABLED_PREFIX
    alt_disabled_prefix: str = DEFAULT_ALT_DISABLED_PREFIX
    ignore_patterns: List[str] = field(default_factory=lambda: [
        ".*",
        "__pycache__",
        "*.tmp",
        "Thumbs.db",
        ".DS_Store",
    ])
    echo_window_ms: int = 1000
    observer_join_timeout: float = 5.0
    directories_only: bool = True

    def __post_init__(self):
        if not self.disabled_prefix:
            raise ConfigError("disabled_prefix must not be empty")
        if not self.alt_disabled_prefix:
            raise ConfigError("alt_disabled_prefix must not be empty")
        if self.echo_window_ms <= 0:
            raise ConfigError(f"echo_window_ms must be positive: {self.echo_window_ms}")

    def codec(self) -> DisabledPrefixCodec:
        """Build the folder name codec for the configured markers."""
        return DisabledPrefixCodec(self.disabled_prefix, self.alt_disabled_prefix)

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a folder should be ignored based on ignore patterns.

        Args:
            path: Path to check

        Returns:
            True if the folder should never be tracked
        """
        name = Path(path).name
        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(name, pattern):
                return True
        return False

    @classmethod
    def from_env(
        cls,
        prefix: str = "MODFOLDERS_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ModListConfig":
        """
        Build a config from environment variables.

        Recognized variables (with the default prefix):
        MODFOLDERS_DISABLED_PREFIX, MODFOLDERS_ALT_DISABLED_PREFIX,
        MODFOLDERS_ECHO_WINDOW_MS.

        Args:
            prefix: Variable name prefix
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            A new ModListConfig

        Raises:
            ConfigError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        disabled_prefix = env.get(f"{prefix}DISABLED_PREFIX")
        if disabled_prefix is not None:
            kwargs["disabled_prefix"] = disabled_prefix

        alt_prefix = env.get(f"{prefix}ALT_DISABLED_PREFIX")
        if alt_prefix is not None:
            kwargs["alt_disabled_prefix"] = alt_prefix

        echo_window = env.get(f"{prefix}ECHO_WINDOW_MS")
        if echo_window is not None:
            try:
                kwargs["echo_window_ms"] = int(echo_window)
            except ValueError:
                raise ConfigError(f"{prefix}ECHO_WINDOW_MS must be an integer: {echo_window!r}")

        return cls(**kwargs)
