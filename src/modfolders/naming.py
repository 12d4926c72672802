"""
Folder name codec for the enabled/disabled naming convention.

A mod folder is disabled iff its name starts with the primary marker or
the legacy marker, compared case-insensitively. The legacy marker has no
delimiter, so a folder like ``DISABLEDCarol`` counts as disabled.
"""

from typing import Tuple

DEFAULT_DISABLED_PREFIX = "DISABLED_"
DEFAULT_ALT_DISABLED_PREFIX = "DISABLED"


def _starts_with(name: str, prefix: str) -> bool:
    return name[:len(prefix)].lower() == prefix.lower()


class DisabledPrefixCodec:
    """
    Pure functions mapping a folder name to and from its disabled form.

    The primary marker is checked before the legacy one, so a name that
    matches both loses the longer marker.
    """

    def __init__(
        self,
        disabled_prefix: str = DEFAULT_DISABLED_PREFIX,
        alt_disabled_prefix: str = DEFAULT_ALT_DISABLED_PREFIX,
    ):
        if not disabled_prefix or not alt_disabled_prefix:
            raise ValueError("disabled markers must not be empty")
        self.disabled_prefix = disabled_prefix
        self.alt_disabled_prefix = alt_disabled_prefix

    @property
    def markers(self) -> Tuple[str, str]:
        return self.disabled_prefix, self.alt_disabled_prefix

    def _matching_marker(self, name: str):
        for marker in self.markers:
            if _starts_with(name, marker):
                return marker
        return None

    def is_disabled_name(self, name: str) -> bool:
        """Return True if the folder name carries either disabled marker."""
        return self._matching_marker(name) is not None

    def strip_disabled_marker(self, name: str) -> str:
        """
        Remove the leading disabled marker from a folder name.

        Stacked markers are all removed, so the result is never a disabled
        name and stripping twice is the same as stripping once.

        Args:
            name: Folder name, with or without a marker

        Returns:
            The enabled form of the folder name
        """
        marker = self._matching_marker(name)
        while marker is not None:
            name = name[len(marker):]
            marker = self._matching_marker(name)
        return name

    def apply_disabled_marker(self, name: str) -> str:
        """
        Return the disabled form of a folder name.

        Names already carrying the primary marker are returned unchanged;
        the legacy marker is normalized to the primary one.

        Args:
            name: Folder name, with or without a marker

        Returns:
            The disabled form of the folder name
        """
        if _starts_with(name, self.disabled_prefix):
            return name
        if _starts_with(name, self.alt_disabled_prefix):
            return self.disabled_prefix + name[len(self.alt_disabled_prefix):]
        return self.disabled_prefix + name

    def __repr__(self) -> str:
        return f"DisabledPrefixCodec({self.disabled_prefix!r}, {self.alt_disabled_prefix!r})"


default_codec = DisabledPrefixCodec()


def is_disabled_name(name: str) -> bool:
    """Check a folder name against the default markers."""
    return default_codec.is_disabled_name(name)


def strip_disabled_marker(name: str) -> str:
    """Strip the default markers from a folder name."""
    return default_codec.strip_disabled_marker(name)


def apply_disabled_marker(name: str) -> str:
    """Apply the default primary marker to a folder name."""
    return default_codec.apply_disabled_marker(name)
