"""Tests for config module."""

import pytest
from pathlib import Path

from modfolders.config import ModListConfig
from modfolders.exceptions import ConfigError
from modfolders.naming import DisabledPrefixCodec


class TestModListConfig:
    """Tests for ModListConfig class."""

    def test_default_values(self):
        config = ModListConfig()
        assert config.disabled_prefix == "DISABLED_"
        assert config.alt_disabled_prefix == "DISABLED"
        assert config.echo_window_ms == 1000
        assert config.observer_join_timeout == 5.0
        assert config.directories_only is True

    def test_custom_values(self):
        config = ModListConfig(
            disabled_prefix="OFF_",
            alt_disabled_prefix="OFF",
            echo_window_ms=250,
        )
        assert config.disabled_prefix == "OFF_"
        assert config.alt_disabled_prefix == "OFF"
        assert config.echo_window_ms == 250

    def test_empty_prefix_raises(self):
        with pytest.raises(ConfigError, match="disabled_prefix"):
            ModListConfig(disabled_prefix="")

    def test_empty_alt_prefix_raises(self):
        with pytest.raises(ConfigError, match="alt_disabled_prefix"):
            ModListConfig(alt_disabled_prefix="")

    def test_non_positive_echo_window_raises(self):
        with pytest.raises(ConfigError, match="echo_window_ms"):
            ModListConfig(echo_window_ms=0)

    def test_codec_uses_configured_markers(self):
        codec = ModListConfig(disabled_prefix="OFF_", alt_disabled_prefix="OFF").codec()
        assert isinstance(codec, DisabledPrefixCodec)
        assert codec.apply_disabled_marker("Alice") == "OFF_Alice"


class TestShouldIgnore:
    """Tests for ModListConfig.should_ignore."""

    def test_should_ignore_hidden_folders(self):
        config = ModListConfig()
        assert config.should_ignore(Path("/mods/.git")) is True
        assert config.should_ignore(Path("/mods/.thumbnails")) is True

    def test_should_ignore_os_files(self):
        config = ModListConfig()
        assert config.should_ignore(Path("/mods/Thumbs.db")) is True
        assert config.should_ignore(Path("/mods/.DS_Store")) is True

    def test_should_ignore_tmp(self):
        config = ModListConfig()
        assert config.should_ignore(Path("/mods/extract.tmp")) is True
        assert config.should_ignore(Path("/mods/__pycache__")) is True

    def test_should_not_ignore_mod_folders(self):
        config = ModListConfig()
        assert config.should_ignore(Path("/mods/Alice")) is False
        assert config.should_ignore(Path("/mods/DISABLED_Alice")) is False

    def test_empty_ignore_patterns(self):
        config = ModListConfig(ignore_patterns=[])
        assert config.should_ignore(Path("/mods/.git")) is False


class TestFromEnv:
    """Tests for ModListConfig.from_env."""

    def test_defaults_when_unset(self):
        config = ModListConfig.from_env(environ={})
        assert config.disabled_prefix == "DISABLED_"
        assert config.echo_window_ms == 1000

    def test_reads_variables(self):
        config = ModListConfig.from_env(environ={
            "MODFOLDERS_DISABLED_PREFIX": "OFF_",
            "MODFOLDERS_ALT_DISABLED_PREFIX": "OFF",
            "MODFOLDERS_ECHO_WINDOW_MS": "300",
        })
        assert config.disabled_prefix == "OFF_"
        assert config.alt_disabled_prefix == "OFF"
        assert config.echo_window_ms == 300

    def test_custom_prefix(self):
        config = ModListConfig.from_env(prefix="GIMI_", environ={"GIMI_DISABLED_PREFIX": "X_"})
        assert config.disabled_prefix == "X_"

    def test_invalid_integer_raises(self):
        with pytest.raises(ConfigError, match="ECHO_WINDOW_MS"):
            ModListConfig.from_env(environ={"MODFOLDERS_ECHO_WINDOW_MS": "soon"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("MODFOLDERS_DISABLED_PREFIX", "HIDDEN_")
        assert ModListConfig.from_env().disabled_prefix == "HIDDEN_"
