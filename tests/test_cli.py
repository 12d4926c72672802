"""Tests for the command line interface."""

import pytest

from modfolders import cli
from modfolders.models import SkinMod


@pytest.fixture
def folder(tmp_path):
    folder = tmp_path / "Keqing"
    (folder / "Alice").mkdir(parents=True)
    (folder / "DISABLED_Bob").mkdir()
    return folder


class TestCli:
    """Tests for cli.main."""

    def test_list(self, folder, capsys):
        cli.main(["--character", "Keqing", "list", str(folder)])

        out = capsys.readouterr().out
        assert "Keqing (2 mods)" in out
        assert "[enabled ] Alice  (Alice)" in out
        assert "[disabled] Bob  (DISABLED_Bob)" in out

    def test_disable(self, folder):
        cli.main(["disable", str(folder), "Alice"])

        assert (folder / "DISABLED_Alice").is_dir()
        assert not (folder / "Alice").exists()

    def test_enable_by_enabled_name(self, folder):
        cli.main(["enable", str(folder), "Bob"])

        assert (folder / "Bob").is_dir()

    def test_enable_enabled_mod_exits(self, folder):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["enable", str(folder), "Alice"])

        assert exc_info.value.code == 1
        assert (folder / "Alice").is_dir()

    def test_unknown_mod_exits(self, folder):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["disable", str(folder), "Nobody"])
        assert exc_info.value.code == 1

    def test_missing_folder_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["list", str(tmp_path / "missing")])
        assert exc_info.value.code == 1

    def test_filesystem_error_exits(self, folder, monkeypatch, caplog):
        def refuse(self, new_name):
            raise PermissionError("access denied")

        monkeypatch.setattr(SkinMod, "rename", refuse)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["disable", str(folder), "Alice"])

        assert exc_info.value.code == 1
        assert "access denied" in caplog.text
        assert (folder / "Alice").is_dir()

    def test_permanent_delete(self, folder):
        cli.main(["delete", str(folder), "Alice", "--permanent"])

        assert not (folder / "Alice").exists()
        assert (folder / "DISABLED_Bob").is_dir()

    def test_env_prefix(self, folder, monkeypatch):
        monkeypatch.setenv("MODFOLDERS_DISABLED_PREFIX", "OFF_")
        monkeypatch.setenv("MODFOLDERS_ALT_DISABLED_PREFIX", "OFF")

        cli.main(["disable", str(folder), "Alice"])

        assert (folder / "OFF_Alice").is_dir()

    def test_watch_parser(self):
        args = cli.build_parser().parse_args(["watch", "/mods/Keqing", "--interval", "0.5"])
        assert args.func is cli.cmd_watch
        assert args.interval == 0.5
