"""Tests for the folder deleter."""

import pytest

from modfolders.deletion import FolderDeleter


class TestFolderDeleter:
    """Tests for FolderDeleter class."""

    def test_permanent_delete(self, tmp_path):
        folder = tmp_path / "Alice"
        (folder / "textures").mkdir(parents=True)
        (folder / "merged.ini").write_text("[Constants]")

        FolderDeleter().delete(folder, move_to_recycle_bin=False)

        assert not folder.exists()

    def test_recycle_uses_send2trash(self, tmp_path, monkeypatch):
        folder = tmp_path / "Alice"
        folder.mkdir()
        trashed = []
        monkeypatch.setattr("send2trash.send2trash", trashed.append)

        FolderDeleter().delete(folder)

        assert trashed == [str(folder)]

    def test_missing_folder_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FolderDeleter().delete(tmp_path / "Ghost", move_to_recycle_bin=False)

    def test_recycle_error_propagates(self, tmp_path, monkeypatch):
        folder = tmp_path / "Alice"
        folder.mkdir()

        def refuse(path):
            raise OSError("trash unavailable")

        monkeypatch.setattr("send2trash.send2trash", refuse)

        with pytest.raises(OSError, match="trash unavailable"):
            FolderDeleter().delete(folder)
        assert folder.exists()
