"""Physical removal of mod folders."""

import logging
import shutil
from pathlib import Path

import send2trash

logger = logging.getLogger(__name__)


class FolderDeleter:
    """Deletes a folder permanently or by moving it to the recycle bin."""

    def delete(self, path: Path, move_to_recycle_bin: bool = True) -> None:
        """
        Remove a folder from disk.

        Args:
            path: Folder to remove
            move_to_recycle_bin: Send to the platform trash instead of deleting

        Raises:
            FileNotFoundError: If the folder does not exist
            OSError: If the folder cannot be removed
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Folder does not exist: {path}")

        if move_to_recycle_bin:
            send2trash.send2trash(str(path))
        else:
            shutil.rmtree(path)
        logger.debug(f"{'Recycled' if move_to_recycle_bin else 'Deleted'} folder {path}")
