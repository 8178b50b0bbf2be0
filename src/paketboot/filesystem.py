"""
Filesystem access used by the download strategies.

Strategies reach the disk only through a FileSystemProxy so tests can
observe or replace every operation.
"""

import os
import shutil
from datetime import datetime, timezone
from typing import List


class FileSystemProxy:
    """Thin wrapper over the file operations the bootstrapper needs."""

    def file_exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def get_directories(self, path: str) -> List[str]:
        """
        List the immediate subdirectories of `path`.

        Returns:
            List[str]: Full paths of the subdirectories, in directory listing order.
        """
        with os.scandir(path) as entries:
            return [entry.path for entry in entries if entry.is_dir()]

    def create_directory(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def copy_file(self, source: str, destination: str, overwrite: bool = False) -> None:
        """
        Copy `source` to `destination`.

        Raises:
            FileExistsError: If `destination` exists and `overwrite` is False.
            OSError: For any other filesystem failure.
        """
        if not overwrite and os.path.exists(destination):
            raise FileExistsError(f"Destination already exists: {destination}")
        shutil.copyfile(source, destination)

    def delete_file(self, path: str) -> None:
        os.remove(path)

    def get_last_write_time(self, path: str) -> datetime:
        """Return the file's modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(os.path.getmtime(path), timezone.utc)

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write_text(self, path: str, content: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
