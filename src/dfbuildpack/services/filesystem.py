"""Filesystem helpers for dfbuildpack."""

import logging
import os
import shutil
import sys
import tempfile
from typing import Optional


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def set_tree_permissions(self, root: str, mode: int):
        """Apply one mode to ``root`` and everything below it, like ``chmod -R``."""
        if sys.platform == "win32" or not os.path.exists(root):
            return

        self.set_permissions(root, mode)
        for current_root, dirs, files in os.walk(root):
            for name in dirs + files:
                path = os.path.join(current_root, name)
                if not os.path.islink(path):
                    self.set_permissions(path, mode)

    def write_file(self, path: str, content: str, mode: Optional[int] = None):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
            file_obj.write(content)
        if mode is not None:
            self.set_permissions(path, mode)
        self.logger.debug("Wrote %s", path)

    def touch(self, path: str):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "a", encoding="utf-8"):
            pass

    def copy_tree(self, source_dir: str, destination_dir: str):
        """Merge ``source_dir`` into ``destination_dir``, dotfiles included."""
        os.makedirs(destination_dir, exist_ok=True)
        for name in os.listdir(source_dir):
            source = os.path.join(source_dir, name)
            destination = os.path.join(destination_dir, name)
            if os.path.isdir(source) and not os.path.islink(source):
                shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(source, destination, follow_symlinks=False)

    def snapshot(self, path: str) -> Optional[str]:
        """Copy ``path`` to a temporary file and return its location, if it exists."""
        if not os.path.isfile(path):
            return None

        fd, backup_path = tempfile.mkstemp(prefix="dfbuildpack-", suffix=os.path.basename(path))
        os.close(fd)
        shutil.copy2(path, backup_path)
        self.logger.debug("Saved %s to %s", path, backup_path)
        return backup_path

    def restore(self, backup_path: Optional[str], path: str):
        if not backup_path:
            return

        shutil.copy2(backup_path, path)
        os.remove(backup_path)
        self.logger.debug("Restored %s", path)
