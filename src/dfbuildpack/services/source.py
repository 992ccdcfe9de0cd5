"""Upstream application checkout."""

import os
import tempfile
from typing import List, Optional

from dfbuildpack.errors import BuildpackError
from dfbuildpack.errors_catalog import actionable_error
from dfbuildpack.services.command_runner import CommandRunner
from dfbuildpack.services.filesystem import FileSystemService


class SourceService:
    """Clones the application and merges it into the build directory.

    A ``.env`` already present in the build directory survives the merge: it is
    copied aside before the clone is copied over and put back afterwards.
    """

    PRESERVED_FILES = (".env",)

    def __init__(self, command_runner: CommandRunner, filesystem_service: FileSystemService, logger):
        self.command_runner = command_runner
        self.filesystem = filesystem_service
        self.logger = logger

    def build_clone_cmd(
        self,
        repository: str,
        destination: str,
        branch: Optional[str] = None,
        depth: Optional[int] = None,
    ) -> List[str]:
        cmd = ["git", "clone"]
        if branch:
            cmd += ["--branch", branch]
        if depth:
            cmd += ["--depth", str(depth)]
        return cmd + [repository, destination]

    def fetch(
        self,
        repository: str,
        build_dir: str,
        branch: Optional[str] = None,
        depth: Optional[int] = None,
    ):
        if not self.command_runner.which("git"):
            raise BuildpackError(actionable_error("git_not_found"))

        backups = {
            name: self.filesystem.snapshot(os.path.join(build_dir, name))
            for name in self.PRESERVED_FILES
        }

        try:
            with tempfile.TemporaryDirectory(prefix="dfbuildpack-clone-") as tmp_dir:
                checkout = os.path.join(tmp_dir, "src")
                try:
                    self.command_runner.run(
                        self.build_clone_cmd(repository, checkout, branch=branch, depth=depth),
                        capture_output=True,
                    )
                except BuildpackError as exc:
                    raise BuildpackError(
                        actionable_error("clone_failed", repository=repository, reason=str(exc))
                    ) from exc

                self.filesystem.copy_tree(checkout, build_dir)
        finally:
            for name, backup_path in backups.items():
                self.filesystem.restore(backup_path, os.path.join(build_dir, name))
