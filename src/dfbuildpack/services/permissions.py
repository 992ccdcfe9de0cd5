"""Writable directory policy for the Laravel storage tree."""

import os
from typing import List

from dfbuildpack.constants import DIR_MODE
from dfbuildpack.models import PermissionPolicy, PermissionRule
from dfbuildpack.services.filesystem import FileSystemService

DEFAULT_POLICY: PermissionPolicy = (
    PermissionRule(
        "storage",
        DIR_MODE,
        create=("logs", "app", "framework/cache", "framework/sessions", "framework/views"),
    ),
    PermissionRule("bootstrap/cache", DIR_MODE),
)


class PermissionService:
    def __init__(self, filesystem_service: FileSystemService, logger):
        self.filesystem = filesystem_service
        self.logger = logger

    def apply(self, build_dir: str, policy: PermissionPolicy = DEFAULT_POLICY) -> List[str]:
        """Create missing directories and chmod them recursively.

        Returns the relative paths that had to be created.
        """
        created = []
        for rule in policy:
            root = os.path.join(build_dir, rule.path)
            if not os.path.isdir(root):
                created.append(rule.path)
                os.makedirs(root, exist_ok=True)
                for child in rule.create:
                    os.makedirs(os.path.join(root, child), exist_ok=True)
            self.filesystem.set_tree_permissions(root, rule.mode)
        return created
