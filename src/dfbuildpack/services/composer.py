"""composer.json patching and dependency installation."""

import json
import os
from typing import Any, Dict

from dfbuildpack.constants import REQUIRED_PHP_EXTENSIONS
from dfbuildpack.errors import BuildpackError
from dfbuildpack.models import StepResult
from dfbuildpack.services.command_runner import CommandRunner

INSTALL_CMD = ["composer", "install", "--no-dev", "--ignore-platform-reqs", "--no-interaction"]


class ComposerService:
    """Forces the PHP extensions DreamFactory needs into ``composer.json``."""

    def __init__(self, command_runner: CommandRunner, logger):
        self.command_runner = command_runner
        self.logger = logger

    def default_manifest(self) -> Dict[str, Any]:
        require = {"php": "^8.0"}
        require.update({extension: "*" for extension in REQUIRED_PHP_EXTENSIONS})
        return {"require": require}

    def merge(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(manifest)
        require = merged.get("require")
        require = dict(require) if isinstance(require, dict) else {}
        for extension in REQUIRED_PHP_EXTENSIONS:
            require[extension] = "*"
        merged["require"] = require
        return merged

    def patch_manifest(self, build_dir: str) -> StepResult:
        path = os.path.join(build_dir, "composer.json")

        if not os.path.exists(path):
            manifest = self.default_manifest()
        else:
            try:
                with open(path, "r", encoding="utf-8") as file_obj:
                    existing = json.load(file_obj)
            except (OSError, ValueError) as exc:
                return StepResult.skipped(f"could not read composer.json, skipping update: {exc}")
            if not isinstance(existing, dict):
                return StepResult.skipped("composer.json is not a JSON object, skipping update")
            manifest = self.merge(existing)

        with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
            json.dump(manifest, file_obj, indent=4, ensure_ascii=False)
            file_obj.write("\n")
        return StepResult.success()

    def install(self, build_dir: str) -> StepResult:
        if not self.command_runner.which("composer"):
            return StepResult.skipped("composer not found, skipping dependency installation")

        try:
            self.command_runner.run(INSTALL_CMD, cwd=build_dir)
        except BuildpackError as exc:
            return StepResult.skipped(f"composer install failed: {exc}")
        return StepResult.success()
