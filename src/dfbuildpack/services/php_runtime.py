"""PHP runtime detection and Laravel environment bootstrap."""

import base64
import os
import re
import secrets
from typing import List, Optional

from packaging import version

from dfbuildpack.constants import SQLITE_DATABASE
from dfbuildpack.errors import BuildpackError
from dfbuildpack.errors_catalog import actionable_error
from dfbuildpack.services.command_runner import CommandRunner
from dfbuildpack.services.filesystem import FileSystemService
from dfbuildpack.templates import render

_PHP_VERSION = re.compile(r"PHP\s+(\d+\.\d+(?:\.\d+)?)")

ARTISAN_COMMANDS = (
    ["artisan", "df:env", "--db_connection=sqlite", "--df_install=Heroku"],
    ["artisan", "key:generate", "--force"],
)


class PhpRuntimeService:
    """Wraps the ``php`` binary provided by an earlier buildpack."""

    def __init__(self, command_runner: CommandRunner, filesystem_service: FileSystemService, logger):
        self.command_runner = command_runner
        self.filesystem = filesystem_service
        self.logger = logger

    def require_php(self) -> str:
        php_path = self.command_runner.which("php")
        if not php_path:
            raise BuildpackError(actionable_error("php_not_found"))
        return php_path

    def get_version(self) -> Optional[str]:
        result = self.command_runner.run(["php", "-v"], check=False, capture_output=True)
        match = _PHP_VERSION.search(result.stdout or "")
        return match.group(1) if match else None

    def is_supported(self, php_version: str, minimum: str) -> bool:
        try:
            return version.parse(php_version) >= version.parse(minimum)
        except version.InvalidVersion:
            return False

    def run_artisan(self, build_dir: str) -> List[str]:
        """Run the DreamFactory setup commands; returns one warning per failed command."""
        warnings = []
        for args in ARTISAN_COMMANDS:
            try:
                self.command_runner.run(["php", os.path.join(build_dir, args[0])] + args[1:], cwd=build_dir)
            except BuildpackError as exc:
                warnings.append(f"{args[1]} command failed, continuing with setup: {exc}")
        return warnings

    @staticmethod
    def generate_app_key() -> str:
        return base64.b64encode(secrets.token_bytes(32)).decode("ascii")

    def write_fallback_env(self, build_dir: str, app_root: str) -> bool:
        env_path = os.path.join(build_dir, ".env")
        if os.path.exists(env_path):
            return False

        content = render(
            ".env",
            app_root=app_root,
            sqlite_database=SQLITE_DATABASE,
            app_key=self.generate_app_key(),
        )
        self.filesystem.write_file(env_path, content)
        return True

    def ensure_sqlite_database(self, build_dir: str) -> str:
        path = os.path.join(build_dir, SQLITE_DATABASE)
        self.filesystem.touch(path)
        return path
