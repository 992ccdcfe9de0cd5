"""Subprocess execution service for dfbuildpack."""

import shutil
import subprocess
from typing import List, Mapping, Optional

from dfbuildpack.errors import BuildpackError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, env: Optional[Mapping[str, str]] = None):
        self.logger = logger
        self.env = dict(env) if env is not None else None

    def which(self, command: str) -> Optional[str]:
        path = self.env.get("PATH") if self.env else None
        return shutil.which(command, path=path)

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                cwd=cwd,
                env=self.env,
            )
        except FileNotFoundError as exc:
            raise BuildpackError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except OSError as exc:
            raise BuildpackError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise BuildpackError(message)

        self.logger.warning(message)
        return result
