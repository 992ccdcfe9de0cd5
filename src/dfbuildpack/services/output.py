"""Build transcript printed in the buildpack output conventions."""

import logging
from typing import Optional

from rich.console import Console

STATUS_PREFIX = "-----> "
INDENT = "       "
ERROR_PREFIX = " !     "


class BuildOutput:
    """Prints ``----->`` status lines and mirrors them to the diagnostic logger."""

    def __init__(
        self,
        logger: logging.Logger,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
        debug_enabled: bool = False,
    ):
        self.logger = logger
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.error_console = error_console or Console(stderr=True, highlight=False, soft_wrap=True)
        self.debug_enabled = debug_enabled

    def _print(self, console: Console, line: str, style: Optional[str] = None):
        console.print(line, style=style, markup=False, highlight=False, soft_wrap=True)

    def status(self, message: str):
        self._print(self.console, f"{STATUS_PREFIX}{message}", style="bold")
        self.logger.debug("status: %s", message)

    def info(self, message: str):
        self._print(self.console, f"{INDENT}{message}")
        self.logger.debug("info: %s", message)

    def warning(self, message: str):
        self._print(self.console, f"{INDENT}Warning: {message}", style="yellow")
        self.logger.debug("warning: %s", message)

    def debug(self, message: str):
        if self.debug_enabled:
            self._print(self.console, f"{INDENT}[DEBUG] {message}", style="dim")
        self.logger.debug("debug: %s", message)

    def error(self, message: str):
        self._print(self.error_console, f"{ERROR_PREFIX}{message}", style="bold red")
        self.logger.debug("error: %s", message)
