"""Configuration loader for dfbuildpack."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dfbuildpack.errors import BuildpackError


class ConfigLoader:
    """Loads the optional YAML file that overrides buildpack defaults."""

    SUPPORTED_KEYS = {
        "repository",
        "branch",
        "clone_depth",
        "app_root",
        "php_minimum_version",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str], required: bool = True) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            if not required:
                return {}
            raise BuildpackError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise BuildpackError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise BuildpackError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise BuildpackError(f"Unknown configuration keys: {unknown_list}")

        depth = parsed.get("clone_depth")
        if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth < 1):
            raise BuildpackError("clone_depth must be a positive integer.")

        verbose = parsed.get("verbose")
        if verbose is not None and not isinstance(verbose, bool):
            raise BuildpackError("verbose must be true or false.")

        return parsed
