"""Env-dir import: one file per environment variable."""

import os
import re
from typing import Dict, Mapping, Optional

from dfbuildpack.constants import ENV_DENY_LIST

_VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EnvDirService:
    """Reads platform-provided variables without touching ``os.environ``."""

    def __init__(self, logger, deny_list=ENV_DENY_LIST):
        self.logger = logger
        self.deny_list = frozenset(deny_list)

    def load(self, env_dir: Optional[str]) -> Dict[str, str]:
        if not env_dir or not os.path.isdir(env_dir):
            return {}

        imported: Dict[str, str] = {}
        for name in sorted(os.listdir(env_dir)):
            path = os.path.join(env_dir, name)
            if not os.path.isfile(path):
                continue
            if name in self.deny_list:
                self.logger.debug("Ignoring denied env-dir entry: %s", name)
                continue
            if not _VARIABLE_NAME.match(name):
                self.logger.debug("Ignoring env-dir entry with invalid name: %s", name)
                continue

            with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as file_obj:
                imported[name] = file_obj.read()

        return imported

    @staticmethod
    def merge(base: Mapping[str, str], imported: Mapping[str, str]) -> Dict[str, str]:
        merged = dict(base)
        merged.update(imported)
        return merged
