"""Shared domain models for dfbuildpack."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection fields derived from a ``postgres://`` connection URL."""

    host: str
    port: int
    database: str
    username: str
    password: str
    connection: str = "pgsql"

    def as_env(self) -> Dict[str, str]:
        return {
            "DB_CONNECTION": self.connection,
            "DB_HOST": self.host,
            "DB_PORT": str(self.port),
            "DB_DATABASE": self.database,
            "DB_USERNAME": self.username,
            "DB_PASSWORD": self.password,
        }


@dataclass(frozen=True)
class BuildContext:
    """Everything a build step may read, resolved once at startup."""

    build_dir: str
    cache_dir: Optional[str]
    env_dir: Optional[str]
    layers_dir: Optional[str] = None
    app_root: str = "/app"
    repository: str = ""
    branch: Optional[str] = None
    clone_depth: Optional[int] = None
    php_minimum_version: str = "8.0"
    debug: bool = False
    environment: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    database: Optional[DatabaseSettings] = None
    database_error: Optional[str] = None

    @property
    def db_connection(self) -> Optional[str]:
        value = self.environment.get("DB_CONNECTION")
        return value.strip() if value is not None else None


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "StepResult":
        return cls(StepStatus.SUCCESS)

    @classmethod
    def skipped(cls, reason: str) -> "StepResult":
        return cls(StepStatus.SKIPPED, reason)

    @classmethod
    def fatal(cls, reason: str) -> "StepResult":
        return cls(StepStatus.FATAL, reason)

    @property
    def is_fatal(self) -> bool:
        return self.status is StepStatus.FATAL


@dataclass(frozen=True)
class GeneratedFile:
    path: str
    content: str
    mode: int = 0o644


@dataclass(frozen=True)
class PermissionRule:
    """Recursive mode for a directory, with the subdirectories to create when it is missing."""

    path: str
    mode: int
    create: Tuple[str, ...] = ()


PermissionPolicy = Tuple[PermissionRule, ...]
