"""Fixed values shared across dfbuildpack services."""

DEFAULT_REPOSITORY = "https://github.com/dreamfactorysoftware/dreamfactory.git"
DEFAULT_APP_ROOT = "/app"
DEFAULT_PHP_MINIMUM_VERSION = "8.0"
CONFIG_FILE_NAME = ".dfbuildpack.yml"
REPORT_FILE_NAME = "build-report.json"
LAYER_NAME = "dreamfactory"

ENV_DENY_LIST = frozenset(
    {"PATH", "GIT_DIR", "CPATH", "CPPATH", "LD_PRELOAD", "LIBRARY_PATH", "LANG"}
)

POSTGRES_SCHEME = "postgres"
POSTGRES_DEFAULT_PORT = 5432

REQUIRED_PHP_EXTENSIONS = ("ext-mbstring", "ext-pdo_sqlite")

DIR_MODE = 0o755
FILE_MODE = 0o644
SCRIPT_MODE = 0o755

SQLITE_DATABASE = "storage/databases/database.sqlite"
