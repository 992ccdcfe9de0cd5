import logging
import os
import uuid
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple

from rich.console import Console

from .constants import (
    DEFAULT_APP_ROOT,
    DEFAULT_PHP_MINIMUM_VERSION,
    DEFAULT_REPOSITORY,
    LAYER_NAME,
    REPORT_FILE_NAME,
)
from .errors import BuildpackError
from .models import BuildContext, StepResult
from .services.command_runner import CommandRunner
from .services.composer import ComposerService
from .services.database_url import DotenvService, parse_database_url
from .services.env_dir import EnvDirService
from .services.filesystem import FileSystemService
from .services.materializer import ConfigMaterializer
from .services.output import BuildOutput
from .services.permissions import PermissionService
from .services.php_runtime import PhpRuntimeService
from .services.report import ReportService
from .services.source import SourceService

logger = logging.getLogger("dfbuildpack")

Step = Tuple[str, Optional[str], Callable[[], StepResult]]


class Buildpack:
    """Installs DreamFactory into a build directory.

    The run is a fixed, linear list of steps. Each step returns a ``StepResult``;
    only a fatal result stops the run.
    """

    def __init__(
        self,
        build_dir: str,
        cache_dir: Optional[str] = None,
        env_dir: Optional[str] = None,
        layers_dir: Optional[str] = None,
        repository: str = DEFAULT_REPOSITORY,
        branch: Optional[str] = None,
        clone_depth: Optional[int] = None,
        app_root: str = DEFAULT_APP_ROOT,
        php_minimum_version: str = DEFAULT_PHP_MINIMUM_VERSION,
        verbose: bool = False,
        report_file: Optional[str] = None,
        base_env: Optional[Mapping[str, str]] = None,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ):
        self.build_dir = os.path.abspath(build_dir)
        self.cache_dir = cache_dir
        self.env_dir = env_dir
        self.layers_dir = layers_dir
        self.repository = repository
        self.branch = branch
        self.clone_depth = clone_depth
        self.app_root = app_root.rstrip("/") or "/"
        self.php_minimum_version = php_minimum_version
        self.verbose = verbose
        self.base_env = dict(os.environ if base_env is None else base_env)
        self.context: Optional[BuildContext] = None

        self.output = BuildOutput(
            logger=logger,
            console=console,
            error_console=error_console,
            debug_enabled=verbose,
        )
        self.report_service = ReportService(
            report_file=report_file or self._default_report_file(),
            logger=logger,
            create_dirs=bool(report_file) or not layers_dir,
        )
        self.env_dir_service = EnvDirService(logger=logger)
        self.filesystem_service = FileSystemService(logger=logger)
        self.command_runner = CommandRunner(logger=logger, env=self.base_env)
        self.php_runtime_service = PhpRuntimeService(
            command_runner=self.command_runner,
            filesystem_service=self.filesystem_service,
            logger=logger,
        )
        self.source_service = SourceService(
            command_runner=self.command_runner,
            filesystem_service=self.filesystem_service,
            logger=logger,
        )
        self.composer_service = ComposerService(command_runner=self.command_runner, logger=logger)
        self.permission_service = PermissionService(
            filesystem_service=self.filesystem_service,
            logger=logger,
        )
        self.materializer = ConfigMaterializer(
            filesystem_service=self.filesystem_service,
            logger=logger,
        )
        self.dotenv_service = DotenvService(logger=logger)

    def _default_report_file(self) -> Optional[str]:
        if self.layers_dir:
            return os.path.join(self.layers_dir, LAYER_NAME, REPORT_FILE_NAME)
        if self.cache_dir:
            return os.path.join(self.cache_dir, REPORT_FILE_NAME)
        return None

    def _skip(self, reason: str) -> StepResult:
        self.output.warning(reason)
        return StepResult.skipped(reason)

    def steps(self) -> List[Step]:
        return [
            ("import_environment", None, self.import_environment),
            ("check_php_runtime", "Installing DreamFactory", self.check_php_runtime),
            ("fetch_source", "Cloning DreamFactory repository", self.fetch_source),
            ("patch_composer_manifest", "Updating composer.json", self.patch_composer_manifest),
            ("install_dependencies", "Installing Composer dependencies", self.install_dependencies),
            ("bootstrap_application", "Setting up DreamFactory environment", self.bootstrap_application),
            ("normalize_permissions", "Setting file permissions", self.normalize_permissions),
            ("materialize_config", "Writing NGINX, PHP-FPM and launch configuration", self.materialize_config),
            ("configure_database", None, self.configure_database),
        ]

    def build_context(self) -> BuildContext:
        imported = self.env_dir_service.load(self.env_dir)
        environment = self.env_dir_service.merge(self.base_env, imported)

        database = None
        database_error = None
        try:
            database = parse_database_url(environment.get("DATABASE_URL"))
        except BuildpackError as exc:
            database_error = str(exc)
            self.output.warning(f"{exc}. Skipping DATABASE_URL parsing.")

        debug = self.verbose or environment.get("BUILDPACK_DEBUG", "").strip() == "true"
        return BuildContext(
            build_dir=self.build_dir,
            cache_dir=self.cache_dir,
            env_dir=self.env_dir,
            layers_dir=self.layers_dir,
            app_root=self.app_root,
            repository=self.repository,
            branch=self.branch,
            clone_depth=self.clone_depth,
            php_minimum_version=self.php_minimum_version,
            debug=debug,
            environment=MappingProxyType(environment),
            database=database,
            database_error=database_error,
        )

    def import_environment(self) -> StepResult:
        self.context = self.build_context()
        self.command_runner.env = dict(self.context.environment)
        self.output.debug_enabled = self.context.debug
        self.output.debug(f"Build directory: {self.build_dir}")
        if self.env_dir and not os.path.isdir(self.env_dir):
            return StepResult.skipped(f"env dir {self.env_dir} does not exist")
        return StepResult.success()

    def check_php_runtime(self) -> StepResult:
        self.php_runtime_service.require_php()

        php_version = self.php_runtime_service.get_version()
        if php_version is None:
            self.output.warning("Could not determine the PHP version from `php -v`.")
        elif not self.php_runtime_service.is_supported(php_version, self.context.php_minimum_version):
            self.output.warning(
                f"PHP {php_version} is older than {self.context.php_minimum_version}, "
                "which DreamFactory requires."
            )
        else:
            self.output.info(f"Using PHP {php_version}")
        return StepResult.success()

    def fetch_source(self) -> StepResult:
        self.source_service.fetch(
            repository=self.context.repository,
            build_dir=self.context.build_dir,
            branch=self.context.branch,
            depth=self.context.clone_depth,
        )
        return StepResult.success()

    def patch_composer_manifest(self) -> StepResult:
        result = self.composer_service.patch_manifest(self.context.build_dir)
        if result.reason:
            self.output.warning(result.reason)
        return result

    def install_dependencies(self) -> StepResult:
        result = self.composer_service.install(self.context.build_dir)
        if result.reason:
            self.output.warning(result.reason)
        return result

    def bootstrap_application(self) -> StepResult:
        build_dir = self.context.build_dir

        if os.path.isfile(os.path.join(build_dir, "artisan")):
            for warning in self.php_runtime_service.run_artisan(build_dir):
                self.output.warning(warning)
            try:
                self.php_runtime_service.ensure_sqlite_database(build_dir)
            except OSError as exc:
                return self._skip(f"Could not create the SQLite database file: {exc}")
            self.output.info("Created SQLite database file")
            return StepResult.success()

        result = self._skip("artisan file not found. Skipping DreamFactory environment setup.")
        try:
            if self.php_runtime_service.write_fallback_env(build_dir, self.context.app_root):
                self.php_runtime_service.ensure_sqlite_database(build_dir)
                self.output.info("Wrote a minimal .env with a new APP_KEY")
        except OSError as exc:
            self.output.warning(f"Could not write the fallback .env: {exc}")
        return result

    def normalize_permissions(self) -> StepResult:
        try:
            created = self.permission_service.apply(self.context.build_dir)
        except OSError as exc:
            return self._skip(f"Could not prepare writable directories: {exc}")
        for path in created:
            self.output.warning(f"{path} directory not found. Created it.")
        return StepResult.success()

    def materialize_config(self) -> StepResult:
        written, failures = self.materializer.materialize(self.context)
        for path in written:
            self.output.debug(f"Wrote {path}")
        self.report_service.add_artifacts(written)
        for failure in failures:
            self.output.warning(failure)
        if failures:
            return StepResult.skipped(f"{len(failures)} generated file(s) could not be written")
        return StepResult.success()

    def configure_database(self) -> StepResult:
        if self.context.db_connection != "pgsql":
            return StepResult.skipped("DB_CONNECTION is not pgsql")

        self.output.status("Configuring PostgreSQL connection")
        if self.context.database_error:
            return StepResult.skipped(f"DATABASE_URL is invalid: {self.context.database_error}")
        if self.context.database is None:
            return StepResult.skipped("DATABASE_URL is not a postgres:// URL")

        try:
            self.dotenv_service.update(
                os.path.join(self.context.build_dir, ".env"),
                self.context.database.as_env(),
            )
        except OSError as exc:
            return self._skip(f"Could not update .env: {exc}")
        self.output.info(
            f"Database {self.context.database.database} on "
            f"{self.context.database.host}:{self.context.database.port}"
        )
        return StepResult.success()

    def _run_step(self, name: str, title: Optional[str], callback: Callable[[], StepResult]) -> StepResult:
        if title:
            self.output.status(title)
        self.report_service.step_started(name)

        try:
            result = callback()
        except BuildpackError as exc:
            result = StepResult.fatal(str(exc))
        except Exception as exc:
            self.report_service.step_finished(name, "failed", reason=str(exc))
            raise

        self.report_service.step_finished(name, result.status.value, reason=result.reason)
        self.output.debug(f"{name}: {result.status.value}")
        return result

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None
        self.report_service.start_run(
            run_id=uuid.uuid4().hex[:10],
            metadata={
                "build_dir": self.build_dir,
                "repository": self.repository,
                "branch": self.branch,
                "interface": "cnb" if self.layers_dir else "legacy",
            },
        )

        try:
            for name, title, callback in self.steps():
                result = self._run_step(name, title, callback)
                if result.is_fatal:
                    self.output.error(result.reason)
                    report_error = result.reason
                    return exit_code

            self.output.status("DreamFactory installation complete")
            report_status = "success"
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            self.output.error("Build cancelled.")
            report_status = "aborted"
            report_error = "Build cancelled."
            return exit_code
        except Exception as exc:
            logger.exception("Unexpected error")
            self.output.error(f"Unexpected error: {exc}")
            report_error = str(exc)
            return exit_code
        finally:
            self.report_service.finalize(report_status, error=report_error)
