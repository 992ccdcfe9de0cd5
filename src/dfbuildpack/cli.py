import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler

from .constants import (
    CONFIG_FILE_NAME,
    DEFAULT_APP_ROOT,
    DEFAULT_PHP_MINIMUM_VERSION,
    DEFAULT_REPOSITORY,
)
from .core import Buildpack, BuildpackError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_level=False,
            show_path=False,
        )
    ],
)


def _configure_logging(verbose: bool, log_file):
    logger = logging.getLogger("dfbuildpack")
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)


def _run(build_dir, options, **locations):
    try:
        config_path = options["config"]
        required = config_path is not None
        if config_path is None:
            config_path = os.path.join(build_dir, CONFIG_FILE_NAME)
        config_values = ConfigLoader().load(config_path, required=required)
    except BuildpackError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(options["verbose"], config_values, "verbose", default=False))
    log_file = _resolve_option(options["log_file"], config_values, "log_file")
    _configure_logging(verbose, log_file)

    buildpack = Buildpack(
        build_dir=build_dir,
        repository=_resolve_option(
            options["repository"], config_values, "repository", default=DEFAULT_REPOSITORY
        ),
        branch=_resolve_option(options["branch"], config_values, "branch"),
        clone_depth=_resolve_option(None, config_values, "clone_depth"),
        app_root=_resolve_option(None, config_values, "app_root", default=DEFAULT_APP_ROOT),
        php_minimum_version=str(
            _resolve_option(
                None,
                config_values,
                "php_minimum_version",
                default=DEFAULT_PHP_MINIMUM_VERSION,
            )
        ),
        verbose=verbose,
        **locations,
    )
    raise SystemExit(buildpack.run())


def common_options(func):
    func = click.option(
        "--config",
        required=False,
        type=click.Path(),
        help=f"Path to a YAML configuration file. Defaults to {CONFIG_FILE_NAME} in the build directory.",
    )(func)
    func = click.option("--repository", required=False, help="Git URL of the DreamFactory repository.")(func)
    func = click.option("--branch", required=False, help="Branch or tag to clone.")(func)
    func = click.option("--verbose", is_flag=True, default=None, help="Enable debug output")(func)
    func = click.option("--log-file", type=click.Path(), help="Path to log file")(func)
    return func


@click.group()
def main():
    """DreamFactory buildpack for Heroku and Cloud Native Buildpacks."""


@main.command("compile")
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("cache_dir", type=click.Path(file_okay=False))
@click.argument("env_dir", type=click.Path(file_okay=False))
@common_options
def compile_command(build_dir, cache_dir, env_dir, **options):
    """Legacy Heroku interface: compile BUILD_DIR CACHE_DIR ENV_DIR."""
    _run(build_dir, options, cache_dir=cache_dir, env_dir=env_dir)


@main.command("build")
@click.argument("layers_dir", type=click.Path(file_okay=False))
@click.argument("platform_dir", type=click.Path(file_okay=False))
@click.argument("build_plan", type=click.Path(dir_okay=False), required=False)
@common_options
def build_command(layers_dir, platform_dir, build_plan, **options):
    """Cloud Native Buildpack interface: build LAYERS_DIR PLATFORM_DIR BUILD_PLAN.

    The application is built in the current working directory.
    """
    _run(
        os.getcwd(),
        options,
        layers_dir=layers_dir,
        env_dir=os.path.join(platform_dir, "env"),
    )


if __name__ == "__main__":
    main()
