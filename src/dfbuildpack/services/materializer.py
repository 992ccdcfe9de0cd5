"""Generation of the static configuration file catalog."""

import os
from typing import List, Tuple

from dfbuildpack.constants import (
    FILE_MODE,
    LAYER_NAME,
    POSTGRES_DEFAULT_PORT,
    SCRIPT_MODE,
    SQLITE_DATABASE,
)
from dfbuildpack.models import BuildContext, GeneratedFile
from dfbuildpack.services.filesystem import FileSystemService
from dfbuildpack.templates import render

FPM_LISTEN = "127.0.0.1:9000"
FPM_POOL_SIZES = {
    "max_children": 5,
    "start_servers": 2,
    "min_spare_servers": 1,
    "max_spare_servers": 3,
}


class ConfigMaterializer:
    """Renders NGINX, PHP-FPM and launch files from the template catalog.

    Output depends only on the build context, so two runs over the same context
    produce identical files. ``nginx.conf`` keeps the ``$PORT`` token; the
    generated ``start.sh`` replaces it when the container starts.
    """

    def __init__(self, filesystem_service: FileSystemService, logger):
        self.filesystem = filesystem_service
        self.logger = logger

    def build_catalog(self, context: BuildContext) -> List[GeneratedFile]:
        app_root = context.app_root
        storage_bootstrap = render(
            "storage-bootstrap",
            app_root=app_root,
            sqlite_database=SQLITE_DATABASE,
        )

        return [
            GeneratedFile("config/database.php", render("database.php"), FILE_MODE),
            GeneratedFile("nginx/mime.types", render("mime.types"), FILE_MODE),
            GeneratedFile("nginx/fastcgi_params", render("fastcgi_params"), FILE_MODE),
            GeneratedFile(
                "nginx/nginx.conf",
                render("nginx.conf", app_root=app_root, fpm_listen=FPM_LISTEN),
                FILE_MODE,
            ),
            GeneratedFile(
                ".heroku/php/etc/php-fpm.conf",
                render("php-fpm.conf", app_root=app_root),
                FILE_MODE,
            ),
            GeneratedFile(
                ".heroku/php/etc/php-fpm.d/www.conf",
                render("www.conf", fpm_listen=FPM_LISTEN, **FPM_POOL_SIZES),
                FILE_MODE,
            ),
            GeneratedFile(
                ".heroku/php/etc/php/pre-boot/010-sqlite-setup.sh",
                render(
                    "010-sqlite-setup.sh",
                    app_root=app_root,
                    sqlite_database=SQLITE_DATABASE,
                    storage_bootstrap=storage_bootstrap,
                ),
                SCRIPT_MODE,
            ),
            GeneratedFile(".profile.d/php.sh", render("php.sh", app_root=app_root), SCRIPT_MODE),
            GeneratedFile(
                ".profile.d/000-parse-database-url.sh",
                render("000-parse-database-url.sh", default_port=POSTGRES_DEFAULT_PORT),
                SCRIPT_MODE,
            ),
            GeneratedFile(
                "start.sh",
                render("start.sh", app_root=app_root, storage_bootstrap=storage_bootstrap),
                SCRIPT_MODE,
            ),
            GeneratedFile("Procfile", render("Procfile", app_root=app_root), FILE_MODE),
        ]

    def build_layer_catalog(self, context: BuildContext) -> List[GeneratedFile]:
        """Files written under the CNB layers directory."""
        return [
            GeneratedFile(f"{LAYER_NAME}.toml", render("layer.toml"), FILE_MODE),
            GeneratedFile("launch.toml", render("launch.toml", app_root=context.app_root), FILE_MODE),
        ]

    def materialize(self, context: BuildContext) -> Tuple[List[str], List[str]]:
        """Write every catalog file. Returns the written paths and one message per failed file."""
        targets = [
            (os.path.join(context.build_dir, generated.path), generated)
            for generated in self.build_catalog(context)
        ]
        if context.layers_dir:
            targets.extend(
                (os.path.join(context.layers_dir, generated.path), generated)
                for generated in self.build_layer_catalog(context)
            )

        written: List[str] = []
        failures: List[str] = []
        for path, generated in targets:
            try:
                self.filesystem.write_file(path, generated.content, generated.mode)
            except OSError as exc:
                self.logger.debug("Could not write %s: %s", path, exc)
                failures.append(f"Could not write {path}: {exc}")
                continue
            written.append(path)

        if context.layers_dir:
            layer_dir = os.path.join(context.layers_dir, LAYER_NAME)
            try:
                os.makedirs(layer_dir, exist_ok=True)
            except OSError as exc:
                failures.append(f"Could not create layer directory {layer_dir}: {exc}")

        return written, failures
