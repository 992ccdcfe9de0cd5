"""Static configuration templates.

Holes are written ``%%name`` so that NGINX variables, shell expansions and the
``$PORT`` runtime token pass through rendering untouched.
"""

import string
from typing import Dict


class ConfigTemplate(string.Template):
    delimiter = "%%"


DATABASE_PHP = ConfigTemplate(
    """<?php

return [
    'default' => env('DB_CONNECTION', 'pgsql'),
    'connections' => [
        'pgsql' => [
            'driver' => 'pgsql',
            'url' => env('DATABASE_URL'),
            'host' => env('DB_HOST', '127.0.0.1'),
            'port' => env('DB_PORT', '5432'),
            'database' => env('DB_DATABASE', 'forge'),
            'username' => env('DB_USERNAME', 'forge'),
            'password' => env('DB_PASSWORD', ''),
            'charset' => 'utf8',
            'prefix' => '',
            'prefix_indexes' => true,
            'search_path' => 'public',
            'sslmode' => 'prefer',
        ],
        'sqlite' => [
            'driver' => 'sqlite',
            'url' => env('DATABASE_URL'),
            'database' => env('DB_DATABASE', database_path('database.sqlite')),
            'prefix' => '',
            'foreign_key_constraints' => env('DB_FOREIGN_KEYS', true),
        ],
    ],
];
"""
)

MIME_TYPES = ConfigTemplate(
    """types {
    text/html                             html htm shtml;
    text/css                              css;
    text/xml                              xml;
    image/gif                             gif;
    image/jpeg                            jpeg jpg;
    application/javascript                js;
    application/atom+xml                  atom;
    application/rss+xml                   rss;

    text/mathml                           mml;
    text/plain                            txt;
    text/vnd.sun.j2me.app-descriptor      jad;
    text/vnd.wap.wml                      wml;
    text/x-component                      htc;

    image/png                             png;
    image/tiff                            tif tiff;
    image/vnd.wap.wbmp                    wbmp;
    image/x-icon                          ico;
    image/x-jng                           jng;
    image/x-ms-bmp                        bmp;
    image/svg+xml                         svg svgz;
    image/webp                            webp;

    application/font-woff                 woff;
    application/java-archive              jar war ear;
    application/json                      json;
    application/mac-binhex40              hqx;
    application/msword                    doc;
    application/pdf                       pdf;
    application/postscript                ps eps ai;
    application/rtf                       rtf;
    application/vnd.apple.mpegurl         m3u8;
    application/vnd.ms-excel              xls;
    application/vnd.ms-fontobject         eot;
    application/vnd.ms-powerpoint         ppt;
    application/vnd.wap.wmlc              wmlc;
    application/vnd.google-earth.kml+xml  kml;
    application/vnd.google-earth.kmz      kmz;
    application/x-7z-compressed           7z;
    application/x-cocoa                   cco;
    application/x-java-archive-diff       jardiff;
    application/x-java-jnlp-file          jnlp;
    application/x-makeself                run;
    application/x-perl                    pl pm;
    application/x-pilot                   prc pdb;
    application/x-rar-compressed          rar;
    application/x-redhat-package-manager  rpm;
    application/x-sea                     sea;
    application/x-shockwave-flash         swf;
    application/x-stuffit                 sit;
    application/x-tcl                     tcl tk;
    application/x-x509-ca-cert            der pem crt;
    application/x-xpinstall               xpi;
    application/xhtml+xml                 xhtml;
    application/xspf+xml                  xspf;
    application/zip                       zip;

    application/octet-stream              bin exe dll;
    application/octet-stream              deb;
    application/octet-stream              dmg;
    application/octet-stream              iso img;
    application/octet-stream              msi msp msm;

    application/vnd.openxmlformats-officedocument.wordprocessingml.document    docx;
    application/vnd.openxmlformats-officedocument.spreadsheetml.sheet          xlsx;
    application/vnd.openxmlformats-officedocument.presentationml.presentation  pptx;

    audio/midi                            mid midi kar;
    audio/mpeg                            mp3;
    audio/ogg                             ogg;
    audio/x-m4a                           m4a;
    audio/x-realaudio                     ra;

    video/3gpp                            3gpp 3gp;
    video/mp2t                            ts;
    video/mp4                             mp4;
    video/mpeg                            mpeg mpg;
    video/quicktime                       mov;
    video/webm                            webm;
    video/x-flv                           flv;
    video/x-m4v                           m4v;
    video/x-mng                           mng;
    video/x-ms-asf                        asx asf;
    video/x-ms-wmv                        wmv;
    video/x-msvideo                       avi;
}
"""
)

FASTCGI_PARAMS = ConfigTemplate(
    """fastcgi_param  QUERY_STRING       $query_string;
fastcgi_param  REQUEST_METHOD     $request_method;
fastcgi_param  CONTENT_TYPE       $content_type;
fastcgi_param  CONTENT_LENGTH     $content_length;

fastcgi_param  SCRIPT_NAME        $fastcgi_script_name;
fastcgi_param  REQUEST_URI        $request_uri;
fastcgi_param  DOCUMENT_URI       $document_uri;
fastcgi_param  DOCUMENT_ROOT      $document_root;
fastcgi_param  SERVER_PROTOCOL    $server_protocol;
fastcgi_param  REQUEST_SCHEME     $scheme;
fastcgi_param  HTTPS              $https if_not_empty;

fastcgi_param  GATEWAY_INTERFACE  CGI/1.1;
fastcgi_param  SERVER_SOFTWARE    nginx/$nginx_version;

fastcgi_param  REMOTE_ADDR        $remote_addr;
fastcgi_param  REMOTE_PORT        $remote_port;
fastcgi_param  SERVER_ADDR        $server_addr;
fastcgi_param  SERVER_PORT        $server_port;
fastcgi_param  SERVER_NAME        $server_name;

# PHP only, required if PHP was built with --enable-force-cgi-redirect
fastcgi_param  REDIRECT_STATUS    200;
"""
)

NGINX_CONF = ConfigTemplate(
    """worker_processes auto;
daemon off;

events {
  worker_connections 1024;
}

http {
  include %%app_root/nginx/mime.types;
  default_type application/octet-stream;
  server_tokens off;
  client_max_body_size 100m;

  # Rate limiting zone for the session endpoints below
  limit_req_zone $binary_remote_addr zone=mylimit:10m rate=1r/s;

  server {
    listen $PORT default_server;
    server_name _;

    root %%app_root/public;
    index index.php index.html index.htm;
    add_header X-Frame-Options "SAMEORIGIN";
    add_header X-XSS-Protection "1; mode=block";

    gzip on;
    gzip_disable "msie6";
    gzip_vary on;
    gzip_proxied any;
    gzip_comp_level 6;
    gzip_buffers 16 8k;
    gzip_http_version 1.1;
    gzip_types text/plain text/css application/json application/javascript text/xml application/xml application/xml+rss text/javascript;

    location / {
      try_files $uri $uri/ /index.php?$args;
    }

    error_page 404 /404.html;
    error_page 500 502 503 504 /50x.html;

    location = /50x.html {
      root /usr/share/nginx/html;
    }

    location ~ \\.php$ {
      try_files $uri rewrite ^ /index.php?$query_string;
      fastcgi_split_path_info ^(.+\\.php)(/.+)$;
      fastcgi_pass %%fpm_listen;
      fastcgi_index index.php;
      fastcgi_param SCRIPT_FILENAME $document_root$fastcgi_script_name;
      include %%app_root/nginx/fastcgi_params;
    }

    location ~ /\\.ht {
      deny all;
    }

    location ~ /web.config {
      deny all;
    }

    # 1 request per second per IP with a burst of 5, then 429.
    location /api/v2/user/session {
      try_files $uri $uri/ /index.php?$args;
      limit_req zone=mylimit burst=5 nodelay;
      limit_req_status 429;
    }

    location /api/v2/system/admin/session {
      try_files $uri $uri/ /index.php?$args;
      limit_req zone=mylimit burst=5 nodelay;
      limit_req_status 429;
    }
  }
}
"""
)

PHP_FPM_CONF = ConfigTemplate(
    """[global]
daemonize = no
include = %%app_root/.heroku/php/etc/php-fpm.d/*.conf
"""
)

PHP_FPM_POOL = ConfigTemplate(
    """[www]
listen = %%fpm_listen
user = nobody
pm = dynamic
pm.max_children = %%max_children
pm.start_servers = %%start_servers
pm.min_spare_servers = %%min_spare_servers
pm.max_spare_servers = %%max_spare_servers
"""
)

STORAGE_BOOTSTRAP = ConfigTemplate(
    """mkdir -p %%app_root/storage/databases
mkdir -p %%app_root/storage/logs
mkdir -p %%app_root/storage/app
mkdir -p %%app_root/storage/framework/cache
mkdir -p %%app_root/storage/framework/sessions
mkdir -p %%app_root/storage/framework/views
mkdir -p %%app_root/bootstrap/cache

chmod -R 777 %%app_root/storage
chmod -R 777 %%app_root/bootstrap/cache

if [ ! -f %%app_root/%%sqlite_database ]; then
  echo "Creating SQLite database file..."
  touch %%app_root/%%sqlite_database
fi
chmod 666 %%app_root/%%sqlite_database"""
)

START_SH = ConfigTemplate(
    """#!/bin/bash
cd %%app_root

echo "Checking storage directories..."
%%storage_bootstrap

php artisan migrate --force

sed -i "s/\\$PORT/$PORT/g" %%app_root/nginx/nginx.conf

php-fpm -y %%app_root/.heroku/php/etc/php-fpm.conf &

exec nginx -p %%app_root -c %%app_root/nginx/nginx.conf
"""
)

SQLITE_PRE_BOOT = ConfigTemplate(
    """#!/bin/bash

echo "Setting up SQLite database..."
%%storage_bootstrap

echo "SQLite database path: %%app_root/%%sqlite_database"
ls -la %%app_root/%%sqlite_database
"""
)

PROFILE_PHP = ConfigTemplate(
    """# Enable PDO SQLite
export LD_LIBRARY_PATH=$LD_LIBRARY_PATH:%%app_root/.heroku/php/lib
"""
)

PROFILE_DATABASE_URL = ConfigTemplate(
    """#!/bin/bash

if [[ "$DATABASE_URL" == postgres://* ]]; then
  eval "$(php -r '
    $rest = substr(getenv("DATABASE_URL"), strlen("postgres://"));
    $at = strpos($rest, "@");
    $userinfo = $at === false ? "" : substr($rest, 0, $at);
    $url = parse_url("postgres://" . ($at === false ? $rest : substr($rest, $at + 1)));
    $credentials = explode(":", $userinfo, 2);
    $path = $url["path"] ?? "";
    $fields = [
      "DB_CONNECTION" => "pgsql",
      "DB_HOST" => $url["host"] ?? "",
      "DB_PORT" => $url["port"] ?? %%default_port,
      "DB_DATABASE" => urldecode(substr($path, strrpos($path, "/") + 1)),
      "DB_USERNAME" => urldecode($credentials[0]),
      "DB_PASSWORD" => urldecode($credentials[1] ?? ""),
    ];
    foreach ($fields as $name => $value) {
      echo "export " . $name . "=" . escapeshellarg((string) $value) . "\\n";
    }
  ')"
  echo "PostgreSQL connection configured from DATABASE_URL"
fi
"""
)

PROCFILE = ConfigTemplate("web: %%app_root/start.sh\n")

LAUNCH_TOML = ConfigTemplate(
    """[[processes]]
type = "web"
command = "%%app_root/start.sh"
default = true
"""
)

LAYER_TOML = ConfigTemplate(
    """[types]
launch = true
build = true
cache = true
"""
)

FALLBACK_DOTENV = ConfigTemplate(
    """APP_ENV=production
APP_DEBUG=true
DB_CONNECTION=sqlite
DB_DATABASE=%%app_root/%%sqlite_database
APP_KEY=base64:%%app_key
"""
)

TEMPLATES: Dict[str, ConfigTemplate] = {
    "database.php": DATABASE_PHP,
    "mime.types": MIME_TYPES,
    "fastcgi_params": FASTCGI_PARAMS,
    "nginx.conf": NGINX_CONF,
    "php-fpm.conf": PHP_FPM_CONF,
    "www.conf": PHP_FPM_POOL,
    "storage-bootstrap": STORAGE_BOOTSTRAP,
    "start.sh": START_SH,
    "010-sqlite-setup.sh": SQLITE_PRE_BOOT,
    "php.sh": PROFILE_PHP,
    "000-parse-database-url.sh": PROFILE_DATABASE_URL,
    "Procfile": PROCFILE,
    "launch.toml": LAUNCH_TOML,
    "layer.toml": LAYER_TOML,
    ".env": FALLBACK_DOTENV,
}


def render(name: str, **values) -> str:
    """Render a named template; every hole must be supplied."""
    try:
        template = TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown template: {name}") from None
    return template.substitute(**values)
