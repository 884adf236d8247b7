"""Configuration defaults shared across the project.

Nothing here is read implicitly at import time by the database modules: the
CLI resolves these defaults (and their environment overrides) and passes the
resulting values into every entry point.
"""
from pathlib import Path

# Remote release manifest (TOML).
DEFAULT_MANIFEST_URL = "https://raw.githubusercontent.com/mbhall88/nohuman/main/config.toml"

DEFAULT_DB_ROOT = Path.home() / ".nohuman" / "db"

DB_ROOT_ENVVAR = "NOHUMAN_DB"
MANIFEST_URL_ENVVAR = "NOHUMAN_MANIFEST_URL"

# Files that must all be present for a directory to be a usable kraken2 database.
REQUIRED_DB_FILES = ("hash.k2d", "opts.k2d", "taxo.k2d")

# Databases are sometimes packaged one level down, under this subdirectory.
NESTED_DB_DIRNAME = "db"

METADATA_FILENAME = "metadata.json"

LEGACY_VERSION = "legacy"

# Selection keyword meaning every release in the manifest.
ALL_VERSIONS = "all"

DOWNLOAD_CHUNK_SIZE = 1024 * 1024
MD5_READ_SIZE = 8192
