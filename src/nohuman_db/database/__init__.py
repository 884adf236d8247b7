"""Database releases: manifest, selection, installation, and discovery."""
from nohuman_db.database.client import ManifestClient, parse_manifest
from nohuman_db.database.installer import Installer
from nohuman_db.database.models import (
    DatabaseManifest,
    DatabaseRelease,
    InstalledDatabase,
    InstalledMetadata,
    SelectionPolicy,
)
from nohuman_db.database.resolver import VersionResolver
from nohuman_db.database.scanner import (
    find_installed,
    latest_installed,
    list_installed,
    resolve_db_path,
)
from nohuman_db.database.selector import resolve

__all__ = [
    "DatabaseManifest",
    "DatabaseRelease",
    "InstalledDatabase",
    "InstalledMetadata",
    "Installer",
    "ManifestClient",
    "SelectionPolicy",
    "VersionResolver",
    "find_installed",
    "latest_installed",
    "list_installed",
    "parse_manifest",
    "resolve",
    "resolve_db_path",
]
