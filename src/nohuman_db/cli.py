"""nohuman-db CLI - Command line interface for nohuman-db."""
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from nohuman_db.config import (
    DB_ROOT_ENVVAR,
    DEFAULT_DB_ROOT,
    DEFAULT_MANIFEST_URL,
    MANIFEST_URL_ENVVAR,
)
from nohuman_db.core.errors import (
    DatabaseNotFoundError,
    NoDatabasesAvailableError,
    NohumanDbError,
    UnknownDatabaseVersionError,
)
from nohuman_db.database import (
    Installer,
    ManifestClient,
    SelectionPolicy,
    VersionResolver,
    list_installed,
    resolve,
)

logger = logging.getLogger("nohuman_db")

# Exit codes
EXIT_FAILURE = 1
EXIT_NOT_FOUND = 3

_NOT_FOUND_ERRORS = (UnknownDatabaseVersionError, NoDatabasesAvailableError, DatabaseNotFoundError)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _fail(action: str, error: NohumanDbError) -> None:
    logger.error(f"{action} failed: {error}")
    sys.exit(EXIT_NOT_FOUND if isinstance(error, _NOT_FOUND_ERRORS) else EXIT_FAILURE)


db_root_option = click.option(
    "--db-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_DB_ROOT,
    envvar=DB_ROOT_ENVVAR,
    show_default=True,
    help=f"Directory holding installed databases (env: {DB_ROOT_ENVVAR})",
)

manifest_url_option = click.option(
    "--manifest-url",
    default=DEFAULT_MANIFEST_URL,
    envvar=MANIFEST_URL_ENVVAR,
    help=f"URL of the database release manifest (env: {MANIFEST_URL_ENVVAR})",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """nohuman-db - manage nohuman kraken2 database releases."""
    _setup_logging(verbose)


@main.command()
@db_root_option
@manifest_url_option
@click.option(
    "--db-version",
    default=None,
    help="Database version to download, or 'all' (default: latest)",
)
def download(db_root: Path, manifest_url: str, db_version: Optional[str]):
    """Download and install database release(s).

    Already-installed versions are left untouched.

    Examples:
        nohuman-db download
        nohuman-db download --db-version HPRC.r1
        nohuman-db download --db-version all

    Exit codes:
        0: Success
        1: Download, checksum, extraction, or manifest failure
        3: Requested version not in the manifest
    """
    try:
        manifest = ManifestClient(manifest_url).fetch()
        releases = resolve(manifest, SelectionPolicy.parse(db_version))
        installed = Installer(show_progress=sys.stderr.isatty()).install_all(db_root, releases)
    except NohumanDbError as e:
        _fail("Download", e)

    for entry in installed:
        click.echo(f"[OK] {entry.version} ({entry.added.isoformat()})")
        click.echo(f"  Path: {entry.path}")


@main.command(name="list")
@db_root_option
@manifest_url_option
@click.option(
    "--remote",
    is_flag=True,
    help="List releases available in the manifest instead of installed databases",
)
def list_command(db_root: Path, manifest_url: str, remote: bool):
    """List installed (or downloadable) database versions."""
    if not remote:
        entries = VersionResolver(db_root).available()
        if not entries:
            click.echo(f"No databases installed in {db_root}")
            return
        for entry in entries:
            click.echo(f"{entry.version}\t{entry.added.isoformat()}\t{entry.path}")
        return

    try:
        manifest = ManifestClient(manifest_url).fetch()
    except NohumanDbError as e:
        _fail("Manifest fetch", e)

    installed = {entry.version for entry in list_installed(db_root)}
    for release in manifest.releases:
        flags = []
        if release.version == manifest.default_version:
            flags.append("default")
        if release.version in installed:
            flags.append("installed")
        suffix = f"\t[{', '.join(flags)}]" if flags else ""
        click.echo(f"{release.version}\t{release.added.isoformat()}{suffix}")


@main.command()
@db_root_option
@click.option(
    "--db-version",
    default=None,
    help="Installed database version (default: newest installed)",
)
def path(db_root: Path, db_version: Optional[str]):
    """Print the path of an installed database.

    Exit codes:
        0: Success
        3: No matching database installed
    """
    try:
        db_path = VersionResolver(db_root).resolve(db_version)
    except NohumanDbError as e:
        _fail("Lookup", e)

    click.echo(str(db_path))


if __name__ == "__main__":
    main()
