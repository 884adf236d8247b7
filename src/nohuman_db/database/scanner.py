"""Installation scanner: discover usable databases under a local root.

Three layouts are recognised:

    <root>/<version>/metadata.json + marker files          (versioned)
    <root>/<version>/metadata.json + db/<marker files>     (versioned, nested)
    <root>/<marker files>, no metadata.json                (legacy, flat)

Every query re-reads the filesystem; nothing is cached between calls.
"""
import logging
from pathlib import Path
from typing import List, Optional

from nohuman_db.config import (
    LEGACY_VERSION,
    METADATA_FILENAME,
    NESTED_DB_DIRNAME,
    REQUIRED_DB_FILES,
)
from nohuman_db.core.dates import EPOCH
from nohuman_db.core.errors import MetadataParseError
from nohuman_db.database.models import InstalledDatabase, InstalledMetadata

logger = logging.getLogger(__name__)


def _has_required_files(directory: Path) -> bool:
    return directory.is_dir() and all((directory / name).is_file() for name in REQUIRED_DB_FILES)


def resolve_db_path(directory: Path) -> Optional[Path]:
    """Return the usable database path within ``directory``.

    The marker files must all be present either directly in ``directory`` or
    inside its ``db`` subdirectory. Both the scanner and the installer's
    post-extraction check go through this function.

    Returns:
        ``directory`` or ``directory / "db"``, or None if neither qualifies
    """
    directory = Path(directory)
    if _has_required_files(directory):
        return directory
    nested = directory / NESTED_DB_DIRNAME
    if _has_required_files(nested):
        return nested
    return None


def _scan_version_dir(directory: Path) -> Optional[InstalledDatabase]:
    try:
        metadata = InstalledMetadata.load(directory / METADATA_FILENAME)
    except MetadataParseError as e:
        logger.debug(f"Skipping {directory}: {e}")
        return None

    db_path = resolve_db_path(directory)
    if db_path is None:
        logger.debug(
            f"Skipping {directory}: required files ({', '.join(REQUIRED_DB_FILES)}) "
            f"not found in it or its '{NESTED_DB_DIRNAME}' subdirectory"
        )
        return None

    return InstalledDatabase(version=metadata.version, path=db_path, added=metadata.added)


def list_installed(root: Path) -> List[InstalledDatabase]:
    """Enumerate usable databases under ``root``.

    Never raises: unreadable entries are skipped with a debug diagnostic.
    Versioned installs come first, sorted by directory name, followed by the
    synthetic legacy entry when ``root`` itself holds a flat database.
    """
    root = Path(root)
    try:
        children = sorted(child for child in root.iterdir() if child.is_dir())
    except OSError as e:
        logger.debug(f"Cannot scan {root}: {e}")
        return []

    installed = []
    for child in children:
        try:
            entry = _scan_version_dir(child)
        except OSError as e:
            logger.debug(f"Skipping {child}: {e}")
            continue
        if entry is not None:
            installed.append(entry)

    if _has_required_files(root) and not (root / METADATA_FILENAME).exists():
        installed.append(InstalledDatabase(version=LEGACY_VERSION, path=root, added=EPOCH))

    return installed


def find_installed(root: Path, version: str) -> Optional[InstalledDatabase]:
    """Return the first installed database with exactly ``version``."""
    for entry in list_installed(root):
        if entry.version == version:
            return entry
    return None


def latest_installed(root: Path) -> Optional[InstalledDatabase]:
    """Return the installed database with the newest ``added`` date.

    The legacy entry is dated at the epoch, so it is only returned when
    nothing else is installed. On equal dates the first listed entry wins.
    """
    latest = None
    for entry in list_installed(root):
        if latest is None or entry.added > latest.added:
            latest = entry
    return latest
