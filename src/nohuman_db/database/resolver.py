"""Version resolver: locate the installed database path to run against."""
import logging
from pathlib import Path
from typing import List, Optional

from nohuman_db.core.errors import DatabaseNotFoundError
from nohuman_db.database.models import InstalledDatabase
from nohuman_db.database.scanner import find_installed, latest_installed, list_installed

logger = logging.getLogger(__name__)


class VersionResolver:
    """Answer "which database path should I use?" for an install root."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def available(self) -> List[InstalledDatabase]:
        """Installed databases, newest first."""
        return sorted(list_installed(self.root), key=lambda entry: entry.added, reverse=True)

    def resolve(self, version: Optional[str] = None) -> Path:
        """Return the usable database path for ``version``, or the newest install.

        Raises:
            DatabaseNotFoundError: If the version (or any database) is not installed
        """
        if version is not None:
            entry = find_installed(self.root, version)
            if entry is None:
                installed = [e.version for e in list_installed(self.root)]
                raise DatabaseNotFoundError(
                    f"Database version '{version}' is not installed in {self.root}"
                    + (f" (installed: {', '.join(installed)})" if installed else "")
                )
        else:
            entry = latest_installed(self.root)
            if entry is None:
                raise DatabaseNotFoundError(
                    f"No database installed in {self.root}; run `nohuman-db download` first"
                )

        logger.debug(f"Using database {entry.version} at {entry.path}")
        return entry.path
