"""Installer: download, verify, extract, and record one database release."""
import hashlib
import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import List, Optional

import requests
from tqdm import tqdm

from nohuman_db.config import DOWNLOAD_CHUNK_SIZE, MD5_READ_SIZE, METADATA_FILENAME, REQUIRED_DB_FILES
from nohuman_db.core.errors import (
    ChecksumMismatchError,
    DownloadError,
    ExtractionError,
    InstallError,
)
from nohuman_db.database.models import DatabaseRelease, InstalledDatabase, InstalledMetadata
from nohuman_db.database.scanner import find_installed, resolve_db_path

logger = logging.getLogger(__name__)


def compute_md5(path: Path) -> str:
    """Compute the hex MD5 of a file without reading it all into memory."""
    hasher = hashlib.md5()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(MD5_READ_SIZE), b""):
            hasher.update(block)
    return hasher.hexdigest()


def _content_length(headers) -> Optional[int]:
    """Return the declared body size, or None when absent or malformed."""
    try:
        return int(headers.get("Content-Length", 0)) or None
    except (TypeError, ValueError):
        return None


def extract_tarball(tarball: Path, target: Path) -> None:
    """Unpack a gzip-compressed tar stream into ``target``.

    Raises:
        ExtractionError: If the archive cannot be read or unpacked
    """
    target.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(tarball, mode="r:gz") as archive:
            archive.extractall(target, filter="data")
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ExtractionError(f"Failed to extract {tarball} into {target}: {e}") from e


class Installer:
    """Install database releases under a root directory.

    Installing a version that is already usable under the root is always a
    no-op: no network request and no filesystem change.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        show_progress: bool = False,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.show_progress = show_progress

    def install(self, root: Path, release: DatabaseRelease) -> InstalledDatabase:
        """Install ``release`` into ``root / release.version``.

        A version entry the scanner does not recognise (left by an earlier
        failed attempt) is removed before installing again. If the extracted
        files fail validation the directory is left in place.

        Raises:
            InstallError: If the install location cannot be prepared or written
            DownloadError: If the tarball cannot be downloaded
            ChecksumMismatchError: If the tarball's MD5 differs from the release's
            ExtractionError: If unpacking fails or yields no usable database
        """
        root = Path(root)
        existing = find_installed(root, release.version)
        if existing is not None:
            logger.info(f"Database {release.version} already installed at {existing.path}")
            return existing

        target = root / release.version
        # Only ever remove a direct child of root named after the version.
        if (
            release.version in (".", "..")
            or target.parent != root
            or target.name != release.version
        ):
            raise InstallError(f"Refusing to install version '{release.version}' outside {root}")
        self._prepare_target(root, target)

        try:
            fd, tmp_name = tempfile.mkstemp(prefix="nohuman-db-", suffix=".tar.gz")
            os.close(fd)
        except OSError as e:
            raise InstallError(f"Cannot create temporary download file: {e}") from e
        tarball = Path(tmp_name)
        try:
            self._download(release.url, tarball)

            try:
                actual = compute_md5(tarball)
            except OSError as e:
                raise InstallError(f"Cannot read downloaded file {tarball}: {e}") from e
            if actual != release.checksum.lower():
                raise ChecksumMismatchError(release.checksum, actual)
            logger.debug(f"MD5 verified for {release.version}: {actual}")

            logger.info(f"Extracting {release.version} to {target}")
            extract_tarball(tarball, target)
        finally:
            try:
                tarball.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove temporary file {tarball}: {e}")

        try:
            InstalledMetadata.from_release(release).save(target / METADATA_FILENAME)
        except OSError as e:
            raise InstallError(f"Cannot write metadata for {release.version}: {e}") from e

        db_path = resolve_db_path(target)
        if db_path is None:
            raise ExtractionError(
                f"Required files ({', '.join(REQUIRED_DB_FILES)}) not found in {target} "
                f"or its 'db' subdirectory after extraction"
            )

        logger.info(f"Installed database {release.version} at {db_path}")
        return InstalledDatabase(version=release.version, path=db_path, added=release.added)

    def _prepare_target(self, root: Path, target: Path) -> None:
        try:
            root.mkdir(parents=True, exist_ok=True)
            if target.is_dir() and not target.is_symlink():
                logger.warning(f"Removing incomplete install at {target}")
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                logger.warning(f"Removing stray file at {target}")
                target.unlink()
        except OSError as e:
            raise InstallError(f"Cannot prepare install directory {target}: {e}") from e

    def install_all(self, root: Path, releases: List[DatabaseRelease]) -> List[InstalledDatabase]:
        """Install releases one at a time, in order.

        The first failure propagates and the remaining releases are skipped.
        """
        installed = []
        for index, release in enumerate(releases, start=1):
            logger.info(f"Installing {release.version} ({index}/{len(releases)})")
            installed.append(self.install(root, release))
        return installed

    def _download(self, url: str, dest: Path) -> None:
        logger.info(f"Downloading {url}")
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total = _content_length(response.headers)
                with open(dest, "wb") as f, tqdm(
                    total=total,
                    unit="B",
                    unit_scale=True,
                    disable=not self.show_progress,
                ) as progress:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        progress.update(len(chunk))
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Failed to write download to {dest}: {e}") from e
