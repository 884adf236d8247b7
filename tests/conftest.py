"""Pytest fixtures for nohuman-db tests."""
import gzip
import hashlib
import io
import tarfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import requests

from nohuman_db.config import METADATA_FILENAME, REQUIRED_DB_FILES
from nohuman_db.database.models import DatabaseRelease, InstalledMetadata


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code
        self.encoding = None
        self.headers = {"Content-Length": str(len(content))}

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Serves canned responses by URL and records every request.

    URLs without a registered response raise ``requests.ConnectionError``.
    """

    def __init__(self, responses: Optional[Dict[str, FakeResponse]] = None):
        self.responses = dict(responses or {})
        self.requests: List[str] = []

    def add(self, url: str, content: bytes, status_code: int = 200) -> None:
        self.responses[url] = FakeResponse(content, status_code)

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.requests.append(url)
        if url not in self.responses:
            raise requests.ConnectionError(f"No route to {url}")
        return self.responses[url]


def build_tarball(files: Dict[str, bytes]) -> bytes:
    """Build an in-memory gzip tarball from ``{relative_path: content}``."""
    buffer = io.BytesIO()
    # mtime=0 keeps the gzip header, and so the MD5, stable across calls
    with gzip.GzipFile(fileobj=buffer, mode="wb", mtime=0) as gz:
        with tarfile.open(fileobj=gz, mode="w") as archive:
            for name, content in files.items():
                info = tarfile.TarInfo(name=name)
                info.size = len(content)
                archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def marker_files(prefix: str = "") -> Dict[str, bytes]:
    return {f"{prefix}{name}": b"kraken2 " + name.encode() for name in REQUIRED_DB_FILES}


def md5_of(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def db_root(tmp_path: Path) -> Path:
    return tmp_path / "db"


@pytest.fixture
def release_factory(fake_session: FakeSession) -> Callable[..., DatabaseRelease]:
    """Create a release and serve its tarball from ``fake_session``.

    Keyword args:
        version: Release version (default "HPRC.r1")
        added: Release date string (default "2024-01-01")
        files: Tarball contents (default marker files at the top level)
        checksum: Declared MD5 (default: the real MD5 of the tarball)
    """

    def _make(
        version: str = "HPRC.r1",
        added: str = "2024-01-01",
        files: Optional[Dict[str, bytes]] = None,
        checksum: Optional[str] = None,
    ) -> DatabaseRelease:
        payload = build_tarball(marker_files() if files is None else files)
        url = f"https://example.org/{version}.tar.gz"
        fake_session.add(url, payload)
        return DatabaseRelease(
            version=version,
            url=url,
            checksum=checksum or md5_of(payload),
            added=added,
        )

    return _make


def make_installed(
    root: Path,
    version: str,
    added: str,
    nested: bool = False,
    with_metadata: bool = True,
) -> Path:
    """Lay out an installed database directory by hand; returns the version dir."""
    version_dir = root / version
    db_dir = version_dir / "db" if nested else version_dir
    db_dir.mkdir(parents=True, exist_ok=True)
    for name, content in marker_files().items():
        (db_dir / name).write_bytes(content)
    if with_metadata:
        InstalledMetadata(version=version, added=added).save(version_dir / METADATA_FILENAME)
    return version_dir


def make_legacy(root: Path) -> None:
    """Lay out a pre-versioning flat database directly in ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in marker_files().items():
        (root / name).write_bytes(content)
