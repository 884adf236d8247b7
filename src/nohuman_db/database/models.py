"""Models for the release manifest, selection policies, and installed databases."""
from datetime import date
from enum import Enum
from pathlib import Path, PureWindowsPath
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from nohuman_db.config import ALL_VERSIONS
from nohuman_db.core.dates import parse_date
from nohuman_db.core.errors import InvalidDateError, MetadataParseError, NohumanDbError


def _parse_added(v) -> date:
    try:
        return parse_date(v)
    except InvalidDateError as e:
        raise PydanticCustomError(
            "invalid_date",
            "invalid calendar date '{raw}'",
            {"raw": e.raw_value},
        )


class DatabaseRelease(BaseModel):
    """One versioned, checksummed, downloadable database tarball.

    The manifest spells the checksum field ``md5``; ``checksum`` is accepted
    as well when building releases in code.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str = Field(..., min_length=1, description="Release version, unique within a manifest")
    url: str = Field(..., min_length=1, description="Location of the gzip-compressed tarball")
    checksum: str = Field(..., alias="md5", description="Hex MD5 digest of the tarball")
    added: date = Field(..., description="Date the release was published")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Ensure version is usable as a single directory name under the root."""
        if (
            v in (".", "..")
            or "/" in v
            or "\\" in v
            or Path(v).is_absolute()
            or PureWindowsPath(v).drive
        ):
            raise ValueError(f"version must be a plain directory name; got '{v}'")
        return v

    @field_validator("added", mode="before")
    @classmethod
    def validate_added(cls, v) -> date:
        """Parse ``added`` as a calendar date.

        A bad date is reported as an ``invalid_date`` error whose context
        carries the raw value.
        """
        return _parse_added(v)

    @field_validator("checksum")
    @classmethod
    def validate_checksum(cls, v: str) -> str:
        """Ensure checksum looks like an MD5 hex digest."""
        v = v.strip().lower()
        if len(v) != 32 or not all(c in "0123456789abcdef" for c in v):
            raise ValueError(f"md5 must be 32 hexadecimal characters; got '{v}'")
        return v


class DatabaseManifest(BaseModel):
    """Remote descriptor enumerating every published database release."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_version: Optional[str] = Field(default=None, description="Release picked by 'latest'")
    releases: List[DatabaseRelease] = Field(default_factory=list, alias="databases")

    @model_validator(mode="after")
    def validate_unique_versions(self) -> "DatabaseManifest":
        """Ensure no two releases share a version."""
        seen = set()
        for release in self.releases:
            if release.version in seen:
                raise ValueError(f"duplicate release version '{release.version}'")
            seen.add(release.version)
        return self

    def get(self, version: str) -> Optional[DatabaseRelease]:
        """Return the release with exactly ``version``, if any."""
        for release in self.releases:
            if release.version == version:
                return release
        return None

    @property
    def versions(self) -> List[str]:
        return [release.version for release in self.releases]


class PolicyKind(str, Enum):
    LATEST = "latest"
    SPECIFIC = "specific"
    ALL = "all"


class SelectionPolicy(BaseModel):
    """Which release(s) of a manifest a caller wants."""

    model_config = ConfigDict(frozen=True)

    kind: PolicyKind
    version: Optional[str] = None

    @model_validator(mode="after")
    def validate_version(self) -> "SelectionPolicy":
        if self.kind is PolicyKind.SPECIFIC and not self.version:
            raise ValueError("a specific selection needs a version")
        if self.kind is not PolicyKind.SPECIFIC and self.version is not None:
            raise ValueError(f"'{self.kind.value}' selection does not take a version")
        return self

    @classmethod
    def latest(cls) -> "SelectionPolicy":
        return cls(kind=PolicyKind.LATEST)

    @classmethod
    def specific(cls, version: str) -> "SelectionPolicy":
        return cls(kind=PolicyKind.SPECIFIC, version=version)

    @classmethod
    def all(cls) -> "SelectionPolicy":
        return cls(kind=PolicyKind.ALL)

    @classmethod
    def parse(cls, text: Optional[str]) -> "SelectionPolicy":
        """Map a user-supplied version string to a policy.

        ``None`` means latest and the literal ``"all"`` means every release.
        """
        if text is None:
            return cls.latest()
        if text == ALL_VERSIONS:
            return cls.all()
        return cls.specific(text)


class InstalledMetadata(BaseModel):
    """Metadata written once into each installed version's directory."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "version": "HPRC.r1",
                "added": "2024-01-01",
            }
        },
    )

    version: str = Field(..., min_length=1, description="Installed release version")
    added: date = Field(..., description="Publication date copied from the release")

    @field_validator("added", mode="before")
    @classmethod
    def validate_added(cls, v) -> date:
        return _parse_added(v)

    @classmethod
    def from_release(cls, release: DatabaseRelease) -> "InstalledMetadata":
        return cls(version=release.version, added=release.added)

    def save(self, path: Path) -> None:
        """Write metadata to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))

    @classmethod
    def load(cls, path: Path) -> "InstalledMetadata":
        """Load metadata from a JSON file.

        Raises:
            MetadataParseError: If the file is missing, unreadable, or invalid
        """
        path = Path(path)
        try:
            return cls.model_validate_json(path.read_text())
        except (OSError, UnicodeDecodeError, ValidationError, NohumanDbError) as e:
            raise MetadataParseError(f"Cannot read metadata {path}: {e}") from e


class InstalledDatabase(BaseModel):
    """A usable database found on disk.

    This is a view produced by scanning the filesystem, never a source of
    truth. ``path`` is the directory holding the marker files, which may be
    the nested ``db`` subdirectory of the version directory.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    path: Path
    added: date
