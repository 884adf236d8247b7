"""Core exception types for nohuman-db."""


class NohumanDbError(Exception):
    """Base exception for all nohuman-db errors."""
    pass


class ConfigDownloadError(NohumanDbError):
    """Raised when the release manifest cannot be downloaded."""
    pass


class ConfigParseError(NohumanDbError):
    """Raised when the release manifest violates its schema."""
    pass


class InvalidDateError(ConfigParseError):
    """Raised when a release's ``added`` field is not a calendar date."""

    def __init__(self, raw_value: str):
        super().__init__(f"Invalid date in manifest: '{raw_value}'")
        self.raw_value = raw_value


class MetadataParseError(NohumanDbError):
    """Raised when an installed database's metadata file cannot be read."""
    pass


class UnknownDatabaseVersionError(NohumanDbError):
    """Raised when a requested version is not in the manifest."""

    def __init__(self, version: str):
        super().__init__(f"Unknown database version: '{version}'")
        self.version = version


class NoDatabasesAvailableError(NohumanDbError):
    """Raised when the manifest lists no releases."""

    def __init__(self):
        super().__init__("No databases are available in the manifest")


class DatabaseNotFoundError(NohumanDbError):
    """Raised when no usable installed database matches a request."""
    pass


class DownloadError(NohumanDbError):
    """Raised when a database tarball cannot be downloaded."""
    pass


class ChecksumMismatchError(NohumanDbError):
    """Raised when a downloaded tarball does not hash to its declared MD5."""

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Tarball MD5 hash does not match the expected value "
            f"(expected {expected}, got {actual})"
        )
        self.expected = expected
        self.actual = actual


class ExtractionError(NohumanDbError):
    """Raised when a tarball cannot be unpacked into a usable database."""
    pass


class InstallError(NohumanDbError):
    """Raised when the install directory cannot be prepared or written."""
    pass
