"""Tests for release selection."""
import pytest

from nohuman_db.core.errors import NoDatabasesAvailableError, UnknownDatabaseVersionError
from nohuman_db.database import DatabaseManifest, DatabaseRelease, SelectionPolicy, resolve


def _release(version: str, added: str) -> DatabaseRelease:
    return DatabaseRelease(
        version=version,
        url=f"https://example.org/{version}.tar.gz",
        checksum="0" * 32,
        added=added,
    )


@pytest.fixture
def manifest() -> DatabaseManifest:
    return DatabaseManifest(
        releases=[
            _release("old", "2023-01-01"),
            _release("new", "2024-01-01"),
            _release("mid", "2023-06-01"),
        ]
    )


class TestLatest:
    """Tests for the Latest policy."""

    def test_newest_date_without_default(self, manifest):
        [release] = resolve(manifest, SelectionPolicy.latest())
        assert release.version == "new"

    def test_default_version_wins_over_date(self, manifest):
        with_default = manifest.model_copy(update={"default_version": "old"})
        [release] = resolve(with_default, SelectionPolicy.latest())
        assert release.version == "old"

    def test_missing_default_version_is_unknown(self, manifest):
        """A default naming an absent release is an error, not a date fallback."""
        with_default = manifest.model_copy(update={"default_version": "gone"})

        with pytest.raises(UnknownDatabaseVersionError) as exc_info:
            resolve(with_default, SelectionPolicy.latest())

        assert exc_info.value.version == "gone"

    def test_date_tie_first_declared_wins(self):
        tied = DatabaseManifest(
            releases=[_release("a", "2024-01-01"), _release("b", "2024-01-01")]
        )
        [release] = resolve(tied, SelectionPolicy.latest())
        assert release.version == "a"


class TestSpecific:
    """Tests for the Specific policy."""

    def test_exact_match(self, manifest):
        [release] = resolve(manifest, SelectionPolicy.specific("mid"))
        assert release.version == "mid"

    def test_unknown_version(self, manifest):
        with pytest.raises(UnknownDatabaseVersionError) as exc_info:
            resolve(manifest, SelectionPolicy.specific("X"))
        assert exc_info.value.version == "X"

    def test_case_sensitive(self, manifest):
        with pytest.raises(UnknownDatabaseVersionError):
            resolve(manifest, SelectionPolicy.specific("NEW"))


class TestAll:
    """Tests for the All policy."""

    def test_manifest_order(self, manifest):
        releases = resolve(manifest, SelectionPolicy.all())
        assert [r.version for r in releases] == ["old", "new", "mid"]


@pytest.mark.parametrize(
    "policy",
    [SelectionPolicy.all(), SelectionPolicy.latest(), SelectionPolicy.specific("x")],
)
def test_empty_manifest_has_no_databases(policy):
    with pytest.raises(NoDatabasesAvailableError):
        resolve(DatabaseManifest(), policy)
