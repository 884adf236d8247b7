"""Release selection: decide which manifest release(s) a policy refers to."""
from typing import List

from nohuman_db.core.errors import NoDatabasesAvailableError, UnknownDatabaseVersionError
from nohuman_db.database.models import (
    DatabaseManifest,
    DatabaseRelease,
    PolicyKind,
    SelectionPolicy,
)


def resolve(manifest: DatabaseManifest, policy: SelectionPolicy) -> List[DatabaseRelease]:
    """Compute the releases to install for ``policy``.

    Rules:
        - Any policy against an empty manifest fails
        - Latest: the manifest's default_version when set (which must exist),
          otherwise the newest ``added`` date; on equal dates the release
          declared first in the manifest wins
        - Specific: exact, case-sensitive version match
        - All: every release in manifest order

    Raises:
        NoDatabasesAvailableError: If the manifest has no releases
        UnknownDatabaseVersionError: If the requested or default version is absent
    """
    if not manifest.releases:
        raise NoDatabasesAvailableError()

    if policy.kind is PolicyKind.ALL:
        return list(manifest.releases)

    if policy.kind is PolicyKind.SPECIFIC:
        return [_require(manifest, policy.version)]

    if manifest.default_version is not None:
        return [_require(manifest, manifest.default_version)]

    newest = manifest.releases[0]
    for release in manifest.releases[1:]:
        if release.added > newest.added:
            newest = release
    return [newest]


def _require(manifest: DatabaseManifest, version: str) -> DatabaseRelease:
    release = manifest.get(version)
    if release is None:
        raise UnknownDatabaseVersionError(version)
    return release
