"""Manifest client: fetch and parse the remote database release manifest."""
import logging
import tomllib
from typing import Optional

import requests
from pydantic import ValidationError

from nohuman_db.config import DEFAULT_MANIFEST_URL
from nohuman_db.core.errors import ConfigDownloadError, ConfigParseError, InvalidDateError
from nohuman_db.database.models import DatabaseManifest

logger = logging.getLogger(__name__)


def parse_manifest(text: str) -> DatabaseManifest:
    """Parse manifest TOML text into a validated DatabaseManifest.

    Expected layout::

        default_version = "HPRC.r1"

        [[databases]]
        version = "HPRC.r1"
        url = "https://.../HPRC.r1.tar.gz"
        md5 = "0123456789abcdef0123456789abcdef"
        added = "2024-01-01"

    Raises:
        ConfigParseError: If the text is not TOML or violates the schema
        InvalidDateError: If any release's ``added`` is not a calendar date
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Manifest is not valid TOML: {e}") from e

    try:
        return DatabaseManifest.model_validate(data)
    except ValidationError as e:
        # Schema violations take precedence over bad dates.
        errors = e.errors()
        if all(error["type"] == "invalid_date" for error in errors):
            raise InvalidDateError(errors[0]["ctx"]["raw"]) from e
        raise ConfigParseError(f"Manifest does not match schema: {e}") from e


class ManifestClient:
    """Blocking client for the release manifest at a fixed URL."""

    def __init__(
        self,
        url: str = DEFAULT_MANIFEST_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self) -> DatabaseManifest:
        """Download and parse the manifest.

        The whole fetch fails if any entry is invalid; a partial manifest is
        never returned.

        Raises:
            ConfigDownloadError: On transport failure or a non-2xx response
            ConfigParseError: If the body violates the manifest schema
            InvalidDateError: If any release's ``added`` is not a calendar date
        """
        logger.debug(f"Fetching manifest from {self.url}")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            response.encoding = "utf-8"
            text = response.text
        except requests.RequestException as e:
            raise ConfigDownloadError(f"Failed to download manifest from {self.url}: {e}") from e

        manifest = parse_manifest(text)
        logger.info(
            f"Manifest lists {len(manifest.releases)} database(s)"
            + (f", default {manifest.default_version}" if manifest.default_version else "")
        )
        return manifest
