"""Fetching and checking of imported service specifications.

Imports point at the canonical service JSON of another service. The importer
downloads it and reports problems as plain messages. Nothing is cached: two
imports of the same URI are fetched twice.
"""

import json
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import requests
import structlog

from api_json_validator.config import Settings

logger = structlog.get_logger()

IMPORT_REQUIRED_FIELDS = ("name", "namespace")


class FetchError(Exception):
    """Raised by a fetcher when the document at a URI cannot be retrieved."""


class Fetcher(Protocol):
    def fetch(self, uri: str) -> str: ...


class HttpFetcher:
    """Fetches documents over http(s), or from disk for file:// URIs."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def fetch(self, uri: str) -> str:
        parsed = urlparse(uri)
        if parsed.scheme == "file":
            try:
                return Path(unquote(parsed.path)).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise FetchError(str(e)) from e

        try:
            response = requests.get(
                uri,
                timeout=self.settings.http_timeout,
                headers={"User-Agent": self.settings.user_agent, "Accept": "application/json"},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(str(e)) from e
        return response.text


class Importer:
    """Validates imports by fetching the referenced service specification."""

    def __init__(self, fetcher: Fetcher | None = None):
        self.fetcher = fetcher or HttpFetcher()

    def validate(self, uri: str) -> list[str]:
        logger.debug("Fetching import", uri=uri)
        try:
            text = self.fetcher.fetch(uri)
        except FetchError as e:
            logger.info("Import fetch failed", uri=uri, error=str(e))
            return [f"Error fetching import[{uri}]: {e}"]

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            return [f"Import[{uri}] did not return valid JSON: {e.msg}"]
        except RecursionError:
            return [f"Import[{uri}] did not return valid JSON: nesting is too deep"]

        if not isinstance(document, dict):
            return [f"Import[{uri}] must be a JSON object"]

        missing = [f for f in IMPORT_REQUIRED_FIELDS if not isinstance(document.get(f), str)]
        if missing:
            return [f"Import[{uri}] is not a valid service specification. Missing: " + ", ".join(missing)]
        return []
