# services/openlibrary.py: ISBN and author lookups against the Open Library catalog
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from config import settings
from schemas import BookMetadata

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown author"


class CatalogError(Exception):
    """Base class for catalog lookup failures."""


class NotFoundError(CatalogError):
    """The catalog has no record for the requested ISBN."""


class UpstreamError(CatalogError):
    """The catalog could not be reached or returned something unusable."""


async def _get_json(client: httpx.AsyncClient, url: str) -> dict:
    try:
        r = await client.get(url)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Request failed: {url}: {e}") from e
    if r.status_code == 404:
        raise NotFoundError(f"Not found: {url}")
    if r.status_code != 200:
        raise UpstreamError(f"HTTP {r.status_code} from {url}")
    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamError(f"Invalid JSON from {url}") from e
    if not isinstance(data, dict):
        raise UpstreamError(f"Unexpected payload from {url}")
    return data


async def _fetch(client: httpx.AsyncClient, isbn: str) -> BookMetadata:
    base = settings.openlibrary_url.rstrip("/")
    data = await _get_json(client, f"{base}/isbn/{isbn}.json")
    if not data.get("title"):
        raise UpstreamError(f"Record for ISBN {isbn} has no title")

    author = UNKNOWN_AUTHOR
    authors = data.get("authors") or []
    if not isinstance(authors, list):
        raise UpstreamError(f"Record for ISBN {isbn} has malformed authors")
    if authors and isinstance(authors[0], dict) and isinstance(authors[0].get("key"), str):
        author_key = authors[0]["key"]
        try:
            author_data = await _get_json(client, f"{base}{author_key}.json")
        except NotFoundError as e:
            raise UpstreamError(f"Author {author_key} not found") from e
        if not author_data.get("name"):
            raise UpstreamError(f"Author {author_key} has no name")
        author = author_data["name"]

    try:
        return BookMetadata(
            title=data["title"],
            author_name=author,
            publish_date=data.get("publish_date"),
        )
    except ValidationError as e:
        raise UpstreamError(f"Malformed record for ISBN {isbn}: {e}") from e


async def fetch_book_metadata(isbn: str, client: Optional[httpx.AsyncClient] = None) -> BookMetadata:
    """Resolve an ISBN to its title, first author's name and publish date.

    Raises NotFoundError when the catalog has no such edition and
    UpstreamError on transport errors, bad statuses or malformed records.
    """
    if client is not None:
        return await _fetch(client, isbn)
    async with httpx.AsyncClient(timeout=settings.openlibrary_timeout, follow_redirects=True) as client:
        return await _fetch(client, isbn)


class OpenLibraryCatalog:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    async def fetch(self, isbn: str) -> BookMetadata:
        metadata = await fetch_book_metadata(isbn, self.client)
        logger.debug("Open Library resolved %s to %r", isbn, metadata.title)
        return metadata


def get_catalog() -> OpenLibraryCatalog:
    return OpenLibraryCatalog()
