from typing import Optional

from config import settings

PLACEHOLDER_COVER = "/static/no-cover.png"

def cover_url(isbn: str) -> str:
    """Large cover image for an ISBN on the Open Library covers host."""
    return f"{settings.covers_url.rstrip('/')}/b/isbn/{isbn}-L.jpg"

def display_cover_url(url: Optional[str]) -> str:
    return url or PLACEHOLDER_COVER
