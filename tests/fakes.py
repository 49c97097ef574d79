from schemas import BookMetadata
from services.openlibrary import NotFoundError


class FakeCatalog:
    """Catalog double that serves canned metadata and records every lookup."""

    def __init__(self, records=None, error=None):
        self.records = records or {}
        self.error = error
        self.calls = []

    async def fetch(self, isbn):
        self.calls.append(isbn)
        if self.error is not None:
            raise self.error
        if isbn not in self.records:
            raise NotFoundError(f"No record for {isbn}")
        return self.records[isbn]


MATILDA_ISBN = "9780140328721"
MATILDA = BookMetadata(title="Matilda", author_name="Roald Dahl", publish_date="1988")
