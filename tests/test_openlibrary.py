import httpx
import pytest

from services.openlibrary import (
    UNKNOWN_AUTHOR,
    NotFoundError,
    OpenLibraryCatalog,
    UpstreamError,
    fetch_book_metadata,
)

ISBN_RESPONSE = {
    "title": "Matilda",
    "publish_date": "1988",
    "authors": [{"key": "/authors/OL34184A"}],
}
AUTHOR_RESPONSE = {"name": "Roald Dahl", "key": "/authors/OL34184A"}


def make_client(routes, request_log=None):
    """AsyncClient whose transport answers by URL path from ``routes``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request_log is not None:
            request_log.append(request.url.path)
        response = routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"error": "notfound"})
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchBookMetadata:
    async def test_resolves_title_author_and_publish_date(self) -> None:
        log = []
        client = make_client({
            "/isbn/9780140328721.json": ISBN_RESPONSE,
            "/authors/OL34184A.json": AUTHOR_RESPONSE,
        }, log)
        metadata = await fetch_book_metadata("9780140328721", client)
        assert metadata.title == "Matilda"
        assert metadata.author_name == "Roald Dahl"
        assert metadata.publish_date == "1988"
        assert log == ["/isbn/9780140328721.json", "/authors/OL34184A.json"]

    async def test_without_authors_uses_unknown_author(self) -> None:
        log = []
        client = make_client({"/isbn/123.json": {"title": "Anonymous Verse"}}, log)
        metadata = await fetch_book_metadata("123", client)
        assert metadata.author_name == UNKNOWN_AUTHOR
        assert metadata.publish_date is None
        assert log == ["/isbn/123.json"]

    async def test_missing_record_raises_not_found(self) -> None:
        client = make_client({})
        with pytest.raises(NotFoundError):
            await fetch_book_metadata("0000000000", client)

    async def test_server_error_raises_upstream_error(self) -> None:
        client = make_client({"/isbn/123.json": httpx.Response(503)})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("123", client)

    async def test_network_failure_raises_upstream_error(self) -> None:
        client = make_client({"/isbn/123.json": httpx.ConnectError("refused")})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("123", client)

    async def test_non_json_body_raises_upstream_error(self) -> None:
        client = make_client({"/isbn/123.json": httpx.Response(200, text="<html></html>")})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("123", client)

    async def test_record_without_title_raises_upstream_error(self) -> None:
        client = make_client({"/isbn/123.json": {"publish_date": "2001"}})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("123", client)

    @pytest.mark.parametrize("record", [
        {"title": 123},
        {"title": "Matilda", "authors": {"key": "/authors/OL34184A"}},
        {"title": "Matilda", "publish_date": ["1988"]},
    ])
    async def test_wrongly_typed_fields_raise_upstream_error(self, record) -> None:
        client = make_client({"/isbn/123.json": record})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("123", client)

    async def test_non_string_author_name_raises_upstream_error(self) -> None:
        client = make_client({
            "/isbn/9780140328721.json": ISBN_RESPONSE,
            "/authors/OL34184A.json": {"name": ["Roald Dahl"]},
        })
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("9780140328721", client)

    async def test_unresolvable_author_raises_upstream_error(self) -> None:
        client = make_client({"/isbn/9780140328721.json": ISBN_RESPONSE})
        with pytest.raises(UpstreamError):
            await fetch_book_metadata("9780140328721", client)


class TestOpenLibraryCatalog:
    async def test_fetch_uses_injected_client(self) -> None:
        client = make_client({
            "/isbn/9780140328721.json": ISBN_RESPONSE,
            "/authors/OL34184A.json": AUTHOR_RESPONSE,
        })
        catalog = OpenLibraryCatalog(client)
        metadata = await catalog.fetch("9780140328721")
        assert metadata.title == "Matilda"
