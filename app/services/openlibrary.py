import logging
from typing import Any

import httpx

from app.config import settings
from app.interfaces.book_search import (
    GENERIC_SEARCH_ERROR,
    BookSearchClient,
    SearchError,
)
from app.models import PAGE_SIZE, FavoriteEntry, ResultPage, SearchResult

logger = logging.getLogger(__name__)


class OpenLibraryClient(BookSearchClient):
    """Title search against the Open Library ``search.json`` endpoint."""

    PAGE_SIZE = PAGE_SIZE

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        covers_url: str | None = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or settings.openlibrary_base_url).rstrip("/")
        self._covers_url = (covers_url or settings.covers_base_url).rstrip("/")

    @classmethod
    def build_params(cls, title: str, page: int = 1) -> dict[str, str | int]:
        return {
            "title": title,
            "limit": cls.PAGE_SIZE,
            "offset": (page - 1) * cls.PAGE_SIZE,
        }

    async def search(self, title: str, page: int = 1) -> ResultPage:
        params = self.build_params(title, page)
        logger.info("Searching Open Library: %r (page=%d)", title, page)
        if self._client is not None:
            response = await self._get(self._client, params)
        else:
            async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
                response = await self._get(client, params)

        if not response.is_success:
            raise SearchError(f"API error: {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise SearchError(f"Malformed response from search API: {e}") from e
        return _build_result_page(data)

    async def _get(
        self, client: httpx.AsyncClient, params: dict[str, str | int]
    ) -> httpx.Response:
        try:
            return await client.get(
                f"{self._base_url}/search.json",
                params=params,
                headers={"User-Agent": settings.user_agent},
            )
        except httpx.HTTPError as e:
            raise SearchError(str(e) or GENERIC_SEARCH_ERROR) from e

    def cover_url(
        self, item: SearchResult | FavoriteEntry, size: str = "M"
    ) -> str | None:
        if item.cover_id is not None:
            return f"{self._covers_url}/id/{item.cover_id}-{size}.jpg"
        isbns = getattr(item, "isbns", None)
        if isbns:
            return f"{self._covers_url}/isbn/{isbns[0]}-{size}.jpg"
        return None


def _build_result_page(data: Any) -> ResultPage:
    if not isinstance(data, dict):
        return ResultPage()

    docs = data.get("docs")
    if not isinstance(docs, list):
        docs = []
    results = [r for r in (_doc_to_result(doc) for doc in docs) if r is not None]

    num_found = data.get("numFound")
    if not isinstance(num_found, int) or isinstance(num_found, bool):
        num_found = 0
    return ResultPage(results=results, num_found=num_found)


def _doc_to_result(doc: Any) -> SearchResult | None:
    if not isinstance(doc, dict) or not doc.get("key"):
        logger.warning("Skipping search doc without a key: %r", doc)
        return None

    return SearchResult(
        id=str(doc["key"]),
        title=_str_or(doc.get("title"), ""),
        authors=_str_items(doc.get("author_name")) or [],
        first_publish_year=_int_or_none(doc.get("first_publish_year")),
        cover_id=_int_or_none(doc.get("cover_i")) or None,
        isbns=_str_items(doc.get("isbn")),
    )


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _str_items(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
