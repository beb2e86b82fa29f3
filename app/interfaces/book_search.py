from abc import ABC, abstractmethod

from app.models import FavoriteEntry, ResultPage, SearchResult

GENERIC_SEARCH_ERROR = "Something went wrong fetching data"


class SearchError(Exception):
    """A search request failed for a reason other than cancellation."""


class BookSearchClient(ABC):
    @abstractmethod
    async def search(self, title: str, page: int = 1) -> ResultPage:
        ...

    @abstractmethod
    def cover_url(
        self, item: SearchResult | FavoriteEntry, size: str = "M"
    ) -> str | None:
        ...
