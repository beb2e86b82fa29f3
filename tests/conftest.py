import asyncio

import httpx
import pytest

from app.interfaces.book_search import BookSearchClient
from app.interfaces.storage import KeyValueStore
from app.models import FavoriteEntry, ResultPage, SearchResult


class MockBookSearchClient(BookSearchClient):
    """Records calls; each call can be held open until released by the test."""

    def __init__(
        self,
        page: ResultPage | None = None,
        error: Exception | None = None,
        hold: bool = False,
    ):
        self._page = page or ResultPage()
        self._error = error
        self._hold = hold
        self.calls: list[tuple[str, int]] = []
        self.gates: list[asyncio.Event] = []
        self.outcomes: dict[int, ResultPage | Exception] = {}
        self.started = asyncio.Event()

    async def search(self, title: str, page: int = 1) -> ResultPage:
        index = len(self.calls)
        self.calls.append((title, page))
        gate = asyncio.Event()
        self.gates.append(gate)
        self.started.set()
        if self._hold:
            await gate.wait()
        outcome = self.outcomes.get(index, self._error or self._page)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def cover_url(
        self, item: SearchResult | FavoriteEntry, size: str = "M"
    ) -> str | None:
        if item.cover_id is not None:
            return f"https://covers.test/id/{item.cover_id}-{size}.jpg"
        return None


class MockKeyValueStore(KeyValueStore):
    def __init__(
        self,
        data: dict[str, str] | None = None,
        read_error: Exception | None = None,
        write_error: Exception | None = None,
    ):
        self.data = dict(data or {})
        self._read_error = read_error
        self._write_error = write_error
        self.writes = 0

    def get(self, key: str) -> str | None:
        if self._read_error:
            raise self._read_error
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._write_error:
            raise self._write_error
        self.writes += 1
        self.data[key] = value


def make_result(n: int, **overrides) -> SearchResult:
    fields = {
        "id": f"/works/OL{n}W",
        "title": f"Book {n}",
        "authors": [f"Author {n}"],
        "cover_id": n,
    }
    fields.update(overrides)
    return SearchResult(**fields)


def mock_transport(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def dune_doc() -> dict:
    return {
        "key": "/works/OL1",
        "title": "Dune",
        "author_name": ["Frank Herbert"],
        "cover_i": 1,
        "first_publish_year": 1965,
    }


@pytest.fixture
def dune_result() -> SearchResult:
    return SearchResult(
        id="/works/OL1",
        title="Dune",
        authors=["Frank Herbert"],
        first_publish_year=1965,
        cover_id=1,
    )


@pytest.fixture
def dune_page(dune_result) -> ResultPage:
    return ResultPage(results=[dune_result], num_found=1)


@pytest.fixture
def sample_results() -> list[SearchResult]:
    return [
        SearchResult(
            id="/works/OL27448W",
            title="The Lord of the Rings",
            authors=["J.R.R. Tolkien"],
            first_publish_year=1954,
            cover_id=14625765,
        ),
        SearchResult(
            id="/works/OL45804W",
            title="Fantastic Mr Fox",
            authors=["Roald Dahl"],
            first_publish_year=1970,
            isbns=["9780142410349", "0142410349"],
        ),
        SearchResult(id="/works/OL99999W", title="Untitled Pamphlet"),
    ]
