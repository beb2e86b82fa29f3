import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PAGE_SIZE = 20


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class SearchResult(CamelModel):
    id: str
    title: str = ""
    authors: list[str] = []
    first_publish_year: int | None = None
    cover_id: int | None = None
    isbns: list[str] | None = None


class ResultPage(CamelModel):
    results: list[SearchResult] = []
    num_found: int = 0


class FavoriteEntry(CamelModel):
    id: str
    title: str = ""
    authors: list[str] = []
    cover_id: int | None = None

    @classmethod
    def from_result(cls, result: "SearchResult | FavoriteEntry") -> "FavoriteEntry":
        return cls(
            id=result.id,
            title=result.title,
            authors=list(result.authors),
            cover_id=result.cover_id,
        )


class FavoriteAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"

    @property
    def message(self) -> str:
        if self is FavoriteAction.ADDED:
            return "Added to favorites!"
        return "Removed from favorites"


class SearchPhase(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    RESULTS = "results"
    EMPTY = "empty"


class SearchState(CamelModel):
    query: str = ""
    page: int = 1
    results: list[SearchResult] = []
    num_found: int = 0
    loading: bool = False
    error: str | None = None

    @property
    def phase(self) -> SearchPhase:
        if self.loading:
            return SearchPhase.LOADING
        if self.error is not None:
            return SearchPhase.ERROR
        if self.results:
            return SearchPhase.RESULTS
        return SearchPhase.EMPTY

    @property
    def total_pages(self) -> int:
        return math.ceil(self.num_found / PAGE_SIZE)


class BookView(SearchResult):
    cover_url: str | None = None
    is_favorite: bool = False


class SearchView(CamelModel):
    query: str
    page: int
    results: list[BookView] = []
    num_found: int = 0
    total_pages: int = 0
    loading: bool = False
    error: str | None = None
    phase: SearchPhase


class FavoriteView(FavoriteEntry):
    cover_url: str | None = None


class QueryTextRequest(CamelModel):
    text: str


class PageRequest(CamelModel):
    page: int = Field(ge=1)


class ToggleFavoriteRequest(CamelModel):
    id: str


class ToggleFavoriteResponse(CamelModel):
    action: FavoriteAction
    message: str
    is_favorite: bool


class HealthResponse(CamelModel):
    status: str
    version: str
