import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException

from app.config import settings
from app.interfaces.book_search import BookSearchClient
from app.models import (
    BookView,
    FavoriteView,
    HealthResponse,
    PageRequest,
    QueryTextRequest,
    SearchState,
    SearchView,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
)
from app.services.favorites import FavoritesStore
from app.services.openlibrary import OpenLibraryClient
from app.services.query_controller import QueryController
from app.stores.json_file_store import JsonFileStore

VERSION = "0.1.0"

search_client: BookSearchClient | None = None
controller: QueryController | None = None
favorites: FavoritesStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global search_client, controller, favorites
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    async with httpx.AsyncClient(timeout=settings.request_timeout) as http_client:
        search_client = OpenLibraryClient(http_client)
        controller = QueryController(search_client)
        favorites = FavoritesStore(JsonFileStore(settings.favorites_path))
        yield
        await controller.aclose()
    search_client = controller = favorites = None


app = FastAPI(title="BookFinder", version=VERSION, lifespan=lifespan)


def _search_view(state: SearchState) -> SearchView:
    assert search_client is not None and favorites is not None
    return SearchView(
        query=state.query,
        page=state.page,
        results=[
            BookView(
                **result.model_dump(by_alias=False),
                cover_url=search_client.cover_url(result),
                is_favorite=favorites.is_favorite(result.id),
            )
            for result in state.results
        ],
        num_found=state.num_found,
        total_pages=state.total_pages,
        loading=state.loading,
        error=state.error,
        phase=state.phase,
    )


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="healthy", version=VERSION)


@app.get("/search", response_model=SearchView)
async def get_search():
    assert controller is not None
    return _search_view(controller.state)


@app.put("/search/query", response_model=SearchView)
async def set_query(request: QueryTextRequest):
    assert controller is not None
    controller.set_query_text(request.text)
    return _search_view(controller.state)


@app.post("/search/submit", response_model=SearchView)
async def submit_search():
    assert controller is not None
    controller.submit()
    return _search_view(controller.state)


@app.put("/search/page", response_model=SearchView)
async def set_page(request: PageRequest):
    assert controller is not None
    controller.set_page(request.page)
    return _search_view(controller.state)


@app.get("/favorites", response_model=list[FavoriteView])
async def list_favorites():
    assert search_client is not None and favorites is not None
    return [
        FavoriteView(
            **entry.model_dump(by_alias=False),
            cover_url=search_client.cover_url(entry, size="S"),
        )
        for entry in favorites.favorites
    ]


@app.post("/favorites/toggle", response_model=ToggleFavoriteResponse)
async def toggle_favorite(request: ToggleFavoriteRequest):
    assert controller is not None and favorites is not None
    item = next(
        (r for r in controller.state.results if r.id == request.id), None
    ) or favorites.get(request.id)
    if item is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown book: {request.id}. Search for it before saving.",
        )

    action = favorites.toggle_favorite(item)
    return ToggleFavoriteResponse(
        action=action,
        message=action.message,
        is_favorite=favorites.is_favorite(request.id),
    )
