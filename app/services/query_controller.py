"""Search-request lifecycle: debounce, cancel, fetch, commit-or-discard.

Every text or page change bumps a generation counter and replaces the single
pending task. The task sleeps for the debounce interval, then issues one
search; its outcome is committed only if the generation is still the one it
started under. Superseded tasks are cancelled, so their responses are never
applied to :class:`SearchState`.
"""

import asyncio
import logging
from collections.abc import Callable

from app.config import settings
from app.interfaces.book_search import GENERIC_SEARCH_ERROR, BookSearchClient
from app.models import SearchState

logger = logging.getLogger(__name__)

StateListener = Callable[[SearchState], None]


class QueryController:
    def __init__(
        self,
        search_client: BookSearchClient,
        debounce_seconds: float | None = None,
    ) -> None:
        self._search = search_client
        self._debounce = (
            settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._state = SearchState()
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> SearchState:
        return self._state.model_copy(deep=True)

    def set_query_text(self, text: str) -> None:
        self._state.query = text
        self._state.page = 1
        self._evaluate()

    def submit(self) -> None:
        self._state.page = 1
        self._evaluate()

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        self._state.page = page
        self._evaluate()

    async def execute_search(self, text: str, page: int = 1) -> None:
        generation = self._generation
        try:
            result_page = await self._search.search(text, page)
        except asyncio.CancelledError:
            logger.debug("Search for %r (page=%d) cancelled", text, page)
            raise
        except Exception as e:
            if generation != self._generation:
                return
            message = str(e) or GENERIC_SEARCH_ERROR
            logger.warning("Search for %r (page=%d) failed: %s", text, page, message)
            self._state.error = message
            self._state.loading = False
            self._notify()
            return

        if generation != self._generation:
            logger.debug("Discarding stale response for %r (page=%d)", text, page)
            return
        self._state.results = result_page.results
        self._state.num_found = result_page.num_found
        self._state.error = None
        self._state.loading = False
        self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_idle(self) -> None:
        """Wait until the pending debounce and request, if any, have finished."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def aclose(self) -> None:
        self._generation += 1
        task = self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    def _evaluate(self) -> None:
        self._cancel_pending()
        self._generation += 1

        text = self._state.query.strip()
        if not text:
            self._state.results = []
            self._state.num_found = 0
            self._state.error = None
            self._state.loading = False
            self._notify()
            return

        self._state.loading = True
        self._state.error = None
        self._task = asyncio.get_running_loop().create_task(
            self._debounce_then_search(self._generation, text, self._state.page)
        )
        self._notify()

    async def _debounce_then_search(self, generation: int, text: str, page: int) -> None:
        await asyncio.sleep(self._debounce)
        if generation != self._generation:
            return
        await self.execute_search(text, page)

    def _cancel_pending(self) -> asyncio.Task[None] | None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Search state listener %r failed", listener)
