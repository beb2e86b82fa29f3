import logging
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError

from app.config import settings
from app.interfaces.storage import KeyValueStore
from app.models import FavoriteAction, FavoriteEntry, SearchResult

logger = logging.getLogger(__name__)

FavoritesListener = Callable[[FavoriteAction, FavoriteEntry], None]

_entries_adapter = TypeAdapter(list[FavoriteEntry])


class FavoritesStore:
    """Bounded, deduplicated bookmark list persisted to a key-value store.

    Entries are kept newest first. The whole list is written back under a
    single key after every mutation; a failed write is logged and the
    in-memory list stays authoritative for the rest of the session.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: str | None = None,
        limit: int | None = None,
    ) -> None:
        self._storage = storage
        self._key = settings.favorites_key if key is None else key
        self._limit = settings.favorites_limit if limit is None else limit
        self._listeners: list[FavoritesListener] = []
        self._entries = self._load()

    @property
    def favorites(self) -> list[FavoriteEntry]:
        return [entry.model_copy(deep=True) for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, item_id: str) -> FavoriteEntry | None:
        for entry in self._entries:
            if entry.id == item_id:
                return entry.model_copy(deep=True)
        return None

    def is_favorite(self, item_id: str) -> bool:
        return any(entry.id == item_id for entry in self._entries)

    def toggle_favorite(self, item: SearchResult | FavoriteEntry) -> FavoriteAction:
        existing = self.get(item.id)
        if existing is not None:
            self._entries = [e for e in self._entries if e.id != item.id]
            action, entry = FavoriteAction.REMOVED, existing
        else:
            entry = FavoriteEntry.from_result(item)
            self._entries = [entry, *self._entries][: self._limit]
            action = FavoriteAction.ADDED

        logger.info("Favorite %s: %s", action.value, item.id)
        self._persist()
        self._notify(action, entry)
        return action

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dumps(self) -> str:
        return _entries_adapter.dump_json(self._entries, by_alias=True).decode("utf-8")

    @staticmethod
    def loads(raw: str | None) -> list[FavoriteEntry]:
        """Parse a serialized favorites list; anything unreadable is empty."""
        if not raw:
            return []
        try:
            entries = _entries_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt favorites data: %s", e)
            return []

        seen: set[str] = set()
        unique = []
        for entry in entries:
            if entry.id not in seen:
                seen.add(entry.id)
                unique.append(entry)
        return unique

    def _load(self) -> list[FavoriteEntry]:
        try:
            raw = self._storage.get(self._key)
        except Exception as e:
            logger.warning("Could not read favorites from storage: %s", e)
            return []
        return self.loads(raw)[: self._limit]

    def _persist(self) -> None:
        try:
            self._storage.set(self._key, self.dumps())
        except Exception as e:
            logger.warning("Could not persist favorites: %s", e)

    def _notify(self, action: FavoriteAction, entry: FavoriteEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(action, entry.model_copy(deep=True))
            except Exception:
                logger.exception("Favorites listener %r failed", listener)
