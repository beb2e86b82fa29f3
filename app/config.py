from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openlibrary_base_url: str = "https://openlibrary.org"
    covers_base_url: str = "https://covers.openlibrary.org/b"
    # Open Library asks API consumers to identify themselves.
    user_agent: str = "BookFinder/0.1.0"

    # Quiet period after the last keystroke before a search is issued.
    debounce_seconds: float = 0.35
    # None disables the timeout; stale requests are cancelled instead.
    request_timeout: float | None = None

    favorites_path: str = "favorites.json"
    favorites_key: str = "bf:favs"
    favorites_limit: int = 100

    log_level: str = "INFO"


settings = Settings()
