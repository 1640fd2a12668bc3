from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # App
    app_env: str = Field(default="development")
    log_level: str = Field(default="info")

    # Reddit upstream
    reddit_base_url: str = Field(default="https://www.reddit.com")
    reddit_user_agent: str = Field(default="PetPalBackend/1.0")
    reddit_timeout_seconds: float = Field(default=10.0)

    # Forum feed
    default_subreddit: str = Field(default="pets")
    reddit_cache_ttl_seconds: int = Field(default=300)
    # Share one upstream fetch between concurrent misses on the same key
    reddit_dedupe_inflight: bool = Field(default=True)

    # Cache maintenance (seconds)
    cache_sweep_interval_seconds: int = Field(default=60)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
