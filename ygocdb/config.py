from pathlib import Path

from platformdirs import user_cache_dir, user_data_dir
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_ID = "dev.ihex.ygocdb"


def _default_data_dir() -> Path:
    return Path(user_data_dir("ygocdb"))


def _default_image_cache_dir() -> Path:
    return Path(user_cache_dir("ygocdb")) / "CardImages"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="YGOCDB_")

    app_name: str = "ygocdb"
    app_version: str = "0.1.0"
    debug: bool = False

    api_base_url: str = "https://ygocdb.com/api/v0"
    image_cdn_url: str = "https://cdn.233.momobako.com"
    pre_release_url: str = "https://cdntx.moecube.com/ygopro-super-pre/data/test-release-v2.json"

    data_dir: Path = Field(default_factory=_default_data_dir)
    image_cache_dir: Path = Field(default_factory=_default_image_cache_dir)

    # Seconds. The bulk archive gets the extended timeout.
    request_timeout: float = 60.0
    bulk_timeout: float = 300.0

    max_concurrent_downloads: int = 6
    memory_cache_max_entries: int = 200
    memory_cache_max_bytes: int = 100 * 1024 * 1024

    download_max_retries: int = 2
    download_backoff_base: float = 0.1

    # Progress callbacks fire once per this many received bytes
    progress_interval_bytes: int = 50_000

    @property
    def user_agent(self) -> str:
        return f"{self.app_name}/{self.app_version} (python; {APP_ID})"


settings = Settings()
