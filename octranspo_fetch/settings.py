from pydantic_settings import BaseSettings, SettingsConfigDict

from octranspo_fetch.api.gateway import OCT_BASE, OCT_REQUEST_TIMEOUT_SECONDS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OCTRANSPO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    application_id: str = ""  # assigned by OC Transpo (octranspo.com/developers)
    application_key: str = ""
    base_url: str = OCT_BASE
    request_timeout_seconds: float = OCT_REQUEST_TIMEOUT_SECONDS

    route_cache_size: int = 100
    trip_cache_size: int = 100
    # Route lists change rarely; arrival estimates go stale within minutes.
    route_summary_max_age_seconds: float = 86400
    next_trips_max_age_seconds: float = 300


def get_settings() -> Settings:
    return Settings()
