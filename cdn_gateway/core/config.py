from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "artistpro-cdn"
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8787
    log_level: str = "INFO"

    signing_secret: str = "change-me"

    default_folder: str = "uploads"
    temp_url_ttl_seconds: int = 3600
    max_temp_url_ttl_seconds: int | None = None

    public_base_url: str = ""  # e.g. "https://cdn.artistpro.me"; empty means derive from the request

    # Storage backend: "local", "memory" or "oss"
    storage_backend: str = "local"
    local_storage_dir: str = "uploads"

    oss_endpoint: str = ""
    oss_bucket_name: str = ""
    oss_access_key_id: str = ""
    oss_access_key_secret: str = ""
    oss_prefix: str = ""

    # Upload-from-URL limits; None means unbounded
    remote_fetch_timeout_seconds: float | None = None
    remote_fetch_max_bytes: int | None = None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    def has_placeholder_secret(self) -> bool:
        return self.signing_secret in ("", "change-me")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
