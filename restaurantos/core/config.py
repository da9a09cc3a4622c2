import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Prefer .env.production if present, else default .env
if os.path.exists(".env.production"):
    load_dotenv(".env.production")
else:
    load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./restaurantos.db"
    sql_echo: bool = False
    create_tables_on_startup: bool = True

    # Auth (fastapi-users JWT)
    auth_secret: str = "restaurantos-dev-secret"  # 🔐 override in production
    jwt_lifetime_seconds: int = 3600
    jwt_audience: str = "fastapi-users:auth"

    # Realtime
    redis_url: Optional[str] = None
    sse_keepalive_seconds: int = 15
    subscriber_queue_size: int = 100

    # DigitalOcean Spaces
    do_spaces_key: Optional[str] = None
    do_spaces_secret: Optional[str] = None
    do_spaces_region: str = "nyc3"
    do_spaces_bucket: Optional[str] = None
    do_spaces_endpoint: Optional[str] = None  # e.g. https://nyc3.digitaloceanspaces.com
    do_spaces_cdn_base: Optional[str] = None  # e.g. https://<bucket>.nyc3.cdn.digitaloceanspaces.com
    do_spaces_prefix: str = "prod"
    max_image_bytes: int = 5 * 1024 * 1024

    # Kitchen timing (minutes)
    estimate_buffer_minutes: int = 5
    default_prep_minutes: int = 15
    default_estimate_minutes: int = 20
    critical_overdue_minutes: int = 10

    # Table occupancy compensation
    occupancy_retry_interval_seconds: int = 0
    occupancy_retry_max_attempts: int = 5

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
