import json
import logging
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_origins(value: object) -> List[str]:
    """Accept a JSON array or a comma separated string of CORS origins."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    text = str(value).strip()
    if text.startswith("["):
        return split_origins(json.loads(text))
    return [item.strip() for item in text.split(",") if item.strip()]


class Settings(BaseSettings):
    app_name: str = "Call Spending Report"
    environment: str = "development"
    database_url: str = "sqlite:///./callspend.db"
    header_rows: int = 7
    default_page_size: int = 100
    pool_size: int = 5
    pool_timeout_seconds: float = 30.0
    cors_origins: List[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_parse_json=False,
    )

    @field_validator("cors_origins", mode="before")
    def parse_cors_origins(cls, value: object) -> List[str]:
        return split_origins(value)

    @field_validator("log_level", mode="before")
    def normalize_log_level(cls, value: object) -> str:
        return str(value or "INFO").upper()


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
