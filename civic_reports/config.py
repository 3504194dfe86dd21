from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()

# Hard cap on photos per report; MAX_REPORT_PHOTOS may only lower it.
PHOTO_LIMIT = 3


def _get_config_value(*keys: str, default: str = "") -> str:
    for key in keys:
        value = os.getenv(key, "").strip()
        if value:
            return value
    return default


def _get_flag(*keys: str, default: bool = False) -> bool:
    raw = _get_config_value(*keys, default="1" if default else "0").lower()
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str
    log_level: str
    seed_demo_data: bool
    max_report_photos: int
    event_bus_backend: str
    api_host: str
    api_port: int

    def is_production(self) -> bool:
        return self.app_env in {"prod", "production"}


def load_settings() -> Settings:
    return Settings(
        app_env=_get_config_value("APP_ENV", default="dev").lower(),
        log_level=_get_config_value("LOG_LEVEL", default="INFO").upper(),
        seed_demo_data=_get_flag("SEED_DEMO_DATA", default=False),
        max_report_photos=min(int(_get_config_value("MAX_REPORT_PHOTOS", default="3")), PHOTO_LIMIT),
        event_bus_backend=_get_config_value("EVENT_BUS_BACKEND", default="inmemory").lower(),
        api_host=_get_config_value("API_HOST", default="127.0.0.1"),
        api_port=int(_get_config_value("API_PORT", default="8000")),
    )


settings = load_settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
