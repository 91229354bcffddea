# startup configuration and logging setup
# settings are read once and injected, nothing else in the package reads os.environ

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

API_KEY_ENV = "WEATHERAPI_KEY"
DEFAULT_BASE_URL = "https://api.weatherapi.com/v1"
DEFAULT_USER_AGENT = "weather-widget/0.1"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    # None leaves the transport default in place
    timeout: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "Settings":
        # in production the key is injected by the environment, .env is a local convenience
        load_dotenv()
        # an empty value counts as missing
        return cls(api_key=os.getenv(API_KEY_ENV) or None)


def setup_logging(level: str = "WARNING") -> None:
    root = logging.getLogger()
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level!r}")
    root.setLevel(numeric)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    # connection pool chatter is noise at debug level
    logging.getLogger("urllib3").setLevel(logging.WARNING)
