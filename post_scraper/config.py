from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value}")


@dataclass(slots=True)
class DatabaseConfig:
    path: Path

    @property
    def url(self) -> str:
        return f"sqlite+aiosqlite:///{self.path}"


@dataclass(slots=True)
class EntrySelectors:
    entry: str = ".post"
    title: str = "h3"
    image: str = "img"
    # Byline: first <i> nested in a <p>
    author: str = "p i"


@dataclass(slots=True)
class ScraperConfig:
    base_url: str
    cron_schedule: str
    http_timeout_seconds: int = 10
    # Upper bound on loop iterations per crawl; 0 disables it
    max_steps: int = 10000
    run_on_start: bool = True
    selectors: EntrySelectors = field(default_factory=EntrySelectors)


@dataclass(slots=True)
class ApiConfig:
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(slots=True)
class LoggingConfig:
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    timezone: str = field(default_factory=lambda: os.getenv("TZ", "UTC"))


@dataclass(slots=True)
class AppConfig:
    database: DatabaseConfig
    scraper: ScraperConfig
    api: ApiConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    db_path = Path(os.getenv("DB_PATH", "/data/posts.db"))
    db_path.parent.mkdir(parents=True, exist_ok=True)

    selectors = EntrySelectors(
        entry=os.getenv("SCRAPER_ENTRY_SELECTOR", ".post"),
        title=os.getenv("SCRAPER_TITLE_SELECTOR", "h3"),
        image=os.getenv("SCRAPER_IMAGE_SELECTOR", "img"),
        author=os.getenv("SCRAPER_AUTHOR_SELECTOR", "p i"),
    )

    max_steps = _get_int("CRAWL_MAX_STEPS", 10000)
    if max_steps < 0:
        raise ValueError(f"CRAWL_MAX_STEPS must be >= 0: {max_steps}")

    scraper_config = ScraperConfig(
        base_url=os.getenv("SCRAPER_BASE_URL", "https://thecodinglove.com").rstrip("/"),
        cron_schedule=os.getenv("SCRAPER_CRON_SCHEDULE", "*/30 * * * *").strip(),
        http_timeout_seconds=_get_int("HTTP_TIMEOUT_SECONDS", 10),
        max_steps=max_steps,
        run_on_start=_get_bool("SCRAPER_RUN_ON_START", True),
        selectors=selectors,
    )

    api_config = ApiConfig(
        enabled=_get_bool("API_ENABLED", True),
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=_get_int("API_PORT", 8080),
    )

    return AppConfig(
        database=DatabaseConfig(path=db_path),
        scraper=scraper_config,
        api=api_config,
        logging=LoggingConfig(),
    )
