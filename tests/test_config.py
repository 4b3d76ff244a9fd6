from __future__ import annotations

from pathlib import Path

import pytest

from post_scraper.config import load_config

ENV_VARS = (
    "SCRAPER_BASE_URL",
    "SCRAPER_CRON_SCHEDULE",
    "SCRAPER_RUN_ON_START",
    "HTTP_TIMEOUT_SECONDS",
    "CRAWL_MAX_STEPS",
    "SCRAPER_ENTRY_SELECTOR",
    "API_ENABLED",
    "API_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DB_PATH", str(tmp_path / "data" / "posts.db"))


def test_defaults(tmp_path: Path) -> None:
    config = load_config()
    assert config.scraper.base_url == "https://thecodinglove.com"
    assert config.scraper.cron_schedule == "*/30 * * * *"
    assert config.scraper.max_steps == 10000
    assert config.scraper.selectors.entry == ".post"
    assert config.api.port == 8080
    assert config.database.url == f"sqlite+aiosqlite:///{tmp_path / 'data' / 'posts.db'}"
    assert (tmp_path / "data").is_dir()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCRAPER_BASE_URL", "https://example.org/blog/")
    monkeypatch.setenv("SCRAPER_CRON_SCHEDULE", "0 * * * *")
    monkeypatch.setenv("SCRAPER_RUN_ON_START", "no")
    monkeypatch.setenv("CRAWL_MAX_STEPS", "0")
    monkeypatch.setenv("API_ENABLED", "false")
    config = load_config()
    assert config.scraper.base_url == "https://example.org/blog"
    assert config.scraper.cron_schedule == "0 * * * *"
    assert config.scraper.run_on_start is False
    assert config.scraper.max_steps == 0
    assert config.api.enabled is False


def test_invalid_integer_names_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "ten")
    with pytest.raises(ValueError, match="HTTP_TIMEOUT_SECONDS"):
        load_config()


def test_negative_step_budget_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRAWL_MAX_STEPS", "-1")
    with pytest.raises(ValueError, match="CRAWL_MAX_STEPS"):
        load_config()
