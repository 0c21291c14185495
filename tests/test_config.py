import logging
from pathlib import Path

import click
import pytest

from sundown.config import LOG_HANDLER_NAME, AppConfig, configure_logging
from sundown.notifications import DesktopNotificationService, WebhookNotificationService


@pytest.fixture
def sundown_logger():
    logger = logging.getLogger("sundown")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)


def test_configure_logging_adds_one_named_handler(sundown_logger: logging.Logger) -> None:
    configure_logging()
    configure_logging(verbose=True)

    named = [h for h in sundown_logger.handlers if h.get_name() == LOG_HANDLER_NAME]
    assert len(named) == 1
    assert sundown_logger.level == logging.DEBUG


def test_configure_logging_default_level(sundown_logger: logging.Logger) -> None:
    configure_logging()
    assert sundown_logger.level == logging.INFO


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SUNDOWN_DB", str(tmp_path / "x.db"))
    monkeypatch.setenv("SUNDOWN_TZ", "UTC")
    monkeypatch.setenv("SUNDOWN_VERBOSE", "true")
    monkeypatch.setenv("SUNDOWN_WEBHOOK_URL", "http://hooks.local/sundown")

    config = AppConfig.from_env()

    assert config.db_path == tmp_path / "x.db"
    assert config.tz_name == "UTC"
    assert config.verbose is True
    assert isinstance(config.notification_service(), WebhookNotificationService)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SUNDOWN_DB", "SUNDOWN_TZ", "SUNDOWN_VERBOSE", "SUNDOWN_WEBHOOK_URL"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig.from_env()

    assert config.db_path.name == "sundown.db"
    assert config.tz is None
    assert config.verbose is False
    assert isinstance(config.notification_service(), DesktopNotificationService)


def test_unknown_timezone_raises_click_error(tmp_path: Path) -> None:
    with pytest.raises(click.ClickException, match="Unknown timezone"):
        AppConfig(db_path=tmp_path / "x.db", tz_name="Mars/Olympus").tz
