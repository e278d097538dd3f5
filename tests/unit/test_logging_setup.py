from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from src.mediahub.config import MediaSettings
from src.mediahub.logging import QUIET_LOGGERS, configure_logging, resolve_level
from src.mediahub.services.container import build_media_service

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_logger_levels() -> Iterator[None]:
    names = ("src.mediahub", *QUIET_LOGGERS)
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)
    structlog.reset_defaults()


def test_configure_logging_installs_json_renderer() -> None:
    configure_logging(MediaSettings().log_level)

    processors = structlog.get_config()["processors"]

    assert any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), (logging.ERROR, logging.ERROR)],
)
def test_resolve_level(level: str | int, expected: int) -> None:
    assert resolve_level(level) == expected


def test_resolve_level_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_configure_logging_keeps_transport_loggers_quiet() -> None:
    assert configure_logging("DEBUG") == logging.DEBUG

    assert logging.getLogger("src.mediahub").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_build_media_service_applies_configured_level() -> None:
    settings = MediaSettings(
        bucket="photos",
        storage_base_url="https://cdn.example.com",
        log_level="ERROR",
    )

    build_media_service(settings)

    assert logging.getLogger("src.mediahub").level == logging.ERROR
    assert logging.getLogger("urllib3").level == logging.ERROR
