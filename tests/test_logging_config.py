import logging

import pytest

from geocoin.logging_config import LOG_LEVEL_ENV, configure_logging, resolve_log_level


@pytest.fixture(autouse=True)
def _restore_package_level():
    package_logger = logging.getLogger("geocoin")
    before = package_logger.level
    yield
    package_logger.setLevel(before)


def test_debug_flag_wins_over_environment():
    assert resolve_log_level(debug=True, environ={LOG_LEVEL_ENV: "error"}) == logging.DEBUG


@pytest.mark.parametrize(
    "value,expected",
    [("info", logging.INFO), ("ERROR", logging.ERROR), ("15", 15), ("", logging.WARNING)],
)
def test_environment_override(value, expected):
    assert resolve_log_level(environ={LOG_LEVEL_ENV: value}) == expected


def test_unknown_level_name_falls_back(caplog):
    with caplog.at_level(logging.WARNING):
        level = resolve_log_level(default_level=logging.INFO, environ={LOG_LEVEL_ENV: "chatty"})
    assert level == logging.INFO
    assert "chatty" in caplog.text


def test_configure_sets_package_logger_level(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "info")
    assert configure_logging() == logging.INFO
    assert logging.getLogger("geocoin").level == logging.INFO
    assert configure_logging(debug=True) == logging.DEBUG
    assert logging.getLogger("geocoin.cache").getEffectiveLevel() == logging.DEBUG
