import logging

import pytest

from tsieve.logger import SieveLogFormatter, get_logger, resolve_level, set_log_level


@pytest.mark.parametrize("value,expected", [
    ("debug", logging.DEBUG),
    (" WARNING ", logging.WARNING),
    ("verbose", logging.INFO),
    (None, logging.INFO),
])
def test_resolve_level(value, expected):
    assert resolve_level(value) == expected


def test_logger_named_after_module():
    assert get_logger("tsieve.reichenbach_sieve").name == "reichenbach_sieve"


def test_set_log_level():
    root = logging.getLogger()
    previous = root.level
    try:
        set_log_level("DEBUG")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_formatter_keeps_message():
    record = logging.LogRecord("sieve", logging.ERROR, __file__, 1, "no parse for %s", ("wsj_0001",), None)
    assert "no parse for wsj_0001" in SieveLogFormatter("%(message)s").format(record)
