import logging

from brand_equity.core.config import Settings
from brand_equity.core.logging_setup import SubstringFilter, configure_logging


def _record(message):
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


def test_substring_filter_drops_matching_records():
    noise = SubstringFilter(["heartbeat", ""])

    assert noise.patterns == ("heartbeat",)
    assert noise.filter(_record("worker heartbeat ok")) is False
    assert noise.filter(_record("competitor search done")) is True


def test_configure_logging_attaches_filter_to_root_handlers():
    root = logging.Logger("isolated-root")
    handler = logging.StreamHandler()
    root.addHandler(handler)

    installed = configure_logging(Settings(log_level="DEBUG", log_suppress=("noise",)), root=root)

    assert installed in handler.filters
    assert root.level == logging.DEBUG


def test_configure_logging_without_patterns_installs_nothing():
    root = logging.Logger("isolated-root-2")
    root.addHandler(logging.StreamHandler())

    assert configure_logging(Settings(), root=root) is None
    assert root.handlers[0].filters == []
