"""Logging configuration and the startup-installed noise filter."""

import logging
from typing import Iterable, Optional

from brand_equity.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class SubstringFilter(logging.Filter):
    """Drop records whose rendered message contains any configured substring."""

    def __init__(self, patterns: Iterable[str]) -> None:
        super().__init__()
        self.patterns = tuple(p for p in patterns if p)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.patterns:
            return True
        message = record.getMessage()
        return not any(pattern in message for pattern in self.patterns)


def configure_logging(settings: Settings, root: Optional[logging.Logger] = None) -> Optional[SubstringFilter]:
    """Configure the root logger once and attach the suppression filter to its handlers."""
    root = root or logging.getLogger()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    root.setLevel(settings.log_level)

    if not settings.log_suppress:
        return None

    noise_filter = SubstringFilter(settings.log_suppress)
    for handler in root.handlers:
        handler.addFilter(noise_filter)
    return noise_filter
