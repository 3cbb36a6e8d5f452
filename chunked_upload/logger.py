"""Logger configuration for uploaders.

An uploader reports on three channels: debug, info and error. Each channel can
be pointed at its own stream or switched off.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, TextIO

LOG_FORMAT = "%(levelname)s\t%(asctime)s %(message)s"


class _LevelRangeFilter(logging.Filter):
    """Pass records whose level lies in ``[low, high]``."""

    def __init__(self, low: int, high: int):
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record: logging.LogRecord) -> bool:
        return self.low <= record.levelno <= self.high


@dataclass
class LoggerConfig:
    """Where each log channel is written.

    Attributes:
        debug_sink: Stream for debug records (default: discarded)
        info_sink: Stream for info and warning records (default: stdout)
        error_sink: Stream for error records (default: stderr)
        name: Logger name shown in records

    Example:
        >>> config = LoggerConfig(debug_sink=sys.stderr)
        >>> logger = config.build()
        >>> logger.debug("visible now")
    """

    debug_sink: Optional[TextIO] = None
    info_sink: Optional[TextIO] = field(default_factory=lambda: sys.stdout)
    error_sink: Optional[TextIO] = field(default_factory=lambda: sys.stderr)
    name: str = "chunked_upload"

    def build(self) -> logging.Logger:
        """Create a logger writing to the configured sinks.

        The logger is not registered with the logging module and does not
        propagate to the root logger, so every uploader can have its own.
        """
        logger = logging.Logger(self.name)
        logger.propagate = False
        logger.setLevel(logging.DEBUG if self.debug_sink is not None else logging.INFO)

        channels = [
            (self.debug_sink, logging.DEBUG, logging.DEBUG),
            (self.info_sink, logging.INFO, logging.WARNING),
            (self.error_sink, logging.ERROR, logging.CRITICAL),
        ]
        formatter = logging.Formatter(LOG_FORMAT)
        for sink, low, high in channels:
            if sink is None:
                continue
            handler = logging.StreamHandler(sink)
            handler.setFormatter(formatter)
            handler.addFilter(_LevelRangeFilter(low, high))
            logger.addHandler(handler)

        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        return logger
