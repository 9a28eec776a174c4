"""Slow log severities and their mapping onto stdlib logging levels."""

import logging
from enum import Enum

TRACE = 5

if logging.getLevelName(TRACE) != "TRACE":
    logging.addLevelName(TRACE, "TRACE")


class Severity(Enum):
    """Slow log severity, most urgent first."""

    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    TRACE = TRACE

    @property
    def level(self) -> int:
        return self.value

    @classmethod
    def parse(cls, value) -> "Severity":
        """Resolve a severity from a name such as "warn" or " Debug "."""
        if isinstance(value, Severity):
            return value
        normalized = str(value).strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        try:
            return cls[normalized]
        except KeyError:
            raise ValueError(f"Unknown slow log level: {value!r}") from None


# Cascade order used by the classifier.
SEVERITIES = (Severity.WARN, Severity.INFO, Severity.DEBUG, Severity.TRACE)
