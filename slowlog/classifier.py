"""Threshold classification of took times into slow log severities."""

from slowlog.config import ConfigSnapshot
from slowlog.severity import SEVERITIES, Severity


def exceeds(took_nanos: int, threshold: int) -> bool:
    """True if the threshold is enabled and took_nanos is strictly above it."""
    return threshold >= 0 and took_nanos > threshold


def classify(took_nanos: int, snapshot: ConfigSnapshot) -> Severity | None:
    """Return the severity to log at, or None.

    Thresholds are checked WARN, INFO, DEBUG, TRACE and the first one exceeded
    wins, whatever the values of the others. Thresholds need not be monotonic.
    """
    for severity in SEVERITIES:
        if exceeds(took_nanos, snapshot.threshold_for(severity)):
            return severity
    return None
