"""Duration parsing and rendering for slow log thresholds and took values."""

import re

NANOS_PER_MICRO = 1_000
NANOS_PER_MILLI = 1_000_000
NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MINUTE = 60 * NANOS_PER_SECOND
NANOS_PER_HOUR = 60 * NANOS_PER_MINUTE
NANOS_PER_DAY = 24 * NANOS_PER_HOUR
NANOS_PER_WEEK = 7 * NANOS_PER_DAY

_SUFFIXES = {
    "nanos": 1,
    "micros": NANOS_PER_MICRO,
    "ms": NANOS_PER_MILLI,
    "s": NANOS_PER_SECOND,
    "m": NANOS_PER_MINUTE,
    "h": NANOS_PER_HOUR,
    "d": NANOS_PER_DAY,
    "w": NANOS_PER_WEEK,
}

# Largest unit first; the first unit not larger than the value is used.
_DISPLAY_UNITS = (
    ("d", NANOS_PER_DAY),
    ("h", NANOS_PER_HOUR),
    ("m", NANOS_PER_MINUTE),
    ("s", NANOS_PER_SECOND),
    ("ms", NANOS_PER_MILLI),
    ("micros", NANOS_PER_MICRO),
)

_DURATION_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([a-z]*)$")


def parse_time_value(value) -> int:
    """Parse a duration into nanoseconds.

    Accepts ints/floats (milliseconds) and strings such as "500ms", "1.5s",
    "2m" or "-1". Bare numbers are milliseconds. Negative results are returned
    as-is; callers treat them as "disabled".
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return int(value * NANOS_PER_MILLI)

    text = str(value).strip().lower()
    match = _DURATION_RE.match(text)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    number, suffix = match.groups()
    if not suffix:
        suffix = "ms"
    if suffix not in _SUFFIXES:
        raise ValueError(f"Unknown duration unit {suffix!r} in {value!r}")

    if "." in number:
        return int(float(number) * _SUFFIXES[suffix])
    return int(number) * _SUFFIXES[suffix]


def format_time_value(nanos: int) -> str:
    """Render nanoseconds as e.g. "1.2ms", "300ms" or "2.5s".

    Fractions are rounded half-to-even to one decimal and a zero decimal is
    dropped, so 1.25ms renders as "1.2ms" and 1.99ms as "2ms".
    Negative values are rendered as the raw number.
    """
    if nanos < 0:
        return str(nanos)
    if nanos == 0:
        return "0s"

    for suffix, factor in _DISPLAY_UNITS:
        if nanos >= factor:
            tenths, remainder = divmod(nanos * 10, factor)
            # Round half to even.
            if 2 * remainder > factor or (2 * remainder == factor and tenths % 2):
                tenths += 1
            whole, tenth = divmod(tenths, 10)
            if tenth:
                return f"{whole}.{tenth}{suffix}"
            return f"{whole}{suffix}"
    return f"{nanos}nanos"


def nanos_to_millis(nanos: int) -> int:
    """Whole milliseconds, truncating toward zero."""
    return int(nanos / NANOS_PER_MILLI) if nanos < 0 else nanos // NANOS_PER_MILLI
