"""Slow log line formatting with re-encoded document source."""

import json
import logging

import yaml

from slowlog.models import Operation
from slowlog.units import format_time_value, nanos_to_millis

logger = logging.getLogger(__name__)

FAILED_TO_CONVERT = "_failed_to_convert_"

_JSON_STARTS = (b"{", b"[")
_YAML_START = b"---"


class SourceConversionError(ValueError):
    """Raised when a source payload cannot be re-encoded as JSON text."""


def detect_content_type(source: bytes) -> str | None:
    """Sniff "json" or "yaml" from the leading bytes of a payload."""
    head = source.lstrip()
    if head.startswith(_JSON_STARTS):
        return "json"
    if head.startswith(_YAML_START):
        return "yaml"
    return None


def convert_source(source: bytes, reformat: bool) -> str:
    """Re-encode a JSON or YAML payload as JSON text.

    Pretty-printed with a two-space indent when reformat is set, compact
    otherwise.
    """
    try:
        source = bytes(source)
    except TypeError as e:
        raise SourceConversionError(str(e)) from e
    content_type = detect_content_type(source)
    if content_type is None:
        raise SourceConversionError("unrecognized source content type")

    try:
        text = source.decode("utf-8")
        if content_type == "json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
        if reformat:
            return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
        return json.dumps(
            document, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (UnicodeDecodeError, ValueError, TypeError, RecursionError, yaml.YAMLError) as e:
        raise SourceConversionError(str(e)) from e


def _render_source(source: bytes | None, reformat: bool) -> str:
    if not source:
        return ""
    try:
        return convert_source(source, reformat)
    except SourceConversionError as e:
        logger.debug("Failed to convert slow log source: %s", e)
        return FAILED_TO_CONVERT


def _text(value) -> str:
    return "" if value is None else str(value)


def format_record(operation: Operation, took_nanos: int, reformat: bool) -> str:
    """Build the slow log line for a completed operation.

    took[1.2ms], took_millis[1], type[tweet], id[1], routing[], source[{...}]
    """
    parts = [
        f"took[{format_time_value(took_nanos)}]",
        f"took_millis[{nanos_to_millis(took_nanos)}]",
        f"type[{_text(operation.doc_type)}]",
        f"id[{_text(operation.doc_id)}]",
        f"routing[{_text(operation.routing)}]",
        f"source[{_render_source(operation.source, reformat)}]",
    ]
    return ", ".join(parts)
