"""Translate a raw queue payload into a GELF-like :class:`LogRecord`.

Purpose
-------
JSON producers usually already speak (almost) GELF, so their objects are kept
intact apart from the field names Graylog reserves for itself. Anything else
is wrapped verbatim into ``short_message``.

Contents
--------
* :data:`JSON_MEDIA_TYPES` / :data:`RESERVED_FIELDS` constants.
* :func:`build_record` - the pure translation function.
* :func:`create_record_builder` - factory binding the rename policy.

System Role
-----------
Application-layer policy invoked by the delivery loop for every message. It
performs no IO and keeps no state, so equal inputs always yield equal records.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable
from typing import Any

from amqp2gelf.domain.errors import ParseError
from amqp2gelf.domain.record import DEFAULT_HOST, DEFAULT_LEVEL, DEFAULT_VERSION, LogRecord

JSON_MEDIA_TYPES = frozenset({"application/json", "text/json"})

RESERVED_FIELDS = frozenset({"_id", "_ttl", "_source", "_all", "_index", "_type", "_score"})
#: Field names Graylog manages internally; they never reach the wire verbatim.

RecordBuilder = Callable[[bytes, str], LogRecord]


def build_record(payload: bytes, content_type: str, *, strict_renames: bool = False) -> LogRecord:
    """Return the record for ``payload`` delivered with ``content_type``.

    Parameters
    ----------
    payload:
        Raw message body.
    content_type:
        AMQP ``content_type`` property; parameters such as ``charset`` are
        ignored when matching JSON media types.
    strict_renames:
        When ``True`` a reserved-field rename whose target key already exists
        raises :class:`ParseError` instead of overwriting that key.

    Raises
    ------
    ParseError
        A JSON-typed body is not a JSON object, or a typed field carries a
        value of the wrong type.

    Examples
    --------
    >>> record = build_record(b'{"host": "web1", "_id": 7}', "application/json")
    >>> record.host, record.extra
    ('web1', {'host': 'web1', 'renamed_id': 7})
    >>> build_record(b"hello world", "text/plain").short_message
    'hello world'
    """

    if _looks_like_json_object(payload, content_type):
        return _build_from_json(payload, strict_renames=strict_renames)
    return _build_from_text(payload)


def create_record_builder(*, strict_renames: bool = False) -> RecordBuilder:
    """Bind the rename policy so callers only pass payload and content type."""

    def build(payload: bytes, content_type: str) -> LogRecord:
        return build_record(payload, content_type, strict_renames=strict_renames)

    return build


def _looks_like_json_object(payload: bytes, content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type not in JSON_MEDIA_TYPES:
        return False
    return payload.startswith(b"{") and payload.endswith(b"}")


def _build_from_text(payload: bytes) -> LogRecord:
    return LogRecord(short_message=payload.decode("utf-8", errors="replace"))


def _build_from_json(payload: bytes, *, strict_renames: bool) -> LogRecord:
    try:
        decoded = json.loads(payload, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as exc:
        raise ParseError(f"cannot parse JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ParseError(f"JSON body must be an object, got {type(decoded).__name__}")

    fields = _rename_reserved(decoded, strict=strict_renames)
    return LogRecord(
        version=_string_field(fields, "version", DEFAULT_VERSION),
        host=_string_field(fields, "host", DEFAULT_HOST),
        short_message=_string_field(fields, "short_message", ""),
        timestamp=_timestamp_field(fields),
        level=_level_field(fields),
        extra=fields,
    )


def _reject_constant(literal: str) -> Any:
    raise ParseError(f"cannot parse JSON: {literal} is not a JSON value")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ParseError(f"cannot parse JSON: {literal} is out of range")
    return value


def _rename_reserved(fields: dict[str, Any], *, strict: bool) -> dict[str, Any]:
    """Move reserved keys (with or without their leading underscore) aside.

    ``_id`` becomes ``renamed_id`` and ``id`` becomes ``renamed_id`` as well;
    existing keys with the target name are overwritten unless ``strict``.
    """

    renamed = dict(fields)
    for key in list(fields):
        if key in RESERVED_FIELDS:
            target = "renamed" + key
        elif "_" + key in RESERVED_FIELDS:
            target = "renamed_" + key
        else:
            continue
        if strict and target in renamed:
            raise ParseError(f"renaming reserved field {key!r} would overwrite {target!r}")
        renamed[target] = renamed.pop(key)
    return renamed


def _string_field(fields: dict[str, Any], key: str, default: str) -> str:
    if key not in fields:
        return default
    value = fields[key]
    if not isinstance(value, str):
        raise ParseError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _timestamp_field(fields: dict[str, Any]) -> float:
    value = fields.get("timestamp")
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _level_field(fields: dict[str, Any]) -> int:
    if "level" not in fields:
        return DEFAULT_LEVEL
    value = fields["level"]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ParseError(f"field 'level' must be an integer, got {value!r}")


__all__ = [
    "JSON_MEDIA_TYPES",
    "RESERVED_FIELDS",
    "RecordBuilder",
    "build_record",
    "create_record_builder",
]
