"""JSON extraction from response bodies."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Dict, List, Union

JsonValue = Union[
    None,
    bool,
    int,
    float,
    str,
    List["JsonValue"],
    Dict[str, "JsonValue"],
]

KEY_PATH_SEPARATOR = "."
logger = logging.getLogger("mappable_httpx")


def parse_json(data: bytes | str | None) -> JsonValue:
    """Parse a body allowing top-level fragments; unparseable input is absent."""

    if not data:
        return None
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError, RecursionError):
        logger.debug("response body is not valid JSON length=%s", len(data))
        return None


def split_key_path(key_path: str | None) -> tuple[str, ...]:
    if not key_path:
        return ()
    return tuple(key_path.split(KEY_PATH_SEPARATOR))


def resolve_key_path(value: JsonValue, segments: Sequence[str]) -> JsonValue:
    """Walk ``segments`` into ``value``; any missing segment yields ``None``.

    Objects are indexed by key. Arrays accept a non-negative ASCII integer
    segment as an index.
    """

    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    if isinstance(value, dict):
        if head not in value:
            return None
        return resolve_key_path(value[head], rest)
    if isinstance(value, list) and head.isascii() and head.isdigit():
        index = int(head)
        if index >= len(value):
            return None
        return resolve_key_path(value[index], rest)
    return None


def extract_json(data: bytes | str | None, key_path: str | None = None) -> JsonValue:
    """Parse ``data`` and narrow it to ``key_path`` when one is given."""

    return resolve_key_path(parse_json(data), split_key_path(key_path))


__all__ = [
    "JsonValue",
    "KEY_PATH_SEPARATOR",
    "parse_json",
    "split_key_path",
    "resolve_key_path",
    "extract_json",
]
