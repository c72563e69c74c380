"""Encode in-memory prop values into tag-JSON."""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import re
from collections import OrderedDict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple
from urllib.parse import ParseResult, SplitResult, urlsplit, urlunsplit

import numpy as np

from .common import (
    JSON_SEPARATORS,
    UNREPRESENTABLE,
    BigInt,
    CyclicReferenceError,
    UnsupportedPropError,
)
from .containers import PropMap, PropSet
from .tags import BUFFER_DTYPES, PropType

logger = logging.getLogger(__name__)

SerializedValue = Tuple[PropType, Any]


class VisitedSet:
    """Identities of the composites on the active encode path."""

    def __init__(self) -> None:
        self._ids: Set[int] = set()

    def __contains__(self, value: object) -> bool:
        return id(value) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @contextmanager
    def enter(self, value: object, metadata: object = None) -> Iterator[None]:
        key = id(value)
        if key in self._ids:
            raise CyclicReferenceError.from_metadata(metadata)
        self._ids.add(key)
        try:
            yield
        finally:
            self._ids.discard(key)


def _dumps(value: object) -> str:
    return json.dumps(value, separators=JSON_SEPARATORS, ensure_ascii=False)


def _format_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_url(value: SplitResult | ParseResult) -> str:
    parts = urlsplit(value.geturl())
    netloc = parts.netloc
    if netloc:
        userinfo, at, hostport = netloc.rpartition("@")
        netloc = userinfo + at + hostport.lower()
    path = parts.path or ("/" if netloc else "")
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, parts.fragment))


def _buffer_tag(value: np.ndarray) -> Optional[PropType]:
    for tag, dtype in BUFFER_DTYPES.items():
        if value.dtype == dtype:
            return tag
    return None


def _record_items(value: object) -> Iterable[Tuple[Any, Any]]:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ((field.name, getattr(value, field.name)) for field in dataclasses.fields(value))
    return value.items()  # type: ignore[union-attr]


def _is_record(value: object) -> bool:
    if isinstance(value, Mapping):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def convert_to_serialized_form(
    value: object,
    metadata: object = None,
    visited: Optional[VisitedSet] = None,
) -> SerializedValue:
    """Classify ``value`` and return its ``(tag, payload)`` pair."""

    if visited is None:
        visited = VisitedSet()
    if isinstance(value, np.generic):
        value = value.item()

    if isinstance(value, datetime):
        return PropType.DATE, _format_date(value)
    if isinstance(value, re.Pattern):
        if not isinstance(value.pattern, str):
            raise UnsupportedPropError("Byte patterns cannot be serialized as props")
        return PropType.REGEXP, value.pattern
    if isinstance(value, (OrderedDict, PropMap)):
        with visited.enter(value, metadata):
            pairs = [[key, item] for key, item in value.items()]
            return PropType.MAP, _dumps(serialize_array(pairs, metadata, visited))
    if isinstance(value, (set, frozenset, PropSet)):
        with visited.enter(value, metadata):
            return PropType.SET, _dumps(serialize_array(list(value), metadata, visited))
    if isinstance(value, BigInt):
        return PropType.BIGINT, str(int(value))
    if isinstance(value, (SplitResult, ParseResult)):
        return PropType.URL, _format_url(value)
    if isinstance(value, (list, tuple)):
        return PropType.JSON, _dumps(serialize_array(value, metadata, visited))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return PropType.UINT8_ARRAY, _dumps(list(bytes(value)))
    if isinstance(value, np.ndarray):
        tag = _buffer_tag(value)
        if tag is not None:
            return tag, _dumps(value.ravel().tolist())
        with visited.enter(value, metadata):
            return PropType.JSON, _dumps(serialize_array(value.tolist(), metadata, visited))
    if _is_record(value):
        return PropType.VALUE, serialize_object(value, metadata, visited)

    if value is UNREPRESENTABLE:
        return PropType.VALUE, None
    if isinstance(value, float) and not math.isfinite(value):
        return PropType.VALUE, None
    if value is None or isinstance(value, (bool, int, float, str)):
        return PropType.VALUE, value
    raise UnsupportedPropError(
        f"Cannot serialize prop of type {type(value).__name__!r}"
    )


def serialize_array(
    values: Iterable[object],
    metadata: object = None,
    visited: Optional[VisitedSet] = None,
) -> List[SerializedValue]:
    if visited is None:
        visited = VisitedSet()
    with visited.enter(values, metadata):
        return [convert_to_serialized_form(item, metadata, visited) for item in values]


def serialize_object(
    record: object,
    metadata: object = None,
    visited: Optional[VisitedSet] = None,
) -> Dict[Any, SerializedValue]:
    if not _is_record(record):
        raise UnsupportedPropError(
            f"Props must be a mapping or dataclass, not {type(record).__name__!r}"
        )
    if visited is None:
        visited = VisitedSet()
    with visited.enter(record, metadata):
        return {
            key: convert_to_serialized_form(item, metadata, visited)
            for key, item in _record_items(record)
            if item is not UNREPRESENTABLE
        }


def encode(props: object, metadata: object = None) -> str:
    """Serialize a props record into the tag-JSON text stored on the page."""

    serialized = serialize_object(props, metadata, VisitedSet())
    logger.debug("Encoded %d top-level props", len(serialized))
    return _dumps(serialized)


__all__ = [
    "SerializedValue",
    "VisitedSet",
    "convert_to_serialized_form",
    "encode",
    "serialize_array",
    "serialize_object",
]
