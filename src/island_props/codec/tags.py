"""Wire tags and the decode table that reconstructs tagged payloads.

The tag numbers are shared with the browser-side hydration runtime and must
never be renumbered.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from enum import IntEnum
from typing import Callable, Dict
from urllib.parse import urlsplit

import numpy as np

from .common import UNREPRESENTABLE, BigInt, PropCodecError, UnreadablePropError
from .containers import PropMap, PropSet

logger = logging.getLogger(__name__)


class PropType(IntEnum):
    VALUE = 0
    JSON = 1
    REGEXP = 2
    DATE = 3
    MAP = 4
    SET = 5
    BIGINT = 6
    URL = 7
    UINT8_ARRAY = 8
    UINT16_ARRAY = 9
    UINT32_ARRAY = 10


BUFFER_DTYPES: Dict[PropType, np.dtype] = {
    PropType.UINT8_ARRAY: np.dtype(np.uint8),
    PropType.UINT16_ARRAY: np.dtype(np.uint16),
    PropType.UINT32_ARRAY: np.dtype(np.uint32),
}


def _nested(payload: str) -> object:
    from .deserialize import decode

    return decode(payload)


def _decode_date(payload: str) -> datetime:
    parsed = datetime.fromisoformat(payload.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _decode_map(payload: str) -> PropMap:
    return PropMap((key, value) for key, value in _nested(payload))


def _decode_set(payload: str) -> PropSet:
    return PropSet(_nested(payload))


def _buffer_decoder(tag: PropType) -> Callable[[str], np.ndarray]:
    dtype = BUFFER_DTYPES[tag]

    def decode_buffer(payload: str) -> np.ndarray:
        return np.asarray(json.loads(payload), dtype=dtype)

    return decode_buffer


DECODERS: Dict[PropType, Callable[[object], object]] = {
    PropType.VALUE: lambda payload: payload,
    PropType.JSON: _nested,
    PropType.REGEXP: re.compile,
    PropType.DATE: _decode_date,
    PropType.MAP: _decode_map,
    PropType.SET: _decode_set,
    PropType.BIGINT: BigInt,
    PropType.URL: urlsplit,
    PropType.UINT8_ARRAY: _buffer_decoder(PropType.UINT8_ARRAY),
    PropType.UINT16_ARRAY: _buffer_decoder(PropType.UINT16_ARRAY),
    PropType.UINT32_ARRAY: _buffer_decoder(PropType.UINT32_ARRAY),
}


def is_tag_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_tagged(node: object) -> bool:
    """Return ``True`` when ``node`` has the ``[tag, payload]`` wire shape."""

    return isinstance(node, list) and len(node) == 2 and is_tag_number(node[0])


def decode_tag(tag: int, payload: object) -> object:
    """Reconstruct ``payload`` according to ``tag``.

    Unknown tags yield :data:`UNREPRESENTABLE` instead of raising; a payload
    the reconstruction rejects raises :class:`UnreadablePropError`.
    """

    try:
        prop_type = PropType(tag)
    except ValueError:
        logger.warning("Dropping prop with unrepresentable tag %r", tag)
        return UNREPRESENTABLE
    try:
        return DECODERS[prop_type](payload)
    except PropCodecError:
        raise
    except (ValueError, TypeError, OverflowError, re.error) as exc:
        raise UnreadablePropError(f"Cannot decode {prop_type.name} payload: {exc}") from exc


__all__ = [
    "BUFFER_DTYPES",
    "DECODERS",
    "PropType",
    "decode_tag",
    "is_tag_number",
    "is_tagged",
]
