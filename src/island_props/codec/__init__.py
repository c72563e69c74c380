"""Tag-JSON codec for hydrated component props."""

from .common import (
    UNREPRESENTABLE,
    BigInt,
    CyclicReferenceError,
    MalformedEnvelopeError,
    PropCodecError,
    UnreadablePropError,
    UnsupportedPropError,
)
from .containers import PropMap, PropSet
from .deserialize import decode, revive
from .serialize import (
    VisitedSet,
    convert_to_serialized_form,
    encode,
    serialize_array,
    serialize_object,
)
from .tags import PropType, decode_tag

__all__ = [
    "BigInt",
    "CyclicReferenceError",
    "MalformedEnvelopeError",
    "PropCodecError",
    "PropMap",
    "PropSet",
    "PropType",
    "UNREPRESENTABLE",
    "UnreadablePropError",
    "UnsupportedPropError",
    "VisitedSet",
    "convert_to_serialized_form",
    "decode",
    "decode_tag",
    "encode",
    "revive",
    "serialize_array",
    "serialize_object",
]
