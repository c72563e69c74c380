"""Tag-JSON prop codec and island rewriting for pre-rendered pages."""

from .codec import (
    UNREPRESENTABLE,
    BigInt,
    CyclicReferenceError,
    MalformedEnvelopeError,
    PropCodecError,
    PropMap,
    PropSet,
    PropType,
    UnreadablePropError,
    UnsupportedPropError,
    decode,
    encode,
)
from .envelope import (
    ComponentExport,
    ComponentMetadata,
    DeconstructedComponent,
    deconstruct,
    reconstruct,
)

__all__ = [
    "BigInt",
    "ComponentExport",
    "ComponentMetadata",
    "CyclicReferenceError",
    "DeconstructedComponent",
    "MalformedEnvelopeError",
    "PropCodecError",
    "PropMap",
    "PropSet",
    "PropType",
    "UNREPRESENTABLE",
    "UnreadablePropError",
    "UnsupportedPropError",
    "deconstruct",
    "decode",
    "encode",
    "reconstruct",
]
