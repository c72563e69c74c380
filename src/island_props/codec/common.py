"""Shared constants, sentinels and errors for the prop codec."""

from __future__ import annotations

from typing import Mapping, Tuple

JSON_SEPARATORS = (",", ":")

CYCLE_MESSAGE = (
    "Cyclic reference detected while serializing props for "
    "<{display_name} client:{hydrate}>!\n\n"
    "Cyclic references cannot be safely serialized for client-side usage. "
    "Please remove the cyclic reference."
)


class _Unrepresentable:
    """Marker for a decoded tag that has no registered reconstruction."""

    _instance: "_Unrepresentable | None" = None

    def __new__(cls) -> "_Unrepresentable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNREPRESENTABLE"

    def __reduce__(self):
        return (_Unrepresentable, ())


UNREPRESENTABLE = _Unrepresentable()


class BigInt(int):
    """Integer that travels as a JavaScript ``BigInt`` rather than a Number.

    Arithmetic on it returns plain ``int`` values.
    """

    def __repr__(self) -> str:
        return f"BigInt({int(self)})"

    __str__ = int.__repr__


class PropCodecError(RuntimeError):
    """Base class for errors raised while converting component props."""


class UnreadablePropError(PropCodecError, ValueError):
    """Raised when a tagged payload cannot be reconstructed."""


class UnsupportedPropError(PropCodecError, TypeError):
    """Raised when a value has no tag-JSON representation."""


class MalformedEnvelopeError(PropCodecError):
    """Raised when a component's attribute envelope cannot be decoded."""


class CyclicReferenceError(PropCodecError):
    """Raised when a composite value is reached again through its own children."""

    def __init__(self, display_name: object = None, hydrate: object = None) -> None:
        self.display_name = display_name
        self.hydrate = hydrate
        super().__init__(
            CYCLE_MESSAGE.format(display_name=display_name, hydrate=hydrate)
        )

    @classmethod
    def from_metadata(cls, metadata: object) -> "CyclicReferenceError":
        return cls(*describe_component(metadata))


def describe_component(metadata: object) -> Tuple[object, object]:
    """Return ``(display_name, hydrate)`` from metadata objects or raw mappings."""

    if metadata is None:
        return None, None
    if isinstance(metadata, Mapping):
        display_name = metadata.get("display_name", metadata.get("displayName"))
        return display_name, metadata.get("hydrate")
    return getattr(metadata, "display_name", None), getattr(metadata, "hydrate", None)


__all__ = [
    "BigInt",
    "CYCLE_MESSAGE",
    "CyclicReferenceError",
    "JSON_SEPARATORS",
    "MalformedEnvelopeError",
    "PropCodecError",
    "UNREPRESENTABLE",
    "UnreadablePropError",
    "UnsupportedPropError",
    "describe_component",
]
