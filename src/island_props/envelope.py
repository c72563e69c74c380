"""Adapt the tag-JSON codec to the attribute envelope of a rendered island.

An island carries two serialized attributes: ``opts`` holds plain JSON with
the component's display name and hydration arguments, ``props`` holds the
tag-JSON encoded props. :func:`deconstruct` decodes both, callers mutate the
resulting :class:`DeconstructedComponent`, and :func:`reconstruct` produces
the new ``props`` attribute value.
"""

from __future__ import annotations

import html
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .codec import MalformedEnvelopeError, decode, encode

logger = logging.getLogger(__name__)

HYDRATE_MODES: Tuple[str, ...] = ("load", "idle", "visible", "media", "only")
PROPS_ATTRIBUTE = "props"
OPTS_ATTRIBUTE = "opts"

_WORD_BOUNDARY = re.compile(r"[-_\s]+(.)?")


@dataclass(frozen=True)
class ComponentExport:
    value: str
    namespace: Optional[bool] = None


@dataclass(frozen=True)
class ComponentMetadata:
    """Identity of the component owning a props bag."""

    display_name: str
    hydrate: Optional[str] = None
    hydrate_args: Any = None
    component_url: Optional[str] = None
    component_export: Optional[ComponentExport] = None
    extra: Mapping[str, Optional[str]] = field(default_factory=dict)


@dataclass
class DeconstructedComponent:
    props: Any
    metadata: ComponentMetadata


def camel_case(name: str) -> str:
    """Convert an attribute name such as ``component-url`` to ``componentUrl``."""

    name = name.strip("-_ ")
    if not name:
        return name
    converted = _WORD_BOUNDARY.sub(lambda match: (match.group(1) or "").upper(), name)
    return converted[0].lower() + converted[1:]


def _parse(name: str, raw: Optional[str], unescape: Callable[[str], str]) -> Any:
    if raw is None:
        raise MalformedEnvelopeError(f"Island is missing the {name!r} attribute")
    try:
        if name == PROPS_ATTRIBUTE:
            return decode(unescape(raw))
        return json.loads(unescape(raw))
    except ValueError as exc:
        raise MalformedEnvelopeError(f"Island attribute {name!r} could not be decoded: {exc}") from exc


def deconstruct(
    attributes: Iterable[Tuple[str, Optional[str]]],
    *,
    unescape: Callable[[str], str] = html.unescape,
    normalize: Callable[[str], str] = camel_case,
) -> DeconstructedComponent:
    """Decode the ``opts`` and ``props`` attributes of a single island."""

    attrs: Dict[str, Optional[str]] = {normalize(name): value for name, value in attributes}
    component_url = attrs.pop("componentUrl", None)
    export_name = attrs.pop("componentExport", None)
    hydrate = attrs.pop("client", None)

    opts = _parse(OPTS_ATTRIBUTE, attrs.pop(OPTS_ATTRIBUTE, None), unescape)
    if not isinstance(opts, dict):
        raise MalformedEnvelopeError("Island attribute 'opts' must be a JSON object")
    props = _parse(PROPS_ATTRIBUTE, attrs.pop(PROPS_ATTRIBUTE, None), unescape)

    if hydrate is not None and hydrate not in HYDRATE_MODES:
        logger.warning("Island %r uses unknown hydrate mode %r", opts.get("name"), hydrate)

    metadata = ComponentMetadata(
        display_name=opts.get("name"),
        hydrate=hydrate,
        hydrate_args=opts.get("value"),
        component_url=component_url,
        component_export=ComponentExport(export_name) if export_name is not None else None,
        extra=attrs,
    )
    logger.debug("Deconstructed island %s", metadata.display_name)
    return DeconstructedComponent(props=props, metadata=metadata)


def reconstruct(component: DeconstructedComponent) -> str:
    """Return the tag-JSON text for ``component.props``.

    The metadata is only used to name the component in cycle errors; it is
    never written back.
    """

    return encode(component.props, component.metadata)


__all__ = [
    "ComponentExport",
    "ComponentMetadata",
    "DeconstructedComponent",
    "HYDRATE_MODES",
    "camel_case",
    "deconstruct",
    "reconstruct",
]
