"""Decode tag-JSON text back into prop values."""

from __future__ import annotations

import json
import logging

from .tags import decode_tag, is_tagged

logger = logging.getLogger(__name__)


def revive(node: object, *, root: bool = False) -> object:
    """Resolve tagged nodes bottom-up, leaving the root node untagged."""

    if isinstance(node, list):
        node = [revive(item) for item in node]
        if not root and is_tagged(node):
            return decode_tag(node[0], node[1])
        return node
    if isinstance(node, dict):
        return {key: revive(item) for key, item in node.items()}
    return node


def decode(text: str) -> object:
    """Parse tag-JSON ``text`` and rebuild every tagged value it contains."""

    logger.debug("Decoding %d characters of tag-JSON", len(text))
    return revive(json.loads(text), root=True)


__all__ = ["decode", "revive"]
