"""Minimal element rewriter over ``html.parser``.

Markup that no handler touches is written back as it was read; only start
tags whose attributes changed are re-rendered.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

_SELECTOR = re.compile(r"^(?P<tag>[A-Za-z][\w-]*)?(?:\[(?P<attr>[^\]=\s]+)\])?$")


class Element:
    """Mutable view of a start tag passed to rewriter handlers."""

    def __init__(self, tag_name: str, attributes: List[Tuple[str, Optional[str]]]) -> None:
        self.tag_name = tag_name
        self.attributes = list(attributes)
        self.inner_content: Optional[str] = None
        self.modified = False

    def get_attribute(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.attributes:
            if key == name:
                return value
        return None

    def has_attribute(self, name: str) -> bool:
        name = name.lower()
        return any(key == name for key, _ in self.attributes)

    def set_attribute(self, name: str, value: str) -> None:
        name = name.lower()
        for index, (key, _) in enumerate(self.attributes):
            if key == name:
                self.attributes[index] = (name, value)
                break
        else:
            self.attributes.append((name, value))
        self.modified = True

    def set_inner_content(self, text: str) -> None:
        self.inner_content = html.escape(text, quote=False)

    def render(self, self_closing: bool = False) -> str:
        parts = [self.tag_name]
        for name, value in self.attributes:
            if value is None:
                parts.append(name)
            else:
                parts.append(f'{name}="{html.escape(value, quote=True)}"')
        return "<" + " ".join(parts) + (" />" if self_closing else ">")


Handler = Union[Callable[[Element], None], object]


@dataclass(frozen=True)
class Selector:
    tag: Optional[str]
    attribute: Optional[str]

    @classmethod
    def parse(cls, text: str) -> "Selector":
        match = _SELECTOR.match(text.strip())
        if match is None or not (match.group("tag") or match.group("attr")):
            raise ValueError(f"Unsupported selector: {text!r}")
        tag = match.group("tag")
        attr = match.group("attr")
        return cls(tag.lower() if tag else None, attr.lower() if attr else None)

    def matches(self, element: Element) -> bool:
        if self.tag is not None and element.tag_name != self.tag:
            return False
        if self.attribute is not None and not element.has_attribute(self.attribute):
            return False
        return True


class _RewritingParser(HTMLParser):
    def __init__(self, handlers: List[Tuple[Selector, Handler]]) -> None:
        super().__init__(convert_charrefs=False)
        self._handlers = handlers
        self._out: List[str] = []
        self._skip_tag: Optional[str] = None
        self._skip_depth = 0

    def result(self) -> str:
        return "".join(self._out)

    def _emit(self, text: str) -> None:
        if self._skip_tag is None:
            self._out.append(text)

    def _dispatch(self, tag: str, attrs, self_closing: bool) -> None:
        raw = self.get_starttag_text() or ""
        element = Element(tag, attrs)
        for selector, handler in self._handlers:
            if selector.matches(element):
                callback = getattr(handler, "element", handler)
                callback(element)
        self._out.append(element.render(self_closing) if element.modified else raw)
        if element.inner_content is None:
            return
        if self_closing or tag in VOID_ELEMENTS:
            logger.debug("Ignoring inner content for empty element <%s>", tag)
            return
        self._out.append(element.inner_content)
        self._skip_tag = tag
        self._skip_depth = 1

    def handle_starttag(self, tag, attrs):
        if self._skip_tag is not None:
            if tag == self._skip_tag and tag not in VOID_ELEMENTS:
                self._skip_depth += 1
            return
        self._dispatch(tag, attrs, self_closing=False)

    def handle_startendtag(self, tag, attrs):
        if self._skip_tag is not None:
            return
        self._dispatch(tag, attrs, self_closing=True)

    def handle_endtag(self, tag):
        if self._skip_tag is not None:
            if tag != self._skip_tag:
                return
            self._skip_depth -= 1
            if self._skip_depth:
                return
            self._skip_tag = None
        self._emit(f"</{tag}>")

    def handle_data(self, data):
        self._emit(data)

    def handle_entityref(self, name):
        self._emit(f"&{name};")

    def handle_charref(self, name):
        self._emit(f"&#{name};")

    def handle_comment(self, data):
        self._emit(f"<!--{data}-->")

    def handle_decl(self, decl):
        self._emit(f"<!{decl}>")

    def handle_pi(self, data):
        self._emit(f"<?{data}>")

    def unknown_decl(self, data):
        self._emit(f"<![{data}]>")


class HTMLRewriter:
    """Run element handlers over a document and return the rewritten markup."""

    def __init__(self) -> None:
        self._handlers: List[Tuple[Selector, Handler]] = []

    def on(self, selector: str, handler: Handler) -> "HTMLRewriter":
        self._handlers.append((Selector.parse(selector), handler))
        return self

    def transform(self, markup: str) -> str:
        parser = _RewritingParser(self._handlers)
        parser.feed(markup)
        parser.close()
        return parser.result()


__all__ = ["Element", "HTMLRewriter", "Selector", "VOID_ELEMENTS"]
