"""FastAPI application that personalizes rendered islands on request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from ...codec import PropCodecError
from ...envelope import PROPS_ATTRIBUTE, deconstruct, reconstruct
from ...rewriter import Element, HTMLRewriter

logger = logging.getLogger(__name__)


@dataclass
class PersonalizationConfig:
    """Which elements get rewritten, and with what."""

    query_param: str = "personal"
    island_selector: str = "astro-island"
    replaceable_selector: str = "[data-replaceable]"
    prop_name: str = "text"
    replacement: str = "Personalized Text, Bro!!"


def _already_unescaped(value: str) -> str:
    # html.parser resolves entities in attribute values before handlers run.
    return value


class _IslandHandler:
    def __init__(self, config: PersonalizationConfig) -> None:
        self.config = config

    def element(self, element: Element) -> None:
        try:
            component = deconstruct(element.attributes, unescape=_already_unescaped)
            if not isinstance(component.props, dict):
                logger.warning(
                    "Skipping island %s: props are not a record",
                    component.metadata.display_name,
                )
                return
            component.props[self.config.prop_name] = self.config.replacement
            element.set_attribute(PROPS_ATTRIBUTE, reconstruct(component))
        except PropCodecError as exc:
            logger.warning("Leaving <%s> untouched: %s", element.tag_name, exc)


def personalize_html(markup: str, config: Optional[PersonalizationConfig] = None) -> str:
    """Rewrite island props and replaceable elements in ``markup``."""

    config = config or PersonalizationConfig()
    replacement = config.replacement
    rewriter = (
        HTMLRewriter()
        .on(config.island_selector, _IslandHandler(config))
        .on(
            config.replaceable_selector,
            lambda element: element.set_inner_content(replacement),
        )
    )
    return rewriter.transform(markup)


def create_api_server(root: Path | str, config: Optional[PersonalizationConfig] = None) -> FastAPI:
    """Serve ``root`` as static files, personalizing HTML responses on demand."""

    config = config or PersonalizationConfig()
    app = FastAPI(title="island-props")

    @app.middleware("http")
    async def personalize(request: Request, call_next):
        response = await call_next(request)
        if config.query_param not in request.query_params:
            return response
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("text/html"):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        markup = personalize_html(body.decode("utf-8"), config)
        logger.info("Personalized %s", request.url.path)

        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() != "content-length"
        }
        return Response(
            content=markup.encode("utf-8"),
            status_code=response.status_code,
            headers=headers,
        )

    app.mount("/", StaticFiles(directory=str(root), html=True), name="site")
    return app


__all__ = ["PersonalizationConfig", "create_api_server", "personalize_html"]
