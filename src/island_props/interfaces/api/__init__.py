"""Personalization server and supporting utilities."""

from .api_server import PersonalizationConfig, create_api_server, personalize_html
from .serve import main as serve_main

__all__ = ["PersonalizationConfig", "create_api_server", "personalize_html", "serve_main"]
