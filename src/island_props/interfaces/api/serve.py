import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import uvicorn

from .api_server import PersonalizationConfig, create_api_server


def build_parser() -> argparse.ArgumentParser:
    defaults = PersonalizationConfig()
    parser = argparse.ArgumentParser(description="Personalizing static site server")
    parser.add_argument(
        "--root",
        metavar="DIR",
        type=Path,
        default=Path("dist"),
        help="Directory of pre-rendered pages to serve",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        type=str,
        default="127.0.0.1",
        help="Interface to bind",
    )
    parser.add_argument(
        "--port",
        metavar="PORT",
        type=int,
        default=8000,
        help="Port to run the server on",
    )
    parser.add_argument(
        "--query-param",
        default=defaults.query_param,
        help="Query parameter that switches personalization on",
    )
    parser.add_argument(
        "--prop-name",
        default=defaults.prop_name,
        help="Island prop overwritten with the replacement text",
    )
    parser.add_argument(
        "--replacement",
        default=defaults.replacement,
        help="Text written into islands and replaceable elements",
    )
    parser.add_argument("--verbose", action="store_true", help="Log each rewrite")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(None if argv is None else list(argv))

    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    root = args.root.expanduser().resolve()
    if not root.is_dir():
        print(f"serve: {root} is not a directory", file=sys.stderr)
        return 1

    config = PersonalizationConfig(
        query_param=args.query_param,
        prop_name=args.prop_name,
        replacement=args.replacement,
    )
    uvicorn.run(create_api_server(root, config), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
