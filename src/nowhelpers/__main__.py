"""
=============================================================================
NOWHELPERS CLI
=============================================================================

Run a handler against one or more invoke payloads, locally.

=============================================================================
USAGE
=============================================================================

    # handler in ./app.py, payload in ./event.json
    python -m nowhelpers app:handler event.json

    # several payloads, debug logging, JSON access log
    python -m nowhelpers app:handler a.json b.json -l DEBUG --log-format json

Each payload is an invoke object ({"Action": "Invoke", "body": "..."}) or
the inner request ({"method", "path", "headers", "body", "encoding"}).
Results are printed one JSON object per line:

    {"statusCode": 200, "headers": {...}, "encoding": "base64", "body": "..."}

=============================================================================
"""

import argparse
import importlib
import json
import logging
import os
import sys

from . import __version__
from .bridge import Bridge
from .config import HelperConfig, LOG_LEVELS, configure_logging
from .server import create_server_with_helpers

logger = logging.getLogger("nowhelpers.cli")


def load_handler(spec: str):
    """Resolve "package.module:function" to the function object."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"handler must look like MODULE:FUNCTION, got {spec!r}")

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    module = importlib.import_module(module_name)
    try:
        handler = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"{module_name!r} has no attribute {attr!r}") from None
    if not callable(handler):
        raise ValueError(f"{spec!r} is not callable")
    return handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nowhelpers",
        description="Invoke a request handler locally through the bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m nowhelpers app:handler event.json
  python -m nowhelpers app:handler a.json b.json --log-level DEBUG
        """,
    )

    parser.add_argument("handler", help="Handler as MODULE:FUNCTION")
    parser.add_argument("events", nargs="+", help="Invoke payload JSON files")

    parser.add_argument(
        "--host", "-H",
        default=os.getenv("HTTP_HOST", "127.0.0.1"),
        help="Interface for the local helper server (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=os.getenv("HTTP_LOG_LEVEL", "WARNING").upper(),
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=os.getenv("HTTP_LOG_FORMAT", "text"),
        help="Access log format (default: text)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"nowhelpers {__version__}",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = HelperConfig(
        host=args.host,
        port=0,
        log_level=args.log_level,
        log_format=args.log_format,
    )
    configure_logging(config)

    handler = load_handler(args.handler)
    bridge = Bridge()
    server = create_server_with_helpers(handler, bridge, config).start()

    try:
        for path in args.events:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
            result = bridge.launch(payload)
            print(json.dumps(result))
    finally:
        server.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
