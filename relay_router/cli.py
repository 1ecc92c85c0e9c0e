"""CLI entry point for the relay router."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .config import load_router_config
from .core.estimation import estimate_tokens
from .core.normalization import normalize_request
from .errors import RelayRouterError
from .models.messages import Request
from .pipeline import RequestPipeline


def _read_request(path: str) -> Request:
    if path == "-":
        payload = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    return Request.model_validate(payload)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def route_command(request_path: str, config_path: Optional[str]) -> int:
    """Print the routing decision and normalized request."""
    config = load_router_config(config_path)
    request = _read_request(request_path)
    routed = await RequestPipeline().prepare(request, config)
    _print_json({
        "decision": routed.decision.model_dump(mode="json"),
        "strict_content": routed.strict_content,
        "request": routed.request.model_dump(mode="json", exclude_none=True),
    })
    return 0


def normalize_command(request_path: str, strict: bool) -> int:
    """Print the normalized messages."""
    request = normalize_request(_read_request(request_path), strict=strict)
    _print_json([m.model_dump(mode="json", exclude_none=True) for m in request.messages])
    return 0


def estimate_command(request_path: str) -> int:
    """Print the token estimate."""
    request = _read_request(request_path)
    _print_json({"token_count": estimate_tokens(request.messages, request.tools)})
    return 0


def main(argv=None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Relay router CLI")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    route_parser = subparsers.add_parser('route', help='Show where a request would be routed')
    route_parser.add_argument('request', help='Request JSON file ("-" for stdin)')
    route_parser.add_argument('--config', help='Router config file (default: ~/.relay-router/config.json)')

    normalize_parser = subparsers.add_parser('normalize', help='Normalize request messages')
    normalize_parser.add_argument('request', help='Request JSON file ("-" for stdin)')
    normalize_parser.add_argument('--strict', action='store_true', help='Project into the strict block shape')

    estimate_parser = subparsers.add_parser('estimate', help='Estimate request tokens')
    estimate_parser.add_argument('request', help='Request JSON file ("-" for stdin)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.command == 'route':
            return asyncio.run(route_command(args.request, args.config))
        elif args.command == 'normalize':
            return normalize_command(args.request, args.strict)
        elif args.command == 'estimate':
            return estimate_command(args.request)
        else:
            parser.print_help()
            return 1
    except (RelayRouterError, OSError, ValueError) as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
