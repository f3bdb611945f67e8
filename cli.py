#!/usr/bin/env python3
"""
Command-line client for the URL shortener REST API.

Usage:
    shortener-cli shorten <url> [--custom-code CODE]
    shortener-cli resolve <short_code>
    shortener-cli stats <short_code>
    shortener-cli delete <short_code>
    shortener-cli list [--offset N] [--limit N] [--search TERM]
    shortener-cli recent [--count N]
    shortener-cli health
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import httpx

from shortener.common.logging_config import setup_logging


DEFAULT_BASE_URL = "http://localhost:9200"


class ShortenerCLI:
    """Command-line interface over the HTTP API."""

    def __init__(self, client: httpx.Client, verbose: bool = False):
        """Initialize CLI.

        Args:
            client: HTTP client whose base_url points at the service
            verbose: Log requests at DEBUG level
        """
        self.client = client
        self.verbose = verbose
        self.logger = logging.getLogger("shortener.cli")

    def _emit(self, payload: Dict[str, Any]) -> int:
        print(json.dumps({"success": True, **payload}, indent=2))
        return 0

    def _fail(self, error: str, status: Optional[int] = None) -> int:
        body: Dict[str, Any] = {"success": False, "error": error}
        if status is not None:
            body["status"] = status
        print(json.dumps(body, indent=2), file=sys.stderr)
        return 1

    def _request(self, method: str, path: str, **kwargs) -> Optional[httpx.Response]:
        """Send a request; print the error and return None on failure."""
        self.logger.debug(f"{method} {path} {kwargs or ''}")
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self._fail(f"Request failed: {e}")
            return None

        if response.is_error:
            try:
                error = response.json().get("error") or response.text
            except ValueError:
                error = response.text
            self._fail(error, status=response.status_code)
            return None
        return response

    def shorten(self, url: str, custom_code: Optional[str] = None) -> int:
        """Shorten a URL."""
        body: Dict[str, Any] = {"long_url": url}
        if custom_code is not None:
            body["custom_code"] = custom_code
        response = self._request("POST", "/api/urls", json=body)
        if response is None:
            return 1
        result = response.json()
        return self._emit({
            **result,
            "message": f"Successfully shortened URL to: {result['short_code']}",
        })

    def resolve(self, short_code: str) -> int:
        """Resolve a short code (counts as a click)."""
        response = self._request("GET", f"/api/urls/{short_code}")
        if response is None:
            return 1
        return self._emit(response.json())

    def stats(self, short_code: str) -> int:
        """Get statistics for a short code."""
        response = self._request("GET", f"/api/urls/{short_code}/stats")
        if response is None:
            return 1
        return self._emit(response.json())

    def delete(self, short_code: str) -> int:
        """Delete a short code."""
        response = self._request("DELETE", f"/api/urls/{short_code}")
        if response is None:
            return 1
        return self._emit(response.json())

    def list_urls(self, offset: int = 0, limit: int = 50, search: Optional[str] = None) -> int:
        """List a page of URLs."""
        params: Dict[str, Any] = {"offset": offset, "limit": limit}
        if search:
            params["search"] = search
        response = self._request("GET", "/api/urls/paged", params=params)
        if response is None:
            return 1
        page = response.json()
        return self._emit({
            "count": len(page["items"]),
            "total_count": page["total_count"],
            "urls": page["items"],
        })

    def recent(self, count: int = 10) -> int:
        """List the most recent URLs."""
        response = self._request("GET", "/api/urls/recent", params={"count": count})
        if response is None:
            return 1
        urls: List[Dict[str, Any]] = response.json()
        return self._emit({"count": len(urls), "urls": urls})

    def health(self) -> int:
        """Check service health."""
        response = self._request("GET", "/api/health")
        if response is None:
            return 1
        health = response.json()
        self._emit({"health": health})
        return 0 if health.get("status") == "healthy" else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Shorten with custom code
  %(prog)s shorten https://example.com/long/url --custom-code mylink

  # Resolve (counts a click)
  %(prog)s resolve mylink

  # Get statistics
  %(prog)s stats mylink

  # Search URLs
  %(prog)s list --search example --limit 10
        """
    )

    parser.add_argument(
        "--base-url",
        default=os.getenv("SHORTENER_URL", DEFAULT_BASE_URL),
        help=f"Service base URL (default: from SHORTENER_URL env or {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Request timeout in seconds"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--custom-code", help="Custom short code")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a short code")
    resolve_parser.add_argument("short_code", help="Short code to resolve")

    stats_parser = subparsers.add_parser("stats", help="Get URL statistics")
    stats_parser.add_argument("short_code", help="Short code to get stats for")

    delete_parser = subparsers.add_parser("delete", help="Delete a short code")
    delete_parser.add_argument("short_code", help="Short code to delete")

    list_parser = subparsers.add_parser("list", help="List URLs page by page")
    list_parser.add_argument("--offset", type=int, default=0, help="Matches to skip")
    list_parser.add_argument("--limit", type=int, default=50, help="Maximum number to return")
    list_parser.add_argument("--search", help="Filter on long URL")

    recent_parser = subparsers.add_parser("recent", help="List recent URLs")
    recent_parser.add_argument("--count", type=int, default=10, help="Number of URLs")

    subparsers.add_parser("health", help="Check service health")

    return parser


def run(cli: ShortenerCLI, args: argparse.Namespace) -> int:
    """Dispatch parsed arguments to a CLI command."""
    if args.command == "shorten":
        return cli.shorten(args.url, args.custom_code)
    elif args.command == "resolve":
        return cli.resolve(args.short_code)
    elif args.command == "stats":
        return cli.stats(args.short_code)
    elif args.command == "delete":
        return cli.delete(args.short_code)
    elif args.command == "list":
        return cli.list_urls(args.offset, args.limit, args.search)
    elif args.command == "recent":
        return cli.recent(args.count)
    elif args.command == "health":
        return cli.health()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # stdout carries command results
    setup_logging(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        cli = ShortenerCLI(client, verbose=args.verbose)
        return run(cli, args)


if __name__ == "__main__":
    sys.exit(main())
