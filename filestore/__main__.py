#!/usr/bin/env python3
"""
Command line harness for the file store client.

Usage:
  python -m filestore login
  python -m filestore get reports/q1.pdf -o q1.pdf
  python -m filestore put reports/q1.pdf --file q1.pdf --type application/pdf --url
  python -m filestore --bucket other put notes/index --html "<p>hi</p>"

Connection settings come from FILE_STORE_API_URL, FILE_STORE_API_KEY and
FILE_STORE_BUCKET (a .env file in the working directory is loaded).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .client import FileStoreClient, get_client
from .content import ContentItem
from .errors import FileStoreError


def configure_logging(verbose: bool = False) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | <cyan>{name}</cyan> - {message}",
        level="DEBUG" if verbose else "INFO",
        colorize=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="filestore", description="File store client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--bucket", help="Bucket to use (default: FILE_STORE_BUCKET)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Verify credentials")

    get = sub.add_parser("get", help="Download a stored object")
    get.add_argument("path")
    get.add_argument("-o", "--output", help="Write to file instead of stdout")

    put = sub.add_parser("put", help="Upload content items")
    put.add_argument("path")
    put.add_argument("--file", dest="files", action="append", default=[], help="Local file to upload")
    put.add_argument("--path", dest="paths", action="append", default=[], help="Server path reference")
    put.add_argument("--html", dest="htmls", action="append", default=[], help="Inline HTML")
    put.add_argument("--type", dest="mime_type", help="Declared MIME type")
    put.add_argument("--url", action="store_true", help="Request a public URL")

    return parser


def _items(args: argparse.Namespace) -> List[ContentItem]:
    return (
        [ContentItem.file(f) for f in args.files]
        + [ContentItem.path(p) for p in args.paths]
        + [ContentItem.html(h) for h in args.htmls]
    )


def run(args: argparse.Namespace, client: FileStoreClient) -> int:
    client.login()
    if args.command == "login":
        logger.info("Credentials OK")
        return 0

    if args.bucket:
        client.set_bucket(args.bucket)

    if args.command == "get":
        data = client.get_file(args.path).body
        if args.output:
            Path(args.output).write_bytes(data)
            logger.info(f"Wrote {len(data)} bytes to {args.output}")
        else:
            sys.stdout.buffer.write(data)
        return 0

    items = _items(args)
    if not items:
        logger.error("Nothing to upload: pass --file, --path or --html")
        return 2
    body = client.upload_content_list(
        args.path, items, mime_type=args.mime_type, request_url=args.url
    ).body
    print(json.dumps(body, indent=2) if isinstance(body, (dict, list)) else body)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        with get_client() as client:
            return run(args, client)
    except FileStoreError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
