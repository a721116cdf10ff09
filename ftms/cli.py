"""Command line entry for FTMS."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ftms.core.config import get_settings
from ftms.core.exceptions import FtmsError
from ftms.core.logging import configure_logging
from ftms.ingestion.pipeline import FtmsService
from ftms.models.file import FileMetadata

logger = logging.getLogger("ftms.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ftms", description="Store, index, and search uploaded files")
    parser.add_argument("--log-level", help="Override FTMS_LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Ingest a file from disk")
    upload.add_argument("path", type=Path)
    upload.add_argument("--name", help="Filename to record (defaults to the path's name)")
    upload.add_argument("--session")
    upload.add_argument("--channel")
    upload.add_argument("--tags")

    get = commands.add_parser("get", help="Show a file record")
    get.add_argument("id")

    listing = commands.add_parser("list", help="List records, newest first")
    listing.add_argument("--offset", type=int, default=0)
    listing.add_argument("--limit", type=int)
    listing.add_argument("--session")
    listing.add_argument("--mime-prefix")

    search = commands.add_parser("search", help="Full-text search")
    search.add_argument("query")
    search.add_argument("--limit", type=int)

    cat = commands.add_parser("cat", help="Write a file's stored bytes to stdout")
    cat.add_argument("id")

    return parser


async def run(args: argparse.Namespace, service: FtmsService) -> int:
    if args.command == "upload":
        content = args.path.read_bytes()
        metadata = FileMetadata(session_id=args.session, channel=args.channel, tags=args.tags)
        record = await service.upload(args.name or args.path.name, content, metadata)
        print(record.model_dump_json(indent=2))
        return 0

    if args.command == "get":
        record = await service.get(args.id)
        if record is None:
            logger.error("No file with id %s", args.id)
            return 1
        print(record.model_dump_json(indent=2))
        return 0

    if args.command == "list":
        page = await service.list(args.offset, args.limit, session_id=args.session, mime_prefix=args.mime_prefix)
        print(page.model_dump_json(indent=2))
        return 0

    if args.command == "search":
        results = await service.search(args.query, args.limit)
        print(json.dumps([result.model_dump() for result in results], indent=2))
        return 0

    if args.command == "cat":
        record = await service.get(args.id)
        if record is None:
            logger.error("No file with id %s", args.id)
            return 1
        sys.stdout.buffer.write(await service.read_bytes(record.file_path))
        sys.stdout.buffer.flush()
        return 0

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    service = FtmsService.from_settings(get_settings())
    try:
        return asyncio.run(run(args, service))
    except FtmsError as exc:
        logger.error("%s", exc)
        return 1
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
