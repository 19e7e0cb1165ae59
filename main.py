import os
import sys
import argparse
import requests
from dotenv import load_dotenv
from pydantic import ValidationError
from typing import List, Optional

from ragie_import.models import ImportConfig, ImportStats, SourceError
from ragie_import.extract.youtube import read_youtube
from ragie_import.extract.wordpress import read_wordpress
from ragie_import.extract.readmeio import read_readmeio
from ragie_import.extract.files import read_files, read_zip
from ragie_import.load.ragie import RagieClient, RagieAPIError
from ragie_import.load.importer import Importer, clear_documents
from ragie_import.log import setup_logging

READERS = {
    "youtube": read_youtube,
    "wordpress": read_wordpress,
    "readmeio": read_readmeio,
    "files": read_files,
    "zip": read_zip,
}

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dry-run", action="store_true", help="Print what would happen without making changes")
    common.add_argument("--partition", default="", help="Optional partition to use for operations")
    common.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="ragie-import",
        description="Import YouTube data, WordPress exports, readme.io docs and files into Ragie.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", parents=[common], help="Import data from various sources")
    imp.add_argument("type", choices=sorted(READERS))
    imp.add_argument("source", help="Source file, archive or directory")
    imp.add_argument("--delay", type=float, default=2.0, help="Delay between imports in seconds")
    imp.add_argument("--mode", default="", help="Processing mode for files: fast, hi_res or all")
    imp.add_argument("--static", dest="static_mode", default="", help="Static content processing mode")
    imp.add_argument("--audio", action="store_true", help="Enable audio processing")
    imp.add_argument("--video", default="", help="Video processing: audio_only, video_only or audio_video")
    imp.add_argument("--force", action="store_true", help="Import even if a document with the same external ID exists")
    imp.add_argument("--replace", action="store_true", help="Delete existing documents with the same external ID first")

    sub.add_parser("clear", parents=[common], help="Clear all documents (in a partition)")
    return parser

def print_summary(stats: ImportStats, dry_run: bool):
    print("\n=========================")
    print("--- Import Summary ---")
    print("=========================")
    print(f"Found:           {stats.found}")
    print(f"Created:         {stats.created}")
    print(f"Skipped:         {stats.skipped}")
    print(f"Deleted:         {stats.deleted}")
    print(f"Errors:          {stats.errors}")
    if dry_run:
        print(f"Dry Run Skipped: {stats.dry_run}")
    print("=========================")

def run_import(client: RagieClient, args: argparse.Namespace) -> int:
    try:
        config = ImportConfig(
            dry_run=args.dry_run,
            delay=args.delay,
            partition=args.partition,
            mode=args.mode,
            static_mode=args.static_mode,
            audio=args.audio,
            video=args.video,
            force=args.force,
            replace=args.replace,
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"Error: {err['msg']}", file=sys.stderr)
        return 1

    print(f"--- Ragie Import Started ({args.type}, DRY_RUN={config.dry_run}) ---")
    try:
        items = READERS[args.type](args.source)
        stats = Importer(client, config).run(items)
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(stats, config.dry_run)
    return 0

def run_clear(client: RagieClient, args: argparse.Namespace) -> int:
    print("Running clear...")
    try:
        deleted = clear_documents(client, partition=args.partition, dry_run=args.dry_run)
    except (RagieAPIError, requests.RequestException) as e:
        print(f"Error: failed to list documents: {e}", file=sys.stderr)
        return 1
    print(f"Cleared {deleted} documents.")
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else os.getenv("LOG_LEVEL", "INFO"))

    api_key = os.getenv("RAGIE_API_KEY")
    if not api_key:
        print("Error: RAGIE_API_KEY environment variable must be set", file=sys.stderr)
        return 1

    client = RagieClient(api_key, base_url=os.getenv("RAGIE_BASE_URL"))
    if args.command == "import":
        return run_import(client, args)
    return run_clear(client, args)

if __name__ == "__main__":
    sys.exit(main())
