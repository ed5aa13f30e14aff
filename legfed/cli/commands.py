"""
CLI commands for the LegFed loaders.

Usage:
    python -m legfed.cli.commands list-formats
    python -m legfed.cli.commands convert cmap Map_3847_map.cmap.txt --output items.jsonl
    python -m legfed.cli.commands convert chado --database
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from legfed.conversion.errors import ConversionError
from legfed.conversion.sink import DatabaseSink, JsonLinesSink, Sink
from legfed.converters import CONVERTERS
from legfed.core.settings import settings
from legfed.db.engine import SessionLocal
from legfed.services.pubmed import enricher_from_settings
from legfed.utils.logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def cmd_list_formats() -> None:
    """Print the available converter formats."""
    for name, converter_class in CONVERTERS.items():
        print(f"{name:24} {converter_class.description}")


def make_sink(args: argparse.Namespace, session) -> Sink:
    if args.database:
        return DatabaseSink(session)
    return JsonLinesSink(Path(args.output))


def cmd_convert(args: argparse.Namespace) -> int:
    """
    Convert files (or the Chado database) and store the Items.

    Returns:
        Number of Items stored
    """
    converter_class = CONVERTERS[args.format]
    session = None
    if args.database or args.format == "chado":
        session = SessionLocal()

    try:
        sink = make_sink(args, session)
        kwargs = {}
        if args.format == "chado" and args.taxon_id:
            kwargs["taxon_ids"] = [args.taxon_id]
        else:
            kwargs["taxon_id"] = args.taxon_id
        converter = converter_class(
            sink=sink,
            variety=args.variety,
            genetic_map=args.genetic_map,
            enricher=enricher_from_settings(args.publication_lookup),
            **kwargs,
        )

        if args.format == "chado":
            converter.process_database(session)
        else:
            if not args.files:
                raise ConversionError(f"{args.format} needs at least one input file")
            for path in args.files:
                converter.process_file(Path(path))

        stored = converter.close()
        logger.info(
            f"{args.format}: {converter.stats['records']} records, "
            f"{converter.stats['skipped']} skipped, {stored} items stored"
        )
        return stored
    finally:
        if session is not None:
            session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="LegFed data loaders",
        prog="python -m legfed.cli.commands",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list-formats", help="List the available input formats")

    convert = subparsers.add_parser("convert", help="Convert input files into Items")
    convert.add_argument("format", choices=sorted(CONVERTERS), help="Input format")
    convert.add_argument("files", nargs="*", help="Input files (plain or gzipped)")
    convert.add_argument("--taxon-id", help="Default NCBI taxon ID (files may override)")
    convert.add_argument("--variety", help="Default organism variety")
    convert.add_argument("--genetic-map", help="Default genetic map name")
    convert.add_argument(
        "--publication-lookup",
        choices=["off", "fail", "skip"],
        help="Override PUBLICATION_LOOKUP",
    )
    output = convert.add_mutually_exclusive_group(required=True)
    output.add_argument("--output", help="Write Items as JSON lines to this file")
    output.add_argument(
        "--database",
        action="store_true",
        help="Store Items in the legfed_item table of DATABASE_URL",
    )
    convert.add_argument("--log-file", type=Path, help="Also log to this file")
    convert.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entrypoint."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "list-formats":
        cmd_list_formats()
        return

    if args.command != "convert":
        parser.print_help()
        sys.exit(1)

    setup_logging(
        level=level_from_name(settings.log_level, args.verbose),
        log_file=args.log_file,
        log_dir=Path(settings.log_dir) if settings.log_dir and not args.log_file else None,
    )

    try:
        cmd_convert(args)
    except ConversionError as e:
        logger.error(f"Conversion failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Conversion failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
