"""
Command-line entry point: collect properties for a city and store them in SQLite.

Usage:
    python -m propscraper.collect_properties --city "Columbus" --state "OH" --limit 10
"""
import argparse
import asyncio
import os
import sys
from dataclasses import replace

from .browser import headless_from_env
from .config import DEFAULT_CONFIG, MISSING_FIELD_DEFAULT, MISSING_FIELD_REJECT
from .core import run_collection
from .database import SqliteSink
from .errors import CollectionError
from .export import export_location, save_output_rows, write_frame
from .utils import init_logger, now_iso

DEFAULT_DB = os.getenv("PROPTECH_DB", "./data/db/properties.db")


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Real-estate listing collector with SQLite search index")
    ap.add_argument("--city", type=str, required=True, help="Target city name, e.g. 'Columbus'")
    ap.add_argument("--state", type=str, required=True, help="Target state abbreviation, e.g. 'OH'")
    ap.add_argument("--limit", type=int, default=20, help="Maximum properties to collect")
    ap.add_argument("--db", type=str, default=DEFAULT_DB, help="Path to SQLite DB")
    ap.add_argument("--out", type=str, default="", help="CSV/XLSX to export the collected records to")
    ap.add_argument("--export-location", action="store_true",
                    help="Export everything stored for this city/state (uses --out)")
    ap.add_argument("--require-image", action="store_true", help="Only index properties that have an image")
    ap.add_argument("--missing-fields", choices=[MISSING_FIELD_DEFAULT, MISSING_FIELD_REJECT],
                    default=MISSING_FIELD_DEFAULT,
                    help="Unparseable beds/baths/sqft: fall back to defaults or drop the listing")
    ap.add_argument("--headful", action="store_true", help="Show the browser window")
    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=os.getenv("LOG_CONSOLE", "INFO"),
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=os.getenv("LOG_FILE", "DEBUG"),
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=os.getenv("LOG_FILE_PATH", "propscraper.log"),
                    help="Path to log file (default from env LOG_FILE_PATH or propscraper.log).")
    ap.add_argument("--no-file-log", action="store_true",
                    help="Disable file logging (only console output).")
    args = ap.parse_args(argv)
    if args.limit < 1:
        ap.error("--limit must be at least 1")
    return args


def main(argv=None):
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    logger = init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    logger.info(f">>> Run started at {now_iso()}")
    logger.info(f">>> Target: {args.city}, {args.state} | limit {args.limit} | db {args.db}")

    config = DEFAULT_CONFIG
    if args.missing_fields != config.missing_field_policy:
        config = replace(config, missing_field_policy=args.missing_fields)

    sink = SqliteSink(args.db)
    try:
        summary = asyncio.run(run_collection(
            args.city, args.state, args.limit,
            sink=sink,
            config=config,
            require_image=args.require_image,
            headless=not args.headful and headless_from_env(),
        ))
    except CollectionError as e:
        logger.error(f">>> Collection failed: {e}")
        sink.close()
        return 1

    logger.info(">>> COLLECTION SUMMARY")
    logger.info(f"Properties collected: {summary.collected}")
    logger.info(f"Properties with images: {summary.with_images}")
    logger.info(f"Properties with URLs: {summary.with_urls}")
    logger.info(f"Placeholder addresses: {summary.synthesized_addresses}")
    logger.info(f"Properties indexed: {summary.indexed}")
    logger.info(f"Task ID: {summary.task_id or 'N/A'}")
    if summary.collected == 0:
        logger.info(">>> No properties found for the specified location")

    if args.out:
        if args.export_location:
            df = export_location(sink.conn, args.city, args.state)
            write_frame(df, args.out)
            logger.info(f">>> Export for {args.city}, {args.state}: {len(df)} rows -> {args.out}")
        else:
            save_output_rows(summary.records, args.out)

    sink.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
