from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from road_importer.config import Settings
from road_importer.errors import ImporterError
from road_importer.pipeline import run_import


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="road-import",
        description="Import a road-network edge CSV into Dgraph and/or a JSON artifact.",
    )
    # Unset options fall back to ROAD_* environment settings.
    parser.add_argument("--CSV", dest="csv_path", default=None, help="The CSV input file")
    parser.add_argument("--output", dest="output_path", default=None, help="JSON artifact path")
    parser.add_argument("--dgraph-url", dest="dgraph_url", default=None, help="Dgraph alpha HTTP endpoint")
    parser.add_argument(
        "--sink",
        dest="sink_enabled",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write the records to Dgraph",
    )
    parser.add_argument(
        "--artifact",
        dest="artifact_enabled",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write the records to the JSON artifact",
    )
    parser.add_argument("--skip-header", dest="skip_header", action="store_true", default=None)
    parser.add_argument("--allow-short-rows", dest="allow_short_rows", action="store_true", default=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for ``road-import``. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}

    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        result = run_import(settings)
    except ImporterError as e:
        logger.error(f"Import failed: {e}")
        return 1

    logger.info(f"Import finished: {len(result.records)} records")
    return 0


if __name__ == "__main__":
    sys.exit(main())
