#!/usr/bin/env python3
"""
CSV Ingestion Script
Loads a local time-series CSV file into the database through the ingestion pipeline.

Usage:
    python -m timescale_backend.scripts.ingest_file data/run-42.csv
    python -m timescale_backend.scripts.ingest_file data/run-42.csv --name run-42.csv --create-tables
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from timescale_backend.api.config import get_settings
from timescale_backend.db.session import build_engine, configure, init_db
from timescale_backend.ingestion import CsvIngestionService, IngestionError, ParseError, ValidationError

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest a time-series CSV file")
    parser.add_argument("csv_path", type=str, help="Path to the semicolon-delimited CSV file")
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="File name to store the result under (default: base name of csv_path)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: DATABASE_URL from the environment)",
    )
    parser.add_argument(
        "--create-tables", action="store_true", help="Create missing tables before ingesting"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run CSV ingestion."""
    args = build_parser().parse_args(argv)

    csv_path = Path(args.csv_path)
    if not csv_path.exists():
        logger.error(f"CSV file not found: {csv_path}")
        return 1

    db_url = args.database_url or get_settings().database_url
    engine = build_engine(db_url)
    session_factory = configure(engine)
    if args.create_tables:
        init_db(engine)

    file_name = args.name or csv_path.name
    logger.info(f"Starting ingestion of {csv_path} as '{file_name}'")

    service = CsvIngestionService(session_factory=session_factory)
    try:
        summary = service.ingest_path(str(csv_path), file_name=file_name)
    except (ParseError, ValidationError) as e:
        logger.error(f"File rejected: {e}")
        return 2
    except IngestionError as e:
        logger.error(f"Ingestion failed: {e}")
        return 1

    stats = summary.stats
    logger.info("=" * 60)
    logger.info("INGESTION COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Result ID: {summary.result_id}")
    logger.info(f"Rows stored: {summary.row_count}")
    logger.info(f"Replaced previous upload: {summary.replaced_existing}")
    logger.info(f"Time span: {stats.delta_seconds:.3f} seconds from {stats.min_timestamp.isoformat()}")
    logger.info(f"Average execution time: {stats.avg_execution_time}")
    logger.info(
        f"Values: avg={stats.avg_value} median={stats.median_value} "
        f"min={stats.min_value} max={stats.max_value}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
