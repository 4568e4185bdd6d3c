"""Command-line runner that ingests SPL files into the database.

Usage:
    python -m spl_ingest.main label1.xml label2.xml --create-tables

Each file is ingested in its own session. Forward references that stayed
pending are swept once all files have been processed.
"""

import argparse
import asyncio
import glob
import os
import sys
from pathlib import Path
from typing import List

from spl_ingest.core.database import async_session_maker, close_database, init_database
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.document_ingestion_service import DocumentIngestionService
from spl_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


def expand_inputs(patterns: List[str]) -> List[str]:
    """Expand glob patterns into a de-duplicated, ordered list of files."""
    files: List[str] = []
    for pattern in patterns:
        hits = sorted(glob.glob(pattern))
        if not hits and os.path.isfile(pattern):
            hits = [pattern]
        files.extend(hits)
    return list(dict.fromkeys(files))


async def ingest_file(path: str) -> ParseResult:
    """Ingest a single SPL file in a fresh session."""
    data = Path(path).read_bytes()
    async with async_session_maker() as session:
        service = DocumentIngestionService(session)
        return await service.ingest_bytes(
            data,
            file_name=os.path.basename(path),
            report_progress=lambda message: LOGGER.debug(message, extra={"file_name": path}),
        )


async def sweep_pending_references() -> ParseResult:
    async with async_session_maker() as session:
        return await DocumentIngestionService(session).resolve_pending_references()


async def main(args: argparse.Namespace) -> int:
    """Ingest every input file, then sweep pending references.

    Returns:
        Process exit code: 0 when every document ingested cleanly
    """
    files = expand_inputs(args.inputs)
    if not files:
        LOGGER.warning("No input files matched", extra={"inputs": args.inputs})
        return 2

    await init_database(create_tables=args.create_tables)

    summary = ParseResult()
    try:
        for path in files:
            LOGGER.info(f"Ingesting {path}")
            result = await ingest_file(path)
            for error in result.errors:
                LOGGER.error(error, extra={"file_name": path})
            summary.merge_from(result)

        if not args.skip_sweep:
            summary.merge_from(await sweep_pending_references())
    finally:
        await close_database()

    LOGGER.info(
        "Ingestion run finished",
        extra={
            "files": len(files),
            "sections": summary.sections_processed,
            "records_created": summary.total_created,
            "warnings": len(summary.warnings),
            "errors": len(summary.errors),
        },
    )
    return 0 if summary.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ingest SPL drug label documents")
    parser.add_argument("inputs", nargs="+", help="SPL XML files or glob patterns")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables from the models instead of relying on migrations",
    )
    parser.add_argument(
        "--skip-sweep",
        action="store_true",
        help="Do not sweep pending cross-document references after ingestion",
    )
    return parser


def run() -> None:
    sys.exit(asyncio.run(main(build_parser().parse_args())))


if __name__ == "__main__":
    run()
