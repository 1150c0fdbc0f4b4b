"""
Indexer Task
One-shot scan of the NAS root: every top-level directory is a part code and
is upserted into the catalog with its absolute path.

Usage: python -m photocatalog.tasks.indexer [--root PATH] [--concurrency N] [--fail-on-errors]
"""

import argparse
import asyncio
import logging
import os
import stat
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from photocatalog.config import ConfigurationError, Settings, get_settings
from photocatalog.context import AppContext
from photocatalog.database import ping_db
from photocatalog.logging_config import setup_logging
from photocatalog.models.catalog import CatalogEntry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_FATAL = 2

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class IndexerError(RuntimeError):
    """Fatal indexing failure; nothing was (or can be) indexed."""


@dataclass
class IndexReport:
    total: int = 0
    indexed: int = 0
    skipped: int = 0
    failed: int = 0


def build_upsert(dialect_name: str, part_code: str, directory_path: str, indexed_at: datetime):
    """INSERT ... ON CONFLICT (part_code) DO UPDATE for the given dialect."""
    insert = _INSERTS[dialect_name]
    stmt = insert(CatalogEntry).values(
        part_code=part_code,
        directory_path=directory_path,
        last_indexed_at=indexed_at,
    )
    return stmt.on_conflict_do_update(
        index_elements=[CatalogEntry.part_code],
        set_={
            "directory_path": stmt.excluded.directory_path,
            "last_indexed_at": stmt.excluded.last_indexed_at,
        },
    )


class CatalogIndexer:
    """
    Scans the immediate entries of a root directory with a fixed number of
    workers draining a shared queue. One failing entry never stops the others.
    """

    def __init__(self, context: AppContext, root: str, concurrency: int = 8):
        self.context = context
        self.root = os.path.abspath(root)
        self.concurrency = max(1, concurrency)
        self.report = IndexReport()

    async def run(self) -> IndexReport:
        logger.info("--- Starting NAS indexing ---")
        logger.info(f"Source (NAS root): {self.root}")

        dialect_name = self.context.engine.dialect.name
        if dialect_name not in _INSERTS:
            raise IndexerError(f"Upsert not supported for database dialect '{dialect_name}'")

        try:
            await ping_db(self.context.engine)
        except (SQLAlchemyError, OSError) as e:
            raise IndexerError(f"Cannot connect to the database: {e}") from e
        logger.info("Database connection established.")

        try:
            names = await asyncio.to_thread(os.listdir, self.root)
        except OSError as e:
            raise IndexerError(f"Cannot read NAS root {self.root}: {e}") from e

        self.report = IndexReport(total=len(names))
        logger.info(f"Found {len(names)} entries in the root directory. Checking...")

        queue: asyncio.Queue = asyncio.Queue()
        for name in names:
            queue.put_nowait(name)

        workers = [
            asyncio.create_task(self._worker(queue))
            for _ in range(min(self.concurrency, len(names)))
        ]
        await asyncio.gather(*workers)

        logger.info("--- Indexing finished ---")
        logger.info(f"Folders indexed/updated: {self.report.indexed}")
        logger.info(f"Entries skipped (not a directory): {self.report.skipped}")
        logger.info(f"Entries failed: {self.report.failed}")
        return self.report

    async def _worker(self, queue: asyncio.Queue) -> None:
        while True:
            try:
                name = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process(name)

    async def _process(self, name: str) -> None:
        path = os.path.join(self.root, name)

        try:
            st = await asyncio.to_thread(os.stat, path)
        except OSError as e:
            logger.warning(f"  -> WARNING: cannot inspect '{name}': {e}")
            self.report.failed += 1
            return

        if not stat.S_ISDIR(st.st_mode):
            logger.debug(f"  -> skip: '{name}' is not a directory")
            self.report.skipped += 1
            return

        try:
            await self._upsert(name, path)
        except SQLAlchemyError as e:
            logger.warning(f"  -> WARNING: cannot index '{name}': {e}")
            self.report.failed += 1
            return

        logger.info(f"  -> OK: [{name}]")
        self.report.indexed += 1

    async def _upsert(self, part_code: str, directory_path: str) -> None:
        stmt = build_upsert(
            self.context.engine.dialect.name, part_code, directory_path, datetime.utcnow()
        )
        async with self.context.session_factory() as session:
            await session.execute(stmt)
            await session.commit()


async def run_indexer(settings: Settings, root: Optional[str] = None, concurrency: Optional[int] = None) -> IndexReport:
    """Index the configured (or given) root with a context of its own."""
    root = root or settings.require_nas_root()
    context = AppContext.from_settings(settings)
    try:
        indexer = CatalogIndexer(context, root, concurrency or settings.indexer_concurrency)
        return await indexer.run()
    finally:
        await context.dispose()


def exit_code(report: IndexReport, fail_on_errors: bool) -> int:
    if fail_on_errors and report.failed:
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync part code folders on the NAS into the catalog.")
    parser.add_argument("--root", help="Directory to scan (default: NAS_ROOT_PATH)")
    parser.add_argument("--concurrency", type=int, help="Number of concurrent workers (default: INDEXER_CONCURRENCY)")
    parser.add_argument(
        "--fail-on-errors",
        action="store_true",
        default=None,
        help="Exit with status 1 when any entry failed (default: INDEXER_FAIL_ON_ERRORS)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = parse_args(argv)

    try:
        settings = settings or get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    fail_on_errors = settings.indexer_fail_on_errors if args.fail_on_errors is None else args.fail_on_errors
    try:
        report = asyncio.run(run_indexer(settings, root=args.root, concurrency=args.concurrency))
    except (ConfigurationError, IndexerError) as e:
        logger.critical(f"Indexing aborted: {e}")
        return EXIT_FATAL

    return exit_code(report, fail_on_errors)


if __name__ == "__main__":
    sys.exit(main())
