from __future__ import annotations

import argparse
import json
import logging

from job_aggregator.core.config import settings
from job_aggregator.core.logging import setup_logging
from job_aggregator.crawlers.http_helpers import HttpSession
from job_aggregator.crawlers.registry import available_sources, build_registry
from job_aggregator.db.database import SessionLocal
from job_aggregator.db.init_db import init_db
from job_aggregator.services.crawl_service import AggregationPipeline, run_crawl
from job_aggregator.services.store import UpsertStore

logger = logging.getLogger("job_aggregator.cli")


def _print_digest(digest: dict) -> None:
    for row in digest["sources"]:
        line = f"  {row['source']:<12} {row['status']:<8} fetched={row['fetched']:<4} stored={row['stored']}"
        if row["error"]:
            line += f"  ({row['error']})"
        print(line)
    print(f"Total jobs: {digest['total']} ({digest['stored']} stored)")
    top = list(digest["stats"]["topCompanies"].items())[:5]
    if top:
        print("Top companies:", ", ".join(f"{name} ({count})" for name, count in top))
    if digest.get("batch_file"):
        print(f"Batch file: {digest['batch_file']}")


def cmd_once(args: argparse.Namespace) -> None:
    init_db()
    db = SessionLocal()
    try:
        digest = run_crawl(
            db,
            sources=args.sources,
            query=args.query,
            location=args.location,
            page_count=args.pages,
            batch_filename=args.out,
        )
    finally:
        db.close()
    _print_digest(digest)


def cmd_all(args: argparse.Namespace) -> None:
    init_db()
    db = SessionLocal()
    total = 0
    try:
        with HttpSession() as session:
            pipeline = AggregationPipeline(build_registry(session))
            for index, name in enumerate(available_sources()):
                if index:
                    pipeline.sleep(pipeline.source_delay)
                print(f"--- Scraping {name} ---")
                digest = run_crawl(
                    db,
                    sources=[name],
                    query=args.query,
                    location=args.location,
                    page_count=args.pages,
                    batch_filename=f"{name}_jobs.json",
                    pipeline=pipeline,
                )
                total += digest["total"]
                _print_digest(digest)
    finally:
        db.close()
    print(f"Total jobs scraped: {total}")


def cmd_import(args: argparse.Namespace) -> None:
    init_db()
    db = SessionLocal()
    try:
        stored = UpsertStore(db).import_file(args.path)
    finally:
        db.close()
    print(f"Imported {stored} jobs from {args.path}")


def cmd_stats(args: argparse.Namespace) -> None:
    init_db()
    db = SessionLocal()
    try:
        stats = UpsertStore(db).stats()
    finally:
        db.close()
    print(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))


def cmd_sources(args: argparse.Namespace) -> None:
    for name in available_sources():
        print(name)


def _add_scrape_args(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--query", default="developer", help="Search terms")
    cmd.add_argument("--location", default="", help="Location filter, where the source supports one")
    cmd.add_argument("--pages", type=int, default=1, help="Number of pages to fetch per source")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="job_aggregator", description="Aggregate job postings from many boards")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    once_cmd = subparsers.add_parser("once", help="Scrape selected sources once")
    once_cmd.add_argument(
        "--sources",
        nargs="+",
        default=list(settings.default_sources),
        help="Source names (default: %(default)s)",
    )
    _add_scrape_args(once_cmd)
    once_cmd.add_argument("--out", default=None, help="Batch file name inside the output directory")
    once_cmd.set_defaults(func=cmd_once)

    all_cmd = subparsers.add_parser("all", help="Scrape every registered source")
    _add_scrape_args(all_cmd)
    all_cmd.set_defaults(func=cmd_all)

    import_cmd = subparsers.add_parser("import", help="Import a JSON batch file into the database")
    import_cmd.add_argument("path", help="Path to the batch file")
    import_cmd.set_defaults(func=cmd_import)

    stats_cmd = subparsers.add_parser("stats", help="Print statistics for stored jobs")
    stats_cmd.set_defaults(func=cmd_stats)

    sources_cmd = subparsers.add_parser("sources", help="List registered sources")
    sources_cmd.set_defaults(func=cmd_sources)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    try:
        args.func(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except Exception:  # noqa: BLE001
        logger.exception("%s failed", args.command)
        return 1
    return 0
