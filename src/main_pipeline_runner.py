#!/usr/bin/env python3
"""
Main Pipeline Runner

Command-line entry point of the weekly price collector:

1. ``collector``: fetch weekly prices for every symbol of the list into SQLite
2. ``exporter``: dump the stored prices to a JSON document

Usage:
    python -m src.main_pipeline_runner collector --db-name crypto.sqlite --prod
    python -m src.main_pipeline_runner exporter --db-name crypto.sqlite --json prices.json
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from src.utils.core.logger import get_logger
from src.data_collector.config import CollectorConfig, config as default_config
from src.data_collector.alpha_vantage.data_pipeline import CollectorPipeline, PipelineStats
from src.data_collector.alpha_vantage.concurrent_pipeline import ConcurrentCollectorPipeline
from src.data_collector.exporter import export_to_json

logger = get_logger(__name__)


def run_collection(
    collector_config: CollectorConfig,
    concurrent: bool = False,
    clear_blacklist: bool = False,
) -> PipelineStats:
    """
    Run one collection pass with the sequential or the concurrent pipeline

    Args:
        collector_config: Run configuration
        concurrent: Whether to fetch each batch of symbols in parallel
        clear_blacklist: Empty the blacklist before starting

    Returns:
        Statistics of the run
    """
    pipeline_cls = ConcurrentCollectorPipeline if concurrent else CollectorPipeline
    with pipeline_cls(collector_config) as pipeline:
        return pipeline.run(clear_blacklist=clear_blacklist)


def print_results(stats: PipelineStats) -> None:
    """Print collection results in a formatted way"""
    print("\n" + "=" * 60)
    print("WEEKLY PRICE COLLECTION RESULTS")
    print("=" * 60)
    print(f"   Mode: {stats.mode}")
    print(f"   Symbols processed: {stats.processed}")
    print(f"   Successful: {stats.successful} ({stats.incomplete} incomplete)")
    print(f"   Failed: {stats.failed}")
    print(f"   Newly blacklisted: {stats.blacklisted}")
    print(f"   Skipped (blacklisted): {stats.skipped_blacklisted}")
    print(f"   Prices stored: {stats.total_records_stored}/{stats.total_records_extracted}")
    print(f"   Daily limit hits: {stats.limit_hits}")
    print(f"   Duration: {stats.duration.total_seconds() / 60:.1f} minutes")
    if stats.stopped_early:
        print("   Stopped early: daily limit reached, run again to resume")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Weekly Price Collector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
            Examples:
            # Collect until the daily limit is reached
            python -m src.main_pipeline_runner collector --db-name crypto.sqlite

            # Collect the whole list, waiting for the quota to reset when needed
            python -m src.main_pipeline_runner collector --prod --concurrent

            # Export the stored prices
            python -m src.main_pipeline_runner exporter -d crypto.sqlite -j prices.json
    """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    collector = subparsers.add_parser("collector", help="Collect weekly prices into the database")
    collector.add_argument("-d", "--db-name", default=default_config.DB_PATH, help="Path to the sqlite database file")
    collector.add_argument(
        "-a", "--api-key-file", default=default_config.API_KEY_FILE, help="File holding the API key"
    )
    collector.add_argument(
        "-c",
        "--currency-list-file",
        default=default_config.SYMBOL_LIST_FILE,
        help="CSV file with the symbols to collect",
    )
    collector.add_argument(
        "-p",
        "--prod",
        action="store_true",
        default=default_config.PRODUCTION,
        help="Wait for the daily limit to reset instead of stopping",
    )
    collector.add_argument(
        "-i", "--index-path", default=default_config.CHECKPOINT_PATH, help="File holding the resume index"
    )
    collector.add_argument(
        "-b", "--clear-blacklist", action="store_true", help="Empty the blacklist before collecting"
    )
    collector.add_argument(
        "-g", "--concurrent", action="store_true", help="Fetch each batch of symbols in parallel"
    )
    collector.add_argument(
        "--batch-size",
        type=int,
        default=default_config.BATCH_SIZE,
        help="Requests per pacing window (and workers in concurrent mode)",
    )

    exporter = subparsers.add_parser("exporter", help="Export stored prices to a JSON file")
    exporter.add_argument("-d", "--db-name", required=True, help="Path to the sqlite database file")
    exporter.add_argument("-j", "--json", required=True, help="Path to the output JSON file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function with command-line interface"""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "collector":
            if args.batch_size < 1:
                logger.error("--batch-size must be at least 1")
                return 1

            collector_config = replace(
                default_config,
                DB_PATH=args.db_name,
                API_KEY_FILE=args.api_key_file,
                SYMBOL_LIST_FILE=args.currency_list_file,
                PRODUCTION=args.prod,
                CHECKPOINT_PATH=args.index_path,
                BATCH_SIZE=args.batch_size,
            )
            logger.info(
                f"Starting collection: db={collector_config.DB_PATH}, "
                f"concurrent={args.concurrent}, production={collector_config.PRODUCTION}"
            )
            stats = run_collection(
                collector_config,
                concurrent=args.concurrent,
                clear_blacklist=args.clear_blacklist,
            )
            print_results(stats)
            return 0

        exported = export_to_json(args.db_name, args.json)
        print(f"Data exported successfully from '{args.db_name}' to '{args.json}' ({exported} symbols)")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user, progress is kept in the index file")
        return 130
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
