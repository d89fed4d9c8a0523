"""
Command-line interface for PSP journey analysis.

Usage:
    psp-analyze analyze --input <file_path> [options]
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pyspark.sql import SparkSession

from psp_analytics.analysis import AnalysisPipeline
from psp_analytics.core.models import AnalysisResult, Granularity
from psp_analytics.ingest import TransactionCSVReader
from psp_analytics.observability.logger import get_logger
from psp_analytics.observability.metrics import start_metrics_server, write_metrics


logger = get_logger(__name__)

GRANULARITY_CHOICES = [g.value for g in Granularity] + ["all"]


def create_spark_session(app_name: str = "PSPAnalysis") -> SparkSession:
    """
    Create Spark session for reading transaction files.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.ui.enabled", "false") \
        .getOrCreate()

    return spark


def build_report(
    result: AnalysisResult,
    granularity: str = "all",
    top_decline_reasons: int | None = None,
    excluded_psps: list[str] | None = None,
    pipeline: AnalysisPipeline | None = None,
) -> dict[str, Any]:
    """
    JSON report for one analysis result.

    Args:
        result: Completed analysis
        granularity: daily, weekly, monthly or all
        top_decline_reasons: Keep only the N most frequent decline reasons
        excluded_psps: Add what-if totals without these PSPs
        pipeline: Pipeline used for the what-if recalculation

    Returns:
        Dictionary with camelCase keys
    """
    report = result.summary()
    report["journeyCount"] = result.journey_count

    if granularity != "all":
        selected = Granularity.parse(granularity).value
        report["timeAnalysis"] = {selected: report["timeAnalysis"][selected]}

    if top_decline_reasons is not None:
        report["declineReasons"] = report["declineReasons"][:top_decline_reasons]

    if excluded_psps:
        pipeline = pipeline or AnalysisPipeline()
        totals = pipeline.recalculate(result, excluded_psps)
        report["exclusionTotals"] = totals.model_dump(mode="json", by_alias=True)

    return report


def analyze_command(args):
    """
    Execute analysis command.

    Args:
        args: Command-line arguments
    """
    logger.info(f"Input file: {args.input}")

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    if args.metrics_port:
        start_metrics_server(args.metrics_port)
        logger.info(f"Metrics server listening on port {args.metrics_port}")

    logger.info("Creating Spark session...")
    spark = create_spark_session()

    try:
        transactions = TransactionCSVReader(spark).read(str(input_path))

        pipeline = AnalysisPipeline(
            vocabulary_path=args.status_config,
            min_transactions=args.min_transactions,
        )
        result = pipeline.run(transactions)

        report = build_report(
            result,
            granularity=args.granularity,
            top_decline_reasons=args.top_decline_reasons,
            excluded_psps=args.exclude,
            pipeline=pipeline,
        )
        json.dump(report, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")

        if args.metrics_file:
            write_metrics(args.metrics_file)
            logger.info(f"Metrics written to {args.metrics_file}")

    except Exception as e:
        logger.error(f"Error during analysis: {e}", exc_info=True)
        sys.exit(1)
    finally:
        spark.stop()


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="psp-analyze",
        description="PSP approval and routing analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a transaction export
  psp-analyze analyze --input data/transactions.csv

  # Custom status vocabulary, weekly buckets only
  psp-analyze analyze --input data/transactions.csv \\
      --status-config config/status_vocabulary.yaml --granularity weekly

  # What-if totals without two PSPs
  psp-analyze analyze --input data/transactions.csv --exclude Paysafe PayPal
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a transaction CSV file")
    analyze_parser.add_argument(
        "--input",
        required=True,
        help="Path to input CSV file"
    )
    analyze_parser.add_argument(
        "--status-config",
        default=None,
        help="Path to status vocabulary YAML file (default: $PSP_STATUS_CONFIG or "
             "config/status_vocabulary.yaml)"
    )
    analyze_parser.add_argument(
        "--exclude",
        nargs="+",
        default=None,
        metavar="PSP",
        help="Also report totals as if these PSPs never processed anything"
    )
    analyze_parser.add_argument(
        "--granularity",
        default="all",
        choices=GRANULARITY_CHOICES,
        help="Time series to include (default: all)"
    )
    analyze_parser.add_argument(
        "--top-decline-reasons",
        type=int,
        default=None,
        help="Only report the N most frequent decline reasons"
    )
    analyze_parser.add_argument(
        "--min-transactions",
        type=int,
        default=5,
        help="Journeys a PSP needs in a country for the best-PSP view (default: 5)"
    )
    analyze_parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port while running"
    )
    analyze_parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write Prometheus metrics to this file after the run"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "analyze":
        analyze_command(args)


if __name__ == "__main__":
    main()
