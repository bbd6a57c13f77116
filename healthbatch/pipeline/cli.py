"""
CLI Interface for Pipeline

Command-line interface for processing health measurement batches.

Usage:
    python -m healthbatch.pipeline.cli --help
    python -m healthbatch.pipeline.cli process batch.json
    python -m healthbatch.pipeline.cli demo
    python -m healthbatch.pipeline.cli run --submit
    python -m healthbatch.pipeline.cli validate
"""

import argparse
import json
import sys
from pathlib import Path

from healthbatch.clients.fetcher import RecordFetcher
from healthbatch.clients.submitter import ResultSubmitter
from healthbatch.exceptions import ConfigurationError, HealthBatchError
from healthbatch.pipeline.processor import BatchProcessor, build_submission
from healthbatch.pipeline.sample_data import sample_records
from healthbatch.utils.config import get_settings, validate_config
from healthbatch.utils.logger import configure_root_logger, get_logger

logger = get_logger(__name__)


def setup_logging(verbose: bool = False, quiet: bool = False):
    """
    Configure logging based on verbosity flags.

    Args:
        verbose: Enable debug logging
        quiet: Suppress all output except errors
    """
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = "INFO"

    configure_root_logger(level=level)


def load_batch(path: Path) -> list:
    """
    Read a batch from a JSON file.

    Accepts a bare array or an object with a ``data`` array.

    Raises:
        ValueError: If the file does not hold a list of records
    """
    with open(path, encoding="utf-8") as f:
        body = json.load(f)
    records = body.get("data") if isinstance(body, dict) else body
    if not isinstance(records, list):
        raise ValueError("Invalid data format. Expected array of records.")
    return records


def print_summary(analysis: dict) -> None:
    print("\n" + "=" * 70)
    print("  Analysis Summary")
    print("=" * 70)
    print(f"\nTotal records:         {analysis['totalRecords']}")
    average = analysis.get("averageValue")
    print(f"Average value:         {average:.2f}" if average is not None else "Average value:         n/a")
    print("\nRecords by category:")
    for category, count in sorted(analysis["recordsByCategory"].items()):
        print(f"  {category:20s} {count:>6}")
    print("\n" + "=" * 70)


def cmd_process(args):
    """Process a batch read from a JSON file."""
    setup_logging(args.verbose, args.quiet)

    try:
        records = load_batch(Path(args.input))
    except (OSError, ValueError) as e:
        logger.error(f"Could not read batch: {e}")
        print(f"\n[ERROR] Could not read batch: {e}", file=sys.stderr)
        return 1

    result = BatchProcessor().process(records)
    output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info("Wrote results", extra={"path": args.output})
    else:
        print(output)

    if not result.ok:
        print(f"\n[ERROR] Processing failed: {result.error.message}", file=sys.stderr)
        return 1
    return 0


def cmd_demo(args):
    """Process the built-in sample batch."""
    setup_logging(args.verbose, args.quiet)

    result = BatchProcessor().process(sample_records())
    if not result.ok:
        print(f"\n[ERROR] Processing failed: {result.error.message}", file=sys.stderr)
        return 1

    print_summary(result.analysis.to_dict())
    return 0


def cmd_run(args):
    """Fetch a batch from the API, process it, and optionally submit the summary."""
    setup_logging(args.verbose, args.quiet)

    try:
        validate_config()
        records = RecordFetcher().fetch_with_retry(args.endpoint)
    except HealthBatchError as e:
        logger.error(f"Fetch failed: {e}")
        print(f"\n[ERROR] Fetch failed: {e}", file=sys.stderr)
        return 1

    result = BatchProcessor().process(records)
    if result.ok:
        print_summary(result.analysis.to_dict())
    else:
        print(f"\n[ERROR] Processing failed: {result.error.message}", file=sys.stderr)

    if args.submit:
        try:
            receipt = ResultSubmitter().submit_with_retry(build_submission(result))
        except HealthBatchError as e:
            logger.error(f"Submission failed: {e}")
            print(f"\n[ERROR] Submission failed: {e}", file=sys.stderr)
            return 1
        print(f"Submitted results (receipt: {receipt.id or 'n/a'})")

    return 0 if result.ok else 1


def cmd_validate(args):
    """Validate configuration."""
    setup_logging(args.verbose, args.quiet)

    settings = get_settings()
    print("\n" + "=" * 70)
    print("  Configuration Validation")
    print("=" * 70)
    print(f"\nEnvironment:      {settings.environment}")
    print(f"API base URL:     {settings.api_base_url}")
    print(f"Results endpoint: {settings.post_endpoint}")
    print(f"Required fields:  {', '.join(settings.required_fields)}")

    try:
        validate_config(settings)
    except ConfigurationError as e:
        print(f"\n[FAIL] {e}")
        print("=" * 70)
        return 1

    print(f"\n[PASS] API key: {'set' if settings.api_key else 'not set (allowed outside production)'}")
    print("=" * 70)
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="healthbatch - clean, validate and analyze health measurement batches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a JSON batch and print the results
  python -m healthbatch.pipeline.cli process batch.json

  # Write results to a file
  python -m healthbatch.pipeline.cli process batch.json --output results.json

  # Summarize the built-in sample batch
  python -m healthbatch.pipeline.cli demo

  # Fetch from the configured API and submit the summary
  python -m healthbatch.pipeline.cli run --submit
        """,
    )

    # Global flags
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output (errors only)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process",
        help="Process a JSON batch",
        description="Clean, transform, validate and analyze a batch read from a file",
    )
    process_parser.add_argument("input", help="Path to a JSON array of records")
    process_parser.add_argument(
        "-o", "--output",
        type=str,
        help="Write results here instead of stdout",
    )
    process_parser.set_defaults(func=cmd_process)

    demo_parser = subparsers.add_parser(
        "demo",
        help="Process the built-in sample batch",
    )
    demo_parser.set_defaults(func=cmd_demo)

    run_parser = subparsers.add_parser(
        "run",
        help="Fetch, process and optionally submit",
        description="Fetch a batch from the configured API and process it",
    )
    run_parser.add_argument(
        "--endpoint",
        type=str,
        help="Path relative to the API base URL (defaults to settings)",
    )
    run_parser.add_argument(
        "--submit",
        action="store_true",
        help="POST the summary to the results endpoint",
    )
    run_parser.set_defaults(func=cmd_run)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate configuration",
    )
    validate_parser.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
