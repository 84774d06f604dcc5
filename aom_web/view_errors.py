#!/usr/bin/env python3
"""Error log viewer for the catalog web app.

Usage:
    python -m aom_web.view_errors                      # Summary plus recent errors
    python -m aom_web.view_errors --type scrape_error  # Errors of one type
    python -m aom_web.view_errors --limit 5 --offset 5 # Paging
"""

import argparse
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from aom_scrape.config import DB_PATH

from .error_logging import ErrorLogger

__all__ = ["main", "print_error"]


def format_timestamp(iso_string: str) -> str:
    """Format ISO timestamp to readable string."""
    try:
        return datetime.fromisoformat(iso_string).strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, TypeError):
        return iso_string


def print_error(error: Dict[str, Any]) -> None:
    """Pretty print a single error."""
    print(f"\n{'='*70}")
    print(f"Error ID: {error.get('id', 'N/A')}")
    print(f"Type: {error.get('error_type', 'unknown').upper()}")
    print(f"Time: {format_timestamp(error.get('timestamp', ''))}")
    if error.get("request_path"):
        print(f"Path: {error['request_path']}")
    if error.get("operation"):
        print(f"Operation: {error['operation']}")

    print("\nMessage:")
    print(f"  {error.get('error_message', 'N/A')}")

    if error.get("context"):
        print("\nContext:")
        for key, value in error["context"].items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False)
            print(f"  {key}: {str(value)[:100]}")

    if error.get("stack_trace"):
        print("\nStack Trace:")
        for line in error["stack_trace"].split("\n")[-10:]:
            if line.strip():
                print(f"  {line}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="View error logs of the catalog web app")
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite database path (default: {DB_PATH})")
    parser.add_argument("--type", help="Filter by error type (scrape_error, unexpected_error, ...)")
    parser.add_argument("--limit", type=int, default=20, help="Max errors to display (default: 20)")
    parser.add_argument("--offset", type=int, default=0, help="Pagination offset (default: 0)")
    args = parser.parse_args(argv)

    error_logger = ErrorLogger(args.db)

    print("\n" + "="*70)
    print("ERROR SUMMARY")
    print("="*70)

    summary = error_logger.get_error_summary()
    print(f"\nTotal Errors: {summary['total_errors']}")
    if summary["errors_by_type"]:
        print("\nErrors by Type:")
        for error_type, count in summary["errors_by_type"].items():
            print(f"  {error_type}: {count}")

    errors = error_logger.get_errors(error_type=args.type, limit=args.limit, offset=args.offset)
    if not errors:
        print("\nNo errors found.")
        return 0

    print(f"\nShowing {len(errors)} error(s)")
    for error in errors:
        print_error(error)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
