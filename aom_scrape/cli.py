"""Command-line interface for the scraper and content generator."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

__all__ = ["main", "parse_args", "show_stats"]

from aom_scrape.config import (
    DB_PATH,
    DEFAULT_PAGE_TYPE,
    DEFAULT_SCRAPE_URL,
    MAX_PRODUCTS_PER_BATCH,
    PAGE_TYPES,
    ConfigurationError,
)
from aom_scrape.csv_utils import export_db_to_csv, save_candidates_to_csv
from aom_scrape.db import get_product_count, init_db
from aom_scrape.generator import ContentGenerator
from aom_scrape.logging_config import setup_logging
from aom_scrape.seed import seed_demo_products
from aom_scrape.scraper import ScrapeError, scrape_page
from aom_scrape.url_validation import URLValidationError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Art Of Men catalog scraper and AI content generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape the lookbook and print candidates
  python -m aom_scrape.cli

  # Scrape the shoe page and save candidates to CSV
  python -m aom_scrape.cli --url https://www.artofmen.de/schuhe/ --export-csv data/schuhe.csv

  # Scrape, generate descriptions and stories, save as unpublished products
  python -m aom_scrape.cli --url https://www.artofmen.de/braeutigam/ --generate --save

  # Load the demo catalog
  python -m aom_scrape.cli --seed

  # Show catalog statistics
  python -m aom_scrape.cli --stats
        """,
    )

    parser.add_argument(
        "--url",
        default=DEFAULT_SCRAPE_URL,
        help=f"Page to scrape (default: {DEFAULT_SCRAPE_URL})",
    )
    parser.add_argument(
        "--generate",
        action="store_true",
        help="Generate description and story for each candidate via OpenAI",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Upsert generated products into the catalog (requires --generate)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=MAX_PRODUCTS_PER_BATCH,
        help=f"Maximum candidates to generate (default and max: {MAX_PRODUCTS_PER_BATCH})",
    )
    parser.add_argument(
        "--db",
        default=DB_PATH,
        help=f"SQLite database path (default: {DB_PATH})",
    )
    parser.add_argument(
        "--export-csv",
        metavar="PATH",
        help="Write scraped candidates to CSV",
    )
    parser.add_argument(
        "--export-catalog",
        metavar="PATH",
        help="Export the product table to CSV and exit",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert the demo products (replacing them if present) and exit",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show catalog statistics and exit",
    )
    parser.add_argument(
        "--list-pages",
        action="store_true",
        help="List known page types and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args(argv)
    if args.save and not args.generate:
        parser.error("--save requires --generate")
    return args


def show_stats(db_path: str) -> None:
    """Display catalog statistics."""
    init_db(db_path)

    print(f"\n{'='*50}")
    print(f"Database: {db_path}")
    print(f"{'='*50}")
    print(f"\nTotal products: {get_product_count(db_path)}")
    print(f"  published: {get_product_count(db_path, published=True)}")
    print(f"  drafts:    {get_product_count(db_path, published=False)}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.list_pages:
        print("Known page types (first matching URL marker wins):")
        for page_type in PAGE_TYPES:
            print(f"  *{page_type['marker']}*: {page_type['category']} ({page_type['strategy']})")
        print(f"  otherwise: {DEFAULT_PAGE_TYPE['category']} ({DEFAULT_PAGE_TYPE['strategy']})")
        return 0

    if args.seed:
        count = seed_demo_products(args.db)
        print(f"Seeded {count} demo products into {args.db}")
        return 0

    if args.stats:
        show_stats(args.db)
        return 0

    if args.export_catalog:
        init_db(args.db)
        export_db_to_csv(args.db, args.export_catalog)
        return 0

    try:
        candidates = scrape_page(args.url)
    except (URLValidationError, ConfigurationError, ScrapeError) as e:
        print(f"Scrape failed: {e}", file=sys.stderr)
        return 1

    print(f"\nFound {len(candidates)} candidates on {args.url}")
    for candidate in candidates:
        print(f"  - {candidate.name} [{candidate.category}] {candidate.price} {candidate.sizes}".rstrip())

    if args.export_csv:
        save_candidates_to_csv(candidates, args.export_csv)

    if not args.generate:
        return 0

    limit = max(0, min(args.limit, MAX_PRODUCTS_PER_BATCH))
    try:
        report = ContentGenerator(db_path=args.db).run(candidates[:limit], save_to_database=args.save)
    except ConfigurationError as e:
        print(f"Generation failed: {e}", file=sys.stderr)
        return 1

    print(f"\nGenerated: {report.generated}, errors: {len(report.errors)}")
    for error in report.errors:
        print(f"  ! {error['product']}: {error['error']}")
    if not args.save:
        print(json.dumps([item.to_result() for item in report.results], ensure_ascii=False, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
