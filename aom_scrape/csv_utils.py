"""CSV export utilities."""

import csv
import json
from pathlib import Path
from typing import Iterable

from aom_scrape.db import get_connection, row_to_product
from aom_scrape.models import CandidateProduct

__all__ = [
    "CANDIDATE_FIELDS",
    "CATALOG_FIELDS",
    "save_candidates_to_csv",
    "export_db_to_csv",
]

CANDIDATE_FIELDS = ["name", "category", "price", "sizes", "imageUrl"]

CATALOG_FIELDS = [
    "id",
    "slug",
    "name",
    "category",
    "published",
    "description",
    "images",
    "tags",
    "template",
    "color_scheme",
    "created_at",
    "updated_at",
]


def save_candidates_to_csv(candidates: Iterable[CandidateProduct], path: str) -> int:
    """Write scraped candidates to CSV. Returns the number of rows written."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CANDIDATE_FIELDS)
        writer.writeheader()
        for candidate in candidates:
            row = candidate.to_dict()
            row["imageUrl"] = row["imageUrl"] or ""
            writer.writerow(row)
            count += 1
    print(f"Wrote {count} candidates to {path}")
    return count


def export_db_to_csv(db_path: str, path: str) -> int:
    """Export the product table (without stories) to CSV."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM products ORDER BY created_at DESC")
        products = [row_to_product(row) for row in cursor.fetchall()]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CATALOG_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for product in products:
            product["images"] = json.dumps(product["images"], ensure_ascii=False)
            product["tags"] = json.dumps(product["tags"], ensure_ascii=False)
            writer.writerow(product)

    print(f"Exported {len(products)} products to {path}")
    return len(products)
