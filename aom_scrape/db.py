"""SQLite schema and helpers for the product catalog."""

import json
import re
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Sequence

from aom_scrape.config import (
    DB_PATH,
    DEFAULT_CATEGORY,
    DEFAULT_COLOR_SCHEME,
    DEFAULT_TEMPLATE,
)

__all__ = [
    "DuplicateSlugError",
    "get_connection",
    "init_db",
    "is_identity",
    "row_to_product",
    "list_products",
    "get_product",
    "get_product_by_slug",
    "create_product",
    "update_product",
    "delete_product",
    "bulk_set_published",
    "bulk_delete",
    "upsert_product_by_slug",
    "get_product_count",
    "UPDATABLE_COLUMNS",
]

# Store-assigned identities are UUID4 strings
IDENTITY_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

JSON_LIST_COLUMNS = ("images", "videos", "tags")

UPDATABLE_COLUMNS = (
    "name",
    "slug",
    "description",
    "story",
    "images",
    "videos",
    "category",
    "tags",
    "template",
    "color_scheme",
    "published",
    "metadata",
)


class DuplicateSlugError(Exception):
    """Raised when an insert or update would violate slug uniqueness."""

    def __init__(self, slug: str):
        super().__init__(f"A product with slug '{slug}' already exists")
        self.slug = slug


@contextmanager
def get_connection(db_path: str = DB_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database connections."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = DB_PATH) -> None:
    """Initialize the database schema."""
    with get_connection(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                slug TEXT UNIQUE NOT NULL,
                name TEXT NOT NULL,
                description TEXT NOT NULL,
                story TEXT NOT NULL,
                images TEXT NOT NULL DEFAULT '[]',
                videos TEXT NOT NULL DEFAULT '[]',
                category TEXT NOT NULL,
                tags TEXT NOT NULL DEFAULT '[]',
                template TEXT NOT NULL,
                color_scheme TEXT NOT NULL,
                published INTEGER NOT NULL DEFAULT 0,
                metadata TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_published ON products(published)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_category ON products(category)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_products_created_at ON products(created_at)")

        conn.commit()


def is_identity(value: str) -> bool:
    """True if value looks like a store-assigned id rather than a slug."""
    return bool(IDENTITY_RE.match(value or ""))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _lookup_column(id_or_slug: str) -> str:
    # Identity format wins over a slug that happens to look like a UUID
    return "id" if is_identity(id_or_slug) else "slug"


def _encode(column: str, value: Any) -> Any:
    if column in JSON_LIST_COLUMNS:
        return json.dumps(list(value or []), ensure_ascii=False)
    if column == "metadata":
        return json.dumps(value, ensure_ascii=False) if value is not None else None
    if column == "published":
        return 1 if value else 0
    return value


def row_to_product(row: sqlite3.Row) -> Dict[str, Any]:
    """Convert a products row into a plain dict with decoded JSON columns."""
    product = dict(row)
    for column in JSON_LIST_COLUMNS:
        try:
            product[column] = json.loads(product.get(column) or "[]")
        except json.JSONDecodeError:
            product[column] = []
    if product.get("metadata"):
        try:
            product["metadata"] = json.loads(product["metadata"])
        except json.JSONDecodeError:
            product["metadata"] = None
    product["published"] = bool(product.get("published"))
    return product


def _fetch(cursor: sqlite3.Cursor, column: str, value: str) -> Optional[Dict[str, Any]]:
    cursor.execute(f"SELECT * FROM products WHERE {column} = ?", (value,))
    row = cursor.fetchone()
    return row_to_product(row) if row else None


def list_products(
    db_path: str = DB_PATH,
    published: Optional[bool] = None,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """List products newest first, optionally filtered."""
    query = "SELECT * FROM products WHERE 1=1"
    params: List[Any] = []

    if published is not None:
        query += " AND published = ?"
        params.append(1 if published else 0)

    if category:
        query += " AND category = ?"
        params.append(category)

    query += " ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
    params.extend([limit, offset])

    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        return [row_to_product(row) for row in cursor.fetchall()]


def get_product(db_path: str, id_or_slug: str) -> Optional[Dict[str, Any]]:
    """Look a product up by id (if the value has identity format) or slug."""
    with get_connection(db_path) as conn:
        return _fetch(conn.cursor(), _lookup_column(id_or_slug), id_or_slug)


def get_product_by_slug(db_path: str, slug: str) -> Optional[Dict[str, Any]]:
    """Look a product up by slug only (storefront URLs carry slugs)."""
    with get_connection(db_path) as conn:
        return _fetch(conn.cursor(), "slug", slug)


def create_product(
    db_path: str,
    slug: str,
    name: str,
    description: str,
    story: str,
    images: Optional[Sequence[str]] = None,
    videos: Optional[Sequence[str]] = None,
    category: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
    template: Optional[str] = None,
    color_scheme: Optional[str] = None,
    published: bool = False,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Insert a new product and return it.

    Raises:
        DuplicateSlugError: If the slug is taken
    """
    product_id = str(uuid.uuid4())
    now = _now()

    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("""
                INSERT INTO products (id, slug, name, description, story, images, videos,
                                      category, tags, template, color_scheme, published,
                                      metadata, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                product_id, slug, name, description, story,
                _encode("images", images), _encode("videos", videos),
                category or DEFAULT_CATEGORY, _encode("tags", tags),
                template or DEFAULT_TEMPLATE, color_scheme or DEFAULT_COLOR_SCHEME,
                _encode("published", published), _encode("metadata", metadata),
                now, now,
            ))
        except sqlite3.IntegrityError as e:
            raise DuplicateSlugError(slug) from e
        conn.commit()
        return _fetch(cursor, "id", product_id)


def update_product(
    db_path: str,
    id_or_slug: str,
    fields: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Apply a partial update; only the given columns change.

    Returns:
        The updated product, or None if nothing matched

    Raises:
        ValueError: On unknown column names
        DuplicateSlugError: If a new slug collides with another product
    """
    unknown = set(fields) - set(UPDATABLE_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown product fields: {sorted(unknown)}")

    column = _lookup_column(id_or_slug)

    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        existing = _fetch(cursor, column, id_or_slug)
        if existing is None:
            return None
        if not fields:
            return existing

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        values = [_encode(k, v) for k, v in fields.items()]
        values.extend([_now(), existing["id"]])
        try:
            cursor.execute(
                f"UPDATE products SET {set_clause}, updated_at = ? WHERE id = ?", values
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateSlugError(fields.get("slug", existing["slug"])) from e
        conn.commit()
        return _fetch(cursor, "id", existing["id"])


def delete_product(db_path: str, id_or_slug: str) -> bool:
    """Delete one product. Returns False if nothing matched."""
    column = _lookup_column(id_or_slug)
    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"DELETE FROM products WHERE {column} = ?", (id_or_slug,))
        conn.commit()
        return cursor.rowcount > 0


def bulk_set_published(db_path: str, ids: Sequence[str], published: bool) -> int:
    """Set the published flag on every listed id. Returns rows affected."""
    if not ids:
        return 0
    placeholders = ", ".join("?" for _ in ids)
    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE products SET published = ?, updated_at = ? WHERE id IN ({placeholders})",
            [1 if published else 0, _now(), *ids],
        )
        conn.commit()
        return cursor.rowcount


def bulk_delete(db_path: str, ids: Sequence[str]) -> int:
    """Delete every listed id. Returns rows affected."""
    if not ids:
        return 0
    placeholders = ", ".join("?" for _ in ids)
    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"DELETE FROM products WHERE id IN ({placeholders})", list(ids))
        conn.commit()
        return cursor.rowcount


def upsert_product_by_slug(
    db_path: str,
    slug: str,
    name: str,
    description: str,
    story: str,
    images: Optional[Sequence[str]] = None,
    category: Optional[str] = None,
    published: Optional[bool] = None,
) -> Dict[str, Any]:
    """Insert a generated product or overwrite the content of the row with this slug.

    A single INSERT ... ON CONFLICT statement, so concurrent writers cannot
    create duplicates. New rows start unpublished; on conflict `published`
    only changes when passed explicitly.
    """
    now = _now()
    published_clause = ", published = excluded.published" if published is not None else ""

    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(f"""
            INSERT INTO products (id, slug, name, description, story, images, videos,
                                  category, tags, template, color_scheme, published,
                                  created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, '[]', ?, '[]', ?, ?, ?, ?, ?)
            ON CONFLICT(slug) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                story = excluded.story,
                images = excluded.images,
                category = excluded.category,
                updated_at = excluded.updated_at{published_clause}
        """, (
            str(uuid.uuid4()), slug, name, description, story,
            _encode("images", images), category or DEFAULT_CATEGORY,
            DEFAULT_TEMPLATE, DEFAULT_COLOR_SCHEME,
            _encode("published", bool(published)), now, now,
        ))
        conn.commit()
        return _fetch(cursor, "slug", slug)


def get_product_count(db_path: str = DB_PATH, published: Optional[bool] = None) -> int:
    """Get the total number of products, optionally only (un)published ones."""
    with get_connection(db_path) as conn:
        cursor = conn.cursor()
        if published is None:
            cursor.execute("SELECT COUNT(*) AS count FROM products")
        else:
            cursor.execute(
                "SELECT COUNT(*) AS count FROM products WHERE published = ?",
                (1 if published else 0,),
            )
        return cursor.fetchone()["count"]
