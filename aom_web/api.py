"""Admin API for the product catalog.

Routes (all under /api):
- GET    /products                 list, newest first
- POST   /products                 create
- GET    /products/<id_or_slug>    read one
- PUT    /products/<id_or_slug>    partial update
- DELETE /products/<id_or_slug>    delete one
- POST   /products/bulk            publish / unpublish / delete many

A path value with UUID format is looked up by id, anything else by slug.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from aom_scrape.config import COLOR_SCHEMES, TEMPLATES
from aom_scrape.db import (
    DuplicateSlugError,
    bulk_delete,
    bulk_set_published,
    create_product,
    delete_product,
    get_product,
    init_db,
    list_products,
    update_product,
)
from aom_scrape.slugs import slugify

from .config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

__all__ = ["api", "get_db_path", "json_body", "serialize_product"]

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Request field -> products column
FIELD_MAP = {
    "name": "name",
    "slug": "slug",
    "description": "description",
    "story": "story",
    "images": "images",
    "videos": "videos",
    "category": "category",
    "tags": "tags",
    "template": "template",
    "colorScheme": "color_scheme",
    "published": "published",
    "metadata": "metadata",
}

TEXT_FIELDS = ("name", "slug", "description", "story", "category")
LIST_FIELDS = ("images", "videos", "tags")

BULK_ACTIONS = {
    "publish": "published",
    "unpublish": "moved to drafts",
    "delete": "deleted",
}

_initialized_db_paths = set()


def get_db_path() -> str:
    """Catalog database for the current app, created on first use."""
    db_path = current_app.config["DB_PATH"]
    if db_path not in _initialized_db_paths:
        init_db(db_path)
        _initialized_db_paths.add(db_path)
    return db_path


def json_body() -> Optional[Dict[str, Any]]:
    """Parsed JSON object body, or None if missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _error(message: str, status: int) -> Tuple[Response, int]:
    return jsonify({"error": message}), status


def serialize_product(product: Dict[str, Any]) -> Dict[str, Any]:
    """Row dict -> API representation (camelCase keys)."""
    return {
        "id": product["id"],
        "slug": product["slug"],
        "name": product["name"],
        "description": product["description"],
        "story": product["story"],
        "images": product["images"],
        "videos": product["videos"],
        "category": product["category"],
        "tags": product["tags"],
        "template": product["template"],
        "colorScheme": product["color_scheme"],
        "published": product["published"],
        "metadata": product.get("metadata"),
        "createdAt": product["created_at"],
        "updatedAt": product["updated_at"],
    }


def _validate_fields(data: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Map known request fields to columns and type-check them.

    Unknown keys are ignored. Returns (columns, error_message).
    """
    columns: Dict[str, Any] = {}

    for key, column in FIELD_MAP.items():
        if key not in data:
            continue
        value = data[key]

        if key in TEXT_FIELDS:
            if not isinstance(value, str) or not value.strip():
                return {}, f"{key} must be a non-empty string"
            value = value.strip()
        elif key in LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                return {}, f"{key} must be a list of strings"
        elif key == "template":
            if value not in TEMPLATES:
                return {}, f"template must be one of: {', '.join(TEMPLATES)}"
        elif key == "colorScheme":
            if value not in COLOR_SCHEMES:
                return {}, f"colorScheme must be one of: {', '.join(COLOR_SCHEMES)}"
        elif key == "published":
            if not isinstance(value, bool):
                return {}, "published must be a boolean"
        elif key == "metadata":
            if value is not None and not isinstance(value, dict):
                return {}, "metadata must be an object"

        columns[column] = value

    slug = columns.get("slug")
    if slug is not None and not SLUG_RE.match(slug):
        return {}, "slug may only contain lowercase letters, digits and single hyphens"

    return columns, None


def _int_arg(name: str, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    """Read an integer query parameter.

    Raises:
        ValueError: If the value is not an integer within bounds
    """
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer") from None
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ValueError(f"{name} must be {bounds}")
    return value


@api.route("/products", methods=["GET"])
def list_products_route() -> Tuple[Response, int]:
    """List products, newest first.

    Query params:
        published: "true" or "false"; anything else means no filter
        category: exact category match
        limit, offset: paging
    """
    published_arg = request.args.get("published")
    published = {"true": True, "false": False}.get(published_arg or "")

    try:
        limit = _int_arg("limit", DEFAULT_PAGE_LIMIT, 1, MAX_PAGE_LIMIT)
        offset = _int_arg("offset", 0, 0)
    except ValueError as e:
        return _error(str(e), 400)

    products = list_products(
        get_db_path(),
        published=published,
        category=request.args.get("category") or None,
        limit=limit,
        offset=offset,
    )
    return jsonify([serialize_product(p) for p in products]), 200


@api.route("/products", methods=["POST"])
def create_product_route() -> Tuple[Response, int]:
    data = json_body()
    if data is None:
        return _error("Request body must be a JSON object", 400)

    for required in ("name", "description", "story"):
        if not isinstance(data.get(required), str) or not data[required].strip():
            return _error(f"{required} is required", 400)

    columns, error = _validate_fields(data)
    if error:
        return _error(error, 400)

    slug = columns.pop("slug", None) or slugify(columns["name"])
    if not slug:
        return _error("Cannot derive a slug from the product name", 400)

    try:
        product = create_product(get_db_path(), slug=slug, **columns)
    except DuplicateSlugError as e:
        return _error(str(e), 400)

    logger.info(f"Created product {product['id']} ({slug})")
    return jsonify(serialize_product(product)), 201


@api.route("/products/<id_or_slug>", methods=["GET"])
def get_product_route(id_or_slug: str) -> Tuple[Response, int]:
    product = get_product(get_db_path(), id_or_slug)
    if product is None:
        return _error("Product not found", 404)
    return jsonify(serialize_product(product)), 200


@api.route("/products/<id_or_slug>", methods=["PUT"])
def update_product_route(id_or_slug: str) -> Tuple[Response, int]:
    """Partial update: only fields present in the body change."""
    data = json_body()
    if data is None:
        return _error("Request body must be a JSON object", 400)

    columns, error = _validate_fields(data)
    if error:
        return _error(error, 400)

    try:
        product = update_product(get_db_path(), id_or_slug, columns)
    except DuplicateSlugError as e:
        return _error(str(e), 400)

    if product is None:
        return _error("Product not found", 404)

    logger.info(f"Updated product {product['id']}: {sorted(columns)}")
    return jsonify(serialize_product(product)), 200


@api.route("/products/<id_or_slug>", methods=["DELETE"])
def delete_product_route(id_or_slug: str) -> Tuple[Response, int]:
    if not delete_product(get_db_path(), id_or_slug):
        return _error("Product not found", 404)
    logger.info(f"Deleted product {id_or_slug}")
    return jsonify({"success": True}), 200


@api.route("/products/bulk", methods=["POST"])
def bulk_products_route() -> Tuple[Response, int]:
    """Apply one action to many products by id.

    Body: {"ids": [...], "action": "publish" | "unpublish" | "delete"}
    """
    data = json_body()
    if data is None:
        return _error("Request body must be a JSON object", 400)

    ids: List[Any] = data.get("ids")
    action = data.get("action")

    if not isinstance(ids, list) or not ids or not all(isinstance(i, str) for i in ids):
        return _error("ids must be a non-empty list of product ids", 400)
    if action not in BULK_ACTIONS:
        return _error(f"action must be one of: {', '.join(BULK_ACTIONS)}", 400)

    db_path = get_db_path()
    if action == "delete":
        affected = bulk_delete(db_path, ids)
    else:
        affected = bulk_set_published(db_path, ids, published=(action == "publish"))

    logger.info(f"Bulk {action}: {affected} of {len(ids)} products")
    return jsonify({
        "success": True,
        "action": action,
        "affected": affected,
        "message": f"{affected} product(s) {BULK_ACTIONS[action]}",
    }), 200
