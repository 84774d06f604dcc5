"""Public storefront pages. Only published products are visible."""

import logging
from typing import Tuple, Union

from flask import Blueprint, redirect, render_template, request, url_for
from werkzeug.wrappers import Response

from aom_scrape.db import get_product_by_slug, list_products

from .api import get_db_path
from .config import MAX_PAGE_LIMIT

__all__ = ["storefront"]

logger = logging.getLogger(__name__)

storefront = Blueprint("storefront", __name__)


@storefront.route("/", methods=["GET"])
def index() -> Response:
    return redirect(url_for("storefront.product_list"))


@storefront.route("/products", methods=["GET"])
def product_list() -> str:
    """Render all published products, optionally within one category."""
    category = request.args.get("category") or None
    products = list_products(
        get_db_path(), published=True, category=category, limit=MAX_PAGE_LIMIT
    )
    return render_template("products.html", products=products, category=category)


@storefront.route("/product/<slug>", methods=["GET"])
def product_detail(slug: str) -> Union[str, Tuple[str, int]]:
    product = get_product_by_slug(get_db_path(), slug)
    if product is None or not product["published"]:
        logger.debug(f"Storefront miss for {slug}")
        return render_template("not_found.html", slug=slug), 404
    return render_template("product.html", product=product)
