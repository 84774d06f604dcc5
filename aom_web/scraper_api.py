"""Scrape and generate endpoints for bootstrapping catalog entries.

- GET  /api/scraper            readiness of the proxy and AI credentials
- POST /api/scraper            scrape one artofmen.de page into candidates
- POST /api/scraper/generate   generate description/story per candidate
"""

import logging
import os
from typing import Tuple

from flask import Blueprint, Response, jsonify, request

from aom_scrape.config import DEFAULT_SCRAPE_URL, MAX_PRODUCTS_PER_BATCH, ConfigurationError
from aom_scrape.generator import ContentGenerator
from aom_scrape.models import CandidateProduct
from aom_scrape.scraper import ScrapeError, scrape_page
from aom_scrape.url_validation import URLValidationError

from .api import get_db_path, json_body
from .error_logging import ErrorLogger

__all__ = ["scraper_api"]

logger = logging.getLogger(__name__)

scraper_api = Blueprint("scraper_api", __name__, url_prefix="/api/scraper")


def _make_generator() -> ContentGenerator:
    return ContentGenerator(db_path=get_db_path())


@scraper_api.route("", methods=["GET"])
def scraper_status() -> Tuple[Response, int]:
    """Report which external services are configured.

    Scraping only needs the proxy key; generation is reported separately.
    """
    scraping_dog = bool(os.getenv("SCRAPINGDOG_API_KEY"))
    ai_generation = bool(os.getenv("OPENAI_API_KEY"))
    return jsonify({
        "ready": scraping_dog,
        "scrapingDog": scraping_dog,
        "aiGeneration": ai_generation,
        "defaultUrl": DEFAULT_SCRAPE_URL,
        "maxProductsPerBatch": MAX_PRODUCTS_PER_BATCH,
    }), 200


@scraper_api.route("", methods=["POST"])
def scrape() -> Tuple[Response, int]:
    """Scrape a page. Body: {"url": "https://www.artofmen.de/..."}"""
    data = json_body() or {}
    url = data.get("url") or DEFAULT_SCRAPE_URL
    if not isinstance(url, str):
        return jsonify({"error": "url must be a string"}), 400

    try:
        products = scrape_page(url)
    except URLValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConfigurationError as e:
        logger.error(str(e))
        return jsonify({"error": str(e)}), 500
    except ScrapeError as e:
        ErrorLogger(get_db_path()).log_error(
            error_type="scrape_error",
            error_message=str(e),
            operation="scrape",
            request_path=request.path,
            context={"url": url, "status_code": e.status_code},
        )
        return jsonify({"error": str(e)}), 502

    return jsonify({
        "success": True,
        "count": len(products),
        "products": [p.to_dict() for p in products],
        "scrapedUrl": url,
    }), 200


@scraper_api.route("/generate", methods=["POST"])
def generate() -> Tuple[Response, int]:
    """Generate content for candidates.

    Body: {"products": [{"name", "category", "price", "sizes", "imageUrl"}],
           "saveToDatabase": bool}
    """
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400

    products = data.get("products")
    if not isinstance(products, list) or not products:
        return jsonify({"error": "products must be a non-empty list"}), 400
    if not all(isinstance(p, dict) for p in products):
        return jsonify({"error": "each product must be an object"}), 400

    candidates = [CandidateProduct.from_dict(p) for p in products]
    save = data.get("saveToDatabase", False)
    if not isinstance(save, bool):
        return jsonify({"error": "saveToDatabase must be a boolean"}), 400

    try:
        report = _make_generator().run(candidates, save_to_database=save)
    except ConfigurationError as e:
        logger.error(str(e))
        return jsonify({"error": str(e)}), 500

    logger.info(f"Generated {report.generated} of {len(candidates)} products (saved={save})")
    return jsonify(report.to_dict()), 200
