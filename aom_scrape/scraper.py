"""Fetch rendered pages through the ScrapingDog proxy and extract candidates."""

import time
from typing import List, Optional

import requests  # type: ignore[import-untyped]

from aom_scrape.config import (
    DEFAULT_SCRAPE_URL,
    HEADERS,
    PROXY_URL,
    PROXY_WAIT_MS,
    REQUEST_TIMEOUT,
    get_scrapingdog_key,
)
from aom_scrape.html_utils import extract_products, select_page_type
from aom_scrape.logging_config import get_logger, log_scrape_event
from aom_scrape.models import CandidateProduct
from aom_scrape.url_validation import validate_url

__all__ = [
    "ScrapeError",
    "create_session",
    "fetch_rendered_html",
    "scrape_page",
]

logger = get_logger("scraper")

_session: Optional[requests.Session] = None


class ScrapeError(Exception):
    """Raised when the rendering proxy cannot deliver a page."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def create_session() -> requests.Session:
    """Create a requests Session with the proxy headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    return session


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = create_session()
    return _session


def fetch_rendered_html(
    url: str,
    api_key: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> str:
    """Fetch the JavaScript-rendered HTML of a page via the proxy.

    No retries: any transport error or non-2xx status is a hard failure and
    no partial HTML is returned.

    Args:
        url: Target page URL
        api_key: Proxy API key (default: SCRAPINGDOG_API_KEY)
        session: Optional requests.Session for connection reuse

    Returns:
        HTML content as string

    Raises:
        ConfigurationError: If no API key is configured
        ScrapeError: If the proxy request fails
    """
    key = api_key or get_scrapingdog_key()
    sess = session or _get_session()
    params = {
        "api_key": key,
        "url": url,
        "dynamic": "true",
        "wait": PROXY_WAIT_MS,
    }

    try:
        resp = sess.get(PROXY_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"Proxy request failed for {url}: {e}")
        raise ScrapeError(f"ScrapingDog request failed: {e}") from e

    if not 200 <= resp.status_code < 300:
        logger.error(f"Proxy returned {resp.status_code} for {url}")
        raise ScrapeError(f"ScrapingDog failed: {resp.status_code}", resp.status_code)

    return str(resp.text)


def scrape_page(
    url: Optional[str] = None,
    api_key: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> List[CandidateProduct]:
    """Scrape one catalog page into candidate products.

    Args:
        url: artofmen.de page (default: the lookbook)
        api_key: Proxy API key (default: SCRAPINGDOG_API_KEY)
        session: Optional requests.Session

    Returns:
        Deduplicated candidates

    Raises:
        URLValidationError: If the URL is not an allowed page
        ConfigurationError: If no API key is configured
        ScrapeError: If the proxy request fails
    """
    target = validate_url(url or DEFAULT_SCRAPE_URL)
    page_type = select_page_type(target)

    logger.info(f"Scraping {target} as {page_type['category']} ({page_type['strategy']})")
    started = time.monotonic()

    html = fetch_rendered_html(target, api_key=api_key, session=session)
    logger.debug(f"HTML received, length: {len(html)}")

    products = extract_products(html, target)

    logger.info(f"Found {len(products)} products on {target}")
    log_scrape_event("page_scraped", {
        "url": target,
        "category": page_type["category"],
        "strategy": page_type["strategy"],
        "html_length": len(html),
        "products_found": len(products),
        "duration_s": round(time.monotonic() - started, 3),
    })

    return products
