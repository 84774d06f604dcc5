"""HTML extraction heuristics for artofmen.de catalog pages.

The page type is picked once from the source URL (see PAGE_TYPES in config)
and decides both the category label and the single strategy that runs.
Keyword vocabularies are data in config; every strategy goes through the
same `matching_keywords` routine.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional, Set

from bs4 import BeautifulSoup, Tag

from aom_scrape.config import (
    ACCESSORY_KEYWORDS,
    APPAREL_KEYWORDS,
    DEFAULT_PAGE_TYPE,
    EXCLUDE_PHRASES,
    PAGE_TYPES,
    SHOE_TYPES,
    PageType,
)
from aom_scrape.models import CandidateProduct
from aom_scrape.url_validation import absolutize_url

__all__ = [
    "select_page_type",
    "extract_products",
    "extract_shoes",
    "extract_accessories",
    "extract_apparel",
    "matching_keywords",
    "is_excluded",
    "extract_price",
    "extract_sizes",
    "STRATEGIES",
]

SHOE_NAME_MAX = 50
ACCESSORY_TEXT_MAX = 100
ALT_NAME_MIN = 10
ALT_NAME_MAX = 100
APPAREL_NAME_MIN = 10
APPAREL_NAME_MAX = 100

PRICE_RE = re.compile(r"ab\s*([\d.,]+)\s*€")
SIZES_RE = re.compile(r"Größen?\s*([\d\s\-\+\|]+)")

CONTAINER_TAGS = ["section", "div", "article"]


def select_page_type(url: str) -> PageType:
    """Pick the page type whose marker occurs in the URL (first match wins)."""
    lower = (url or "").lower()
    for page_type in PAGE_TYPES:
        if page_type["marker"] in lower:
            return page_type
    return DEFAULT_PAGE_TYPE


def matching_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Return the keywords contained in text (case-insensitive), in table order."""
    lower = text.lower()
    return [k for k in keywords if k.lower() in lower]


def is_excluded(name: str) -> bool:
    """True if the heading is known marketing copy."""
    return bool(matching_keywords(name, EXCLUDE_PHRASES))


def extract_price(text: str) -> str:
    match = PRICE_RE.search(text)
    return f"ab {match.group(1)} €" if match else ""


def extract_sizes(text: str) -> str:
    match = SIZES_RE.search(text)
    if not match or not match.group(1).strip():
        return ""
    return f"Größen {match.group(1).strip()}"


def _clean_text(el: Tag) -> str:
    return re.sub(r"\s+", " ", el.get_text()).strip()


def _image_src(img: Optional[Tag]) -> Optional[str]:
    if img is None:
        return None
    src = img.get("src") or img.get("data-src")
    return src if isinstance(src, str) and src else None


def _first_image(container: Optional[Tag]) -> Optional[str]:
    """Absolute URL of the first image inside container, if any."""
    if container is None:
        return None
    return absolutize_url(_image_src(container.find("img")))


def _container_image(el: Tag) -> Optional[str]:
    return _first_image(el.find_parent(CONTAINER_TAGS))


# =============================================================================
# Strategies
# =============================================================================

def extract_shoes(soup: BeautifulSoup, category: str, seen: Set[str]) -> List[CandidateProduct]:
    """Headings that name a shoe type become products."""
    products: List[CandidateProduct] = []

    for el in soup.find_all(["h2", "h3", "h4"]):
        text = _clean_text(el)
        if not text or len(text) >= SHOE_NAME_MAX or text in seen:
            continue
        if not matching_keywords(text, SHOE_TYPES):
            continue

        seen.add(text)
        products.append(CandidateProduct(
            name=text,
            category=category,
            image_url=_container_image(el),
        ))

    return products


def extract_accessories(soup: BeautifulSoup, category: str, seen: Set[str]) -> List[CandidateProduct]:
    """Map accessory keywords to canonical names, then scan image alt texts.

    Each canonical name is emitted at most once per run.
    """
    products: List[CandidateProduct] = []

    for el in soup.find_all(["h2", "h3", "h4", "strong", "b"]):
        text = _clean_text(el)
        if not text or len(text) >= ACCESSORY_TEXT_MAX:
            continue

        for keyword in matching_keywords(text, ACCESSORY_KEYWORDS):
            canonical = ACCESSORY_KEYWORDS[keyword]
            if canonical in seen:
                continue

            image_url = _container_image(el)
            if image_url is None and el.parent is not None:
                image_url = _first_image(el.parent.find_next_sibling())

            seen.add(canonical)
            products.append(CandidateProduct(
                name=canonical,
                category=category,
                image_url=image_url,
            ))
            break

    for img in soup.find_all("img"):
        src = _image_src(img)
        if not src:
            continue
        alt = img.get("alt") or ""
        if not isinstance(alt, str):
            continue
        alt = alt.strip()

        for keyword in matching_keywords(alt, ACCESSORY_KEYWORDS):
            name = alt if ALT_NAME_MIN < len(alt) < ALT_NAME_MAX else ACCESSORY_KEYWORDS[keyword]
            if name in seen:
                continue

            seen.add(name)
            products.append(CandidateProduct(
                name=name,
                category=category,
                image_url=absolutize_url(src),
            ))

    return products


def extract_apparel(soup: BeautifulSoup, category: str, seen: Set[str]) -> List[CandidateProduct]:
    """Filter h3 headings by length, exclusion list and product keywords."""
    products: List[CandidateProduct] = []

    for el in soup.find_all("h3"):
        name = _clean_text(el)
        if name in seen:
            continue
        if len(name) < APPAREL_NAME_MIN or len(name) > APPAREL_NAME_MAX:
            continue
        if is_excluded(name):
            continue
        if not matching_keywords(name, APPAREL_KEYWORDS):
            continue

        parent = el.parent
        block_text = parent.get_text(" ") if parent is not None else name

        image_url = _first_image(parent)
        if image_url is None and parent is not None:
            image_url = _first_image(parent.parent)

        seen.add(name)
        products.append(CandidateProduct(
            name=name,
            category=category,
            price=extract_price(block_text),
            sizes=extract_sizes(block_text),
            image_url=image_url,
        ))

    return products


Strategy = Callable[[BeautifulSoup, str, Set[str]], List[CandidateProduct]]

STRATEGIES: Dict[str, Strategy] = {
    "type_keyword": extract_shoes,
    "keyword_canonical": extract_accessories,
    "keyword_filter": extract_apparel,
}


def extract_products(html: str, source_url: str) -> List[CandidateProduct]:
    """Extract deduplicated candidate products from a rendered page.

    Args:
        html: Rendered HTML returned by the proxy
        source_url: The page URL, used to select the page type

    Returns:
        Candidates in document order
    """
    page_type = select_page_type(source_url)
    strategy = STRATEGIES[page_type["strategy"]]
    soup = BeautifulSoup(html or "", "html.parser")
    seen: Set[str] = set()
    return strategy(soup, page_type["category"], seen)
