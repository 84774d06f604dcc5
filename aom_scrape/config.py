"""Configuration and constants for the scraper and content generator."""

import os
from typing import Any, Dict, List

__all__ = [
    "SITE_ORIGIN",
    "DEFAULT_SCRAPE_URL",
    "PROXY_URL",
    "PROXY_WAIT_MS",
    "REQUEST_TIMEOUT",
    "HEADERS",
    "DB_PATH",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "LLM_MAX_OUTPUT_TOKENS",
    "MAX_PRODUCTS_PER_BATCH",
    "MAX_ATTEMPTS",
    "RETRY_DELAY",
    "ITEM_DELAY",
    "MIN_STORY_LENGTH",
    "SLUG_MAX_LENGTH",
    "DEFAULT_CATEGORY",
    "DEFAULT_TEMPLATE",
    "DEFAULT_COLOR_SCHEME",
    "TEMPLATES",
    "COLOR_SCHEMES",
    "PAGE_TYPES",
    "DEFAULT_PAGE_TYPE",
    "SHOE_TYPES",
    "ACCESSORY_KEYWORDS",
    "APPAREL_KEYWORDS",
    "EXCLUDE_PHRASES",
    "ConfigurationError",
    "get_scrapingdog_key",
    "get_openai_key",
]


class ConfigurationError(Exception):
    """Raised when a required setting (usually a credential) is missing."""
    pass


SITE_ORIGIN = "https://www.artofmen.de"
DEFAULT_SCRAPE_URL = "https://www.artofmen.de/lookbook/"

# Rendering proxy (ScrapingDog)
PROXY_URL = "https://api.scrapingdog.com/scrape"
PROXY_WAIT_MS = 5000
REQUEST_TIMEOUT = 60

HEADERS = {
    "Accept": "text/html",
}

# Product store
DB_PATH = os.getenv("AOM_DB_PATH", "data/catalog.db")

# LLM Configuration
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_TEMPERATURE = 1.0  # every story should read differently
LLM_MAX_OUTPUT_TOKENS = 500

# Generation loop
MAX_PRODUCTS_PER_BATCH = 50
MAX_ATTEMPTS = 3
RETRY_DELAY = 2.0  # seconds between attempts for one product
ITEM_DELAY = 1.0  # seconds between products
MIN_STORY_LENGTH = 200
SLUG_MAX_LENGTH = 100

# Catalog defaults
DEFAULT_CATEGORY = "Kollektion"
DEFAULT_TEMPLATE = "modern"
DEFAULT_COLOR_SCHEME = "dark"
TEMPLATES = ("classic", "modern", "minimal")
COLOR_SCHEMES = ("dark", "light", "warm")


# =============================================================================
# Page-type registry
# =============================================================================
# Each entry maps a URL path marker to the category label and the extraction
# strategy in html_utils. Checked in order; the first marker found wins.

PageType = Dict[str, Any]

PAGE_TYPES: List[PageType] = [
    {"marker": "schuhe", "category": "Schuhe", "strategy": "type_keyword"},
    {"marker": "accessoires", "category": "Accessoires", "strategy": "keyword_canonical"},
    {"marker": "braeutigam", "category": "Bräutigam", "strategy": "keyword_filter"},
    {"marker": "alltag", "category": "Alltag", "strategy": "keyword_filter"},
    {"marker": "lookbook", "category": "Lookbook", "strategy": "keyword_filter"},
]

DEFAULT_PAGE_TYPE: PageType = {
    "marker": None,
    "category": DEFAULT_CATEGORY,
    "strategy": "keyword_filter",
}

# Shoe type names; a heading naming one of these is a product
SHOE_TYPES = ["Oxford", "Derby", "Monkstrap", "Loafer", "Chelsea", "Sneaker", "Budapester"]

# Accessory keyword -> canonical product name
ACCESSORY_KEYWORDS: Dict[str, str] = {
    "Schleife": "Fliege / Schleife",
    "Fliege": "Fliege / Schleife",
    "Krawatte": "Krawatte",
    "Manschettenknopf": "Manschettenknöpfe",
    "Hosenträger": "Hosenträger",
    "Gürtel": "Gürtel",
    "Hemd": "Hemd",
    "Kummerbund": "Kummerbund",
    "Einstecktuch": "Einstecktuch",
}

# Apparel headings must mention one of these
APPAREL_KEYWORDS = ["Anzug", "Smoking", "Weste", "Jacket", "Dinnerjacket", "Frack"]

# Marketing copy that looks like a product heading
EXCLUDE_PHRASES = [
    "für den wichtigsten Tag",
    "optimale Passform",
    "Änderungsmanufaktur",
    "Schnitt macht",
    "Anzug-Guide",
    "mehr als ein Kleidungsstück",
    "zeigt Ihnen",
    "worauf es ankommt",
    "Frack, Smoking & Co",
    "Slim Line",
    "Plus Line",
    "Long Line",
]


def get_scrapingdog_key() -> str:
    """Return the rendering proxy API key or raise ConfigurationError."""
    key = os.getenv("SCRAPINGDOG_API_KEY")
    if not key:
        raise ConfigurationError("SCRAPINGDOG_API_KEY not configured")
    return key


def get_openai_key() -> str:
    """Return the OpenAI API key or raise ConfigurationError."""
    key = os.getenv("OPENAI_API_KEY")
    if not key:
        raise ConfigurationError("OPENAI_API_KEY not configured")
    return key
