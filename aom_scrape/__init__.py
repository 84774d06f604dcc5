"""Art Of Men catalog scraper and AI content generator."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from aom_scrape.config import (
    DB_PATH,
    PAGE_TYPES,
    SITE_ORIGIN,
    ConfigurationError,
)
from aom_scrape.db import init_db, upsert_product_by_slug
from aom_scrape.generator import ContentGenerator, GenerationError
from aom_scrape.html_utils import extract_products, select_page_type
from aom_scrape.models import (
    CandidateProduct,
    GeneratedContent,
    GenerationReport,
    GenerationState,
)
from aom_scrape.scraper import ScrapeError, scrape_page
from aom_scrape.slugs import slugify

__all__ = [
    # Version
    "__version__",
    # Config
    "DB_PATH",
    "PAGE_TYPES",
    "SITE_ORIGIN",
    "ConfigurationError",
    # Models
    "CandidateProduct",
    "GeneratedContent",
    "GenerationReport",
    "GenerationState",
    # Core functions
    "slugify",
    "select_page_type",
    "extract_products",
    "scrape_page",
    "ScrapeError",
    "ContentGenerator",
    "GenerationError",
    "init_db",
    "upsert_product_by_slug",
]
