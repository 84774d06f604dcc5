"""Demo catalog for local development and storefront previews."""

from typing import Any, Dict, List

from aom_scrape.db import create_product, delete_product, init_db
from aom_scrape.logging_config import get_logger

__all__ = ["DEMO_PRODUCTS", "seed_demo_products"]

logger = get_logger("seed")

DEMO_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "Der Klassische Anzug",
        "slug": "der-klassische-anzug",
        "description": (
            "Ein zeitloser Zweireiher aus feinstem italienischen Wolle-Kaschmir-Gemisch, "
            "handgefertigt von Meistern ihres Fachs."
        ),
        "story": (
            "<p>Die Geschichte dieses Anzugs beginnt in den Hügeln der Toskana, wo seit "
            "Generationen die feinsten Stoffe der Welt gewebt werden.</p>\n"
            "<p>In unserer Manufaktur in München wird jedes Stück von Hand zugeschnitten. "
            "Unsere Schneidermeister kennen jeden Stich, jede Naht, die einen gewöhnlichen "
            "Anzug von einem außergewöhnlichen unterscheidet.</p>\n"
            "<p>Die Knöpfe sind aus echtem Horn, die Einlagen aus reinem Rosshaar. Mehr als "
            "50 Stunden Handarbeit fließen in jeden einzelnen Anzug.</p>"
        ),
        "images": [
            "https://images.unsplash.com/photo-1594938298603-c8148c4dae35?w=1200&h=1600&fit=crop",
            "https://images.unsplash.com/photo-1507679799987-c73779587ccf?w=800&h=1000&fit=crop",
        ],
        "category": "Anzüge",
        "tags": ["Klassisch", "Wolle", "Handgefertigt", "Premium"],
        "template": "modern",
        "color_scheme": "dark",
        "published": True,
    },
    {
        "name": "Das Seidene Einstecktuch",
        "slug": "das-seidene-einstecktuch",
        "description": (
            "Handgerollt und in limitierter Auflage: dieses Einstecktuch aus Como-Seide "
            "verleiht jedem Outfit den letzten Schliff."
        ),
        "story": (
            "<p>In Como, am Fuße der italienischen Alpen, liegt das Herz der europäischen "
            "Seidenproduktion. Hier wurde auch dieses Einstecktuch geboren.</p>\n"
            "<p>Jedes Tuch wird von Hand gesäumt, ein Prozess, der \"roulé main\" genannt "
            "wird und selbst für erfahrene Handwerker mehrere Stunden dauert.</p>\n"
            "<p>Limitiert auf nur 100 Stück pro Saison, ist jedes Einstecktuch nummeriert.</p>"
        ),
        "images": [
            "https://images.unsplash.com/photo-1598522325074-042db73aa4e6?w=1200&h=1600&fit=crop",
        ],
        "category": "Accessoires",
        "tags": ["Seide", "Como", "Limitiert", "Handgefertigt"],
        "template": "minimal",
        "color_scheme": "warm",
        "published": True,
    },
]


def seed_demo_products(db_path: str) -> int:
    """Recreate the demo products; other catalog rows are left alone.

    Returns:
        Number of products created
    """
    init_db(db_path)
    for product in DEMO_PRODUCTS:
        if delete_product(db_path, product["slug"]):
            logger.info(f"Replaced existing demo product {product['slug']}")
        create_product(db_path, **product)
        print(f"Created: {product['name']}")
    return len(DEMO_PRODUCTS)
