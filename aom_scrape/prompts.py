"""Prompt templates for AI product content."""

from aom_scrape.models import CandidateProduct

__all__ = ["SYSTEM_PROMPT", "make_content_prompt"]

SYSTEM_PROMPT = (
    "Du schreibst auf Deutsch. Sei kreativ - jede Geschichte soll einzigartig sein. "
    "Antworte nur im JSON Format."
)


def make_content_prompt(product: CandidateProduct) -> str:
    """Build the user prompt asking for a description and a short story.

    The response is requested as a JSON object with `description` and
    `story` (story wrapped in <p> tags).
    """
    price_line = f"Preis: {product.price}\n" if product.price else ""

    return f"""Produkt: {product.name}
Kategorie: {product.category}
{price_line}
Erstelle für dieses Produkt:

1. DESCRIPTION (Produktbeschreibung):
   - 2 Sätze, die das PRODUKT selbst beschreiben
   - Farbe, Material, Schnitt, für welchen Anlass
   - Sachlich aber elegant

2. STORY (kurze emotionale Geschichte):
   - MAXIMAL 5 Sätze
   - BEGINNE NICHT mit dem Produktnamen
   - Beginne mit einer Szene oder einem Moment
   - Erzähle von Handwerk, Tradition oder dem Mann der ihn trägt
   - Sei kreativ und einzigartig - jede Geschichte soll anders sein

JSON Format:
{{
  "description": "Sachliche Produktbeschreibung in 2 Sätzen.",
  "story": "<p>Geschichte in maximal 5 Sätzen. Beginne mit einer Szene.</p>"
}}"""
