"""Data models for scraped candidates and generated content."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = [
    "CandidateProduct",
    "GeneratedContent",
    "GenerationState",
    "GenerationItem",
    "GenerationReport",
]


@dataclass
class CandidateProduct:
    """A product extracted from an artofmen.de page, not yet persisted.

    The category is fixed by the page type at extraction time.
    """

    name: str
    category: str
    price: str = ""
    sizes: str = ""
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "sizes": self.sizes,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateProduct":
        """Create from API payload (accepts imageUrl or image_url)."""
        return cls(
            name=str(data.get("name") or "").strip(),
            category=data.get("category") or "",
            price=data.get("price") or "",
            sizes=data.get("sizes") or "",
            image_url=data.get("imageUrl") or data.get("image_url") or None,
        )


@dataclass
class GeneratedContent:
    """Description and story returned by one successful AI call."""

    description: str
    story: str


class GenerationState(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    ACCEPTED = "accepted"
    FAILED = "failed"


@dataclass
class GenerationItem:
    """Progress of a single candidate through the generation loop."""

    candidate: CandidateProduct
    state: GenerationState = GenerationState.PENDING
    attempts: int = 0
    last_error: Optional[str] = None
    content: Optional[GeneratedContent] = None
    slug: Optional[str] = None
    saved: bool = False
    product_id: Optional[str] = None

    @property
    def images(self) -> List[str]:
        return [self.candidate.image_url] if self.candidate.image_url else []

    def to_result(self) -> Dict[str, Any]:
        """Serialize an accepted item for the API response."""
        result = self.candidate.to_dict()
        result.update({
            "slug": self.slug,
            "description": self.content.description if self.content else None,
            "story": self.content.story if self.content else None,
            "images": self.images,
            "saved": self.saved,
        })
        if self.saved:
            result["id"] = self.product_id
        return result


@dataclass
class GenerationReport:
    """Outcome of one generation batch."""

    results: List[GenerationItem] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def add_error(self, product_name: str, message: str) -> None:
        self.errors.append({"product": product_name, "error": message})

    @property
    def generated(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "generated": self.generated,
            "errors": len(self.errors),
            "results": [item.to_result() for item in self.results],
            "errorDetails": list(self.errors),
        }
