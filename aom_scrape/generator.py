"""AI content generation for candidate products.

Each candidate moves through pending -> generating -> accepted | failed.
Calls are strictly sequential: one OpenAI request in flight, a fixed delay
between attempts and between candidates. One candidate failing never aborts
the batch; only missing credentials do, before any work starts.
"""

import json
import sqlite3
import time
from typing import Any, Callable, Iterable, Optional

from aom_scrape.config import (
    DB_PATH,
    ITEM_DELAY,
    LLM_MAX_OUTPUT_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    MAX_ATTEMPTS,
    MAX_PRODUCTS_PER_BATCH,
    MIN_STORY_LENGTH,
    RETRY_DELAY,
    SLUG_MAX_LENGTH,
    get_openai_key,
)
from aom_scrape.db import init_db, upsert_product_by_slug
from aom_scrape.logging_config import get_logger, log_scrape_event
from aom_scrape.models import (
    CandidateProduct,
    GeneratedContent,
    GenerationItem,
    GenerationReport,
    GenerationState,
)
from aom_scrape.prompts import SYSTEM_PROMPT, make_content_prompt
from aom_scrape.slugs import slugify

__all__ = [
    "GenerationError",
    "ContentGenerator",
    "parse_generated_content",
]

logger = get_logger("generator")


class GenerationError(Exception):
    """A single failed generation attempt (call error, bad JSON, too short)."""
    pass


def _get_openai_client():
    """Get OpenAI client (lazy initialization)."""
    from openai import OpenAI
    return OpenAI(api_key=get_openai_key())


def _extract_text(resp: Any) -> Optional[str]:
    """Return the first text block of a Responses API result."""
    for item in getattr(resp, "output", None) or []:
        if hasattr(item, "content") and item.content:
            text = getattr(item.content[0], "text", None)
            if text:
                return text
    return None


def parse_generated_content(raw: Optional[str]) -> GeneratedContent:
    """Parse and validate the model's JSON output.

    Raises:
        GenerationError: If the output is empty, not a JSON object, lacks
            description/story, or the story is shorter than MIN_STORY_LENGTH
    """
    if not raw:
        raise GenerationError("No response from OpenAI")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GenerationError(f"AI response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise GenerationError("AI response is not a JSON object")

    description = parsed.get("description")
    story = parsed.get("story")
    if not isinstance(description, str) or not description.strip():
        raise GenerationError("AI response incomplete: missing description")
    if not isinstance(story, str) or not story.strip():
        raise GenerationError("AI response incomplete: missing story")
    if len(story) < MIN_STORY_LENGTH:
        raise GenerationError(
            f"AI response too short: story has {len(story)} characters, "
            f"minimum is {MIN_STORY_LENGTH}"
        )

    return GeneratedContent(description=description.strip(), story=story.strip())


class ContentGenerator:
    """Runs the sequential generate/validate/retry/persist loop.

    Args:
        client: OpenAI client; created lazily from OPENAI_API_KEY if omitted.
        sleep: Delay function, replaced in tests to avoid real waits.
        db_path: Product store used when saving.
        model: OpenAI model name.
        max_attempts: Attempts per candidate.
        retry_delay: Seconds between attempts.
        item_delay: Seconds between candidates.
    """

    def __init__(
        self,
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
        db_path: str = DB_PATH,
        model: str = LLM_MODEL,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        item_delay: float = ITEM_DELAY,
    ):
        self._client = client
        self._sleep = sleep
        self.db_path = db_path
        self.model = model
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.item_delay = item_delay

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _get_openai_client()
        return self._client

    def generate_content(self, product: CandidateProduct) -> GeneratedContent:
        """One attempt: a single completion request plus validation."""
        prompt = make_content_prompt(product)

        log_scrape_event("llm_call", {
            "model": self.model,
            "product": product.name,
            "prompt": prompt,
        }, logger_name="generator")

        try:
            resp = self.client.responses.create(
                model=self.model,
                instructions=SYSTEM_PROMPT,
                input=[{"role": "user", "content": [{"type": "input_text", "text": prompt}]}],
                text={"format": {"type": "json_object"}},
                temperature=LLM_TEMPERATURE,
                max_output_tokens=LLM_MAX_OUTPUT_TOKENS,
            )
        except Exception as e:
            log_scrape_event("llm_error", {
                "product": product.name,
                "error": str(e),
            }, logger_name="generator")
            raise GenerationError(f"OpenAI request failed: {e}") from e

        raw = _extract_text(resp)
        log_scrape_event("llm_response", {
            "model": self.model,
            "product": product.name,
            "raw_response": raw,
        }, logger_name="generator")

        return parse_generated_content(raw)

    def _generate_with_retry(self, item: GenerationItem) -> None:
        item.state = GenerationState.GENERATING
        name = item.candidate.name

        for attempt in range(1, self.max_attempts + 1):
            item.attempts = attempt
            try:
                item.content = self.generate_content(item.candidate)
                item.state = GenerationState.ACCEPTED
                return
            except GenerationError as e:
                item.last_error = str(e)
                remaining = self.max_attempts - attempt
                logger.warning(f"Generation failed for {name}, retries left: {remaining}: {e}")
                if remaining > 0:
                    self._sleep(self.retry_delay)

        item.state = GenerationState.FAILED

    def _save(self, item: GenerationItem) -> None:
        candidate = item.candidate
        logger.info(f"Saving to database: {item.slug}")
        try:
            row = upsert_product_by_slug(
                self.db_path,
                slug=item.slug,
                name=candidate.name,
                description=item.content.description,
                story=item.content.story,
                images=item.images,
                category=candidate.category or None,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error for {candidate.name}: {e}")
            item.state = GenerationState.FAILED
            item.last_error = f"DB: {e}"
            return

        item.saved = True
        item.product_id = row["id"] if row else None
        logger.info(f"Saved: {candidate.name} with id {item.product_id}")

    def process(self, item: GenerationItem, save_to_database: bool, report: GenerationReport) -> None:
        """Run one candidate to a terminal state and record it in the report."""
        name = item.candidate.name

        if not name:
            item.state = GenerationState.FAILED
            item.last_error = "Product name is required"
        else:
            item.slug = slugify(name, max_length=SLUG_MAX_LENGTH)
            if not item.slug:
                item.state = GenerationState.FAILED
                item.last_error = "Cannot derive a slug from the product name"

        if item.state is GenerationState.PENDING:
            self._generate_with_retry(item)

        if item.state is GenerationState.ACCEPTED and save_to_database:
            self._save(item)

        if item.state is GenerationState.ACCEPTED:
            report.results.append(item)
        else:
            report.add_error(name, item.last_error or "AI generation failed")

        log_scrape_event("generation_item", {
            "product": name,
            "state": item.state.value,
            "attempts": item.attempts,
            "saved": item.saved,
            "slug": item.slug,
            "error": None if item.state is GenerationState.ACCEPTED else item.last_error,
        }, logger_name="generator")

    def run(
        self,
        candidates: Iterable[CandidateProduct],
        save_to_database: bool = False,
    ) -> GenerationReport:
        """Generate content for up to MAX_PRODUCTS_PER_BATCH candidates.

        Raises:
            ConfigurationError: If no client was given and OPENAI_API_KEY is unset
        """
        if self._client is None:
            get_openai_key()

        batch = list(candidates)[:MAX_PRODUCTS_PER_BATCH]
        items = [GenerationItem(candidate=c) for c in batch]
        report = GenerationReport()

        if save_to_database:
            init_db(self.db_path)

        logger.info(f"Processing {len(items)} products with {self.model}...")

        for index, item in enumerate(items):
            logger.info(f"[{index + 1}/{len(items)}] Processing: {item.candidate.name}")
            self.process(item, save_to_database, report)

            if index < len(items) - 1:
                self._sleep(self.item_delay)

        log_scrape_event("generation_complete", {
            "generated": report.generated,
            "errors": len(report.errors),
            "saved": sum(1 for i in report.results if i.saved),
        }, logger_name="generator")

        return report
