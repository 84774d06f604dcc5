"""Tests for the AI content generation loop.

The OpenAI client is a MagicMock returning Responses API shaped objects,
and the sleep function records delays instead of waiting.
"""

import json
import sqlite3
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from aom_scrape.config import ConfigurationError
from aom_scrape.db import bulk_set_published, get_product, get_product_count, init_db
from aom_scrape.generator import ContentGenerator, GenerationError, parse_generated_content
from aom_scrape.models import CandidateProduct, GenerationState

STORY = (
    "<p>Als der Morgen über der Werkstatt aufzog, lag der Stoff schon bereit. "
    "Jede Naht dieses Anzugs erzählt von Geduld, von Händen, die wissen, "
    "was ein Mann an seinem wichtigsten Tag tragen möchte.</p>"
    "<p>Ein Kleidungsstück, das bleibt, wenn der Abend längst vorüber ist.</p>"
)

SHORT_STORY = "<p>" + "a" * 143 + "</p>"


def _response(payload):
    """Build an object shaped like a Responses API result."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    block = MagicMock()
    block.text = text
    item = MagicMock()
    item.content = [block]
    resp = MagicMock()
    resp.output = [item]
    return resp


def _valid(description="Zeitlose Eleganz in Navy."):
    return _response({"description": description, "story": STORY})


def _candidate(name="Anzug Navy Slim Fit", **kwargs):
    kwargs.setdefault("category", "Bräutigam")
    return CandidateProduct(name=name, **kwargs)


@pytest.fixture
def temp_db():
    """Create a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = str(Path(tmpdir) / "catalog.db")
        init_db(db_path)
        yield db_path


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def generator(client, sleeps, temp_db):
    return ContentGenerator(client=client, sleep=sleeps.append, db_path=temp_db)


class TestParseGeneratedContent:

    def test_valid(self):
        content = parse_generated_content(json.dumps({"description": " Kurz. ", "story": STORY}))
        assert content.description == "Kurz."
        assert content.story == STORY

    def test_short_story_rejected(self):
        assert len(SHORT_STORY) == 150
        raw = json.dumps({"description": "Kurz.", "story": SHORT_STORY})
        with pytest.raises(GenerationError, match="too short"):
            parse_generated_content(raw)

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "not json",
        "[1, 2]",
        json.dumps({"story": STORY}),
        json.dumps({"description": "Kurz.", "story": ""}),
    ])
    def test_invalid(self, raw):
        with pytest.raises(GenerationError):
            parse_generated_content(raw)


class TestGenerateContent:

    def test_request_shape(self, generator, client):
        client.responses.create.return_value = _valid()

        generator.generate_content(_candidate(price="ab 899 €"))

        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["text"] == {"format": {"type": "json_object"}}
        assert kwargs["temperature"] == 1.0
        assert kwargs["max_output_tokens"] == 500
        prompt = kwargs["input"][0]["content"][0]["text"]
        assert "Anzug Navy Slim Fit" in prompt
        assert "ab 899 €" in prompt

    def test_client_error_wrapped(self, generator, client):
        client.responses.create.side_effect = RuntimeError("rate limited")

        with pytest.raises(GenerationError, match="rate limited"):
            generator.generate_content(_candidate())


class TestRetry:

    def test_succeeds_on_third_attempt_after_two_delays(self, generator, client, sleeps):
        client.responses.create.side_effect = [
            RuntimeError("timeout"),
            _response("not json"),
            _valid(),
        ]

        report = generator.run([_candidate()])

        assert report.generated == 1
        assert report.errors == []
        assert report.results[0].attempts == 3
        assert report.results[0].state is GenerationState.ACCEPTED
        assert sleeps == [2.0, 2.0]

    def test_short_story_exhausts_attempts(self, generator, client, sleeps):
        client.responses.create.return_value = _response(
            {"description": "Kurz.", "story": SHORT_STORY}
        )

        report = generator.run([_candidate()])

        assert report.generated == 0
        assert client.responses.create.call_count == 3
        assert "too short" in report.errors[0]["error"]
        assert sleeps == [2.0, 2.0]

    def test_last_error_reported(self, generator, client):
        client.responses.create.side_effect = RuntimeError("upstream 503")

        report = generator.run([_candidate("Weste Bordeaux Samt")])

        assert report.errors == [{
            "product": "Weste Bordeaux Samt",
            "error": "OpenAI request failed: upstream 503",
        }]


class TestBatch:

    def test_failure_isolated_and_paced(self, generator, client, sleeps):
        client.responses.create.side_effect = [
            _valid("Erster."),
            RuntimeError("a"),
            RuntimeError("b"),
            RuntimeError("c"),
            _valid("Dritter."),
        ]
        candidates = [
            _candidate("Anzug Navy Slim Fit"),
            _candidate("Smoking Mitternachtsblau"),
            _candidate("Weste Bordeaux Samt"),
        ]

        report = generator.run(candidates)

        assert [item.candidate.name for item in report.results] == [
            "Anzug Navy Slim Fit",
            "Weste Bordeaux Samt",
        ]
        assert [e["product"] for e in report.errors] == ["Smoking Mitternachtsblau"]
        # item gap, two retry gaps, item gap; nothing after the last item
        assert sleeps == [1.0, 2.0, 2.0, 1.0]

    def test_batch_capped_at_fifty(self, generator, client):
        client.responses.create.return_value = _valid()
        candidates = [_candidate(f"Anzug Nummer {i}") for i in range(55)]

        report = generator.run(candidates)

        assert report.generated == 50
        assert client.responses.create.call_count == 50

    def test_missing_name_fails_without_call(self, generator, client):
        report = generator.run([_candidate("")])

        assert report.errors == [{"product": "", "error": "Product name is required"}]
        client.responses.create.assert_not_called()

    def test_symbol_only_name_fails_without_call(self, generator, client):
        report = generator.run([_candidate("!!!")])

        assert "slug" in report.errors[0]["error"]
        client.responses.create.assert_not_called()

    def test_report_dict(self, generator, client):
        client.responses.create.return_value = _valid()

        result = generator.run([_candidate(image_url="https://www.artofmen.de/a.jpg")]).to_dict()

        assert result["success"] is True
        assert result["generated"] == 1
        assert result["errors"] == 0
        assert result["results"][0]["slug"] == "anzug-navy-slim-fit"
        assert result["results"][0]["images"] == ["https://www.artofmen.de/a.jpg"]
        assert result["results"][0]["saved"] is False
        assert "id" not in result["results"][0]


class TestPersistence:

    def test_saves_unpublished_product(self, generator, client, temp_db):
        client.responses.create.return_value = _valid()

        report = generator.run([_candidate(image_url="/img/navy.jpg")], save_to_database=True)

        item = report.results[0]
        assert item.saved is True
        product = get_product(temp_db, "anzug-navy-slim-fit")
        assert product["id"] == item.product_id
        assert product["published"] is False
        assert product["category"] == "Bräutigam"
        assert product["images"] == ["/img/navy.jpg"]

    def test_upsert_on_slug_conflict(self, generator, client, temp_db):
        client.responses.create.side_effect = [_valid("Alt."), _valid("Neu.")]

        first = generator.run([_candidate()], save_to_database=True).results[0]
        bulk_set_published(temp_db, [first.product_id], True)
        second = generator.run([_candidate()], save_to_database=True).results[0]

        assert get_product_count(temp_db) == 1
        assert second.product_id == first.product_id
        product = get_product(temp_db, first.product_id)
        assert product["description"] == "Neu."
        assert product["published"] is True

    def test_db_error_becomes_item_error(self, generator, client):
        client.responses.create.return_value = _valid()

        with patch(
            "aom_scrape.generator.upsert_product_by_slug",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            report = generator.run([_candidate()], save_to_database=True)

        assert report.generated == 0
        assert report.errors[0]["error"] == "DB: database is locked"
        assert client.responses.create.call_count == 1


class TestPreconditions:

    def test_missing_openai_key_fails_fast(self, monkeypatch, sleeps, temp_db):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        generator = ContentGenerator(sleep=sleeps.append, db_path=temp_db)

        with patch("aom_scrape.generator._get_openai_client") as factory:
            with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
                generator.run([_candidate()])

        factory.assert_not_called()
        assert sleeps == []
