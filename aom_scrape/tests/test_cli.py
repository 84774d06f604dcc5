"""Tests for the command-line entry point."""

import csv
from pathlib import Path
from unittest.mock import patch

import pytest

from aom_scrape.cli import main, parse_args
from aom_scrape.db import create_product, get_product, get_product_count, init_db
from aom_scrape.models import CandidateProduct
from aom_scrape.scraper import ScrapeError


@pytest.fixture(autouse=True)
def no_file_logging():
    with patch("aom_scrape.cli.setup_logging"):
        yield


class TestParseArgs:

    def test_save_requires_generate(self):
        with pytest.raises(SystemExit):
            parse_args(["--save"])

    def test_defaults(self):
        args = parse_args([])
        assert args.url == "https://www.artofmen.de/lookbook/"
        assert args.limit == 50
        assert not args.generate


class TestMain:

    def test_list_pages(self, capsys):
        assert main(["--list-pages"]) == 0
        out = capsys.readouterr().out
        assert "schuhe" in out
        assert "Kollektion" in out

    def test_stats(self, tmp_path, capsys):
        db_path = str(tmp_path / "catalog.db")
        init_db(db_path)
        create_product(db_path, slug="anzug", name="Anzug", description="D.", story="S.", published=True)

        assert main(["--stats", "--db", db_path]) == 0
        out = capsys.readouterr().out
        assert "Total products: 1" in out
        assert "published: 1" in out

    def test_scrape_and_export_csv(self, tmp_path):
        csv_path = tmp_path / "out" / "candidates.csv"
        candidates = [CandidateProduct(name="Derby Cognac", category="Schuhe", image_url="https://www.artofmen.de/d.jpg")]

        with patch("aom_scrape.cli.scrape_page", return_value=candidates):
            assert main(["--url", "https://www.artofmen.de/schuhe/", "--export-csv", str(csv_path)]) == 0

        with open(csv_path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert rows == [{
            "name": "Derby Cognac",
            "category": "Schuhe",
            "price": "",
            "sizes": "",
            "imageUrl": "https://www.artofmen.de/d.jpg",
        }]

    def test_scrape_failure_exit_code(self, capsys):
        with patch("aom_scrape.cli.scrape_page", side_effect=ScrapeError("ScrapingDog failed: 500", 500)):
            assert main([]) == 1
        assert "ScrapingDog failed: 500" in capsys.readouterr().err

    def test_export_catalog(self, tmp_path):
        db_path = str(tmp_path / "catalog.db")
        init_db(db_path)
        create_product(db_path, slug="weste", name="Weste", description="D.", story="S.", tags=["samt"])
        out = tmp_path / "catalog.csv"

        assert main(["--db", db_path, "--export-catalog", str(out)]) == 0
        assert "weste" in Path(out).read_text(encoding="utf-8")

    def test_seed_is_repeatable_and_keeps_other_rows(self, tmp_path, capsys):
        db_path = str(tmp_path / "catalog.db")
        init_db(db_path)
        create_product(db_path, slug="weste", name="Weste", description="D.", story="S.")

        assert main(["--db", db_path, "--seed"]) == 0
        assert main(["--db", db_path, "--seed"]) == 0

        assert get_product_count(db_path) == 3
        assert get_product_count(db_path, published=True) == 2
        suit = get_product(db_path, "der-klassische-anzug")
        assert suit["color_scheme"] == "dark"
        assert suit["tags"] == ["Klassisch", "Wolle", "Handgefertigt", "Premium"]
        assert get_product(db_path, "das-seidene-einstecktuch")["template"] == "minimal"
        assert "Seeded 2 demo products" in capsys.readouterr().out
