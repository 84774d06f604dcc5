"""Tests for fetching pages through the rendering proxy."""

from unittest.mock import MagicMock

import pytest
import requests  # type: ignore[import-untyped]

from aom_scrape.config import PROXY_URL, ConfigurationError
from aom_scrape.scraper import ScrapeError, fetch_rendered_html, scrape_page
from aom_scrape.url_validation import URLValidationError, absolutize_url, validate_url

SHOE_PAGE = """
<html><body>
  <section><h2>Derby Cognac</h2><img src="/img/derby.jpg"></section>
  <section><h2>Monkstrap Schwarz</h2></section>
</body></html>
"""


def _session(status_code=200, text=""):
    session = MagicMock()
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.text = text
    session.get.return_value = resp
    return session


class TestFetchRenderedHtml:

    def test_proxy_parameters(self):
        session = _session(text="<html></html>")

        html = fetch_rendered_html("https://www.artofmen.de/schuhe/", api_key="k", session=session)

        assert html == "<html></html>"
        args, kwargs = session.get.call_args
        assert args[0] == PROXY_URL
        assert kwargs["params"] == {
            "api_key": "k",
            "url": "https://www.artofmen.de/schuhe/",
            "dynamic": "true",
            "wait": 5000,
        }

    def test_non_2xx_is_error(self):
        session = _session(status_code=403)

        with pytest.raises(ScrapeError) as exc_info:
            fetch_rendered_html("https://www.artofmen.de/", api_key="k", session=session)

        assert exc_info.value.status_code == 403
        assert "403" in str(exc_info.value)

    def test_redirect_is_error(self):
        """3xx from the proxy is not a rendered page, even though requests calls it ok."""
        session = _session(status_code=302, text="<html><h2>Oxford Schwarz</h2></html>")
        session.get.return_value.ok = True

        with pytest.raises(ScrapeError) as exc_info:
            fetch_rendered_html("https://www.artofmen.de/schuhe/", api_key="k", session=session)

        assert exc_info.value.status_code == 302

    def test_redirect_yields_no_candidates(self):
        session = _session(status_code=301, text="<html><h2>Oxford Schwarz</h2></html>")
        session.get.return_value.ok = True

        with pytest.raises(ScrapeError):
            scrape_page("https://www.artofmen.de/schuhe/", api_key="k", session=session)

    def test_transport_error_not_retried(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("boom")

        with pytest.raises(ScrapeError):
            fetch_rendered_html("https://www.artofmen.de/", api_key="k", session=session)

        assert session.get.call_count == 1

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("SCRAPINGDOG_API_KEY", raising=False)
        session = _session()

        with pytest.raises(ConfigurationError, match="SCRAPINGDOG_API_KEY"):
            fetch_rendered_html("https://www.artofmen.de/", session=session)

        session.get.assert_not_called()


class TestScrapePage:

    def test_extracts_candidates(self, monkeypatch):
        monkeypatch.setenv("SCRAPINGDOG_API_KEY", "secret")
        session = _session(text=SHOE_PAGE)

        products = scrape_page("https://www.artofmen.de/schuhe/", session=session)

        assert [p.name for p in products] == ["Derby Cognac", "Monkstrap Schwarz"]
        assert products[0].image_url == "https://www.artofmen.de/img/derby.jpg"
        assert products[1].image_url is None
        assert session.get.call_args.kwargs["params"]["api_key"] == "secret"

    def test_foreign_domain_rejected_before_fetch(self):
        session = _session()

        with pytest.raises(URLValidationError):
            scrape_page("https://example.com/schuhe/", api_key="k", session=session)

        session.get.assert_not_called()


class TestUrlHelpers:

    def test_validate_url_accepts_site(self):
        assert validate_url("https://artofmen.de/lookbook/") == "https://artofmen.de/lookbook/"

    @pytest.mark.parametrize("url", [
        "ftp://www.artofmen.de/",
        "javascript:alert(1)",
        "https://www.artofmen.de.evil.com/",
        "",
    ])
    def test_validate_url_rejects(self, url):
        with pytest.raises(URLValidationError):
            validate_url(url)

    @pytest.mark.parametrize("src,expected", [
        ("//cdn.artofmen.de/a.jpg", "https://cdn.artofmen.de/a.jpg"),
        ("/media/a.jpg", "https://www.artofmen.de/media/a.jpg"),
        ("https://img.example/a.jpg", "https://img.example/a.jpg"),
        ("", None),
        (None, None),
    ])
    def test_absolutize_url(self, src, expected):
        assert absolutize_url(src) == expected
