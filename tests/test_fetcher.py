"""Tests for the page fetcher (network mocked)."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from media_sniffer.errors import FetchError
from media_sniffer.fetcher import FetchedPage, PageFetcher


def make_response(status_code=200, text="<html></html>", url="https://example.com/page"):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.url = url
    response.reason = "Not Found" if status_code == 404 else "OK"
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def session():
    with patch("media_sniffer.fetcher.page_fetcher.cloudscraper.create_scraper") as create:
        session = MagicMock()
        create.return_value = session
        yield session


class TestPageFetcher:
    """Tests for PageFetcher."""

    def test_configured_user_agent(self, session):
        fetcher = PageFetcher(user_agent="TestAgent/1.0")
        assert fetcher.headers["User-Agent"] == "TestAgent/1.0"
        assert "text/html" in fetcher.headers["Accept"]

    def test_random_user_agent(self, session):
        with patch("media_sniffer.fetcher.page_fetcher.UserAgent") as user_agent:
            user_agent.return_value.random = "Random/2.0"
            assert PageFetcher().user_agent == "Random/2.0"

    def test_user_agent_fallback(self, session):
        with patch("media_sniffer.fetcher.page_fetcher.UserAgent", side_effect=RuntimeError("no data")):
            assert PageFetcher().user_agent.startswith("Mozilla/5.0")

    def test_fetch_success(self, session):
        session.get.return_value = make_response(text="<title>Hi</title>", url="https://example.com/final")
        page = PageFetcher(timeout=5, user_agent="UA").fetch("https://example.com/page")

        assert isinstance(page, FetchedPage)
        assert page.text == "<title>Hi</title>"
        assert page.final_url == "https://example.com/final"
        assert page.user_agent == "UA"
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["User-Agent"] == "UA"

    def test_http_error(self, session):
        session.get.return_value = make_response(status_code=404)
        with pytest.raises(FetchError) as exc_info:
            PageFetcher(user_agent="UA").fetch("https://example.com/missing")
        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "FETCH_ERROR"

    def test_connection_error(self, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(FetchError, match="Connection failed"):
            PageFetcher(user_agent="UA").fetch("https://example.com/")

    def test_timeout(self, session):
        session.get.side_effect = requests.exceptions.Timeout()
        with pytest.raises(FetchError, match="timed out"):
            PageFetcher(user_agent="UA").fetch("https://example.com/")
