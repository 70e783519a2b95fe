"""HTTP fetcher that hands page text to the extraction engine."""

import logging
from dataclasses import dataclass
from typing import Optional

import cloudscraper
import requests
from fake_useragent import UserAgent

from ..errors import FetchError

logger = logging.getLogger(__name__)

ACCEPT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}

FALLBACK_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FetchedPage:
    """A successfully fetched page."""

    url: str
    final_url: str
    status_code: int
    text: str
    user_agent: str


class PageFetcher:
    """Fetches pages through a browser-like cloudscraper session."""

    def __init__(
        self,
        timeout: int = 15,
        user_agent: Optional[str] = None,
        browser: str = "chrome",
        platform: str = "windows",
    ):
        self.timeout = timeout
        self.user_agent = user_agent or self._random_user_agent()
        # Cloudscraper creates a session that mimics a browser and solves simple JS challenges
        self.session = cloudscraper.create_scraper(
            browser={'browser': browser, 'platform': platform, 'desktop': True}
        )

    @staticmethod
    def _random_user_agent() -> str:
        try:
            return UserAgent().random
        except Exception as e:
            logger.debug(f"fake-useragent unavailable, using fallback: {e}")
            return FALLBACK_USER_AGENT

    @property
    def headers(self) -> dict[str, str]:
        return {'User-Agent': self.user_agent, **ACCEPT_HEADERS}

    def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a page.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedPage with the decoded text

        Raises:
            FetchError: Non-success status, connection failure or timeout
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else str(e)
            raise FetchError(f"HTTP Error {status}: {reason} for {url}", url, status) from e
        except requests.exceptions.ConnectionError as e:
            raise FetchError(f"Connection failed to {url}. Check internet or URL.", url) from e
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Request timed out for {url}", url) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Fetching {url} failed: {e}", url) from e

        return FetchedPage(
            url=url,
            final_url=response.url or url,
            status_code=response.status_code,
            text=response.text,
            user_agent=self.user_agent,
        )
