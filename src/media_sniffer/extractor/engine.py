"""The extraction engine: runs every strategy and aggregates the results."""

import logging
import posixpath
from typing import Optional
from urllib.parse import unquote, urlparse

from ..config import EngineConfig
from ..errors import InvalidInputError
from ..models import ResultItem, ResultSet
from ..utils.formatting import clean_filename
from .aggregator import aggregate
from .base import MediaCandidate
from .classifier import Classifier
from .strategies import STRATEGIES, Strategy
from .title import extract_title

logger = logging.getLogger(__name__)


class MediaSniffer:
    """
    Finds media references in an already fetched page.

    Holds only the immutable configuration and the classifier built from
    it, so one instance can serve any number of pages, concurrently too.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        strategies: Optional[tuple[tuple[str, Strategy], ...]] = None,
    ):
        self.config = config or EngineConfig()
        self.classifier = Classifier(self.config)
        self.strategies = tuple(strategies) if strategies is not None else STRATEGIES

    def validate_input(self, page_text: str, page_url: str) -> None:
        """
        Reject input the engine cannot work with.

        Raises:
            InvalidInputError: Missing or non-http(s) page URL, or page text
                that is empty or too short to be a page
        """
        if not page_url or not isinstance(page_url, str):
            raise InvalidInputError("Page URL is required")

        parts = urlparse(page_url.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidInputError(
                f"Page URL must be an absolute http(s) URL: {page_url!r}",
                context={"page_url": page_url},
            )

        if not isinstance(page_text, str) or len(page_text.strip()) < self.config.min_page_length:
            raise InvalidInputError(
                "Page text is empty or too short to extract from",
                context={"page_url": page_url, "length": len(page_text or "")},
            )

    def request_headers(self, page_url: str, user_agent: Optional[str] = None) -> dict[str, str]:
        """Headers a downloader should send when fetching an item."""
        headers = {"Referer": page_url}
        if user_agent:
            headers["User-Agent"] = user_agent
        return headers

    def run_strategies(self, page_text: str, page_url: str) -> list[list[MediaCandidate]]:
        """Run every strategy in order; a failing strategy contributes what it found so far."""
        results = []
        for name, strategy in self.strategies:
            found: list[MediaCandidate] = []
            try:
                for candidate in strategy(page_text, page_url, self.classifier):
                    found.append(candidate)
            except Exception as e:
                logger.warning(f"Strategy {name} failed on {page_url}: {e}")
            logger.debug(f"Strategy {name}: {len(found)} candidates")
            results.append(found)
        return results

    def extract(self, page_text: str, page_url: str, user_agent: Optional[str] = None) -> ResultSet:
        """
        Extract media references from page text.

        Args:
            page_text: Markup/script content of the page
            page_url: Absolute URL the page was fetched from
            user_agent: User-Agent used for the page fetch, passed on as a hint

        Returns:
            ResultSet; an empty item list means nothing was found

        Raises:
            InvalidInputError: If the input itself is unusable
        """
        self.validate_input(page_text, page_url)
        page_url = page_url.strip()

        items = aggregate(
            self.run_strategies(page_text, page_url),
            config=self.config,
            headers=self.request_headers(page_url, user_agent),
        )
        title = extract_title(
            page_text,
            default=self.config.default_title,
            max_length=self.config.title_max_length,
        )

        logger.info(f"Found {len(items)} media items on {page_url}")
        return ResultSet(title=title, page_url=page_url, items=items)

    def direct_link(self, url: str, user_agent: Optional[str] = None) -> Optional[ResultSet]:
        """
        Build a one-item result when the URL itself is a media file.

        Returns:
            ResultSet, or None when the URL is an ordinary page
        """
        if not url or urlparse(url).scheme not in ("http", "https"):
            return None

        result = self.classifier.classify_extension(url)
        if result is None:
            return None

        name = clean_filename(unquote(posixpath.basename(urlparse(url).path))) or (
            f"{self.config.fallback_prefix}_0.{result.extension}"
        )
        headers = {"User-Agent": user_agent} if user_agent else {}

        return ResultSet(
            title=name,
            page_url=url,
            items=[ResultItem(
                url=url,
                name=name,
                kind=result.kind,
                extension=result.extension,
                headers=headers,
            )],
        )
