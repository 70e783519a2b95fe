"""Fetcher module - retrieves page text for the engine."""

from .page_fetcher import FetchedPage, PageFetcher

__all__ = [
    "FetchedPage",
    "PageFetcher",
]
