"""Media extraction engine - find media references in fetched page text."""

from typing import Optional

from ..config import EngineConfig
from ..models import MediaKind, ResultSet
from .base import MediaCandidate
from .resolver import resolve, is_handle
from .classifier import Classifier, Classification, extension_of
from .strategies import (
    STRATEGIES,
    scan_markup_attributes,
    scan_source_elements,
    scan_frame_embeds,
    scan_script_literals,
    scan_anchor_links,
    scan_playlist_manifests,
    scan_segments_and_handles,
)
from .aggregator import aggregate
from .title import extract_title
from .engine import MediaSniffer


def extract_media(
    page_text: str,
    page_url: str,
    user_agent: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> ResultSet:
    """Extract media references from a page with a one-off engine."""
    return MediaSniffer(config).extract(page_text, page_url, user_agent=user_agent)


__all__ = [
    "MediaKind",
    "MediaCandidate",
    "resolve",
    "is_handle",
    "Classifier",
    "Classification",
    "extension_of",
    "STRATEGIES",
    "scan_markup_attributes",
    "scan_source_elements",
    "scan_frame_embeds",
    "scan_script_literals",
    "scan_anchor_links",
    "scan_playlist_manifests",
    "scan_segments_and_handles",
    "aggregate",
    "extract_title",
    "MediaSniffer",
    "extract_media",
]
