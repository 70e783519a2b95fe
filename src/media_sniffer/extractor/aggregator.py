"""Merge strategy output into the final, deduplicated and named item list."""

import logging
import posixpath
from typing import Iterable, Optional
from urllib.parse import parse_qsl, unquote, urlparse

from ..config import EngineConfig
from ..models import ResultItem
from ..utils.formatting import clean_filename
from .base import MANIFEST_KINDS, MediaCandidate

logger = logging.getLogger(__name__)


def merge_candidates(candidate_sequences: Iterable[Iterable[MediaCandidate]]) -> list[MediaCandidate]:
    """
    Concatenate strategy outputs and drop duplicates, first seen wins.

    Naming hints carried by later duplicates (link text, manifest default
    names) are folded into the surviving candidate.
    """
    kept: dict[str, MediaCandidate] = {}

    for sequence in candidate_sequences:
        for candidate in sequence:
            if candidate.resolved_url is None and not candidate.is_handle:
                continue

            key = candidate.dedup_key
            existing = kept.get(key)
            if existing is None:
                kept[key] = candidate
                continue

            if not existing.suggested_name and candidate.suggested_name:
                existing.suggested_name = candidate.suggested_name
            if not existing.default_name and candidate.default_name:
                existing.default_name = candidate.default_name

    return list(kept.values())


def _name_from_path(url: str) -> str:
    segment = posixpath.basename(urlparse(url).path.rstrip("/"))
    return clean_filename(unquote(segment))


def _name_from_query(url: str, name_params: tuple) -> str:
    wanted = {p.lower() for p in name_params}
    for key, value in parse_qsl(urlparse(url).query):
        if key.lower() in wanted:
            name = clean_filename(value)
            if name:
                return name
    return ""


def _has_extension(name: str, extension: str) -> bool:
    return name.lower().endswith("." + extension)


def _with_extension(name: str, extension: str, known_extensions: tuple) -> str:
    """Make the name end in .extension, replacing a known media extension."""
    if not extension or _has_extension(name, extension):
        return name
    stem, ext = posixpath.splitext(name)
    if ext[1:].lower() in known_extensions:
        name = stem
    return f"{name}.{extension}"


def assign_name(
    candidate: MediaCandidate,
    index: int,
    config: EngineConfig,
    known_extensions: tuple = (),
) -> str:
    """
    Pick a filename for a candidate.

    Order: explicit hint, last path segment, name-like query parameter,
    strategy default (e.g. "HLS stream"), then "<prefix>_<index>".
    """
    url = candidate.resolved_url
    name = clean_filename(candidate.suggested_name)

    if not name and url:
        name = _name_from_path(url) or _name_from_query(url, config.name_params)

    if not name:
        name = clean_filename(candidate.default_name)

    if not name:
        name = f"{config.fallback_prefix}_{index}"

    ext = candidate.extension_hint
    if candidate.kind in MANIFEST_KINDS:
        # Manifests always carry their real extension
        return _with_extension(name, ext, known_extensions)

    current = posixpath.splitext(name)[1][1:].lower()
    if ext and current != ext and current not in known_extensions:
        name = f"{name}.{ext}"
    return name


def _unique_name(name: str, index: int, used: set) -> str:
    if name not in used:
        return name
    stem, ext = posixpath.splitext(name)
    candidate = f"{stem}_{index}{ext}"
    suffix = index
    while candidate in used:
        suffix += 1
        candidate = f"{stem}_{suffix}{ext}"
    return candidate


def aggregate(
    candidate_sequences: Iterable[Iterable[MediaCandidate]],
    config: Optional[EngineConfig] = None,
    headers: Optional[dict[str, str]] = None,
) -> list[ResultItem]:
    """
    Turn raw strategy output into finalized result items.

    Args:
        candidate_sequences: One iterable per strategy, in strategy order
        config: Engine configuration (naming parameters, fallback prefix)
        headers: Request hints attached to every fetchable item

    Returns:
        Items in first-seen order, unique by resolved URL
    """
    config = config or EngineConfig()
    known_extensions = tuple(ext for exts in config.extensions.values() for ext in exts)

    items: list[ResultItem] = []
    used_names: set[str] = set()

    for index, candidate in enumerate(merge_candidates(candidate_sequences)):
        if candidate.is_handle:
            name = f"{config.fallback_prefix}_{index}"
            url = candidate.raw_reference
            item_headers: dict[str, str] = {}
        else:
            name = assign_name(candidate, index, config, known_extensions)
            url = candidate.resolved_url
            item_headers = dict(headers or {})

        name = _unique_name(name, index, used_names)
        used_names.add(name)

        items.append(ResultItem(
            url=url,
            name=name,
            kind=candidate.kind,
            extension=candidate.extension_hint,
            headers=item_headers,
            note=candidate.note,
        ))

    logger.debug(f"Aggregated {len(items)} unique items")
    return items
