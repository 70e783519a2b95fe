"""
Extraction strategies.

Each strategy is an independent scanner over the raw page text. It takes
the page text, the page URL and a Classifier, and lazily yields
MediaCandidate objects. Strategies never look at each other's output;
overlapping matches are collapsed later by the aggregator.
"""

import logging
import re
from functools import lru_cache
from typing import Callable, Iterator, Optional

from bs4 import BeautifulSoup, Tag

from ..errors import ResolutionError
from ..utils.formatting import clean_text
from .base import MediaCandidate, MediaKind
from .classifier import Classification, Classifier
from .resolver import clean_reference, is_handle, resolve

logger = logging.getLogger(__name__)

Strategy = Callable[[str, str, Classifier], Iterator[MediaCandidate]]

HANDLE_NOTE = "In-memory browser handle (blob:); only resolvable inside a live browser context"

MANIFEST_NAMES = {
    MediaKind.HLS_MANIFEST: "HLS stream",
    MediaKind.DASH_MANIFEST: "DASH stream",
}

_VIDEO_TAG_RE = re.compile(r"<video\b[^>]*>", re.IGNORECASE)
_VIDEO_CLOSE_RE = re.compile(r"</video\s*>", re.IGNORECASE)
_SOURCE_TAG_RE = re.compile(r"<source\b[^>]*>", re.IGNORECASE)
_IFRAME_TAG_RE = re.compile(r"<iframe\b[^>]*>", re.IGNORECASE)
_ANCHOR_RE = re.compile(r"<a\b[^>]*>.*?</a\s*>", re.IGNORECASE | re.DOTALL)

# "videoUrl": "...", play_url = '...', etc.
_NAMED_FIELD_RE = re.compile(
    r'["\']?\b((?:video|play|playback|stream|hls|dash|mp4|media|file|source)_?(?:url|src))\b["\']?'
    r'\s*[:=]\s*(["\'])(.+?)\2',
    re.IGNORECASE,
)

# Any quoted absolute URL, slashes possibly escaped as \/
_QUOTED_URL_RE = re.compile(r'["\'](https?:(?:\\?/){2}[^"\'\s<>]+)["\']', re.IGNORECASE)

_BLOB_RE = re.compile(r'blob:https?://[^\s"\'`<>()\\]+', re.IGNORECASE)

_SRC_ATTRIBUTES = ("src", "data-src")


def parse_tag(markup: str) -> Optional[Tag]:
    """Parse one matched element; a repeated attribute keeps its first value."""
    return BeautifulSoup(markup, "html.parser", on_duplicate_attribute="ignore").find(True)


def parse_attributes(markup: str) -> dict[str, str]:
    """Single-valued attributes of the first element in markup."""
    tag = parse_tag(markup)
    if tag is None:
        return {}
    return {name: value.strip() for name, value in tag.attrs.items() if isinstance(value, str)}


def _source_of(attrs: dict[str, str]) -> Optional[str]:
    for name in _SRC_ATTRIBUTES:
        if attrs.get(name):
            return attrs[name]
    return None


def _handle(raw: str) -> MediaCandidate:
    return MediaCandidate(
        raw_reference=clean_reference(raw),
        resolved_url=None,
        kind=MediaKind.UNRESOLVABLE_HANDLE,
        note=HANDLE_NOTE,
    )


def build_candidate(
    raw: str,
    base: str,
    classify: Callable[[str], Optional[Classification]],
    strategy: str,
    suggested_name: Optional[str] = None,
    default_name: Optional[str] = None,
) -> Optional[MediaCandidate]:
    """
    Resolve and classify one raw reference.

    Returns:
        MediaCandidate, or None when the reference does not resolve or
        is not a media resource
    """
    if is_handle(raw):
        return _handle(raw)

    try:
        url = resolve(raw, base)
    except ResolutionError as e:
        logger.debug(f"{strategy}: dropping {raw!r}: {e.message}")
        return None

    if url is None:
        return _handle(raw)

    result = classify(url)
    if result is None:
        return None

    return MediaCandidate(
        raw_reference=raw,
        resolved_url=url,
        kind=result.kind,
        extension_hint=result.extension,
        suggested_name=suggested_name,
        default_name=default_name,
    )


@lru_cache(maxsize=32)
def _reference_pattern(extensions: tuple[str, ...]) -> re.Pattern:
    """Absolute/protocol-relative references anywhere, or quoted relative ones."""
    alternation = "|".join(re.escape(ext) for ext in sorted(extensions, key=len, reverse=True))
    tail = rf"\.(?:{alternation})\b(?:[?#][^\s\"'`<>()]*)?"
    return re.compile(
        rf"(?P<abs>(?:https?:)?(?:\\?/){{2}}[^\s\"'`<>()]+?{tail})"
        rf"|[\"'](?P<rel>[^\s\"'`<>():]+?{tail})[\"']",
        re.IGNORECASE,
    )


@lru_cache(maxsize=32)
def _quoted_media_pattern(extensions: tuple[str, ...]) -> re.Pattern:
    alternation = "|".join(re.escape(ext) for ext in sorted(extensions, key=len, reverse=True))
    return re.compile(
        rf"[\"'`]([^\"'`\s<>]+?\.(?:{alternation})(?:[?#][^\"'`\s<>]*)?)[\"'`]",
        re.IGNORECASE,
    )


def scan_markup_attributes(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """<video src=...> plus the <source> elements nested inside each <video>."""
    strategy = "markup-attribute"
    for match in _VIDEO_TAG_RE.finditer(page_text):
        src = _source_of(parse_attributes(match.group(0)))
        if src:
            candidate = build_candidate(src, base, classifier.classify_extension, strategy)
            if candidate:
                yield candidate

        closing = _VIDEO_CLOSE_RE.search(page_text, match.end())
        if not closing:
            continue

        for source in _SOURCE_TAG_RE.finditer(page_text, match.end(), closing.start()):
            src = _source_of(parse_attributes(source.group(0)))
            if not src:
                continue
            candidate = build_candidate(src, base, classifier.classify_extension, strategy)
            if candidate:
                yield candidate


def scan_source_elements(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """Every <source> element; the type attribute backs up the extension test."""
    strategy = "source-element"
    for match in _SOURCE_TAG_RE.finditer(page_text):
        attrs = parse_attributes(match.group(0))
        src = _source_of(attrs)
        if not src:
            continue

        mime = attrs.get("type")

        def classify(url: str, mime: Optional[str] = mime) -> Optional[Classification]:
            return classifier.classify_extension(url) or classifier.classify_mime(mime)

        candidate = build_candidate(src, base, classify, strategy)
        if candidate:
            yield candidate


def scan_frame_embeds(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """<iframe> players from known video hosts."""
    strategy = "frame-embed"

    def classify(url: str) -> Optional[Classification]:
        if classifier.match_embed(url):
            return Classification(MediaKind.EMBEDDED_PLAYER, "")
        return None

    for match in _IFRAME_TAG_RE.finditer(page_text):
        attrs = parse_attributes(match.group(0))
        src = _source_of(attrs)
        if not src:
            continue
        candidate = build_candidate(
            src, base, classify, strategy,
            suggested_name=clean_text(attrs.get("title")),
        )
        if candidate:
            yield candidate


def scan_script_literals(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """
    String literals anywhere in the page, inline scripts included.

    Three sub-patterns run one after another: quoted URLs ending in a media
    extension, named fields such as ``videoUrl: "..."``, and quoted absolute
    URLs that pass the keyword heuristic.
    """
    strategy = "script-literal"

    pattern = _quoted_media_pattern(classifier.extensions)
    for match in pattern.finditer(page_text):
        candidate = build_candidate(match.group(1), base, classifier.classify_extension, strategy)
        if candidate:
            yield candidate

    def classify_field(url: str) -> Optional[Classification]:
        return classifier.classify(url) or classifier.classify_heuristic(url)

    for match in _NAMED_FIELD_RE.finditer(page_text):
        value = clean_reference(match.group(3))
        if not value.lower().startswith(("http:", "https:", "//", "/", "blob:")):
            continue
        candidate = build_candidate(value, base, classify_field, strategy)
        if candidate:
            yield candidate

    if not classifier.config.enable_heuristic:
        return

    def classify_heuristic(url: str) -> Optional[Classification]:
        if classifier.classify_extension(url):
            return None
        return classifier.classify_heuristic(url)

    for match in _QUOTED_URL_RE.finditer(page_text):
        candidate = build_candidate(match.group(1), base, classify_heuristic, strategy)
        if candidate:
            yield candidate


def scan_anchor_links(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """<a href> links to media files; link text becomes the name hint."""
    strategy = "anchor-link"
    for match in _ANCHOR_RE.finditer(page_text):
        anchor = parse_tag(match.group(0))
        href = anchor.get("href") if anchor is not None else None
        if not href or not isinstance(href, str):
            continue

        candidate = build_candidate(
            href.strip(), base, classifier.classify_extension, strategy,
            suggested_name=clean_text(anchor.get_text(" ")),
        )
        if candidate:
            yield candidate


def scan_playlist_manifests(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """Dedicated pass for HLS (.m3u8) and DASH (.mpd) manifests."""
    strategy = "playlist-manifest"
    extensions = classifier.extensions_for(MediaKind.HLS_MANIFEST, MediaKind.DASH_MANIFEST)
    if not extensions:
        return

    def classify(url: str) -> Optional[Classification]:
        result = classifier.classify_extension(url)
        if result and result.kind in MANIFEST_NAMES:
            return result
        return None

    for match in _reference_pattern(extensions).finditer(page_text):
        raw = match.group("abs") or match.group("rel")
        candidate = build_candidate(raw, base, classify, strategy)
        if candidate:
            candidate.default_name = MANIFEST_NAMES[candidate.kind]
            yield candidate


def scan_segments_and_handles(page_text: str, base: str, classifier: Classifier) -> Iterator[MediaCandidate]:
    """Raw transport segments (.ts, .m4s) and blob: handles."""
    strategy = "segment-handle"
    extensions = classifier.extensions_for(MediaKind.TRANSPORT_SEGMENT)

    def classify(url: str) -> Optional[Classification]:
        result = classifier.classify_extension(url)
        if result and result.kind == MediaKind.TRANSPORT_SEGMENT:
            return result
        return None

    if extensions:
        for match in _reference_pattern(extensions).finditer(page_text):
            raw = match.group("abs") or match.group("rel")
            candidate = build_candidate(raw, base, classify, strategy)
            if candidate:
                yield candidate

    for match in _BLOB_RE.finditer(page_text):
        yield _handle(match.group(0))


# Fixed order; result ordering follows it
STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("markup-attribute", scan_markup_attributes),
    ("source-element", scan_source_elements),
    ("frame-embed", scan_frame_embeds),
    ("script-literal", scan_script_literals),
    ("anchor-link", scan_anchor_links),
    ("playlist-manifest", scan_playlist_manifests),
    ("segment-handle", scan_segments_and_handles),
)
