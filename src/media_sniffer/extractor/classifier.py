"""Decide whether a URL denotes a media resource, and which kind."""

import posixpath
import re
from typing import NamedTuple, Optional
from urllib.parse import parse_qsl, unquote, urlparse

from ..config import EngineConfig
from .base import MediaKind


class Classification(NamedTuple):
    kind: MediaKind
    extension: str


def extension_of(url: str) -> str:
    """Lower-case extension of the URL path's last segment, without the dot."""
    path = unquote(urlparse(url).path)
    ext = posixpath.splitext(posixpath.basename(path))[1]
    return ext[1:].lower()


class Classifier:
    """
    Classifies URLs with fixed lookup tables.

    Rules, strongest first: path extension, MIME hint, known embed-player
    URL shapes. The keyword heuristic is a separate, weaker rule that only
    callers scanning script literals ask for.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

        self._kind_by_ext: dict[str, MediaKind] = {}
        for kind, exts in self.config.extensions.items():
            for ext in exts:
                self._kind_by_ext.setdefault(ext, MediaKind(kind))

        self._mime = {
            mime.lower(): Classification(MediaKind(kind), ext)
            for mime, (kind, ext) in self.config.mime_types.items()
        }
        self._embeds = tuple(re.compile(p, re.IGNORECASE) for p in self.config.embed_patterns)

        ext_alternation = "|".join(
            re.escape(ext) for ext in sorted(self._kind_by_ext, key=len, reverse=True)
        )
        # A media extension anywhere in the URL, not only at the end of the path
        self._ext_anywhere = re.compile(
            rf"\.({ext_alternation})(?=$|[/?#&;,._-])", re.IGNORECASE
        )
        self._keywords = tuple(k.lower() for k in self.config.keywords)
        self._query_params = frozenset(p.lower() for p in self.config.query_params)
        self._asset_extensions = frozenset(e.lower() for e in self.config.asset_extensions)

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(self._kind_by_ext)

    def extensions_for(self, *kinds: MediaKind) -> tuple[str, ...]:
        return tuple(ext for ext, kind in self._kind_by_ext.items() if kind in kinds)

    def classify_extension(self, url: str) -> Optional[Classification]:
        ext = extension_of(url)
        kind = self._kind_by_ext.get(ext)
        if kind is None:
            return None
        return Classification(kind, ext)

    def classify_mime(self, mime_hint: Optional[str]) -> Optional[Classification]:
        if not mime_hint:
            return None
        # Drop parameters such as '; codecs="avc1.42E01E"'
        mime = mime_hint.split(";", 1)[0].strip().lower()
        return self._mime.get(mime)

    def match_embed(self, url: str) -> bool:
        parts = urlparse(url)
        host = (parts.hostname or "").lower()
        if host.startswith("www."):
            host = host[4:]
        target = host + parts.path
        return any(pattern.search(target) for pattern in self._embeds)

    def classify(self, url: str, mime_hint: Optional[str] = None) -> Optional[Classification]:
        """
        Classify a URL by extension, then MIME hint, then embed shape.

        Returns:
            Classification, or None when the URL is not a media resource
        """
        result = self.classify_extension(url)
        if result:
            return result

        result = self.classify_mime(mime_hint)
        if result:
            return result

        if self.match_embed(url):
            return Classification(MediaKind.EMBEDDED_PLAYER, "")

        return None

    def matches_keyword_heuristic(self, url: str) -> bool:
        """
        Keyword sniffing for URLs without a clean extension.

        A keyword alone never qualifies; the URL must also carry a media
        extension somewhere or a telltale query parameter. Page assets such
        as images or scripts never qualify, whatever their path or query
        says.
        """
        if not self.config.enable_heuristic:
            return False

        lowered = url.lower()
        if not any(keyword in lowered for keyword in self._keywords):
            return False

        parts = urlparse(url)
        if extension_of(url) in self._asset_extensions:
            return False

        params = parse_qsl(parts.query, keep_blank_values=True)
        # e.g. an image resizer's ?format=webp
        if any(
            name.lower() in self._query_params and value.lower().lstrip(".") in self._asset_extensions
            for name, value in params
        ):
            return False

        if self._ext_anywhere.search(parts.path):
            return True

        return any(name.lower() in self._query_params for name, _ in params)

    def classify_heuristic(self, url: str) -> Optional[Classification]:
        """Lowest-confidence classification used for script literals."""
        if not self.matches_keyword_heuristic(url):
            return None

        parts = urlparse(url)
        match = self._ext_anywhere.search(parts.path)
        if match:
            ext = match.group(1).lower()
            return Classification(self._kind_by_ext[ext], ext)

        # e.g. ?format=m3u8
        for name, value in parse_qsl(parts.query):
            kind = self._kind_by_ext.get(value.lower().lstrip("."))
            if name.lower() in self._query_params and kind:
                return Classification(kind, value.lower().lstrip("."))

        return Classification(MediaKind.DIRECT_FILE, "")
