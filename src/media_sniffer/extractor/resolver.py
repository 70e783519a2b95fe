"""Turn references found in page text into absolute, fetchable URLs."""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from ..errors import ResolutionError


HANDLE_SCHEME = "blob"
ALLOWED_SCHEMES = ("http", "https")

# Escapes left behind when URLs sit inside JSON or JS string literals
_UNICODE_ESCAPES = (
    ("\\u002F", "/"),
    ("\\u002f", "/"),
    ("\\u0026", "&"),
    ("\\u003D", "="),
    ("\\u003d", "="),
    ("\\u003F", "?"),
    ("\\u003f", "?"),
)

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")


def clean_reference(reference: str) -> str:
    """Strip whitespace, quotes and backslash escapes around a raw reference."""
    ref = reference.strip().strip("'\"")
    for escaped, char in _UNICODE_ESCAPES:
        ref = ref.replace(escaped, char)
    ref = ref.replace("\\/", "/")
    return ref.replace("\\", "")


def is_handle(reference: str) -> bool:
    """True for in-memory browser handles such as ``blob:https://...``."""
    return clean_reference(reference).lower().startswith(HANDLE_SCHEME + ":")


def resolve(reference: str, base: str) -> Optional[str]:
    """
    Resolve a reference against the page URL.

    Args:
        reference: Raw reference as found in the page (relative,
            protocol-relative or absolute)
        base: Absolute http(s) URL of the page

    Returns:
        Absolute http(s) URL, or None for an in-memory handle that can
        only be resolved inside a live browser

    Raises:
        ResolutionError: Empty, malformed or non-http(s) reference
    """
    ref = clean_reference(reference or "")
    if not ref:
        raise ResolutionError("Empty reference", reference)

    if any(ch.isspace() for ch in ref) or "<" in ref or ">" in ref:
        raise ResolutionError(f"Malformed reference: {ref!r}", reference)

    scheme_match = _SCHEME_RE.match(ref)
    if scheme_match:
        scheme = scheme_match.group(1).lower()
        if scheme == HANDLE_SCHEME:
            return None
        if scheme not in ALLOWED_SCHEMES:
            raise ResolutionError(f"Unsupported scheme '{scheme}'", reference)

    base_parts = urlparse(base)
    if base_parts.scheme not in ALLOWED_SCHEMES or not base_parts.netloc:
        raise ResolutionError(f"Base URL is not absolute http(s): {base!r}", reference)

    try:
        if ref.startswith("//"):
            absolute = f"{base_parts.scheme}:{ref}"
        elif scheme_match:
            absolute = ref
        else:
            # Root-relative and plain relative references
            absolute = urljoin(base, ref)
        parts = urlparse(absolute)
        parts.port  # raises ValueError on a garbage port
    except ValueError as e:
        raise ResolutionError(f"Malformed reference: {e}", reference) from e

    if parts.scheme not in ALLOWED_SCHEMES or not parts.hostname:
        raise ResolutionError(f"Could not resolve {ref!r} to an http(s) URL", reference)

    return absolute
