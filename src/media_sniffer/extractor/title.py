import re

from bs4 import BeautifulSoup

from ..utils.formatting import clean_text, truncate

DEFAULT_TITLE = "Video resources"
TITLE_MAX_LENGTH = 100

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)


def extract_title(
    page_text: str,
    default: str = DEFAULT_TITLE,
    max_length: int = TITLE_MAX_LENGTH,
) -> str:
    """Label for the whole result set, taken from the first <title> element."""
    match = _TITLE_RE.search(page_text or "")
    if not match:
        return default

    # Decodes entities such as &amp; and drops stray markup
    text = clean_text(BeautifulSoup(match.group(1), "html.parser").get_text(" "))
    if not text:
        return default

    return truncate(text, max_length)
