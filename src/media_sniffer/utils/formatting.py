from typing import Optional


def clean_text(text: Optional[str]) -> Optional[str]:
    """Collapse runs of whitespace; None for empty input."""
    if not text:
        return None
    text = ' '.join(text.split())
    return text or None


def truncate(text: str, max_length: int) -> str:
    """Cut text to max_length characters, marking the cut with an ellipsis."""
    if max_length <= 0 or len(text) <= max_length:
        return text
    if max_length == 1:
        return text[:1]
    return text[:max_length - 1].rstrip() + "…"


def clean_filename(name: Optional[str], max_length: int = 120) -> str:
    """Keep characters that are safe in a filename on every platform."""
    if not name:
        return ""
    name = "".join(c for c in name if c.isalpha() or c.isdigit() or c in " ._-()")
    name = ' '.join(name.split()).strip(" .")
    return name[:max_length].rstrip()
