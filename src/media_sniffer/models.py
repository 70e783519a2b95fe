"""Output models handed to the download runtime."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class MediaKind(str, Enum):
    """What a detected reference points at."""

    DIRECT_FILE = "direct-file"
    HLS_MANIFEST = "hls-manifest"
    DASH_MANIFEST = "dash-manifest"
    TRANSPORT_SEGMENT = "transport-segment"
    EMBEDDED_PLAYER = "embedded-player"
    UNRESOLVABLE_HANDLE = "unresolvable-handle"


class ResultItem(BaseModel):
    """One finalized media reference."""

    url: str = Field(..., description="Absolute URL, or the raw blob: reference for handles")
    name: str = Field(..., description="Suggested filename")
    kind: MediaKind = Field(..., description="Kind of media resource")
    extension: str = Field("", description="Lower-case extension without the dot")

    # Download hints
    headers: dict[str, str] = Field(default_factory=dict, description="Suggested request headers")
    size: int = Field(-1, description="Size in bytes, -1 when unknown")
    note: Optional[str] = Field(None, description="Caveats, e.g. needs a live browser")

    class Config:
        use_enum_values = True

    @property
    def is_downloadable(self) -> bool:
        return self.kind not in (MediaKind.UNRESOLVABLE_HANDLE.value, MediaKind.EMBEDDED_PLAYER.value)


class ResultSet(BaseModel):
    """Everything found on one page."""

    title: str = Field(..., min_length=1)
    page_url: Optional[str] = Field(None, description="Page the items were found on")
    items: list[ResultItem] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def __len__(self) -> int:
        return len(self.items)

    def by_kind(self) -> dict[str, list[ResultItem]]:
        """Group items by kind, keeping their order."""
        result: dict[str, list[ResultItem]] = {}
        for item in self.items:
            result.setdefault(item.kind, []).append(item)
        return result

    def to_downloader(self) -> dict:
        """Render the {name, files: [{name, size, req}]} shape downloaders consume."""
        return {
            "name": self.title,
            "files": [
                {
                    "name": item.name,
                    "size": item.size,
                    "req": {"url": item.url, "headers": dict(item.headers)},
                }
                for item in self.items
            ],
        }
