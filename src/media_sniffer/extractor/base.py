from dataclasses import dataclass
from typing import Optional

from ..models import MediaKind


MANIFEST_KINDS = (MediaKind.HLS_MANIFEST, MediaKind.DASH_MANIFEST)


@dataclass
class MediaCandidate:
    raw_reference: str
    resolved_url: Optional[str]
    kind: MediaKind
    extension_hint: str = ""
    suggested_name: Optional[str] = None  # e.g. link text
    default_name: Optional[str] = None  # used only when the URL yields no name
    note: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        """Key the aggregator collapses duplicates on."""
        if self.resolved_url is None:
            return self.raw_reference
        return self.resolved_url

    @property
    def is_handle(self) -> bool:
        return self.kind == MediaKind.UNRESOLVABLE_HANDLE
