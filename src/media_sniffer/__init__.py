"""Media Sniffer - find video files, streaming manifests and embedded players in web pages."""

__version__ = "0.1.0"

from .config import EngineConfig, load_engine_config
from .errors import MediaSnifferError, InvalidInputError, ResolutionError, FetchError
from .models import MediaKind, ResultItem, ResultSet
from .extractor import MediaSniffer, extract_media

__all__ = [
    "EngineConfig",
    "load_engine_config",
    "MediaSnifferError",
    "InvalidInputError",
    "ResolutionError",
    "FetchError",
    "MediaKind",
    "ResultItem",
    "ResultSet",
    "MediaSniffer",
    "extract_media",
]
