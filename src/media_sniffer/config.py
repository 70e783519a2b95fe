"""Engine configuration: immutable lookup tables and heuristic tuning."""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Mapping, Optional

from omegaconf import DictConfig, OmegaConf


DEFAULT_EXTENSIONS = {
    "direct-file": ("mp4", "webm", "mkv", "mov", "avi", "flv", "m4v", "wmv", "ogv", "3gp"),
    "hls-manifest": ("m3u8",),
    "dash-manifest": ("mpd",),
    "transport-segment": ("ts", "m4s"),
}

# MIME type -> (kind, extension)
DEFAULT_MIME_TYPES = {
    "video/mp4": ("direct-file", "mp4"),
    "video/webm": ("direct-file", "webm"),
    "video/ogg": ("direct-file", "ogv"),
    "video/quicktime": ("direct-file", "mov"),
    "video/x-matroska": ("direct-file", "mkv"),
    "video/x-flv": ("direct-file", "flv"),
    "video/x-msvideo": ("direct-file", "avi"),
    "video/x-ms-wmv": ("direct-file", "wmv"),
    "video/3gpp": ("direct-file", "3gp"),
    "application/x-mpegurl": ("hls-manifest", "m3u8"),
    "application/vnd.apple.mpegurl": ("hls-manifest", "m3u8"),
    "audio/mpegurl": ("hls-manifest", "m3u8"),
    "audio/x-mpegurl": ("hls-manifest", "m3u8"),
    "application/dash+xml": ("dash-manifest", "mpd"),
    "video/mp2t": ("transport-segment", "ts"),
    "video/iso.segment": ("transport-segment", "m4s"),
}

# Matched against "host/path" with any leading "www." removed
DEFAULT_EMBED_PATTERNS = (
    r"^(?:m\.)?youtube(?:-nocookie)?\.com/embed/[\w-]+",
    r"^player\.vimeo\.com/video/\d+",
    r"^(?:geo\.)?dailymotion\.com/(?:embed/video/|player\.html)",
    r"^player\.bilibili\.com/player\.html",
    r"^facebook\.com/plugins/video\.php",
    r"^streamable\.com/[eo]/\w+",
    r"^player\.twitch\.tv/",
    r"^rumble\.com/embed/\w+",
    r"^ok\.ru/videoembed/\d+",
    r"^vk\.com/video_ext\.php",
    r"^tiktok\.com/embed/",
    r"^player\.youku\.com/embed/",
    r"^v\.qq\.com/txp/iframe/",
)

DEFAULT_KEYWORDS = ("video", "stream", "play", "media", "vod", "cdn", "hls", "dash")
DEFAULT_QUERY_PARAMS = ("video", "stream", "format", "quality")
# Page assets the keyword heuristic must never report
DEFAULT_ASSET_EXTENSIONS = (
    "png", "jpg", "jpeg", "gif", "svg", "webp", "avif", "ico",
    "css", "js", "json", "xml", "html", "htm", "woff", "woff2",
)
DEFAULT_NAME_PARAMS = ("title", "name", "filename", "file")


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class EngineConfig:
    """Lookup tables and limits captured once when the engine is built."""

    extensions: Mapping[str, tuple] = field(default_factory=lambda: _frozen(DEFAULT_EXTENSIONS))
    mime_types: Mapping[str, tuple] = field(default_factory=lambda: _frozen(DEFAULT_MIME_TYPES))
    embed_patterns: tuple = DEFAULT_EMBED_PATTERNS
    keywords: tuple = DEFAULT_KEYWORDS
    query_params: tuple = DEFAULT_QUERY_PARAMS
    asset_extensions: tuple = DEFAULT_ASSET_EXTENSIONS
    name_params: tuple = DEFAULT_NAME_PARAMS
    enable_heuristic: bool = True
    title_max_length: int = 100
    default_title: str = "Video resources"
    fallback_prefix: str = "video"
    min_page_length: int = 16


def _as_tuple(value: Any) -> tuple:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def load_engine_config(cfg: Optional[Any] = None) -> EngineConfig:
    """
    Build an EngineConfig from the ``engine`` section of a Hydra config.

    Args:
        cfg: DictConfig, plain mapping or None. Keys that are missing keep
            their defaults; unknown keys are ignored.

    Returns:
        EngineConfig with every table converted to an immutable form
    """
    if cfg is None:
        return EngineConfig()

    if isinstance(cfg, DictConfig):
        data = OmegaConf.to_container(cfg, resolve=True)
    else:
        data = dict(cfg)

    known = {f.name for f in fields(EngineConfig)}
    kwargs: dict[str, Any] = {}

    for key, value in data.items():
        if key not in known or value is None:
            continue

        if key == "extensions":
            kwargs[key] = _frozen({
                kind: tuple(ext.lower().lstrip(".") for ext in _as_tuple(exts))
                for kind, exts in value.items()
            })
        elif key == "mime_types":
            table = {}
            for mime, entry in value.items():
                if isinstance(entry, Mapping):
                    table[mime.lower()] = (entry["kind"], entry.get("extension", ""))
                else:
                    table[mime.lower()] = tuple(entry)
            kwargs[key] = _frozen(table)
        elif key == "asset_extensions":
            kwargs[key] = tuple(ext.lower().lstrip(".") for ext in _as_tuple(value))
        elif key in ("embed_patterns", "keywords", "query_params", "name_params"):
            kwargs[key] = _as_tuple(value)
        else:
            kwargs[key] = value

    return EngineConfig(**kwargs)
