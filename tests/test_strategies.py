"""Tests for the extraction strategies."""

import pytest

from media_sniffer.extractor.classifier import Classifier
from media_sniffer.extractor.strategies import (
    STRATEGIES,
    parse_attributes,
    scan_anchor_links,
    scan_frame_embeds,
    scan_markup_attributes,
    scan_playlist_manifests,
    scan_script_literals,
    scan_segments_and_handles,
    scan_source_elements,
)
from media_sniffer.models import MediaKind


BASE = "https://example.com/watch/42"


@pytest.fixture
def classifier():
    return Classifier()


def urls(candidates):
    return [c.resolved_url for c in candidates]


class TestParseAttributes:
    """Tests for reading start-tag attributes."""

    def test_quoting_styles(self):
        attrs = parse_attributes('<source src="a.mp4" type=\'video/mp4\' data-id=7 controls>')
        assert attrs == {"src": "a.mp4", "type": "video/mp4", "data-id": "7", "controls": ""}

    def test_names_are_lower_case_and_entities_decoded(self):
        attrs = parse_attributes('<VIDEO SRC="/v.mp4?a=1&amp;b=2">')
        assert attrs["src"] == "/v.mp4?a=1&b=2"

    def test_first_occurrence_wins(self):
        assert parse_attributes('<video src="first.mp4" src="second.mp4">')["src"] == "first.mp4"

    def test_multi_valued_attributes_skipped(self):
        attrs = parse_attributes('<a class="btn dl" href=" /f/ep.mp4 ">x</a>')
        assert attrs == {"href": "/f/ep.mp4"}

    def test_not_markup(self):
        assert parse_attributes("just text") == {}


class TestMarkupAttributes:
    """Tests for <video> scanning."""

    def test_video_src(self, classifier):
        html = '<video controls src="/media/intro.mp4"></video>'
        found = list(scan_markup_attributes(html, BASE, classifier))
        assert urls(found) == ["https://example.com/media/intro.mp4"]
        assert found[0].kind == MediaKind.DIRECT_FILE
        assert found[0].extension_hint == "mp4"

    def test_nested_sources(self, classifier):
        html = """
        <video poster="p.jpg">
          <source src="clip.webm" type="video/webm">
          <source src="//cdn.example.net/clip.mp4" type="video/mp4">
        </video>
        <source src="outside.mp4">
        """
        found = list(scan_markup_attributes(html, BASE, classifier))
        assert urls(found) == [
            "https://example.com/watch/clip.webm",
            "https://cdn.example.net/clip.mp4",
        ]

    def test_data_src(self, classifier):
        html = '<video data-src="lazy.mp4"></video>'
        assert urls(scan_markup_attributes(html, BASE, classifier)) == ["https://example.com/watch/lazy.mp4"]

    def test_unknown_extension_is_ignored(self, classifier):
        html = '<video src="/stream/42"></video>'
        assert list(scan_markup_attributes(html, BASE, classifier)) == []

    def test_blob_src_is_surfaced(self, classifier):
        html = '<video src="blob:https://example.com/9f1c"></video>'
        found = list(scan_markup_attributes(html, BASE, classifier))
        assert len(found) == 1
        assert found[0].kind == MediaKind.UNRESOLVABLE_HANDLE
        assert found[0].resolved_url is None
        assert found[0].note


class TestSourceElements:
    """Tests for standalone <source> scanning."""

    def test_type_attribute_classifies(self, classifier):
        html = '<source src="/live/feed?id=9" type="application/x-mpegURL">'
        found = list(scan_source_elements(html, BASE, classifier))
        assert urls(found) == ["https://example.com/live/feed?id=9"]
        assert found[0].kind == MediaKind.HLS_MANIFEST
        assert found[0].extension_hint == "m3u8"

    def test_extension_without_type(self, classifier):
        html = "<source src='movie.mov'>"
        assert [c.kind for c in scan_source_elements(html, BASE, classifier)] == [MediaKind.DIRECT_FILE]

    def test_unclassifiable_source(self, classifier):
        html = '<source src="/audio/track" type="audio/ogg">'
        assert list(scan_source_elements(html, BASE, classifier)) == []


class TestFrameEmbeds:
    """Tests for <iframe> scanning."""

    def test_known_player(self, classifier):
        html = '<iframe title="Launch video" src="https://www.youtube.com/embed/abc123" allowfullscreen></iframe>'
        found = list(scan_frame_embeds(html, BASE, classifier))
        assert urls(found) == ["https://www.youtube.com/embed/abc123"]
        assert found[0].kind == MediaKind.EMBEDDED_PLAYER
        assert found[0].suggested_name == "Launch video"

    def test_protocol_relative_player(self, classifier):
        html = '<iframe src="//player.vimeo.com/video/76979871"></iframe>'
        assert urls(scan_frame_embeds(html, BASE, classifier)) == ["https://player.vimeo.com/video/76979871"]

    def test_other_frames_ignored(self, classifier):
        html = '<iframe src="https://ads.example.net/banner.html"></iframe><iframe src="/clip.mp4"></iframe>'
        assert list(scan_frame_embeds(html, BASE, classifier)) == []


class TestScriptLiterals:
    """Tests for string-literal scanning."""

    def test_quoted_media_urls(self, classifier):
        text = """<script>
            var a = "https://cdn.example.com/v/one.mp4";
            var b = 'https://cdn.example.com/live/two.m3u8?token=x';
            var c = `/relative/three.webm`;
        </script>"""
        assert urls(scan_script_literals(text, BASE, classifier)) == [
            "https://cdn.example.com/v/one.mp4",
            "https://cdn.example.com/live/two.m3u8?token=x",
            "https://example.com/relative/three.webm",
        ]

    def test_escaped_json_urls(self, classifier):
        text = '{"sources":[{"file":"https:\\/\\/cdn.example.com\\/v\\/clip.mp4"}]}'
        assert urls(scan_script_literals(text, BASE, classifier)) == ["https://cdn.example.com/v/clip.mp4"]

    def test_named_field_with_extension(self, classifier):
        text = 'player.setup({play_url: "/media/p/8d7a6.webm"});'
        found = list(scan_script_literals(text, BASE, classifier))
        assert set(urls(found)) == {"https://example.com/media/p/8d7a6.webm"}
        assert found[0].extension_hint == "webm"

    def test_named_field_corroborated_by_heuristic(self, classifier):
        text = 'player.setup({videoUrl: "https://vod.example.com/p/8d7a6?quality=720"});'
        found = list(scan_script_literals(text, BASE, classifier))
        assert set(urls(found)) == {"https://vod.example.com/p/8d7a6?quality=720"}
        assert found[0].kind == MediaKind.DIRECT_FILE

    def test_named_field_still_needs_classification(self, classifier):
        text = """{
            "videoUrl": "https://edge.example.com/p/8d7a6",
            "source_url": "https://news.example.com/article/123",
            "file_src": "/static/app.js"
        }"""
        assert list(scan_script_literals(text, BASE, classifier)) == []

    def test_heuristic_skips_image_assets(self, classifier):
        text = 'img.src = "https://cdn.example.com/img/logo.png?format=webp&quality=80";'
        assert list(scan_script_literals(text, BASE, classifier)) == []

    def test_named_field_requires_url_value(self, classifier):
        text = 'var cfg = {play_url: "not a url", video_src: "12345"};'
        assert list(scan_script_literals(text, BASE, classifier)) == []

    def test_heuristic_needs_corroboration(self, classifier):
        text = """
            fetch("https://media.example.com/get?id=1&quality=hd");
            load("https://media.example.com/about-us");
            load("https://cdn.example.com/js/player.js");
        """
        assert urls(scan_script_literals(text, BASE, classifier)) == ["https://media.example.com/get?id=1&quality=hd"]

    def test_heuristic_disabled(self):
        from media_sniffer.config import EngineConfig

        classifier = Classifier(EngineConfig(enable_heuristic=False))
        text = 'fetch("https://media.example.com/get?id=1&quality=hd");'
        assert list(scan_script_literals(text, BASE, classifier)) == []


class TestAnchorLinks:
    """Tests for <a href> scanning."""

    def test_link_text_is_name_hint(self, classifier):
        html = '<a class="dl" href="/files/ep01.mp4"><b>Episode 1</b> (HD)</a>'
        found = list(scan_anchor_links(html, BASE, classifier))
        assert urls(found) == ["https://example.com/files/ep01.mp4"]
        assert found[0].suggested_name == "Episode 1 (HD)"

    def test_empty_link_text(self, classifier):
        html = '<a href="ep02.mkv">   </a>'
        found = list(scan_anchor_links(html, BASE, classifier))
        assert found[0].suggested_name is None

    def test_non_media_links_ignored(self, classifier):
        html = '<a href="/about">About</a><a href="#top">Top</a><a href="javascript:play()">Play</a>'
        assert list(scan_anchor_links(html, BASE, classifier)) == []


class TestPlaylistManifests:
    """Tests for the dedicated manifest pass."""

    def test_unquoted_and_quoted_manifests(self, classifier):
        text = """
            #EXT-X-STREAM-INF:BANDWIDTH=800000
            https://cdn.example.com/hls/720/index.m3u8
            <script>dash.attachSource("manifests/main.mpd");</script>
        """
        found = list(scan_playlist_manifests(text, BASE, classifier))
        assert urls(found) == [
            "https://cdn.example.com/hls/720/index.m3u8",
            "https://example.com/watch/manifests/main.mpd",
        ]
        assert found[0].default_name == "HLS stream"
        assert found[1].default_name == "DASH stream"

    def test_ignores_direct_files(self, classifier):
        assert list(scan_playlist_manifests('"https://a.com/v.mp4"', BASE, classifier)) == []


class TestSegmentsAndHandles:
    """Tests for transport segments and blob: handles."""

    def test_segments(self, classifier):
        text = "https://cdn.example.com/hls/seg-0001.ts\nhttps://cdn.example.com/dash/chunk-1.m4s?x=1"
        found = list(scan_segments_and_handles(text, BASE, classifier))
        assert urls(found) == [
            "https://cdn.example.com/hls/seg-0001.ts",
            "https://cdn.example.com/dash/chunk-1.m4s?x=1",
        ]
        assert {c.kind for c in found} == {MediaKind.TRANSPORT_SEGMENT}

    def test_blob_handles(self, classifier):
        text = '<video src="blob:https://example.com/5e1b-44"></video>'
        found = list(scan_segments_and_handles(text, BASE, classifier))
        assert len(found) == 1
        assert found[0].kind == MediaKind.UNRESOLVABLE_HANDLE
        assert found[0].raw_reference == "blob:https://example.com/5e1b-44"
        assert "browser" in found[0].note


class TestRegistry:
    """Tests for the strategy registry."""

    def test_fixed_order(self):
        assert [name for name, _ in STRATEGIES] == [
            "markup-attribute",
            "source-element",
            "frame-embed",
            "script-literal",
            "anchor-link",
            "playlist-manifest",
            "segment-handle",
        ]

    def test_strategies_are_lazy(self, classifier):
        for _, strategy in STRATEGIES:
            assert iter(strategy("<p>nothing</p>", BASE, classifier)) is not None
