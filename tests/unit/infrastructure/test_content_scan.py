"""Tests for static page scanning heuristics."""

from __future__ import annotations

from streamsnare.infrastructure.resolution.content_scan import (
    discover_redirects,
    extract_src_param,
    find_media_urls,
    is_excluded_iframe,
    is_player_iframe,
    scan_page,
    scan_script,
    unpack_packed_js,
)

PAGE_URL = "https://cricwatch.io/match/ind-aus"

PACKED = (
    "eval(function(p,a,c,k,e,d){e=function(c){return c};"
    "if(!''.replace(/^/,String)){while(c--){d[c]=k[c]||c}};return p}"
    "('0 1={2:\"3://4.5/6.7\"}',8,8,"
    "'var|player|file|https|cdn|test|live|m3u8'.split('|'),0,{}))"
)

ATOB_URL = "https://cdn.test/encoded.m3u8"
ATOB_SCRIPT = 'var s = atob("aHR0cHM6Ly9jZG4udGVzdC9lbmNvZGVkLm0zdTg=");'


class TestPackedJs:
    def test_unpacks_dictionary_words(self) -> None:
        assert unpack_packed_js(PACKED) == 'var player={file:"https://cdn.test/live.m3u8"}'

    def test_not_packed(self) -> None:
        assert unpack_packed_js("var a = 1;") is None

    def test_scan_script_reports_packed_stage(self) -> None:
        found = list(scan_script(PACKED))
        assert ("packed_js", "https://cdn.test/live.m3u8") in found


class TestScripts:
    def test_atob_decoded(self) -> None:
        assert list(scan_script(ATOB_SCRIPT)) == [("atob_decoded", ATOB_URL)]

    def test_source_and_file_assignments(self) -> None:
        found = list(
            scan_script(
                'player.setup({source: "https://cdn.test/stream/abc", '
                "file: 'https://cdn.test/hls/xyz'});"
            )
        )
        assert found == [
            ("source_regex", "https://cdn.test/stream/abc"),
            ("file_regex", "https://cdn.test/hls/xyz"),
        ]

    def test_relative_non_media_assignment_ignored(self) -> None:
        assert list(scan_script('config = {file: "thumb.jpg"}')) == []

    def test_find_media_urls_unescapes_json(self) -> None:
        text = '{"u":"https:\\/\\/cdn.test\\/a.m3u8","v":"https://cdn.test/b.mp4?x=1"}'
        assert find_media_urls(text) == ["https://cdn.test/a.m3u8", "https://cdn.test/b.mp4?x=1"]


class TestIframes:
    def test_player_by_allow_attribute(self) -> None:
        assert is_player_iframe("https://x.test/e/1", "autoplay; fullscreen")

    def test_player_by_src_marker(self) -> None:
        assert is_player_iframe("https://yeahstreams.com/e/1", "")

    def test_excluded(self) -> None:
        assert is_excluded_iframe("https://www.google.com/maps")
        assert not is_excluded_iframe("https://other.test/page")


class TestScanPage:
    def test_stages_in_order_and_deduplicated(self) -> None:
        html = f"""
        <html><body>
          <script>var hls = "https://cdn.test/direct.m3u8";</script>
          <script>{ATOB_SCRIPT}</script>
          <script>{PACKED}</script>
          <iframe src="https://embed.test/e/1" allow="autoplay; encrypted-media"></iframe>
          <iframe src="https://other.test/page"></iframe>
          <iframe src="https://www.google.com/maps"></iframe>
          <video src="/media/clip.mp4"></video>
          <div data-stream="https://cdn.test/direct.m3u8"></div>
        </body></html>
        """
        cands = scan_page(html, PAGE_URL, level=1)
        by_url = {c.url: c for c in cands}

        assert by_url["https://cdn.test/direct.m3u8"].stage == "global_regex"
        assert by_url[ATOB_URL].stage == "atob_decoded"
        assert by_url["https://cdn.test/live.m3u8"].stage == "packed_js"
        assert by_url["https://embed.test/e/1"].stage == "player_iframe"
        assert by_url["https://embed.test/e/1"].format == "iframe"
        assert by_url["https://other.test/page"].stage == "potential_iframe"
        assert by_url["https://cricwatch.io/media/clip.mp4"].stage == "video_element"
        assert "https://www.google.com/maps" not in by_url

        assert len(cands) == len(by_url)
        assert all(c.level == 1 for c in cands)
        assert cands[0].url == "https://cdn.test/direct.m3u8"

    def test_video_source_children(self) -> None:
        html = '<video><source src="https://cdn.test/v.m3u8" type="x"></video>'
        cands = scan_page(html, PAGE_URL)
        # The global regex sees the URL before the DOM pass does.
        assert [(c.url, c.stage, c.format) for c in cands] == [
            ("https://cdn.test/v.m3u8", "global_regex", "hls")
        ]

    def test_relative_video_source(self) -> None:
        cands = scan_page('<video><source src="/v/a.mp4"></video>', PAGE_URL)
        assert [(c.url, c.stage) for c in cands] == [
            ("https://cricwatch.io/v/a.mp4", "video_source")
        ]

    def test_empty_page(self) -> None:
        assert scan_page("<html></html>", PAGE_URL) == []


class TestRedirects:
    def test_redirect_and_extracted_src(self) -> None:
        html = (
            '<a href="https://hitlinks.online/go?src=https%3A%2F%2Fplayer.test%2Fe%2F1">'
            "Link 1</a>"
        )
        cands = discover_redirects(html, PAGE_URL, ('a[href*="hitlinks.online"]',))

        assert [(c.stage, c.format, c.name) for c in cands] == [
            ("redirect_link", "redirect", "Link 1"),
            ("extracted_src", "iframe", "Link 1 (Direct)"),
        ]
        assert cands[1].url == "https://player.test/e/1"

    def test_iframe_redirect_keeps_iframe_format(self) -> None:
        html = '<iframe src="https://partytown.test/x"></iframe>'
        cands = discover_redirects(html, PAGE_URL, ('iframe[src*="partytown"]',))
        assert [(c.format, c.name) for c in cands] == [("iframe", "Watch")]

    def test_invalid_selector_is_skipped(self) -> None:
        html = '<a href="https://yeahstreams.com/1">Go</a>'
        cands = discover_redirects(html, PAGE_URL, ("a[[", 'a[href*="yeahstreams"]'))
        assert [c.url for c in cands] == ["https://yeahstreams.com/1"]

    def test_extract_src_param(self) -> None:
        assert extract_src_param("https://x.test/p?src=https://y.test/e") == "https://y.test/e"
        assert extract_src_param("https://x.test/p?src=/relative") is None
        assert extract_src_param("https://x.test/p") is None
