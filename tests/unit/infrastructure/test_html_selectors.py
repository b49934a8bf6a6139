"""Tests for the CSS-selector helpers."""

from __future__ import annotations

from streamsnare.infrastructure.common.html_selectors import (
    absolute_url,
    attr_of,
    first_text,
    parse_html,
    safe_select,
    select_each,
    text_of,
)

_HTML = """
<div class="card">
  <h3>  India   vs
     Australia </h3>
  <a class="watch" href="/watch/1" data-url="/alt/1">Watch</a>
  <a class="other" href="javascript:void(0)">Nope</a>
</div>
"""


class TestSelection:
    def test_invalid_selector_yields_nothing(self) -> None:
        assert safe_select(parse_html(_HTML), "div[[") == []

    def test_select_each_reports_selector(self) -> None:
        soup = parse_html(_HTML)
        pairs = [(sel, text_of(el)) for sel, el in select_each(soup, ("a.other", "a.watch"))]
        assert pairs == [("a.other", "Nope"), ("a.watch", "Watch")]


class TestText:
    def test_whitespace_collapsed(self) -> None:
        h3 = parse_html(_HTML).select_one("h3")
        assert text_of(h3) == "India vs Australia"

    def test_first_text_in_selector_order(self) -> None:
        card = parse_html(_HTML).select_one(".card")
        assert first_text(card, (".title", "h3", "a")) == "India vs Australia"
        assert first_text(card, (".title",)) == ""


class TestAttributesAndUrls:
    def test_attr_of_first_non_empty(self) -> None:
        link = parse_html(_HTML).select_one("a.watch")
        assert attr_of(link, "src", "data-url", "href") == "/alt/1"
        assert attr_of(link, "class") == "watch"

    def test_absolute_url(self) -> None:
        assert absolute_url("https://a.test/x/y", "/watch/1") == "https://a.test/watch/1"
        assert absolute_url("https://a.test/x/", "z") == "https://a.test/x/z"

    def test_absolute_url_rejects_non_http(self) -> None:
        for href in ("", "#top", "javascript:void(0)", "mailto:a@b", "ftp://x/y"):
            assert absolute_url("https://a.test/", href) == ""
