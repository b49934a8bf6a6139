"""Tests for JW Player introspection result handling."""

from __future__ import annotations

from streamsnare.infrastructure.resolution.player_probe import (
    MAX_PLAYER_INSTANCES,
    MULTI_PLAYER_SCRIPT,
    interpret_multi,
    interpret_single,
)


class TestInterpretSingle:
    def test_string_result(self) -> None:
        assert interpret_single(" https://cdn.test/x.m3u8 ") == "https://cdn.test/x.m3u8"

    def test_empty_or_non_string(self) -> None:
        assert interpret_single(None) is None
        assert interpret_single("") is None
        assert interpret_single({"file": "x"}) is None


class TestInterpretMulti:
    def test_labels_become_quality(self) -> None:
        cands = interpret_multi(
            [
                {"file": "https://cdn.test/720.m3u8", "label": "720p"},
                {"file": "https://cdn.test/sd.mp4", "label": None},
            ],
            level=1,
        )
        assert [(c.format, c.quality, c.level) for c in cands] == [
            ("hls", "720p", 1),
            ("mp4", "unknown", 1),
        ]
        assert all(c.stage == "jwplayer_instance" for c in cands)

    def test_duplicates_and_malformed_items_skipped(self) -> None:
        cands = interpret_multi(
            [
                {"file": "https://cdn.test/a.m3u8"},
                {"file": "https://cdn.test/a.m3u8", "label": "dup"},
                {"file": ""},
                "garbage",
                {"label": "no file"},
            ]
        )
        assert [c.url for c in cands] == ["https://cdn.test/a.m3u8"]

    def test_non_list_result(self) -> None:
        assert interpret_multi(None) == []
        assert interpret_multi({"file": "x"}) == []


def test_multi_script_is_bounded_by_instance_count() -> None:
    assert f"i < {MAX_PLAYER_INSTANCES}" in MULTI_PLAYER_SCRIPT
