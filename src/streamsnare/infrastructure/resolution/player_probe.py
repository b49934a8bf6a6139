"""In-page JW Player introspection.

The scripts run inside the page via ``BrowserSessionPort.evaluate`` and
return plain JSON; the Python side turns their output into candidates.
"""

from __future__ import annotations

from typing import Any

from streamsnare.domain.entities.streams import StreamCandidate

from .classifier import classify_string

MAX_PLAYER_INSTANCES = 10

# First playlist item of the default player: prefer a source ending in
# .m3u8, then one containing .m3u8, then the first source.
SINGLE_PLAYER_SCRIPT = """
() => {
  try {
    if (!window.jwplayer) return null;
    const player = window.jwplayer();
    if (!player || !player.getPlaylist) return null;
    const playlist = player.getPlaylist();
    if (!playlist || !playlist.length) return null;
    const sources = playlist[0].sources || [];
    const src =
      sources.find((s) => s.file && s.file.endsWith('.m3u8')) ||
      sources.find((s) => s.file && s.file.includes('.m3u8')) ||
      sources[0];
    if (src && src.file) return src.file;
    return playlist[0].file || null;
  } catch (err) {
    return null;
  }
}
"""

MULTI_PLAYER_SCRIPT = (
    """
() => {
  const found = [];
  if (!window.jwplayer) return found;
  for (let i = 0; i < %d; i++) {
    try {
      const player = window.jwplayer(i);
      if (!player || !player.getPlaylist) continue;
      const playlist = player.getPlaylist() || [];
      playlist.forEach((item) => {
        if (item.file) found.push({ file: item.file, label: null });
        (item.sources || []).forEach((source) => {
          if (source.file) found.push({ file: source.file, label: source.label || null });
        });
      });
    } catch (err) {}
  }
  return found;
}
"""
    % MAX_PLAYER_INSTANCES
)


def interpret_single(result: Any) -> str | None:
    """URL returned by SINGLE_PLAYER_SCRIPT, if it is a usable string."""
    if isinstance(result, str) and result.strip():
        return result.strip()
    return None


def interpret_multi(result: Any, *, level: int = 0) -> list[StreamCandidate]:
    """Candidates from MULTI_PLAYER_SCRIPT output (malformed items skipped)."""
    if not isinstance(result, list):
        return []

    candidates: list[StreamCandidate] = []
    seen: set[str] = set()
    for item in result:
        if not isinstance(item, dict):
            continue
        url = item.get("file")
        if not isinstance(url, str) or not url or url in seen:
            continue
        seen.add(url)
        label = item.get("label")
        candidates.append(
            StreamCandidate(
                url=url,
                format=classify_string(url),
                stage="jwplayer_instance",
                quality=str(label) if label else "unknown",
                level=level,
            )
        )
    return candidates
