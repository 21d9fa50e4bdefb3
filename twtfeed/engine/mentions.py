"""Rewrite mentions between the short ``@nick`` and canonical ``@<nick url>`` forms."""

from __future__ import annotations

import re
from typing import Callable, Iterator, Mapping

CANONICAL_MENTION = re.compile(r"@<(?:(?P<nick>\w+) )?(?P<url>[^>]+)>")
SHORT_MENTION = re.compile(r"@(?P<nick>\w+)")

Span = tuple[str, "re.Match[str] | None"]


def tokenize(text: str, pattern: re.Pattern[str]) -> Iterator[Span]:
    """Yield ``(literal, None)`` and ``(matched, match)`` spans covering ``text``."""

    position = 0
    for match in pattern.finditer(text):
        if match.start() > position:
            yield text[position : match.start()], None
        yield match.group(0), match
        position = match.end()
    if position < len(text):
        yield text[position:], None


class MentionTransformer:
    """Collapse and expand mentions against the currently known identities.

    ``identities`` returns the ``nick -> url`` mapping; it is called once per
    transform so config changes between calls are always picked up.
    """

    def __init__(self, identities: Callable[[], Mapping[str, str]]) -> None:
        self._identities = identities

    def collapse(self, text: str) -> str:
        # Several nicks sharing a url: the last one in mapping order wins.
        urls = {url: nick for nick, url in self._identities().items()}
        parts: list[str] = []
        for chunk, match in tokenize(text, CANONICAL_MENTION):
            if match is not None and match.group("url") in urls:
                chunk = f"@{urls[match.group('url')]}"
            parts.append(chunk)
        return "".join(parts)

    def expand(self, text: str, embed_names: bool = False) -> str:
        known = self._identities()
        parts: list[str] = []
        for chunk, canonical in tokenize(text, CANONICAL_MENTION):
            if canonical is not None:
                parts.append(chunk)
                continue
            for piece, match in tokenize(chunk, SHORT_MENTION):
                if match is not None and match.group("nick") in known:
                    nick = match.group("nick")
                    piece = f"@<{nick} {known[nick]}>" if embed_names else f"@<{known[nick]}>"
                parts.append(piece)
        return "".join(parts)


__all__ = ["CANONICAL_MENTION", "SHORT_MENTION", "MentionTransformer", "tokenize"]
