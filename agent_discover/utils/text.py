"""Text helpers shared by the parser, embedders and analyser."""

from __future__ import annotations

import re
from collections import Counter

TOKEN_RE = re.compile(r"[a-z][a-z0-9+#]*(?:\.[a-z0-9+#]+)*")

STOP_WORDS = frozenset(
    """
    a about above after again against all also am an and any are as at be because been
    before being below between both but by can could did do does doing down during each
    either etc few for from further get gets had has have having he her here hers him his
    how i if in into is it its itself just let like make makes may me might more most must
    my no nor not now of off on once only or other our ours out over own per same shall she
    should so some such than that the their theirs them then there these they this those
    through to too under until up use used uses using very via was we were what when where
    which while who whom why will with within without would you your yours yourself
    always never ensure include including provide provides following based new need needs
    one two three e.g i.e md file files example examples
    """.split()
)


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens, keeping tech spellings like c++, c# and next.js."""
    return TOKEN_RE.findall(text.lower())


def content_tokens(text: str) -> list[str]:
    """Tokens with stop words and one-letter noise removed."""
    return [t for t in tokenize(text) if len(t) > 1 and t not in STOP_WORDS]


def keywords(text: str, top_n: int = 5, exclude: set[str] | None = None) -> list[str]:
    """Most frequent content terms, ties broken by first appearance."""
    exclude = exclude or set()
    tokens = [t for t in content_tokens(text) if t not in exclude and not t.isdigit()]
    counts = Counter(tokens)
    first_seen: dict[str, int] = {}
    for i, t in enumerate(tokens):
        first_seen.setdefault(t, i)
    ranked = sorted(counts, key=lambda t: (-counts[t], first_seen[t]))
    return ranked[:top_n]


def slugify(value: str, max_length: int = 60) -> str:
    """Kebab-case identifier for file names."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:max_length].rstrip("-")


def excerpt(text: str, max_chars: int = 240) -> str:
    """Single-line excerpt cut at a word boundary."""
    flat = " ".join(text.split())
    if len(flat) <= max_chars:
        return flat
    cut = flat[:max_chars].rsplit(" ", 1)[0]
    return cut + "…"
