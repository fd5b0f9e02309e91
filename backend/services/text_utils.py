"""Text normalization, phrase matching and keyword ranking for ATS scoring.

All helpers are pure functions over plain strings. Normalized text keeps
``+``, ``#`` and ``.`` so tokens like "c++", "c#" and "node.js" survive.
"""

import re
from collections import Counter

_RAW_STOPWORDS = """
a an and are as at be but by for from has have he her hers him his i in into is it its itself
me more most my of on or our ours she so that the their them they this to was we were what when where which who will with you your yours
about above after again against all am among because been before being below between both did do does doing down during each few further
here how if into itself just no nor not off once only other out over own same should than then there these those through too under until up very
"""

# Applied to keyword extraction only; skills are matched verbatim.
STOPWORDS: frozenset[str] = frozenset(
    w.strip().lower() for w in _RAW_STOPWORDS.split() if w.strip()
)

MIN_TOKEN_LENGTH = 2

_HTML_TAG_RE = re.compile(r"<[^>]*>")
_NON_MATCH_CHARS_RE = re.compile(r"[^a-z0-9+#. ]+")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(html: str | None) -> str:
    """Replace tag-like runs with spaces and collapse whitespace.

    Regex based, so malformed or unclosed markup is tolerated rather than parsed.
    """
    if not html:
        return ""
    text = _HTML_TAG_RE.sub(" ", html)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize(text: str | None) -> str:
    """Lowercase and reduce text to space-separated matchable atoms."""
    if not text:
        return ""
    lowered = text.lower()
    # Tabs/newlines are outside the kept class, so they become spaces here too
    cleaned = _NON_MATCH_CHARS_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def contains_phrase(haystack_norm: str, raw_needle: str | None) -> bool:
    """Check whether a raw phrase occurs in normalized text on word boundaries.

    ``haystack_norm`` must already be normalized. Both sides are space padded,
    so "java" does not match inside "javascript".
    """
    needle = normalize(raw_needle)
    if not needle:
        return False
    return f" {needle} " in f" {haystack_norm.strip()} "


def tokenize(text: str | None) -> list[str]:
    """Split text into keyword tokens, dropping stopwords and 1-char tokens."""
    tokens = normalize(text).split(" ")
    return [
        t for t in tokens
        if t and t not in STOPWORDS and len(t) >= MIN_TOKEN_LENGTH
    ]


def top_keywords(text: str | None, top_n: int = 30) -> list[str]:
    """Return the ``top_n`` most frequent tokens, most frequent first.

    Ties keep first-seen order: Counter preserves insertion order and
    ``sorted`` is stable.
    """
    if top_n <= 0:
        return []
    freq = Counter(tokenize(text))
    ranked = sorted(freq.items(), key=lambda item: item[1], reverse=True)
    return [token for token, _ in ranked[:top_n]]
