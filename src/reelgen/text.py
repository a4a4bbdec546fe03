"""Small text helpers shared by the pipeline stages."""

import hashlib
import re
from typing import Iterable, List

STOP_WORDS = frozenset(
    """
    a an and are as at be but by for from how i in into is it its of on or our
    so than that the their them they this to vs was we what when where which who
    why will with you your & + -
    """.split()
)

_TOKEN_RE = re.compile(r"[^\W_]+(?:'[^\W_]+)?")


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens with stop words and single characters removed."""
    tokens = []
    for token in _TOKEN_RE.findall(text.lower()):
        token = token.replace("'", "")
        if len(token) < 2 or token in STOP_WORDS:
            continue
        tokens.append(token)
    return tokens


def unique(items: Iterable[str]) -> List[str]:
    """Order-preserving de-duplication."""
    return list(dict.fromkeys(items))


def stable_seed(*parts: str) -> int:
    """Process-independent integer seed for deterministic choices."""
    digest = hashlib.md5("\x1f".join(parts).encode("utf-8")).hexdigest()
    return int(digest[:12], 16)


def clip_words(text: str, max_words: int) -> str:
    """Keep at most ``max_words`` words, closing with a period if cut."""
    words = text.split()
    if len(words) <= max_words:
        return " ".join(words)
    clipped = " ".join(words[:max_words]).rstrip(",;:-")
    if not clipped.endswith((".", "!", "?")):
        clipped += "."
    return clipped


def truncate(text: str, limit: int, ellipsis: str = "...") -> str:
    """Shorten on a word boundary to fit ``limit`` characters."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    cut = text[: limit - len(ellipsis)]
    if " " in cut:
        cut = cut[: cut.rfind(" ")]
    return cut.rstrip(",;:-. ") + ellipsis
