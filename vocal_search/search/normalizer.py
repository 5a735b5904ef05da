"""Query normalization for the fuzzy search engine.

normalize("  Hello,  World!  ") -> ["hello", "world"]
"""

import re
from typing import List

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize(query: str) -> List[str]:
    """Tokenize a free-text query.

    Case-folds, collapses whitespace, strips punctuation and splits on
    spaces. Empty or whitespace-only input gives an empty list, which
    callers treat as "nothing to search for".
    """
    if not query:
        return []
    text = query.casefold()
    text = _WHITESPACE.sub(" ", text)
    text = _NON_WORD.sub("", text)
    return [token for token in text.split(" ") if token]


def has_trailing_space(raw_query: str) -> bool:
    """True when the user typed a space after the last word."""
    return bool(raw_query) and raw_query[-1].isspace()
