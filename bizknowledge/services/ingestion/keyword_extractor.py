"""Crude keyword extraction for the substring-search ``keywords`` field.

Lower-cases the text, splits on runs of non-word characters and keeps the
first 20 tokens longer than three characters, in order of appearance.
There is no deduplication and no stop-word list: the result is only an
extra haystack for retrieval, not a ranking signal.
"""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"\W+")

MAX_KEYWORDS = 20
MIN_TOKEN_LENGTH = 4


def extract_keywords(text: str, max_keywords: int = MAX_KEYWORDS) -> list[str]:
    if not text or max_keywords <= 0:
        return []
    keywords: list[str] = []
    for token in _NON_WORD_RE.split(text.lower()):
        if len(token) >= MIN_TOKEN_LENGTH:
            keywords.append(token)
            if len(keywords) == max_keywords:
                break
    return keywords
