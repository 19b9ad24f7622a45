"""
Keyword extraction and bag-of-substrings relevance scoring.
"""
import re
from typing import Iterable, List, Optional

from diagram_lookup.config import DEFAULT_STOP_WORDS

TOKEN_SPLIT_PATTERN = re.compile(r"[\s,]+")
MIN_KEYWORD_LENGTH = 3


def extract_keywords(text: str, stop_words: Optional[Iterable[str]] = None) -> List[str]:
    """
    Extract lower-cased keywords from a query.

    Tokens are split on whitespace and commas. Tokens of two characters or
    fewer and stop words are dropped; order of first appearance is kept.
    """
    if not text:
        return []
    stop = set(DEFAULT_STOP_WORDS if stop_words is None else stop_words)
    tokens = (t.strip() for t in TOKEN_SPLIT_PATTERN.split(text.lower()))
    keywords = [t for t in tokens if len(t) >= MIN_KEYWORD_LENGTH and t not in stop]
    return list(dict.fromkeys(keywords))


def score_image(keywords: Iterable[str], title: str, description: str = "") -> int:
    """Count the keywords that occur anywhere in the title or description."""
    haystack = f"{title} {description}".lower()
    return sum(1 for keyword in keywords if keyword and keyword in haystack)
