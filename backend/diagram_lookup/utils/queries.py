"""
Utilities for expanding one effective query into the searches to attempt.
"""
from typing import List


FALLBACK_TERMS = ("diagram", "schematic", "illustration")


def build_candidate_queries(effective_query: str) -> List[str]:
    """
    Expand a query into an ordered, deduplicated list of searches.

    The full query comes first, followed by each comma-separated segment,
    so "mitochondria, cell structure" is tried whole and then per concept.

    Example:
        >>> build_candidate_queries("mitochondria, cell structure")
        ['mitochondria, cell structure', 'mitochondria', 'cell structure']
    """
    candidates: List[str] = [effective_query]
    for part in effective_query.split(','):
        part = part.strip()
        if part and part not in candidates:
            candidates.append(part)
    return candidates


def build_fallback_query(effective_query: str) -> str:
    """Bias a query towards diagrams for the single retry pass."""
    return f"{effective_query} ({' OR '.join(FALLBACK_TERMS)})"
