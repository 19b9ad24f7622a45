"""
Diagram lookup pipeline.

Turns a free-text question into a small ranked set of Commons images:
cache check, refinement, candidate expansion, sequential search passes,
keyword scoring, ranking and cache store.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Iterable, List, Optional, Set

from diagram_lookup.config import config
from diagram_lookup.errors import AggregationFailure, QueryValidationError, UpstreamError, UpstreamTimeout
from diagram_lookup.services.cache import ResultCache, get_result_cache
from diagram_lookup.services.commons_client import CommonsClient, get_commons_client, parse_page
from diagram_lookup.services.query_refiner import QueryRefiner, get_query_refiner
from diagram_lookup.types import Candidate, ImageResult, ResultBundle, make_result_bundle
from diagram_lookup.utils.keywords import extract_keywords, score_image
from diagram_lookup.utils.queries import build_candidate_queries, build_fallback_query

logger = logging.getLogger(__name__)


@dataclass
class LookupStats:
    """Counters for one lookup, logged when it finishes"""
    cache_hit: bool = False
    refined_query: Optional[str] = None
    candidate_queries: List[str] = field(default_factory=list)
    searches_attempted: int = 0
    searches_failed: int = 0
    records_inspected: int = 0
    images_accepted: int = 0
    fallback_used: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def rank_candidates(candidates: Iterable[Candidate], limit: int) -> List[ImageResult]:
    """
    Order candidates by score, highest first, and keep the top ``limit``.

    The sort is stable so equal scores keep discovery order. Duplicate
    ``full_url`` values are skipped.
    """
    ranked: List[ImageResult] = []
    seen: Set[str] = set()
    for candidate in sorted(candidates, key=lambda c: -c.score):
        if len(ranked) >= limit:
            break
        if candidate.image.full_url in seen:
            continue
        seen.add(candidate.image.full_url)
        ranked.append(candidate.image)
    return ranked


class DiagramAggregator:
    """Runs lookups against injected client, refiner and cache collaborators"""

    def __init__(
        self,
        client: Optional[CommonsClient] = None,
        refiner: Optional[QueryRefiner] = None,
        cache: Optional[ResultCache] = None,
        max_results: Optional[int] = None,
        stop_words: Optional[Iterable[str]] = None,
    ):
        self.client = get_commons_client() if client is None else client
        self.refiner = get_query_refiner() if refiner is None else refiner
        self.cache = cache if cache is not None else get_result_cache()
        self.max_results = config.max_results if max_results is None else max_results
        self.stop_words = tuple(config.stop_words if stop_words is None else stop_words)

    def _refine(self, question: str) -> Optional[str]:
        try:
            return self.refiner.refine(question)
        except Exception as e:
            logger.warning(f"Query refiner raised, continuing without refinement: {e}")
            return None

    def _search_into(
        self,
        search_query: str,
        keywords: List[str],
        candidates: List[Candidate],
        seen_urls: Set[str],
        stats: LookupStats,
    ) -> bool:
        """Run one search and add new images to ``candidates``; False on failure."""
        stats.searches_attempted += 1
        try:
            records = self.client.search(search_query)
        except (UpstreamError, UpstreamTimeout) as e:
            stats.searches_failed += 1
            logger.warning(f"Search for '{search_query}' failed ({e.category}): {e}")
            return False

        for record in records:
            stats.records_inspected += 1
            parsed = parse_page(record)
            if parsed is None:
                continue
            image, description = parsed
            if image.full_url in seen_urls:
                continue
            seen_urls.add(image.full_url)
            candidates.append(Candidate(image=image, score=score_image(keywords, image.title, description)))
        return True

    def lookup(self, query: str) -> ResultBundle:
        """
        Look up diagrams for a question.

        Args:
            query: Raw question text

        Returns:
            ResultBundle with at most ``max_results`` ranked images

        Raises:
            QueryValidationError: query is missing or blank
            AggregationFailure: every search attempt failed
        """
        if not query or not query.strip():
            raise QueryValidationError('Query parameter "query" or "q" is required')

        stats = LookupStats()

        # STEP 1: Cache check
        cached = self.cache.get(query)
        if cached is not None:
            stats.cache_hit = True
            logger.info(f"Cache hit for '{query}' ({cached.total} images)")
            return cached

        # STEP 2: Refinement
        effective_query = query.strip()
        refined = self._refine(query)
        if refined:
            logger.info(f"Using refined image query: '{refined}' (from question: '{query}')")
            stats.refined_query = refined
            effective_query = refined

        # STEP 3: Candidate expansion
        candidate_queries = build_candidate_queries(effective_query)
        stats.candidate_queries = candidate_queries
        keywords = extract_keywords(effective_query, self.stop_words)

        # STEP 4: Primary pass, strictly in order
        candidates: List[Candidate] = []
        seen_urls: Set[str] = set()
        for candidate_query in candidate_queries:
            if len(candidates) >= self.max_results:
                break
            self._search_into(candidate_query, keywords, candidates, seen_urls, stats)

        # STEP 5: Fallback pass
        if not candidates:
            fallback_query = build_fallback_query(effective_query)
            logger.info(f"No images after first pass. Retrying with expanded query: '{fallback_query}'")
            stats.fallback_used = True
            self._search_into(fallback_query, keywords, candidates, seen_urls, stats)

        if stats.searches_failed == stats.searches_attempted:
            logger.error(f"All {stats.searches_attempted} searches failed for '{query}'")
            raise AggregationFailure(
                f"All {stats.searches_attempted} image searches failed for '{query}'"
            )

        # STEP 6: Ranking
        ranked = rank_candidates(candidates, self.max_results)
        stats.images_accepted = len(candidates)

        # STEP 7: Cache store, empty results included
        bundle = make_result_bundle(query, ranked)
        self.cache.set(query, bundle)

        logger.info(f"Final result: {bundle.total} images for query '{query}'")
        logger.debug(f"Lookup stats: {stats.to_dict()}")
        return bundle


# Global singleton
_diagram_aggregator: Optional[DiagramAggregator] = None


def get_diagram_aggregator() -> DiagramAggregator:
    """Get or create the global aggregator"""
    global _diagram_aggregator
    if _diagram_aggregator is None:
        _diagram_aggregator = DiagramAggregator()
    return _diagram_aggregator


# Convenience function
def lookup_diagrams(query: str) -> ResultBundle:
    """Look up ranked diagrams for a question"""
    return get_diagram_aggregator().lookup(query)
