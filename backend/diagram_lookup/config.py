"""
Configuration for the diagram lookup service.
"""
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


DEFAULT_STOP_WORDS: Tuple[str, ...] = (
    "the", "a", "an", "and", "or", "of", "in", "on", "for", "to", "with", "by",
    "as", "at", "is", "are", "this", "that", "these", "those", "from", "into",
    "about", "over", "under", "between", "through", "via",
)


def _parse_stop_words(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_STOP_WORDS
    words = (w.strip().lower() for w in raw.split(','))
    return tuple(dict.fromkeys(w for w in words if w))


@dataclass
class AppConfig:
    """Application configuration loaded from environment variables"""

    # Wikimedia Commons
    commons_api_url: str = "https://commons.wikimedia.org/w/api.php"
    commons_user_agent: str = "DoubtSolverAI/1.0"
    commons_search_limit: int = 50
    commons_thumb_width: int = 800

    # Query refinement
    ask_service_url: str = ""
    openai_api_key: str = ""
    refiner_model: str = "gpt-4o-mini"

    # Lookup
    max_results: int = 8
    stop_words: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_STOP_WORDS)

    # Cache
    cache_ttl_seconds: float = 6 * 60 * 60
    cache_namespace: str = "v1"

    # API timeouts (seconds)
    commons_timeout: float = 12.0
    refiner_timeout: float = 7.0


def load_config() -> AppConfig:
    """Load configuration from environment variables"""
    return AppConfig(
        # Commons
        commons_api_url=os.getenv('COMMONS_API_URL', 'https://commons.wikimedia.org/w/api.php'),
        commons_user_agent=os.getenv('COMMONS_USER_AGENT', 'DoubtSolverAI/1.0'),
        commons_search_limit=int(os.getenv('COMMONS_SEARCH_LIMIT', '50')),
        commons_thumb_width=int(os.getenv('COMMONS_THUMB_WIDTH', '800')),

        # Refinement
        ask_service_url=os.getenv('ASK_SERVICE_URL', ''),
        openai_api_key=os.getenv('OPENAI_API_KEY', ''),
        refiner_model=os.getenv('REFINER_MODEL', 'gpt-4o-mini'),

        # Lookup
        max_results=int(os.getenv('DIAGRAM_MAX_RESULTS', '8')),
        stop_words=_parse_stop_words(os.getenv('DIAGRAM_STOP_WORDS')),

        # Cache
        cache_ttl_seconds=float(os.getenv('DIAGRAM_CACHE_TTL', str(6 * 60 * 60))),
        cache_namespace=os.getenv('DIAGRAM_CACHE_NAMESPACE', 'v1'),

        # Timeouts
        commons_timeout=float(os.getenv('COMMONS_TIMEOUT', '12')),
        refiner_timeout=float(os.getenv('REFINER_TIMEOUT', '7')),
    )


# Global config instance
config = load_config()
