"""
Shared types for the diagram lookup service.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple


UNKNOWN_AUTHOR = "Unknown"
UNKNOWN_LICENSE = "Unknown license"


@dataclass(frozen=True)
class ImageResult:
    """Image file found on the media repository"""
    title: str
    thumb_url: str
    full_url: str  # dedup identity
    mime: str
    author: str = UNKNOWN_AUTHOR
    license: str = UNKNOWN_LICENSE
    license_url: str = ""


@dataclass
class Candidate:
    """Image paired with its keyword score while ranking"""
    image: ImageResult
    score: int = 0


@dataclass(frozen=True)
class ResultBundle:
    """Ranked output of one lookup; the unit stored in the cache"""
    original_query: str
    images: Tuple[ImageResult, ...] = ()
    total: int = 0
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass(frozen=True)
class CacheEntry:
    """Stored bundle plus the clock reading at write time"""
    bundle: ResultBundle
    stored_at: float


def make_result_bundle(original_query: str, images) -> ResultBundle:
    """Build a bundle whose total always matches its image count"""
    images = tuple(images)
    return ResultBundle(
        original_query=original_query,
        images=images,
        total=len(images),
    )
