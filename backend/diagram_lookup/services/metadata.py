"""
Attribution and license extraction from Commons ``extmetadata`` blocks.
"""
from typing import Any, Dict, Optional

from diagram_lookup.types import UNKNOWN_AUTHOR, UNKNOWN_LICENSE


def _field_value(extmeta: Any, name: str) -> Optional[str]:
    if not isinstance(extmeta, dict):
        return None
    entry = extmeta.get(name)
    if not isinstance(entry, dict):
        return None
    value = entry.get("value")
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _first_value(extmeta: Any, *names: str) -> Optional[str]:
    for name in names:
        value = _field_value(extmeta, name)
        if value is not None:
            return value
    return None


def extract_metadata(extmeta: Any) -> Dict[str, str]:
    """
    Normalize attribution fields of a repository record.

    Args:
        extmeta: The ``extmetadata`` mapping of an ``imageinfo`` entry.
            Each field is a dict holding a ``value`` key.

    Returns:
        Dict with ``author``, ``license`` and ``license_url``; absent
        fields fall back to sentinel values.
    """
    return {
        "author": _first_value(extmeta, "Artist", "Author", "Creator") or UNKNOWN_AUTHOR,
        "license": _first_value(extmeta, "License", "Copyright") or UNKNOWN_LICENSE,
        "license_url": _first_value(extmeta, "License_url", "LicenseUrl") or "",
    }


def description_from_metadata(extmeta: Any) -> str:
    return _field_value(extmeta, "ImageDescription") or ""
