"""Utilities for transforming Google Places responses into business records."""

import logging
import re
from typing import Any, Dict, List, Optional

from leadboard.core.models import PHONE_NOT_INFORMED, BusinessRecord

logger = logging.getLogger(__name__)

BUSINESS_TYPE_MAPPING: Dict[str, List[str]] = {
    "Restaurantes": ["restaurant", "food", "meal_takeaway"],
    "Academias": ["gym", "fitness", "health"],
    "Clínicas": ["hospital", "doctor", "health", "medical"],
    "Escritórios": ["lawyer", "accounting", "real_estate_agency"],
    "Comércio": ["store", "shopping_mall", "clothing_store"],
}
_FALLBACK_TYPES = ["establishment"]
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def resolve_place_types(business_type: Optional[str]) -> List[str]:
    return list(BUSINESS_TYPE_MAPPING.get(business_type or "", _FALLBACK_TYPES))


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def to_business_record(result: Dict[str, Any]) -> Optional[BusinessRecord]:
    """Map a Places details result to a record; ``None`` when it has no name."""
    name = _strip_or_none(result.get("name"))
    if not name:
        logger.debug("Skipping details result without a name: %s", result.get("place_id"))
        return None

    return BusinessRecord(
        name=name,
        address=_strip_or_none(result.get("formatted_address")) or "",
        phone=_strip_or_none(result.get("formatted_phone_number")) or PHONE_NOT_INFORMED,
        website=_strip_or_none(result.get("website")),
        rating=_safe_float(result.get("rating")),
        user_ratings_total=_safe_int(result.get("user_ratings_total")),
    )


def generate_email_from_name(name: str) -> str:
    """Guess a contact address from the business name."""
    clean_name = _WHITESPACE.sub("", _NON_ALNUM.sub("", name.lower()))[:15]
    return f"contato@{clean_name or 'empresa'}.com.br"
