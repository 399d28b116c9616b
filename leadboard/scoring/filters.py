"""Score-based filters applied to scored leads before and after persistence."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Optional, Union

from leadboard.core.models import LeadCategory


@dataclass(frozen=True)
class LeadFilters:
    min_rating: Optional[float] = None
    min_user_ratings: Optional[int] = None
    has_website: Optional[bool] = None
    lead_category: Optional[Union[LeadCategory, str]] = None
    min_lead_score: Optional[float] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LeadFilters":
        """Build filters from camelCase API keys; raises ValueError on bad input."""
        min_rating = _optional_number(payload, "minRating", float)
        if min_rating is not None and not 0 <= min_rating <= 5:
            raise ValueError("minRating must be between 0 and 5")

        min_user_ratings = _optional_number(payload, "minUserRatings", float)
        if min_user_ratings is not None:
            if not min_user_ratings.is_integer():
                raise ValueError("minUserRatings must be a whole number")
            if min_user_ratings < 0:
                raise ValueError("minUserRatings must be non-negative")
            min_user_ratings = int(min_user_ratings)

        min_lead_score = _optional_number(payload, "minLeadScore", float)
        if min_lead_score is not None and not 0 <= min_lead_score <= 100:
            raise ValueError("minLeadScore must be between 0 and 100")

        has_website = payload.get("hasWebsite")
        if isinstance(has_website, str):
            lowered = has_website.strip().lower()
            if lowered in {"true", "1", "yes"}:
                has_website = True
            elif lowered in {"false", "0", "no"}:
                has_website = False
            else:
                raise ValueError("hasWebsite must be a boolean")
        elif has_website is not None and not isinstance(has_website, bool):
            raise ValueError("hasWebsite must be a boolean")

        lead_category = payload.get("leadCategory")
        if lead_category is not None:
            try:
                lead_category = LeadCategory(lead_category)
            except ValueError as exc:
                raise ValueError(f"leadCategory must be one of: {', '.join(c.value for c in LeadCategory)}") from exc

        return cls(
            min_rating=min_rating,
            min_user_ratings=min_user_ratings,
            has_website=has_website,
            lead_category=lead_category,
            min_lead_score=min_lead_score,
        )


def _optional_number(payload: Dict[str, Any], key: str, cast) -> Optional[Any]:
    raw = payload.get(key)
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be numeric")
    try:
        return cast(float(raw))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be numeric") from exc


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None or value == "":
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _category_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, LeadCategory) else str(value)


def _below_minimum(value: Any, minimum: Optional[float]) -> bool:
    if minimum is None:
        return False
    number = _safe_float(value)
    return number is None or number < minimum


def matches(lead: Any, criteria: LeadFilters) -> bool:
    if _below_minimum(lead.rating, criteria.min_rating):
        return False
    if _below_minimum(lead.user_ratings_total, criteria.min_user_ratings):
        return False
    if criteria.has_website is not None and criteria.has_website != bool(lead.website):
        return False
    if criteria.lead_category is not None and _category_value(lead.lead_category) != _category_value(criteria.lead_category):
        return False
    if _below_minimum(lead.lead_score, criteria.min_lead_score):
        return False
    return True


def filter_leads_by_score(leads: Iterable[Any], criteria: Optional[LeadFilters] = None) -> List[Any]:
    """Return the leads satisfying every present criterion, in input order.

    Ratings and scores may be stored as text; they are parsed before comparison
    so "9" sorts below "10". A missing value never satisfies a minimum.
    """
    leads = list(leads)
    if criteria is None or criteria.is_empty():
        return leads
    return [lead for lead in leads if matches(lead, criteria)]
