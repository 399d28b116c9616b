"""Search Google Places for businesses and turn them into scored lead candidates."""

import argparse
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from leadboard.core.config import ConfigError, Settings, get_settings
from leadboard.core.models import BusinessRecord, LeadStatus, NewLead
from leadboard.etl.transform import generate_email_from_name, resolve_place_types, to_business_record
from leadboard.scoring.engine import calculate_lead_score
from leadboard.scoring.filters import LeadFilters, filter_leads_by_score
from leadboard.vendors import google_places

logger = logging.getLogger(__name__)

FALLBACK_BUSINESS_LABEL = "Estabelecimento"
NEXT_PAGE_DELAY_SECONDS = 2.0


@dataclass
class SearchParams:
    business_type: Optional[str] = None
    location: Optional[str] = None
    free_search: Optional[str] = None
    filters: LeadFilters = field(default_factory=LeadFilters)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SearchParams":
        values = {}
        for key, attr in (("businessType", "business_type"), ("location", "location"), ("freeSearch", "free_search")):
            raw = payload.get(key)
            if raw is not None and not isinstance(raw, str):
                raise ValueError(f"{key} must be a string")
            values[attr] = raw.strip() if raw and raw.strip() else None
        return cls(filters=LeadFilters.from_payload(payload), **values)


def _nearby_places(lat: float, lng: float, place_type: str, api_key: str, settings: Settings) -> List[Dict[str, Any]]:
    try:
        payload = google_places.nearby_search(lat, lng, settings.search_radius, place_type, api_key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Nearby search failed for type %s: %s", place_type, exc)
        return []
    return payload.get("results", [])[: settings.results_per_type]


def _text_search_places(query: str, origin: Tuple[float, float], api_key: str, settings: Settings) -> List[Dict[str, Any]]:
    places: List[Dict[str, Any]] = []
    page_token = None
    for page in range(settings.max_pages):
        try:
            payload = google_places.text_search(
                query, api_key, location=origin, radius=settings.search_radius, pagetoken=page_token
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Text search failed for query=%s on page %d: %s", query, page + 1, exc)
            break

        results = payload.get("results", [])
        logger.info("Fetched %d results on page %d", len(results), page + 1)
        places.extend(results)

        page_token = payload.get("next_page_token")
        if not page_token:
            break
        # Google only accepts a fresh page token after a short delay.
        time.sleep(NEXT_PAGE_DELAY_SECONDS)

    # headroom for duplicates and filtered-out places
    return places[: settings.max_results * 2]


def _fetch_details(place_id: str, api_key: str) -> Optional[Dict[str, Any]]:
    try:
        details = google_places.place_details(place_id=place_id, api_key=api_key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to fetch details for %s: %s", place_id, exc)
        return None
    if not details:
        logger.debug("No details returned for %s", place_id)
        return None
    return details


def _unique_place_ids(places: List[Dict[str, Any]]) -> List[str]:
    seen = set()
    place_ids = []
    for place in places:
        place_id = place.get("place_id")
        if not place_id:
            logger.debug("Skipping result without place_id: %s", place)
            continue
        if place_id not in seen:
            seen.add(place_id)
            place_ids.append(place_id)
    return place_ids


def to_lead_candidate(record: BusinessRecord, business_type: Optional[str], location: str) -> NewLead:
    result = calculate_lead_score(record)
    return NewLead(
        name=record.name,
        address=record.address,
        phone=record.phone,
        email=generate_email_from_name(record.name),
        status=LeadStatus.NOT_CONTACTED,
        business_type=business_type or FALLBACK_BUSINESS_LABEL,
        location=location,
        website=record.website,
        rating=record.rating,
        user_ratings_total=record.user_ratings_total,
        lead_score=str(result.score),
        lead_score_breakdown=json.dumps(result.breakdown.to_dict(), ensure_ascii=False),
        lead_category=result.category.value,
    )


def search_businesses(params: SearchParams, *, settings: Optional[Settings] = None) -> List[NewLead]:
    """Run one dashboard search and return scored, deduplicated candidates.

    Geocoding failures propagate as typed ``GooglePlacesError`` subclasses;
    failures of individual searches or detail lookups only drop those places.
    """
    settings = settings or get_settings()
    api_key = settings.require_api_key()

    location = params.location or settings.default_location
    lat, lng = google_places.geocode(location, api_key)
    logger.info("Geocoded %s to %s,%s", location, lat, lng)

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        if params.free_search:
            logger.info("Running Places text search for query=%s", params.free_search)
            places = _text_search_places(params.free_search, (lat, lng), api_key, settings)
        else:
            place_types = resolve_place_types(params.business_type or settings.default_business_type)
            logger.info("Running Places nearby search for types=%s", place_types)
            futures = [
                executor.submit(_nearby_places, lat, lng, place_type, api_key, settings) for place_type in place_types
            ]
            places = [place for future in futures for place in future.result()]

        detail_futures = [executor.submit(_fetch_details, place_id, api_key) for place_id in _unique_place_ids(places)]
        details = [future.result() for future in detail_futures]

    candidates: List[NewLead] = []
    seen_names = set()
    for result in details:
        if result is None:
            continue
        record = to_business_record(result)
        if record is None or record.name in seen_names:
            continue
        seen_names.add(record.name)
        candidates.append(to_lead_candidate(record, params.business_type, location))

    candidates = filter_leads_by_score(candidates, params.filters)
    logger.info("Search produced %d candidates (cap %d)", len(candidates), settings.max_results)
    return candidates[: settings.max_results]


def _candidate_to_dict(candidate: NewLead) -> Dict[str, Any]:
    data = asdict(candidate)
    data["status"] = LeadStatus(candidate.status).value
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search Google Places and score the results as leads")
    parser.add_argument("--type", dest="business_type", help="Business type, e.g. Restaurantes")
    parser.add_argument("--location", dest="location", help="Location text, e.g. 'Campinas, SP'")
    parser.add_argument("--query", dest="free_search", help="Free-text search instead of a business type")
    parser.add_argument("--min-rating", dest="min_rating", type=float, help="Minimum star rating")
    parser.add_argument("--min-user-ratings", dest="min_user_ratings", type=int, help="Minimum review count")
    parser.add_argument("--min-score", dest="min_lead_score", type=float, help="Minimum lead score")
    parser.add_argument("--category", dest="lead_category", choices=["Quente", "Morno", "Frio"], help="Lead category")
    website = parser.add_mutually_exclusive_group()
    website.add_argument("--has-website", dest="has_website", action="store_true")
    website.add_argument("--no-website", dest="has_website", action="store_false")
    parser.set_defaults(has_website=None)
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    params = SearchParams(
        business_type=args.business_type,
        location=args.location,
        free_search=args.free_search,
        filters=LeadFilters(
            min_rating=args.min_rating,
            min_user_ratings=args.min_user_ratings,
            has_website=args.has_website,
            lead_category=args.lead_category,
            min_lead_score=args.min_lead_score,
        ),
    )
    try:
        candidates = search_businesses(params)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except google_places.GooglePlacesError as exc:
        logger.error("Search failed: %s", exc)
        raise SystemExit(1) from exc

    print(json.dumps([_candidate_to_dict(c) for c in candidates], ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
