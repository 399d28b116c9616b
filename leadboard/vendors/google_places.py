"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_DETAIL_FIELDS = "place_id,name,formatted_address,formatted_phone_number,website,rating,user_ratings_total,business_status,types"


def _build_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(total=2, backoff_factor=0.5, status_forcelist=(500, 502, 503, 504), allowed_methods=("GET",))
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


_SESSION = _build_session()


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


class LocationNotFoundError(GooglePlacesError):
    """The base location of a search could not be geocoded."""


class QuotaExceededError(GooglePlacesError):
    """The API key ran out of quota (OVER_QUERY_LIMIT)."""


class CredentialRejectedError(GooglePlacesError):
    """The API key was rejected (REQUEST_DENIED)."""


_STATUS_ERRORS = {
    "OVER_QUERY_LIMIT": QuotaExceededError,
    "REQUEST_DENIED": CredentialRejectedError,
}


def _get(endpoint: str, params: Dict[str, Any], ok_statuses=frozenset({"OK", "ZERO_RESULTS"})) -> Dict[str, Any]:
    try:
        response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=10)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        logger.error("%s request failed: %s", endpoint, exc)
        raise GooglePlacesError(f"Google Places {endpoint} request failed: {exc}") from exc
    status = payload.get("status")
    if status not in ok_statuses:
        logger.error("%s failed: status=%s, error_message=%s", endpoint, status, payload.get("error_message"))
        error_cls = _STATUS_ERRORS.get(status, GooglePlacesError)
        raise error_cls(payload.get("error_message") or status)
    return payload


def geocode(location: str, api_key: str) -> Tuple[float, float]:
    """Resolve free-form location text to ``(lat, lng)``."""
    params = {"input": location, "inputtype": "textquery", "fields": "geometry", "key": api_key}
    payload = _get("findplacefromtext", params)
    candidates = payload.get("candidates") or []
    if not candidates:
        raise LocationNotFoundError(f"Location not found: {location}")
    point = candidates[0].get("geometry", {}).get("location", {})
    if "lat" not in point or "lng" not in point:
        raise LocationNotFoundError(f"Location not found: {location}")
    return point["lat"], point["lng"]


def nearby_search(lat: float, lng: float, radius: int, place_type: str, api_key: str) -> Dict[str, Any]:
    params = {"location": f"{lat},{lng}", "radius": radius, "type": place_type, "key": api_key}
    return _get("nearbysearch", params)


def text_search(
    query: str,
    api_key: str,
    location: Optional[Tuple[float, float]] = None,
    radius: Optional[int] = None,
    pagetoken: Optional[str] = None,
) -> Dict[str, Any]:
    params = {"query": query, "key": api_key}
    if location is not None:
        params["location"] = f"{location[0]},{location[1]}"
    if radius is not None:
        params["radius"] = radius
    if pagetoken:
        params["pagetoken"] = pagetoken
    return _get("textsearch", params)


def place_details(place_id: str, api_key: str) -> Dict[str, Any]:
    """Return the detail result, or ``{}`` when the place no longer exists."""
    params = {"place_id": place_id, "key": api_key, "fields": _DETAIL_FIELDS}
    payload = _get("details", params, ok_statuses=frozenset({"OK", "ZERO_RESULTS", "NOT_FOUND"}))
    return payload.get("result", {})
