"""HTTP API behind the lead-generation dashboard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request

from leadboard.core.config import ConfigError, Settings, get_settings
from leadboard.core.models import LeadCategory, LeadStatus, NewLead
from leadboard.core.outreach import simulate_whatsapp_send
from leadboard.core.store import LeadStore
from leadboard.jobs.search_leads import SearchParams, search_businesses
from leadboard.scoring.filters import LeadFilters, filter_leads_by_score
from leadboard.vendors import google_places

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)

_SEARCH_ERRORS = (
    (google_places.LocationNotFoundError, 404, "location not found"),
    (google_places.QuotaExceededError, 429, "Google Places quota exceeded"),
    (google_places.CredentialRejectedError, 502, "Google Places rejected the API credentials"),
    (google_places.GooglePlacesError, 502, "Google Places request failed"),
)


# ---------- Helpers ----------


def _store() -> LeadStore:
    return current_app.extensions["lead_store"]


def _settings() -> Settings:
    return current_app.config.get("LEADBOARD_SETTINGS") or get_settings()


def _payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _required_str(payload: Dict[str, Any], key: str) -> str:
    value = _optional_str(payload, key)
    if value is None:
        raise ValueError(f"{key} is required")
    return value


def _optional_number(payload: Dict[str, Any], key: str, cast):
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return cast(value)


def _parse_new_lead(payload: Dict[str, Any]) -> NewLead:
    status = payload.get("status") or LeadStatus.NOT_CONTACTED.value
    category = _optional_str(payload, "leadCategory")
    if category is not None:
        category = LeadCategory(category).value
    lead_score = payload.get("leadScore")
    if lead_score is not None and not isinstance(lead_score, str):
        lead_score = str(_optional_number(payload, "leadScore", int))

    return NewLead(
        name=_required_str(payload, "name"),
        address=_required_str(payload, "address"),
        phone=_required_str(payload, "phone"),
        email=_required_str(payload, "email"),
        status=LeadStatus(status),
        business_type=_optional_str(payload, "businessType"),
        location=_optional_str(payload, "location"),
        website=_optional_str(payload, "website"),
        rating=_optional_number(payload, "rating", float),
        user_ratings_total=_optional_number(payload, "userRatingsTotal", int),
        lead_score=lead_score,
        lead_score_breakdown=_optional_str(payload, "leadScoreBreakdown"),
        lead_category=category,
    )


# ---------- Routes ----------


@api.get("/healthz")
def healthcheck() -> Any:
    return jsonify({"status": "ok", "leads": len(_store().list_leads())}), 200


@api.get("/api/leads")
def list_leads() -> Any:
    args = request.args.to_dict()
    try:
        criteria = LeadFilters.from_payload(args)
    except ValueError as exc:
        return jsonify({"error": "Invalid filter parameters", "details": str(exc)}), 400

    leads = _store().search_leads(business_type=args.get("businessType"), location=args.get("location"))
    return jsonify([lead.to_dict() for lead in filter_leads_by_score(leads, criteria)])


@api.get("/api/leads/<lead_id>")
def get_lead(lead_id: str) -> Any:
    lead = _store().get_lead(lead_id)
    if lead is None:
        return jsonify({"error": "Lead not found"}), 404
    return jsonify(lead.to_dict())


@api.post("/api/leads")
def create_lead() -> Any:
    try:
        new_lead = _parse_new_lead(_payload())
    except ValueError as exc:
        return jsonify({"error": "Invalid lead data", "details": str(exc)}), 400
    lead = _store().create_lead(new_lead)
    return jsonify(lead.to_dict()), 201


@api.patch("/api/leads/<lead_id>/status")
def update_lead_status(lead_id: str) -> Any:
    try:
        status = LeadStatus(_payload().get("status"))
    except ValueError:
        allowed = ", ".join(s.value for s in LeadStatus)
        return jsonify({"error": "Invalid status data", "details": f"status must be one of: {allowed}"}), 400

    lead = _store().update_lead_status(lead_id, status)
    if lead is None:
        return jsonify({"error": "Lead not found"}), 404
    return jsonify(lead.to_dict())


@api.post("/api/leads/search")
def search_leads() -> Any:
    try:
        params = SearchParams.from_payload(_payload())
    except ValueError as exc:
        return jsonify({"error": "Invalid search parameters", "details": str(exc)}), 400

    try:
        candidates = search_businesses(params, settings=_settings())
    except ConfigError as exc:
        logger.error("Search unavailable: %s", exc)
        return jsonify({"error": str(exc)}), 500
    except google_places.GooglePlacesError as exc:
        for error_cls, status_code, message in _SEARCH_ERRORS:
            if isinstance(exc, error_cls):
                logger.warning("Search failed (%s): %s", message, exc)
                return jsonify({"error": message, "details": str(exc)}), status_code
        raise

    store = _store()
    created = [store.create_lead(candidate) for candidate in candidates]
    logger.info("Stored %d leads from search", len(created))
    return jsonify([lead.to_dict() for lead in created])


@api.get("/api/message-template")
def get_message_template() -> Any:
    template = _store().get_active_template()
    return jsonify(template.to_dict() if template else None)


@api.post("/api/message-template")
def update_message_template() -> Any:
    template = _payload().get("template")
    if not isinstance(template, str) or not template.strip():
        return jsonify({"error": "Invalid template data", "details": "template is required"}), 400
    return jsonify(_store().update_message_template(template).to_dict())


@api.get("/api/speed-config")
def get_speed_config() -> Any:
    return jsonify(_store().get_speed_config().to_dict())


@api.post("/api/speed-config")
def update_speed_config() -> Any:
    payload = _payload()
    try:
        per_minute = _optional_number(payload, "messagesPerMinute", int)
        per_hour = _optional_number(payload, "messagesPerHour", int)
    except ValueError as exc:
        return jsonify({"error": "Invalid config data", "details": str(exc)}), 400
    if any(value is not None and value <= 0 for value in (per_minute, per_hour)):
        return jsonify({"error": "Invalid config data", "details": "rates must be positive"}), 400

    config = _store().update_speed_config(messages_per_minute=per_minute, messages_per_hour=per_hour)
    return jsonify(config.to_dict())


@api.get("/api/dashboard-metrics")
def get_dashboard_metrics() -> Any:
    return jsonify(_store().get_dashboard_metrics().to_dict())


@api.get("/api/export/csv")
def export_csv() -> Any:
    return Response(
        _store().export_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": 'attachment; filename="leads.csv"'},
    )


@api.post("/api/whatsapp/send")
def send_whatsapp() -> Any:
    lead_id = _payload().get("leadId")
    if not lead_id:
        return jsonify({"error": "Lead ID is required"}), 400

    result = simulate_whatsapp_send(_store(), str(lead_id), delay_seconds=_settings().message_send_delay)
    if result is None:
        return jsonify({"error": "Lead not found"}), 404
    return jsonify(
        {
            "success": True,
            "message": "WhatsApp message sent successfully",
            "lead": result["lead"].to_dict(),
            "preview": result["text"],
        }
    )


# ---------- App ----------


def create_app(store: Optional[LeadStore] = None, settings: Optional[Settings] = None) -> Flask:
    app = Flask(__name__)
    app.extensions["lead_store"] = store or LeadStore()
    app.config["LEADBOARD_SETTINGS"] = settings
    app.register_blueprint(api)
    return app


def main() -> None:
    settings = get_settings()
    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.port)
    create_app(settings=settings).run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
