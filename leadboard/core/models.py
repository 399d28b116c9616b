"""Core data models shared by the scoring engine, the store and the HTTP layer."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

PHONE_NOT_INFORMED = "Não informado"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class LeadCategory(str, Enum):
    HOT = "Quente"
    WARM = "Morno"
    COLD = "Frio"


class LeadStatus(str, Enum):
    NOT_CONTACTED = "Não Contatado"
    MESSAGE_SENT = "Mensagem Enviada"
    ALREADY_CONTACTED = "Já Contatado"


@dataclass(slots=True)
class BusinessRecord:
    """Raw attributes of a business candidate, before scoring."""

    name: str
    address: str
    phone: str = PHONE_NOT_INFORMED
    website: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None


@dataclass(frozen=True)
class ScoreBreakdown:
    website_score: int
    rating_score: int
    volume_score: int
    profile_completeness_score: int
    overall_score: int
    reasoning: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "websiteScore": self.website_score,
            "ratingScore": self.rating_score,
            "volumeScore": self.volume_score,
            "profileCompletenessScore": self.profile_completeness_score,
            "overallScore": self.overall_score,
            "reasoning": list(self.reasoning),
        }


@dataclass(frozen=True)
class LeadScore:
    score: int
    breakdown: ScoreBreakdown
    category: LeadCategory


@dataclass
class NewLead:
    """Insert shape for a lead.

    ``lead_score`` is kept as text and ``lead_score_breakdown`` as a JSON
    string, mirroring how the dashboard persists them.
    """

    name: str
    address: str
    phone: str
    email: str
    status: LeadStatus = LeadStatus.NOT_CONTACTED
    business_type: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    lead_score: Optional[str] = None
    lead_score_breakdown: Optional[str] = None
    lead_category: Optional[str] = None


@dataclass
class Lead(NewLead):
    id: str = field(default_factory=new_id)
    date_added: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "status": LeadStatus(self.status).value,
            "dateAdded": self.date_added.isoformat(),
            "businessType": self.business_type,
            "location": self.location,
            "website": self.website,
            "rating": self.rating,
            "userRatingsTotal": self.user_ratings_total,
            "leadScore": self.lead_score,
            "leadScoreBreakdown": self.lead_score_breakdown,
            "leadCategory": self.lead_category,
        }


@dataclass
class MessageTemplate:
    template: str
    is_active: bool = True
    id: str = field(default_factory=new_id)

    def render(self, business_name: str) -> str:
        return self.template.replace("{NOME_DA_EMPRESA}", business_name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "template": self.template, "isActive": 1 if self.is_active else 0}


@dataclass
class SpeedConfig:
    messages_per_minute: int = 3
    messages_per_hour: int = 30
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "messagesPerMinute": self.messages_per_minute,
            "messagesPerHour": self.messages_per_hour,
        }


@dataclass
class DashboardMetrics:
    total_leads: int = 0
    messages_today: int = 0
    messages_month: int = 0
    conversion_rate: str = "0%"
    contacted: int = 0
    not_contacted: int = 0
    last_updated: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "totalLeads": self.total_leads,
            "messagesToday": self.messages_today,
            "messagesMonth": self.messages_month,
            "conversionRate": self.conversion_rate,
            "contacted": self.contacted,
            "notContacted": self.not_contacted,
            "lastUpdated": self.last_updated.isoformat(),
        }
