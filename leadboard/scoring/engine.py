"""Lead scoring engine.

Turns a :class:`BusinessRecord` into a weighted opportunity score (0-100), a
reasoning trail with one message per dimension and a Quente/Morno/Frio bucket.

Every function here is pure: identical input always produces identical output,
and missing optional fields fall back to fixed floor values instead of raising.
"""

import math
from typing import List, Optional

from leadboard.core.models import (
    PHONE_NOT_INFORMED,
    BusinessRecord,
    LeadCategory,
    LeadScore,
    ScoreBreakdown,
)

WEBSITE_WEIGHT = 0.25
RATING_WEIGHT = 0.35
VOLUME_WEIGHT = 0.25
PROFILE_WEIGHT = 0.15

NO_WEBSITE_SCORE = 90
WEBSITE_BASE_SCORE = 60
SITE_BUILDER_MARKERS = ("wix", "wordpress", "shopify")

UNKNOWN_RATING_SCORE = 30
UNKNOWN_VOLUME_SCORE = 20

MIN_RATING = 3.0
MAX_RATING = 4.5
MIN_REVIEWS = 5
MAX_REVIEWS = 50

HOT_MIN_REVIEWS = 30
HOT_MIN_RATING = 4.5
HOT_MIN_SCORE = 90
WARM_MIN_SCORE = 60

_PHONE_SENTINELS = {PHONE_NOT_INFORMED.lower(), "not informed"}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, lower: int = 0, upper: int = 100) -> int:
    return max(lower, min(upper, value))


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _has_phone(phone: Optional[str]) -> bool:
    return _has_text(phone) and phone.strip().lower() not in _PHONE_SENTINELS


def website_score(website: Optional[str]) -> int:
    """No website means a strong prospect; an established site lowers the score."""
    if not website:
        return NO_WEBSITE_SCORE

    score = WEBSITE_BASE_SCORE
    if "https://" in website:
        score += 10
    if "www." in website:
        score += 5
    # ".com" also covers ".com.br"
    if ".com" in website:
        score += 5
    if any(marker in website for marker in SITE_BUILDER_MARKERS):
        score -= 20
    return _clamp(score)


def rating_score(rating: Optional[float]) -> int:
    if not rating:
        return UNKNOWN_RATING_SCORE
    if rating >= MAX_RATING:
        return 100
    if rating <= MIN_RATING:
        return 0
    return _round_half_up((rating - MIN_RATING) / (MAX_RATING - MIN_RATING) * 100)


def volume_score(user_ratings_total: Optional[float]) -> int:
    if not user_ratings_total:
        return UNKNOWN_VOLUME_SCORE
    if user_ratings_total >= MAX_REVIEWS:
        return 100
    if user_ratings_total <= MIN_REVIEWS:
        return 0
    return _round_half_up((user_ratings_total - MIN_REVIEWS) / (MAX_REVIEWS - MIN_REVIEWS) * 100)


def profile_completeness_score(record: BusinessRecord) -> int:
    """25 points each for name, address, a real phone and a website."""
    score = 0
    if _has_text(record.name):
        score += 25
    if _has_text(record.address):
        score += 25
    if _has_phone(record.phone):
        score += 25
    if _has_text(record.website):
        score += 25
    return score


def overall_score(website: int, rating: int, volume: int, profile: int) -> int:
    return _round_half_up(
        website * WEBSITE_WEIGHT
        + rating * RATING_WEIGHT
        + volume * VOLUME_WEIGHT
        + profile * PROFILE_WEIGHT
    )


def generate_reasoning(website: int, rating: int, volume: int, profile: int) -> List[str]:
    reasoning: List[str] = []

    if website >= 80:
        reasoning.append("🎯 Alta oportunidade: Empresa sem presença digital")
    elif website >= 60:
        reasoning.append("📱 Oportunidade média: Site pode precisar de upgrade")
    else:
        reasoning.append("💻 Baixa oportunidade: Site já bem estabelecido")

    if rating >= 80:
        reasoning.append("⭐ Excelente reputação: Empresa bem-sucedida e confiável")
    elif rating >= 50:
        reasoning.append("👍 Boa reputação: Empresa com clientes satisfeitos")
    else:
        reasoning.append("⚠️ Reputação baixa: Pode ter problemas de qualidade")

    if volume >= 80:
        reasoning.append("🔥 Muito estabelecida: Alto volume de clientes")
    elif volume >= 50:
        reasoning.append("📈 Estabelecida: Volume moderado de clientes")
    else:
        reasoning.append("🌱 Em crescimento: Volume baixo de clientes")

    if profile >= 80:
        reasoning.append("📋 Perfil completo: Empresa atenta aos detalhes")
    elif profile >= 50:
        reasoning.append("📝 Perfil parcial: Algumas informações disponíveis")
    else:
        reasoning.append("❓ Perfil incompleto: Poucas informações disponíveis")

    return reasoning


def is_hot_lead(record: BusinessRecord, score: int) -> bool:
    proven_demand = (
        bool(record.user_ratings_total)
        and record.user_ratings_total >= HOT_MIN_REVIEWS
        and bool(record.rating)
        and record.rating >= HOT_MIN_RATING
    )
    if proven_demand and not record.website:
        return True
    return score >= HOT_MIN_SCORE


def is_warm_lead(record: BusinessRecord) -> bool:
    if not record.website:
        return profile_completeness_score(record) >= 75
    return website_score(record.website) >= 60


def categorize_lead(score: int, record: BusinessRecord) -> LeadCategory:
    """First match wins: Hot is checked before Warm, even where both apply."""
    if is_hot_lead(record, score):
        return LeadCategory.HOT
    if score >= WARM_MIN_SCORE or is_warm_lead(record):
        return LeadCategory.WARM
    return LeadCategory.COLD


def calculate_lead_score(record: BusinessRecord) -> LeadScore:
    website = website_score(record.website)
    rating = rating_score(record.rating)
    volume = volume_score(record.user_ratings_total)
    profile = profile_completeness_score(record)
    score = overall_score(website, rating, volume, profile)

    breakdown = ScoreBreakdown(
        website_score=website,
        rating_score=rating,
        volume_score=volume,
        profile_completeness_score=profile,
        overall_score=score,
        reasoning=generate_reasoning(website, rating, volume, profile),
    )
    return LeadScore(score=score, breakdown=breakdown, category=categorize_lead(score, record))
