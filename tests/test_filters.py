import pytest

from leadboard.core.models import LeadCategory, NewLead
from leadboard.scoring.filters import LeadFilters, filter_leads_by_score


def make_lead(name, **overrides):
    values = {"name": name, "address": "Rua A", "phone": "123", "email": "contato@x.com.br"}
    values.update(overrides)
    return NewLead(**values)


@pytest.fixture
def leads():
    return [
        make_lead("Sem Site", rating=4.8, user_ratings_total=40, lead_score="90", lead_category="Quente"),
        make_lead("Com Site", website="https://www.a.com", rating=4.1, user_ratings_total=12, lead_score="67", lead_category="Morno"),
        make_lead("Sem Nota", lead_score="9", lead_category="Frio"),
        make_lead("Nota Baixa", rating=3.2, user_ratings_total=6, lead_score="10", lead_category="Frio"),
    ]


def names(leads):
    return [lead.name for lead in leads]


def test_no_criteria_returns_input_unchanged(leads):
    assert filter_leads_by_score(leads, LeadFilters()) == leads
    assert filter_leads_by_score(leads) == leads


def test_has_website_false_keeps_only_leads_without_site(leads):
    result = filter_leads_by_score(leads, LeadFilters(has_website=False))
    assert names(result) == ["Sem Site", "Sem Nota", "Nota Baixa"]
    assert all(not lead.website for lead in result)


def test_has_website_true(leads):
    assert names(filter_leads_by_score(leads, LeadFilters(has_website=True))) == ["Com Site"]


def test_text_scores_compare_numerically(leads):
    result = filter_leads_by_score(leads, LeadFilters(min_lead_score=10))
    assert names(result) == ["Sem Site", "Com Site", "Nota Baixa"]


def test_missing_rating_does_not_satisfy_minimum(leads):
    result = filter_leads_by_score(leads, LeadFilters(min_rating=3.0))
    assert "Sem Nota" not in names(result)
    assert names(result) == ["Sem Site", "Com Site", "Nota Baixa"]


def test_category_accepts_enum_or_wire_value(leads):
    by_enum = filter_leads_by_score(leads, LeadFilters(lead_category=LeadCategory.COLD))
    by_text = filter_leads_by_score(leads, LeadFilters(lead_category="Frio"))
    assert names(by_enum) == names(by_text) == ["Sem Nota", "Nota Baixa"]


def test_criteria_are_combined(leads):
    criteria = LeadFilters(min_rating=4.0, min_user_ratings=20, has_website=False)
    assert names(filter_leads_by_score(leads, criteria)) == ["Sem Site"]


def test_from_payload_parses_query_strings():
    criteria = LeadFilters.from_payload(
        {"minRating": "4.5", "minUserRatings": "30", "hasWebsite": "false", "leadCategory": "Quente", "minLeadScore": "80"}
    )
    assert criteria == LeadFilters(
        min_rating=4.5, min_user_ratings=30, has_website=False, lead_category=LeadCategory.HOT, min_lead_score=80.0
    )
    assert LeadFilters.from_payload({}).is_empty()
    assert LeadFilters.from_payload({"minUserRatings": 30.0}).min_user_ratings == 30


@pytest.mark.parametrize(
    "payload",
    [
        {"minRating": 6},
        {"minRating": "abc"},
        {"minUserRatings": -1},
        {"minUserRatings": 2.7},
        {"minLeadScore": 101},
        {"hasWebsite": "maybe"},
        {"leadCategory": "Hot"},
    ],
)
def test_from_payload_rejects_invalid_values(payload):
    with pytest.raises(ValueError):
        LeadFilters.from_payload(payload)
