import csv
import io
from datetime import datetime, timedelta, timezone

import pytest

from leadboard.core.models import LeadStatus, NewLead
from leadboard.core.store import LeadStore


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return LeadStore(clock=clock)


def make_lead(name="Acme", **overrides):
    values = {"name": name, "address": "Rua A", "phone": "123", "email": "contato@acme.com.br"}
    values.update(overrides)
    return NewLead(**values)


def test_create_lead_assigns_id_and_updates_metrics(store, clock):
    lead = store.create_lead(make_lead())

    assert lead.id
    assert lead.date_added == clock.now
    assert lead.status is LeadStatus.NOT_CONTACTED
    assert store.get_lead(lead.id) is lead

    metrics = store.get_dashboard_metrics()
    assert metrics.total_leads == 1
    assert metrics.not_contacted == 1
    assert metrics.conversion_rate == "0%"


def test_list_leads_newest_first(store, clock):
    store.create_lead(make_lead("First"))
    clock.advance(minutes=1)
    store.create_lead(make_lead("Second"))

    assert [lead.name for lead in store.list_leads()] == ["Second", "First"]


def test_status_transitions_update_metrics(store):
    first = store.create_lead(make_lead("First"))
    store.create_lead(make_lead("Second"))

    sent = store.update_lead_status(first.id, LeadStatus.MESSAGE_SENT)
    assert sent.status is LeadStatus.MESSAGE_SENT
    assert sent.id == first.id

    metrics = store.get_dashboard_metrics()
    assert metrics.not_contacted == 1
    assert metrics.messages_today == 1
    assert metrics.messages_month == 1

    store.update_lead_status(first.id, LeadStatus.ALREADY_CONTACTED)
    metrics = store.get_dashboard_metrics()
    assert metrics.contacted == 1
    assert metrics.conversion_rate == "50.0%"


def test_other_transitions_only_change_status(store):
    lead = store.create_lead(make_lead())

    updated = store.update_lead_status(lead.id, LeadStatus.ALREADY_CONTACTED)

    assert updated.status is LeadStatus.ALREADY_CONTACTED
    metrics = store.get_dashboard_metrics()
    assert metrics.contacted == 0
    assert metrics.not_contacted == 1


def test_update_unknown_lead_returns_none(store):
    assert store.update_lead_status("missing", LeadStatus.MESSAGE_SENT) is None


def test_message_counters_roll_over(store, clock):
    lead = store.create_lead(make_lead())
    store.update_lead_status(lead.id, LeadStatus.MESSAGE_SENT)

    clock.advance(days=1)
    metrics = store.get_dashboard_metrics()
    assert metrics.messages_today == 0
    assert metrics.messages_month == 1

    clock.now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
    metrics = store.get_dashboard_metrics()
    assert metrics.messages_month == 0


def test_update_dashboard_metrics_rejects_unknown_fields(store):
    with pytest.raises(ValueError):
        store.update_dashboard_metrics(bogus=1)

    metrics = store.update_dashboard_metrics(total_leads=4, contacted=1)
    assert metrics.conversion_rate == "25.0%"


def test_search_leads_matches_substrings(store):
    store.create_lead(make_lead("Gym", business_type="Academias", location="Campinas, SP"))
    store.create_lead(make_lead("Food", business_type="Restaurantes", location="São Paulo, SP"))

    assert [lead.name for lead in store.search_leads(business_type="academ")] == ["Gym"]
    assert [lead.name for lead in store.search_leads(location="são paulo")] == ["Food"]
    assert len(store.search_leads()) == 2


def test_message_template_update_deactivates_previous(store):
    default = store.get_active_template()
    assert "{NOME_DA_EMPRESA}" in default.template

    created = store.update_message_template("Oi {NOME_DA_EMPRESA}!")

    assert store.get_active_template() is created
    assert default.is_active is False
    assert created.render("Acme") == "Oi Acme!"


def test_speed_config_partial_update(store):
    config = store.update_speed_config(messages_per_minute=5)
    assert config.messages_per_minute == 5
    assert config.messages_per_hour == 30


def test_export_csv(store):
    store.create_lead(make_lead('Bar "do Zé"', business_type="Restaurantes", lead_score="90", lead_category="Quente"))

    rows = list(csv.reader(io.StringIO(store.export_csv())))

    assert rows[0][:3] == ["Nome", "Endereço", "Telefone"]
    assert rows[1][0] == 'Bar "do Zé"'
    assert rows[1][4] == "Não Contatado"
    assert rows[1][5] == "10/05/2024"
    assert rows[1][-2:] == ["90", "Quente"]
