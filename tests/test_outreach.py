import pytest

from leadboard.core import outreach
from leadboard.core.models import LeadStatus, NewLead
from leadboard.core.store import LeadStore


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(outreach.time, "sleep", calls.append)
    return calls


def test_simulated_send_marks_lead_as_messaged(sleeps):
    store = LeadStore()
    store.update_message_template("Olá {NOME_DA_EMPRESA}, tudo bem?")
    lead = store.create_lead(NewLead(name="Acme", address="Rua A", phone="123", email="a@b.com"))

    result = outreach.simulate_whatsapp_send(store, lead.id, delay_seconds=2.0)

    assert sleeps == [2.0]
    assert result["text"] == "Olá Acme, tudo bem?"
    assert result["lead"].status is LeadStatus.MESSAGE_SENT
    assert store.get_dashboard_metrics().messages_today == 1


def test_simulated_send_unknown_lead(sleeps):
    assert outreach.simulate_whatsapp_send(LeadStore(), "missing") is None
    assert sleeps == []
