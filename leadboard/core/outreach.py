"""Simulated WhatsApp outreach. No message ever leaves the process."""

import logging
import time
from typing import Any, Dict, Optional

from leadboard.core.models import LeadStatus
from leadboard.core.store import LeadStore

logger = logging.getLogger(__name__)


def simulate_whatsapp_send(store: LeadStore, lead_id: str, delay_seconds: float = 2.0) -> Optional[Dict[str, Any]]:
    """Pretend to send the active template to a lead, then mark it as messaged.

    Returns ``None`` when the lead does not exist.
    """
    lead = store.get_lead(lead_id)
    if lead is None:
        return None

    template = store.get_active_template()
    text = template.render(lead.name) if template else ""

    logger.info("Simulating WhatsApp send to %s (%s), delay=%.1fs", lead.name, lead.phone, delay_seconds)
    time.sleep(delay_seconds)

    updated = store.update_lead_status(lead_id, LeadStatus.MESSAGE_SENT)
    if updated is None:
        return None
    return {"lead": updated, "text": text}
