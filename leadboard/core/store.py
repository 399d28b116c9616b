"""In-memory lead store with dashboard metrics.

Data lives only for the lifetime of the process. The store is created once and
handed to the HTTP app, so tests can build an isolated instance per case.
"""

import logging
import threading
from dataclasses import fields, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional

from leadboard.core.models import (
    DashboardMetrics,
    Lead,
    LeadStatus,
    MessageTemplate,
    NewLead,
    SpeedConfig,
    utcnow,
)
from leadboard.etl.export import leads_to_csv

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = (
    "Olá! Somos uma empresa especializada em soluções digitais para negócios como o "
    "{NOME_DA_EMPRESA}. Gostaria de agendar uma conversa rápida para apresentar como "
    "podemos ajudar a aumentar suas vendas? Sem compromisso! 😊"
)

_METRIC_FIELDS = {f.name for f in fields(DashboardMetrics)} - {"id", "last_updated", "conversion_rate"}


class LeadStore:
    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._leads: Dict[str, Lead] = {}
        default_template = MessageTemplate(template=DEFAULT_TEMPLATE)
        self._templates: Dict[str, MessageTemplate] = {default_template.id: default_template}
        self._speed_config = SpeedConfig()
        self._metrics = DashboardMetrics(last_updated=clock())

    # ---------- Leads ----------

    def list_leads(self) -> List[Lead]:
        return sorted(self._leads.values(), key=lambda lead: lead.date_added, reverse=True)

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def create_lead(self, new_lead: NewLead) -> Lead:
        with self._lock:
            values = {f.name: getattr(new_lead, f.name) for f in fields(NewLead)}
            values["status"] = LeadStatus(values["status"])
            lead = Lead(**values, date_added=self._clock())
            self._leads[lead.id] = lead
            self._increment(total_leads=1, not_contacted=1)
        logger.debug("Created lead %s (%s)", lead.id, lead.name)
        return lead

    def update_lead_status(self, lead_id: str, status: LeadStatus) -> Optional[Lead]:
        """Return the updated lead, or ``None`` if the id is unknown."""
        status = LeadStatus(status)
        with self._lock:
            lead = self._leads.get(lead_id)
            if lead is None:
                return None

            old_status = lead.status
            updated = replace(lead, status=status)
            self._leads[lead_id] = updated

            if old_status == LeadStatus.NOT_CONTACTED and status == LeadStatus.MESSAGE_SENT:
                self._increment(not_contacted=-1, messages_today=1, messages_month=1)
            elif old_status == LeadStatus.MESSAGE_SENT and status == LeadStatus.ALREADY_CONTACTED:
                self._increment(contacted=1)

        logger.info("Lead %s status %s -> %s", lead_id, old_status.value, status.value)
        return updated

    def search_leads(self, business_type: Optional[str] = None, location: Optional[str] = None) -> List[Lead]:
        results = []
        for lead in self.list_leads():
            if business_type and business_type.lower() not in (lead.business_type or "").lower():
                continue
            if location and location.lower() not in (lead.location or "").lower():
                continue
            results.append(lead)
        return results

    # ---------- Message templates ----------

    def get_active_template(self) -> Optional[MessageTemplate]:
        return next((t for t in self._templates.values() if t.is_active), None)

    def update_message_template(self, template: str) -> MessageTemplate:
        with self._lock:
            for existing in self._templates.values():
                existing.is_active = False
            created = MessageTemplate(template=template)
            self._templates[created.id] = created
        return created

    # ---------- Speed config ----------

    def get_speed_config(self) -> SpeedConfig:
        return self._speed_config

    def update_speed_config(
        self, messages_per_minute: Optional[int] = None, messages_per_hour: Optional[int] = None
    ) -> SpeedConfig:
        with self._lock:
            changes = {}
            if messages_per_minute is not None:
                changes["messages_per_minute"] = messages_per_minute
            if messages_per_hour is not None:
                changes["messages_per_hour"] = messages_per_hour
            self._speed_config = replace(self._speed_config, **changes)
        return self._speed_config

    # ---------- Dashboard metrics ----------

    def get_dashboard_metrics(self) -> DashboardMetrics:
        with self._lock:
            self._roll_counters(self._clock())
        return self._metrics

    def update_dashboard_metrics(self, **changes: int) -> DashboardMetrics:
        with self._lock:
            return self._apply_metrics(**changes)

    def _roll_counters(self, now: datetime) -> None:
        last = self._metrics.last_updated
        if (now.year, now.month) != (last.year, last.month):
            self._metrics = replace(self._metrics, messages_today=0, messages_month=0)
        elif now.date() != last.date():
            self._metrics = replace(self._metrics, messages_today=0)

    def _increment(self, **deltas: int) -> DashboardMetrics:
        self._roll_counters(self._clock())
        changes = {name: max(0, getattr(self._metrics, name) + delta) for name, delta in deltas.items()}
        return self._apply_metrics(**changes)

    def _apply_metrics(self, **changes: int) -> DashboardMetrics:
        unknown = set(changes) - _METRIC_FIELDS
        if unknown:
            raise ValueError(f"unknown metrics fields: {', '.join(sorted(unknown))}")

        now = self._clock()
        self._roll_counters(now)
        metrics = replace(self._metrics, **changes, last_updated=now)
        if metrics.contacted > 0 and metrics.total_leads > 0:
            rate = metrics.contacted / metrics.total_leads * 100
            metrics.conversion_rate = f"{rate:.1f}%"
        self._metrics = metrics
        return metrics

    # ---------- Export ----------

    def export_csv(self) -> str:
        return leads_to_csv(self.list_leads())
