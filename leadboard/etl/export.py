"""CSV export of stored leads for the dashboard download button."""

import csv
import io
from typing import Iterable

from leadboard.core.models import Lead, LeadStatus

CSV_HEADERS = (
    "Nome",
    "Endereço",
    "Telefone",
    "Email",
    "Status",
    "Data Adicionado",
    "Tipo de Empresa",
    "Localização",
    "Website",
    "Avaliação",
    "Total de Avaliações",
    "Lead Score",
    "Categoria",
)


def _blank(value) -> str:
    return "" if value is None else str(value)


def leads_to_csv(leads: Iterable[Lead]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for lead in leads:
        writer.writerow(
            [
                lead.name,
                lead.address,
                lead.phone,
                lead.email,
                LeadStatus(lead.status).value,
                lead.date_added.strftime("%d/%m/%Y"),
                _blank(lead.business_type),
                _blank(lead.location),
                _blank(lead.website),
                _blank(lead.rating),
                _blank(lead.user_ratings_total),
                _blank(lead.lead_score),
                _blank(lead.lead_category),
            ]
        )
    return buffer.getvalue()
