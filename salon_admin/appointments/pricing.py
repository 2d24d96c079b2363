"""Price resolution for the appointment forms.

Totals shown in the forms are advisory: the remote service recomputes
the authoritative price, so unparsable prices count as zero instead of
blocking the submission.
"""

from typing import Iterable, Optional

from salon_admin.schemas.appointment_schema import Appointment
from salon_admin.schemas.form_schema import CatalogService
from salon_admin.utils import parse_or_default


def resolve_price(
    service_id: int,
    catalog: Iterable[CatalogService],
    appointment: Optional[Appointment] = None,
) -> float:
    """Price of one selected service.

    The price locked on the appointment wins over the current catalogue
    price; anything missing or unparsable resolves to 0.
    """
    if appointment is not None:
        for line in appointment.appointment_services:
            if line.service_id == service_id and line.price is not None:
                return parse_or_default(line.price)
        for service_line in appointment.services:
            if service_line.id == service_id and service_line.price is not None:
                return parse_or_default(service_line.price)
    for service in catalog:
        if service.id == service_id:
            return parse_or_default(service.price)
    return 0.0


def calculate_total(
    service_ids: Iterable[int],
    catalog: Iterable[CatalogService],
    appointment: Optional[Appointment] = None,
) -> float:
    catalog = list(catalog)
    return sum(resolve_price(sid, catalog, appointment) for sid in service_ids)
