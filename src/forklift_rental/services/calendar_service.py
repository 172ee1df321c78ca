"""Settlement calendar events derived from contract dates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from forklift_rental.config import UNKNOWN_LABEL
from forklift_rental.domain.models import Contract, Lessee
from forklift_rental.services.errors import ValidationError
from forklift_rental.utils.dates import DateLike, format_currency, to_date

MAX_RANGE_DAYS = 366


class CalendarEventType(str, Enum):
    PAYMENT_DUE = "payment due"
    TAX_INVOICE_ISSUANCE = "tax invoice issuance"
    CONTRACT_END = "contract end"


@dataclass(frozen=True)
class CalendarEvent:
    type: CalendarEventType
    description: str
    contract_id: Optional[str]


def _same_day(value: Optional[str], day: date, field: str) -> bool:
    if not value:
        return False
    return to_date(value, field) == day


def _contract_events(
    contract: Contract, day: date, lessee_name: str
) -> list[CalendarEvent]:
    events: list[CalendarEvent] = []
    if _same_day(contract.payment_due_date, day, "payment_due_date"):
        events.append(
            CalendarEvent(
                type=CalendarEventType.PAYMENT_DUE,
                description=(
                    f"{lessee_name} rental fee payment due "
                    f"({format_currency(contract.rental_fee)})"
                ),
                contract_id=contract.id,
            )
        )
    if _same_day(contract.tax_invoice_issue_date, day, "tax_invoice_issue_date"):
        events.append(
            CalendarEvent(
                type=CalendarEventType.TAX_INVOICE_ISSUANCE,
                description=f"{lessee_name} tax invoice issuance scheduled",
                contract_id=contract.id,
            )
        )
    if _same_day(contract.end_date, day, "end_date"):
        events.append(
            CalendarEvent(
                type=CalendarEventType.CONTRACT_END,
                description=f"{lessee_name} contract ends",
                contract_id=contract.id,
            )
        )
    return events


def events_on(
    day: DateLike,
    contracts: Iterable[Contract],
    lessees: Iterable[Lessee] = (),
    *,
    lessee_id: Optional[str] = None,
    contract_id: Optional[str] = None,
) -> list[CalendarEvent]:
    """Return the events falling exactly on ``day``, in contract order.

    A contract contributes a payment due, a tax invoice issuance and a
    contract end event for each of its dates that matches. Lessees that
    cannot be found are labelled as unknown.
    """
    target = to_date(day, "date")
    lessee_names = {lessee.id: lessee.name for lessee in lessees}
    events: list[CalendarEvent] = []
    for contract in contracts:
        if lessee_id is not None and contract.lessee_id != lessee_id:
            continue
        if contract_id is not None and contract.id != contract_id:
            continue
        name = lessee_names.get(contract.lessee_id) or UNKNOWN_LABEL
        events.extend(_contract_events(contract, target, name))
    return events


def events_between(
    start: DateLike,
    end: DateLike,
    contracts: Iterable[Contract],
    lessees: Iterable[Lessee] = (),
    *,
    lessee_id: Optional[str] = None,
    contract_id: Optional[str] = None,
) -> dict[str, list[CalendarEvent]]:
    """Return events for every day from ``start`` to ``end`` inclusive.

    Days without events are omitted; keys are ISO dates in ascending order.
    """
    first = to_date(start, "start")
    last = to_date(end, "end")
    if last < first:
        raise ValidationError("end must not be before start.", field="end")
    if (last - first).days >= MAX_RANGE_DAYS:
        raise ValidationError(
            f"Calendar range is limited to {MAX_RANGE_DAYS} days.", field="end"
        )
    contracts = list(contracts)
    lessees = list(lessees)
    calendar: dict[str, list[CalendarEvent]] = {}
    current = first
    while current <= last:
        events = events_on(
            current,
            contracts,
            lessees,
            lessee_id=lessee_id,
            contract_id=contract_id,
        )
        if events:
            calendar[current.isoformat()] = events
        current += timedelta(days=1)
    return calendar
