import pytest

from forklift_rental.domain.models import Lessee
from forklift_rental.services.calendar_service import (
    CalendarEventType,
    events_between,
    events_on,
)
from forklift_rental.services.errors import ValidationError

from conftest import make_contract

LESSEES = [Lessee(id="less-1", name="Seoul Logistics")]


class TestEventsOn:
    def test_end_and_due_on_same_day_yield_two_events(self):
        contract = make_contract(
            end_date="2024-06-01",
            payment_due_date="2024-06-01",
            tax_invoice_issue_date="2024-05-25",
        )
        events = events_on("2024-06-01", [contract], LESSEES)
        assert [event.type for event in events] == [
            CalendarEventType.PAYMENT_DUE,
            CalendarEventType.CONTRACT_END,
        ]
        assert "Seoul Logistics" in events[0].description
        assert "1,000,000 KRW" in events[0].description

    def test_all_three_events_in_fixed_order(self):
        contract = make_contract(
            end_date="2024-06-01",
            payment_due_date="2024-06-01",
            tax_invoice_issue_date="2024-06-01",
        )
        events = events_on("2024-06-01", [contract], LESSEES)
        assert [event.type for event in events] == [
            CalendarEventType.PAYMENT_DUE,
            CalendarEventType.TAX_INVOICE_ISSUANCE,
            CalendarEventType.CONTRACT_END,
        ]

    def test_no_matching_date_is_empty_and_repeatable(self):
        contracts = [make_contract(tax_invoice_issue_date="2024-01-01")]
        assert events_on("2024-03-03", contracts, LESSEES) == []
        first = events_on("2024-01-01", contracts, LESSEES)
        assert events_on("2024-01-01", contracts, LESSEES) == first

    def test_unknown_lessee_is_labelled(self):
        events = events_on("2024-01-01", [make_contract(lessee_id="gone")], LESSEES)
        assert events[0].description.startswith("Unknown")

    def test_contract_order_is_kept(self):
        contracts = [
            make_contract(id="cont-b", end_date="2024-01-01"),
            make_contract(id="cont-a"),
        ]
        events = events_on("2024-01-01", contracts, LESSEES)
        assert [event.contract_id for event in events] == ["cont-b", "cont-b", "cont-a"]

    def test_filters(self):
        contracts = [
            make_contract(id="cont-1"),
            make_contract(id="cont-2", lessee_id="less-2"),
        ]
        assert {e.contract_id for e in events_on("2024-01-01", contracts, lessee_id="less-2")} == {
            "cont-2"
        }
        assert {e.contract_id for e in events_on("2024-01-01", contracts, contract_id="cont-1")} == {
            "cont-1"
        }


class TestEventsBetween:
    def test_month_view_omits_empty_days(self):
        contract = make_contract(tax_invoice_issue_date="2024-01-20", end_date="2024-01-31")
        calendar = events_between("2024-01-01", "2024-01-31", [contract], LESSEES)
        assert list(calendar) == ["2024-01-01", "2024-01-20", "2024-01-31"]

    def test_reversed_range_rejected(self):
        with pytest.raises(ValidationError):
            events_between("2024-02-01", "2024-01-01", [], LESSEES)
