from datetime import date, datetime, timedelta

import pytest

from forklift_rental.services.errors import ValidationError
from forklift_rental.services.overdue_fee import calculate_overdue_fee, days_late

from conftest import make_contract


class TestCalculateOverdueFee:
    def test_due_date_itself_owes_full_rental_fee(self):
        assert calculate_overdue_fee(make_contract(), "2024-01-01") == 1_000_000

    def test_ten_days_late(self):
        assert calculate_overdue_fee(make_contract(), "2024-01-11") == 1_005_479

    def test_before_due_date_owes_nothing(self):
        contract = make_contract()
        assert calculate_overdue_fee(contract, "2023-12-31") == 0
        assert calculate_overdue_fee(contract, date(2023, 6, 1)) == 0

    def test_partial_day_counts_as_full_day(self):
        fee = calculate_overdue_fee(make_contract(), datetime(2024, 1, 1, 12, 0))
        assert fee == 1_000_548

    def test_strictly_increasing_after_due_date(self):
        contract = make_contract()
        fees = [
            calculate_overdue_fee(contract, date(2024, 1, 1) + timedelta(days=offset))
            for offset in range(0, 60)
        ]
        assert all(later > earlier for earlier, later in zip(fees, fees[1:]))

    def test_half_up_rounding(self):
        # 1,000 * (1 + 0.2/365 * 73) = 1,040 exactly; 4,562.5 rounds up to 4,563
        assert calculate_overdue_fee(make_contract(rental_fee=1_000), "2024-03-14") == 1_040
        assert calculate_overdue_fee(make_contract(rental_fee=4_562.5), "2024-01-01") == 4_563

    def test_does_not_mutate_contract(self):
        contract = make_contract()
        calculate_overdue_fee(contract, "2024-02-01")
        assert contract == make_contract()

    def test_malformed_date_is_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            calculate_overdue_fee(make_contract(payment_due_date="not-a-date"), "2024-01-02")
        assert excinfo.value.field == "payment_due_date"


class TestDaysLate:
    def test_early_is_negative(self):
        assert days_late("2024-01-10", "2024-01-09") == -1

    def test_whole_days(self):
        assert days_late("2024-01-01", "2024-01-31") == 30

    def test_due_date_midnight_is_zero_not_early(self):
        assert days_late("2024-01-01", "2024-01-01") == 0
        assert days_late("2024-01-01", "2024-01-01T00:00:01") == 1
