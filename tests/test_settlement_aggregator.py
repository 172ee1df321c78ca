import random

import pytest

from forklift_rental.domain.models import SettlementItem, SettlementItemType
from forklift_rental.services.errors import ValidationError
from forklift_rental.services.settlement_aggregator import aggregate, bucket_key


def item(item_type, amount, on, item_id=None):
    return SettlementItem(
        id=item_id or f"set-{on}-{item_type}",
        contract_id="cont-1",
        type=item_type,
        amount=amount,
        date=on,
    )


ITEMS = [
    item(SettlementItemType.RENTAL_FEE, 500_000, "2024-03-05"),
    item(SettlementItemType.REPAIR_COST, 100_000, "2024-03-20"),
    item(SettlementItemType.DEPOSIT, 2_000_000, "2023-12-31"),
    item(SettlementItemType.SHIPPING_COST, 150_000, "2024-01-02"),
    item(SettlementItemType.COMMISSION, 30_000, "2024-03-05"),
]


class TestAggregate:
    def test_single_month_bucket(self):
        summary = aggregate(ITEMS[:2], "month")
        assert len(summary.buckets) == 1
        bucket = summary.buckets[0]
        assert bucket.bucket_key == "2024-03"
        assert bucket.revenue == 500_000
        assert bucket.cost == 100_000
        assert summary.total_revenue == 500_000
        assert summary.total_cost == 100_000
        assert summary.net == 400_000

    def test_output_sorted_and_order_independent(self):
        expected = aggregate(ITEMS, "day")
        shuffled = list(ITEMS)
        random.Random(7).shuffle(shuffled)
        assert aggregate(shuffled, "day") == expected
        keys = [bucket.bucket_key for bucket in expected.buckets]
        assert keys == sorted(keys)
        assert keys[0] == "2023-12-31"

    def test_year_granularity(self):
        summary = aggregate(ITEMS, "year")
        assert [(b.bucket_key, b.revenue, b.cost) for b in summary.buckets] == [
            ("2023", 2_000_000, 0),
            ("2024", 500_000, 280_000),
        ]

    def test_item_type_filter(self):
        summary = aggregate(ITEMS, "month", item_type=SettlementItemType.REPAIR_COST)
        assert summary.total_revenue == 0
        assert summary.total_cost == 100_000

    def test_empty_input(self):
        summary = aggregate([], "month")
        assert summary.buckets == ()
        assert summary.net == 0

    def test_unknown_granularity_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            aggregate(ITEMS, "week")
        assert excinfo.value.field == "granularity"

    def test_malformed_item_date_rejected(self):
        with pytest.raises(ValidationError):
            aggregate([item(SettlementItemType.RENTAL_FEE, 1, "03/05/2024")], "day")

    def test_unknown_item_type_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            aggregate([item("BOGUS", 1, "2024-03-05")], "month")
        assert excinfo.value.field == "type"

    def test_unknown_item_type_rejected_under_filter(self):
        with pytest.raises(ValidationError) as excinfo:
            aggregate(
                [item("BOGUS", 1, "2024-03-05")],
                "month",
                item_type=SettlementItemType.RENTAL_FEE,
            )
        assert excinfo.value.field == "type"


def test_bucket_key_accepts_timestamps():
    assert bucket_key("2024-03-05T10:30:00", "month") == "2024-03"
