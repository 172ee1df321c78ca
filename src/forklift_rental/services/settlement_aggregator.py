"""Revenue and cost totals grouped by time bucket."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from forklift_rental.domain.models import (
    REVENUE_ITEM_TYPES,
    SettlementItem,
    SettlementItemType,
)
from forklift_rental.services.errors import ValidationError
from forklift_rental.services.validators import coerce_enum
from forklift_rental.utils.dates import to_date


class BucketGranularity(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


_KEY_FORMATS = {
    BucketGranularity.DAY: "%Y-%m-%d",
    BucketGranularity.MONTH: "%Y-%m",
    BucketGranularity.YEAR: "%Y",
}


@dataclass(frozen=True)
class SettlementBucket:
    bucket_key: str
    revenue: float
    cost: float

    @property
    def net(self) -> float:
        return self.revenue - self.cost


@dataclass(frozen=True)
class SettlementSummary:
    buckets: tuple[SettlementBucket, ...]
    total_revenue: float
    total_cost: float

    @property
    def net(self) -> float:
        return self.total_revenue - self.total_cost


def _coerce_granularity(value: BucketGranularity | str) -> BucketGranularity:
    try:
        return BucketGranularity(value)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown bucket granularity: {value!r}.", field="granularity"
        ) from exc


def bucket_key(value: str, granularity: BucketGranularity | str) -> str:
    """Truncate a date to the bucket key for the given granularity."""
    granularity = _coerce_granularity(granularity)
    return to_date(value, "date").strftime(_KEY_FORMATS[granularity])


def aggregate(
    items: Iterable[SettlementItem],
    granularity: BucketGranularity | str,
    *,
    item_type: Optional[SettlementItemType | str] = None,
) -> SettlementSummary:
    """Group settlement items into buckets sorted ascending by key.

    Rental fees and deposits count as revenue; every other type is cost.
    """
    granularity = _coerce_granularity(granularity)
    type_filter = (
        coerce_enum(SettlementItemType, item_type, "item_type")
        if item_type is not None
        else None
    )
    totals: dict[str, list[float]] = {}
    for item in items:
        current_type = coerce_enum(SettlementItemType, item.type, "type")
        if type_filter is not None and current_type != type_filter:
            continue
        key = bucket_key(item.date, granularity)
        bucket = totals.setdefault(key, [0, 0])
        if current_type in REVENUE_ITEM_TYPES:
            bucket[0] += item.amount
        else:
            bucket[1] += item.amount
    buckets = tuple(
        SettlementBucket(bucket_key=key, revenue=revenue, cost=cost)
        for key, (revenue, cost) in sorted(totals.items())
    )
    return SettlementSummary(
        buckets=buckets,
        total_revenue=sum(bucket.revenue for bucket in buckets),
        total_cost=sum(bucket.cost for bucket in buckets),
    )
