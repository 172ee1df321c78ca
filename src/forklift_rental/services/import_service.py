"""Forklift spreadsheet import: read rows, then validate each one.

Parsing never writes. Callers commit the valid records with
``ForkliftService.import_forklifts``.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from openpyxl import load_workbook

from forklift_rental.domain.models import Forklift
from forklift_rental.logging_config import get_logger
from forklift_rental.services.errors import ValidationError
from forklift_rental.services.forklift_service import validate_forklift_values

logger = get_logger(__name__)

HEADER_ALIASES: dict[str, str] = {
    "제작사": "manufacturer",
    "년식": "year",
    "톤수": "tonnage",
    "유형": "type",
    "차대번호": "chassis_number",
    "모델명": "model_name",
    "GPS시리얼": "gps_serial_number",
    "구매일자": "purchase_date",
    "구매가격": "purchase_price",
    "폐기예정일": "withdrawal_date",
    "위치": "location",
    "특이사항": "notes",
    "관리상태": "management_status",
}

FIELD_NAMES = frozenset(
    {
        "manufacturer",
        "model_name",
        "year",
        "tonnage",
        "type",
        "chassis_number",
        "gps_serial_number",
        "purchase_date",
        "purchase_price",
        "withdrawal_date",
        "location",
        "notes",
        "management_status",
    }
)


@dataclass(frozen=True)
class RowResult:
    """Outcome of validating one spreadsheet row (1-based, header excluded)."""

    row_number: int
    record: Optional[Forklift]
    errors: tuple[ValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors


def normalize_header(header: object) -> Optional[str]:
    if header is None:
        return None
    text = str(header).strip()
    if text in HEADER_ALIASES:
        return HEADER_ALIASES[text]
    key = text.lower().replace(" ", "_")
    return key if key in FIELD_NAMES else None


def _normalize_row(row: Mapping[object, object]) -> dict[str, object]:
    values: dict[str, object] = {}
    for header, value in row.items():
        field = normalize_header(header)
        if field is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        values[field] = value
    return values


def parse_forklift_rows(
    rows: Iterable[Mapping[object, object]],
    *,
    rental_company_id: str,
) -> list[RowResult]:
    """Validate loose rows into per-row results.

    Chassis numbers repeated within the batch are rejected on every row
    after the first.
    """
    results: list[RowResult] = []
    seen_chassis: set[str] = set()
    for row_number, row in enumerate(rows, start=1):
        forklift, errors = validate_forklift_values(
            _normalize_row(row), rental_company_id=rental_company_id
        )
        if forklift is not None:
            if forklift.chassis_number in seen_chassis:
                errors = [
                    ValidationError(
                        f"Duplicate chassis number {forklift.chassis_number}.",
                        field="chassis_number",
                    )
                ]
                forklift = None
            else:
                seen_chassis.add(forklift.chassis_number)
        results.append(RowResult(row_number, forklift, tuple(errors)))
    invalid = sum(1 for result in results if not result.ok)
    if invalid:
        logger.info("Parsed %s rows, %s invalid", len(results), invalid)
    return results


def valid_records(results: Iterable[RowResult]) -> list[Forklift]:
    return [result.record for result in results if result.ok]


def _read_xlsx(path: Path) -> list[dict[str, object]]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        worksheet = workbook.worksheets[0]
        rows = worksheet.iter_rows(values_only=True)
        headers: Optional[list[object]] = None
        records: list[dict[str, object]] = []
        for row in rows:
            if not row or not any(value not in (None, "") for value in row):
                continue
            if headers is None:
                headers = [
                    value.strip() if isinstance(value, str) else value for value in row
                ]
                continue
            records.append(
                {
                    header: row[index] if index < len(row) else None
                    for index, header in enumerate(headers)
                    if header not in (None, "")
                }
            )
        return records
    finally:
        workbook.close()


def _read_csv(path: Path) -> list[dict[str, object]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        return [
            dict(row)
            for row in reader
            if any((value or "").strip() for value in row.values() if isinstance(value, str))
        ]


def read_spreadsheet(path: Path | str) -> list[dict[str, object]]:
    """Read the first sheet of an .xlsx file, or a .csv file, into row dicts."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".xlsx", ".csv"}:
        raise ValidationError(f"Unsupported spreadsheet type: {suffix or path.name}.", field="path")
    try:
        rows = _read_xlsx(path) if suffix == ".xlsx" else _read_csv(path)
    except Exception as exc:
        logger.exception("Failed to read spreadsheet %s", path)
        raise ValidationError(
            "The spreadsheet could not be read. Check its format.", field="path"
        ) from exc
    logger.info("Read %s rows from %s", len(rows), path.name)
    return rows
