import pytest
from openpyxl import Workbook

from forklift_rental.services.errors import ValidationError
from forklift_rental.services.import_service import (
    normalize_header,
    parse_forklift_rows,
    read_spreadsheet,
    valid_records,
)

KOREAN_HEADERS = ["제작사", "모델명", "년식", "톤수", "유형", "차대번호", "구매일자", "위치"]


def _row(**overrides):
    values = {
        "제작사": "Doosan",
        "모델명": "D30S-7",
        "년식": 2020,
        "톤수": 3,
        "유형": "Diesel",
        "차대번호": "CH-1000",
        "구매일자": "2020-05-01",
        "위치": "Pyeongtaek",
    }
    values.update(overrides)
    return values


class TestHeaders:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("차대번호", "chassis_number"),
            (" 관리상태 ", "management_status"),
            ("Model Name", "model_name"),
            ("purchase_price", "purchase_price"),
            ("Colour", None),
            (None, None),
        ],
    )
    def test_normalize(self, header, expected):
        assert normalize_header(header) == expected


class TestParse:
    def test_valid_rows(self):
        results = parse_forklift_rows(
            [_row(), _row(차대번호="CH-1001")], rental_company_id="comp-a"
        )
        assert [result.ok for result in results] == [True, True]
        records = valid_records(results)
        assert [record.chassis_number for record in records] == ["CH-1000", "CH-1001"]
        assert records[0].withdrawal_date == "2030-05-01"

    def test_invalid_row_keeps_going(self):
        results = parse_forklift_rows(
            [_row(톤수=0), _row(차대번호="CH-1001")], rental_company_id="comp-a"
        )
        assert results[0].row_number == 1
        assert not results[0].ok
        assert [error.field for error in results[0].errors] == ["tonnage"]
        assert results[1].ok

    def test_duplicate_chassis_within_batch(self):
        results = parse_forklift_rows([_row(), _row()], rental_company_id="comp-a")
        assert results[0].ok
        assert not results[1].ok
        assert results[1].errors[0].field == "chassis_number"

    def test_unknown_columns_ignored(self):
        [result] = parse_forklift_rows(
            [_row(Colour="yellow")], rental_company_id="comp-a"
        )
        assert result.ok


class TestReadSpreadsheet:
    def test_xlsx(self, tmp_path):
        path = tmp_path / "forklifts.xlsx"
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(KOREAN_HEADERS)
        sheet.append([None] * len(KOREAN_HEADERS))
        sheet.append(list(_row().values()))
        workbook.save(path)

        rows = read_spreadsheet(path)
        assert len(rows) == 1
        assert rows[0]["차대번호"] == "CH-1000"
        [result] = parse_forklift_rows(rows, rental_company_id="comp-a")
        assert result.ok

    def test_csv_with_bom(self, tmp_path):
        path = tmp_path / "forklifts.csv"
        header = ",".join(KOREAN_HEADERS)
        line = ",".join(str(value) for value in _row().values())
        path.write_text(f"{header}\n{line}\n,,,,,,,\n", encoding="utf-8-sig")

        rows = read_spreadsheet(path)
        assert len(rows) == 1
        [result] = parse_forklift_rows(rows, rental_company_id="comp-a")
        assert result.ok
        assert result.record.year == 2020

    def test_unsupported_type(self, tmp_path):
        with pytest.raises(ValidationError) as excinfo:
            read_spreadsheet(tmp_path / "forklifts.txt")
        assert excinfo.value.field == "path"

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")
        with pytest.raises(ValidationError):
            read_spreadsheet(path)


class TestImportFlow:
    def test_parsed_rows_commit(self, services, manager, company):
        results = parse_forklift_rows(
            [_row(), _row(차대번호="CH-1001")], rental_company_id=company.id
        )
        created = services.forklift_service.import_forklifts(
            manager, valid_records(results)
        )
        assert len(created) == 2
        assert len(services.forklift_service.list_forklifts(manager)) == 2
