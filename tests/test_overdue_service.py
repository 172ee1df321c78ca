import sqlite3
from pathlib import Path

import pytest

from forklift_rental.domain.models import (
    DocumentType,
    OverdueCaseType,
    SettlementItemType,
    SettlementStatus,
)
from forklift_rental.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


@pytest.fixture
def overdue_record(services, rented, manager):
    _forklift, contract = rented
    services.settlement_service.record_item(
        manager,
        contract.id,
        SettlementItemType.RENTAL_FEE,
        1_000_000,
        "2024-02-05",
        status=SettlementStatus.OVERDUE,
    )
    [record] = services.overdue_service.reconcile("2024-02-15")
    return record


class TestReconcile:
    def test_opens_record_with_fee(self, overdue_record, rented):
        _forklift, contract = rented
        assert overdue_record.contract_id == contract.id
        assert overdue_record.accumulated_overdue_fee == 1_005_479
        assert overdue_record.notification_history == []

    def test_refreshes_existing_record(self, services, overdue_record):
        [refreshed] = services.overdue_service.reconcile("2024-02-25")
        assert refreshed.id == overdue_record.id
        assert refreshed.accumulated_overdue_fee == 1_010_959

    def test_paid_items_open_nothing(self, services, rented, manager):
        _forklift, contract = rented
        services.settlement_service.record_item(
            manager, contract.id, SettlementItemType.RENTAL_FEE, 1_000_000, "2024-02-05"
        )
        assert services.overdue_service.reconcile("2024-02-15") == []

    def test_one_record_per_contract(self, services, overdue_record, rented, manager):
        _forklift, contract = rented
        services.settlement_service.record_item(
            manager,
            contract.id,
            SettlementItemType.REPAIR_COST,
            50_000,
            "2024-03-01",
            status=SettlementStatus.OVERDUE,
        )
        records = services.overdue_service.reconcile("2024-03-05")
        assert [record.id for record in records] == [overdue_record.id]


class TestListing:
    def test_manager_sees_own_records(self, services, overdue_record, manager):
        [view] = services.overdue_service.list_overdue(manager, "2024-02-05")
        assert view.record.id == overdue_record.id
        assert view.lessee_name == "Seoul Logistics"
        assert view.current_fee == 1_000_000

    def test_other_company_sees_nothing(self, services, overdue_record, other_manager):
        assert services.overdue_service.list_overdue(other_manager, "2024-02-15") == []

    def test_admin_has_no_overdue_screen(self, services, overdue_record, admin):
        with pytest.raises(PermissionDeniedError):
            services.overdue_service.list_overdue(admin, "2024-02-15")


class TestActions:
    def test_notifications_are_logged_in_order(self, services, overdue_record, manager):
        record_id = overdue_record.id
        services.overdue_service.request_payment(manager, record_id, on="2024-02-16")
        services.overdue_service.deduct_deposit(manager, record_id, on="2024-02-20")
        updated = services.overdue_service.send_termination_notice(
            manager, record_id, on="2024-02-25"
        )
        assert updated.notification_history == [
            OverdueCaseType.RENTAL_FEE_OVERDUE,
            OverdueCaseType.DEPOSIT_DEDUCTED,
            OverdueCaseType.CONTRACT_TERMINATED,
        ]
        assert updated.last_notification_date == "2024-02-25"

    def test_termination_notice_keeps_contract(self, services, overdue_record, manager, rented):
        _forklift, contract = rented
        services.overdue_service.send_termination_notice(manager, overdue_record.id)
        assert services.contract_service.get(contract.id).status == contract.status

    def test_deposit_required(self, services, manager, lessee, register_forklift):
        forklift = register_forklift(manager)
        contract = services.contract_service.register(
            manager,
            lessee_id=lessee.id,
            forklift_id=forklift.id,
            start_date="2024-01-01",
            end_date="2024-06-30",
            rental_fee=500_000,
            payment_due_date="2024-01-10",
        )
        services.settlement_service.record_item(
            manager,
            contract.id,
            SettlementItemType.RENTAL_FEE,
            500_000,
            "2024-01-10",
            status=SettlementStatus.OVERDUE,
        )
        [record] = services.overdue_service.reconcile("2024-01-20")
        with pytest.raises(ValidationError) as excinfo:
            services.overdue_service.deduct_deposit(manager, record.id)
        assert excinfo.value.field == "deposit"

    def test_other_company_cannot_act(self, services, overdue_record, other_manager):
        with pytest.raises(NotFoundError):
            services.overdue_service.request_payment(other_manager, overdue_record.id)

    def test_certified_mail_writes_notice(self, services, overdue_record, manager):
        document = services.overdue_service.send_certified_mail(
            manager, overdue_record.id, as_of="2024-02-15"
        )
        path = Path(document.file_path)
        assert path.exists()
        assert path.name == "Seoul_Logistics_2024-02-15_Overdue_Notice.pdf"
        assert document.doc_type == DocumentType.OVERDUE_NOTICE
        assert len(document.checksum) == 64
        stored = services.store.overdue.get_by_id(overdue_record.id)
        assert stored.notification_history == [OverdueCaseType.CERTIFIED_MAIL]
        assert stored.last_notification_date == "2024-02-15"
        latest = services.store.documents.get_latest(
            document.contract_id, DocumentType.OVERDUE_NOTICE
        )
        assert latest.id == document.id

    def test_certified_mail_file_removed_when_row_fails(
        self, services, overdue_record, manager, tmp_path, monkeypatch
    ):
        def fail(document):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(services.overdue_service._document_repo, "add", fail)
        with pytest.raises(sqlite3.OperationalError):
            services.overdue_service.send_certified_mail(
                manager, overdue_record.id, as_of="2024-02-15"
            )
        assert list((tmp_path / "pdfs").glob("*.pdf")) == []
        stored = services.store.overdue.get_by_id(overdue_record.id)
        assert stored.notification_history == []
