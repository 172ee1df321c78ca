import sqlite3
from functools import partial

import pytest

from forklift_rental.app import bootstrap
from forklift_rental.db.migrations import MIGRATIONS, apply_migrations
from forklift_rental.domain.models import (
    Document,
    DocumentType,
    OverdueCaseType,
    SettlementItemType,
    SettlementStatus,
)
from forklift_rental.repositories.entity_store import EntityStore


class TestMigrations:
    def test_fresh_database_reaches_latest(self):
        store = EntityStore.open()
        try:
            version = store.connection.execute(
                "SELECT schema_version FROM app_meta"
            ).fetchone()[0]
            assert version == MIGRATIONS[-1].version
        finally:
            store.close()

    def test_reapplying_is_a_no_op(self):
        store = EntityStore.open()
        try:
            assert apply_migrations(store.connection) == MIGRATIONS[-1].version
        finally:
            store.close()

    def test_file_database_persists(self, tmp_path, admin):
        path = tmp_path / "forklift_rental.db"
        first = bootstrap(path)
        company = first.company_service.register(admin, "Hanbit Rental")
        first.close()

        second = bootstrap(path)
        try:
            assert second.company_service.get(company.id).name == "Hanbit Rental"
        finally:
            second.close()


class TestSnapshot:
    def test_collects_every_collection(self, services, rented, manager):
        _forklift, contract = rented
        services.settlement_service.record_item(
            manager,
            contract.id,
            SettlementItemType.RENTAL_FEE,
            1_000_000,
            "2024-02-05",
            status=SettlementStatus.OVERDUE,
        )
        services.overdue_service.reconcile("2024-02-10")
        snapshot = services.store.snapshot()
        assert len(snapshot.companies) == 1
        assert len(snapshot.forklifts) == 1
        assert [c.id for c in snapshot.contracts] == [contract.id]
        assert snapshot.lessees[0].contract_ids == [contract.id]
        assert len(snapshot.settlement_items) == 1
        assert len(snapshot.overdue_records) == 1
        assert len(snapshot.users) == 1

    def test_snapshot_is_detached(self, services, lessee):
        snapshot = services.store.snapshot()
        services.lessee_service.register("Busan Freight")
        assert len(snapshot.lessees) == 1
        assert len(services.store.snapshot().lessees) == 2


class TestRepositories:
    def test_one_overdue_record_per_contract(self, services, rented):
        _forklift, contract = rented
        services.store.overdue.create(contract.id)
        with pytest.raises(sqlite3.IntegrityError):
            services.store.overdue.create(contract.id)
        services.connection.rollback()

    def test_overdue_contract_ids_in_first_seen_order(
        self, services, rented, manager, lessee, register_forklift
    ):
        _forklift, first = rented
        second_forklift = register_forklift(manager)
        second = services.contract_service.register(
            manager,
            lessee_id=lessee.id,
            forklift_id=second_forklift.id,
            start_date="2024-01-01",
            end_date="2024-12-31",
            rental_fee=700_000,
            payment_due_date="2024-01-25",
        )
        record = partial(services.settlement_service.record_item, manager)
        record(second.id, "RENTAL_FEE", 700_000, "2024-01-25", status="OVERDUE")
        record(first.id, "RENTAL_FEE", 1_000_000, "2024-02-05", status="OVERDUE")
        record(second.id, "RENTAL_FEE", 700_000, "2024-02-25", status="OVERDUE")
        assert services.store.settlements.list_overdue_contract_ids() == [
            second.id,
            first.id,
        ]

    def test_overdue_notifications_cascade(self, services, rented):
        _forklift, contract = rented
        repo = services.store.overdue
        record = repo.create(contract.id, 10)
        repo.add_notification(record.id, OverdueCaseType.RENTAL_FEE_OVERDUE, "2024-03-01")
        services.connection.commit()
        assert repo.get_by_contract(contract.id).notification_history == [
            OverdueCaseType.RENTAL_FEE_OVERDUE
        ]
        assert repo.delete(record.id)
        assert services.connection.execute(
            "SELECT COUNT(*) FROM overdue_notifications"
        ).fetchone()[0] == 0

    def test_latest_document(self, services, rented):
        _forklift, contract = rented
        documents = services.store.documents
        for generated_at in ("2024-03-01T09:00:00", "2024-03-02T09:00:00"):
            documents.add(
                Document(
                    id=None,
                    contract_id=contract.id,
                    doc_type=DocumentType.OVERDUE_NOTICE,
                    file_path=f"/tmp/{generated_at}.pdf",
                    generated_at=generated_at,
                    checksum="0" * 64,
                )
            )
        latest = documents.get_latest(contract.id, DocumentType.OVERDUE_NOTICE)
        assert latest.generated_at == "2024-03-02T09:00:00"
        assert len(documents.list_by_contract(contract.id)) == 2
        assert documents.get_latest(contract.id, DocumentType.SETTLEMENT_REPORT) is None

    def test_user_lookup_ignores_case(self, services, manager):
        assert services.store.users.get_by_email("MANAGER@hanbit.example").id == manager.id
