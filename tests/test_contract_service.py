import pytest

from forklift_rental.domain.models import (
    ContractHistoryType,
    ContractStatus,
    ForkliftDisplayContractStatus,
    ForkliftManagementStatus,
)
from forklift_rental.services.contract_service import (
    display_contract_status,
    remaining_days,
)
from forklift_rental.services.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

from conftest import make_contract


class TestRegister:
    def test_rents_out_forklift(self, services, rented, company, lessee):
        forklift, contract = rented
        assert contract.status == ContractStatus.RENTING
        assert contract.rental_company_id == company.id
        assert [entry.type for entry in contract.history] == [
            ContractHistoryType.CONTRACT_SIGNED
        ]
        assert contract.history[0].date == "2023-12-20"
        assert forklift.management_status == ForkliftManagementStatus.RENTED
        assert forklift.current_contract_id == contract.id
        assert services.lessee_service.get(lessee.id).contract_ids == [contract.id]

    def test_end_before_start_rejected(self, services, manager, lessee, register_forklift):
        forklift = register_forklift(manager)
        with pytest.raises(ValidationError) as excinfo:
            services.contract_service.register(
                manager,
                lessee_id=lessee.id,
                forklift_id=forklift.id,
                start_date="2024-05-01",
                end_date="2024-04-30",
                rental_fee=1,
                payment_due_date="2024-05-05",
            )
        assert excinfo.value.field == "end_date"

    def test_negative_fee_rejected(self, services, manager, lessee, register_forklift):
        forklift = register_forklift(manager)
        with pytest.raises(ValidationError):
            services.contract_service.register(
                manager,
                lessee_id=lessee.id,
                forklift_id=forklift.id,
                start_date="2024-05-01",
                end_date="2024-06-30",
                rental_fee=-10,
                payment_due_date="2024-05-05",
            )

    def test_forklift_already_rented(self, services, manager, rented, lessee):
        forklift, _contract = rented
        with pytest.raises(InvalidTransitionError):
            services.contract_service.register(
                manager,
                lessee_id=lessee.id,
                forklift_id=forklift.id,
                start_date="2025-01-01",
                end_date="2025-06-30",
                rental_fee=1,
                payment_due_date="2025-01-05",
            )

    def test_other_company_forklift(self, services, rented, other_manager, lessee):
        forklift, _contract = rented
        with pytest.raises(PermissionDeniedError):
            services.contract_service.register(
                other_manager,
                lessee_id=lessee.id,
                forklift_id=forklift.id,
                start_date="2025-01-01",
                end_date="2025-06-30",
                rental_fee=1,
                payment_due_date="2025-01-05",
            )

    def test_admin_cannot_register(self, services, admin, lessee):
        with pytest.raises(PermissionDeniedError):
            services.contract_service.register(
                admin,
                lessee_id=lessee.id,
                forklift_id="fork-x",
                start_date="2025-01-01",
                end_date="2025-06-30",
                rental_fee=1,
                payment_due_date="2025-01-05",
            )

    def test_missing_lessee(self, services, manager, register_forklift):
        forklift = register_forklift(manager)
        with pytest.raises(NotFoundError):
            services.contract_service.register(
                manager,
                lessee_id="less-missing",
                forklift_id=forklift.id,
                start_date="2025-01-01",
                end_date="2025-06-30",
                rental_fee=1,
                payment_due_date="2025-01-05",
            )


class TestTransitions:
    def test_extend_appends_history(self, services, rented, manager):
        _forklift, contract = rented
        extended = services.contract_service.extend(
            manager, contract.id, "2025-06-30", on="2024-12-01"
        )
        assert extended.end_date == "2025-06-30"
        assert extended.history[-1].type == ContractHistoryType.CONTRACT_EXTENDED
        assert extended.history[-1].date == "2024-12-01"
        assert len(extended.history) == 2

    def test_extend_must_move_end_forward(self, services, rented, manager):
        _forklift, contract = rented
        with pytest.raises(ValidationError):
            services.contract_service.extend(manager, contract.id, "2024-06-30")

    def test_cannot_extend_ended_contract(self, services, rented, manager):
        _forklift, contract = rented
        services.contract_service.end(manager, contract.id)
        with pytest.raises(InvalidTransitionError):
            services.contract_service.extend(manager, contract.id, "2025-06-30")

    def test_end_releases_forklift(self, services, rented, manager):
        forklift, contract = rented
        ended = services.contract_service.end(manager, contract.id, on="2024-12-31")
        assert ended.status == ContractStatus.CONTRACT_ENDED
        assert ended.history[-1].type == ContractHistoryType.CONTRACT_ENDED
        stored = services.forklift_service.get(forklift.id)
        assert stored.management_status == ForkliftManagementStatus.IN_STORAGE
        assert stored.current_contract_id is None

    def test_terminate_then_recover(self, services, rented, manager):
        forklift, contract = rented
        services.contract_service.terminate(manager, contract.id)
        assert (
            services.forklift_service.get(forklift.id).management_status
            == ForkliftManagementStatus.RENTED
        )
        services.contract_service.await_recovery(manager, contract.id)
        recovered = services.contract_service.recover(manager, contract.id)
        assert recovered.status == ContractStatus.CONTRACT_ENDED
        assert (
            services.forklift_service.get(forklift.id).management_status
            == ForkliftManagementStatus.IN_STORAGE
        )

    def test_hold_and_resume(self, services, rented, manager):
        _forklift, contract = rented
        held = services.contract_service.hold(manager, contract.id)
        assert held.status == ContractStatus.ON_HOLD
        resumed = services.contract_service.resume(manager, contract.id)
        assert resumed.status == ContractStatus.RENTING

    def test_history_is_append_only(self, services, rented, manager):
        _forklift, contract = rented
        services.contract_service.record_delivery(manager, contract.id, on="2024-01-01")
        services.contract_service.record_rental_start(manager, contract.id, on="2024-01-02")
        history = services.contract_service.get(contract.id).history
        assert [entry.type for entry in history] == [
            ContractHistoryType.CONTRACT_SIGNED,
            ContractHistoryType.FORKLIFT_DELIVERED,
            ContractHistoryType.RENTAL_START,
        ]

    def test_admin_can_end_any_contract(self, services, rented, admin):
        _forklift, contract = rented
        ended = services.contract_service.end(admin, contract.id)
        assert ended.status == ContractStatus.CONTRACT_ENDED


class TestWriteScoping:
    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("end", ()),
            ("hold", ()),
            ("terminate", ()),
            ("extend", ("2025-06-30",)),
            ("record_delivery", ()),
            ("record_rental_start", ()),
        ],
    )
    def test_other_company_cannot_write(
        self, services, rented, other_manager, method, args
    ):
        forklift, contract = rented
        write = getattr(services.contract_service, method)
        with pytest.raises(PermissionDeniedError):
            write(other_manager, contract.id, *args)
        unchanged = services.contract_service.get(contract.id)
        assert unchanged.status == ContractStatus.RENTING
        assert unchanged.end_date == "2024-12-31"
        assert len(unchanged.history) == 1
        stored = services.forklift_service.get(forklift.id)
        assert stored.current_contract_id == contract.id

    def test_operator_cannot_write(self, services, rented, manager):
        _forklift, contract = rented
        operator = services.user_service.invite(
            manager, "op@hanbit.example", "OPERATOR"
        )
        with pytest.raises(PermissionDeniedError):
            services.contract_service.end(operator, contract.id)

    def test_missing_actor_cannot_write(self, services, rented):
        _forklift, contract = rented
        with pytest.raises(PermissionDeniedError):
            services.contract_service.hold(None, contract.id)


class TestQueries:
    def test_scoped_listing(self, services, rented, manager, other_manager, admin):
        _forklift, contract = rented
        assert [c.id for c in services.contract_service.list_contracts(manager)] == [
            contract.id
        ]
        assert services.contract_service.list_contracts(other_manager) == []
        assert len(services.contract_service.list_contracts(admin)) == 1

    def test_search_by_lessee_or_chassis(self, services, rented, manager):
        forklift, contract = rented
        assert services.contract_service.search(manager, "seoul")[0].id == contract.id
        assert services.contract_service.search(manager, forklift.chassis_number.lower())
        assert services.contract_service.search(manager, "nothing-like-this") == []

    def test_forklift_badge(self, services, rented):
        forklift, _contract = rented
        assert (
            services.contract_service.forklift_contract_status(forklift.id, "2024-12-10")
            == ForkliftDisplayContractStatus.ONE_MONTH_LEFT
        )


class TestDisplayStatus:
    @pytest.mark.parametrize(
        ("today", "expected"),
        [
            ("2024-04-01", None),
            ("2024-05-01", ForkliftDisplayContractStatus.TWO_MONTHS_LEFT),
            ("2024-06-15", ForkliftDisplayContractStatus.ONE_MONTH_LEFT),
            ("2024-06-30", ForkliftDisplayContractStatus.CONTRACT_ENDED),
        ],
    )
    def test_renting_windows(self, today, expected):
        assert display_contract_status(make_contract(), today) == expected

    def test_status_badges(self):
        contract = make_contract(status=ContractStatus.ON_HOLD)
        assert display_contract_status(contract, "2024-01-01") == ForkliftDisplayContractStatus.ON_HOLD

    def test_remaining_days(self):
        assert remaining_days(make_contract(), "2024-06-20") == 10
        assert remaining_days(make_contract(), "2024-07-05") == -5
