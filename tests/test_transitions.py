import pytest

from forklift_rental.domain.models import (
    ContractStatus,
    ForkliftManagementStatus,
    ForkliftOperationStatus,
)
from forklift_rental.domain.transitions import (
    CONTRACT_TRANSITIONS,
    FORKLIFT_MANAGEMENT_TRANSITIONS,
    FORKLIFT_OPERATION_TRANSITIONS,
)
from forklift_rental.services.errors import InvalidTransitionError, ValidationError


class TestContractTransitions:
    @pytest.mark.parametrize(
        ("state", "name", "target"),
        [
            (ContractStatus.RENTING, "extend", ContractStatus.RENTING),
            (ContractStatus.RENTING, "hold", ContractStatus.ON_HOLD),
            (ContractStatus.ON_HOLD, "resume", ContractStatus.RENTING),
            (ContractStatus.ON_HOLD, "terminate", ContractStatus.MID_TERM_TERMINATION),
            (ContractStatus.RENTING, "end", ContractStatus.CONTRACT_ENDED),
            (
                ContractStatus.MID_TERM_TERMINATION,
                "await_recovery",
                ContractStatus.AWAITING_RECOVERY,
            ),
            (ContractStatus.AWAITING_RECOVERY, "recover", ContractStatus.CONTRACT_ENDED),
        ],
    )
    def test_allowed(self, state, name, target):
        assert CONTRACT_TRANSITIONS.apply(state, name) == target

    def test_cannot_extend_ended_contract(self):
        with pytest.raises(InvalidTransitionError) as excinfo:
            CONTRACT_TRANSITIONS.apply(ContractStatus.CONTRACT_ENDED, "extend")
        assert excinfo.value.field == "status"
        assert isinstance(excinfo.value, ValidationError)

    def test_unknown_transition(self):
        with pytest.raises(InvalidTransitionError):
            CONTRACT_TRANSITIONS.apply(ContractStatus.RENTING, "teleport")

    def test_ended_contract_is_terminal(self):
        assert CONTRACT_TRANSITIONS.available(ContractStatus.CONTRACT_ENDED) == []


class TestForkliftTransitions:
    def test_rent_only_from_storage(self):
        assert (
            FORKLIFT_MANAGEMENT_TRANSITIONS.apply(ForkliftManagementStatus.IN_STORAGE, "rent")
            == ForkliftManagementStatus.RENTED
        )
        with pytest.raises(InvalidTransitionError):
            FORKLIFT_MANAGEMENT_TRANSITIONS.apply(ForkliftManagementStatus.RENTED, "rent")

    def test_disposed_is_terminal(self):
        assert FORKLIFT_MANAGEMENT_TRANSITIONS.available(ForkliftManagementStatus.DISPOSED) == []

    def test_cannot_dispose_rented_forklift(self):
        assert not FORKLIFT_MANAGEMENT_TRANSITIONS.can_apply(
            ForkliftManagementStatus.RENTED, "dispose"
        )

    def test_operation_starts_from_unset(self):
        assert (
            FORKLIFT_OPERATION_TRANSITIONS.apply(None, "remote_start")
            == ForkliftOperationStatus.OPERATING
        )

    def test_cannot_start_twice(self):
        with pytest.raises(InvalidTransitionError):
            FORKLIFT_OPERATION_TRANSITIONS.apply(
                ForkliftOperationStatus.OPERATING, "remote_start"
            )

    def test_stop_requires_operating(self):
        with pytest.raises(InvalidTransitionError):
            FORKLIFT_OPERATION_TRANSITIONS.apply(ForkliftOperationStatus.STOPPED, "stop")
