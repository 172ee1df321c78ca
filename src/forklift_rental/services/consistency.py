"""Read-only report of forklift/contract disagreements."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from forklift_rental.domain.models import ContractStatus, ForkliftManagementStatus
from forklift_rental.repositories.entity_store import StoreSnapshot

# Statuses in which the forklift is still out with the lessee.
_OPEN_CONTRACT_STATUSES = frozenset(
    {
        ContractStatus.RENTING,
        ContractStatus.ON_HOLD,
        ContractStatus.MID_TERM_TERMINATION,
        ContractStatus.AWAITING_RECOVERY,
    }
)

_IDLE_STATUSES = frozenset(
    {ForkliftManagementStatus.IN_STORAGE, ForkliftManagementStatus.DISPOSED}
)


class InconsistencyKind(str, Enum):
    MISSING_CONTRACT = "missing_contract"
    DANGLING_CONTRACT = "dangling_contract"
    CONTRACT_MISMATCH = "contract_mismatch"
    CONTRACT_CLOSED = "contract_closed"
    STALE_CONTRACT = "stale_contract"
    FORKLIFT_NOT_ASSIGNED = "forklift_not_assigned"
    COMPANY_MISMATCH = "company_mismatch"


@dataclass(frozen=True)
class Inconsistency:
    kind: InconsistencyKind
    forklift_id: Optional[str]
    contract_id: Optional[str]
    message: str


def find_inconsistencies(snapshot: StoreSnapshot) -> list[Inconsistency]:
    """List forklifts whose status and current contract disagree.

    Nothing is repaired; the report is ordered forklift issues first, then
    contract issues, each in store order.
    """
    contracts = {contract.id: contract for contract in snapshot.contracts}
    forklifts = {forklift.id: forklift for forklift in snapshot.forklifts}
    issues: list[Inconsistency] = []

    for forklift in snapshot.forklifts:
        contract_id = forklift.current_contract_id
        status = forklift.management_status
        if status == ForkliftManagementStatus.RENTED and not contract_id:
            issues.append(
                Inconsistency(
                    InconsistencyKind.MISSING_CONTRACT,
                    forklift.id,
                    None,
                    f"Forklift {forklift.chassis_number} is rented without a contract.",
                )
            )
            continue
        if not contract_id:
            continue
        contract = contracts.get(contract_id)
        if contract is None:
            issues.append(
                Inconsistency(
                    InconsistencyKind.DANGLING_CONTRACT,
                    forklift.id,
                    contract_id,
                    f"Forklift {forklift.chassis_number} points to a missing contract.",
                )
            )
        elif contract.forklift_id != forklift.id:
            issues.append(
                Inconsistency(
                    InconsistencyKind.CONTRACT_MISMATCH,
                    forklift.id,
                    contract_id,
                    f"Contract {contract_id} is for another forklift.",
                )
            )
        elif status in _IDLE_STATUSES:
            issues.append(
                Inconsistency(
                    InconsistencyKind.STALE_CONTRACT,
                    forklift.id,
                    contract_id,
                    f"Forklift {forklift.chassis_number} is {status.value} "
                    f"but still references contract {contract_id}.",
                )
            )
        elif contract.status not in _OPEN_CONTRACT_STATUSES:
            issues.append(
                Inconsistency(
                    InconsistencyKind.CONTRACT_CLOSED,
                    forklift.id,
                    contract_id,
                    f"Forklift {forklift.chassis_number} is {status.value} "
                    f"under closed contract {contract_id}.",
                )
            )

    for contract in snapshot.contracts:
        forklift = forklifts.get(contract.forklift_id)
        if forklift is None:
            continue
        if (
            contract.rental_company_id
            and contract.rental_company_id != forklift.rental_company_id
        ):
            issues.append(
                Inconsistency(
                    InconsistencyKind.COMPANY_MISMATCH,
                    forklift.id,
                    contract.id,
                    f"Contract {contract.id} and its forklift belong to different companies.",
                )
            )
        if (
            contract.status == ContractStatus.RENTING
            and forklift.current_contract_id != contract.id
        ):
            issues.append(
                Inconsistency(
                    InconsistencyKind.FORKLIFT_NOT_ASSIGNED,
                    forklift.id,
                    contract.id,
                    f"Renting contract {contract.id} is not the forklift's current contract.",
                )
            )
    return issues
