"""Contract registration, lifecycle transitions and derived display values."""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Optional

from forklift_rental.config import (
    CONTRACT_ONE_MONTH_WINDOW_DAYS,
    CONTRACT_TWO_MONTHS_WINDOW_DAYS,
)
from forklift_rental.db.connection import transaction
from forklift_rental.domain.models import (
    Contract,
    ContractHistoryEntry,
    ContractHistoryType,
    ContractStatus,
    ContractType,
    ForkliftDisplayContractStatus,
    ForkliftManagementStatus,
    PaymentMethod,
    User,
)
from forklift_rental.domain.transitions import (
    CONTRACT_TRANSITIONS,
    FORKLIFT_MANAGEMENT_TRANSITIONS,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories import contract_repo
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.services.access_filter import (
    Feature,
    require_access,
    visible_entities,
)
from forklift_rental.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forklift_rental.services.validators import coerce_enum, optional_text
from forklift_rental.utils.config_store import AppSettings
from forklift_rental.utils.dates import (
    DateLike,
    optional_iso_date,
    to_date,
    today_iso,
    validate_amount,
)

_DISPLAY_BY_STATUS = {
    ContractStatus.MID_TERM_TERMINATION: ForkliftDisplayContractStatus.MID_TERM_TERMINATION,
    ContractStatus.ON_HOLD: ForkliftDisplayContractStatus.ON_HOLD,
    ContractStatus.CONTRACT_ENDED: ForkliftDisplayContractStatus.CONTRACT_ENDED,
}

# Transitions after which the forklift goes back to storage.
_RELEASES_FORKLIFT = {"end", "recover"}


def remaining_days(contract: Contract, today: Optional[DateLike] = None) -> int:
    """Days until the contract end date; zero or negative once expired."""
    current = to_date(today, "today") if today is not None else date.today()
    return (to_date(contract.end_date, "end_date") - current).days


def display_contract_status(
    contract: Optional[Contract],
    today: Optional[DateLike] = None,
    *,
    one_month_days: int = CONTRACT_ONE_MONTH_WINDOW_DAYS,
    two_months_days: int = CONTRACT_TWO_MONTHS_WINDOW_DAYS,
) -> Optional[ForkliftDisplayContractStatus]:
    """Badge shown next to a forklift for its current contract, if any."""
    if contract is None:
        return None
    if contract.status in _DISPLAY_BY_STATUS:
        return _DISPLAY_BY_STATUS[contract.status]
    if contract.status != ContractStatus.RENTING:
        return None
    days = remaining_days(contract, today)
    if days <= 0:
        return ForkliftDisplayContractStatus.CONTRACT_ENDED
    if days <= one_month_days:
        return ForkliftDisplayContractStatus.ONE_MONTH_LEFT
    if days <= two_months_days:
        return ForkliftDisplayContractStatus.TWO_MONTHS_LEFT
    return None


class ContractService:
    """Service for contract business rules."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        *,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._connection = connection
        self._settings = settings or AppSettings()
        self._forklift_repo = ForkliftRepo(connection)
        self._lessee_repo = LesseeRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def register(
        self,
        actor: Optional[User],
        *,
        lessee_id: str,
        forklift_id: str,
        start_date: DateLike,
        end_date: DateLike,
        rental_fee: object,
        payment_due_date: DateLike,
        tax_invoice_issue_date: Optional[DateLike] = None,
        contract_type: ContractType | str = ContractType.LONG_TERM,
        payment_method: PaymentMethod | str = PaymentMethod.CMS_5TH,
        contract_pdf_url: Optional[str] = None,
        shipping_cost: object = None,
        deposit: object = None,
        repair_cost: object = None,
        commission: object = None,
        early_termination_penalty: object = None,
        signed_on: Optional[DateLike] = None,
    ) -> Contract:
        """Register a contract and rent out its forklift.

        The contract inherits the forklift's company. The forklift must be
        in storage and visible to the registering manager.
        """
        require_access(actor, Feature.CONTRACT_REGISTRATION)
        start = to_date(start_date, "start_date")
        end = to_date(end_date, "end_date")
        if end < start:
            raise ValidationError(
                "end_date must not be before start_date.", field="end_date"
            )
        contract = Contract(
            id=None,
            lessee_id=lessee_id,
            forklift_id=forklift_id,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            rental_fee=validate_amount(rental_fee, "rental_fee"),
            payment_due_date=to_date(payment_due_date, "payment_due_date").isoformat(),
            tax_invoice_issue_date=optional_iso_date(
                tax_invoice_issue_date, "tax_invoice_issue_date"
            ),
            contract_type=coerce_enum(ContractType, contract_type, "contract_type"),
            payment_method=coerce_enum(PaymentMethod, payment_method, "payment_method"),
            contract_pdf_url=optional_text(contract_pdf_url),
            shipping_cost=validate_amount(shipping_cost, "shipping_cost", allow_none=True),
            deposit=validate_amount(deposit, "deposit", allow_none=True),
            repair_cost=validate_amount(repair_cost, "repair_cost", allow_none=True),
            commission=validate_amount(commission, "commission", allow_none=True),
            early_termination_penalty=validate_amount(
                early_termination_penalty, "early_termination_penalty", allow_none=True
            ),
            history=[
                ContractHistoryEntry(
                    type=ContractHistoryType.CONTRACT_SIGNED,
                    date=optional_iso_date(signed_on, "signed_on") or today_iso(),
                )
            ],
        )
        if not self._lessee_repo.get_by_id(lessee_id):
            raise NotFoundError(f"Lessee {lessee_id} not found.")
        forklift = self._forklift_repo.get_by_id(forklift_id)
        if not forklift:
            raise NotFoundError(f"Forklift {forklift_id} not found.")
        if not visible_entities(actor, [forklift]):
            raise PermissionDeniedError(
                f"Forklift {forklift_id} belongs to another rental company."
            )
        rented = FORKLIFT_MANAGEMENT_TRANSITIONS.apply(forklift.management_status, "rent")
        contract.rental_company_id = forklift.rental_company_id

        with transaction(self._connection):
            stored = contract_repo.create_contract(contract, connection=self._connection)
            self._forklift_repo.set_management_status(
                forklift_id, rented, current_contract_id=stored.id
            )
        self._logger.info(
            "Registered contract id=%s forklift=%s lessee=%s",
            stored.id,
            forklift_id,
            lessee_id,
        )
        return stored

    def get(self, contract_id: str) -> Contract:
        contract = contract_repo.get_contract(contract_id, connection=self._connection)
        if not contract:
            raise NotFoundError(f"Contract {contract_id} not found.")
        return contract

    def _history(
        self,
        contract_id: str,
        history_type: ContractHistoryType,
        on: Optional[DateLike],
        description: Optional[str] = None,
    ) -> None:
        contract_repo.append_history(
            contract_id,
            ContractHistoryEntry(
                type=history_type,
                date=optional_iso_date(on, "date") or today_iso(),
                description=description,
            ),
            connection=self._connection,
        )

    def _visible_contract(self, actor: Optional[User], contract_id: str) -> Contract:
        require_access(actor, Feature.CONTRACTS)
        contract = self.get(contract_id)
        if not visible_entities(
            actor, [contract], forklifts=self._forklift_repo.list_all()
        ):
            raise PermissionDeniedError(
                f"Contract {contract_id} belongs to another rental company."
            )
        return contract

    def _release_forklift(self, contract: Contract) -> None:
        forklift = self._forklift_repo.get_by_id(contract.forklift_id)
        if not forklift or forklift.current_contract_id != contract.id:
            return
        if FORKLIFT_MANAGEMENT_TRANSITIONS.can_apply(forklift.management_status, "store"):
            self._forklift_repo.set_management_status(
                forklift.id, ForkliftManagementStatus.IN_STORAGE, current_contract_id=None
            )
        else:
            self._forklift_repo.set_management_status(
                forklift.id, forklift.management_status, current_contract_id=None
            )

    def apply_transition(
        self,
        actor: Optional[User],
        contract_id: str,
        name: str,
        *,
        on: Optional[DateLike] = None,
        description: Optional[str] = None,
    ) -> Contract:
        """Apply a named status transition other than ``extend``."""
        if name == "extend":
            raise ValidationError("Use extend() to extend a contract.", field="status")
        contract = self._visible_contract(actor, contract_id)
        target = CONTRACT_TRANSITIONS.apply(contract.status, name)
        with transaction(self._connection):
            contract_repo.set_status(contract_id, target, connection=self._connection)
            if target == ContractStatus.CONTRACT_ENDED:
                self._history(
                    contract_id, ContractHistoryType.CONTRACT_ENDED, on, description
                )
            if name in _RELEASES_FORKLIFT:
                self._release_forklift(contract)
        self._logger.info(
            "Contract id=%s %s: %s -> %s",
            contract_id,
            name,
            contract.status.value,
            target.value,
        )
        return self.get(contract_id)

    def extend(
        self,
        actor: Optional[User],
        contract_id: str,
        new_end_date: DateLike,
        *,
        on: Optional[DateLike] = None,
    ) -> Contract:
        contract = self._visible_contract(actor, contract_id)
        CONTRACT_TRANSITIONS.apply(contract.status, "extend")
        new_end = to_date(new_end_date, "end_date")
        if new_end <= to_date(contract.end_date, "end_date"):
            raise ValidationError(
                "The new end date must be after the current end date.",
                field="end_date",
            )
        with transaction(self._connection):
            contract_repo.update_contract(
                contract_id, {"end_date": new_end.isoformat()}, connection=self._connection
            )
            self._history(
                contract_id,
                ContractHistoryType.CONTRACT_EXTENDED,
                on,
                f"Extended from {contract.end_date} to {new_end.isoformat()}",
            )
        self._logger.info(
            "Contract id=%s extended to %s", contract_id, new_end.isoformat()
        )
        return self.get(contract_id)

    def hold(self, actor: Optional[User], contract_id: str) -> Contract:
        return self.apply_transition(actor, contract_id, "hold")

    def resume(self, actor: Optional[User], contract_id: str) -> Contract:
        return self.apply_transition(actor, contract_id, "resume")

    def terminate(self, actor: Optional[User], contract_id: str) -> Contract:
        return self.apply_transition(actor, contract_id, "terminate")

    def end(
        self, actor: Optional[User], contract_id: str, *, on: Optional[DateLike] = None
    ) -> Contract:
        return self.apply_transition(actor, contract_id, "end", on=on)

    def await_recovery(self, actor: Optional[User], contract_id: str) -> Contract:
        return self.apply_transition(actor, contract_id, "await_recovery")

    def recover(
        self, actor: Optional[User], contract_id: str, *, on: Optional[DateLike] = None
    ) -> Contract:
        return self.apply_transition(actor, contract_id, "recover", on=on)

    def record_rental_start(
        self,
        actor: Optional[User],
        contract_id: str,
        *,
        on: Optional[DateLike] = None,
    ) -> Contract:
        self._visible_contract(actor, contract_id)
        with transaction(self._connection):
            self._history(contract_id, ContractHistoryType.RENTAL_START, on)
        return self.get(contract_id)

    def record_delivery(
        self,
        actor: Optional[User],
        contract_id: str,
        *,
        on: Optional[DateLike] = None,
        description: Optional[str] = None,
    ) -> Contract:
        self._visible_contract(actor, contract_id)
        with transaction(self._connection):
            self._history(
                contract_id, ContractHistoryType.FORKLIFT_DELIVERED, on, description
            )
        return self.get(contract_id)

    def list_contracts(
        self,
        actor: Optional[User],
        *,
        status: Optional[ContractStatus] = None,
    ) -> list[Contract]:
        contracts = contract_repo.list_contracts(
            connection=self._connection, status=status
        )
        return visible_entities(
            actor, contracts, forklifts=self._forklift_repo.list_all()
        )

    def search(
        self,
        actor: Optional[User],
        term: str = "",
        *,
        status: Optional[ContractStatus] = None,
    ) -> list[Contract]:
        """Match the term against lessee names and forklift chassis numbers."""
        contracts = self.list_contracts(actor, status=status)
        needle = term.strip().lower()
        if not needle:
            return contracts
        lessee_names = {lessee.id: lessee.name for lessee in self._lessee_repo.list_all()}
        chassis = {
            forklift.id: forklift.chassis_number
            for forklift in self._forklift_repo.list_all()
        }
        return [
            contract
            for contract in contracts
            if needle in (lessee_names.get(contract.lessee_id) or "").lower()
            or needle in (chassis.get(contract.forklift_id) or "").lower()
        ]

    def forklift_contract_status(
        self, forklift_id: str, today: Optional[DateLike] = None
    ) -> Optional[ForkliftDisplayContractStatus]:
        forklift = self._forklift_repo.get_by_id(forklift_id)
        if not forklift:
            raise NotFoundError(f"Forklift {forklift_id} not found.")
        if not forklift.current_contract_id:
            return None
        contract = contract_repo.get_contract(
            forklift.current_contract_id, connection=self._connection
        )
        return display_contract_status(
            contract,
            today,
            one_month_days=self._settings.one_month_window_days,
            two_months_days=self._settings.two_months_window_days,
        )
