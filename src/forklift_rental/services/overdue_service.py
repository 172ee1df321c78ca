"""Overdue record reconciliation and collection actions."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from forklift_rental.config import PDF_ISSUER, UNKNOWN_LABEL, PdfIssuerInfo
from forklift_rental.db.connection import read_transaction, transaction
from forklift_rental.domain.models import (
    Contract,
    Document,
    DocumentType,
    OverdueCaseType,
    OverdueRecord,
    User,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.paths import get_pdfs_dir
from forklift_rental.repositories import contract_repo
from forklift_rental.repositories.document_repo import DocumentRepository
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.repositories.overdue_repo import OverdueRepo
from forklift_rental.repositories.settlement_repo import SettlementRepo
from forklift_rental.services.access_filter import (
    Feature,
    require_access,
    visible_entities,
)
from forklift_rental.services.errors import NotFoundError, ValidationError
from forklift_rental.services.overdue_fee import calculate_overdue_fee
from forklift_rental.utils.dates import DateLike, now_iso, to_iso_date, today_iso
from forklift_rental.utils.documents import build_document_filename, file_checksum
from forklift_rental.utils.pdf_generator import generate_overdue_notice_pdf


@dataclass(frozen=True)
class OverdueView:
    """An overdue record with its contract and the fee owed as of a date."""

    record: OverdueRecord
    contract: Optional[Contract]
    lessee_name: str
    current_fee: int


class OverdueService:
    """Service for overdue tracking and notices."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        *,
        pdf_dir: Optional[Path] = None,
        issuer: PdfIssuerInfo = PDF_ISSUER,
    ) -> None:
        self._connection = connection
        self._repo = OverdueRepo(connection)
        self._settlement_repo = SettlementRepo(connection)
        self._lessee_repo = LesseeRepo(connection)
        self._forklift_repo = ForkliftRepo(connection)
        self._document_repo = DocumentRepository(connection)
        self._pdf_dir = pdf_dir
        self._issuer = issuer
        self._logger = get_logger(self.__class__.__name__)

    def reconcile(self, as_of: DateLike) -> list[OverdueRecord]:
        """Ensure one record per contract with an overdue item and refresh fees.

        Returns the created or refreshed records in first-overdue order.
        """
        touched: list[OverdueRecord] = []
        with transaction(self._connection):
            for contract_id in self._settlement_repo.list_overdue_contract_ids():
                contract = contract_repo.get_contract(
                    contract_id, connection=self._connection
                )
                if contract is None:
                    self._logger.warning(
                        "Overdue items reference missing contract id=%s", contract_id
                    )
                    continue
                fee = calculate_overdue_fee(contract, as_of)
                record = self._repo.get_by_contract(contract_id)
                if record is None:
                    record = self._repo.create(contract_id, fee)
                    self._logger.info(
                        "Opened overdue record id=%s contract=%s", record.id, contract_id
                    )
                else:
                    self._repo.set_accumulated_fee(record.id, fee)
                    record.accumulated_overdue_fee = fee
                touched.append(record)
        return touched

    def list_overdue(
        self, actor: Optional[User], as_of: DateLike
    ) -> list[OverdueView]:
        require_access(actor, Feature.OVERDUE_MANAGEMENT)
        with read_transaction(self._connection):
            records = self._repo.list_all()
            contracts = contract_repo.list_contracts(connection=self._connection)
            forklifts = self._forklift_repo.list_all()
            lessees = self._lessee_repo.list_all()
        visible = visible_entities(
            actor, records, contracts=contracts, forklifts=forklifts
        )
        contracts_by_id = {contract.id: contract for contract in contracts}
        lessee_names = {lessee.id: lessee.name for lessee in lessees}
        views: list[OverdueView] = []
        for record in visible:
            contract = contracts_by_id.get(record.contract_id)
            views.append(
                OverdueView(
                    record=record,
                    contract=contract,
                    lessee_name=(
                        lessee_names.get(contract.lessee_id) if contract else None
                    )
                    or UNKNOWN_LABEL,
                    current_fee=(
                        calculate_overdue_fee(contract, as_of) if contract else 0
                    ),
                )
            )
        return views

    def _visible_record(
        self, actor: Optional[User], record_id: str
    ) -> tuple[OverdueRecord, Contract]:
        require_access(actor, Feature.OVERDUE_MANAGEMENT)
        record = self._repo.get_by_id(record_id)
        if record is None:
            raise NotFoundError(f"Overdue record {record_id} not found.")
        contract = contract_repo.get_contract(
            record.contract_id, connection=self._connection
        )
        if contract is None:
            raise NotFoundError(f"Contract {record.contract_id} not found.")
        if not visible_entities(
            actor,
            [record],
            contracts=[contract],
            forklifts=self._forklift_repo.list_all(),
        ):
            raise NotFoundError(f"Overdue record {record_id} not found.")
        return record, contract

    def _notify(
        self, record: OverdueRecord, case_type: OverdueCaseType, on: Optional[DateLike]
    ) -> OverdueRecord:
        notified_at = to_iso_date(on, "date") if on is not None else today_iso()
        with transaction(self._connection):
            self._repo.add_notification(record.id, case_type, notified_at)
        self._logger.info(
            "Overdue record id=%s notified case=%s", record.id, case_type.value
        )
        return self._repo.get_by_id(record.id)

    def deduct_deposit(
        self, actor: Optional[User], record_id: str, *, on: Optional[DateLike] = None
    ) -> OverdueRecord:
        record, contract = self._visible_record(actor, record_id)
        if not contract.deposit or contract.deposit <= 0:
            raise ValidationError(
                "The contract has no deposit to deduct.", field="deposit"
            )
        return self._notify(record, OverdueCaseType.DEPOSIT_DEDUCTED, on)

    def request_payment(
        self, actor: Optional[User], record_id: str, *, on: Optional[DateLike] = None
    ) -> OverdueRecord:
        record, _contract = self._visible_record(actor, record_id)
        return self._notify(record, OverdueCaseType.RENTAL_FEE_OVERDUE, on)

    def send_termination_notice(
        self, actor: Optional[User], record_id: str, *, on: Optional[DateLike] = None
    ) -> OverdueRecord:
        record, _contract = self._visible_record(actor, record_id)
        return self._notify(record, OverdueCaseType.CONTRACT_TERMINATED, on)

    def send_certified_mail(
        self,
        actor: Optional[User],
        record_id: str,
        *,
        as_of: Optional[DateLike] = None,
    ) -> Document:
        """Generate the notice PDF, store it and log the certified mail."""
        record, contract = self._visible_record(actor, record_id)
        as_of_iso = to_iso_date(as_of, "as_of") if as_of is not None else today_iso()
        lessee = self._lessee_repo.get_by_id(contract.lessee_id)
        output_dir = self._pdf_dir or get_pdfs_dir()
        output_path = output_dir / build_document_filename(
            lessee.name if lessee else contract.id,
            as_of_iso,
            DocumentType.OVERDUE_NOTICE,
        )
        generate_overdue_notice_pdf(
            contract,
            lessee,
            calculate_overdue_fee(contract, as_of_iso),
            output_path,
            as_of=as_of_iso,
            notification_history=tuple(record.notification_history),
            issuer=self._issuer,
        )
        try:
            with transaction(self._connection):
                document = self._document_repo.add(
                    Document(
                        id=None,
                        contract_id=contract.id,
                        doc_type=DocumentType.OVERDUE_NOTICE,
                        file_path=str(output_path),
                        generated_at=now_iso(),
                        checksum=file_checksum(output_path),
                    )
                )
                self._repo.add_notification(
                    record.id, OverdueCaseType.CERTIFIED_MAIL, as_of_iso
                )
        except Exception:
            output_path.unlink(missing_ok=True)
            raise
        self._logger.info(
            "Certified mail notice for contract id=%s written to %s",
            contract.id,
            output_path,
        )
        return document
