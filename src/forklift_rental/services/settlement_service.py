"""Settlement ledger and dashboard summaries."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from forklift_rental.config import PDF_ISSUER, PdfIssuerInfo
from forklift_rental.db.connection import read_transaction, transaction
from forklift_rental.domain.models import (
    Document,
    DocumentType,
    SettlementItem,
    SettlementItemType,
    SettlementStatus,
    User,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.paths import get_exports_dir
from forklift_rental.repositories import contract_repo
from forklift_rental.repositories.document_repo import DocumentRepository
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.repositories.settlement_repo import SettlementRepo
from forklift_rental.services.access_filter import (
    Feature,
    require_access,
    visible_entities,
)
from forklift_rental.services.calendar_service import (
    CalendarEvent,
    events_between,
    events_on,
)
from forklift_rental.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forklift_rental.services.settlement_aggregator import (
    BucketGranularity,
    SettlementSummary,
    aggregate,
)
from forklift_rental.services.validators import coerce_enum, optional_text
from forklift_rental.utils.dates import (
    DateLike,
    now_iso,
    to_date,
    to_iso_date,
    validate_amount,
)
from forklift_rental.utils.documents import build_document_filename, file_checksum
from forklift_rental.utils.pdf_generator import generate_settlement_report_pdf


class SettlementService:
    """Service for settlement items and revenue/cost summaries."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        *,
        issuer: PdfIssuerInfo = PDF_ISSUER,
    ) -> None:
        self._connection = connection
        self._issuer = issuer
        self._repo = SettlementRepo(connection)
        self._forklift_repo = ForkliftRepo(connection)
        self._lessee_repo = LesseeRepo(connection)
        self._document_repo = DocumentRepository(connection)
        self._logger = get_logger(self.__class__.__name__)

    def record_item(
        self,
        actor: Optional[User],
        contract_id: str,
        item_type: SettlementItemType | str,
        amount: object,
        on: DateLike,
        *,
        status: SettlementStatus | str = SettlementStatus.PAID,
        description: Optional[str] = None,
    ) -> SettlementItem:
        item = SettlementItem(
            id=None,
            contract_id=contract_id,
            type=coerce_enum(SettlementItemType, item_type, "type"),
            amount=validate_amount(amount, "amount"),
            date=to_iso_date(on, "date"),
            status=coerce_enum(SettlementStatus, status, "status"),
            description=optional_text(description),
        )
        self._require_contract_scope(actor, contract_id)
        with transaction(self._connection):
            stored = self._repo.create(item)
        self._logger.info(
            "Recorded settlement item id=%s contract=%s type=%s",
            stored.id,
            contract_id,
            stored.type.value,
        )
        return stored

    def _require_contract_scope(
        self, actor: Optional[User], contract_id: str
    ) -> None:
        require_access(actor, Feature.CONTRACTS)
        contract = contract_repo.get_contract(contract_id, connection=self._connection)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")
        if not visible_entities(
            actor, [contract], forklifts=self._forklift_repo.list_all()
        ):
            raise PermissionDeniedError(
                f"Contract {contract_id} belongs to another rental company."
            )

    def _set_status(
        self, actor: Optional[User], item_id: str, status: SettlementStatus
    ) -> SettlementItem:
        require_access(actor, Feature.CONTRACTS)
        item = self._repo.get_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Settlement item {item_id} not found.")
        self._require_contract_scope(actor, item.contract_id)
        with transaction(self._connection):
            if not self._repo.set_status(item_id, status):
                raise NotFoundError(f"Settlement item {item_id} not found.")
        return self._repo.get_by_id(item_id)

    def mark_paid(self, actor: Optional[User], item_id: str) -> SettlementItem:
        return self._set_status(actor, item_id, SettlementStatus.PAID)

    def mark_overdue(self, actor: Optional[User], item_id: str) -> SettlementItem:
        return self._set_status(actor, item_id, SettlementStatus.OVERDUE)

    def list_items(
        self,
        actor: Optional[User],
        *,
        contract_id: Optional[str] = None,
    ) -> list[SettlementItem]:
        with read_transaction(self._connection):
            items = (
                self._repo.list_by_contract(contract_id)
                if contract_id
                else self._repo.list_all()
            )
            contracts = contract_repo.list_contracts(connection=self._connection)
            forklifts = self._forklift_repo.list_all()
        return visible_entities(actor, items, contracts=contracts, forklifts=forklifts)

    def dashboard_summary(
        self,
        actor: Optional[User],
        granularity: BucketGranularity | str = BucketGranularity.MONTH,
        *,
        item_type: Optional[SettlementItemType | str] = None,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> SettlementSummary:
        """Aggregate the items the actor may see, optionally within a date range."""
        require_access(actor, Feature.DASHBOARD)
        first = to_date(start, "start") if start is not None else None
        last = to_date(end, "end") if end is not None else None
        if first and last and last < first:
            raise ValidationError("end must not be before start.", field="end")
        items = [
            item
            for item in self.list_items(actor)
            if (first is None or to_date(item.date, "date") >= first)
            and (last is None or to_date(item.date, "date") <= last)
        ]
        return aggregate(items, granularity, item_type=item_type)

    def generate_report(
        self,
        actor: Optional[User],
        output_dir: Optional[Path] = None,
        granularity: BucketGranularity | str = BucketGranularity.MONTH,
        *,
        period_label: str = "All periods",
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Document:
        summary = self.dashboard_summary(actor, granularity, start=start, end=end)
        generated_at = now_iso()
        output_path = (output_dir or get_exports_dir()) / build_document_filename(
            period_label, generated_at[:10], DocumentType.SETTLEMENT_REPORT
        )
        generate_settlement_report_pdf(
            summary, output_path, period_label=period_label, issuer=self._issuer
        )
        try:
            with transaction(self._connection):
                document = self._document_repo.add(
                    Document(
                        id=None,
                        contract_id=None,
                        doc_type=DocumentType.SETTLEMENT_REPORT,
                        file_path=str(output_path),
                        generated_at=generated_at,
                        checksum=file_checksum(output_path),
                    )
                )
        except Exception:
            output_path.unlink(missing_ok=True)
            raise
        self._logger.info("Settlement report written to %s", output_path)
        return document

    def _calendar_inputs(self, actor: Optional[User]):
        require_access(actor, Feature.SETTLEMENT_CALENDAR)
        with read_transaction(self._connection):
            contracts = contract_repo.list_contracts(connection=self._connection)
            forklifts = self._forklift_repo.list_all()
            lessees = self._lessee_repo.list_all()
        return visible_entities(actor, contracts, forklifts=forklifts), lessees

    def calendar_events(
        self,
        actor: Optional[User],
        day: DateLike,
        *,
        lessee_id: Optional[str] = None,
        contract_id: Optional[str] = None,
    ) -> list[CalendarEvent]:
        contracts, lessees = self._calendar_inputs(actor)
        return events_on(
            day, contracts, lessees, lessee_id=lessee_id, contract_id=contract_id
        )

    def calendar_range(
        self,
        actor: Optional[User],
        start: DateLike,
        end: DateLike,
        *,
        lessee_id: Optional[str] = None,
        contract_id: Optional[str] = None,
    ) -> dict[str, list[CalendarEvent]]:
        contracts, lessees = self._calendar_inputs(actor)
        return events_between(
            start,
            end,
            contracts,
            lessees,
            lessee_id=lessee_id,
            contract_id=contract_id,
        )
