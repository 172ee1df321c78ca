"""Forklift registration, status transitions and remote control."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, Mapping, Optional

from dateutil.relativedelta import relativedelta

from forklift_rental.config import FORKLIFT_MIN_YEAR, FORKLIFT_SERVICE_LIFE_YEARS
from forklift_rental.db.connection import transaction
from forklift_rental.domain.models import (
    Forklift,
    ForkliftManagementStatus,
    User,
    UserRole,
)
from forklift_rental.domain.transitions import (
    FORKLIFT_MANAGEMENT_TRANSITIONS,
    FORKLIFT_OPERATION_TRANSITIONS,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.services.access_filter import (
    Feature,
    actor_role,
    require_access,
    visible_entities,
)
from forklift_rental.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forklift_rental.services.validators import coerce_enum, optional_text, require_text
from forklift_rental.utils.dates import to_date, to_decimal, validate_amount

_CLEARS_CONTRACT = {"store", "dispose"}


def _year(value: object, field: str) -> int:
    amount = to_decimal(value, field)
    if amount != amount.to_integral_value():
        raise ValidationError(f"{field} must be a whole year.", field=field)
    year = int(amount)
    if year < FORKLIFT_MIN_YEAR:
        raise ValidationError(f"{field} must be {FORKLIFT_MIN_YEAR} or later.", field=field)
    if year > date.today().year:
        raise ValidationError(f"{field} must not be in the future.", field=field)
    return year


def _tonnage(value: object, field: str) -> float:
    amount = to_decimal(value, field)
    if amount < to_decimal("0.1", field):
        raise ValidationError(f"{field} must be at least 0.1.", field=field)
    return float(amount)


def _price(value: object, field: str) -> float:
    if value is None or value == "":
        return 0.0
    return validate_amount(value, field)


_FIELD_PARSERS: dict[str, Callable[[object, str], object]] = {
    "manufacturer": require_text,
    "model_name": require_text,
    "year": _year,
    "tonnage": _tonnage,
    "type": require_text,
    "chassis_number": require_text,
    "purchase_date": lambda value, field: to_date(value, field),
    "purchase_price": _price,
    "location": require_text,
}


def validate_forklift_values(
    values: Mapping[str, object],
    *,
    rental_company_id: str,
) -> tuple[Optional[Forklift], list[ValidationError]]:
    """Validate raw field values and build a Forklift, collecting every error.

    A missing withdrawal date defaults to the end of the service life
    counted from the purchase date.
    """
    parsed: dict[str, object] = {}
    errors: list[ValidationError] = []
    for field, parse in _FIELD_PARSERS.items():
        try:
            parsed[field] = parse(values.get(field), field)
        except ValidationError as exc:
            errors.append(exc)

    try:
        status = values.get("management_status") or ForkliftManagementStatus.IN_STORAGE
        parsed["management_status"] = coerce_enum(
            ForkliftManagementStatus, status, "management_status"
        )
    except ValidationError as exc:
        errors.append(exc)

    withdrawal = values.get("withdrawal_date")
    purchase = parsed.get("purchase_date")
    try:
        if withdrawal in (None, ""):
            parsed["withdrawal_date"] = (
                purchase + relativedelta(years=FORKLIFT_SERVICE_LIFE_YEARS)
                if isinstance(purchase, date)
                else None
            )
        else:
            parsed["withdrawal_date"] = to_date(withdrawal, "withdrawal_date")
            if isinstance(purchase, date) and parsed["withdrawal_date"] < purchase:
                raise ValidationError(
                    "withdrawal_date must not be before purchase_date.",
                    field="withdrawal_date",
                )
    except ValidationError as exc:
        errors.append(exc)

    if errors:
        return None, errors
    return (
        Forklift(
            id=None,
            manufacturer=parsed["manufacturer"],
            model_name=parsed["model_name"],
            year=parsed["year"],
            tonnage=parsed["tonnage"],
            type=parsed["type"],
            chassis_number=parsed["chassis_number"],
            rental_company_id=rental_company_id,
            purchase_date=parsed["purchase_date"].isoformat(),
            purchase_price=parsed["purchase_price"],
            withdrawal_date=parsed["withdrawal_date"].isoformat(),
            location=parsed["location"],
            gps_serial_number=optional_text(values.get("gps_serial_number")),
            notes=optional_text(values.get("notes")),
            management_status=parsed["management_status"],
        ),
        [],
    )


class ForkliftService:
    """Service for forklift assets."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._repo = ForkliftRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def _registration_company(self, actor: Optional[User]) -> str:
        require_access(actor, Feature.FORKLIFT_REGISTRATION)
        company_id = getattr(actor, "rental_company_id", None)
        if not company_id:
            raise PermissionDeniedError("Forklift registration requires a company.")
        return company_id

    def register(self, actor: Optional[User], **values: object) -> Forklift:
        """Register one forklift under the registering manager's company."""
        company_id = self._registration_company(actor)
        forklift, errors = validate_forklift_values(
            values, rental_company_id=company_id
        )
        if errors:
            raise errors[0]
        if self._repo.get_by_chassis_number(forklift.chassis_number):
            raise ValidationError(
                f"Chassis number {forklift.chassis_number} is already registered.",
                field="chassis_number",
            )
        with transaction(self._connection):
            stored = self._repo.create(forklift)
        self._logger.info(
            "Registered forklift id=%s chassis=%s", stored.id, stored.chassis_number
        )
        return stored

    def import_forklifts(
        self, actor: Optional[User], forklifts: Iterable[Forklift]
    ) -> list[Forklift]:
        """Insert parsed forklifts atomically under the actor's company."""
        company_id = self._registration_company(actor)
        batch = list(forklifts)
        seen: set[str] = set()
        for forklift in batch:
            chassis = forklift.chassis_number
            if chassis in seen or self._repo.get_by_chassis_number(chassis):
                raise ValidationError(
                    f"Chassis number {chassis} is already registered.",
                    field="chassis_number",
                )
            seen.add(chassis)
        with transaction(self._connection):
            created = [
                self._repo.create(
                    replace(forklift, id=None, rental_company_id=company_id)
                )
                for forklift in batch
            ]
        self._logger.info("Imported %s forklifts company=%s", len(created), company_id)
        return created

    def get(self, forklift_id: str) -> Forklift:
        forklift = self._repo.get_by_id(forklift_id)
        if not forklift:
            raise NotFoundError(f"Forklift {forklift_id} not found.")
        return forklift

    def list_forklifts(
        self,
        actor: Optional[User],
        *,
        management_status: Optional[ForkliftManagementStatus] = None,
    ) -> list[Forklift]:
        forklifts = visible_entities(actor, self._repo.list_all())
        if management_status is not None:
            forklifts = [
                forklift
                for forklift in forklifts
                if forklift.management_status == management_status
            ]
        return forklifts

    def _visible_forklift(
        self, actor: Optional[User], forklift_id: str, feature: Feature
    ) -> Forklift:
        require_access(actor, feature)
        forklift = self.get(forklift_id)
        if not visible_entities(actor, [forklift]):
            raise PermissionDeniedError(
                f"Forklift {forklift_id} belongs to another rental company."
            )
        return forklift

    def apply_management_transition(
        self, actor: Optional[User], forklift_id: str, name: str
    ) -> Forklift:
        forklift = self._visible_forklift(
            actor, forklift_id, Feature.FORKLIFT_REGISTRATION
        )
        target = FORKLIFT_MANAGEMENT_TRANSITIONS.apply(forklift.management_status, name)
        with transaction(self._connection):
            if name in _CLEARS_CONTRACT:
                self._repo.set_management_status(
                    forklift_id, target, current_contract_id=None
                )
            else:
                self._repo.set_management_status(forklift_id, target)
        self._logger.info(
            "Forklift id=%s %s: %s -> %s",
            forklift_id,
            name,
            forklift.management_status.value,
            target.value,
        )
        return self.get(forklift_id)

    def apply_operation_transition(
        self, actor: Optional[User], forklift_id: str, name: str
    ) -> Forklift:
        forklift = self._visible_forklift(actor, forklift_id, Feature.FORKLIFTS)
        return self._apply_operation(forklift, name)

    def _apply_operation(self, forklift: Forklift, name: str) -> Forklift:
        target = FORKLIFT_OPERATION_TRANSITIONS.apply(forklift.operation_status, name)
        with transaction(self._connection):
            self._repo.set_operation_status(forklift.id, target)
        self._logger.info("Forklift id=%s %s -> %s", forklift.id, name, target.value)
        return self.get(forklift.id)

    def _require_remote_control(
        self, actor: Optional[User], forklift_id: str
    ) -> Forklift:
        forklift = self.get(forklift_id)
        if actor_role(actor) != UserRole.BUSINESS_MANAGER or not visible_entities(
            actor, [forklift]
        ):
            raise PermissionDeniedError("Remote control is not allowed.")
        return forklift

    def remote_start(self, actor: Optional[User], forklift_id: str) -> Forklift:
        forklift = self._require_remote_control(actor, forklift_id)
        return self._apply_operation(forklift, "remote_start")

    def remote_stop(self, actor: Optional[User], forklift_id: str) -> Forklift:
        forklift = self._require_remote_control(actor, forklift_id)
        return self._apply_operation(forklift, "remote_stop")

    def delete(self, actor: Optional[User], forklift_id: str) -> bool:
        self._visible_forklift(actor, forklift_id, Feature.FORKLIFT_REGISTRATION)
        with transaction(self._connection):
            deleted = self._repo.delete(forklift_id)
        if not deleted:
            raise NotFoundError(f"Forklift {forklift_id} not found.")
        return True
