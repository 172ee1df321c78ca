"""Account invitations and listing."""

from __future__ import annotations

import re
import sqlite3
from typing import Optional

from forklift_rental.db.connection import transaction
from forklift_rental.domain.models import User, UserRole
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.company_repo import CompanyRepo
from forklift_rental.repositories.user_repo import UserRepo
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
from forklift_rental.services.validators import coerce_enum, optional_text

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserService:
    """Service for user accounts.

    Admins may invite any role. Business managers may only invite operators
    into their own company. Managers and operators always belong to a
    company; admins never do.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._repo = UserRepo(connection)
        self._company_repo = CompanyRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def invite(
        self,
        actor: Optional[User],
        email: str,
        role: UserRole | str,
        *,
        rental_company_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        require_access(actor, Feature.ACCOUNTS)
        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Enter a valid email address.", field="email")
        role = coerce_enum(UserRole, role, "role")
        rental_company_id = optional_text(rental_company_id)

        if actor_role(actor) == UserRole.BUSINESS_MANAGER:
            if role != UserRole.OPERATOR:
                raise PermissionDeniedError("Business managers may only invite operators.")
            if rental_company_id and rental_company_id != actor.rental_company_id:
                raise PermissionDeniedError(
                    "Business managers may only invite into their own company."
                )
            rental_company_id = actor.rental_company_id

        if role == UserRole.OPERATION_TOOL_ADMIN:
            if rental_company_id:
                raise ValidationError(
                    "Administrators are not scoped to a company.",
                    field="rental_company_id",
                )
        elif not rental_company_id:
            raise ValidationError(
                f"{role.value} accounts require a rental company.",
                field="rental_company_id",
            )
        elif not self._company_repo.get_by_id(rental_company_id):
            raise NotFoundError(f"Rental company {rental_company_id} not found.")

        if self._repo.get_by_email(email):
            raise ValidationError("This email address is already registered.", field="email")

        user = User(
            id=None,
            email=email,
            name=optional_text(name) or email.split("@")[0],
            role=role,
            rental_company_id=rental_company_id,
        )
        with transaction(self._connection):
            stored = self._repo.create(user)
        self._logger.info("Invited user id=%s role=%s", stored.id, role.value)
        return stored

    def get(self, user_id: str) -> User:
        user = self._repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found.")
        return user

    def list_users(self, actor: Optional[User]) -> list[User]:
        require_access(actor, Feature.ACCOUNTS)
        return visible_entities(actor, self._repo.list_all())

    def remove(self, actor: Optional[User], user_id: str) -> bool:
        require_access(actor, Feature.ACCOUNTS)
        user = self.get(user_id)
        if actor_role(actor) == UserRole.BUSINESS_MANAGER and (
            user.role != UserRole.OPERATOR
            or user.rental_company_id != actor.rental_company_id
        ):
            raise PermissionDeniedError("Business managers may only remove their operators.")
        with transaction(self._connection):
            self._repo.delete(user_id)
        self._logger.info("Removed user id=%s", user_id)
        return True
