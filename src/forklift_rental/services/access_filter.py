"""Role and company scoping rules for actors."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence, TypeVar

from forklift_rental.domain.models import (
    Contract,
    Forklift,
    Lessee,
    OverdueRecord,
    RentalCompany,
    SettlementItem,
    User,
    UserRole,
)
from forklift_rental.services.errors import PermissionDeniedError

T = TypeVar("T")


class Feature(str, Enum):
    DASHBOARD = "dashboard"
    RENTAL_COMPANIES = "rental_companies"
    ACCOUNTS = "accounts"
    FORKLIFTS = "forklifts"
    FORKLIFT_REGISTRATION = "forklift_registration"
    CONTRACTS = "contracts"
    CONTRACT_REGISTRATION = "contract_registration"
    LESSEES = "lessees"
    SETTLEMENT_CALENDAR = "settlement_calendar"
    OVERDUE_MANAGEMENT = "overdue_management"


_ALL_ROLES = frozenset(UserRole)

FEATURE_ROLES: dict[Feature, frozenset[UserRole]] = {
    Feature.DASHBOARD: _ALL_ROLES,
    Feature.RENTAL_COMPANIES: frozenset({UserRole.OPERATION_TOOL_ADMIN}),
    Feature.ACCOUNTS: frozenset(
        {UserRole.OPERATION_TOOL_ADMIN, UserRole.BUSINESS_MANAGER}
    ),
    Feature.FORKLIFTS: _ALL_ROLES,
    Feature.FORKLIFT_REGISTRATION: frozenset({UserRole.BUSINESS_MANAGER}),
    Feature.CONTRACTS: frozenset(
        {UserRole.OPERATION_TOOL_ADMIN, UserRole.BUSINESS_MANAGER}
    ),
    Feature.CONTRACT_REGISTRATION: frozenset({UserRole.BUSINESS_MANAGER}),
    Feature.LESSEES: frozenset(
        {UserRole.OPERATION_TOOL_ADMIN, UserRole.BUSINESS_MANAGER}
    ),
    Feature.SETTLEMENT_CALENDAR: frozenset({UserRole.BUSINESS_MANAGER}),
    Feature.OVERDUE_MANAGEMENT: frozenset({UserRole.BUSINESS_MANAGER}),
}


def actor_role(actor: Optional[User]) -> Optional[UserRole]:
    """Return the actor's recognised role, or None."""
    if actor is None:
        return None
    role = getattr(actor, "role", None)
    try:
        return UserRole(role)
    except (TypeError, ValueError):
        return None


def is_admin(actor: Optional[User]) -> bool:
    return actor_role(actor) == UserRole.OPERATION_TOOL_ADMIN


def can_access(actor: Optional[User], feature: Feature | str) -> bool:
    role = actor_role(actor)
    if role is None:
        return False
    try:
        allowed = FEATURE_ROLES[Feature(feature)]
    except ValueError:
        return False
    return role in allowed


def require_access(actor: Optional[User], feature: Feature | str) -> None:
    if not can_access(actor, feature):
        name = feature.value if isinstance(feature, Feature) else feature
        raise PermissionDeniedError(f"Access to {name} is not allowed.")


class CompanyResolver:
    """Resolves the owning rental company of any entity."""

    def __init__(
        self,
        contracts: Iterable[Contract] = (),
        forklifts: Iterable[Forklift] = (),
    ) -> None:
        self._forklift_company = {
            forklift.id: forklift.rental_company_id for forklift in forklifts
        }
        self._contract_company: dict[Optional[str], Optional[str]] = {}
        self._lessee_companies: dict[str, set[str]] = {}
        for contract in contracts:
            company_id = self._contract_company_id(contract)
            self._contract_company[contract.id] = company_id
            if company_id is not None:
                self._lessee_companies.setdefault(contract.lessee_id, set()).add(
                    company_id
                )

    def _contract_company_id(self, contract: Contract) -> Optional[str]:
        if contract.rental_company_id:
            return contract.rental_company_id
        return self._forklift_company.get(contract.forklift_id)

    def companies_of(self, entity: object) -> frozenset[str]:
        """Return every company id the entity belongs to (empty when dangling)."""
        if isinstance(entity, RentalCompany):
            ids = {entity.id}
        elif isinstance(entity, Contract):
            ids = {self._contract_company_id(entity)}
        elif isinstance(entity, (Forklift, User)):
            ids = {entity.rental_company_id}
        elif isinstance(entity, (SettlementItem, OverdueRecord)):
            ids = {self._contract_company.get(entity.contract_id)}
        elif isinstance(entity, Lessee):
            ids = set(self._lessee_companies.get(entity.id, ()))
        else:
            ids = {getattr(entity, "rental_company_id", None)}
        return frozenset(company_id for company_id in ids if company_id)


def visible_entities(
    actor: Optional[User],
    entities: Iterable[T],
    *,
    contracts: Sequence[Contract] = (),
    forklifts: Sequence[Forklift] = (),
) -> list[T]:
    """Return the entities the actor may see, preserving input order.

    Admins see everything. Scoped roles see only entities whose company,
    resolved directly or through ``contracts``/``forklifts``, equals their
    own. Missing actors, unknown roles and scoped actors without a company
    see nothing.
    """
    role = actor_role(actor)
    if role is None:
        return []
    if role == UserRole.OPERATION_TOOL_ADMIN:
        return list(entities)
    company_id = getattr(actor, "rental_company_id", None)
    if not company_id:
        return []
    resolver = CompanyResolver(contracts, forklifts)
    return [
        entity for entity in entities if company_id in resolver.companies_of(entity)
    ]
