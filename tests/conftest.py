"""Shared fixtures: an in-memory store with services and a small data set."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterator

import pytest

from forklift_rental.app import ForkliftRentalServices, bootstrap
from forklift_rental.domain.models import Contract, Forklift, User, UserRole


def make_contract(**overrides: object) -> Contract:
    values: dict[str, object] = {
        "id": "cont-1",
        "lessee_id": "less-1",
        "forklift_id": "fork-1",
        "start_date": "2023-07-01",
        "end_date": "2024-06-30",
        "rental_fee": 1_000_000,
        "payment_due_date": "2024-01-01",
        "rental_company_id": "comp-a",
    }
    values.update(overrides)
    return Contract(**values)


@pytest.fixture
def services(tmp_path) -> Iterator[ForkliftRentalServices]:
    container = bootstrap(pdf_dir=tmp_path / "pdfs")
    yield container
    container.close()


@pytest.fixture
def admin() -> User:
    return User(
        id="user-admin",
        email="admin@example.com",
        name="Admin",
        role=UserRole.OPERATION_TOOL_ADMIN,
    )


@pytest.fixture
def company(services, admin):
    return services.company_service.register(admin, "Hanbit Rental")


@pytest.fixture
def other_company(services, admin):
    return services.company_service.register(admin, "Daesung Lift")


@pytest.fixture
def manager(services, admin, company) -> User:
    return services.user_service.invite(
        admin,
        "manager@hanbit.example",
        UserRole.BUSINESS_MANAGER,
        rental_company_id=company.id,
    )


@pytest.fixture
def other_manager(services, admin, other_company) -> User:
    return services.user_service.invite(
        admin,
        "manager@daesung.example",
        UserRole.BUSINESS_MANAGER,
        rental_company_id=other_company.id,
    )


@pytest.fixture
def register_forklift(services) -> Callable[..., Forklift]:
    counter = iter(range(1, 1000))

    def _register(actor: User, **overrides: object) -> Forklift:
        values: dict[str, object] = {
            "manufacturer": "Doosan",
            "model_name": "D30S-7",
            "year": 2021,
            "tonnage": 3.0,
            "type": "Diesel",
            "chassis_number": f"CH-{next(counter):04d}",
            "purchase_date": "2021-03-02",
            "purchase_price": 30_000_000,
            "location": "Incheon yard",
        }
        values.update(overrides)
        return services.forklift_service.register(actor, **values)

    return _register


@pytest.fixture
def lessee(services):
    return services.lessee_service.register("Seoul Logistics", representative="Kim")


@pytest.fixture
def rented(services, manager, lessee, register_forklift):
    """A forklift rented out to ``lessee`` under a fresh contract."""
    forklift = register_forklift(manager)
    contract = services.contract_service.register(
        manager,
        lessee_id=lessee.id,
        forklift_id=forklift.id,
        start_date="2024-01-01",
        end_date=date(2024, 12, 31),
        rental_fee=1_000_000,
        payment_due_date="2024-02-05",
        tax_invoice_issue_date="2024-02-01",
        deposit=2_000_000,
        signed_on="2023-12-20",
    )
    return services.forklift_service.get(forklift.id), contract
