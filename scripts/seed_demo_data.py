"""Seed demo data into the ForkliftRental SQLite database."""

from __future__ import annotations

import argparse
import random
import sys
from datetime import date, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from forklift_rental.app import bootstrap
from forklift_rental.domain.models import (
    ContractType,
    PaymentMethod,
    SettlementItemType,
    SettlementStatus,
    User,
    UserRole,
)
from forklift_rental.logging_config import configure_logging
from forklift_rental.paths import get_config_path, get_db_path

SEED_TAG = "Seed Demo"
DEFAULT_SEED = 42

SEED_ADMIN = User(
    id=None,
    email="seed-admin@example.com",
    name="Seed Admin",
    role=UserRole.OPERATION_TOOL_ADMIN,
)

COMPANIES = ["Hanbit Forklift Rental", "Daesung Lift Service"]
MODELS = [
    ("Doosan", "D30S-7", "Diesel", 3.0),
    ("Hyundai", "25B-9", "Battery", 2.5),
    ("Clark", "GTS25", "LPG", 2.5),
    ("Toyota", "8FBE20", "Battery", 2.0),
]
LESSEES = [
    "Seoul Logistics",
    "Incheon Port Services",
    "Busan Cold Chain",
    "Daejeon Steel",
    "Gwangju Foods",
]
LOCATIONS = ["Incheon yard", "Pyeongtaek yard", "Busan yard"]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo data for ForkliftRental")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Database path (defaults to the per-user database).",
    )
    parser.add_argument(
        "--forklifts-per-company",
        type=int,
        default=6,
        help="Forklifts registered for each company.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    return parser.parse_args()


def _chassis(rng: random.Random, prefix: str) -> str:
    return f"{prefix}-{rng.randint(100000, 999999)}"


def main() -> None:
    args = _parse_args()
    configure_logging()
    rng = random.Random(args.seed)
    db_path = args.db or get_db_path()
    services = bootstrap(db_path, config_path=get_config_path())
    today = date.today()
    counts = {"companies": 0, "forklifts": 0, "contracts": 0, "items": 0}
    try:
        if any(company.name.endswith(SEED_TAG) for company in services.store.companies.list_all()):
            print("Seed data already present; nothing to do.")
            return

        lessees = [services.lessee_service.register(name) for name in LESSEES]
        for company_name in COMPANIES:
            company = services.company_service.register(
                SEED_ADMIN, f"{company_name} {SEED_TAG}", status="ACTIVE"
            )
            counts["companies"] += 1
            manager = services.user_service.invite(
                SEED_ADMIN,
                f"manager.{company.id}@example.com",
                UserRole.BUSINESS_MANAGER,
                rental_company_id=company.id,
            )
            for index in range(args.forklifts_per_company):
                manufacturer, model, kind, tonnage = rng.choice(MODELS)
                purchased = today - timedelta(days=rng.randint(200, 2000))
                forklift = services.forklift_service.register(
                    manager,
                    manufacturer=manufacturer,
                    model_name=model,
                    year=purchased.year,
                    tonnage=tonnage,
                    type=kind,
                    chassis_number=_chassis(rng, manufacturer[:2].upper()),
                    purchase_date=purchased.isoformat(),
                    purchase_price=rng.randrange(18_000_000, 45_000_000, 500_000),
                    location=rng.choice(LOCATIONS),
                )
                counts["forklifts"] += 1
                if index % 3 == 2:
                    continue

                start = today - timedelta(days=rng.randint(30, 300))
                end = start + timedelta(days=rng.choice([90, 180, 365]))
                due = today + timedelta(days=rng.randint(-20, 20))
                fee = rng.randrange(600_000, 1_800_000, 50_000)
                contract = services.contract_service.register(
                    manager,
                    lessee_id=rng.choice(lessees).id,
                    forklift_id=forklift.id,
                    start_date=start,
                    end_date=end,
                    rental_fee=fee,
                    payment_due_date=due,
                    tax_invoice_issue_date=due - timedelta(days=5),
                    contract_type=ContractType.LONG_TERM
                    if (end - start).days >= 180
                    else ContractType.SHORT_TERM,
                    payment_method=rng.choice(list(PaymentMethod)),
                    deposit=fee * 2,
                    shipping_cost=rng.choice([None, 150_000, 250_000]),
                    signed_on=start,
                )
                counts["contracts"] += 1
                services.settlement_service.record_item(
                    manager,
                    contract.id,
                    SettlementItemType.RENTAL_FEE,
                    fee,
                    due,
                    status=SettlementStatus.OVERDUE if due < today else SettlementStatus.PAID,
                    description=SEED_TAG,
                )
                services.settlement_service.record_item(
                    manager,
                    contract.id,
                    SettlementItemType.DEPOSIT,
                    fee * 2,
                    start,
                    description=SEED_TAG,
                )
                counts["items"] += 2
                if contract.shipping_cost:
                    services.settlement_service.record_item(
                        manager,
                        contract.id,
                        SettlementItemType.SHIPPING_COST,
                        contract.shipping_cost,
                        start,
                        description=SEED_TAG,
                    )
                    counts["items"] += 1

        overdue = services.overdue_service.reconcile(today)
        print("\nSeed completed:")
        print(f"Companies: {counts['companies']}")
        print(f"Forklifts: {counts['forklifts']}")
        print(f"Contracts: {counts['contracts']}")
        print(f"Settlement items: {counts['items']}")
        print(f"Overdue records: {len(overdue)}")
        print(f"Database: {db_path}")
    finally:
        services.close()


if __name__ == "__main__":
    main()
