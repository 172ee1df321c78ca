"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from forklift_rental.db.connection import transaction
from forklift_rental.logging_config import get_logger


@dataclass(frozen=True)
class Migration:
    version: int
    script: str
    requires_foreign_keys_off: bool = False


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS rental_companies (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            registration_number TEXT,
            address TEXT,
            representative TEXT,
            phone_number TEXT,
            status TEXT NOT NULL
                CHECK (status IN ('PREPARING', 'ACTIVE', 'SUSPENDED')),
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS forklifts (
            id TEXT PRIMARY KEY,
            manufacturer TEXT NOT NULL,
            model_name TEXT NOT NULL,
            year INTEGER NOT NULL,
            tonnage REAL NOT NULL CHECK (tonnage > 0),
            type TEXT NOT NULL,
            chassis_number TEXT NOT NULL UNIQUE,
            gps_serial_number TEXT,
            purchase_date TEXT,
            purchase_price REAL NOT NULL DEFAULT 0 CHECK (purchase_price >= 0),
            withdrawal_date TEXT,
            location TEXT,
            notes TEXT,
            management_status TEXT NOT NULL,
            operation_status TEXT,
            current_contract_id TEXT,
            rental_company_id TEXT NOT NULL,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS lessees (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            registration_number TEXT,
            address TEXT,
            representative TEXT,
            phone_number TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS contracts (
            id TEXT PRIMARY KEY,
            lessee_id TEXT NOT NULL,
            forklift_id TEXT NOT NULL,
            contract_pdf_url TEXT,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            contract_type TEXT NOT NULL,
            status TEXT NOT NULL,
            rental_fee REAL NOT NULL CHECK (rental_fee >= 0),
            shipping_cost REAL,
            deposit REAL,
            repair_cost REAL,
            commission REAL,
            early_termination_penalty REAL,
            tax_invoice_issue_date TEXT,
            payment_due_date TEXT NOT NULL,
            payment_method TEXT NOT NULL,
            rental_company_id TEXT,
            created_at TEXT,
            updated_at TEXT,
            CHECK (end_date >= start_date)
        );

        CREATE TABLE IF NOT EXISTS contract_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            contract_id TEXT NOT NULL,
            type TEXT NOT NULL,
            date TEXT NOT NULL,
            description TEXT,
            FOREIGN KEY (contract_id) REFERENCES contracts(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS settlement_items (
            id TEXT PRIMARY KEY,
            contract_id TEXT NOT NULL,
            type TEXT NOT NULL,
            amount REAL NOT NULL CHECK (amount >= 0),
            date TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('PAID', 'OVERDUE')),
            description TEXT
        );

        CREATE TABLE IF NOT EXISTS overdue_records (
            id TEXT PRIMARY KEY,
            contract_id TEXT NOT NULL UNIQUE,
            accumulated_overdue_fee INTEGER NOT NULL DEFAULT 0,
            last_notification_date TEXT
        );

        CREATE TABLE IF NOT EXISTS overdue_notifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            overdue_record_id TEXT NOT NULL,
            case_type TEXT NOT NULL,
            notified_at TEXT,
            FOREIGN KEY (overdue_record_id)
                REFERENCES overdue_records(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            role TEXT NOT NULL
                CHECK (role IN ('OPERATION_TOOL_ADMIN', 'BUSINESS_MANAGER', 'OPERATOR')),
            rental_company_id TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_forklifts_company
            ON forklifts(rental_company_id);
        CREATE INDEX IF NOT EXISTS idx_contracts_company
            ON contracts(rental_company_id);
        CREATE INDEX IF NOT EXISTS idx_contracts_lessee
            ON contracts(lessee_id);
        CREATE INDEX IF NOT EXISTS idx_contracts_payment_due_date
            ON contracts(payment_due_date);
        CREATE INDEX IF NOT EXISTS idx_contract_history_contract
            ON contract_history(contract_id);
        CREATE INDEX IF NOT EXISTS idx_settlement_items_contract
            ON settlement_items(contract_id);
        CREATE INDEX IF NOT EXISTS idx_settlement_items_date
            ON settlement_items(date);
        """,
    ),
    Migration(
        version=2,
        script="""
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            contract_id TEXT,
            doc_type TEXT NOT NULL
                CHECK (doc_type IN ('overdue_notice', 'settlement_report')),
            file_path TEXT NOT NULL,
            generated_at TEXT NOT NULL,
            checksum TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_documents_contract_generated_at
            ON documents(contract_id, generated_at);
        """,
    ),
]


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def apply_migrations(connection: sqlite3.Connection) -> int:
    """Apply pending database migrations and return the resulting version."""
    logger = get_logger(__name__)
    with transaction(connection):
        current_version = _fetch_schema_version(connection)

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue

        if migration.requires_foreign_keys_off:
            connection.execute("PRAGMA foreign_keys = OFF;")

        with transaction(connection):
            connection.executescript(migration.script)
            connection.execute(
                "UPDATE app_meta SET schema_version = ?",
                (migration.version,),
            )

        if migration.requires_foreign_keys_off:
            connection.execute("PRAGMA foreign_keys = ON;")

        logger.info("Applied schema migration v%s", migration.version)
        current_version = migration.version
    return current_version
