"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from forklift_rental.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "ForkliftRental"
DB_FILENAME = "forklift_rental.db"
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
PDF_DIRNAME = "pdfs"
EXPORTS_DIRNAME = "exports"
CONFIG_FILENAME = "config.json"

# Overdue interest: nominal annual rate scaled linearly per late day.
OVERDUE_ANNUAL_RATE = Decimal("0.20")
DAYS_PER_YEAR = 365

UNKNOWN_LABEL = "Unknown"
CURRENCY_CODE = "KRW"

CONTRACT_ONE_MONTH_WINDOW_DAYS = 30
CONTRACT_TWO_MONTHS_WINDOW_DAYS = 60

FORKLIFT_MIN_YEAR = 1900
FORKLIFT_SERVICE_LIFE_YEARS = 10


@dataclass(frozen=True)
class PdfIssuerInfo:
    """Issuer information printed on notices and reports."""

    name: str
    phone: str
    registration_number: str
    address: str


PDF_ISSUER = PdfIssuerInfo(
    name="Forklift Rental Operations",
    phone="02-0000-0000",
    registration_number="000-00-00000",
    address="123 Example-ro, Seoul",
)


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for ForkliftRental."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    overdue_annual_rate: Decimal = OVERDUE_ANNUAL_RATE
    days_per_year: int = DAYS_PER_YEAR
