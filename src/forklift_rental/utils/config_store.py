"""Shared JSON configuration storage and user-tunable settings."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from forklift_rental.config import (
    CONTRACT_ONE_MONTH_WINDOW_DAYS,
    CONTRACT_TWO_MONTHS_WINDOW_DAYS,
    PDF_ISSUER,
)


@dataclass(frozen=True)
class AppSettings:
    """Settings persisted in the per-user config file."""

    pdf_issuer_name: str = PDF_ISSUER.name
    one_month_window_days: int = CONTRACT_ONE_MONTH_WINDOW_DAYS
    two_months_window_days: int = CONTRACT_TWO_MONTHS_WINDOW_DAYS


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Load configuration JSON data from disk."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    """Persist configuration JSON data to disk."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def load_app_settings(config_path: Path) -> AppSettings:
    """Load settings, falling back to defaults for missing or bad values."""
    data = load_config_data(config_path)
    defaults = AppSettings()
    issuer_name = data.get("pdf_issuer_name")
    one_month = _positive_int(
        data.get("one_month_window_days"), defaults.one_month_window_days
    )
    two_months = _positive_int(
        data.get("two_months_window_days"), defaults.two_months_window_days
    )
    if two_months < one_month:
        one_month, two_months = (
            defaults.one_month_window_days,
            defaults.two_months_window_days,
        )
    return AppSettings(
        pdf_issuer_name=(
            issuer_name
            if isinstance(issuer_name, str) and issuer_name.strip()
            else defaults.pdf_issuer_name
        ),
        one_month_window_days=one_month,
        two_months_window_days=two_months,
    )


def save_app_settings(config_path: Path, settings: AppSettings) -> None:
    """Persist settings, keeping unrelated keys already in the file."""
    payload = load_config_data(config_path)
    payload["pdf_issuer_name"] = settings.pdf_issuer_name
    payload["one_month_window_days"] = settings.one_month_window_days
    payload["two_months_window_days"] = settings.two_months_window_days
    save_config_data(config_path, payload)
