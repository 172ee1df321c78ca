"""Document file naming and fingerprinting."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Optional

from forklift_rental.domain.models import DocumentType


def sanitize_filename(value: str) -> str:
    """Normalize text to be safe for filenames."""
    cleaned = " ".join(value.strip().split())
    cleaned = cleaned.replace(" ", "_")
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "", cleaned)
    return cleaned or "Document"


def build_document_filename(
    subject: str,
    reference_date: Optional[str],
    doc_type: DocumentType,
) -> str:
    """Build default filename for a document."""
    base_name = sanitize_filename(subject)
    label_map = {
        DocumentType.OVERDUE_NOTICE: "Overdue_Notice",
        DocumentType.SETTLEMENT_REPORT: "Settlement_Report",
    }
    label = label_map.get(doc_type, doc_type.value)
    if reference_date:
        return f"{base_name}_{reference_date}_{label}.pdf"
    return f"{base_name}_{label}.pdf"


def file_checksum(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()
