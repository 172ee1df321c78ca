"""PDF generation utilities for overdue notices and settlement reports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from forklift_rental.config import PDF_ISSUER, UNKNOWN_LABEL, PdfIssuerInfo
from forklift_rental.domain.models import Contract, Lessee, OverdueCaseType
from forklift_rental.services.settlement_aggregator import SettlementSummary
from forklift_rental.utils.dates import format_currency


def _format_date(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").strftime("%Y.%m.%d")
    except ValueError:
        return value


def _case_label(case_type: OverdueCaseType) -> str:
    return {
        OverdueCaseType.RENTAL_FEE_OVERDUE: "Payment request",
        OverdueCaseType.DEPOSIT_DEDUCTED: "Deposit deducted",
        OverdueCaseType.CONTRACT_TERMINATED: "Termination notice",
        OverdueCaseType.CERTIFIED_MAIL: "Certified mail",
    }.get(case_type, case_type.value)


def _styles() -> dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="SectionTitle",
            parent=styles["Heading3"],
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name="SmallText",
            parent=styles["Normal"],
            fontSize=9,
            leading=12,
        )
    )
    return styles


def _document(output_path: Path, title: str, issuer: PdfIssuerInfo) -> SimpleDocTemplate:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=title,
        author=issuer.name,
    )


def _issuer_block(issuer: PdfIssuerInfo, styles) -> Paragraph:
    issuer_lines = [
        f"<b>Issuer:</b> {issuer.name}",
        f"<b>Contact:</b> {issuer.phone}",
        f"<b>Registration no.:</b> {issuer.registration_number}",
        f"<b>Address:</b> {issuer.address}",
    ]
    return Paragraph("<br/>".join(issuer_lines), styles["Normal"])


def _footer(styles) -> Paragraph:
    return Paragraph(
        f"Generated on {datetime.now().strftime('%Y.%m.%d %H:%M')}",
        styles["SmallText"],
    )


def _grid_table(rows: list[list[str]], col_widths: list[float], *, header: bool) -> Table:
    table = Table(rows, colWidths=col_widths)
    style = [
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
    ]
    if header:
        style.append(("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey))
        style.append(("ALIGN", (1, 1), (-1, -1), "RIGHT"))
    table.setStyle(TableStyle(style))
    return table


def generate_overdue_notice_pdf(
    contract: Contract,
    lessee: Optional[Lessee],
    overdue_fee: int,
    output_path: Path,
    *,
    as_of: str,
    notification_history: tuple[OverdueCaseType, ...] = (),
    issuer: PdfIssuerInfo = PDF_ISSUER,
) -> Path:
    """Generate the certified-mail notice for an overdue contract."""
    title = "NOTICE OF OVERDUE RENTAL FEE"
    doc = _document(output_path, title, issuer)
    styles = _styles()
    lessee_name = lessee.name if lessee else UNKNOWN_LABEL

    elements: list[object] = []
    elements.append(Paragraph(f"<b>{title}</b>", styles["Title"]))
    elements.append(Spacer(1, 8))
    elements.append(_issuer_block(issuer, styles))
    elements.append(Spacer(1, 10))

    recipient_lines = [
        "<b>Recipient</b>",
        f"Name: {lessee_name}",
        f"Representative: {(lessee.representative if lessee else None) or '-'}",
        f"Address: {(lessee.address if lessee else None) or '-'}",
    ]
    elements.append(Paragraph("<br/>".join(recipient_lines), styles["Normal"]))

    contract_rows = [
        ["Contract", contract.id or "-"],
        ["Rental period", f"{_format_date(contract.start_date)} ~ {_format_date(contract.end_date)}"],
        ["Payment due date", _format_date(contract.payment_due_date)],
        ["Rental fee", format_currency(contract.rental_fee)],
        ["Deposit", format_currency(contract.deposit or 0)],
        ["Amount owed", format_currency(overdue_fee)],
        ["Calculated as of", _format_date(as_of)],
    ]
    elements.append(Paragraph("Contract details", styles["SectionTitle"]))
    elements.append(_grid_table(contract_rows, [50 * mm, 110 * mm], header=False))

    if notification_history:
        history_rows = [["#", "Previous notices"]]
        for index, case_type in enumerate(notification_history, start=1):
            history_rows.append([str(index), _case_label(case_type)])
        elements.append(Paragraph("Notification history", styles["SectionTitle"]))
        elements.append(_grid_table(history_rows, [15 * mm, 145 * mm], header=True))

    terms = (
        "The rental fee above remains unpaid past its due date. Overdue interest "
        "accrues daily at the contractual annual rate until payment is received. "
        "If payment is not made, the contract may be terminated and the forklift "
        "recovered without further notice."
    )
    elements.append(Paragraph("Notice", styles["SectionTitle"]))
    elements.append(Paragraph(terms, styles["SmallText"]))
    elements.append(Spacer(1, 12))
    elements.append(_footer(styles))

    doc.build(elements)
    return output_path


def generate_settlement_report_pdf(
    summary: SettlementSummary,
    output_path: Path,
    *,
    period_label: str,
    issuer: PdfIssuerInfo = PDF_ISSUER,
) -> Path:
    """Generate a revenue/cost report from an aggregated settlement summary."""
    title = "SETTLEMENT REPORT"
    doc = _document(output_path, title, issuer)
    styles = _styles()

    elements: list[object] = []
    elements.append(Paragraph(f"<b>{title}</b>", styles["Title"]))
    elements.append(Paragraph(period_label, styles["Heading2"]))
    elements.append(Spacer(1, 8))
    elements.append(_issuer_block(issuer, styles))

    rows = [["Period", "Revenue", "Cost", "Net"]]
    for bucket in summary.buckets:
        rows.append(
            [
                bucket.bucket_key,
                format_currency(bucket.revenue),
                format_currency(bucket.cost),
                format_currency(bucket.net),
            ]
        )
    rows.append(
        [
            "Total",
            format_currency(summary.total_revenue),
            format_currency(summary.total_cost),
            format_currency(summary.net),
        ]
    )
    elements.append(Paragraph("Totals by period", styles["SectionTitle"]))
    elements.append(
        _grid_table(rows, [40 * mm, 40 * mm, 40 * mm, 40 * mm], header=True)
    )
    elements.append(Spacer(1, 12))
    elements.append(_footer(styles))

    doc.build(elements)
    return output_path
