"""Public commitments ledger ("planilha de empenhos") PDF."""

from __future__ import annotations

import io
from collections.abc import Sequence
from decimal import Decimal

from reportlab.lib.colors import HexColor
from reportlab.lib.units import mm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from orcamentor.domain.formatting import format_date, format_datetime, format_money, format_number
from orcamentor.domain.models import Commitment, CompanyProfile
from orcamentor.domain.status import CommitmentStatus
from orcamentor.rendering import layout
from orcamentor.rendering.images import load_image

HEADERS = ["STATUS", "ÓRGÃO / PREFEITURA", "Nº EMPENHO", "Nº PROCESSO", "DATA", "VALOR (R$)"]
COLUMN_WIDTHS = [22 * mm, 58 * mm, 26 * mm, 26 * mm, 20 * mm, 28 * mm]
LEDGER_TITLE = "PLANILHA DE EMPENHOS PÚBLICOS"
AUTHORITY_LOGO_SIZE = 6 * mm

STATUS_COLORS = {
    CommitmentStatus.COMMITTED: HexColor("#D97706"),
    CommitmentStatus.LIQUIDATED: HexColor("#2563EB"),
    CommitmentStatus.PAID: HexColor("#059669"),
    CommitmentStatus.CANCELLED: HexColor("#DC2626"),
}


def ledger_total(commitments: Sequence[Commitment]) -> Decimal:
    """Sum of exactly the rows printed in the ledger."""
    return sum((commitment.value for commitment in commitments), Decimal("0"))


def _authority_cell(commitment: Commitment, styles: dict) -> object:
    name = Paragraph(f"<b>{layout.text(commitment.authority)}</b>", styles["cell"])
    logo = load_image(commitment.authority_logo, label=f"authority logo of commitment {commitment.id}")
    if logo is None:
        return name
    nested = Table(
        [[logo.flowable(AUTHORITY_LOGO_SIZE, AUTHORITY_LOGO_SIZE), name]],
        colWidths=[AUTHORITY_LOGO_SIZE + 2 * mm, COLUMN_WIDTHS[1] - AUTHORITY_LOGO_SIZE - 8 * mm],
    )
    nested.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("RIGHTPADDING", (0, 0), (-1, -1), 2),
                ("TOPPADDING", (0, 0), (-1, -1), 0),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
            ]
        )
    )
    return nested


def _ledger_table(commitments: Sequence[Commitment], styles: dict) -> Table:
    rows: list[list[object]] = [HEADERS]
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), layout.SLATE),
        ("TEXTCOLOR", (0, 0), (-1, 0), layout.WHITE),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("FONTNAME", (-1, 1), (-1, -1), "Helvetica-Bold"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.4, layout.GRID),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for row, commitment in enumerate(commitments, start=1):
        rows.append(
            [
                commitment.status.label.upper(),
                _authority_cell(commitment, styles),
                commitment.commitment_number,
                commitment.process_number or "-",
                format_date(commitment.date),
                format_number(commitment.value),
            ]
        )
        style.append(("TEXTCOLOR", (0, row), (0, row), STATUS_COLORS[commitment.status]))
        style.append(("FONTNAME", (0, row), (0, row), "Helvetica-Bold"))
        if row % 2 == 0:
            style.append(("BACKGROUND", (0, row), (-1, row), layout.SLATE_LIGHT))

    if not commitments:
        rows.append(["Nenhum empenho encontrado", "", "", "", "", ""])
        style.append(("SPAN", (0, 1), (-1, 1)))
        style.append(("TEXTCOLOR", (0, 1), (-1, 1), layout.MUTED))

    table = Table(rows, colWidths=COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle(style))
    return table


def _totals_box(commitments: Sequence[Commitment]) -> Table:
    count = len(commitments)
    table = Table(
        [
            [f"TOTAL EM PLANILHA: {format_money(ledger_total(commitments))}"],
            [f"{count} empenho(s) listado(s)"],
        ],
        colWidths=[90 * mm],
        hAlign="RIGHT",
    )
    table.setStyle(
        TableStyle(
            [
                ("BOX", (0, 0), (-1, -1), 1, layout.SLATE),
                ("BACKGROUND", (0, 0), (-1, -1), layout.SLATE_LIGHT),
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 11),
                ("FONTSIZE", (0, 1), (-1, 1), 7),
                ("TEXTCOLOR", (0, 1), (-1, 1), layout.MUTED),
            ]
        )
    )
    return table


def render_commitments(
    commitments: Sequence[Commitment],
    profile: CompanyProfile,
    options: layout.RenderOptions,
    title: str = LEDGER_TITLE,
    search: str = "",
) -> bytes:
    """Render the given (already filtered) commitments as a ledger PDF."""
    generated_at = options.timestamp()
    color = layout.accent(options.accent_color, layout.SLATE)
    styles = layout.styles()
    logo = load_image(profile.logo, label="company logo")
    subtitle = [
        f"Data do Relatório: {format_datetime(generated_at)}",
        f"Identificação: {profile.document or '---'}",
    ]

    def on_page(canvas, doc) -> None:
        layout.draw_header_band(canvas, profile, logo, color, title, subtitle)
        layout.draw_page_number(canvas)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=layout.A4,
        leftMargin=layout.MARGIN,
        rightMargin=layout.MARGIN,
        topMargin=layout.HEADER_HEIGHT + 8 * mm,
        bottomMargin=18 * mm,
        title="Planilha de Empenhos",
        author=profile.name,
    )

    story: list = []
    if search.strip():
        story.append(Paragraph(f"Filtro aplicado: <b>{layout.text(search.strip())}</b>", styles["small"]))
        story.append(Spacer(1, 3 * mm))
    story.append(_ledger_table(commitments, styles))
    story.append(Spacer(1, 6 * mm))
    story.append(KeepTogether(_totals_box(commitments)))

    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
    return buffer.getvalue()
