"""Quote ("orçamento") PDF."""

from __future__ import annotations

import io
import logging

from reportlab.lib.units import mm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from orcamentor.domain.formatting import format_date, format_money
from orcamentor.domain.models import Catalog, Client, CompanyProfile, Quote, Service
from orcamentor.domain.pricing import resolve_line_price, type_tag
from orcamentor.domain.totals import ZERO, items_sum, recompute_total
from orcamentor.rendering import layout
from orcamentor.rendering.images import EmbeddedImage, load_image

logger = logging.getLogger(__name__)

COLUMN_WIDTHS = [22 * mm, 80 * mm, 14 * mm, 31 * mm, 33 * mm]
THUMBNAIL_SIZE = 11 * mm


def _description_cell(name: str, detail: str, thumbnail: EmbeddedImage | None, styles: dict) -> object:
    label = f"<b>{layout.text(name)}</b>"
    if detail:
        label += f"<br/><font size=7 color='#64748B'>{layout.text(detail)}</font>"
    paragraph = Paragraph(label, styles["cell"])
    if thumbnail is None:
        return paragraph
    nested = Table(
        [[thumbnail.flowable(THUMBNAIL_SIZE, THUMBNAIL_SIZE), paragraph]],
        colWidths=[THUMBNAIL_SIZE + 2 * mm, COLUMN_WIDTHS[1] - THUMBNAIL_SIZE - 8 * mm],
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


def _items_table(quote: Quote, catalog: Catalog, styles: dict) -> Table:
    header = ["Tipo", "Descrição do Item", "Qtd", "Unitário", "Total"]
    rows: list[list[object]] = [header]
    for index, item in enumerate(quote.items, start=1):
        line = resolve_line_price(item, catalog)
        image_uri = item.image
        if image_uri is None and isinstance(line.source, Service):
            image_uri = line.source.image
        thumbnail = load_image(image_uri, label=f"image for line {index} of quote {quote.id}")
        detail = line.source.description if line.source is not None else ""
        rows.append(
            [
                Paragraph(type_tag(item), styles["label"]),
                _description_cell(line.name, detail, thumbnail, styles),
                str(item.quantity),
                format_money(line.unit_price),
                format_money(line.subtotal),
            ]
        )
        if not line.source_found:
            logger.debug("Quote %s line %d references missing %s %s", quote.id, index, item.type, item.item_id)

    if len(rows) == 1:
        rows.append(["", Paragraph("<i>Nenhum item</i>", styles["small"]), "", "", ""])

    table = Table(rows, colWidths=COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), layout.SLATE_LIGHT),
                ("TEXTCOLOR", (0, 0), (-1, 0), layout.MUTED),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8.5),
                ("ALIGN", (2, 0), (2, -1), "CENTER"),
                ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (-1, 1), (-1, -1), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LINEBELOW", (0, 0), (-1, -1), 0.5, layout.GRID),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    return table


def _totals_table(subtotal, discount, total, color) -> Table:
    rows = [["Subtotal dos itens", format_money(subtotal)]]
    if discount > ZERO:
        rows.append(["Desconto", f"- {format_money(discount)}"])
    rows.append(["TOTAL FINAL", format_money(total)])
    table = Table(rows, colWidths=[40 * mm, 38 * mm], hAlign="RIGHT")
    table.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("TEXTCOLOR", (0, 0), (-1, -2), layout.MUTED),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, -1), (-1, -1), 12),
                ("TEXTCOLOR", (0, -1), (-1, -1), color),
                ("LINEABOVE", (0, -1), (-1, -1), 1, color),
                ("TOPPADDING", (0, -1), (-1, -1), 6),
            ]
        )
    )
    return table


def render_quote(
    quote: Quote,
    client: Client | None,
    catalog: Catalog,
    profile: CompanyProfile,
    options: layout.RenderOptions,
) -> bytes:
    """
    Render a quote to PDF bytes.

    Prices are resolved against the current catalog and the total is
    recomputed, so the printed figures always add up even when the stored
    total is stale.
    """
    generated_at = options.timestamp()
    styles = layout.styles()
    color = layout.accent(options.accent_color, layout.QUOTE_ACCENT)
    logo = load_image(profile.logo, label="company logo")

    watermark = None
    if options.watermark_opacity > 0:
        source = load_image(options.watermark_image, label="watermark") if options.watermark_image else logo
        if source is not None:
            watermark = source.faded(options.watermark_opacity)

    subtitle = [f"Emissão: {format_date(quote.date)}", f"Validade: {format_date(quote.valid_until)}"]

    def first_page(canvas, doc) -> None:
        layout.draw_watermark(canvas, watermark, options.watermark_position)
        layout.draw_header_band(canvas, profile, logo, color, f"ORÇAMENTO #{quote.id}", subtitle)
        layout.draw_page_number(canvas, f"Gerado em {generated_at.strftime('%d/%m/%Y %H:%M')}")

    def later_pages(canvas, doc) -> None:
        layout.draw_watermark(canvas, watermark, options.watermark_position)
        canvas.saveState()
        canvas.setFont("Helvetica-Bold", 9)
        canvas.setFillColor(color)
        canvas.drawString(layout.MARGIN, layout.PAGE_HEIGHT - 12 * mm, f"ORÇAMENTO #{quote.id} (continuação)")
        canvas.restoreState()
        layout.draw_page_number(canvas)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=layout.A4,
        leftMargin=layout.MARGIN,
        rightMargin=layout.MARGIN,
        topMargin=layout.HEADER_HEIGHT + 8 * mm,
        bottomMargin=18 * mm,
        title=f"Orçamento {quote.id}",
        author=profile.name,
    )

    story: list = []
    story.append(Paragraph("CLIENTE", styles["label"]))
    if client is not None:
        story.append(Paragraph(f"<b>{layout.text(client.name)}</b>", styles["heading"]))
        for detail in (client.email, client.phone, client.address):
            if detail:
                story.append(Paragraph(layout.text(detail), styles["body"]))
    else:
        story.append(Paragraph("<i>Cliente não encontrado</i>", styles["heading"]))
    story.append(Paragraph(f"Situação: {layout.text(quote.status.label)}", styles["small"]))
    story.append(Spacer(1, 6 * mm))

    story.append(_items_table(quote, catalog, styles))
    story.append(Spacer(1, 5 * mm))

    subtotal = items_sum(quote.items, catalog)
    total = recompute_total(quote.items, quote.discount, catalog)
    story.append(KeepTogether(_totals_table(subtotal, quote.discount, total, color)))

    if quote.notes.strip():
        story.append(Spacer(1, 8 * mm))
        story.append(
            KeepTogether(
                [Paragraph("OBSERVAÇÕES", styles["label"]), Paragraph(layout.text(quote.notes), styles["body"])]
            )
        )

    doc.build(story, onFirstPage=first_page, onLaterPages=later_pages)
    return buffer.getvalue()
