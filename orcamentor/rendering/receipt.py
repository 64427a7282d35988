"""Payment receipt ("recibo") PDF, drawn directly on a single canvas page."""

from __future__ import annotations

import io

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as pdfcanvas

from orcamentor.domain.formatting import format_date, format_datetime, format_money
from orcamentor.domain.models import Client, CompanyProfile, Receipt
from orcamentor.rendering import layout
from orcamentor.rendering.images import load_image

BLANK_CLIENT = "____________________"
DEFAULT_DESCRIPTION = "serviços prestados"

# Sentence area inside the body box, above the amount line.
SENTENCE_TOP = 105 * mm
SENTENCE_HEIGHT = 38 * mm
SENTENCE_FONT_SIZES = (12, 11, 10, 9, 8)
LINE_SPACING = 1.5
ELLIPSIS = "..."


def fit_sentence(sentence: str, max_width: float, max_height: float = SENTENCE_HEIGHT) -> tuple[int, list[str]]:
    """
    Wrap the sentence into the sentence area.

    The font shrinks step by step until every line fits; at the smallest
    size the text is cut and the last visible line ends with an ellipsis.
    """
    for font_size in SENTENCE_FONT_SIZES:
        lines = simpleSplit(sentence, "Helvetica", font_size, max_width)
        if len(lines) * font_size * LINE_SPACING <= max_height:
            return font_size, lines

    max_lines = max(1, int(max_height // (font_size * LINE_SPACING)))
    kept = lines[:max_lines]
    last = kept[-1]
    while last and pdfmetrics.stringWidth(last + ELLIPSIS, "Helvetica", font_size) > max_width:
        last = last[:-1]
    kept[-1] = last.rstrip() + ELLIPSIS
    return font_size, kept


def receipt_sentence(receipt: Receipt, client: Client | None) -> str:
    client_name = client.name if client is not None and client.name else BLANK_CLIENT
    description = receipt.description.strip() or DEFAULT_DESCRIPTION
    return (
        f"Recebemos de {client_name}, a importância de {format_money(receipt.amount)}, "
        f"referente a {description}."
    )


def render_receipt(
    receipt: Receipt,
    client: Client | None,
    profile: CompanyProfile,
    options: layout.RenderOptions,
) -> bytes:
    """Render a receipt to PDF bytes."""
    generated_at = options.timestamp()
    buffer = io.BytesIO()
    c = pdfcanvas.Canvas(buffer, pagesize=layout.A4)
    c.setTitle(f"Recibo {receipt.id}")
    c.setAuthor(profile.name)
    width, height = layout.A4
    color = layout.accent(options.accent_color, layout.RECEIPT_ACCENT)

    def Y(top: float) -> float:
        return height - top

    # Bordered sheet
    c.setFillColor(layout.SLATE_LIGHT)
    c.setStrokeColor(layout.GRID)
    c.rect(10 * mm, 10 * mm, width - 20 * mm, height - 20 * mm, stroke=1, fill=1)

    # Header band
    c.setFillColor(color)
    c.rect(10 * mm, Y(45 * mm), width - 20 * mm, 35 * mm, stroke=0, fill=1)
    logo = load_image(profile.logo, label="company logo")
    if logo is not None:
        w, h = logo.fit(25 * mm, 25 * mm)
        c.drawImage(logo.reader(), 15 * mm, Y(15 * mm) - h, width=w, height=h, mask="auto")
    c.setFillColor(layout.WHITE)
    c.setFont("Helvetica-Bold", 24)
    c.drawCentredString(width / 2, Y(30 * mm), "RECIBO DE PAGAMENTO")
    c.setFont("Helvetica", 10)
    c.drawRightString(width - 15 * mm, Y(20 * mm), f"#{receipt.id}")

    # Issuer and date
    c.setFillColor(layout.BLACK)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(20 * mm, Y(60 * mm), profile.name or "")
    c.setFont("Helvetica", 10)
    issuer_lines = [line for line in (profile.document, profile.phone, profile.email) if line]
    for index, line in enumerate(issuer_lines):
        c.drawString(20 * mm, Y(66 * mm + index * 5 * mm), line)
    c.setFont("Helvetica-Bold", 10)
    c.drawRightString(width - 20 * mm, Y(60 * mm), f"Data: {format_date(receipt.date)}")

    # Body box
    c.setFillColor(layout.WHITE)
    c.setStrokeColor(layout.GRID)
    c.roundRect(20 * mm, Y(185 * mm), width - 40 * mm, 100 * mm, 3 * mm, stroke=1, fill=1)

    c.setFillColor(layout.BLACK)
    font_size, lines = fit_sentence(receipt_sentence(receipt, client), width - 60 * mm)
    c.setFont("Helvetica", font_size)
    line_top = SENTENCE_TOP
    for line in lines:
        c.drawString(30 * mm, Y(line_top), line)
        line_top += font_size * LINE_SPACING

    c.setFont("Helvetica-Bold", 18)
    c.setFillColor(color)
    c.drawRightString(width - 30 * mm, Y(150 * mm), format_money(receipt.amount))

    c.setFillColor(layout.BLACK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(30 * mm, Y(170 * mm), "Forma de Pagamento:")
    c.setFont("Helvetica", 10)
    label_width = c.stringWidth("Forma de Pagamento: ", "Helvetica-Bold", 10)
    c.drawString(30 * mm + label_width, Y(170 * mm), receipt.payment_method)
    if receipt.quote_id:
        c.setFont("Helvetica", 8)
        c.setFillColor(layout.MUTED)
        c.drawString(30 * mm, Y(177 * mm), f"Referente ao orçamento #{receipt.quote_id}")

    # Signatures
    c.setStrokeColor(layout.MUTED)
    c.line(40 * mm, Y(230 * mm), 95 * mm, Y(230 * mm))
    c.line(width - 95 * mm, Y(230 * mm), width - 40 * mm, Y(230 * mm))
    c.setFillColor(layout.MUTED)
    c.setFont("Helvetica", 8)
    c.drawCentredString(67.5 * mm, Y(235 * mm), "Assinatura do Emitente")
    c.drawCentredString(width - 67.5 * mm, Y(235 * mm), "Assinatura do Cliente")
    c.setFont("Helvetica-Bold", 8)
    issuer_name = profile.owner_name or profile.name
    if issuer_name:
        c.drawCentredString(67.5 * mm, Y(240 * mm), issuer_name)
    if client is not None and client.name:
        c.drawCentredString(width - 67.5 * mm, Y(240 * mm), client.name)

    c.setFont("Helvetica", 8)
    c.drawCentredString(width / 2, 15 * mm, f"Emitido em {format_datetime(generated_at)}")

    c.showPage()
    c.save()
    return buffer.getvalue()
