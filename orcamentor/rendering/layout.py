"""Shared page furniture: palette, render options, header band and watermark."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from xml.sax.saxutils import escape

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas

from orcamentor.domain.models import CompanyProfile
from orcamentor.rendering.images import EmbeddedImage

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
HEADER_HEIGHT = 40 * mm

QUOTE_ACCENT = HexColor("#2563EB")
RECEIPT_ACCENT = HexColor("#10B981")
SLATE = HexColor("#1E293B")
SLATE_LIGHT = HexColor("#F8FAFC")
MUTED = HexColor("#64748B")
GRID = HexColor("#E2E8F0")
WHITE = HexColor("#FFFFFF")
BLACK = HexColor("#0F172A")

WATERMARK_SIZE = 80 * mm
LOGO_SIZE = 24 * mm


class WatermarkPosition(StrEnum):
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @classmethod
    def parse(cls, value: str | None) -> WatermarkPosition:
        try:
            return cls((value or "center").strip().lower())
        except ValueError:
            return cls.CENTER


@dataclass(frozen=True)
class RenderOptions:
    """
    Presentation knobs for generated documents.

    ``watermark_image`` overrides the company logo as the quote watermark.
    Opacity is a percentage; zero disables the watermark. ``accent_color``
    replaces the document kind's default band color.
    """

    watermark_position: WatermarkPosition = WatermarkPosition.CENTER
    watermark_opacity: int = 10
    watermark_image: str | None = None
    accent_color: str | None = None
    generated_at: datetime | None = None

    def timestamp(self) -> datetime:
        return self.generated_at or datetime.now()


def accent(value: str | None, fallback: Color) -> Color:
    if not value:
        return fallback
    try:
        return HexColor(value)
    except (ValueError, TypeError):
        return fallback


def text(value: object) -> str:
    """Escape user text for Paragraph markup."""
    return escape(str(value or "")).replace("\n", "<br/>")


def styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    body = base["BodyText"].clone("DocBody", fontName="Helvetica", fontSize=9, leading=12, textColor=BLACK)
    return {
        "body": body,
        "small": body.clone("DocSmall", fontSize=8, leading=10, textColor=MUTED),
        "cell": body.clone("DocCell", fontSize=8.5, leading=10.5),
        "cell_bold": body.clone("DocCellBold", fontName="Helvetica-Bold", fontSize=8.5, leading=10.5),
        "label": body.clone("DocLabel", fontName="Helvetica-Bold", fontSize=8, leading=10, textColor=MUTED),
        "heading": body.clone("DocHeading", fontName="Helvetica-Bold", fontSize=11, leading=14, spaceAfter=4),
    }


def watermark_origin(position: WatermarkPosition, width: float, height: float) -> tuple[float, float]:
    """Bottom-left corner for a watermark of the given size."""
    right = PAGE_WIDTH - width - 20 * mm
    top = PAGE_HEIGHT - height - 50 * mm
    match position:
        case WatermarkPosition.TOP_LEFT:
            return 20 * mm, top
        case WatermarkPosition.TOP_RIGHT:
            return right, top
        case WatermarkPosition.BOTTOM_LEFT:
            return 20 * mm, 20 * mm
        case WatermarkPosition.BOTTOM_RIGHT:
            return right, 20 * mm
        case _:
            return (PAGE_WIDTH - width) / 2, (PAGE_HEIGHT - height) / 2


def draw_watermark(canvas: Canvas, image: EmbeddedImage | None, position: WatermarkPosition) -> None:
    if image is None:
        return
    width, height = image.fit(WATERMARK_SIZE, WATERMARK_SIZE)
    x, y = watermark_origin(position, width, height)
    canvas.saveState()
    canvas.drawImage(image.reader(), x, y, width=width, height=height, mask="auto")
    canvas.restoreState()


def draw_header_band(
    canvas: Canvas,
    profile: CompanyProfile,
    logo: EmbeddedImage | None,
    color: Color,
    title: str,
    subtitle_lines: list[str],
) -> None:
    """Full-width colored band with the issuer on the left and the document title on the right."""
    top = PAGE_HEIGHT
    canvas.saveState()
    canvas.setFillColor(color)
    canvas.rect(0, top - HEADER_HEIGHT, PAGE_WIDTH, HEADER_HEIGHT, stroke=0, fill=1)

    text_x = MARGIN
    if logo is not None:
        width, height = logo.fit(LOGO_SIZE, LOGO_SIZE)
        canvas.drawImage(
            logo.reader(), MARGIN, top - 8 * mm - height, width=width, height=height, mask="auto"
        )
        text_x = MARGIN + LOGO_SIZE + 5 * mm

    canvas.setFillColor(WHITE)
    canvas.setFont("Helvetica-Bold", 18)
    canvas.drawString(text_x, top - 18 * mm, profile.name or "")
    canvas.setFont("Helvetica", 8)
    contact = [part for part in (profile.document, profile.phone, profile.email) if part]
    line_y = top - 24 * mm
    if contact:
        canvas.drawString(text_x, line_y, "  |  ".join(contact))
        line_y -= 4 * mm
    if profile.address:
        canvas.drawString(text_x, line_y, profile.address)

    right = PAGE_WIDTH - MARGIN
    canvas.setFont("Helvetica-Bold", 13)
    canvas.drawRightString(right, top - 18 * mm, title)
    canvas.setFont("Helvetica", 8)
    for index, line in enumerate(subtitle_lines):
        canvas.drawRightString(right, top - 24 * mm - index * 4 * mm, line)
    canvas.restoreState()


def draw_page_number(canvas: Canvas, label: str = "") -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(MUTED)
    footer = f"{label}  |  Página {canvas.getPageNumber()}" if label else f"Página {canvas.getPageNumber()}"
    canvas.drawCentredString(PAGE_WIDTH / 2, 8 * mm, footer)
    canvas.restoreState()
