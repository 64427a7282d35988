"""Render stored records: look up a record in the store and produce its PDF."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from orcamentor.domain.search import filter_commitments
from orcamentor.rendering import (
    DocumentKind,
    RelatedRecords,
    RenderOptions,
    WatermarkPosition,
    document_filename,
    render_document,
)
from orcamentor.runtime.logging import get_logger
from orcamentor.runtime.settings import Settings
from orcamentor.runtime.store import AppStore, RecordNotFound

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderedDocument:
    kind: DocumentKind
    filename: str
    content: bytes


def render_options(
    settings: Settings,
    kind: DocumentKind,
    *,
    watermark_position: str | None = None,
    watermark_opacity: int | None = None,
    generated_at: datetime | None = None,
) -> RenderOptions:
    """Options from settings, with per-call watermark overrides."""
    opacity = settings.watermark_opacity if watermark_opacity is None else watermark_opacity
    match kind:
        case DocumentKind.QUOTE:
            accent = settings.quote_accent
        case DocumentKind.RECEIPT:
            accent = settings.receipt_accent
        case _:
            accent = None
    return RenderOptions(
        watermark_position=WatermarkPosition.parse(watermark_position or settings.watermark_position),
        watermark_opacity=min(100, max(0, opacity)),
        accent_color=accent,
        generated_at=generated_at,
    )


def build_document(
    store: AppStore,
    kind: DocumentKind,
    record_id: str | None = None,
    *,
    search: str = "",
    options: RenderOptions | None = None,
) -> RenderedDocument:
    """
    Render one stored document.

    Raises:
        RecordNotFound: if the quote or receipt id is unknown
        RenderError: if the PDF could not be produced
    """
    kind = DocumentKind(kind)
    if options is None:
        options = render_options(store.settings, kind)
    if options.generated_at is None:
        options = replace(options, generated_at=store.clock())
    related = RelatedRecords(
        services=store.services,
        products=store.products,
        clients=store.clients,
        search=search,
    )

    match kind:
        case DocumentKind.QUOTE:
            record = store.find_quote(record_id or "")
            if record is None:
                raise RecordNotFound(f"Orçamento não encontrado: {record_id}")
        case DocumentKind.RECEIPT:
            record = store.find_receipt(record_id or "")
            if record is None:
                raise RecordNotFound(f"Recibo não encontrado: {record_id}")
        case DocumentKind.COMMITMENTS:
            record = filter_commitments(store.commitments, search)

    content = render_document(kind, record, related, store.profile, options)
    filename = document_filename(kind, record_id, options.generated_at)
    logger.info("Rendered %s (%d bytes)", filename, len(content))
    return RenderedDocument(kind=kind, filename=filename, content=content)
