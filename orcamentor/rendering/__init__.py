"""PDF documents: quotes, receipts and the public commitments ledger.

Usage:
    from orcamentor.rendering import DocumentKind, render_document
"""

from orcamentor.rendering.documents import (
    DocumentKind,
    RelatedRecords,
    RenderError,
    document_filename,
    render_commitments_pdf,
    render_document,
    render_quote_pdf,
    render_receipt_pdf,
)
from orcamentor.rendering.images import decode_data_uri
from orcamentor.rendering.layout import RenderOptions, WatermarkPosition

__all__ = [
    "DocumentKind",
    "RelatedRecords",
    "RenderError",
    "RenderOptions",
    "WatermarkPosition",
    "decode_data_uri",
    "document_filename",
    "render_commitments_pdf",
    "render_document",
    "render_quote_pdf",
    "render_receipt_pdf",
]
