"""Workflow orchestration between the store, renderer and text assistant."""

from orcamentor.application.assistant import (
    DescriptionResult,
    QuoteMessageResult,
    run_improve_description,
    run_quote_message,
)
from orcamentor.application.dashboard import run_dashboard
from orcamentor.application.exports import ExportRequest, ExportResult, run_document_export

__all__ = [
    "ExportRequest",
    "ExportResult",
    "run_document_export",
    "run_dashboard",
    "QuoteMessageResult",
    "run_quote_message",
    "DescriptionResult",
    "run_improve_description",
]
