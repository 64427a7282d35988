"""Document export workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from orcamentor.rendering import DocumentKind, RenderError
from orcamentor.runtime import get_logger, get_paths
from orcamentor.runtime.documents import build_document, render_options
from orcamentor.runtime.store import AppStore, RecordNotFound

logger = get_logger(__name__)

ExportStatus = Literal["exported", "not_found", "render_failed"]


@dataclass(frozen=True)
class ExportRequest:
    """Inputs for exporting one document to disk."""

    store: AppStore
    kind: DocumentKind
    record_id: str | None = None
    search: str = ""
    watermark_position: str | None = None
    watermark_opacity: int | None = None
    output_dir: Path | None = None


@dataclass(frozen=True)
class ExportResult:
    """Outcome from the export workflow."""

    status: ExportStatus
    path: Path | None = None
    size_bytes: int = 0
    error: str | None = None


def run_document_export(request: ExportRequest) -> ExportResult:
    """Render a stored document and write it to the exports directory.

    Nothing is written unless rendering succeeded.
    """
    options = render_options(
        request.store.settings,
        DocumentKind(request.kind),
        watermark_position=request.watermark_position,
        watermark_opacity=request.watermark_opacity,
    )
    try:
        document = build_document(
            request.store,
            request.kind,
            request.record_id,
            search=request.search,
            options=options,
        )
    except RecordNotFound as exc:
        return ExportResult(status="not_found", error=str(exc))
    except RenderError as exc:
        return ExportResult(status="render_failed", error=str(exc))

    output_dir = request.output_dir or get_paths().exports
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / document.filename
    path.write_bytes(document.content)
    logger.info("Exported %s", path)
    return ExportResult(status="exported", path=path, size_bytes=len(document.content))
