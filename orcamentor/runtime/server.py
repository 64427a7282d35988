"""Local HTTP surface for the browser UI: PDFs, dashboard figures and image uploads.

Meant for localhost use only; there is no authentication.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from orcamentor.domain.pricing import line_names
from orcamentor.rendering import DocumentKind, RenderError
from orcamentor.runtime.documents import RenderedDocument, build_document, render_options
from orcamentor.runtime.images import ImageRejected, bytes_to_data_uri
from orcamentor.runtime.logging import get_logger
from orcamentor.runtime.paths import get_paths
from orcamentor.runtime.store import AppStore, RecordNotFound
from orcamentor.runtime.text_service import TextAssistant, create_text_assistant

logger = get_logger(__name__)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message}, status_code=status_code)


def _pdf_response(document: RenderedDocument) -> Response:
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


def create_app(store: AppStore, assistant: TextAssistant | None = None) -> FastAPI:
    """Build the app around an already loaded store."""
    assistant = assistant or create_text_assistant(store.settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Flush state on shutdown."""
        yield
        store.flush()

    app = FastAPI(title="Orcamentor", lifespan=lifespan)

    def render(
        kind: DocumentKind,
        record_id: str | None,
        search: str = "",
        watermark_position: str | None = None,
        watermark_opacity: int | None = None,
    ) -> Response:
        options = render_options(
            store.settings,
            kind,
            watermark_position=watermark_position,
            watermark_opacity=watermark_opacity,
        )
        try:
            document = build_document(store, kind, record_id, search=search, options=options)
        except RecordNotFound as e:
            return _error(str(e), 404)
        except RenderError as e:
            logger.error("PDF generation failed for %s %s: %s", kind.value, record_id, e)
            return _error(str(e), 500)
        return _pdf_response(document)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/dashboard")
    def dashboard() -> dict:
        return store.metrics().to_dict()

    @app.get("/quotes/{quote_id}/pdf")
    def quote_pdf(
        quote_id: str,
        watermark_position: str | None = None,
        watermark_opacity: int | None = None,
    ) -> Response:
        return render(
            DocumentKind.QUOTE,
            quote_id,
            watermark_position=watermark_position,
            watermark_opacity=watermark_opacity,
        )

    @app.get("/receipts/{receipt_id}/pdf")
    def receipt_pdf(receipt_id: str) -> Response:
        return render(DocumentKind.RECEIPT, receipt_id)

    @app.get("/commitments/pdf")
    def commitments_pdf(q: str = "") -> Response:
        return render(DocumentKind.COMMITMENTS, None, search=q)

    @app.get("/quotes/{quote_id}/message")
    def quote_message(quote_id: str) -> Response:
        quote = store.find_quote(quote_id)
        if quote is None:
            return _error(f"Orçamento não encontrado: {quote_id}", 404)
        client = store.find_client(quote.client_id)
        message = assistant.compose_message(
            client.name if client else "",
            quote.total,
            line_names(quote.items, store.catalog()),
        )
        return JSONResponse({"status": "success", "message": message})

    @app.post("/quotes/{quote_id}/status")
    async def quote_status(quote_id: str, request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except ValueError:
            return _error("Invalid JSON body", 422)
        if not isinstance(payload, dict):
            return _error("Expected a JSON object", 422)
        try:
            quote = store.set_quote_status(quote_id, payload.get("status") or "", strict=bool(payload.get("strict")))
        except RecordNotFound as e:
            return _error(str(e), 404)
        except ValueError as e:
            return _error(str(e), 422)
        return JSONResponse({"status": "success", "quote": quote.to_dict()})

    @app.post("/images")
    async def upload_image(request: Request) -> JSONResponse:
        """Receive an image upload and return it as an inline data URI."""
        form = await request.form()

        file = None
        for key, value in form.items():
            logger.debug("Form field: key=%r, type=%s", key, type(value))
            if hasattr(value, "read"):
                file = value
                break

        if not file:
            return _error("No file found in request", 400)

        contents = await file.read()
        try:
            data_uri = bytes_to_data_uri(
                contents,
                max_bytes=store.settings.max_image_bytes,
                max_dimension=store.settings.max_image_dimension,
            )
        except ImageRejected as e:
            logger.warning("Rejected upload %s: %s", getattr(file, "filename", None), e)
            return _error(str(e), 422)

        return JSONResponse({"status": "success", "dataUri": data_uri, "sizeBytes": len(contents)})

    return app


def serve(store: AppStore, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the app under uvicorn until interrupted."""
    import uvicorn

    get_paths().ensure_directories()
    logger.info("Serving on http://%s:%d", host, port)
    uvicorn.run(create_app(store), host=host, port=port)
