"""Document rendering entry points.

Every public render function returns complete PDF bytes or raises
RenderError; partial output never escapes this module. Image problems are
not render failures: unreadable images are logged and left out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from orcamentor.domain.models import Catalog, Client, Commitment, CompanyProfile, Product, Quote, Receipt, Service
from orcamentor.rendering.commitments import LEDGER_TITLE, render_commitments
from orcamentor.rendering.layout import RenderOptions
from orcamentor.rendering.quote import render_quote
from orcamentor.rendering.receipt import render_receipt

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """A document could not be produced."""


class DocumentKind(StrEnum):
    QUOTE = "quote"
    RECEIPT = "receipt"
    COMMITMENTS = "commitments"


@dataclass(frozen=True)
class RelatedRecords:
    """Collections a document may reference by id."""

    services: tuple[Service, ...] = ()
    products: tuple[Product, ...] = ()
    clients: tuple[Client, ...] = ()
    search: str = ""
    catalog: Catalog = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "catalog", Catalog.of(self.services, self.products))

    def client(self, client_id: str) -> Client | None:
        return next((client for client in self.clients if client.id == client_id), None)


def _guarded(label: str, build: Callable[[], bytes]) -> bytes:
    try:
        data = build()
    except RenderError:
        raise
    except Exception as e:
        logger.exception("Failed to render %s", label)
        raise RenderError(f"Falha ao gerar {label}: {e}") from e
    if not data.startswith(b"%PDF"):
        raise RenderError(f"Falha ao gerar {label}: saída inválida")
    return data


def render_quote_pdf(
    quote: Quote,
    *,
    services: Iterable[Service] = (),
    products: Iterable[Product] = (),
    clients: Iterable[Client] = (),
    profile: CompanyProfile,
    options: RenderOptions | None = None,
) -> bytes:
    related = RelatedRecords(tuple(services), tuple(products), tuple(clients))
    return _guarded(
        f"orçamento {quote.id}",
        lambda: render_quote(
            quote, related.client(quote.client_id), related.catalog, profile, options or RenderOptions()
        ),
    )


def render_receipt_pdf(
    receipt: Receipt,
    *,
    clients: Iterable[Client] = (),
    profile: CompanyProfile,
    options: RenderOptions | None = None,
) -> bytes:
    related = RelatedRecords(clients=tuple(clients))
    return _guarded(
        f"recibo {receipt.id}",
        lambda: render_receipt(receipt, related.client(receipt.client_id), profile, options or RenderOptions()),
    )


def render_commitments_pdf(
    commitments: Sequence[Commitment],
    *,
    profile: CompanyProfile,
    options: RenderOptions | None = None,
    title: str = LEDGER_TITLE,
    search: str = "",
) -> bytes:
    rows = tuple(commitments)
    return _guarded(
        "planilha de empenhos",
        lambda: render_commitments(rows, profile, options or RenderOptions(), title=title, search=search),
    )


def render_document(
    kind: DocumentKind,
    record: Any,
    related: RelatedRecords,
    profile: CompanyProfile,
    options: RenderOptions | None = None,
) -> bytes:
    """
    Render any document kind.

    Args:
        kind: Which document to produce
        record: A Quote, a Receipt, or a sequence of Commitments
        related: Catalog and clients used to resolve references
        profile: Issuer branding
        options: Watermark, accent and timestamp overrides

    Returns:
        PDF bytes

    Raises:
        RenderError: if the document could not be produced
    """
    match DocumentKind(kind):
        case DocumentKind.QUOTE:
            return render_quote_pdf(
                record,
                services=related.services,
                products=related.products,
                clients=related.clients,
                profile=profile,
                options=options,
            )
        case DocumentKind.RECEIPT:
            return render_receipt_pdf(record, clients=related.clients, profile=profile, options=options)
        case DocumentKind.COMMITMENTS:
            return render_commitments_pdf(record, profile=profile, options=options, search=related.search)


def document_filename(kind: DocumentKind, identifier: str | None, generated_at: datetime) -> str:
    """Download name, e.g. ``Orcamento_AB12CD34E_20240501_093000.pdf``."""
    stamp = generated_at.strftime("%Y%m%d_%H%M%S")
    match DocumentKind(kind):
        case DocumentKind.QUOTE:
            return f"Orcamento_{identifier}_{stamp}.pdf"
        case DocumentKind.RECEIPT:
            return f"Recibo_{identifier}_{stamp}.pdf"
        case DocumentKind.COMMITMENTS:
            return f"Planilha_Empenhos_{stamp}.pdf"
