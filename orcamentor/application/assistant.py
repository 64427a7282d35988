"""Writing-assistant workflows: quote messages and service descriptions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from orcamentor.domain.pricing import line_names
from orcamentor.runtime.store import AppStore
from orcamentor.runtime.text_service import TextAssistant

MessageStatus = Literal["composed", "not_found"]
DescriptionStatus = Literal["suggested", "applied", "unchanged", "not_found"]


@dataclass(frozen=True)
class QuoteMessageResult:
    status: MessageStatus
    message: str = ""
    error: str | None = None


@dataclass(frozen=True)
class DescriptionResult:
    status: DescriptionStatus
    original: str = ""
    suggestion: str = ""
    error: str | None = None


def run_quote_message(store: AppStore, quote_id: str, assistant: TextAssistant) -> QuoteMessageResult:
    """Compose a short message to send along with a quote."""
    quote = store.find_quote(quote_id)
    if quote is None:
        return QuoteMessageResult(status="not_found", error=f"Orçamento não encontrado: {quote_id}")
    client = store.find_client(quote.client_id)
    message = assistant.compose_message(
        client.name if client else "",
        quote.total,
        line_names(quote.items, store.catalog()),
    )
    return QuoteMessageResult(status="composed", message=message)


def run_improve_description(
    store: AppStore,
    service_id: str,
    assistant: TextAssistant,
    apply: bool = False,
) -> DescriptionResult:
    """Ask for a better service description, optionally saving it."""
    service = store.find_service(service_id)
    if service is None:
        return DescriptionResult(status="not_found", error=f"Serviço não encontrado: {service_id}")

    suggestion = assistant.improve_text(service.name, service.description)
    if suggestion == service.description:
        return DescriptionResult(status="unchanged", original=service.description, suggestion=suggestion)
    if apply:
        store.save_service(replace(service, description=suggestion))
        return DescriptionResult(status="applied", original=service.description, suggestion=suggestion)
    return DescriptionResult(status="suggested", original=service.description, suggestion=suggestion)
