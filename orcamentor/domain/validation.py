"""Required-field checks run before any record is created or replaced."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from orcamentor.domain.models import QuoteItem


class ValidationError(ValueError):
    """A record is missing required data; nothing was changed."""


def validate_quote(client_id: str, items: Sequence[QuoteItem]) -> None:
    if not client_id:
        raise ValidationError("Selecione um cliente para o orçamento.")
    if not items:
        raise ValidationError("Adicione pelo menos um item ao orçamento.")
    for item in items:
        if not item.item_id:
            raise ValidationError("Item do orçamento sem referência ao catálogo.")


def validate_receipt(client_id: str, amount: Decimal) -> None:
    if not client_id:
        raise ValidationError("Selecione o cliente pagador.")
    if amount <= 0:
        raise ValidationError("O valor do recibo deve ser maior que zero.")


def validate_commitment(authority: str, commitment_number: str) -> None:
    if not authority.strip() or not commitment_number.strip():
        raise ValidationError("Órgão e Número do Empenho são obrigatórios.")


def validate_named(name: str, kind: str) -> None:
    """Services, products and clients all require a name."""
    if not name.strip():
        raise ValidationError(f"Informe o nome do {kind}.")


def validate_appointment(client_id: str, date: str, time: str) -> None:
    if not client_id or not date or not time:
        raise ValidationError("Por favor, preencha o cliente, a data e a hora.")
