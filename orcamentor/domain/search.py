"""Case-insensitive list filters used by the list screens and exports."""

from __future__ import annotations

from collections.abc import Iterable

from orcamentor.domain.models import Client, Commitment, Product, Receipt, Service


def _matches(term: str, *fields: str | None) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    return any(needle in (field or "").lower() for field in fields)


def filter_commitments(commitments: Iterable[Commitment], term: str = "") -> list[Commitment]:
    """Match authority name, commitment number or process number."""
    return [
        commitment
        for commitment in commitments
        if _matches(term, commitment.authority, commitment.commitment_number, commitment.process_number)
    ]


def filter_receipts(receipts: Iterable[Receipt], clients: Iterable[Client], term: str = "") -> list[Receipt]:
    """Match payer name, description or receipt id."""
    names = {client.id: client.name for client in clients}
    return [
        receipt
        for receipt in receipts
        if _matches(term, names.get(receipt.client_id), receipt.description, receipt.id)
    ]


def filter_services(services: Iterable[Service], term: str = "", only_favorites: bool = False) -> list[Service]:
    return [
        service
        for service in services
        if _matches(term, service.name, service.category) and (service.is_favorite or not only_favorites)
    ]


def filter_products(products: Iterable[Product], term: str = "") -> list[Product]:
    return [product for product in products if _matches(term, product.name, product.category)]


def filter_clients(clients: Iterable[Client], term: str = "") -> list[Client]:
    return [client for client in clients if _matches(term, client.name, client.email)]
