"""Tests for record parsing, formatting and list filters."""

from __future__ import annotations

from decimal import Decimal

import pytest

from orcamentor.domain.formatting import format_date, format_money
from orcamentor.domain.models import Client, Commitment, Quote, QuoteItem, Receipt, Service, new_id, to_decimal
from orcamentor.domain.search import filter_commitments, filter_receipts, filter_services
from orcamentor.domain.status import CommitmentStatus, QuoteStatus


def test_new_id_shape() -> None:
    identifier = new_id()

    assert len(identifier) == 9
    assert identifier.isalnum()
    assert identifier == identifier.upper()
    assert len(new_id(6)) == 6


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (10, Decimal("10")),
        (0.1, Decimal("0.1")),
        ("1.234,56", Decimal("1234.56")),
        ("R$ 99,90", Decimal("99.90")),
        ("42.5", Decimal("42.5")),
        ("", Decimal("0")),
        (True, Decimal("0")),
        ("inf", Decimal("0")),
        ("1,234.50", Decimal("0")),
        ("1,234,567", Decimal("0")),
    ],
)
def test_to_decimal(raw: object, expected: Decimal) -> None:
    assert to_decimal(raw) == expected


def test_to_decimal_ambiguous_separators_use_default() -> None:
    assert to_decimal("1,234.50", default=Decimal("-1")) == Decimal("-1")
    assert to_decimal("12.345.678,9") == Decimal("12345678.9")


def test_quote_from_stored_dict() -> None:
    quote = Quote.from_dict(
        {
            "id": "ABC123XYZ",
            "clientId": "C1",
            "items": [
                {"itemId": "S1", "type": "service", "quantity": 2, "priceOverride": 75.5},
                {"itemId": "P1", "type": "product", "quantity": "3"},
            ],
            "discount": 10,
            "status": "aprovado",
            "date": "2024-05-01T09:30:00",
            "total": 141,
        }
    )

    assert quote.status is QuoteStatus.APPROVED
    assert quote.items[0].price_override == Decimal("75.5")
    assert quote.items[1].quantity == 3
    assert quote.items[1].price_override is None
    assert quote.valid_until == "2024-05-16T09:30:00"


def test_quote_to_dict_uses_camel_case_and_numbers() -> None:
    quote = Quote(
        id="Q1",
        client_id="C1",
        date="2024-05-01",
        valid_until="2024-05-16",
        items=(QuoteItem(item_id="S1", type="service", quantity=1, price_override=Decimal("0")),),
        discount=Decimal("2.50"),
        total=Decimal("0"),
    )

    data = quote.to_dict()

    assert data["clientId"] == "C1"
    assert data["validUntil"] == "2024-05-16"
    assert data["discount"] == 2.5
    assert data["items"] == [{"itemId": "S1", "type": "service", "quantity": 1, "priceOverride": 0}]
    assert data["status"] == "rascunho"


def test_commitment_uses_stored_field_names() -> None:
    commitment = Commitment.from_dict(
        {
            "id": "E1",
            "prefeitura": "Prefeitura de Campinas",
            "commitmentNumber": "2024NE0012",
            "processNumber": "PROC-77",
            "date": "2024-03-10",
            "value": "1.500,00",
            "status": "pago",
            "images": ["", "data:image/png;base64,AAAA"],
        }
    )

    assert commitment.authority == "Prefeitura de Campinas"
    assert commitment.value == Decimal("1500.00")
    assert commitment.status is CommitmentStatus.PAID
    assert commitment.images == ("data:image/png;base64,AAAA",)
    assert commitment.to_dict()["prefeitura"] == "Prefeitura de Campinas"


def test_service_defaults_for_unknown_values() -> None:
    service = Service.from_dict({"id": "S1", "name": "Pintura", "price": "abc", "unit": "litro", "category": ""})

    assert service.price == Decimal("0")
    assert service.unit == "unidade"
    assert service.category == "Geral"
    assert "image" not in service.to_dict()


def test_formatting() -> None:
    assert format_money(Decimal("1234.5")) == "R$ 1.234,50"
    assert format_money(Decimal("0")) == "R$ 0,00"
    assert format_date("2024-05-01T09:30:00") == "01/05/2024"
    assert format_date("2024-05-01") == "01/05/2024"
    assert format_date("ontem") == "ontem"


def test_filter_commitments_matches_authority_number_and_process() -> None:
    commitments = [
        Commitment(id="1", authority="Prefeitura de Santos", commitment_number="NE-001", date="2024-01-01"),
        Commitment(
            id="2",
            authority="Câmara Municipal",
            commitment_number="NE-002",
            process_number="PROC-9",
            date="2024-01-02",
        ),
    ]

    assert [c.id for c in filter_commitments(commitments, "santos")] == ["1"]
    assert [c.id for c in filter_commitments(commitments, "ne-00")] == ["1", "2"]
    assert [c.id for c in filter_commitments(commitments, "proc-9")] == ["2"]
    assert [c.id for c in filter_commitments(commitments, "  ")] == ["1", "2"]


def test_filter_receipts_by_payer_name() -> None:
    clients = [Client(id="C1", name="Maria Souza"), Client(id="C2", name="Pedro Lima")]
    receipts = [
        Receipt(id="R1", client_id="C1", amount=Decimal("10"), date="2024-01-01"),
        Receipt(id="R2", client_id="C2", amount=Decimal("20"), date="2024-01-01", description="Pintura"),
    ]

    assert [r.id for r in filter_receipts(receipts, clients, "maria")] == ["R1"]
    assert [r.id for r in filter_receipts(receipts, clients, "pintura")] == ["R2"]


def test_filter_services_favorites() -> None:
    services = [
        Service(id="S1", name="Pintura", price=Decimal("1"), is_favorite=True),
        Service(id="S2", name="Pintura externa", price=Decimal("1")),
    ]

    assert [s.id for s in filter_services(services, "pint")] == ["S1", "S2"]
    assert [s.id for s in filter_services(services, "pint", only_favorites=True)] == ["S1"]
