"""Tests for the local HTTP surface."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import pytest
from conftest import png_bytes
from fastapi.testclient import TestClient

from orcamentor.domain.models import QuoteItem
from orcamentor.runtime.server import create_app
from orcamentor.runtime.store import AppStore


class RecordingAssistant:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Decimal, list[str]]] = []

    def improve_text(self, name: str, current: str) -> str:
        return current

    def compose_message(self, client_name: str, total: Decimal, items: Sequence[str]) -> str:
        self.calls.append((client_name, total, list(items)))
        return f"Olá {client_name}"


@pytest.fixture
def assistant() -> RecordingAssistant:
    return RecordingAssistant()


@pytest.fixture
def client(stocked_store: AppStore, assistant: RecordingAssistant) -> TestClient:
    return TestClient(create_app(stocked_store, assistant=assistant))


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_quote_pdf_download(client: TestClient, stocked_store: AppStore) -> None:
    quote = stocked_store.create_quote("C1", [QuoteItem(item_id="S1", type="service")])

    response = client.get(f"/quotes/{quote.id}/pdf", params={"watermark_position": "top-left"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    expected = f'attachment; filename="Orcamento_{quote.id}_20240501_093000.pdf"'
    assert response.headers["content-disposition"] == expected


def test_unknown_quote_is_404(client: TestClient) -> None:
    response = client.get("/quotes/NOPE/pdf")

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Orçamento não encontrado: NOPE"}


def test_receipt_pdf_download(client: TestClient, stocked_store: AppStore) -> None:
    receipt = stocked_store.create_receipt("C1", "99.90")

    response = client.get(f"/receipts/{receipt.id}/pdf")

    assert response.status_code == 200
    assert f"Recibo_{receipt.id}_" in response.headers["content-disposition"]
    assert client.get("/receipts/NOPE/pdf").status_code == 404


def test_commitments_pdf_with_search(client: TestClient, stocked_store: AppStore) -> None:
    stocked_store.save_commitment("Prefeitura de Santos", "NE-1", value="100")

    response = client.get("/commitments/pdf", params={"q": "santos"})

    assert response.status_code == 200
    assert 'filename="Planilha_Empenhos_20240501_093000.pdf"' in response.headers["content-disposition"]


def test_dashboard(client: TestClient, stocked_store: AppStore) -> None:
    stocked_store.create_receipt("C1", "150")
    stocked_store.create_receipt("C1", "50.5")

    data = client.get("/dashboard").json()

    assert data["realizedRevenue"] == 200.5
    assert data["lowStockCount"] == 1
    assert data["conversionRate"] == 0


def test_quote_message(client: TestClient, stocked_store: AppStore, assistant: RecordingAssistant) -> None:
    quote = stocked_store.create_quote("C1", [QuoteItem(item_id="S1", type="service", quantity=2)])

    response = client.get(f"/quotes/{quote.id}/message")

    assert response.json() == {"status": "success", "message": "Olá Maria Souza"}
    assert assistant.calls == [("Maria Souza", Decimal("200"), ["Instalação elétrica"])]
    assert client.get("/quotes/NOPE/message").status_code == 404


def test_quote_status_update(client: TestClient, stocked_store: AppStore) -> None:
    quote = stocked_store.create_quote("C1", [QuoteItem(item_id="S1", type="service")])

    ok = client.post(f"/quotes/{quote.id}/status", json={"status": "aprovado"})
    strict = client.post(f"/quotes/{quote.id}/status", json={"status": "rascunho", "strict": True})
    unknown = client.post(f"/quotes/{quote.id}/status", json={"status": "archived"})
    not_object = client.post(f"/quotes/{quote.id}/status", json=["aprovado"])

    assert ok.status_code == 200
    assert ok.json()["quote"]["status"] == "aprovado"
    assert strict.status_code == 422
    assert unknown.status_code == 422
    assert not_object.status_code == 422
    assert client.post("/quotes/NOPE/status", json={"status": "enviado"}).status_code == 404
    assert stocked_store.find_quote(quote.id).status.value == "aprovado"


def test_image_upload(client: TestClient) -> None:
    response = client.post("/images", files={"file": ("logo.png", png_bytes(12, 12), "image/png")})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["dataUri"].startswith("data:image/png;base64,")


def test_image_upload_rejects_non_images(client: TestClient) -> None:
    response = client.post("/images", files={"file": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 422
    assert response.json()["status"] == "error"


def test_image_upload_without_file(client: TestClient) -> None:
    response = client.post("/images", data={"name": "logo"})

    assert response.status_code == 400


def test_quote_status_rejects_malformed_json(client: TestClient, stocked_store: AppStore) -> None:
    quote = stocked_store.create_quote("C1", [QuoteItem(item_id="S1", type="service")])

    response = client.post(
        f"/quotes/{quote.id}/status", content=b"{not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 422
    assert response.json() == {"status": "error", "message": "Invalid JSON body"}
    assert stocked_store.find_quote(quote.id).status.value == "rascunho"
