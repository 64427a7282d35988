"""Shared pytest fixtures for orcamentor tests."""

from __future__ import annotations

import base64
import io
from collections.abc import Callable, Iterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch
from PIL import Image

from orcamentor.domain.models import Client, CompanyProfile, Product, Service
from orcamentor.runtime import paths as paths_module
from orcamentor.runtime.storage import MemoryStorage
from orcamentor.runtime.store import AppStore

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0)


def png_bytes(width: int = 24, height: int = 16, color: tuple[int, int, int, int] = (37, 99, 235, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_uri(width: int = 24, height: int = 16) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(width, height)).decode("ascii")


CORRUPT_DATA_URI = "data:image/png;base64," + base64.b64encode(b"definitely not a png").decode("ascii")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: MonkeyPatch) -> Iterator[Path]:
    """Every test gets its own ORCAMENTOR_HOME and a fresh paths singleton."""
    home = tmp_path / "home"
    monkeypatch.setenv("ORCAMENTOR_HOME", str(home))
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setattr(paths_module, "_paths", None)
    yield home


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def store(clock: Callable[[], datetime]) -> AppStore:
    return AppStore(MemoryStorage(), clock=clock).load()


@pytest.fixture
def stocked_store(store: AppStore) -> AppStore:
    """Store with two services, one product and one client."""
    store.save_service(Service(id="S1", name="Instalação elétrica", price=Decimal("100"), category="Elétrica"))
    store.save_service(Service(id="S2", name="Limpeza de caixa", price=Decimal("50"), category="Limpeza"))
    store.save_product(Product(id="P1", name="Disjuntor 20A", price=Decimal("35.90"), stock=1, category="Peças"))
    store.save_client(Client(id="C1", name="Maria Souza", email="maria@example.com", phone="(11) 99999-0000"))
    return store


@pytest.fixture
def profile() -> CompanyProfile:
    return CompanyProfile(name="Souza Serviços", owner_name="João Souza", document="12.345.678/0001-90")
