"""Data models for catalog, clients, quotes, receipts and commitments.

Records are frozen so that snapshots handed out by the store cannot be
mutated behind its back. Nested collections are tuples for the same reason.

Every model round-trips through ``to_dict``/``from_dict`` using the camelCase
keys of the persisted JSON layout.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from orcamentor.domain.status import CommitmentStatus, QuoteStatus

DEFAULT_CATEGORY = "Geral"
DEFAULT_SERVICE_CATEGORIES = ("Manutenção", "Elétrica", "Limpeza", "Hidráulica", "Geral")
DEFAULT_PRODUCT_CATEGORIES = ("Material", "Peças", "Equipamentos", "Geral")
DEFAULT_VALIDITY_DAYS = 15
PAYMENT_METHODS = ("Pix", "Dinheiro", "Cartão")

ServiceUnit = Literal["hora", "unidade", "m2", "global"]
ServiceAvailability = Literal["ativo", "manutenção"]
ItemType = Literal["service", "product"]

SERVICE_UNITS: tuple[ServiceUnit, ...] = ("hora", "unidade", "m2", "global")
SERVICE_AVAILABILITY: tuple[ServiceAvailability, ...] = ("ativo", "manutenção")
ITEM_TYPES: tuple[ItemType, ...] = ("service", "product")

_ID_ALPHABET = string.ascii_uppercase + string.digits


def new_id(length: int = 9) -> str:
    """Generate an opaque upper-case identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """
    Coerce a stored or user-entered value to Decimal.

    Accepts ints, floats, Decimals and numeric strings using either ``.`` or
    ``,`` as decimal separator; with both present the comma must be the
    decimal one (``1.234,50``). Anything else (None, garbage, NaN, infinity)
    yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        text = str(value).strip().replace("R$", "").strip()
        if not text:
            return default
        if "," in text:
            # "1.234,50" only; a comma before the last dot is ambiguous
            if text.rfind(",") < text.rfind("."):
                return default
            text = text.replace(".", "").replace(",", ".")
        try:
            result = Decimal(text)
        except InvalidOperation:
            return default
    if not result.is_finite():
        return default
    return result


def decimal_to_json(value: Decimal) -> int | float:
    """Render a Decimal as a plain JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    result = to_decimal(value, default=Decimal("NaN"))
    if result.is_nan():
        return None
    return result


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _optional_str(value: Any) -> str | None:
    if not value:
        return None
    return str(value)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class Service:
    """A billable service offered by the business."""

    id: str
    name: str
    price: Decimal
    description: str = ""
    unit: ServiceUnit = "unidade"
    category: str = DEFAULT_CATEGORY
    status: ServiceAvailability = "ativo"
    image: str | None = None
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Service:
        unit = data.get("unit")
        status = data.get("status")
        return cls(
            id=_str(data["id"]),
            name=_str(data.get("name")),
            description=_str(data.get("description")),
            price=to_decimal(data.get("price")),
            unit=unit if unit in SERVICE_UNITS else "unidade",
            category=_str(data.get("category")) or DEFAULT_CATEGORY,
            status=status if status in SERVICE_AVAILABILITY else "ativo",
            image=_optional_str(data.get("image")),
            is_favorite=bool(data.get("isFavorite", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "description": self.description,
                "price": decimal_to_json(self.price),
                "unit": self.unit,
                "category": self.category,
                "status": self.status,
                "image": self.image,
                "isFavorite": self.is_favorite,
            }
        )


@dataclass(frozen=True)
class Product:
    """A stocked product. Stock at or below the low-stock threshold is flagged."""

    id: str
    name: str
    price: Decimal
    description: str = ""
    stock: int = 0
    unit: str = "unidade"
    category: str = DEFAULT_CATEGORY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Product:
        return cls(
            id=_str(data["id"]),
            name=_str(data.get("name")),
            description=_str(data.get("description")),
            price=to_decimal(data.get("price")),
            stock=_to_int(data.get("stock")),
            unit=_str(data.get("unit")) or "unidade",
            category=_str(data.get("category")) or DEFAULT_CATEGORY,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": decimal_to_json(self.price),
            "stock": self.stock,
            "unit": self.unit,
            "category": self.category,
        }


CatalogItem = Service | Product


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Client:
        return cls(
            id=_str(data["id"]),
            name=_str(data.get("name")),
            email=_str(data.get("email")),
            phone=_str(data.get("phone")),
            address=_str(data.get("address")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }


@dataclass(frozen=True)
class Appointment:
    """A scheduled visit for a service at a client."""

    id: str
    service_id: str
    client_id: str
    date: str
    time: str
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Appointment:
        return cls(
            id=_str(data["id"]),
            service_id=_str(data.get("serviceId")),
            client_id=_str(data.get("clientId")),
            date=_str(data.get("date")),
            time=_str(data.get("time")),
            notes=_str(data.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "serviceId": self.service_id,
            "clientId": self.client_id,
            "date": self.date,
            "time": self.time,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class QuoteItem:
    """One line of a quote, referencing a catalog entry by id."""

    item_id: str
    type: ItemType
    quantity: int = 1
    price_override: Decimal | None = None
    image: str | None = None  # evidence photo as data URI

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuoteItem:
        item_type = data.get("type")
        return cls(
            item_id=_str(data.get("itemId")),
            type=item_type if item_type in ITEM_TYPES else "service",
            quantity=_to_int(data.get("quantity"), default=1),
            price_override=_optional_decimal(data.get("priceOverride")),
            image=_optional_str(data.get("image")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "itemId": self.item_id,
                "type": self.type,
                "quantity": self.quantity,
                "priceOverride": (
                    decimal_to_json(self.price_override) if self.price_override is not None else None
                ),
                "image": self.image,
            }
        )


@dataclass(frozen=True)
class Quote:
    """
    A price estimate for a client.

    ``total`` is derived from items and discount. It is persisted for
    convenience but the store rewrites it on every item or discount change.
    """

    id: str
    client_id: str
    date: str
    valid_until: str
    items: tuple[QuoteItem, ...] = ()
    discount: Decimal = Decimal("0")
    status: QuoteStatus = QuoteStatus.DRAFT
    total: Decimal = Decimal("0")
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Quote:
        date = _str(data.get("date"))
        valid_until = _str(data.get("validUntil")) or default_valid_until(date)
        return cls(
            id=_str(data["id"]),
            client_id=_str(data.get("clientId")),
            items=tuple(QuoteItem.from_dict(item) for item in data.get("items") or []),
            discount=to_decimal(data.get("discount")),
            status=QuoteStatus.parse(data.get("status"), default=QuoteStatus.DRAFT),
            date=date,
            valid_until=valid_until,
            total=to_decimal(data.get("total")),
            notes=_str(data.get("notes")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "items": [item.to_dict() for item in self.items],
            "discount": decimal_to_json(self.discount),
            "status": self.status.value,
            "date": self.date,
            "validUntil": self.valid_until,
            "total": decimal_to_json(self.total),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Receipt:
    """Record of a completed payment. Never edited after creation."""

    id: str
    client_id: str
    amount: Decimal
    date: str
    description: str = ""
    payment_method: str = "Pix"
    quote_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Receipt:
        return cls(
            id=_str(data["id"]),
            client_id=_str(data.get("clientId")),
            quote_id=_optional_str(data.get("quoteId")),
            amount=to_decimal(data.get("amount")),
            date=_str(data.get("date")),
            description=_str(data.get("description")),
            payment_method=_str(data.get("paymentMethod")) or "Pix",
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "clientId": self.client_id,
                "quoteId": self.quote_id,
                "amount": decimal_to_json(self.amount),
                "date": self.date,
                "description": self.description,
                "paymentMethod": self.payment_method,
            }
        )


@dataclass(frozen=True)
class Commitment:
    """A public-authority commitment ("empenho")."""

    id: str
    authority: str
    commitment_number: str
    date: str
    value: Decimal = Decimal("0")
    process_number: str = ""
    description: str = ""
    status: CommitmentStatus = CommitmentStatus.COMMITTED
    authority_logo: str | None = None
    images: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Commitment:
        return cls(
            id=_str(data["id"]),
            authority=_str(data.get("prefeitura")),
            authority_logo=_optional_str(data.get("prefeituraLogo")),
            commitment_number=_str(data.get("commitmentNumber")),
            process_number=_str(data.get("processNumber")),
            date=_str(data.get("date")),
            value=to_decimal(data.get("value")),
            description=_str(data.get("description")),
            status=CommitmentStatus.parse(data.get("status"), default=CommitmentStatus.COMMITTED),
            images=tuple(str(image) for image in data.get("images") or [] if image),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "prefeitura": self.authority,
                "prefeituraLogo": self.authority_logo,
                "commitmentNumber": self.commitment_number,
                "processNumber": self.process_number,
                "date": self.date,
                "value": decimal_to_json(self.value),
                "description": self.description,
                "status": self.status.value,
                "images": list(self.images),
            }
        )


@dataclass(frozen=True)
class CompanyProfile:
    """Issuer branding printed on every generated document."""

    name: str = "Meu Negócio"
    owner_name: str = ""
    document: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    logo: str | None = None
    website: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompanyProfile:
        return cls(
            name=_str(data.get("name")),
            owner_name=_str(data.get("ownerName")),
            document=_str(data.get("document")),
            email=_str(data.get("email")),
            phone=_str(data.get("phone")),
            address=_str(data.get("address")),
            logo=_optional_str(data.get("logo")),
            website=_optional_str(data.get("website")),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "ownerName": self.owner_name,
                "document": self.document,
                "email": self.email,
                "phone": self.phone,
                "address": self.address,
                "logo": self.logo,
                "website": self.website,
            }
        )


@dataclass(frozen=True)
class Catalog:
    """Read-only snapshot of both catalogs, indexed by id."""

    services: dict[str, Service] = field(default_factory=dict)
    products: dict[str, Product] = field(default_factory=dict)

    @classmethod
    def of(cls, services: Any = (), products: Any = ()) -> Catalog:
        return cls(
            services={service.id: service for service in services},
            products={product.id: product for product in products},
        )

    def lookup(self, item_type: ItemType, item_id: str) -> CatalogItem | None:
        if item_type == "service":
            return self.services.get(item_id)
        return self.products.get(item_id)


def default_valid_until(date_iso: str, days: int = DEFAULT_VALIDITY_DAYS) -> str:
    """Validity deadline ``days`` after the quote date; empty if the date is unreadable."""
    try:
        created = datetime.fromisoformat(date_iso)
    except ValueError:
        return ""
    return (created + timedelta(days=days)).isoformat()
