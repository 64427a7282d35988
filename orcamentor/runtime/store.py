"""In-process application store.

The store owns every entity collection. Reads return immutable snapshots
(frozen records in tuples); every mutation validates its input, recomputes
derived fields synchronously, writes the affected key back to storage and
then notifies subscribers with that key.

Persistence failures never raise: they are logged and recorded in
``persist_warnings`` while the in-memory state stays authoritative for the
session.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Literal, TypeVar

from orcamentor.domain.metrics import DashboardMetrics, build_dashboard_metrics
from orcamentor.domain.models import (
    DEFAULT_CATEGORY,
    DEFAULT_PRODUCT_CATEGORIES,
    DEFAULT_SERVICE_CATEGORIES,
    Appointment,
    Catalog,
    Client,
    Commitment,
    CompanyProfile,
    Product,
    Quote,
    QuoteItem,
    Receipt,
    Service,
    new_id,
    to_decimal,
)
from orcamentor.domain.status import CommitmentStatus, QuoteStatus, transition
from orcamentor.domain.totals import coerce_commitment_value, coerce_discount, recompute_total, with_recomputed_total
from orcamentor.domain.validation import (
    ValidationError,
    validate_appointment,
    validate_commitment,
    validate_named,
    validate_quote,
    validate_receipt,
)
from orcamentor.runtime.logging import get_logger
from orcamentor.runtime.paths import ProjectPaths, get_paths
from orcamentor.runtime.settings import Settings
from orcamentor.runtime.storage import (
    APPOINTMENTS_KEY,
    CATEGORIES_KEY,
    CLIENTS_KEY,
    COMMITMENTS_KEY,
    PRODUCT_CATEGORIES_KEY,
    PRODUCTS_KEY,
    PROFILE_KEY,
    QUOTES_KEY,
    RECEIPTS_KEY,
    SERVICES_KEY,
    JsonDirectoryStorage,
    KeyValueStorage,
    dump_json,
    load_json,
    load_records,
)

logger = get_logger(__name__)

CategoryKind = Literal["service", "product"]
Subscriber = Callable[[str], None]
_R = TypeVar("_R", Service, Product, Client, Quote, Receipt, Commitment, Appointment)


class RecordNotFound(LookupError):
    """A mutation referenced an id that is not in the store."""


_UNSET: Any = object()


class AppStore:
    """Owner of all entity collections."""

    def __init__(
        self,
        storage: KeyValueStorage,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.storage = storage
        self.settings = settings or Settings()
        self.clock = clock
        self.persist_warnings: list[str] = []

        self._services: list[Service] = []
        self._products: list[Product] = []
        self._clients: list[Client] = []
        self._quotes: list[Quote] = []
        self._receipts: list[Receipt] = []
        self._commitments: list[Commitment] = []
        self._appointments: list[Appointment] = []
        self._service_categories: list[str] = list(DEFAULT_SERVICE_CATEGORIES)
        self._product_categories: list[str] = list(DEFAULT_PRODUCT_CATEGORIES)
        self._profile = CompanyProfile()
        self._subscribers: list[Subscriber] = []

    # --- Loading ---

    def load(self) -> AppStore:
        """Load every key; a bad key falls back to its default without blocking the rest."""
        self._services = load_records(self.storage, SERVICES_KEY, Service.from_dict)
        self._products = load_records(self.storage, PRODUCTS_KEY, Product.from_dict)
        self._clients = load_records(self.storage, CLIENTS_KEY, Client.from_dict)
        self._quotes = load_records(self.storage, QUOTES_KEY, Quote.from_dict)
        self._receipts = load_records(self.storage, RECEIPTS_KEY, Receipt.from_dict)
        self._commitments = load_records(self.storage, COMMITMENTS_KEY, Commitment.from_dict)
        self._appointments = load_records(self.storage, APPOINTMENTS_KEY, Appointment.from_dict)
        self._service_categories = self._load_categories(CATEGORIES_KEY, DEFAULT_SERVICE_CATEGORIES)
        self._product_categories = self._load_categories(PRODUCT_CATEGORIES_KEY, DEFAULT_PRODUCT_CATEGORIES)

        raw_profile = load_json(self.storage, PROFILE_KEY, None)
        if isinstance(raw_profile, dict):
            self._profile = CompanyProfile.from_dict(raw_profile)
        else:
            self._profile = CompanyProfile()

        logger.info(
            "Loaded %d services, %d products, %d clients, %d quotes, %d receipts, %d commitments",
            len(self._services),
            len(self._products),
            len(self._clients),
            len(self._quotes),
            len(self._receipts),
            len(self._commitments),
        )
        return self

    def _load_categories(self, key: str, default: Sequence[str]) -> list[str]:
        raw = load_json(self.storage, key, None)
        if not isinstance(raw, list) or not all(isinstance(name, str) for name in raw):
            return list(default)
        return list(raw)

    # --- Snapshots ---

    @property
    def services(self) -> tuple[Service, ...]:
        return tuple(self._services)

    @property
    def products(self) -> tuple[Product, ...]:
        return tuple(self._products)

    @property
    def clients(self) -> tuple[Client, ...]:
        return tuple(self._clients)

    @property
    def quotes(self) -> tuple[Quote, ...]:
        return tuple(self._quotes)

    @property
    def receipts(self) -> tuple[Receipt, ...]:
        return tuple(self._receipts)

    @property
    def commitments(self) -> tuple[Commitment, ...]:
        return tuple(self._commitments)

    @property
    def appointments(self) -> tuple[Appointment, ...]:
        return tuple(self._appointments)

    @property
    def service_categories(self) -> tuple[str, ...]:
        return tuple(self._service_categories)

    @property
    def product_categories(self) -> tuple[str, ...]:
        return tuple(self._product_categories)

    @property
    def profile(self) -> CompanyProfile:
        return self._profile

    def catalog(self) -> Catalog:
        return Catalog.of(self._services, self._products)

    def metrics(self) -> DashboardMetrics:
        """Dashboard figures over the current collections."""
        return build_dashboard_metrics(
            self._quotes,
            self._receipts,
            self._products,
            self._services,
            top_n=self.settings.top_categories,
            low_stock_threshold=self.settings.low_stock_threshold,
        )

    # --- Lookups (None for dangling references) ---

    def find_service(self, service_id: str) -> Service | None:
        return _find(self._services, service_id)

    def find_product(self, product_id: str) -> Product | None:
        return _find(self._products, product_id)

    def find_client(self, client_id: str) -> Client | None:
        return _find(self._clients, client_id)

    def find_quote(self, quote_id: str) -> Quote | None:
        return _find(self._quotes, quote_id)

    def find_receipt(self, receipt_id: str) -> Receipt | None:
        return _find(self._receipts, receipt_id)

    def find_commitment(self, commitment_id: str) -> Commitment | None:
        return _find(self._commitments, commitment_id)

    # --- Subscriptions ---

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(key)`` for every committed mutation; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # --- Persistence ---

    def _serialize(self, key: str) -> Any:
        if key == SERVICES_KEY:
            return [service.to_dict() for service in self._services]
        if key == PRODUCTS_KEY:
            return [product.to_dict() for product in self._products]
        if key == CLIENTS_KEY:
            return [client.to_dict() for client in self._clients]
        if key == QUOTES_KEY:
            return [quote.to_dict() for quote in self._quotes]
        if key == RECEIPTS_KEY:
            return [receipt.to_dict() for receipt in self._receipts]
        if key == COMMITMENTS_KEY:
            return [commitment.to_dict() for commitment in self._commitments]
        if key == APPOINTMENTS_KEY:
            return [appointment.to_dict() for appointment in self._appointments]
        if key == CATEGORIES_KEY:
            return list(self._service_categories)
        if key == PRODUCT_CATEGORIES_KEY:
            return list(self._product_categories)
        if key == PROFILE_KEY:
            return self._profile.to_dict()
        raise KeyError(key)

    def _commit(self, *keys: str) -> None:
        for key in keys:
            try:
                dump_json(self.storage, key, self._serialize(key))
            except (OSError, TypeError, ValueError) as e:
                message = f"Falha ao salvar {key}: {e}"
                logger.warning("Failed to persist %s: %s", key, e)
                self.persist_warnings.append(message)
        for key in keys:
            for callback in list(self._subscribers):
                callback(key)

    def flush(self) -> None:
        """Write every collection back to storage."""
        self._commit(
            SERVICES_KEY,
            PRODUCTS_KEY,
            CLIENTS_KEY,
            QUOTES_KEY,
            RECEIPTS_KEY,
            COMMITMENTS_KEY,
            APPOINTMENTS_KEY,
            CATEGORIES_KEY,
            PRODUCT_CATEGORIES_KEY,
            PROFILE_KEY,
        )

    # --- Services and products ---

    def save_service(self, service: Service) -> Service:
        """Create or replace a service by id."""
        validate_named(service.name, "serviço")
        if not service.category:
            service = replace(service, category=DEFAULT_CATEGORY)
        _upsert(self._services, service)
        self._commit(SERVICES_KEY)
        return service

    def delete_service(self, service_id: str) -> bool:
        """Remove a service. Quotes referencing it keep the dangling id."""
        removed = _remove(self._services, service_id)
        if removed:
            self._commit(SERVICES_KEY)
        return removed

    def toggle_favorite(self, service_id: str) -> Service:
        service = _require(self._services, service_id, "Serviço")
        updated = replace(service, is_favorite=not service.is_favorite)
        _upsert(self._services, updated)
        self._commit(SERVICES_KEY)
        return updated

    def save_product(self, product: Product) -> Product:
        validate_named(product.name, "produto")
        if not product.category:
            product = replace(product, category=DEFAULT_CATEGORY)
        _upsert(self._products, product)
        self._commit(PRODUCTS_KEY)
        return product

    def delete_product(self, product_id: str) -> bool:
        removed = _remove(self._products, product_id)
        if removed:
            self._commit(PRODUCTS_KEY)
        return removed

    # --- Categories ---

    def _category_list(self, kind: CategoryKind) -> tuple[list[str], str]:
        if kind == "service":
            return self._service_categories, CATEGORIES_KEY
        return self._product_categories, PRODUCT_CATEGORIES_KEY

    def _relabel(self, kind: CategoryKind, old: str, new: str) -> str:
        if kind == "service":
            self._services = [replace(s, category=new) if s.category == old else s for s in self._services]
            return SERVICES_KEY
        self._products = [replace(p, category=new) if p.category == old else p for p in self._products]
        return PRODUCTS_KEY

    def add_category(self, name: str, kind: CategoryKind = "service") -> bool:
        categories, key = self._category_list(kind)
        name = name.strip()
        if not name or name in categories:
            return False
        categories.append(name)
        self._commit(key)
        return True

    def rename_category(self, old: str, new: str, kind: CategoryKind = "service") -> bool:
        """Rename a category and re-label the catalog entries that used it."""
        categories, key = self._category_list(kind)
        new = new.strip()
        if not new or old == new or old not in categories:
            return False
        categories[categories.index(old)] = new
        catalog_key = self._relabel(kind, old, new)
        self._commit(key, catalog_key)
        return True

    def remove_category(self, name: str, kind: CategoryKind = "service") -> bool:
        """Remove a category; its entries move to the default category, which cannot be removed."""
        categories, key = self._category_list(kind)
        if name == DEFAULT_CATEGORY or name not in categories:
            return False
        categories.remove(name)
        catalog_key = self._relabel(kind, name, DEFAULT_CATEGORY)
        self._commit(key, catalog_key)
        return True

    # --- Clients and appointments ---

    def save_client(self, client: Client) -> Client:
        validate_named(client.name, "cliente")
        _upsert(self._clients, client)
        self._commit(CLIENTS_KEY)
        return client

    def delete_client(self, client_id: str) -> bool:
        """Remove a client. Quotes and receipts keep the dangling id."""
        removed = _remove(self._clients, client_id)
        if removed:
            self._commit(CLIENTS_KEY)
        return removed

    def schedule_appointment(
        self, service_id: str, client_id: str, date: str, time: str, notes: str = ""
    ) -> Appointment:
        validate_appointment(client_id, date, time)
        _require(self._services, service_id, "Serviço")
        appointment = Appointment(
            id=new_id(), service_id=service_id, client_id=client_id, date=date, time=time, notes=notes
        )
        self._appointments.append(appointment)
        self._commit(APPOINTMENTS_KEY)
        return appointment

    # --- Quotes ---

    def create_quote(
        self,
        client_id: str,
        items: Iterable[QuoteItem],
        discount: Any = 0,
        notes: str = "",
    ) -> Quote:
        """Create a draft quote, newest first, with its total computed from the current catalog."""
        items = tuple(items)
        validate_quote(client_id, items)
        created = self.clock()
        discount_value = coerce_discount(discount)
        quote = Quote(
            id=new_id(),
            client_id=client_id,
            items=items,
            discount=discount_value,
            status=QuoteStatus.DRAFT,
            date=created.isoformat(),
            valid_until=(created + timedelta(days=self.settings.validity_days)).isoformat(),
            total=recompute_total(items, discount_value, self.catalog()),
            notes=notes,
        )
        self._quotes.insert(0, quote)
        self._commit(QUOTES_KEY)
        logger.info("Created quote %s for client %s (total %s)", quote.id, client_id, quote.total)
        return quote

    def _replace_quote(self, quote: Quote) -> Quote:
        quote = with_recomputed_total(quote, self.catalog())
        _upsert(self._quotes, quote)
        self._commit(QUOTES_KEY)
        return quote

    def add_quote_item(self, quote_id: str, item: QuoteItem) -> Quote:
        quote = _require(self._quotes, quote_id, "Orçamento")
        if not item.item_id:
            raise ValidationError("Item do orçamento sem referência ao catálogo.")
        return self._replace_quote(replace(quote, items=quote.items + (item,)))

    def remove_quote_item(self, quote_id: str, index: int) -> Quote:
        quote = _require(self._quotes, quote_id, "Orçamento")
        if not 0 <= index < len(quote.items):
            raise IndexError(f"Quote {quote_id} has no item {index}")
        items = quote.items[:index] + quote.items[index + 1 :]
        return self._replace_quote(replace(quote, items=items))

    def update_quote_item(
        self,
        quote_id: str,
        index: int,
        *,
        quantity: int | None = None,
        price_override: Any = _UNSET,
    ) -> Quote:
        """
        Change a line's quantity and/or price override.

        Pass ``price_override=None`` to clear the override and fall back to the
        catalog price again.
        """
        quote = _require(self._quotes, quote_id, "Orçamento")
        if not 0 <= index < len(quote.items):
            raise IndexError(f"Quote {quote_id} has no item {index}")
        item = quote.items[index]
        if quantity is not None:
            item = replace(item, quantity=quantity)
        if price_override is not _UNSET:
            override = None if price_override is None else max(Decimal("0"), to_decimal(price_override))
            item = replace(item, price_override=override)
        items = quote.items[:index] + (item,) + quote.items[index + 1 :]
        return self._replace_quote(replace(quote, items=items))

    def set_quote_discount(self, quote_id: str, discount: Any) -> Quote:
        quote = _require(self._quotes, quote_id, "Orçamento")
        return self._replace_quote(replace(quote, discount=coerce_discount(discount)))

    def refresh_quote_total(self, quote_id: str) -> Quote:
        """Re-price a quote against the current catalog."""
        quote = _require(self._quotes, quote_id, "Orçamento")
        return self._replace_quote(quote)

    def set_quote_status(self, quote_id: str, status: QuoteStatus | str, strict: bool = False) -> Quote:
        quote = _require(self._quotes, quote_id, "Orçamento")
        target = transition(quote.status, QuoteStatus.parse(status), strict=strict)
        updated = replace(quote, status=target)
        _upsert(self._quotes, updated)
        self._commit(QUOTES_KEY)
        logger.info("Quote %s status %s -> %s", quote_id, quote.status.value, target.value)
        return updated

    def delete_quote(self, quote_id: str) -> bool:
        removed = _remove(self._quotes, quote_id)
        if removed:
            self._commit(QUOTES_KEY)
        return removed

    # --- Receipts ---

    def create_receipt(
        self,
        client_id: str,
        amount: Any,
        *,
        date: str | None = None,
        description: str = "",
        payment_method: str = "Pix",
        quote_id: str | None = None,
    ) -> Receipt:
        amount_value = to_decimal(amount)
        validate_receipt(client_id, amount_value)
        receipt = Receipt(
            id=new_id(6),
            client_id=client_id,
            quote_id=quote_id or None,
            amount=amount_value,
            date=date or self.clock().date().isoformat(),
            description=description,
            payment_method=payment_method or "Pix",
        )
        self._receipts.insert(0, receipt)
        self._commit(RECEIPTS_KEY)
        logger.info("Created receipt %s (%s)", receipt.id, receipt.amount)
        return receipt

    def delete_receipt(self, receipt_id: str) -> bool:
        removed = _remove(self._receipts, receipt_id)
        if removed:
            self._commit(RECEIPTS_KEY)
        return removed

    # --- Commitments ---

    def save_commitment(
        self,
        authority: str,
        commitment_number: str,
        *,
        commitment_id: str | None = None,
        process_number: str = "",
        date: str | None = None,
        value: Any = 0,
        description: str = "",
        status: CommitmentStatus | str = CommitmentStatus.COMMITTED,
        authority_logo: str | None = None,
        images: Sequence[str] = (),
    ) -> Commitment:
        """Create a commitment, or replace the one with ``commitment_id``."""
        validate_commitment(authority, commitment_number)
        commitment = Commitment(
            id=commitment_id or new_id(),
            authority=authority.strip(),
            authority_logo=authority_logo or None,
            commitment_number=commitment_number.strip(),
            process_number=process_number,
            date=date or self.clock().date().isoformat(),
            value=coerce_commitment_value(value),
            description=description,
            status=CommitmentStatus.parse(status),
            images=tuple(images),
        )
        if commitment_id and _find(self._commitments, commitment_id) is not None:
            _upsert(self._commitments, commitment)
        else:
            self._commitments.insert(0, commitment)
        self._commit(COMMITMENTS_KEY)
        return commitment

    def set_commitment_status(
        self, commitment_id: str, status: CommitmentStatus | str, strict: bool = False
    ) -> Commitment:
        commitment = _require(self._commitments, commitment_id, "Empenho")
        target = transition(commitment.status, CommitmentStatus.parse(status), strict=strict)
        updated = replace(commitment, status=target)
        _upsert(self._commitments, updated)
        self._commit(COMMITMENTS_KEY)
        return updated

    def delete_commitment(self, commitment_id: str) -> bool:
        removed = _remove(self._commitments, commitment_id)
        if removed:
            self._commit(COMMITMENTS_KEY)
        return removed

    # --- Profile ---

    def update_profile(self, **changes: Any) -> CompanyProfile:
        """Edit the singleton company profile in place."""
        self._profile = replace(self._profile, **changes)
        self._commit(PROFILE_KEY)
        return self._profile


def _find(records: Sequence[_R], record_id: str) -> _R | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def _require(records: Sequence[_R], record_id: str, label: str) -> _R:
    record = _find(records, record_id)
    if record is None:
        raise RecordNotFound(f"{label} não encontrado: {record_id}")
    return record


def _upsert(records: list[_R], record: _R) -> None:
    for index, existing in enumerate(records):
        if existing.id == record.id:
            records[index] = record
            return
    records.append(record)


def _remove(records: list[_R], record_id: str) -> bool:
    for index, existing in enumerate(records):
        if existing.id == record_id:
            del records[index]
            return True
    return False


def open_store(settings: Settings | None = None, paths: ProjectPaths | None = None) -> AppStore:
    """Load the on-disk store under the application home."""
    paths = paths or get_paths()
    return AppStore(JsonDirectoryStorage(paths.data), settings=settings).load()
