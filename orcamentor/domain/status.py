"""Lifecycle statuses for quotes and commitments.

Status changes are user selections. By default any status may follow any
other; ``strict=True`` checks the conventional forward flow instead.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeVar


class InvalidTransition(ValueError):
    """Raised by strict transitions that leave the conventional flow."""


class QuoteStatus(StrEnum):
    DRAFT = "rascunho"
    SENT = "enviado"
    APPROVED = "aprovado"
    REJECTED = "rejeitado"

    @classmethod
    def parse(cls, value: Any, default: QuoteStatus | None = None) -> QuoteStatus:
        return _parse(cls, value, default)

    @property
    def label(self) -> str:
        return _QUOTE_LABELS[self]


class CommitmentStatus(StrEnum):
    COMMITTED = "empenhado"
    LIQUIDATED = "liquidado"
    PAID = "pago"
    CANCELLED = "cancelado"

    @classmethod
    def parse(cls, value: Any, default: CommitmentStatus | None = None) -> CommitmentStatus:
        return _parse(cls, value, default)

    @property
    def label(self) -> str:
        return _COMMITMENT_LABELS[self]


_QUOTE_LABELS = {
    QuoteStatus.DRAFT: "Rascunho",
    QuoteStatus.SENT: "Enviado",
    QuoteStatus.APPROVED: "Aprovado",
    QuoteStatus.REJECTED: "Rejeitado",
}

_COMMITMENT_LABELS = {
    CommitmentStatus.COMMITTED: "Empenhado",
    CommitmentStatus.LIQUIDATED: "Liquidado",
    CommitmentStatus.PAID: "Pago",
    CommitmentStatus.CANCELLED: "Cancelado",
}

# English aliases accepted on the CLI and HTTP surface.
_ALIASES = {
    "draft": QuoteStatus.DRAFT,
    "sent": QuoteStatus.SENT,
    "approved": QuoteStatus.APPROVED,
    "rejected": QuoteStatus.REJECTED,
    "committed": CommitmentStatus.COMMITTED,
    "liquidated": CommitmentStatus.LIQUIDATED,
    "settled": CommitmentStatus.LIQUIDATED,
    "paid": CommitmentStatus.PAID,
    "cancelled": CommitmentStatus.CANCELLED,
    "canceled": CommitmentStatus.CANCELLED,
}

TERMINAL_STATUSES: frozenset[StrEnum] = frozenset(
    {QuoteStatus.REJECTED, CommitmentStatus.PAID, CommitmentStatus.CANCELLED}
)

_STRICT_QUOTE_FLOW: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SENT}),
    QuoteStatus.SENT: frozenset({QuoteStatus.APPROVED, QuoteStatus.REJECTED}),
    QuoteStatus.APPROVED: frozenset(),
    QuoteStatus.REJECTED: frozenset(),
}

_STRICT_COMMITMENT_FLOW: dict[CommitmentStatus, frozenset[CommitmentStatus]] = {
    CommitmentStatus.COMMITTED: frozenset({CommitmentStatus.LIQUIDATED, CommitmentStatus.CANCELLED}),
    CommitmentStatus.LIQUIDATED: frozenset({CommitmentStatus.PAID, CommitmentStatus.CANCELLED}),
    CommitmentStatus.PAID: frozenset(),
    CommitmentStatus.CANCELLED: frozenset(),
}

_S = TypeVar("_S", QuoteStatus, CommitmentStatus)


def _parse(enum_cls: type[_S], value: Any, default: _S | None) -> _S:
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip().lower()
    try:
        return enum_cls(text)
    except ValueError:
        alias = _ALIASES.get(text)
        if isinstance(alias, enum_cls):
            return alias
    if default is not None:
        return default
    choices = ", ".join(member.value for member in enum_cls)
    raise ValueError(f"Unknown status {value!r}; expected one of: {choices}")


def is_terminal(status: QuoteStatus | CommitmentStatus) -> bool:
    """Conventional end state. Informational: terminal records stay editable."""
    return status in TERMINAL_STATUSES


def allowed_targets(current: _S, strict: bool = False) -> frozenset[_S]:
    """Statuses reachable from ``current``."""
    if not strict:
        return frozenset(type(current)) - {current}
    if isinstance(current, QuoteStatus):
        return _STRICT_QUOTE_FLOW[current]  # type: ignore[return-value]
    return _STRICT_COMMITMENT_FLOW[current]  # type: ignore[return-value]


def transition(current: _S, target: _S, strict: bool = False) -> _S:
    """
    Move a record from ``current`` to ``target``.

    Selecting the current status again is always a no-op. In permissive mode
    every other status is accepted as well.
    """
    if type(current) is not type(target):
        raise InvalidTransition(f"Cannot move {type(current).__name__} to {type(target).__name__}")
    if current == target or not strict:
        return target
    if target not in allowed_targets(current, strict=True):
        raise InvalidTransition(f"Transition {current.value} -> {target.value} is not allowed")
    return target
