"""Tests for quote and commitment status handling."""

from __future__ import annotations

import pytest

from orcamentor.domain.status import (
    CommitmentStatus,
    InvalidTransition,
    QuoteStatus,
    allowed_targets,
    is_terminal,
    transition,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("aprovado", QuoteStatus.APPROVED),
        ("  Enviado ", QuoteStatus.SENT),
        ("approved", QuoteStatus.APPROVED),
        ("draft", QuoteStatus.DRAFT),
        (QuoteStatus.REJECTED, QuoteStatus.REJECTED),
    ],
)
def test_quote_status_parse(raw: object, expected: QuoteStatus) -> None:
    assert QuoteStatus.parse(raw) is expected


def test_parse_rejects_unknown_without_default() -> None:
    with pytest.raises(ValueError, match="Unknown status"):
        QuoteStatus.parse("archived")


def test_parse_unknown_with_default() -> None:
    assert QuoteStatus.parse("archived", default=QuoteStatus.DRAFT) is QuoteStatus.DRAFT
    assert CommitmentStatus.parse(None, default=CommitmentStatus.COMMITTED) is CommitmentStatus.COMMITTED


def test_aliases_do_not_cross_enums() -> None:
    with pytest.raises(ValueError):
        QuoteStatus.parse("paid")


def test_labels() -> None:
    assert QuoteStatus.APPROVED.label == "Aprovado"
    assert CommitmentStatus.LIQUIDATED.label == "Liquidado"


def test_permissive_transitions_allow_any_status() -> None:
    assert transition(QuoteStatus.REJECTED, QuoteStatus.DRAFT) is QuoteStatus.DRAFT
    assert transition(CommitmentStatus.PAID, CommitmentStatus.COMMITTED) is CommitmentStatus.COMMITTED
    assert allowed_targets(QuoteStatus.DRAFT) == frozenset(
        {QuoteStatus.SENT, QuoteStatus.APPROVED, QuoteStatus.REJECTED}
    )


def test_strict_transitions_follow_forward_flow() -> None:
    assert transition(QuoteStatus.DRAFT, QuoteStatus.SENT, strict=True) is QuoteStatus.SENT
    assert transition(QuoteStatus.SENT, QuoteStatus.APPROVED, strict=True) is QuoteStatus.APPROVED
    assert transition(QuoteStatus.APPROVED, QuoteStatus.APPROVED, strict=True) is QuoteStatus.APPROVED

    with pytest.raises(InvalidTransition):
        transition(QuoteStatus.DRAFT, QuoteStatus.APPROVED, strict=True)
    with pytest.raises(InvalidTransition):
        transition(CommitmentStatus.PAID, CommitmentStatus.LIQUIDATED, strict=True)


def test_transition_rejects_mixed_status_types() -> None:
    with pytest.raises(InvalidTransition):
        transition(QuoteStatus.DRAFT, CommitmentStatus.PAID)  # type: ignore[type-var]


def test_terminal_statuses() -> None:
    assert is_terminal(QuoteStatus.REJECTED)
    assert is_terminal(CommitmentStatus.CANCELLED)
    assert not is_terminal(QuoteStatus.APPROVED)
    assert not is_terminal(CommitmentStatus.LIQUIDATED)
