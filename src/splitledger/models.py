"""Pydantic domain models for SplitLedger."""

from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from .money import round_money

# Participants are referenced by identity only: any hashable, comparable value
# supplied by the caller (usually a string id).
ParticipantId = Any


# ============================================================================
# Ledger Models
# ============================================================================


class ExpenseRecord(BaseModel):
    """A recorded expense: who paid, and what each participant owes for it."""

    model_config = ConfigDict(frozen=True)

    payer: ParticipantId
    shares: dict[ParticipantId, Decimal]

    @field_validator("shares")
    @classmethod
    def _non_negative_shares(cls, shares: dict[Any, Decimal]) -> dict[Any, Decimal]:
        for participant, amount in shares.items():
            if amount < 0:
                raise ValueError(f"Negative share {amount} for {participant!r}")
        return shares

    @property
    def participants(self) -> list[ParticipantId]:
        """Payer first, then every share recipient not already listed."""
        seen = [self.payer]
        for participant in self.shares:
            if participant not in seen:
                seen.append(participant)
        return seen

    @property
    def total(self) -> Decimal:
        """Sum of all shares, including the payer's own."""
        return sum(self.shares.values(), Decimal("0"))


class Payment(BaseModel):
    """A single settlement payment from a debtor to a creditor.

    ``amount`` is the exact amount settled, so applying every payment clears
    the balances. It is rounded to ``places`` only for display and when
    serialized as ``{"from": ..., "to": ..., "amount": ...}`` with
    ``by_alias=True``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_participant: ParticipantId = Field(alias="from")
    to_participant: ParticipantId = Field(alias="to")
    amount: Decimal = Field(gt=0)
    places: int = Field(default=2, ge=0, exclude=True)

    @property
    def display_amount(self) -> Decimal:
        """Amount rounded to currency places (ROUND_HALF_UP)."""
        return round_money(self.amount, self.places)

    @field_serializer("amount")
    def _serialize_amount(self, amount: Decimal) -> Decimal:
        return round_money(amount, self.places)

    def __str__(self) -> str:
        return (
            f"{self.from_participant} owes {self.to_participant} : "
            f"{self.display_amount}"
        )


# ============================================================================
# Input Models
# ============================================================================


class ExpenseEntry(BaseModel):
    """An expense as supplied by a caller, before it is split."""

    payer: str
    amount: Decimal = Field(gt=0)
    participants: list[str] = Field(min_length=1)
    kind: str | None = None  # split kind tag, falls back to settings
    amounts: dict[str, Decimal] | None = None  # for "exact" splits
    percentages: dict[str, Decimal] | None = None  # for "percentage" splits
    description: str | None = None

    @model_validator(mode="after")
    def _distinct_participants(self) -> "ExpenseEntry":
        if len(set(self.participants)) != len(self.participants):
            raise ValueError("Participants must be distinct")
        return self

    def split_options(self) -> dict[str, Any]:
        """Keyword options for the split strategy selected by ``kind``."""
        options: dict[str, Any] = {}
        if self.amounts is not None:
            options["amounts"] = self.amounts
        if self.percentages is not None:
            options["percentages"] = self.percentages
        return options


class ExpenseFile(BaseModel):
    """Top-level layout of an expense JSON file."""

    expenses: list[ExpenseEntry] = Field(default_factory=list)
