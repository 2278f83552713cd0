"""Split strategies that turn an expense total into per-participant shares.

Every strategy honours the same contract::

    split(amount, participants) -> {participant: share}

The strategy for an expense is chosen by a split-kind tag through a small
registry, so new kinds can be plugged in without touching the ledger.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from enum import Enum

from .exceptions import InvalidInputError, UnsupportedSplitKindError
from .models import ParticipantId
from .money import DEFAULT_EPSILON, floor_money, quantum, round_money, to_decimal

logger = logging.getLogger(__name__)


class SplitKind(str, Enum):
    """Tags for the built-in split strategies."""

    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"


class RemainderRule(str, Enum):
    """How an equal split handles amounts that don't divide evenly."""

    NONE = "none"  # keep the exact quotient, no rounding
    FIRST = "first"  # round down, leftover units go to the first participants


class SplitStrategy(ABC):
    """Base class for split strategies."""

    def split(
        self, amount, participants: Sequence[ParticipantId]
    ) -> dict[ParticipantId, Decimal]:
        """
        Split an amount among participants.

        Args:
            amount: Positive total to split
            participants: Non-empty sequence of distinct participants

        Returns:
            Mapping of participant to owed share, in participant order

        Raises:
            InvalidInputError: If the amount is not positive or the
                participant list is empty or contains duplicates
        """
        total = to_decimal(amount)
        if total <= 0:
            raise InvalidInputError(f"Amount must be positive, got {amount}")

        participants = list(participants)
        if not participants:
            raise InvalidInputError("Cannot split among an empty participant list")
        if len(set(participants)) != len(participants):
            raise InvalidInputError(f"Duplicate participants in {participants!r}")

        return self.compute_shares(total, participants)

    @abstractmethod
    def compute_shares(
        self, amount: Decimal, participants: list[ParticipantId]
    ) -> dict[ParticipantId, Decimal]:
        """Compute shares for already-validated input."""


class EqualSplitStrategy(SplitStrategy):
    """Every participant, the payer included, owes ``amount / n``."""

    def __init__(
        self, remainder: RemainderRule | str = RemainderRule.NONE, places: int = 2
    ):
        try:
            self.remainder = RemainderRule(remainder)
        except ValueError as e:
            raise InvalidInputError(f"Unknown remainder rule: {remainder!r}") from e
        self.places = places

    def compute_shares(
        self, amount: Decimal, participants: list[ParticipantId]
    ) -> dict[ParticipantId, Decimal]:
        count = len(participants)

        if self.remainder is RemainderRule.NONE:
            share = amount / count
            return {participant: share for participant in participants}

        # Everyone gets the floored share; leftover units go one each, in order
        unit = quantum(self.places)
        total = round_money(amount, self.places)
        base = floor_money(total / count, self.places)
        leftover = int((total - base * count) / unit)

        if leftover:
            logger.debug(
                f"Distributing {leftover} leftover unit(s) of {unit} "
                f"across the first participants"
            )

        return {
            participant: base + unit if index < leftover else base
            for index, participant in enumerate(participants)
        }


class ExactSplitStrategy(SplitStrategy):
    """Each participant owes an explicitly given amount."""

    def __init__(
        self,
        amounts: Mapping[ParticipantId, object],
        epsilon: Decimal = DEFAULT_EPSILON,
    ):
        self.amounts = {
            participant: to_decimal(value) for participant, value in amounts.items()
        }
        self.epsilon = epsilon

        negative = [p for p, value in self.amounts.items() if value < 0]
        if negative:
            raise InvalidInputError(f"Negative exact amounts for {negative!r}")

    def compute_shares(
        self, amount: Decimal, participants: list[ParticipantId]
    ) -> dict[ParticipantId, Decimal]:
        _check_same_participants(participants, self.amounts)

        allocated = sum(self.amounts.values(), Decimal("0"))
        if abs(allocated - amount) > self.epsilon:
            raise InvalidInputError(
                f"Exact amounts sum to {allocated}, expected {amount}"
            )

        return {participant: self.amounts[participant] for participant in participants}


class PercentageSplitStrategy(SplitStrategy):
    """Each participant owes a percentage of the total."""

    def __init__(
        self,
        percentages: Mapping[ParticipantId, object],
        epsilon: Decimal = DEFAULT_EPSILON,
    ):
        self.percentages = {
            participant: to_decimal(value) for participant, value in percentages.items()
        }
        self.epsilon = epsilon

        negative = [p for p, value in self.percentages.items() if value < 0]
        if negative:
            raise InvalidInputError(f"Negative percentages for {negative!r}")

    def compute_shares(
        self, amount: Decimal, participants: list[ParticipantId]
    ) -> dict[ParticipantId, Decimal]:
        _check_same_participants(participants, self.percentages)

        total_pct = sum(self.percentages.values(), Decimal("0"))
        if abs(total_pct - 100) > self.epsilon:
            raise InvalidInputError(f"Percentages sum to {total_pct}, expected 100")

        return {
            participant: amount * self.percentages[participant] / 100
            for participant in participants
        }


def _check_same_participants(
    participants: list[ParticipantId], allocation: Mapping[ParticipantId, Decimal]
) -> None:
    missing = [p for p in participants if p not in allocation]
    extra = [p for p in allocation if p not in participants]
    if missing or extra:
        raise InvalidInputError(
            f"Allocation does not match participants "
            f"(missing: {missing!r}, unexpected: {extra!r})"
        )


# ============================================================================
# Strategy registry
# ============================================================================

StrategyFactory = Callable[..., SplitStrategy]

_STRATEGIES: dict[str, StrategyFactory] = {
    SplitKind.EQUAL.value: EqualSplitStrategy,
    SplitKind.EXACT.value: ExactSplitStrategy,
    SplitKind.PERCENTAGE.value: PercentageSplitStrategy,
}


def normalize_kind(kind: SplitKind | str) -> str:
    if isinstance(kind, SplitKind):
        return kind.value
    return str(kind).strip().lower()


def register_strategy(kind: SplitKind | str, factory: StrategyFactory) -> None:
    """Register (or replace) the strategy factory for a split kind tag."""
    _STRATEGIES[normalize_kind(kind)] = factory
    logger.debug(f"Registered split strategy for kind {normalize_kind(kind)!r}")


def available_kinds() -> list[str]:
    """Split kind tags that currently have a registered strategy."""
    return sorted(_STRATEGIES)


def get_strategy(kind: SplitKind | str, **options) -> SplitStrategy:
    """
    Build the split strategy registered for a split kind tag.

    Args:
        kind: Split kind tag, e.g. "equal"
        **options: Keyword arguments for the strategy constructor

    Returns:
        A ready-to-use split strategy

    Raises:
        UnsupportedSplitKindError: If no strategy is registered for the tag
        InvalidInputError: If the options don't fit the strategy
    """
    key = normalize_kind(kind)
    factory = _STRATEGIES.get(key)
    if factory is None:
        raise UnsupportedSplitKindError(key)

    try:
        return factory(**options)
    except TypeError as e:
        raise InvalidInputError(f"Invalid options for {key!r} split: {e}") from e


def split(
    amount,
    participants: Sequence[ParticipantId],
    kind: SplitKind | str = SplitKind.EQUAL,
    **options,
) -> dict[ParticipantId, Decimal]:
    """Split an amount among participants using the strategy for ``kind``."""
    return get_strategy(kind, **options).split(amount, participants)
