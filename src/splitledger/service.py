"""Service layer that composes split strategies and the ledger.

This module provides the higher-level API used by the CLI: expenses come in
as totals plus participants, get split, and land in a caller-owned ledger.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from .config import Settings
from .exceptions import InvalidInputError
from .ledger import Ledger
from .models import ExpenseEntry, ExpenseFile, ExpenseRecord, ParticipantId, Payment
from .splitting import SplitKind, get_strategy, normalize_kind

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for splitting expenses and settling the resulting debts."""

    def __init__(self, settings: Settings, ledger: Ledger | None = None):
        """Initialize the service with its own ledger unless one is given."""
        self.settings = settings
        if ledger is None:
            ledger = Ledger(epsilon=settings.epsilon, places=settings.currency_places)
        self.ledger = ledger

    def add_expense(
        self,
        payer: ParticipantId,
        amount,
        participants: Sequence[ParticipantId],
        kind: SplitKind | str | None = None,
        **options,
    ) -> ExpenseRecord:
        """
        Split an expense and record it in the ledger.

        Args:
            payer: Participant who paid
            amount: Positive expense total
            participants: Participants sharing the expense (payer may be one)
            kind: Split kind tag, defaults to ``settings.default_split_kind``
            **options: Strategy options (``amounts`` or ``percentages``)

        Returns:
            The recorded expense
        """
        kind = normalize_kind(kind or self.settings.default_split_kind)

        if kind == SplitKind.EQUAL.value:
            options.setdefault("remainder", self.settings.remainder_rule)
            options.setdefault("places", self.settings.currency_places)
        elif kind in (SplitKind.EXACT.value, SplitKind.PERCENTAGE.value):
            options.setdefault("epsilon", self.settings.epsilon)

        strategy = get_strategy(kind, **options)
        shares = strategy.split(amount, participants)

        return self.ledger.record(payer, shares)

    def add_entries(self, entries: Iterable[ExpenseEntry]) -> list[ExpenseRecord]:
        """Record a batch of expense entries, in order."""
        records = []
        for entry in entries:
            records.append(
                self.add_expense(
                    entry.payer,
                    entry.amount,
                    entry.participants,
                    kind=entry.kind,
                    **entry.split_options(),
                )
            )
        logger.info(f"Recorded {len(records)} expenses")
        return records

    def net_positions(self) -> dict[ParticipantId, Decimal]:
        """Net position of every participant in the ledger."""
        return self.ledger.net_positions()

    def settle(self) -> list[Payment]:
        """Compute the payments that clear every balance."""
        return self.ledger.settle()


def load_entries(path: Path) -> list[ExpenseEntry]:
    """
    Load expense entries from a JSON file.

    The file holds either ``{"expenses": [...]}`` or a bare list of entries.

    Raises:
        InvalidInputError: If the file can't be read or doesn't validate
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"Could not read expenses from {path}: {e}") from e

    if isinstance(raw, list):
        raw = {"expenses": raw}

    try:
        expense_file = ExpenseFile.model_validate(raw)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid expense file {path}:\n{e}") from e

    logger.info(f"Loaded {len(expense_file.expenses)} expenses from {path}")
    return expense_file.expenses
