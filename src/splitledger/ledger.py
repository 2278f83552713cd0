"""In-memory ledger of pairwise debts between participants."""

import logging
import threading
from collections.abc import Mapping
from decimal import Decimal

from pydantic import ValidationError

from .exceptions import InvalidInputError
from .models import ExpenseRecord, ParticipantId, Payment
from .money import DEFAULT_EPSILON, to_decimal
from .settlement import minimize_transactions

logger = logging.getLogger(__name__)


class Ledger:
    """
    Accumulates who owes whom across recorded expenses.

    Balances are kept as directed edges ``debtor -> creditor -> amount``.
    Contributions are only ever merged (added), so no edge is negative and
    no participant owes themself. Every participant seen in any expense is
    tracked, even once their net position is back to zero.

    A single lock guards both the balance map and the participant set, so a
    concurrent reader never observes a half-applied expense. Each ledger is
    independent; create one per group.
    """

    def __init__(self, epsilon: Decimal = DEFAULT_EPSILON, places: int = 2):
        self.epsilon = to_decimal(epsilon)
        self.places = places
        self._lock = threading.RLock()
        self._balances: dict[ParticipantId, dict[ParticipantId, Decimal]] = {}
        # dict as an insertion-ordered set
        self._participants: dict[ParticipantId, None] = {}
        self._records: list[ExpenseRecord] = []

    def record(
        self, payer: ParticipantId, shares: Mapping[ParticipantId, object]
    ) -> ExpenseRecord:
        """
        Record an expense paid by ``payer`` and owed according to ``shares``.

        Each non-payer participant's share is added to their debt towards the
        payer. The payer's own share is tracked but creates no edge.

        Args:
            payer: Participant who paid
            shares: Participant -> owed share (non-negative)

        Returns:
            The immutable record that was appended

        Raises:
            InvalidInputError: If a share is negative or not a number. The
                ledger is left untouched in that case.
        """
        # Validate everything before touching state
        converted = {
            participant: to_decimal(amount) for participant, amount in shares.items()
        }
        try:
            expense = ExpenseRecord(payer=payer, shares=converted)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid expense shares: {e}") from e

        with self._lock:
            for participant in expense.participants:
                self._participants.setdefault(participant, None)

            for participant, amount in expense.shares.items():
                if participant == payer:
                    continue

                owed = self._balances.setdefault(participant, {})
                owed[payer] = owed.get(payer, Decimal("0")) + amount
                logger.debug(f"{participant!r} owes {payer!r} +{amount}")

            self._records.append(expense)

        logger.info(
            f"Recorded expense paid by {payer!r}: {expense.total} "
            f"across {len(expense.shares)} share(s)"
        )
        return expense

    @property
    def participants(self) -> list[ParticipantId]:
        """Every participant seen so far, in first-seen order."""
        with self._lock:
            return list(self._participants)

    @property
    def records(self) -> tuple[ExpenseRecord, ...]:
        """All recorded expenses, oldest first."""
        with self._lock:
            return tuple(self._records)

    def balances(self) -> dict[ParticipantId, dict[ParticipantId, Decimal]]:
        """Snapshot of the pairwise ``debtor -> creditor -> amount`` map."""
        with self._lock:
            return {debtor: dict(owed) for debtor, owed in self._balances.items()}

    def owed_between(self, debtor: ParticipantId, creditor: ParticipantId) -> Decimal:
        """Accumulated amount ``debtor`` owes ``creditor`` (one direction only)."""
        with self._lock:
            return self._balances.get(debtor, {}).get(creditor, Decimal("0"))

    def net_position(self, participant: ParticipantId) -> Decimal:
        """
        Net position of a participant.

        Positive means others owe them money, negative means they owe money.
        """
        with self._lock:
            return self._net_position(participant)

    def net_positions(self) -> dict[ParticipantId, Decimal]:
        """Net position of every tracked participant, zeros included."""
        with self._lock:
            return {
                participant: self._net_position(participant)
                for participant in self._participants
            }

    def _net_position(self, participant: ParticipantId) -> Decimal:
        net = Decimal("0")

        for amount in self._balances.get(participant, {}).values():
            net -= amount

        for debtor, owed in self._balances.items():
            if debtor == participant:
                continue
            net += owed.get(participant, Decimal("0"))

        return net

    def settle(self) -> list[Payment]:
        """
        Compute the payments that clear every balance.

        This is a pure read: balances are not modified, and calling it again
        without recording anything in between returns the same payments.
        """
        positions = self.net_positions()
        payments = minimize_transactions(
            positions, epsilon=self.epsilon, places=self.places
        )

        logger.info(
            f"Settlement for {len(positions)} participant(s): "
            f"{len(payments)} payment(s)"
        )
        return payments

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
