"""Greedy min-transaction settlement of net positions.

The sweep pairs the largest outstanding debt with the largest outstanding
credit until both sides are cleared. It is the standard two-pointer heuristic
for debt simplification: it always clears every balance in at most
``debtors + creditors - 1`` payments, but it is not guaranteed to find the
theoretical minimum (that problem is NP-hard in general).
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from .exceptions import InvariantViolationError
from .models import ParticipantId, Payment
from .money import DEFAULT_EPSILON, is_zero

logger = logging.getLogger(__name__)


def minimize_transactions(
    net_positions: Mapping[ParticipantId, Decimal],
    epsilon: Decimal = DEFAULT_EPSILON,
    places: int = 2,
) -> list[Payment]:
    """
    Compute the payments that bring every net position to zero.

    Steps:
    1. Drop participants whose |net| <= epsilon
    2. Split the rest into debtors (net < 0) and creditors (net > 0)
    3. Sort debtors ascending (largest debt first) and creditors descending
       (largest credit first); ties keep the input order
    4. Sweep both lists, settling min(debt, credit) per payment

    Args:
        net_positions: Participant -> net position (positive = owed money)
        epsilon: Tolerance below which a balance counts as settled
        places: Currency places used when payment amounts are displayed

    Returns:
        Payments in emission order

    Raises:
        InvariantViolationError: If one side is exhausted while the other
            still holds a balance that the net positions can't account for
            (they don't sum to zero)
    """
    debtors: list[list] = []
    creditors: list[list] = []
    # Balances written off as settled; they explain any leftover drift
    discarded = Decimal("0")

    for participant, net in net_positions.items():
        if is_zero(net, epsilon):
            discarded += net
            continue
        if net < 0:
            debtors.append([participant, net])
        else:
            creditors.append([participant, net])

    debtors.sort(key=lambda entry: entry[1])
    creditors.sort(key=lambda entry: entry[1], reverse=True)

    payments: list[Payment] = []
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor = debtors[debtor_idx]
        creditor = creditors[creditor_idx]

        settle_amount = min(-debtor[1], creditor[1])
        payments.append(
            Payment(
                from_participant=debtor[0],
                to_participant=creditor[0],
                amount=settle_amount,
                places=places,
            )
        )

        debtor[1] += settle_amount
        creditor[1] -= settle_amount

        if abs(debtor[1]) < epsilon:
            discarded += debtor[1]
            debtor_idx += 1
        if abs(creditor[1]) < epsilon:
            discarded += creditor[1]
            creditor_idx += 1

    leftover = debtors[debtor_idx:] + creditors[creditor_idx:]
    residual = [
        (participant, remaining)
        for participant, remaining in leftover
        if not is_zero(remaining, epsilon)
    ]
    if residual:
        imbalance = discarded + sum(
            (remaining for _, remaining in leftover), Decimal("0")
        )
        if not is_zero(imbalance, epsilon):
            raise InvariantViolationError(
                f"Settlement left unmatched balances {residual!r}: net positions "
                f"sum to {imbalance}, expected 0"
            )
        # Several written-off balances can add up to more than epsilon
        logger.warning(
            f"Rounding drift left {residual!r} unsettled "
            f"({-discarded} written off as settled)"
        )

    logger.debug(
        f"Settled {len(debtors)} debtor(s) and {len(creditors)} creditor(s) "
        f"with {len(payments)} payment(s)"
    )

    return payments


def apply_payments(
    net_positions: Mapping[ParticipantId, Decimal], payments: Iterable[Payment]
) -> dict[ParticipantId, Decimal]:
    """
    Return the net positions after every payment has been made.

    Paying reduces the debtor's debt and the creditor's credit, so a complete
    settlement leaves every position within epsilon of zero.
    """
    result = dict(net_positions)
    for payment in payments:
        result[payment.from_participant] = (
            result.get(payment.from_participant, Decimal("0")) + payment.amount
        )
        result[payment.to_participant] = (
            result.get(payment.to_participant, Decimal("0")) - payment.amount
        )
    return result
