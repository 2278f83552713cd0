"""Tests for the greedy settlement sweep."""

import random
from decimal import Decimal

import pytest

from splitledger.exceptions import InvariantViolationError
from splitledger.ledger import Ledger
from splitledger.models import Payment
from splitledger.settlement import apply_payments, minimize_transactions
from splitledger.splitting import split

EPSILON = Decimal("0.01")


def d(value) -> Decimal:
    return Decimal(str(value))


def as_tuples(payments: list[Payment]) -> list[tuple]:
    return [(p.from_participant, p.to_participant, p.amount) for p in payments]


def random_ledger(seed: int, people: int = 6, expenses: int = 25) -> Ledger:
    """Build a ledger from random whole-cent shares."""
    rng = random.Random(seed)
    names = [f"p{i}" for i in range(people)]
    ledger = Ledger()

    for _ in range(expenses):
        payer = rng.choice(names)
        group = rng.sample(names, rng.randint(1, people))
        shares = {name: Decimal(rng.randint(0, 10000)) / 100 for name in group}
        ledger.record(payer, shares)

    return ledger


def random_equal_split_ledger(
    seed: int, people: int = 7, expenses: int = 25
) -> Ledger:
    """Build a ledger from equal splits that rarely divide into whole cents."""
    rng = random.Random(seed)
    names = [f"p{i}" for i in range(people)]
    ledger = Ledger()

    for _ in range(expenses):
        payer = rng.choice(names)
        group = rng.sample(names, rng.randint(2, people))
        ledger.record(payer, split(Decimal(rng.randint(1, 20000)) / 100, group))

    return ledger


class TestSweepOrdering:
    """Test the debtor/creditor ordering and emitted payments."""

    def test_four_participants(self):
        """Largest debtor pays largest creditor first; zero nets emit nothing."""
        positions = {"A": d(-40), "B": d(25), "C": d(15), "D": d(0)}

        payments = minimize_transactions(positions)

        assert as_tuples(payments) == [
            ("A", "B", Decimal("25.00")),
            ("A", "C", Decimal("15.00")),
        ]

    def test_largest_debt_first(self):
        positions = {"A": d(-10), "B": d(-30), "C": d(40)}

        payments = minimize_transactions(positions)

        assert as_tuples(payments) == [
            ("B", "C", Decimal("30")),
            ("A", "C", Decimal("10")),
        ]

    def test_ties_keep_input_order(self):
        positions = {"B": d(-30), "C": d(-30), "A": d(60)}

        payments = minimize_transactions(positions)

        assert [p.from_participant for p in payments] == ["B", "C"]

    def test_one_debtor_many_creditors_split(self):
        positions = {"A": d(-100), "B": d(10), "C": d(60), "D": d(30)}

        payments = minimize_transactions(positions)

        assert as_tuples(payments) == [
            ("A", "C", Decimal("60")),
            ("A", "D", Decimal("30")),
            ("A", "B", Decimal("10")),
        ]

    def test_amounts_exact_and_displayed_in_cents(self):
        third = Decimal(100) / 3
        positions = {"A": -third, "B": -third, "C": 2 * third}

        payments = minimize_transactions(positions)

        assert [p.amount for p in payments] == [third, third]
        assert [p.display_amount for p in payments] == [
            Decimal("33.33"),
            Decimal("33.33"),
        ]
        assert all(p.display_amount.as_tuple().exponent == -2 for p in payments)


class TestSweepEdgeCases:
    """Test empty, settled and broken inputs."""

    def test_empty(self):
        assert minimize_transactions({}) == []

    def test_all_within_epsilon(self):
        positions = {"A": d("0.01"), "B": d("-0.01"), "C": d(0)}

        assert minimize_transactions(positions) == []

    def test_unbalanced_positions_raise(self):
        """Leftover credit with no debtors left is an invariant violation."""
        with pytest.raises(InvariantViolationError):
            minimize_transactions({"A": d(-20), "B": d(50)})

    def test_unbalanced_debt_raises(self):
        with pytest.raises(InvariantViolationError):
            minimize_transactions({"A": d(-50), "B": d(20)})

    def test_drift_within_epsilon_tolerated(self):
        positions = {"A": d("-10.004"), "B": d(10)}

        payments = minimize_transactions(positions)

        assert as_tuples(payments) == [("A", "B", Decimal("10.00"))]

    def test_custom_epsilon(self):
        positions = {"A": d("-0.5"), "B": d("0.5")}

        assert minimize_transactions(positions, epsilon=d(1)) == []


class TestSettlementProperties:
    """Properties that must hold for any sequence of valid expenses."""

    @pytest.mark.parametrize("seed", range(10))
    def test_conservation(self, seed):
        ledger = random_ledger(seed)

        assert abs(sum(ledger.net_positions().values())) <= EPSILON

    @pytest.mark.parametrize("seed", range(10))
    def test_completeness(self, seed):
        """Applying every payment leaves all positions settled."""
        ledger = random_ledger(seed)
        positions = ledger.net_positions()

        after = apply_payments(positions, ledger.settle())

        assert all(abs(net) <= EPSILON for net in after.values())

    def test_completeness_many_fractional_debts(self):
        """Twenty thirds of a unit owed to one creditor still clear fully."""
        ledger = Ledger()
        debtors = [f"d{i}" for i in range(20)]
        ledger.record("C", split(7, ["C"] + debtors))
        positions = ledger.net_positions()

        payments = ledger.settle()
        after = apply_payments(positions, payments)

        assert len(payments) == 20
        assert all(abs(net) <= EPSILON for net in after.values())
        assert all(p.display_amount == Decimal("0.33") for p in payments)

    @pytest.mark.parametrize("seed", range(10))
    def test_completeness_with_equal_splits(self, seed):
        """Equal splits that don't divide into cents still settle completely."""
        ledger = random_equal_split_ledger(seed)
        positions = ledger.net_positions()

        after = apply_payments(positions, ledger.settle())

        assert all(abs(net) <= EPSILON for net in after.values())

    @pytest.mark.parametrize("seed", range(10))
    def test_transaction_bound(self, seed):
        ledger = random_ledger(seed)
        positions = ledger.net_positions()
        debtors = sum(1 for net in positions.values() if net < -EPSILON)
        creditors = sum(1 for net in positions.values() if net > EPSILON)

        payments = ledger.settle()

        assert len(payments) <= max(debtors + creditors - 1, 0)

    @pytest.mark.parametrize("seed", range(5))
    def test_payments_are_positive(self, seed):
        payments = random_ledger(seed).settle()

        assert all(p.amount > 0 for p in payments)
        assert all(p.from_participant != p.to_participant for p in payments)


class TestApplyPayments:
    """Test applying payments to net positions."""

    def test_reduces_both_sides(self):
        positions = {"A": d(-40), "B": d(40)}
        payment = Payment(from_participant="A", to_participant="B", amount=d(15))

        assert apply_payments(positions, [payment]) == {"A": d(-25), "B": d(25)}

    def test_does_not_mutate_input(self):
        positions = {"A": d(-40), "B": d(40)}
        payment = Payment(from_participant="A", to_participant="B", amount=d(40))

        apply_payments(positions, [payment])

        assert positions == {"A": d(-40), "B": d(40)}


class TestPaymentModel:
    """Test the Payment projection."""

    def test_serializes_with_from_and_to(self):
        payment = Payment(from_participant="B", to_participant="A", amount=d("35.00"))

        assert payment.model_dump(by_alias=True) == {
            "from": "B",
            "to": "A",
            "amount": Decimal("35.00"),
        }

    def test_accepts_aliases(self):
        payment = Payment.model_validate({"from": "B", "to": "A", "amount": "1.5"})

        assert payment.from_participant == "B"
        assert payment.amount == Decimal("1.5")

    def test_str(self):
        payment = Payment(from_participant="B", to_participant="A", amount=d(30))

        assert str(payment) == "B owes A : 30.00"

    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            Payment(from_participant="B", to_participant="A", amount=d(0))

    def test_serialized_amount_rounded_to_places(self):
        payment = Payment(
            from_participant="B", to_participant="A", amount=Decimal(1) / 3, places=3
        )

        assert payment.model_dump(by_alias=True)["amount"] == Decimal("0.333")
        assert payment.amount == Decimal(1) / 3
        assert "places" not in payment.model_dump()
