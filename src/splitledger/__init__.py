"""SplitLedger - Split shared expenses and settle debts with minimal payments."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .exceptions import (
    InvalidInputError,
    InvariantViolationError,
    SplitLedgerError,
    UnsupportedSplitKindError,
)
from .ledger import Ledger
from .models import ExpenseEntry, ExpenseRecord, Payment
from .service import ExpenseService, load_entries
from .settlement import apply_payments, minimize_transactions
from .splitting import (
    EqualSplitStrategy,
    ExactSplitStrategy,
    PercentageSplitStrategy,
    RemainderRule,
    SplitKind,
    SplitStrategy,
    get_strategy,
    register_strategy,
    split,
)

__all__ = [
    "Settings",
    "load_settings",
    "InvalidInputError",
    "InvariantViolationError",
    "SplitLedgerError",
    "UnsupportedSplitKindError",
    "Ledger",
    "ExpenseEntry",
    "ExpenseRecord",
    "Payment",
    "ExpenseService",
    "load_entries",
    "apply_payments",
    "minimize_transactions",
    "EqualSplitStrategy",
    "ExactSplitStrategy",
    "PercentageSplitStrategy",
    "RemainderRule",
    "SplitKind",
    "SplitStrategy",
    "get_strategy",
    "register_strategy",
    "split",
]
