import threading
from dataclasses import dataclass
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_EVEN,
)
from enum import Enum
from typing import Optional


class LedgerError(Exception):
    """Raised when an event cannot be applied at all (as opposed to being ignored)."""


class EventType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        return self in (EventType.DEPOSIT, EventType.WITHDRAWAL)


class TransitionResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Event:
    event_type: EventType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Event({self.event_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


# Balances must stay exact: any operation that would round raises instead.
LEDGER_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)


def _add(a: Decimal, b: Decimal) -> Decimal:
    try:
        return LEDGER_CONTEXT.add(a, b)
    except Inexact:
        raise LedgerError(f"{a} + {b} exceeds {LEDGER_CONTEXT.prec} significant digits") from None


def _subtract(a: Decimal, b: Decimal) -> Decimal:
    try:
        return LEDGER_CONTEXT.subtract(a, b)
    except Inexact:
        raise LedgerError(f"{a} - {b} exceeds {LEDGER_CONTEXT.prec} significant digits") from None


@dataclass
class Account:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return _add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = _add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = _subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        available = _subtract(self.available, amount)
        held = _add(self.held, amount)
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        held = _subtract(self.held, amount)
        available = _add(self.available, amount)
        self.available, self.held = available, held

    def remove_held(self, amount: Decimal) -> None:
        self.held = _subtract(self.held, amount)


class ReplayStats:
    """Thread-safe counters for tracking replay statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self.ignored = 0
        self.clients = 0

    def record(self, result: TransitionResult):
        with self._lock:
            if result == TransitionResult.APPLIED:
                self.applied += 1
            else:
                self.ignored += 1

    def record_client(self):
        with self._lock:
            self.clients += 1
