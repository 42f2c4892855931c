import logging
from typing import Dict, Optional, Sequence, Set

from models import Account, Event, EventType, LedgerError, ReplayStats, TransitionResult

logger = logging.getLogger(__name__)


class AccountLedger:
    """
    State machine for a single client account.
    Tracks deposits that may be disputed and the disputes currently open.
    Events must be applied in arrival order.
    """

    def __init__(self, client_id: int):
        self.account = Account(client_id=client_id)
        self._deposits: Dict[int, Event] = {}
        self._open_disputes: Set[int] = set()

    @property
    def client_id(self) -> int:
        return self.account.client_id

    def is_disputed(self, transaction_id: int) -> bool:
        """Check if transaction is currently under dispute."""
        return transaction_id in self._open_disputes

    def apply(self, event: Event) -> TransitionResult:
        """
        Apply a single event to the account.

        Returns:
            APPLIED: The account changed according to the event
            IGNORED: The event is economically invalid given the current state
                     (insufficient funds, unknown or wrong-state transaction)

        Raises:
            LedgerError: The event belongs to another client, lacks a required amount,
                         or would make a balance inexact
        """
        if event.client_id != self.client_id:
            raise LedgerError(f"{event!r} does not belong to client {self.client_id}")

        match event.event_type:
            case EventType.DEPOSIT:
                result = self._handle_deposit(event)
            case EventType.WITHDRAWAL:
                result = self._handle_withdrawal(event)
            case EventType.DISPUTE:
                result = self._handle_dispute(event)
            case EventType.RESOLVE:
                result = self._handle_resolve(event)
            case EventType.CHARGEBACK:
                result = self._handle_chargeback(event)
            case _:
                raise LedgerError(f"Unhandled event type {event.event_type!r}")

        logger.debug(f"{event!r}: {result.value}")
        return result

    def _require_amount(self, event: Event) -> None:
        if event.amount is None:
            raise LedgerError(f"{event.event_type.value.capitalize()} tx {event.transaction_id}: amount is required")

    def _handle_deposit(self, event: Event) -> TransitionResult:
        self._require_amount(event)

        self.account.credit(event.amount)
        if event.transaction_id in self._deposits:
            logger.warning(f"Deposit tx {event.transaction_id}: duplicate transaction id, keeping the first deposit for disputes")
        else:
            self._deposits[event.transaction_id] = event
        return TransitionResult.APPLIED

    def _handle_withdrawal(self, event: Event) -> TransitionResult:
        self._require_amount(event)

        if self.account.available >= event.amount:
            self.account.debit(event.amount)
            return TransitionResult.APPLIED

        logger.debug(f"Withdrawal tx {event.transaction_id}: insufficient funds ({self.account.available} < {event.amount})")
        return TransitionResult.IGNORED

    def _handle_dispute(self, event: Event) -> TransitionResult:
        original = self._deposits.get(event.transaction_id)

        if original is None:
            logger.debug(f"Dispute for tx {event.transaction_id}: no deposit with this id for client {self.client_id}")
            return TransitionResult.IGNORED

        if self.is_disputed(event.transaction_id):
            logger.debug(f"Dispute for tx {event.transaction_id}: transaction already disputed")
            return TransitionResult.IGNORED

        self.account.hold(original.amount)
        self._open_disputes.add(event.transaction_id)
        return TransitionResult.APPLIED

    def _handle_resolve(self, event: Event) -> TransitionResult:
        if not self.is_disputed(event.transaction_id):
            logger.debug(f"Resolve for tx {event.transaction_id}: transaction is not disputed")
            return TransitionResult.IGNORED

        original = self._deposits[event.transaction_id]
        self.account.release_hold(original.amount)
        self._open_disputes.discard(event.transaction_id)
        return TransitionResult.APPLIED

    def _handle_chargeback(self, event: Event) -> TransitionResult:
        if not self.is_disputed(event.transaction_id):
            logger.debug(f"Chargeback for tx {event.transaction_id}: transaction is not disputed")
            return TransitionResult.IGNORED

        original = self._deposits[event.transaction_id]
        self.account.remove_held(original.amount)
        self.account.locked = True
        self._open_disputes.discard(event.transaction_id)
        return TransitionResult.APPLIED


def replay(events: Sequence[Event], stats: Optional[ReplayStats] = None) -> Account:
    """Replay one client's events in order and return the resulting account."""
    if not events:
        raise LedgerError("Cannot replay an empty event sequence")

    ledger = AccountLedger(events[0].client_id)
    for event in events:
        result = ledger.apply(event)
        if stats is not None:
            stats.record(result)

    if stats is not None:
        stats.record_client()
    return ledger.account
