import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Event, EventType
from grouping import client_order, partition_by_client


def make_event(event_type, client_id, transaction_id, amount=None):
    return Event(event_type, client_id=client_id, transaction_id=transaction_id, amount=amount)


class TestPartitionByClient:
    def test_empty(self):
        assert partition_by_client([]) == {}

    def test_keeps_arrival_order_within_client(self):
        events = [
            make_event(EventType.DEPOSIT, 1, 1, Decimal("5")),
            make_event(EventType.DEPOSIT, 2, 2, Decimal("7")),
            make_event(EventType.DISPUTE, 1, 1),
            make_event(EventType.RESOLVE, 1, 1),
            make_event(EventType.WITHDRAWAL, 2, 3, Decimal("1")),
        ]

        groups = partition_by_client(events)

        assert groups[1] == [events[0], events[2], events[3]]
        assert groups[2] == [events[1], events[4]]

    def test_iterates_in_ascending_client_id(self):
        events = [
            make_event(EventType.DEPOSIT, 30, 1, Decimal("1")),
            make_event(EventType.DEPOSIT, 2, 2, Decimal("1")),
            make_event(EventType.DEPOSIT, 65535, 3, Decimal("1")),
            make_event(EventType.DEPOSIT, 0, 4, Decimal("1")),
        ]

        groups = partition_by_client(events)

        assert list(groups) == [0, 2, 30, 65535]
        assert client_order(groups) == [0, 2, 30, 65535]

    def test_client_without_deposit_gets_group(self):
        events = [
            make_event(EventType.DISPUTE, 4, 10),
            make_event(EventType.CHARGEBACK, 4, 10),
        ]

        groups = partition_by_client(events)

        assert groups == {4: events}

    def test_accepts_any_iterable(self):
        events = (make_event(EventType.DEPOSIT, c, c, Decimal("1")) for c in (3, 1, 3))

        groups = partition_by_client(events)

        assert [len(g) for g in groups.values()] == [1, 2]
