from typing import Dict, Iterable, List

from models import Event


def partition_by_client(events: Iterable[Event]) -> Dict[int, List[Event]]:
    """
    Split events into per-client sequences.
    Arrival order is kept within each client; the mapping iterates in
    ascending client id.
    """
    groups: Dict[int, List[Event]] = {}
    for event in events:
        groups.setdefault(event.client_id, []).append(event)
    return {client_id: groups[client_id] for client_id in sorted(groups)}


def client_order(groups: Dict[int, List[Event]]) -> List[int]:
    """Client ids in reporting order."""
    return sorted(groups)
