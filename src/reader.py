import csv
import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional

from models import Event, EventType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

REQUIRED_COLUMNS = ("type", "client", "tx")

# Plain ASCII digits with an optional fraction; no sign, exponent or separators.
AMOUNT_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


class MalformedRowError(ValueError):
    """An input row that cannot be turned into an Event. Aborts the run."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


def _parse_id(value: str, column: str, maximum: int, line_number: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise MalformedRowError(line_number, f"{column} {value!r} is not an unsigned integer")
    parsed = int(value)
    if parsed > maximum:
        raise MalformedRowError(line_number, f"{column} {parsed} is out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str, line_number: int) -> Decimal:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise MalformedRowError(line_number, f"amount {value!r} is not a non-negative decimal number")
    return Decimal(value)


def parse_row(row: Dict[Optional[str], object], line_number: int) -> Event:
    """Parse a csv.DictReader row into an Event."""
    if None in row:
        raise MalformedRowError(line_number, "too many fields")

    normalized = {key.strip(): (value or "").strip() for key, value in row.items()}

    for column in REQUIRED_COLUMNS:
        if not normalized.get(column):
            raise MalformedRowError(line_number, f"missing {column}")

    try:
        event_type = EventType(normalized["type"])
    except ValueError:
        raise MalformedRowError(line_number, f"unknown transaction type {normalized['type']!r}") from None

    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if event_type.moves_funds:
        if not amount_str:
            raise MalformedRowError(line_number, f"{event_type.value} requires an amount")
        amount = _parse_amount(amount_str, line_number)

    return Event(
        event_type=event_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_events(filepath: str) -> List[Event]:
    """Read and validate every row of a CSV file. Any malformed row aborts the read."""
    events = []
    with open(filepath, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        try:
            for row in reader:
                events.append(parse_row(row, reader.line_num))
        except (csv.Error, UnicodeDecodeError) as e:
            raise MalformedRowError(reader.line_num, str(e)) from e

    logger.info(f"Read {len(events)} events from {filepath}")
    return events
