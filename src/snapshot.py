from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Iterable, TextIO

from models import Account, LEDGER_CONTEXT

PRECISION = Decimal("0.0001")
ROUNDING_CONTEXT = Context(prec=LEDGER_CONTEXT.prec, rounding=ROUND_HALF_EVEN)

HEADER = ("client", "available", "held", "total", "locked")


@dataclass(frozen=True)
class Snapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    def to_row(self) -> str:
        return ",".join([
            str(self.client_id),
            format_decimal(self.available),
            format_decimal(self.held),
            format_decimal(self.total),
            str(self.locked).lower(),
        ])


def round_amount(value: Decimal) -> Decimal:
    """Round to at most 4 decimal places, keeping a shorter existing scale."""
    if value.as_tuple().exponent < PRECISION.as_tuple().exponent:
        return value.quantize(PRECISION, context=ROUNDING_CONTEXT)
    return value


def format_decimal(value: Decimal) -> str:
    """Format a rounded amount; zero of any scale or sign prints as 0."""
    if value.is_zero():
        return "0"
    return f"{value:f}"


def take_snapshot(account: Account) -> Snapshot:
    return Snapshot(
        client_id=account.client_id,
        available=round_amount(account.available),
        held=round_amount(account.held),
        total=round_amount(account.total),
        locked=account.locked,
    )


def write_snapshots(accounts: Iterable[Account], stream: TextIO) -> None:
    """Write the snapshot table, one row per account in ascending client id."""
    print(",".join(HEADER), file=stream)
    for account in sorted(accounts, key=lambda a: a.client_id):
        print(take_snapshot(account).to_row(), file=stream)
