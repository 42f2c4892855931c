import sys
import logging

from engine import LedgerEngine
from models import LedgerError
from reader import MalformedRowError
from snapshot import write_snapshots

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    argv = sys.argv if argv is None else argv

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 2:
        print("Usage: ledger-replay <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[1]
    engine = LedgerEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1
    except (MalformedRowError, LedgerError) as e:
        logger.error(f"Invalid input in {filepath}: {e}")
        return 1

    write_snapshots(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
