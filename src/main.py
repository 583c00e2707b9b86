import sys
import logging

from csv_io import write_snapshots
from engine import PaymentsEngine
from errors import PaymentsError

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-ledger <transactions.csv>", file=sys.stderr)
        return 1

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        snapshots = engine.process_file(filepath)
    except PaymentsError as e:
        logger.error(f"Failed to process {filepath}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    write_snapshots(snapshots, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
