import logging
from typing import Iterable, List, TextIO

from csv_io import read_transactions, write_snapshots
from ledger import Ledger
from models import AccountSnapshot, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction log against client accounts in input order.

    Processing is a single sequential pass. Any PaymentsError aborts the
    replay before a snapshot is produced, so callers never see partial
    output for a corrupt log.
    """

    def __init__(self):
        self._ledger = Ledger()
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transactions: Iterable[Transaction]) -> List[AccountSnapshot]:
        """Apply transactions in order and return final account snapshots."""
        for transaction in transactions:
            result = self._ledger.route(transaction)
            self._stats.record(result)

        logger.info(
            f"Processed {self._stats.total} transactions for {len(self._ledger)} clients: "
            f"applied {self._stats.applied}, failed {self._stats.failed}, ignored {self._stats.ignored}"
        )
        return self._ledger.snapshot_all()

    def process_file(self, filepath: str) -> List[AccountSnapshot]:
        """Process CSV file and return final account snapshots."""
        logger.info(f"Replaying transactions from {filepath}")
        with open(filepath, "r", newline="") as f:
            return self.process(read_transactions(f))

    def run(self, input_stream: TextIO, output_stream: TextIO) -> None:
        """Read CSV from input_stream and write the account report to output_stream."""
        snapshots = self.process(read_transactions(input_stream))
        write_snapshots(snapshots, output_stream)
