"""
Session-scoped, append-only log of completed transactions.
"""

from collections.abc import Iterator

from interfaces.core import RecordType, TransactionRecord


class TransactionHistory:
    """Append-only list of frozen TransactionRecords in completion order.

    Records are immutable and appended whole, so concurrent flows on the same
    event loop never interleave a record's fields.
    """

    def __init__(self):
        self._records: list[TransactionRecord] = []

    def append(self, record: TransactionRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> tuple[TransactionRecord, ...]:
        """Read-only snapshot of the history."""
        return tuple(self._records)

    def of_type(self, operation_type: RecordType) -> list[TransactionRecord]:
        return [r for r in self._records if r.operation_type == operation_type]

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self._records)
