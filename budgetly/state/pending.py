"""Pending slice: transactions recorded while offline.

The queue is only appended to and cleared; nothing replays it against the
server.
"""

from uuid import uuid4

from budgetly.data.local_cache import now_ms
from budgetly.domain.models import CreateTransactionData, PendingTransaction


class PendingSlice:
    """Actions for ``pending_transactions``."""

    def add_pending_transaction(self, data: CreateTransactionData) -> PendingTransaction:
        """Append a transaction to the end of the pending queue.

        Returns:
            The queued entry, with its locally generated id
        """
        entry = PendingTransaction(id=uuid4().hex, data=data, queued_at=now_ms())
        self.set(lambda state: {
            "pending_transactions": state.pending_transactions + (entry,)
        })
        return entry

    def clear_pending_transactions(self) -> None:
        self.set({"pending_transactions": ()})
