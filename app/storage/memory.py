"""In-memory transaction ledger.

An append-only list of completed routing decisions, kept in insertion
order (which is also chronological, since timestamps are assigned at
creation). All lookups are linear scans. Data lives in memory and is
lost on restart.
"""

import threading
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, List, Optional

from app.exceptions import TransactionNotFoundError
from app.models import (
    PaymentStatus,
    Transaction,
    TransactionQuery,
    TransactionStats,
    as_utc,
)

_SORT_KEYS = {
    "timestamp": lambda t: t.timestamp,
    "amount": lambda t: t.amount,
    "riskScore": lambda t: t.risk_score,
    "email": lambda t: t.email,
}


class TransactionLedger:
    """Thread-safe in-memory store of transactions."""

    def __init__(self) -> None:
        self._transactions: List[Transaction] = []
        self._lock = threading.RLock()

    def create(self, **fields: Any) -> Transaction:
        """Build a transaction with a fresh id and timestamp. Does not store it."""
        return Transaction(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            **fields,
        )

    def append(self, tx: Transaction) -> None:
        with self._lock:
            self._transactions.append(tx)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            return next((t for t in self._transactions if t.id == transaction_id), None)

    def require(self, transaction_id: str) -> Transaction:
        """Like get(), but raises TransactionNotFoundError when absent."""
        tx = self.get(transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        return tx

    def all(self) -> List[Transaction]:
        """Snapshot of every transaction in insertion order."""
        with self._lock:
            return list(self._transactions)

    def by_email(self, email: str) -> List[Transaction]:
        """Exact, case-insensitive email match."""
        email_lower = email.lower()
        return [t for t in self.all() if t.email.lower() == email_lower]

    def by_status(self, status: PaymentStatus) -> List[Transaction]:
        return [t for t in self.all() if t.status == status]

    def by_date_range(self, start: datetime, end: datetime) -> List[Transaction]:
        """Transactions with start <= timestamp <= end (empty if start > end)."""
        start, end = as_utc(start), as_utc(end)
        return [t for t in self.all() if start <= t.timestamp <= end]

    def query(self, query: TransactionQuery) -> List[Transaction]:
        """Filter, then sort, then paginate.

        Without sort_by the result is newest first. Pagination applies only
        when both page and limit are set; a page past the end is empty.
        """
        results = self.all()

        if query.email:
            needle = query.email.lower()
            results = [t for t in results if needle in t.email.lower()]
        if query.status is not None:
            results = [t for t in results if t.status == query.status]
        if query.provider is not None:
            results = [t for t in results if t.provider == query.provider]
        if query.start_date is not None:
            results = [t for t in results if t.timestamp >= query.start_date]
        if query.end_date is not None:
            results = [t for t in results if t.timestamp <= query.end_date]

        if query.sort_by:
            results.sort(
                key=_SORT_KEYS[query.sort_by],
                reverse=query.sort_order == "desc",
            )
        else:
            results.sort(key=_SORT_KEYS["timestamp"], reverse=True)

        if query.page and query.limit:
            start = (query.page - 1) * query.limit
            results = results[start:start + query.limit]

        return results

    def stats(self) -> TransactionStats:
        transactions = self.all()
        total = len(transactions)
        total_amount = sum(t.amount for t in transactions)
        by_status = Counter(t.status.value for t in transactions)
        by_provider = Counter(t.provider.value for t in transactions)

        return TransactionStats(
            total=total,
            by_status=dict(by_status),
            by_provider=dict(by_provider),
            total_amount=total_amount,
            average_amount=total_amount / total if total > 0 else 0,
        )

    def clear(self) -> None:
        with self._lock:
            self._transactions = []

    def __len__(self) -> int:
        return len(self._transactions)
