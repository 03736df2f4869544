from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from fincoach_core.domain.models import Category, Transaction, TransactionType
from fincoach_core.domain.periods import parse_datetime
from fincoach_core.logging_setup import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = {"date", "amount", "type", "category"}


def load_ledger(path: str | Path) -> List[Transaction]:
    """Load a ledger from a CSV export or a JSON blob, picked by file suffix."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return load_ledger_blob(path)
    return load_ledger_csv(path)


def load_ledger_csv(csv_path: str | Path) -> List[Transaction]:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in ledger CSV: {sorted(missing)}")

    # offsets are converted to UTC; naive dates keep their wall time
    df["date"] = pd.to_datetime(df["date"], utc=True, format="ISO8601").dt.tz_convert(None)
    if "note" not in df.columns:
        df["note"] = ""
    df["note"] = df["note"].fillna("").astype(str)

    transactions: List[Transaction] = []
    for _, row in df.iterrows():
        fields: Dict[str, Any] = dict(
            amount=float(row["amount"]),
            type=TransactionType.parse(row["type"]),
            category=Category.parse(row["category"]),
            date=row["date"].to_pydatetime(),
            note=row["note"],
        )
        if "id" in df.columns and isinstance(row["id"], str) and row["id"]:
            fields["id"] = row["id"]
        transactions.append(Transaction(**fields))
    logger.debug("loaded %d transactions from %s", len(transactions), path)
    return transactions


def transaction_to_json(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "amount": tx.amount,
        "type": tx.type.value,
        "category": tx.category.value,
        "date": tx.date.isoformat(),
        "note": tx.note,
    }


def transaction_from_json(data: Dict[str, Any]) -> Transaction:
    fields: Dict[str, Any] = dict(
        amount=float(data["amount"]),
        type=TransactionType.parse(data["type"]),
        category=Category.parse(data["category"]),
        date=parse_datetime(data["date"]),
        note=data.get("note", "") or "",
    )
    if data.get("id"):
        fields["id"] = str(data["id"])
    return Transaction(**fields)


def load_ledger_blob(path: str | Path) -> List[Transaction]:
    """Read a JSON blob written by ``save_ledger_blob``; a missing file is an empty ledger."""
    path = Path(path)
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return [transaction_from_json(item) for item in data]


def save_ledger_blob(path: str | Path, transactions: Iterable[Transaction]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump([transaction_to_json(tx) for tx in transactions], f, indent=2, ensure_ascii=False)


class LedgerStore:
    """
    File-backed ledger: append, replace or delete transactions by id.
    Every mutation rewrites the whole blob (last write wins).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.transactions: List[Transaction] = load_ledger_blob(self.path)

    def add(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)
        self.save()

    def extend(self, transactions: Iterable[Transaction]) -> None:
        self.transactions.extend(transactions)
        self.save()

    def update(self, transaction: Transaction) -> bool:
        for i, existing in enumerate(self.transactions):
            if existing.id == transaction.id:
                self.transactions[i] = transaction
                self.save()
                return True
        return False

    def delete(self, transaction_id: str) -> bool:
        kept = [tx for tx in self.transactions if tx.id != transaction_id]
        if len(kept) == len(self.transactions):
            return False
        self.transactions = kept
        self.save()
        return True

    def save(self) -> None:
        save_ledger_blob(self.path, self.transactions)
