from __future__ import annotations

import dataclasses
import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, List

from fincoach_core.domain.models import Category, Profile, RecurringFrequency, RecurringTransaction
from fincoach_core.domain.periods import parse_datetime
from fincoach_core.io.ledger import transaction_from_json, transaction_to_json


def profile_from_json(data: Dict[str, Any]) -> Profile:
    return Profile(
        name=str(data.get("name", "") or ""),
        currency=str(data.get("currency", "₹") or "₹"),
        monthly_income=float(data.get("monthly_income", 0.0) or 0.0),
        monthly_budget=float(data.get("monthly_budget", 0.0) or 0.0),
        financial_goal=str(data.get("financial_goal", "") or ""),
        primary_expense_category=Category.parse(data.get("primary_expense_category", "Food") or "Food"),
    )


def profile_to_json(profile: Profile) -> Dict[str, Any]:
    payload = dataclasses.asdict(profile)
    payload["primary_expense_category"] = profile.primary_expense_category.value
    return payload


def load_profile(path: str | Path) -> Profile:
    """A missing profile file yields the default (empty) profile."""
    path = Path(path)
    if not path.exists():
        return Profile()
    with path.open("r", encoding="utf-8") as f:
        return profile_from_json(json.load(f))


def save_profile(path: str | Path, profile: Profile) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(profile_to_json(profile), f, indent=2, ensure_ascii=False)


def _optional_date(raw) -> dt.datetime | None:
    return parse_datetime(raw) if raw else None


def recurring_from_json(data: Dict[str, Any]) -> RecurringTransaction:
    fields: Dict[str, Any] = dict(
        base_transaction=transaction_from_json(data["base_transaction"]),
        frequency=RecurringFrequency.parse(data["frequency"]),
        start_date=parse_datetime(data["start_date"]),
        end_date=_optional_date(data.get("end_date")),
        last_processed_date=_optional_date(data.get("last_processed_date")),
    )
    if data.get("id"):
        fields["id"] = str(data["id"])
    return RecurringTransaction(**fields)


def recurring_to_json(recurring: RecurringTransaction) -> Dict[str, Any]:
    return {
        "id": recurring.id,
        "base_transaction": transaction_to_json(recurring.base_transaction),
        "frequency": recurring.frequency.value,
        "start_date": recurring.start_date.isoformat(),
        "end_date": recurring.end_date.isoformat() if recurring.end_date else None,
        "last_processed_date": (
            recurring.last_processed_date.isoformat() if recurring.last_processed_date else None
        ),
    }


def load_recurring(path: str | Path) -> List[RecurringTransaction]:
    path = Path(path)
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        return [recurring_from_json(item) for item in json.load(f)]


def save_recurring(path: str | Path, recurring: List[RecurringTransaction]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump([recurring_to_json(r) for r in recurring], f, indent=2, ensure_ascii=False)
