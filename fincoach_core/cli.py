from __future__ import annotations

import dataclasses
import datetime as dt
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from fincoach_core.domain.currency import format_currency
from fincoach_core.domain.models import Category, Profile, Transaction
from fincoach_core.domain.periods import parse_datetime
from fincoach_core.io import config as config_io
from fincoach_core.io import ledger as ledger_io
from fincoach_core.io import payloads
from fincoach_core.io import profile as profile_io
from fincoach_core.logging_setup import configure_logging
from fincoach_core.services import allocation, assistant, goals, projection, recurring, summary, trends

app = typer.Typer(help="Budget allocation and financial insights from a transaction ledger.")


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, help="Log level (defaults to FINCOACH_LOG_LEVEL or WARNING)")):
    configure_logging(log_level)


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def _emit(payload, out: Optional[Path], label: str) -> None:
    if out:
        _save_json(out, payload)
        typer.echo(f"{label} written to {out}")
    else:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _parse_as_of(raw: Optional[str]) -> Optional[dt.datetime]:
    if not raw:
        return None
    try:
        return parse_datetime(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid --as-of value {raw!r}; use ISO format") from exc


def _load_transactions(ledger: Optional[Path]) -> List[Transaction]:
    if ledger is None:
        return []
    try:
        return ledger_io.load_ledger(ledger)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(f"Cannot read ledger {ledger}: {exc}") from exc


def _resolve_profile(
    profile: Optional[Path],
    income: Optional[float],
    goal: Optional[str],
    primary: Optional[str] = None,
) -> Profile:
    base = profile_io.load_profile(profile) if profile else Profile()
    changes = {}
    if income is not None:
        changes["monthly_income"] = income
    if goal is not None:
        changes["financial_goal"] = goal
    if primary is not None:
        try:
            changes["primary_expense_category"] = Category.parse(primary)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    return dataclasses.replace(base, **changes)


@app.command()
def allocate(
    profile: Optional[Path] = typer.Option(None, help="Profile JSON"),
    ledger: Optional[Path] = typer.Option(None, help="Ledger CSV or JSON used to blend actual spending"),
    income: Optional[float] = typer.Option(None, help="Monthly income (overrides profile)"),
    goal: Optional[str] = typer.Option(None, help="Financial goal label (overrides profile)"),
    primary: Optional[str] = typer.Option(None, help="Primary expense category (overrides profile)"),
    policy: Optional[Path] = typer.Option(None, help="JSON config with an 'allocation' section"),
    out: Optional[Path] = typer.Option(None, help="Output path for allocations JSON"),
):
    """Recommend a monthly budget split across spending categories."""
    user = _resolve_profile(profile, income, goal, primary)
    transactions = _load_transactions(ledger)
    alloc_policy = config_io.load_allocation_policy(policy) if policy else None
    result = allocation.compute_allocations(
        user.monthly_income,
        user.goal,
        user.primary_expense_category,
        transactions,
        policy=alloc_policy,
    )
    payload = {"monthly_income": user.monthly_income, "allocations": payloads.allocations_to_json(result)}
    _emit(payload, out, "Allocations")


@app.command("savings-plan")
def savings_plan(
    target: float = typer.Option(..., help="Amount to save"),
    months: int = typer.Option(..., help="Months to reach the target"),
    income: float = typer.Option(..., help="Monthly income"),
    out: Optional[Path] = typer.Option(None, help="Output path for plan JSON"),
):
    """Monthly contribution needed for a savings target."""
    try:
        plan = allocation.compute_savings_plan(target, months, income)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--months") from exc
    _emit(dataclasses.asdict(plan), out, "Savings plan")


@app.command()
def progress(
    profile: Optional[Path] = typer.Option(None, help="Profile JSON"),
    ledger: Optional[Path] = typer.Option(None, help="Ledger CSV or JSON"),
    income: Optional[float] = typer.Option(None, help="Monthly income (overrides profile)"),
    goal: Optional[str] = typer.Option(None, help="Financial goal label (overrides profile)"),
    policy: Optional[Path] = typer.Option(None, help="JSON config with a 'goals' section"),
    as_of: Optional[str] = typer.Option(None, help="Reference time, ISO format (default: now)"),
    out: Optional[Path] = typer.Option(None, help="Output path for progress JSON"),
):
    """Progress toward the financial goal and estimated months remaining."""
    user = _resolve_profile(profile, income, goal)
    goal_policy = config_io.load_goal_policy(policy) if policy else None
    status = goals.goal_status(
        _load_transactions(ledger),
        user.goal,
        user.monthly_income,
        now=_parse_as_of(as_of),
        policy=goal_policy,
    )
    _emit(payloads.goal_to_json(status), out, "Goal progress")


@app.command("trends")
def trends_command(
    ledger: Path = typer.Option(..., help="Ledger CSV or JSON"),
    months: int = typer.Option(3, help="Length of each comparison period in months"),
    as_of: Optional[str] = typer.Option(None, help="Reference time, ISO format (default: now)"),
    out: Optional[Path] = typer.Option(None, help="Output path for trends JSON"),
):
    """Category spending now versus the previous period."""
    result = trends.spending_trends(_load_transactions(ledger), months, now=_parse_as_of(as_of))
    _emit(payloads.analytics_to_json(result), out, "Spending trends")


@app.command()
def insights(
    profile: Optional[Path] = typer.Option(None, help="Profile JSON"),
    ledger: Optional[Path] = typer.Option(None, help="Ledger CSV or JSON"),
    income: Optional[float] = typer.Option(None, help="Monthly income (overrides profile)"),
    as_of: Optional[str] = typer.Option(None, help="Reference time, ISO format (default: now)"),
    out: Optional[Path] = typer.Option(None, help="Output path for insights JSON"),
):
    """Plain-language observations about spending and saving."""
    user = _resolve_profile(profile, income, None)
    messages = trends.smart_insights(_load_transactions(ledger), user.monthly_income, now=_parse_as_of(as_of))
    if out:
        _save_json(out, messages)
        typer.echo(f"Insights written to {out}")
        return
    console = Console()
    for message in messages:
        console.print(f"[cyan]•[/cyan] {message}")


@app.command()
def project(
    current: float = typer.Option(0.0, help="Current savings"),
    contribution: float = typer.Option(..., help="Monthly contribution"),
    rate: float = typer.Option(0.0, help="Annual growth rate, e.g. 0.08"),
    months: int = typer.Option(12, help="Months to project"),
    out: Optional[Path] = typer.Option(None, help="Output path for projection JSON"),
):
    """Month-by-month savings balance with compound growth."""
    balances = projection.project_savings(current, contribution, rate, months)
    _emit([round(b, 2) for b in balances], out, "Projection")


@app.command("summary")
def summary_command(
    ledger: Path = typer.Option(..., help="Ledger CSV or JSON"),
    profile: Optional[Path] = typer.Option(None, help="Profile JSON (for the currency symbol)"),
    month: Optional[int] = typer.Option(None, help="Month for the category breakdown (default: current)"),
    year: Optional[int] = typer.Option(None, help="Year for the category breakdown (default: current)"),
):
    """Totals, balance and a monthly breakdown by category."""
    transactions = _load_transactions(ledger)
    symbol = _resolve_profile(profile, None, None).currency
    today = dt.date.today()
    month = month or today.month
    year = year or today.year

    console = Console()
    console.print(f"Income:  {format_currency(summary.total_income(transactions), symbol)}")
    console.print(f"Expense: {format_currency(summary.total_expense(transactions), symbol)}")
    console.print(f"Balance: {format_currency(summary.balance(transactions), symbol)}")

    top, amount = summary.top_expense_category(transactions)
    if top is not None:
        console.print(f"Top expense category: {top.value} ({format_currency(amount, symbol)})")

    spent = summary.monthly_expense_total(transactions, month, year)
    console.print(f"Spent in {year}-{month:02d}: {format_currency(spent, symbol)}")

    table = Table(title=f"Expenses {year}-{month:02d}")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    for category, total in summary.monthly_expenses_by_category(transactions, month, year).items():
        table.add_row(category.value, format_currency(total, symbol))
    console.print(table)


@app.command("recurring")
def recurring_command(
    templates: Path = typer.Option(..., help="Recurring transactions JSON"),
    ledger: Path = typer.Option(..., help="Ledger JSON blob to append occurrences to"),
    as_of: Optional[str] = typer.Option(None, help="Reference time, ISO format (default: now)"),
):
    """Append due recurring transactions to the ledger."""
    now = _parse_as_of(as_of)
    store = ledger_io.LedgerStore(ledger)
    updated = []
    created_total = 0
    for template in profile_io.load_recurring(templates):
        created, template = recurring.expand_recurring(template, now=now)
        if created:
            store.extend(created)
            created_total += len(created)
        updated.append(template)
    profile_io.save_recurring(templates, updated)
    typer.echo(f"Added {created_total} recurring transaction(s) to {ledger}")


@app.command()
def ask(
    message: Optional[str] = typer.Argument(None, help="Question for the assistant"),
    profile: Optional[Path] = typer.Option(None, help="Profile JSON"),
    ledger: Optional[Path] = typer.Option(None, help="Ledger CSV or JSON"),
):
    """Ask the finance assistant (needs HF_TOKEN). Without a question, print the greeting."""
    if not message:
        typer.echo(assistant.GREETING)
        return
    user = _resolve_profile(profile, None, None)
    transactions = _load_transactions(ledger)
    console = Console()
    with Progress(SpinnerColumn(), TextColumn("{task.description}"), transient=True, console=console) as bar:
        bar.add_task(description="Thinking...", total=None)
        reply = assistant.ask_assistant(message, transactions, user)
    console.print(reply)


@app.command()
def tip():
    """Print a random financial tip."""
    typer.echo(assistant.pick_tip())


if __name__ == "__main__":
    app()
