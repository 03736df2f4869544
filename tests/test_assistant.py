import datetime as dt
import random

from langchain_core.language_models import FakeListLLM
from langchain_core.runnables import RunnableLambda

from fincoach_core.domain.models import Category, Profile, Transaction, TransactionType
from fincoach_core.services.assistant import (
    FALLBACK_REPLY,
    FINANCIAL_TIPS,
    ask_assistant,
    build_financial_context,
    pick_tip,
)

NOW = dt.datetime(2024, 6, 15, 12, 0)

LEDGER = [
    Transaction(amount=50000, type=TransactionType.INCOME, category=Category.SALARY, date=dt.datetime(2024, 6, 1)),
    Transaction(amount=1200, type=TransactionType.EXPENSE, category=Category.FOOD, date=dt.datetime(2024, 6, 3)),
    Transaction(amount=800, type=TransactionType.EXPENSE, category=Category.TRAVEL, date=dt.datetime(2024, 5, 3)),
]
PROFILE = Profile(name="Asha", monthly_income=50000, monthly_budget=35000)


def test_context_lists_balance_and_current_month():
    context = build_financial_context(LEDGER, PROFILE, now=NOW)
    assert "- Current balance: ₹48,000" in context
    assert "- Total expenses: ₹2,000" in context
    assert "- Monthly budget: ₹35,000" in context
    assert "- Food: ₹1,200" in context
    assert "- Travel: ₹0" in context
    assert context.endswith("Always respond using ₹ as currency.")


def test_reply_comes_from_the_model():
    llm = FakeListLLM(responses=["  Spend less on food.  "])
    assert ask_assistant("How am I doing?", LEDGER, PROFILE, llm=llm, now=NOW) == "Spend less on food."


def test_empty_reply_falls_back():
    llm = FakeListLLM(responses=["   "])
    assert ask_assistant("Hi", LEDGER, PROFILE, llm=llm, now=NOW) == FALLBACK_REPLY


def test_model_errors_fall_back():
    def broken(_prompt):
        raise ConnectionError("endpoint unreachable")

    assert ask_assistant("Hi", LEDGER, PROFILE, llm=RunnableLambda(broken), now=NOW) == FALLBACK_REPLY


def test_missing_token_falls_back(monkeypatch):
    monkeypatch.delenv("HF_TOKEN", raising=False)
    assert ask_assistant("Hi", [], Profile()) == FALLBACK_REPLY


def test_pick_tip():
    assert pick_tip(random.Random(0)) in FINANCIAL_TIPS
    assert pick_tip() in FINANCIAL_TIPS
