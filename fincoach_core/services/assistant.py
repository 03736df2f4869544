from __future__ import annotations

import datetime as dt
import os
import random
from typing import Iterable, Optional

from langchain_core.language_models import BaseLanguageModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate

from fincoach_core.domain.currency import format_number
from fincoach_core.domain.models import Profile, Transaction
from fincoach_core.domain.periods import reference_time
from fincoach_core.logging_setup import get_logger
from fincoach_core.services import summary

logger = get_logger(__name__)

GREETING = (
    "Hello! I'm your financial assistant. I can help analyze your spending, "
    "provide budgeting advice, or answer financial questions."
)
FALLBACK_REPLY = "Sorry, I'm having trouble processing your request. Please try again later."

FINANCIAL_TIPS = [
    "Automating your savings by setting up recurring transfers can help you save without thinking about it.",
    "The 50/30/20 rule suggests spending 50% on needs, 30% on wants, and 20% on savings and debt repayment.",
    "Building an emergency fund covering 3-6 months of expenses is a financial safety net worth having.",
    "Review your subscriptions regularly to ensure you're using what you pay for.",
    "Consider using the 24-hour rule before making non-essential purchases to avoid impulse buying.",
]

_TEMPLATE = """
You are a helpful finance assistant for a personal money management app.
Your task is to provide helpful insights, advice, and answers related to personal finance.

User's financial context information:
{context}

User's message: {message}
"""


def build_financial_context(
    transactions: Iterable[Transaction],
    profile: Profile,
    now: Optional[dt.datetime] = None,
) -> str:
    now = reference_time(now)
    txs = list(transactions)
    symbol = profile.currency

    def money(value: float) -> str:
        return f"{symbol}{format_number(value)}"

    by_category = summary.monthly_expenses_by_category(txs, now.month, now.year)
    category_lines = "\n".join(f"- {category.value}: {money(amount)}" for category, amount in by_category.items())

    return (
        "Financial information:\n"
        f"- Current balance: {money(summary.balance(txs))}\n"
        f"- Total income: {money(summary.total_income(txs))}\n"
        f"- Total expenses: {money(summary.total_expense(txs))}\n"
        f"- Monthly budget: {money(profile.monthly_budget)}\n"
        "\n"
        "Current month expenses by category:\n"
        f"{category_lines}\n"
        "\n"
        "Please provide helpful financial advice based on this information.\n"
        f"Always respond using {symbol} as currency."
    )


def _default_llm() -> Optional[BaseLanguageModel]:
    hf_token = os.environ.get("HF_TOKEN")
    if not hf_token:
        return None
    from langchain_community.llms import HuggingFaceEndpoint

    model = os.environ.get("HF_MODEL", "mistralai/Mistral-7B-Instruct-v0.2")
    timeout = float(os.environ.get("FINCOACH_ASSISTANT_TIMEOUT", "30"))
    return HuggingFaceEndpoint(
        repo_id=model,
        huggingfacehub_api_token=hf_token,
        temperature=0.4,
        max_new_tokens=400,
        timeout=timeout,
    )


def ask_assistant(
    message: str,
    transactions: Iterable[Transaction],
    profile: Profile,
    *,
    llm: Optional[BaseLanguageModel] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Send one chat message with the user's financial context and return the reply.
    Never raises: configuration or network problems yield ``FALLBACK_REPLY``.
    """
    context = build_financial_context(transactions, profile, now=now)
    try:
        model = llm if llm is not None else _default_llm()
        if model is None:
            logger.warning("assistant unavailable: HF_TOKEN is not set")
            return FALLBACK_REPLY
        chain = PromptTemplate.from_template(_TEMPLATE) | model | StrOutputParser()
        reply = chain.invoke({"context": context, "message": message})
    except Exception:  # noqa: BLE001
        logger.exception("assistant request failed")
        return FALLBACK_REPLY

    reply = (reply or "").strip()
    return reply or FALLBACK_REPLY


def pick_tip(rng: Optional[random.Random] = None) -> str:
    """Random tip for display; the only randomized output in the package."""
    return (rng or random).choice(FINANCIAL_TIPS)
