"""Analytics summary over one owner's transactions, budgets and goals.

The reductions are pure and take already-loaded records. Sums use
``math.fsum`` so totals do not depend on the order the store returned rows
in. Percentages over a zero limit or target come back as ``None``.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from finance_api.core.clock import parse_iso_datetime
from finance_api.core.config import TableNames
from finance_api.core.logs import get_logger
from finance_api.db.store import RecordStore

TOP_CATEGORY_LIMIT = 5

logger = get_logger("analytics")


def _percent(part: float, whole: float) -> float | None:
    if whole == 0:
        return None
    return (part / whole) * 100


def _expense_total(transactions: Iterable[dict[str, Any]]) -> float:
    return math.fsum(abs(t["amount"]) for t in transactions if t["amount"] < 0)


def _income_total(transactions: Iterable[dict[str, Any]]) -> float:
    return math.fsum(t["amount"] for t in transactions if t["amount"] > 0)


def income_vs_expenses(transactions: list[dict[str, Any]]) -> dict[str, float]:
    income = _income_total(transactions)
    expenses = _expense_total(transactions)
    return {"income": income, "expenses": expenses, "net": income - expenses}


def budget_progress(transactions: list[dict[str, Any]], budgets: list[dict[str, Any]]) -> list[dict[str, Any]]:
    result = []
    for budget in budgets:
        limit = budget["amount"]
        spent = _expense_total(t for t in transactions if t["category"] == budget["category"])
        result.append(
            {
                "category": budget["category"],
                "limit": limit,
                "spent": spent,
                "remaining": limit - spent,
                "percentUsed": _percent(spent, limit),
            }
        )
    return result


def goal_progress(goals: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "name": goal["name"],
            "target": goal["targetAmount"],
            "current": goal["currentAmount"],
            "remaining": goal["targetAmount"] - goal["currentAmount"],
            "progress": _percent(goal["currentAmount"], goal["targetAmount"]),
        }
        for goal in goals
    ]


def top_categories(transactions: list[dict[str, Any]], limit: int = TOP_CATEGORY_LIMIT) -> list[dict[str, Any]]:
    amounts: dict[str, list[float]] = {}
    for t in transactions:
        amounts.setdefault(t["category"], []).append(abs(t["amount"]))
    totals = [(category, math.fsum(values)) for category, values in amounts.items()]
    # sorted() is stable, so equal totals keep first-seen order.
    totals.sort(key=lambda item: item[1], reverse=True)
    return [{"category": category, "total": total} for category, total in totals[:limit]]


def month_key(date_value: str) -> str:
    dt = parse_iso_datetime(date_value)
    return f"{dt.year:04d}-{dt.month:02d}"


def monthly_trend(transactions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    by_month: dict[str, list[dict[str, Any]]] = {}
    for t in transactions:
        by_month.setdefault(month_key(t["date"]), []).append(t)
    return [
        {
            "month": month,
            "income": _income_total(by_month[month]),
            "expenses": _expense_total(by_month[month]),
        }
        for month in sorted(by_month)
    ]


def summarize(
    transactions: list[dict[str, Any]],
    budgets: list[dict[str, Any]],
    goals: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "incomeVsExpenses": income_vs_expenses(transactions),
        "budgetProgress": budget_progress(transactions, budgets),
        "goalProgress": goal_progress(goals),
        "topCategories": top_categories(transactions),
        "monthlyTrend": monthly_trend(transactions),
    }


class AnalyticsService:
    def __init__(self, store: RecordStore, tables: TableNames) -> None:
        self._store = store
        self._tables = tables

    def summary(self, owner: str) -> dict[str, Any]:
        filters = {"ownerId": owner}
        # The three scans are independent reads; any failure fails the summary.
        with ThreadPoolExecutor(max_workers=3) as pool:
            transactions = pool.submit(self._store.scan_all, self._tables.transactions, filters)
            budgets = pool.submit(self._store.scan_all, self._tables.budgets, filters)
            goals = pool.submit(self._store.scan_all, self._tables.goals, filters)
            loaded = transactions.result(), budgets.result(), goals.result()

        logger.info(
            "analytics summary built",
            userId=owner,
            transactions=len(loaded[0]),
            budgets=len(loaded[1]),
            goals=len(loaded[2]),
        )
        return summarize(*loaded)
