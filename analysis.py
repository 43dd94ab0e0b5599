# analysis.py
from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

import pandas as pd

from models import (
    COLORS,
    CategorySlice,
    MonthBucket,
    SummaryData,
    Transaction,
    TransactionType,
)

TRANSACTION_COLUMNS = ["id", "date", "amount", "category", "description", "type"]
TREND_MONTHS = 6

INCOME = TransactionType.INCOME.value
EXPENSE = TransactionType.EXPENSE.value


@dataclass(frozen=True)
class DerivedViews:
    summary: SummaryData
    categories: List[CategorySlice]
    monthly: List[MonthBucket]


def txs_to_df(txs: Sequence[Transaction]) -> pd.DataFrame:
    df = pd.DataFrame([t.to_dict() for t in txs], columns=TRANSACTION_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["amount"] = df["amount"].astype(float)
    return df


def compute_summary(txs: Sequence[Transaction]) -> SummaryData:
    df = txs_to_df(txs)
    totals = df.groupby("type")["amount"].sum()
    return SummaryData(
        total_income=float(totals.get(INCOME, 0.0)),
        total_expense=float(totals.get(EXPENSE, 0.0)),
    )


def compute_category_breakdown(txs: Sequence[Transaction]) -> List[CategorySlice]:
    """
    Expense totals per category, largest first.

    Categories are grouped by exact label. Equal totals keep the order in
    which their category first appears. Colors follow the output position.
    """
    df = txs_to_df(txs)
    expenses = df[df["type"] == EXPENSE]
    by_cat = expenses.groupby("category", sort=False)["amount"].sum()
    by_cat = by_cat.sort_values(ascending=False, kind="stable")
    return [
        CategorySlice(category=name, total_amount=float(total), color=COLORS[i % len(COLORS)])
        for i, (name, total) in enumerate(by_cat.items())
    ]


def compute_monthly_trend(txs: Sequence[Transaction], reference_date: date) -> List[MonthBucket]:
    """
    Income and expense totals for the six calendar months ending with the
    month of ``reference_date``, oldest first. Anything dated outside that
    window is left out.
    """
    end = pd.Period(year=reference_date.year, month=reference_date.month, freq="M")
    months = pd.period_range(end=end, periods=TREND_MONTHS, freq="M")

    df = txs_to_df(txs)
    df = df.dropna(subset=["date"])
    df["month"] = df["date"].dt.to_period("M")
    window = df[df["month"].isin(months)]
    totals = window.groupby(["month", "type"])["amount"].sum().to_dict()

    buckets = []
    for period in months:
        buckets.append(MonthBucket(
            year=period.year,
            month=period.month,
            income_total=float(totals.get((period, INCOME), 0.0)),
            expense_total=float(totals.get((period, EXPENSE), 0.0)),
        ))
    return buckets


def derive_views(txs: Sequence[Transaction], reference_date: date) -> DerivedViews:
    """Recompute every derived view from a snapshot."""
    return DerivedViews(
        summary=compute_summary(txs),
        categories=compute_category_breakdown(txs),
        monthly=compute_monthly_trend(txs, reference_date),
    )


def category_shares(breakdown: Sequence[CategorySlice], total_expense: float) -> List[int]:
    # whole-number percentages for the legend
    if total_expense <= 0:
        return [0 for _ in breakdown]
    return [int(round(s.total_amount / total_expense * 100)) for s in breakdown]
