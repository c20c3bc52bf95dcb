"""
Monthly expense summaries for the dashboard views
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta

from database.models import ExpenseRecord
from projections.debts import monthly_amount


@dataclass
class MonthTotals:
    total_local: float = 0.0
    total_foreign: float = 0.0
    count_local: int = 0
    count_foreign: int = 0
    combined: float = 0.0


def month_totals(records: Iterable[ExpenseRecord], exchange_rate: float) -> MonthTotals:
    """
    Local and foreign totals for a month

    A record counts as foreign when it carries a positive foreign amount,
    otherwise its local amount is used.
    """
    totals = MonthTotals()

    for record in records:
        if record.amount_foreign and record.amount_foreign > 0:
            totals.total_foreign += record.amount_foreign
            totals.count_foreign += 1
        elif record.amount_local:
            totals.total_local += record.amount_local
            totals.count_local += 1

    totals.combined = totals.total_local + totals.total_foreign * exchange_rate
    return totals


def records_frame(records: Iterable[ExpenseRecord]) -> pd.DataFrame:
    columns = [
        "date",
        "description",
        "payment_method",
        "entity",
        "installments_total",
        "installment_current",
        "amount_local",
        "amount_foreign",
        "responsible",
        "category",
        "paid",
    ]
    return pd.DataFrame([r.to_dict() for r in records], columns=columns)


def breakdown(
    records: Iterable[ExpenseRecord], field: str = "payment_method", top: int = 5
) -> List[Dict]:
    """
    Local amount per value of `field`, largest first

    Returns:
        List of dicts with name, amount and percentage (rounded to int)
    """
    df = records_frame(records)
    if df.empty:
        return []

    df[field] = df[field].fillna("Other").replace("", "Other")
    amounts = (
        df.groupby(field, sort=False)["amount_local"]
        .sum()
        .sort_values(ascending=False, kind="stable")
    )
    total = amounts.sum()

    return [
        {
            "name": name,
            "amount": float(amount),
            "percentage": int(round(float(amount) / float(total) * 100)) if total > 0 else 0,
        }
        for name, amount in amounts.head(top).items()
    ]


@dataclass
class InstallmentOverview:
    count: int = 0
    months_remaining: int = 0
    last_installment_month: Optional[date] = None


def installment_overview(
    records: Iterable[ExpenseRecord], year: int, month: int
) -> InstallmentOverview:
    """How many installment expenses there are and when the last one is paid"""
    installments = [r for r in records if r.is_installment]
    overview = InstallmentOverview(count=len(installments))

    for record in installments:
        remaining = record.installments_total - record.installment_current
        overview.months_remaining = max(overview.months_remaining, remaining)

    if overview.months_remaining > 0:
        overview.last_installment_month = date(year, month, 1) + relativedelta(
            months=overview.months_remaining
        )

    return overview


@dataclass
class DayTotal:
    amount: float = 0.0
    count: int = 0


def expenses_by_day(
    records: Iterable[ExpenseRecord], exchange_rate: float
) -> Dict[int, DayTotal]:
    """
    Spending per day of the month for the calendar view

    Foreign-only records are converted at `exchange_rate`.

    Returns:
        Dict keyed by day of month; days without expenses are absent
    """
    df = pd.DataFrame(
        [
            {"day": r.date.day, "amount": monthly_amount(r, exchange_rate)}
            for r in records
        ],
        columns=["day", "amount"],
    )
    if df.empty:
        return {}

    grouped = df.groupby("day")["amount"].agg(["sum", "count"])
    return {
        int(day): DayTotal(amount=float(row["sum"]), count=int(row["count"]))
        for day, row in grouped.iterrows()
    }


@dataclass
class ExplorerEntry:
    month_key: str
    index: int
    record: ExpenseRecord

    @property
    def entry_id(self) -> str:
        return f"{self.month_key}-{self.index}"


def search_expenses(
    expenses: Dict[str, List[ExpenseRecord]],
    query: str = "",
    payment_method: Optional[str] = None,
    responsible: Optional[str] = None,
) -> List[ExplorerEntry]:
    """
    Every month's expenses, newest date first, filtered for the explorer

    Args:
        expenses: Records by month key, as returned by the store
        query: Case-insensitive substring of the description
        payment_method: Exact payment method, or None for all
        responsible: Exact responsible party, or None for all

    Returns:
        Matching entries; records sharing a date keep their stored order
    """
    entries = [
        ExplorerEntry(key, index, record)
        for key, records in expenses.items()
        for index, record in enumerate(records)
    ]
    entries.sort(key=lambda e: e.record.date, reverse=True)

    needle = query.strip().lower()
    return [
        e
        for e in entries
        if needle in e.record.description.lower()
        and (payment_method is None or e.record.payment_method == payment_method)
        and (responsible is None or e.record.responsible == responsible)
    ]


def filter_options(expenses: Dict[str, List[ExpenseRecord]], field: str) -> List[str]:
    """Distinct non-empty values of `field`, in first-seen order"""
    values = []
    for records in expenses.values():
        for record in records:
            value = getattr(record, field)
            if value and value not in values:
                values.append(value)
    return values


def financed_total(total: float, interest_rate: float = 0.0) -> float:
    """Total paid when `interest_rate` percent is added to a purchase"""
    return total * (1 + interest_rate / 100)


def installment_amount(total: float, installments: int, interest_rate: float = 0.0) -> float:
    """
    Monthly payment of a purchase split into installments

    Args:
        total: Purchase price
        installments: Number of installments (at least 1)
        interest_rate: Surcharge in percent over the whole purchase

    Returns:
        financed_total(total, interest_rate) / installments
    """
    if installments < 1:
        raise ValueError(f"Installments must be at least 1, got {installments}")
    return financed_total(total, interest_rate) / installments


def to_local(amount_foreign: float, exchange_rate: float) -> float:
    return amount_foreign * exchange_rate
