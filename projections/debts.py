"""
Installment (cuotas) projection engine

Derives month-by-month payment schedules from the installment expenses of a
reference month: what is still owed each month, which installments end, and
when the household is free of installment debt.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta

from database.models import ExpenseRecord
from database.state import LedgerState

NO_ENTITY = "No entity"
NO_PAYMENT_METHOD = "No payment method"


@dataclass
class DebtItem:
    """An installment expense with its derived schedule figures"""

    record: ExpenseRecord
    remaining_installments: int
    monthly_amount: float

    @property
    def remaining_amount(self) -> float:
        return self.monthly_amount * self.remaining_installments

    @property
    def description(self) -> str:
        return self.record.description

    @property
    def entity(self) -> str:
        return self.record.entity or NO_ENTITY

    @property
    def payment_method(self) -> str:
        return self.record.payment_method or NO_PAYMENT_METHOD


@dataclass
class DebtStats:
    count: int = 0
    total_pending: float = 0.0
    total_monthly: float = 0.0
    max_remaining: int = 0
    freedom_date: Optional[date] = None
    months_until_freedom: int = 0


@dataclass
class MonthProjection:
    """What is owed `month_offset` months after the reference month"""

    month_offset: int
    month_start: date
    active_items: List[DebtItem]
    monthly_total: float
    final_payment_items: List[DebtItem]
    release_amount: float
    release_month: date

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month_start.month]} {self.month_start.year}"

    @property
    def short_label(self) -> str:
        return (
            f"{calendar.month_abbr[self.month_start.month]} "
            f"'{str(self.month_start.year)[-2:]}"
        )

    @property
    def release_label(self) -> str:
        return f"{calendar.month_name[self.release_month.month]} {self.release_month.year}"

    @property
    def has_release(self) -> bool:
        return bool(self.final_payment_items)


@dataclass
class DebtGroup:
    name: str
    items: List[DebtItem] = field(default_factory=list)
    total_monthly: float = 0.0
    total_pending: float = 0.0
    max_remaining: int = 0

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass
class DebtReport:
    year: int
    month: int
    exchange_rate: float
    items: List[DebtItem]
    stats: DebtStats
    projection: List[MonthProjection]
    by_entity: List[DebtGroup]
    by_payment_method: List[DebtGroup]


def reference_start(year: int, month: int) -> date:
    return date(year, month, 1)


def monthly_amount(record: ExpenseRecord, exchange_rate: float) -> float:
    """Installment amount in local currency"""
    if record.amount_local:
        return record.amount_local
    if record.amount_foreign:
        return record.amount_foreign * exchange_rate
    return 0.0


def build_debt_items(
    records: Iterable[ExpenseRecord], exchange_rate: float
) -> List[DebtItem]:
    """Installment records (more than one installment) with their schedule figures"""
    return [
        DebtItem(
            record=record,
            remaining_installments=max(
                record.installments_total - record.installment_current, 0
            ),
            monthly_amount=monthly_amount(record, exchange_rate),
        )
        for record in records
        if record.is_installment
    ]


def debt_stats(items: List[DebtItem], year: int, month: int) -> DebtStats:
    """
    Aggregate pending and monthly totals and the freedom date

    The freedom date is the first day of the month after the last
    installment, i.e. the reference month advanced by max_remaining + 1.
    """
    stats = DebtStats(count=len(items))

    for item in items:
        stats.total_pending += item.remaining_amount
        stats.total_monthly += item.monthly_amount
        stats.max_remaining = max(stats.max_remaining, item.remaining_installments)

    if stats.max_remaining > 0:
        stats.freedom_date = reference_start(year, month) + relativedelta(
            months=stats.max_remaining + 1
        )
        stats.months_until_freedom = stats.max_remaining + 1

    return stats


def project_payments(items: List[DebtItem], year: int, month: int) -> List[MonthProjection]:
    """
    One projection per future month until the last installment

    Items on their last recorded installment (nothing remaining) never
    appear in the projection.
    """
    max_remaining = max((item.remaining_installments for item in items), default=0)
    start = reference_start(year, month)

    projection = []
    for offset in range(1, max_remaining + 1):
        active = [item for item in items if item.remaining_installments >= offset]
        final = [item for item in items if item.remaining_installments == offset]

        projection.append(
            MonthProjection(
                month_offset=offset,
                month_start=start + relativedelta(months=offset),
                active_items=active,
                monthly_total=sum(item.monthly_amount for item in active),
                final_payment_items=final,
                release_amount=sum(item.monthly_amount for item in final),
                release_month=start + relativedelta(months=offset + 1),
            )
        )

    return projection


def upcoming_releases(
    projection: List[MonthProjection], limit: int = 4
) -> List[MonthProjection]:
    """First months in which some installment makes its final payment"""
    return [month for month in projection if month.has_release][:limit]


def group_debts(items: List[DebtItem], key: Callable[[DebtItem], str]) -> List[DebtGroup]:
    """Group items by `key`, largest pending total first"""
    groups = {}

    for item in items:
        name = key(item)
        group = groups.setdefault(name, DebtGroup(name=name))
        group.items.append(item)
        group.total_monthly += item.monthly_amount
        group.total_pending += item.remaining_amount
        group.max_remaining = max(group.max_remaining, item.remaining_installments)

    return sorted(groups.values(), key=lambda g: g.total_pending, reverse=True)


def by_entity(items: List[DebtItem]) -> List[DebtGroup]:
    return group_debts(items, lambda item: item.entity)


def by_payment_method(items: List[DebtItem]) -> List[DebtGroup]:
    return group_debts(items, lambda item: item.payment_method)


def build_debt_report(
    records: Iterable[ExpenseRecord], year: int, month: int, exchange_rate: float
) -> DebtReport:
    """
    Full installment picture for a reference month

    Args:
        records: Expenses of the reference month
        year: Reference year
        month: Reference month (1-indexed)
        exchange_rate: Local currency per unit of foreign currency

    Returns:
        DebtReport with items, stats, projection and groupings
    """
    items = build_debt_items(records, exchange_rate)

    return DebtReport(
        year=year,
        month=month,
        exchange_rate=exchange_rate,
        items=items,
        stats=debt_stats(items, year, month),
        projection=project_payments(items, year, month),
        by_entity=by_entity(items),
        by_payment_method=by_payment_method(items),
    )


def report_for_state(state: LedgerState) -> DebtReport:
    """Debt report for the month selected in a loaded ledger state"""
    return build_debt_report(
        state.month_expenses(), state.year, state.month, state.exchange_rate
    )


def projection_frame(report: DebtReport) -> pd.DataFrame:
    """Projection table as a DataFrame for reporting views"""
    return pd.DataFrame(
        [
            {
                "MONTH_OFFSET": p.month_offset,
                "MONTH": p.label,
                "ACTIVE": len(p.active_items),
                "MONTHLY_TOTAL": p.monthly_total,
                "ENDING": len(p.final_payment_items),
                "RELEASE_AMOUNT": p.release_amount,
                "RELEASE_MONTH": p.release_label if p.has_release else None,
            }
            for p in report.projection
        ],
        columns=[
            "MONTH_OFFSET",
            "MONTH",
            "ACTIVE",
            "MONTHLY_TOTAL",
            "ENDING",
            "RELEASE_AMOUNT",
            "RELEASE_MONTH",
        ],
    )


if __name__ == "__main__":
    import sys

    from database.config import DB_PATH, DEFAULT_OWNER
    from database.db import Database
    from database.models import parse_month_key
    from database.store import SQLiteLedgerStore

    if len(sys.argv) != 2:
        print("Usage: python -m projections.debts <YYYY-MM>")
        sys.exit(1)

    year, month = parse_month_key(sys.argv[1])
    store = SQLiteLedgerStore(Database(DB_PATH))
    report = report_for_state(LedgerState.load(store, DEFAULT_OWNER, year, month))

    print("\n" + "=" * 60)
    print(f"💳 INSTALLMENTS FROM {sys.argv[1]}")
    print("=" * 60)
    print(f"   Installment expenses: {report.stats.count}")
    print(f"   Monthly commitment: ${report.stats.total_monthly:,.2f}")
    print(f"   Total pending: ${report.stats.total_pending:,.2f}")
    if report.stats.freedom_date:
        print(f"   Debt free from: {report.stats.freedom_date:%m/%Y}")
    else:
        print("   No installments pending")

    if report.projection:
        print()
        print(projection_frame(report).to_string(index=False))
