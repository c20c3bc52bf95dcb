"""
Income versus expenses for a month
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from database.models import Currency, ExpenseRecord, IncomeRecord
from database.state import LedgerState
from projections.debts import monthly_amount


@dataclass
class MonthBalance:
    total_income: float
    total_expenses: float
    balance: float
    savings_rate: float


def incomes_for_month(
    base: List[IncomeRecord], overrides: Dict[str, List[IncomeRecord]], month_key: str
) -> List[IncomeRecord]:
    """A month's overrides when it has any, otherwise the base incomes"""
    if month_key in overrides:
        return list(overrides[month_key])
    return list(base)


def total_income(incomes: Iterable[IncomeRecord], exchange_rate: float) -> float:
    total = 0.0
    for income in incomes:
        if income.currency == Currency.USD.value:
            total += income.amount * exchange_rate
        else:
            total += income.amount
    return total


def month_balance(
    incomes: Iterable[IncomeRecord],
    records: Iterable[ExpenseRecord],
    exchange_rate: float,
) -> MonthBalance:
    """Balance and savings rate (percent of income, 1 decimal)"""
    income = total_income(incomes, exchange_rate)
    expenses = sum(monthly_amount(record, exchange_rate) for record in records)
    balance = income - expenses

    return MonthBalance(
        total_income=income,
        total_expenses=expenses,
        balance=balance,
        savings_rate=round(balance / income * 100, 1) if income > 0 else 0.0,
    )


def balance_for_state(state: LedgerState) -> MonthBalance:
    """Balance of the month selected in a loaded ledger state"""
    incomes = incomes_for_month(state.incomes, state.income_overrides, state.month_key)
    return month_balance(incomes, state.month_expenses(), state.exchange_rate)
