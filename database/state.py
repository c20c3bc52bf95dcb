"""
Working snapshot of one owner's ledger

The state is loaded explicitly from a store and handed to the import and
reporting code; nothing here is global.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from database.models import ExpenseRecord, IncomeRecord, month_key
from database.store import LedgerStore


@dataclass
class LedgerState:
    owner_id: str
    year: int
    month: int
    exchange_rate: float
    expenses: Dict[str, List[ExpenseRecord]] = field(default_factory=dict)
    incomes: List[IncomeRecord] = field(default_factory=list)
    income_overrides: Dict[str, List[IncomeRecord]] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        store: LedgerStore,
        owner_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> "LedgerState":
        """Read everything the owner has; year/month default to today"""
        today = date.today()
        return cls(
            owner_id=owner_id,
            year=year if year is not None else today.year,
            month=month if month is not None else today.month,
            exchange_rate=store.get_exchange_rate(owner_id),
            expenses=store.list_expenses(owner_id),
            incomes=store.list_incomes(owner_id),
            income_overrides=store.list_income_overrides(owner_id),
        )

    @property
    def month_key(self) -> str:
        return month_key(self.year, self.month)

    def month_expenses(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> List[ExpenseRecord]:
        key = month_key(
            self.year if year is None else year, self.month if month is None else month
        )
        return self.expenses.get(key, [])
