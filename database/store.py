"""
Ledger persistence

One interface, two backends: a multi-tenant SQLite store and a local-only
store kept in memory (optionally mirrored to a JSON file). Every operation
is scoped by the owning user's id.
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional

from database.config import DEFAULT_EXCHANGE_RATE
from database.db import Database
from database.models import (
    SCHEMA,
    ExpenseRecord,
    IncomeRecord,
    parse_month_key,
    to_fixed_point,
)

INCOME_FIELDS = ("description", "amount", "currency", "responsible", "recurring")


def _fixed(record: ExpenseRecord) -> ExpenseRecord:
    return replace(
        record,
        amount_local=to_fixed_point(record.amount_local or 0.0),
        amount_foreign=to_fixed_point(record.amount_foreign),
    )


def _fixed_income(income: IncomeRecord) -> IncomeRecord:
    return replace(income, amount=to_fixed_point(income.amount))


def _check_rate(rate: float) -> float:
    rate = float(rate)
    if rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got {rate}")
    return rate


class LedgerStore(ABC):
    """Persistence collaborator used by the import pipeline and reports"""

    @abstractmethod
    def list_expenses(
        self, owner_id: str, month_key: Optional[str] = None
    ) -> Dict[str, List[ExpenseRecord]]:
        """Expenses grouped by month key, newest month first"""

    @abstractmethod
    def add_expenses(
        self, owner_id: str, records: Iterable[ExpenseRecord], month_key: str
    ) -> None:
        """Append records to a month"""

    @abstractmethod
    def delete_expense(self, owner_id: str, month_key: str, index: int) -> bool:
        """Delete the record at `index` of the month listing"""

    @abstractmethod
    def clear_month(self, owner_id: str, month_key: str) -> None: ...

    @abstractmethod
    def clear_all(self, owner_id: str) -> None: ...

    @abstractmethod
    def list_incomes(self, owner_id: str) -> List[IncomeRecord]: ...

    @abstractmethod
    def add_income(self, owner_id: str, income: IncomeRecord) -> None:
        """Add a base income; ValueError when the owner already has that id"""

    @abstractmethod
    def update_income(self, owner_id: str, income_id: str, **changes) -> bool: ...

    @abstractmethod
    def delete_income(self, owner_id: str, income_id: str) -> None: ...

    @abstractmethod
    def clear_incomes(self, owner_id: str) -> None:
        """Remove base incomes and every monthly override"""

    @abstractmethod
    def list_income_overrides(self, owner_id: str) -> Dict[str, List[IncomeRecord]]: ...

    @abstractmethod
    def set_income_overrides(
        self, owner_id: str, month_key: str, incomes: Iterable[IncomeRecord]
    ) -> None: ...

    @abstractmethod
    def get_exchange_rate(self, owner_id: str) -> float: ...

    @abstractmethod
    def set_exchange_rate(self, owner_id: str, rate: float) -> None: ...

    def month_expenses(self, owner_id: str, month_key: str) -> List[ExpenseRecord]:
        return self.list_expenses(owner_id, month_key).get(month_key, [])

    def replace_month(
        self, owner_id: str, month_key: str, records: Iterable[ExpenseRecord]
    ) -> None:
        """Swap a month's records wholesale (used to undo an import)"""
        records = list(records)
        self.clear_month(owner_id, month_key)
        if records:
            self.add_expenses(owner_id, records, month_key)

    def get_income_overrides(
        self, owner_id: str, month_key: str
    ) -> Optional[List[IncomeRecord]]:
        return self.list_income_overrides(owner_id).get(month_key)


class SQLiteLedgerStore(LedgerStore):
    """Ledger backed by the SQLite schema in database.models"""

    EXPENSE_COLUMNS = (
        "month_key, date, description, payment_method, entity, installments_total, "
        "installment_current, amount_local, amount_foreign, responsible, category, paid"
    )

    def __init__(self, database: Database, initialize: bool = True):
        self.db = database
        if initialize:
            self.db.execute_script(SCHEMA)

    @staticmethod
    def _row_to_expense(row) -> ExpenseRecord:
        (_, day, description, payment_method, entity, total, current,
         amount_local, amount_foreign, responsible, category, paid) = row
        return ExpenseRecord(
            date=date.fromisoformat(day),
            description=description,
            payment_method=payment_method,
            entity=entity,
            installments_total=int(total),
            installment_current=int(current),
            amount_local=float(amount_local or 0.0),
            amount_foreign=float(amount_foreign) if amount_foreign is not None else None,
            responsible=responsible,
            category=category,
            paid=bool(paid),
        )

    def _insert_expense(self, owner_id: str, month_key: str, record: ExpenseRecord):
        record = _fixed(record)
        return (
            f"INSERT INTO expenses (owner_id, {self.EXPENSE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                owner_id,
                month_key,
                record.date.isoformat(),
                record.description,
                record.payment_method,
                record.entity,
                record.installments_total,
                record.installment_current,
                record.amount_local,
                record.amount_foreign,
                record.responsible,
                record.category,
                bool(record.paid),
            ),
        )

    def list_expenses(self, owner_id, month_key=None):
        if month_key is None:
            rows = self.db.fetch_all(
                f"SELECT {self.EXPENSE_COLUMNS} FROM expenses "
                "WHERE owner_id = ? ORDER BY month_key DESC, id",
                (owner_id,),
            )
        else:
            parse_month_key(month_key)
            rows = self.db.fetch_all(
                f"SELECT {self.EXPENSE_COLUMNS} FROM expenses "
                "WHERE owner_id = ? AND month_key = ? ORDER BY id",
                (owner_id, month_key),
            )

        grouped: Dict[str, List[ExpenseRecord]] = {}
        for row in rows:
            grouped.setdefault(row[0], []).append(self._row_to_expense(row))
        return grouped

    def add_expenses(self, owner_id, records, month_key):
        parse_month_key(month_key)
        self.db.write_many(
            self._insert_expense(owner_id, month_key, record) for record in records
        )

    def delete_expense(self, owner_id, month_key, index):
        parse_month_key(month_key)
        if index < 0:
            raise ValueError(f"Row index must be non-negative, got {index}")

        row = self.db.fetch_one(
            "SELECT id FROM expenses WHERE owner_id = ? AND month_key = ? "
            "ORDER BY id LIMIT 1 OFFSET ?",
            (owner_id, month_key, index),
        )
        if row is None:
            return False

        self.db.write_execute("DELETE FROM expenses WHERE id = ?", (row[0],))
        return True

    def clear_month(self, owner_id, month_key):
        parse_month_key(month_key)
        self.db.write_execute(
            "DELETE FROM expenses WHERE owner_id = ? AND month_key = ?",
            (owner_id, month_key),
        )

    def clear_all(self, owner_id):
        self.db.write_execute("DELETE FROM expenses WHERE owner_id = ?", (owner_id,))

    def replace_month(self, owner_id, month_key, records):
        parse_month_key(month_key)
        statements = [
            (
                "DELETE FROM expenses WHERE owner_id = ? AND month_key = ?",
                (owner_id, month_key),
            )
        ]
        statements.extend(
            self._insert_expense(owner_id, month_key, record) for record in records
        )
        self.db.write_many(statements)

    @staticmethod
    def _row_to_income(row) -> IncomeRecord:
        income_id, description, amount, currency, responsible, recurring = row
        return IncomeRecord(
            id=str(income_id),
            description=description,
            amount=float(amount),
            currency=currency,
            responsible=responsible,
            recurring=bool(recurring),
        )

    def list_incomes(self, owner_id):
        rows = self.db.fetch_all(
            "SELECT id, description, amount, currency, responsible, recurring "
            "FROM incomes WHERE owner_id = ? ORDER BY created_at, rowid",
            (owner_id,),
        )
        return [self._row_to_income(row) for row in rows]

    def add_income(self, owner_id, income):
        existing = self.db.fetch_one(
            "SELECT 1 FROM incomes WHERE owner_id = ? AND id = ?", (owner_id, income.id)
        )
        if existing:
            raise ValueError(f"Income {income.id!r} already exists")

        income = _fixed_income(income)
        self.db.write_execute(
            """
            INSERT INTO incomes (id, owner_id, description, amount, currency, responsible, recurring)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
            (
                income.id,
                owner_id,
                income.description,
                income.amount,
                income.currency,
                income.responsible,
                bool(income.recurring),
            ),
        )

    def update_income(self, owner_id, income_id, **changes):
        unknown = set(changes) - set(INCOME_FIELDS)
        if unknown:
            raise ValueError(f"Unknown income fields: {sorted(unknown)}")

        current = [i for i in self.list_incomes(owner_id) if i.id == income_id]
        if not current:
            return False

        updated = _fixed_income(replace(current[0], **changes))
        self.db.write_execute(
            """
            UPDATE incomes SET
                description = ?, amount = ?, currency = ?, responsible = ?, recurring = ?
            WHERE owner_id = ? AND id = ?
        """,
            (
                updated.description,
                updated.amount,
                updated.currency,
                updated.responsible,
                bool(updated.recurring),
                owner_id,
                income_id,
            ),
        )
        return True

    def delete_income(self, owner_id, income_id):
        self.db.write_execute(
            "DELETE FROM incomes WHERE owner_id = ? AND id = ?", (owner_id, income_id)
        )

    def clear_incomes(self, owner_id):
        self.db.write_many(
            [
                ("DELETE FROM incomes WHERE owner_id = ?", (owner_id,)),
                ("DELETE FROM income_overrides WHERE owner_id = ?", (owner_id,)),
            ]
        )

    def list_income_overrides(self, owner_id):
        rows = self.db.fetch_all(
            "SELECT month_key, income_id, description, amount, currency, responsible, recurring "
            "FROM income_overrides WHERE owner_id = ? ORDER BY month_key, id",
            (owner_id,),
        )
        overrides: Dict[str, List[IncomeRecord]] = {}
        for row in rows:
            overrides.setdefault(row[0], []).append(self._row_to_income(row[1:]))
        return overrides

    def set_income_overrides(self, owner_id, month_key, incomes):
        parse_month_key(month_key)
        statements = [
            (
                "DELETE FROM income_overrides WHERE owner_id = ? AND month_key = ?",
                (owner_id, month_key),
            )
        ]
        for income in incomes:
            income = _fixed_income(income)
            statements.append(
                (
                    """
                    INSERT INTO income_overrides
                    (owner_id, month_key, income_id, description, amount, currency, responsible, recurring)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        owner_id,
                        month_key,
                        income.id,
                        income.description,
                        income.amount,
                        income.currency,
                        income.responsible,
                        bool(income.recurring),
                    ),
                )
            )
        self.db.write_many(statements)

    def get_exchange_rate(self, owner_id):
        row = self.db.fetch_one(
            "SELECT value FROM settings WHERE owner_id = ? AND key = 'exchange_rate'",
            (owner_id,),
        )
        return float(row[0]) if row else DEFAULT_EXCHANGE_RATE

    def set_exchange_rate(self, owner_id, rate):
        rate = _check_rate(rate)
        self.db.write_execute(
            """
            INSERT INTO settings (owner_id, key, value, updated_at)
            VALUES (?, 'exchange_rate', ?, CURRENT_TIMESTAMP)
            ON CONFLICT (owner_id, key) DO UPDATE
            SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
        """,
            (owner_id, str(rate)),
        )


class LocalLedgerStore(LedgerStore):
    """
    Local-only ledger kept in memory.

    When `path` is given the whole state is mirrored to a JSON file after
    every write and reloaded on construction.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._expenses: Dict[str, Dict[str, List[ExpenseRecord]]] = {}
        self._incomes: Dict[str, List[IncomeRecord]] = {}
        self._overrides: Dict[str, Dict[str, List[IncomeRecord]]] = {}
        self._rates: Dict[str, float] = {}

        if path and os.path.exists(path):
            self._load()

    def _load(self):
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for owner_id, months in data.get("expenses", {}).items():
            self._expenses[owner_id] = {
                key: [ExpenseRecord.from_dict(d) for d in records]
                for key, records in months.items()
            }
        for owner_id, incomes in data.get("incomes", {}).items():
            self._incomes[owner_id] = [IncomeRecord.from_dict(d) for d in incomes]
        for owner_id, months in data.get("income_overrides", {}).items():
            self._overrides[owner_id] = {
                key: [IncomeRecord.from_dict(d) for d in incomes]
                for key, incomes in months.items()
            }
        self._rates = {k: float(v) for k, v in data.get("exchange_rates", {}).items()}

    def _save(self):
        if not self.path:
            return

        data = {
            "expenses": {
                owner_id: {
                    key: [r.to_dict() for r in records] for key, records in months.items()
                }
                for owner_id, months in self._expenses.items()
            },
            "incomes": {
                owner_id: [i.to_dict() for i in incomes]
                for owner_id, incomes in self._incomes.items()
            },
            "income_overrides": {
                owner_id: {
                    key: [i.to_dict() for i in incomes] for key, incomes in months.items()
                }
                for owner_id, months in self._overrides.items()
            },
            "exchange_rates": self._rates,
        }

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def list_expenses(self, owner_id, month_key=None):
        months = self._expenses.get(owner_id, {})
        if month_key is not None:
            parse_month_key(month_key)
            records = months.get(month_key)
            return {month_key: list(records)} if records else {}
        return {key: list(months[key]) for key in sorted(months, reverse=True)}

    def add_expenses(self, owner_id, records, month_key):
        parse_month_key(month_key)
        records = [_fixed(record) for record in records]
        if not records:
            return
        self._expenses.setdefault(owner_id, {}).setdefault(month_key, []).extend(records)
        self._save()

    def delete_expense(self, owner_id, month_key, index):
        parse_month_key(month_key)
        if index < 0:
            raise ValueError(f"Row index must be non-negative, got {index}")

        months = self._expenses.get(owner_id, {})
        records = months.get(month_key, [])
        if index >= len(records):
            return False

        del records[index]
        if not records:
            del months[month_key]
        self._save()
        return True

    def clear_month(self, owner_id, month_key):
        parse_month_key(month_key)
        self._expenses.get(owner_id, {}).pop(month_key, None)
        self._save()

    def clear_all(self, owner_id):
        self._expenses.pop(owner_id, None)
        self._save()

    def list_incomes(self, owner_id):
        return list(self._incomes.get(owner_id, []))

    def add_income(self, owner_id, income):
        incomes = self._incomes.setdefault(owner_id, [])
        if any(i.id == income.id for i in incomes):
            raise ValueError(f"Income {income.id!r} already exists")
        incomes.append(_fixed_income(income))
        self._save()

    def update_income(self, owner_id, income_id, **changes):
        unknown = set(changes) - set(INCOME_FIELDS)
        if unknown:
            raise ValueError(f"Unknown income fields: {sorted(unknown)}")

        incomes = self._incomes.get(owner_id, [])
        for position, income in enumerate(incomes):
            if income.id == income_id:
                incomes[position] = _fixed_income(replace(income, **changes))
                self._save()
                return True
        return False

    def delete_income(self, owner_id, income_id):
        incomes = self._incomes.get(owner_id, [])
        self._incomes[owner_id] = [i for i in incomes if i.id != income_id]
        self._save()

    def clear_incomes(self, owner_id):
        self._incomes.pop(owner_id, None)
        self._overrides.pop(owner_id, None)
        self._save()

    def list_income_overrides(self, owner_id):
        return {
            key: list(incomes)
            for key, incomes in sorted(self._overrides.get(owner_id, {}).items())
        }

    def set_income_overrides(self, owner_id, month_key, incomes):
        parse_month_key(month_key)
        self._overrides.setdefault(owner_id, {})[month_key] = [
            _fixed_income(i) for i in incomes
        ]
        self._save()

    def get_exchange_rate(self, owner_id):
        return self._rates.get(owner_id, DEFAULT_EXCHANGE_RATE)

    def set_exchange_rate(self, owner_id, rate):
        self._rates[owner_id] = _check_rate(rate)
        self._save()
