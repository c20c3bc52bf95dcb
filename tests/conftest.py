from datetime import date

import pandas as pd
import pytest

from database.db import Database
from database.models import ExpenseRecord
from database.store import LocalLedgerStore, SQLiteLedgerStore


def make_record(**overrides):
    values = dict(
        date=date(2025, 1, 15),
        description="Netflix",
        payment_method="Visa",
        entity="Galicia",
        installments_total=1,
        installment_current=1,
        amount_local=15000.0,
        amount_foreign=None,
        responsible="Shared",
    )
    values.update(overrides)
    return ExpenseRecord(**values)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sqlite_store(tmp_path):
    db = Database(str(tmp_path / "ledger.db"))
    yield SQLiteLedgerStore(db)
    db.close()


@pytest.fixture(params=["local", "sqlite"])
def store(request, tmp_path):
    if request.param == "local":
        yield LocalLedgerStore()
    else:
        db = Database(str(tmp_path / "ledger.db"))
        yield SQLiteLedgerStore(db)
        db.close()


@pytest.fixture
def write_xlsx(tmp_path):
    """Write headers + rows to an .xlsx file and return its path"""

    def _write(headers, rows, name="expenses.xlsx"):
        path = tmp_path / name
        pd.DataFrame(rows, columns=headers).to_excel(path, index=False)
        return str(path)

    return _write
