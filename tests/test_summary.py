from datetime import date

import pytest

from conftest import make_record
from database.models import IncomeRecord
from projections.balance import incomes_for_month, month_balance, total_income
from projections.summary import (
    breakdown,
    expenses_by_day,
    filter_options,
    financed_total,
    installment_amount,
    installment_overview,
    month_totals,
    search_expenses,
    to_local,
)

RATE = 1000.0


def test_month_totals_split_by_currency():
    records = [
        make_record(amount_local=15000.0),
        make_record(amount_local=5000.0),
        make_record(amount_local=0.0, amount_foreign=20.0),
    ]

    totals = month_totals(records, RATE)

    assert totals.total_local == 20000.0
    assert totals.total_foreign == 20.0
    assert totals.count_local == 2
    assert totals.count_foreign == 1
    assert totals.combined == 40000.0


def test_breakdown_by_payment_method():
    records = [
        make_record(payment_method="Visa", amount_local=600.0),
        make_record(payment_method="Cash", amount_local=300.0),
        make_record(payment_method="Visa", amount_local=100.0),
    ]

    result = breakdown(records, "payment_method")

    assert result == [
        {"name": "Visa", "amount": 700.0, "percentage": 70},
        {"name": "Cash", "amount": 300.0, "percentage": 30},
    ]


def test_breakdown_top_and_empty():
    records = [make_record(entity=name, amount_local=100.0) for name in "ABCDEFG"]

    assert len(breakdown(records, "entity", top=3)) == 3
    assert breakdown([], "entity") == []


def test_installment_overview():
    records = [
        make_record(installments_total=12, installment_current=4),
        make_record(installments_total=3, installment_current=3),
        make_record(),
    ]

    overview = installment_overview(records, 2025, 1)

    assert overview.count == 2
    assert overview.months_remaining == 8
    assert overview.last_installment_month == date(2025, 9, 1)


def test_incomes_for_month_prefers_overrides():
    salary = IncomeRecord(id="salary", description="Salary", amount=100.0)
    bonus = IncomeRecord(id="bonus", description="Bonus", amount=20.0)
    overrides = {"2025-02": [bonus]}

    assert incomes_for_month([salary], overrides, "2025-01") == [salary]
    assert incomes_for_month([salary], overrides, "2025-02") == [bonus]


def test_total_income_converts_foreign():
    incomes = [
        IncomeRecord(id="salary", description="Salary", amount=500000.0),
        IncomeRecord(id="remote", description="Remote", amount=300.0, currency="USD"),
    ]

    assert total_income(incomes, RATE) == 800000.0


def test_month_balance():
    incomes = [IncomeRecord(id="salary", description="Salary", amount=300000.0)]
    records = [
        make_record(amount_local=100000.0),
        make_record(amount_local=0.0, amount_foreign=50.0),
    ]

    balance = month_balance(incomes, records, RATE)

    assert balance.total_expenses == 150000.0
    assert balance.balance == 150000.0
    assert balance.savings_rate == pytest.approx(50.0)


def test_month_balance_without_income():
    balance = month_balance([], [make_record(amount_local=100.0)], RATE)

    assert balance.balance == -100.0
    assert balance.savings_rate == 0.0


def test_expenses_by_day():
    records = [
        make_record(date=date(2025, 1, 5), amount_local=1000.0),
        make_record(date=date(2025, 1, 5), amount_local=0.0, amount_foreign=2.0),
        make_record(date=date(2025, 1, 20), amount_local=300.0),
    ]

    days = expenses_by_day(records, RATE)

    assert sorted(days) == [5, 20]
    assert days[5].amount == 3000.0
    assert days[5].count == 2
    assert days[20].amount == 300.0
    assert days[20].count == 1
    assert expenses_by_day([], RATE) == {}


def explorer_data():
    return {
        "2025-02": [
            make_record(description="Supermercado", date=date(2025, 2, 3), payment_method="Visa"),
            make_record(description="Nafta", date=date(2025, 2, 10), payment_method="Cash",
                        responsible="Person A"),
        ],
        "2025-01": [
            make_record(description="Super chino", date=date(2025, 1, 28), payment_method="Cash"),
            make_record(description="Netflix", date=date(2025, 1, 15)),
        ],
    }


def test_search_expenses_sorted_newest_first():
    entries = search_expenses(explorer_data())

    assert [e.record.description for e in entries] == [
        "Nafta",
        "Supermercado",
        "Super chino",
        "Netflix",
    ]
    assert entries[0].entry_id == "2025-02-1"


def test_search_expenses_filters():
    data = explorer_data()

    assert [e.record.description for e in search_expenses(data, query="SUPER")] == [
        "Supermercado",
        "Super chino",
    ]
    assert [
        e.record.description
        for e in search_expenses(data, query="super", payment_method="Cash")
    ] == ["Super chino"]
    assert [e.record.description for e in search_expenses(data, responsible="Person A")] == [
        "Nafta"
    ]
    assert search_expenses(data, query="alquiler") == []


def test_filter_options():
    assert filter_options(explorer_data(), "payment_method") == ["Visa", "Cash"]


def test_installment_calculator():
    assert installment_amount(120000.0, 12) == 10000.0
    assert installment_amount(100000.0, 10, interest_rate=20.0) == pytest.approx(12000.0)
    assert financed_total(100000.0, 20.0) == pytest.approx(120000.0)
    with pytest.raises(ValueError):
        installment_amount(1000.0, 0)


def test_to_local():
    assert to_local(100.0, 1200.0) == 120000.0
