from datetime import date

from conftest import make_record
from projections.debts import (
    NO_ENTITY,
    build_debt_items,
    build_debt_report,
    by_entity,
    by_payment_method,
    monthly_amount,
    projection_frame,
    upcoming_releases,
)

RATE = 1000.0


def installment(description, total, current, amount=1000.0, **overrides):
    return make_record(
        description=description,
        installments_total=total,
        installment_current=current,
        amount_local=amount,
        **overrides,
    )


def test_single_installment_schedule():
    record = installment("TV", total=3, current=1, amount=1000.0)

    report = build_debt_report([record], 2025, 1, RATE)

    assert len(report.items) == 1
    assert report.items[0].remaining_installments == 2
    assert [p.month_offset for p in report.projection] == [1, 2]
    assert [p.month_start for p in report.projection] == [date(2025, 2, 1), date(2025, 3, 1)]
    assert report.projection[0].final_payment_items == []
    assert [i.record for i in report.projection[1].final_payment_items] == [record]
    assert report.projection[1].release_month == date(2025, 4, 1)
    assert report.stats.freedom_date == date(2025, 4, 1)
    assert report.stats.months_until_freedom == 3
    assert report.stats.total_pending == 2000.0
    assert report.stats.total_monthly == 1000.0


def test_single_payment_expenses_are_not_debt():
    report = build_debt_report([make_record()], 2025, 1, RATE)

    assert report.items == []
    assert report.projection == []
    assert report.stats.count == 0
    assert report.stats.freedom_date is None
    assert report.stats.months_until_freedom == 0


def test_last_installment_excluded_from_projection():
    finished = installment("Phone", total=6, current=6)
    pending = installment("Sofa", total=4, current=2)

    report = build_debt_report([finished, pending], 2025, 1, RATE)

    assert report.stats.count == 2
    for month in report.projection:
        assert finished not in [item.record for item in month.active_items]
    assert report.stats.max_remaining == 2


def test_current_past_total_clamps_to_zero():
    items = build_debt_items([installment("Odd", total=3, current=5)], RATE)
    assert items[0].remaining_installments == 0


def test_projection_is_monotonic_and_complete():
    records = [
        installment("A", total=12, current=3, amount=500.0),
        installment("B", total=3, current=1, amount=2500.0),
        installment("C", total=6, current=5, amount=800.0),
        installment("D", total=3, current=1, amount=100.0),
    ]

    report = build_debt_report(records, 2024, 11, RATE)
    totals = [p.monthly_total for p in report.projection]

    assert all(later <= earlier for earlier, later in zip(totals, totals[1:]))

    finals = [item.record for p in report.projection for item in p.final_payment_items]
    assert sorted(r.description for r in finals) == ["A", "B", "C", "D"]
    assert len(report.projection) == 9
    assert report.stats.freedom_date == date(2025, 9, 1)


def test_upcoming_releases():
    records = [
        installment("A", total=5, current=1),
        installment("B", total=3, current=1),
        installment("C", total=2, current=1),
    ]
    report = build_debt_report(records, 2025, 1, RATE)

    releases = upcoming_releases(report.projection, limit=2)

    assert [p.month_offset for p in releases] == [1, 2]
    assert releases[0].label == "February 2025"
    assert releases[0].short_label == "Feb '25"
    assert releases[0].release_label == "March 2025"


def test_foreign_amount_converted_for_monthly_payment():
    record = installment("Laptop", total=4, current=1, amount=0.0, amount_foreign=50.0)

    assert monthly_amount(record, RATE) == 50_000.0
    assert monthly_amount(make_record(amount_local=0.0), RATE) == 0.0


def test_grouping_sorted_by_pending_total():
    items = build_debt_items(
        [
            installment("A", total=3, current=1, amount=100.0, entity="Galicia"),
            installment("B", total=10, current=1, amount=100.0, entity="Macro"),
            installment("C", total=3, current=2, amount=100.0, entity="Galicia"),
            installment("D", total=2, current=1, amount=50.0, entity="", payment_method=""),
        ],
        RATE,
    )

    groups = by_entity(items)

    assert [g.name for g in groups] == ["Macro", "Galicia", NO_ENTITY]
    galicia = groups[1]
    assert galicia.count == 2
    assert galicia.total_monthly == 200.0
    assert galicia.total_pending == 300.0
    assert galicia.max_remaining == 2

    methods = by_payment_method(items)
    assert [g.name for g in methods] == ["Visa", "No payment method"]


def test_grouping_ties_keep_first_seen_order():
    items = build_debt_items(
        [
            installment("A", total=2, current=1, entity="Patagonia"),
            installment("B", total=2, current=1, entity="Ciudad"),
        ],
        RATE,
    )

    assert [g.name for g in by_entity(items)] == ["Patagonia", "Ciudad"]


def test_projection_frame():
    report = build_debt_report([installment("TV", total=3, current=1)], 2025, 1, RATE)

    frame = projection_frame(report)

    assert list(frame["MONTH_OFFSET"]) == [1, 2]
    assert list(frame["MONTHLY_TOTAL"]) == [1000.0, 1000.0]
    assert list(frame["ENDING"]) == [0, 1]
    assert frame["RELEASE_MONTH"].iloc[1] == "April 2025"
    assert frame["RELEASE_MONTH"].isna().tolist() == [True, False]


def test_projection_frame_empty():
    frame = projection_frame(build_debt_report([], 2025, 1, RATE))
    assert frame.empty
    assert "MONTH" in frame.columns
