from datetime import date, datetime

import pytest

from database.models import month_key, parse_month_key
from import_pipeline.parsers import (
    normalize_value,
    parse_boolean,
    parse_date,
    parse_int,
    parse_number,
)


def test_parse_date_from_spreadsheet_serial():
    # 45000 days in the 1900 system, 25569 of them before the Unix epoch
    assert parse_date(45000) == "15/03/2023"
    assert parse_date(45000.75) == "15/03/2023"


def test_parse_date_keeps_day_month_year_text():
    assert parse_date("15/01/2025") == "15/01/2025"


def test_parse_date_reformats_other_text():
    assert parse_date("2025-01-05") == "05/01/2025"
    assert parse_date("5-1-2025") == "05/01/2025"
    assert parse_date("January 15, 2025") == "15/01/2025"


def test_parse_date_from_datetime_cells():
    assert parse_date(datetime(2025, 2, 3, 10, 30)) == "03/02/2025"
    assert parse_date(date(2024, 12, 31)) == "31/12/2024"


def test_parse_date_returns_unparseable_text_unchanged():
    assert parse_date("sin fecha") == "sin fecha"


def test_parse_date_empty_values():
    assert parse_date(None) is None
    assert parse_date("") is None
    assert parse_date("   ") is None
    assert parse_date(float("nan")) is None


def test_parse_number_local_format():
    assert parse_number("$ 1.234,56") == 1234.56
    assert parse_number("15.000") == 15000.0
    assert parse_number("ARS 2.500") == 2500.0
    assert parse_number("US$ 12,5") == 12.5


def test_parse_number_passes_numbers_through():
    assert parse_number(15000) == 15000.0
    assert parse_number(0) == 0.0


def test_parse_number_missing_is_not_zero():
    assert parse_number(None) is None
    assert parse_number("") is None
    assert parse_number("n/a") is None
    assert parse_number("0") == 0.0


def test_parse_int_defaults_to_one():
    assert parse_int(None) == 1
    assert parse_int("") == 1
    assert parse_int("abc") == 1
    assert parse_int(0) == 1
    assert parse_int("12") == 12
    assert parse_int(3.0) == 3
    assert parse_int("3 de 12") == 3


def test_parse_boolean():
    assert parse_boolean("Sí")
    assert parse_boolean("x")
    assert parse_boolean(True)
    assert not parse_boolean("no")
    assert not parse_boolean(None)


def test_normalize_value_synonyms():
    assert normalize_value("mc", "payment_method") == (True, "Mastercard")
    assert normalize_value("  VISA ", "payment_method") == (True, "Visa")
    assert normalize_value("débito", "payment_method") == (True, "Cash")
    assert normalize_value("BBVA", "entity") == (True, "Galicia")
    assert normalize_value("p1", "responsible") == (True, "Person A")
    assert normalize_value(1, "responsible") == (True, "Person A")
    assert normalize_value("ambos", "responsible") == (True, "Shared")


def test_normalize_value_preserves_unknown_values():
    assert normalize_value("Naranja X", "entity") == (False, "Naranja X")
    assert normalize_value(None, "entity") == (False, "")


@pytest.mark.parametrize(
    "field, values",
    [
        ("payment_method", ["Mastercard", "Visa", "Amex", "Cash"]),
        ("entity", ["Galicia Mas", "Galicia", "Patagonia", "Amex directa"]),
        ("responsible", ["Person A", "Person B", "Shared"]),
    ],
)
def test_normalize_value_is_idempotent(field, values):
    for value in values:
        first = normalize_value(value, field)
        assert first == (True, value)
        assert normalize_value(first.value, field) == first


def test_month_keys():
    assert month_key(2025, 1) == "2025-01"
    assert parse_month_key("2025-12") == (2025, 12)
    with pytest.raises(ValueError):
        parse_month_key("2025-13")
    with pytest.raises(ValueError):
        parse_month_key("01/2025")
