"""
Row validation for imported expenses

Errors block a row from being committed; warnings are informational.
"""

from dataclasses import dataclass, field
from typing import List

from database.models import parse_date_text
from import_pipeline.constants import ENUMERATIONS

FIELD_LABELS = {
    "payment_method": "payment method",
    "entity": "entity",
    "responsible": "responsible",
}


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def is_valid_date(text) -> bool:
    """True when text is a real DD/MM/YYYY calendar date"""
    try:
        parse_date_text(text)
    except (TypeError, ValueError):
        return False
    return True


def validate_row(row) -> ValidationResult:
    """
    Check an ImportRow for blocking errors and unrecognized values

    A row is valid when it has a description, a parsed date, and a local
    or foreign amount (zero counts as present).
    """
    errors = []
    warnings = []

    if not row.description or not row.description.strip():
        errors.append("missing description")

    if not row.date:
        errors.append("missing date")
    elif not is_valid_date(row.date):
        errors.append(f'invalid date "{row.date}"')

    if row.amount_local is None and row.amount_foreign is None:
        errors.append("missing amount")

    for field_name, label in FIELD_LABELS.items():
        value = getattr(row, field_name)
        if value and value not in ENUMERATIONS[field_name]:
            warnings.append(f'unrecognized {label} "{value}"')

    for field_name, label in (("amount_local", "local"), ("amount_foreign", "foreign")):
        amount = getattr(row, field_name)
        if amount is not None and amount < 0:
            warnings.append(f"negative {label} amount {amount:g}")

    if row.installment_current > row.installments_total:
        warnings.append(
            f"installment {row.installment_current} is past the total of "
            f"{row.installments_total}"
        )

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
