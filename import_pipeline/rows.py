"""
Import rows: one spreadsheet line parsed into expense fields, before commit
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from import_pipeline.columns import NOT_FOUND, ColumnMap
from import_pipeline.parsers import (
    normalize_value,
    parse_date,
    parse_int,
    parse_number,
    parse_text,
)
from import_pipeline.validation import ValidationResult, validate_row


@dataclass
class ImportRow:
    """
    A parsed spreadsheet line.

    Dates are DD/MM/YYYY strings when parsing succeeded and the raw text
    otherwise. Amounts are None when the cell was empty or unreadable.
    """

    description: str = ""
    date: Optional[str] = None
    installments_total: int = 1
    installment_current: int = 1
    amount_local: Optional[float] = None
    amount_foreign: Optional[float] = None
    payment_method: str = ""
    entity: str = ""
    responsible: str = ""
    category: Optional[str] = None
    validation: ValidationResult = field(default_factory=ValidationResult)
    is_duplicate: bool = False
    line_number: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def parse_row(
    raw_row: Sequence, column_map: ColumnMap, line_number: Optional[int] = None
) -> ImportRow:
    """
    Parse and validate one data row

    Args:
        raw_row: Cell values of the line
        column_map: Result of detect_columns for the sheet headers
        line_number: 1-based position in the sheet, for reporting

    Returns:
        ImportRow with its validation result filled in
    """

    def get_value(index: int):
        if index == NOT_FOUND or index >= len(raw_row):
            return None
        return raw_row[index]

    row = ImportRow(
        description=parse_text(get_value(column_map.description)),
        date=parse_date(get_value(column_map.date)),
        installments_total=parse_int(get_value(column_map.installments_total)),
        installment_current=parse_int(get_value(column_map.installment_current)),
        amount_local=parse_number(get_value(column_map.amount_local)),
        amount_foreign=parse_number(get_value(column_map.amount_foreign)),
        payment_method=normalize_value(get_value(column_map.payment_method), "payment_method").value,
        entity=normalize_value(get_value(column_map.entity), "entity").value,
        responsible=normalize_value(get_value(column_map.responsible), "responsible").value,
        category=parse_text(get_value(column_map.category)) or None,
        line_number=line_number,
    )

    row.validation = validate_row(row)

    return row
