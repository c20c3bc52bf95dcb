"""
Duplicate detection against already committed expenses
"""

from typing import Iterable, List

from database.config import FALLBACK_ENTITY
from database.models import ExpenseRecord, to_fixed_point
from import_pipeline.rows import ImportRow


def row_identity(row: ImportRow) -> tuple:
    """
    Identity of a row as it would be stored once committed

    An empty entity is committed as FALLBACK_ENTITY, so it is compared as one.
    """
    return (
        row.description,
        row.date,
        to_fixed_point(row.amount_local or 0.0),
        row.entity or FALLBACK_ENTITY,
    )


def check_duplicates(
    new_rows: Iterable[ImportRow], existing: Iterable[ExpenseRecord]
) -> List[ImportRow]:
    """
    Flag rows that match a committed record

    A row is a duplicate when description, date, local amount and entity
    all equal those of some existing record. Matching rows get
    `is_duplicate = True`.

    Args:
        new_rows: Parsed rows about to be imported
        existing: Records already committed for the target month

    Returns:
        The rows flagged as duplicates, in input order
    """
    existing = list(existing)
    duplicates = []

    for row in new_rows:
        identity = row_identity(row)
        for record in existing:
            if record.identity == identity:
                row.is_duplicate = True
                duplicates.append(row)
                break

    return duplicates
