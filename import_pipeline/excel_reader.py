"""
Spreadsheet reader for expense imports
Reads the first sheet of an .xlsx/.xls file; row 0 holds the headers
"""

import io
import os
from typing import List, Optional, Tuple, Union

import pandas as pd

from database.config import ACCEPTED_EXTENSIONS
from import_pipeline.columns import detect_columns
from import_pipeline.parsers import is_blank
from import_pipeline.rows import ImportRow, parse_row

Source = Union[str, os.PathLike, bytes]


class SpreadsheetError(ValueError):
    """The file cannot be imported at all"""


def check_extension(filename: str):
    if not str(filename).lower().endswith(ACCEPTED_EXTENSIONS):
        raise SpreadsheetError(
            f"Only {' or '.join(ACCEPTED_EXTENSIONS)} files are accepted: {filename}"
        )


def load_sheet_rows(source: Source, filename: Optional[str] = None) -> List[list]:
    """
    Load every row of the first sheet as plain Python values

    Args:
        source: Path to the file or its raw bytes
        filename: Original file name, checked for an accepted extension

    Returns:
        List of rows, empty cells as None
    """
    if filename is None and not isinstance(source, bytes):
        filename = os.fspath(source)
    if filename is not None:
        check_extension(filename)

    data = io.BytesIO(source) if isinstance(source, bytes) else source

    try:
        frame = pd.read_excel(data, sheet_name=0, header=None, dtype=object)
    except Exception as e:
        raise SpreadsheetError(f"Could not read {filename or 'spreadsheet'}: {e}") from e

    return [
        [None if pd.isna(cell) else cell for cell in cells]
        for cells in frame.itertuples(index=False, name=None)
    ]


def read_sheet(
    source: Source, filename: Optional[str] = None
) -> Tuple[List[str], List[Tuple[int, list]]]:
    """
    Split the first sheet into headers and non-blank data rows

    Returns:
        (headers, [(line_number, cells), ...]) with 1-based sheet line numbers
    """
    rows = load_sheet_rows(source, filename)

    if len(rows) < 2:
        raise SpreadsheetError("The file is empty or only has headers")

    headers = ["" if is_blank(h) else str(h) for h in rows[0]]

    data_rows = [
        (position + 1, cells)
        for position, cells in enumerate(rows)
        if position > 0 and not all(is_blank(cell) for cell in cells)
    ]

    if not data_rows:
        raise SpreadsheetError("The file is empty or only has headers")

    return headers, data_rows


def parse_sheet(source: Source, filename: Optional[str] = None) -> List[ImportRow]:
    """Read, detect columns, and parse every data row of a spreadsheet"""
    headers, data_rows = read_sheet(source, filename)
    column_map = detect_columns(headers)
    return [parse_row(cells, column_map, line_number) for line_number, cells in data_rows]
