"""
Expense import orchestrator
Handles the complete import workflow: Spreadsheet → Parse → Validate → Dedupe → Review → Commit
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from database.config import (
    FALLBACK_ENTITY,
    FALLBACK_PAYMENT_METHOD,
    FALLBACK_RESPONSIBLE,
)
from database.models import ExpenseRecord, parse_date_text, parse_month_key
from database.store import LedgerStore
from import_pipeline.duplicates import check_duplicates
from import_pipeline.excel_reader import Source, parse_sheet
from import_pipeline.rows import ImportRow


class NothingToImportError(ValueError):
    """No row is eligible for commit after filtering"""


@dataclass
class ImportSnapshot:
    """A month's records as they were right before an import"""

    month_key: str
    previous_records: List[ExpenseRecord]
    imported_count: int


@dataclass
class ImportOutcome:
    month_key: str
    imported: int
    skipped_invalid: int
    skipped_duplicates: int
    records: List[ExpenseRecord] = field(default_factory=list)


def select_rows(rows: List[ImportRow], include_duplicates: bool = True) -> List[ImportRow]:
    """Rows eligible for commit: valid ones, optionally without duplicates"""
    return [
        row
        for row in rows
        if row.validation.is_valid and (include_duplicates or not row.is_duplicate)
    ]


def row_to_expense(row: ImportRow) -> ExpenseRecord:
    """Convert a validated row, filling missing enumerations with fallbacks"""
    return ExpenseRecord(
        date=parse_date_text(row.date),
        description=row.description,
        payment_method=row.payment_method or FALLBACK_PAYMENT_METHOD,
        entity=row.entity or FALLBACK_ENTITY,
        installments_total=row.installments_total,
        installment_current=row.installment_current,
        amount_local=row.amount_local or 0.0,
        amount_foreign=row.amount_foreign or None,
        responsible=row.responsible or FALLBACK_RESPONSIBLE,
        category=row.category,
        paid=False,
    )


class ExpenseImporter:
    """Orchestrate the complete import workflow for one owner"""

    def __init__(self, store: LedgerStore, owner_id: str):
        self.store = store
        self.owner_id = owner_id
        self.rows: List[ImportRow] = []
        self.duplicates: List[ImportRow] = []
        self.month_key: Optional[str] = None
        self.last_import: Optional[ImportSnapshot] = None

    def load_file(self, source: Source, filename: Optional[str] = None) -> List[ImportRow]:
        """
        Step 1: Read and parse the spreadsheet

        Args:
            source: Path to the file or its raw bytes
            filename: Original file name when passing bytes

        Returns:
            Parsed rows with validation results
        """
        print("=" * 60)
        print("STEP 1: READ & PARSE SPREADSHEET")
        print("=" * 60)

        self.rows = parse_sheet(source, filename)
        self.duplicates = []

        valid = sum(1 for row in self.rows if row.is_valid)
        print(f"   ✅ Parsed rows: {len(self.rows)}")
        print(f"   ✅ Valid: {valid}")
        if len(self.rows) - valid:
            print(f"   ❌ Invalid: {len(self.rows) - valid}")

        return self.rows

    def check_duplicates(self, month_key: str) -> List[ImportRow]:
        """
        Step 2: Flag rows already committed to the target month

        Returns:
            Rows flagged as duplicates
        """
        if not self.rows:
            raise ValueError("No parsed rows. Run load_file first.")

        parse_month_key(month_key)

        print("\n" + "=" * 60)
        print("STEP 2: CHECK FOR DUPLICATES")
        print("=" * 60)

        for row in self.rows:
            row.is_duplicate = False

        existing = self.store.month_expenses(self.owner_id, month_key)
        self.duplicates = check_duplicates(self.rows, existing)
        self.month_key = month_key

        print(f"   Existing records in {month_key}: {len(existing)}")
        print(f"   ⏭️  Duplicates: {len(self.duplicates)}")

        return self.duplicates

    def get_preview_summary(self) -> Dict:
        """Get summary of the parsed rows awaiting confirmation"""
        if not self.rows:
            return {}

        valid = [row for row in self.rows if row.is_valid]
        return {
            "month_key": self.month_key,
            "total": len(self.rows),
            "valid": len(valid),
            "invalid": len(self.rows) - len(valid),
            "duplicates": sum(1 for row in self.rows if row.is_duplicate),
            "with_warnings": sum(1 for row in self.rows if row.validation.warnings),
            "installments": sum(1 for row in valid if row.installments_total > 1),
            "total_local": sum(row.amount_local or 0.0 for row in valid),
            "total_foreign": sum(row.amount_foreign or 0.0 for row in valid),
        }

    def commit(
        self,
        rows: Optional[List[ImportRow]] = None,
        month_key: Optional[str] = None,
        include_duplicates: bool = True,
    ) -> ImportOutcome:
        """
        Step 3: Commit eligible rows to the month

        Args:
            rows: Rows to commit (uses the loaded rows if None)
            month_key: Target month (uses the checked month if None); duplicates
                are detected again when it is not the checked month
            include_duplicates: Whether duplicate rows are committed too

        Returns:
            ImportOutcome with counts and the committed records
        """
        rows = self.rows if rows is None else rows
        month_key = month_key or self.month_key
        if month_key is None:
            raise ValueError("No target month. Pass month_key or run check_duplicates.")
        parse_month_key(month_key)

        print("\n" + "=" * 60)
        print("STEP 3: COMMIT TO LEDGER")
        print("=" * 60)

        if month_key != self.month_key:
            # Flags from check_duplicates refer to another month
            for row in rows:
                row.is_duplicate = False
            check_duplicates(rows, self.store.month_expenses(self.owner_id, month_key))

        eligible = select_rows(rows, include_duplicates)
        if not eligible:
            print("   ❌ No valid rows to import")
            raise NothingToImportError("No valid rows to import")

        records = [row_to_expense(row) for row in eligible]

        previous = self.store.month_expenses(self.owner_id, month_key)
        self.store.add_expenses(self.owner_id, records, month_key)
        self.last_import = ImportSnapshot(month_key, previous, len(records))

        outcome = ImportOutcome(
            month_key=month_key,
            imported=len(records),
            skipped_invalid=sum(1 for row in rows if not row.is_valid),
            skipped_duplicates=(
                0
                if include_duplicates
                else sum(1 for row in rows if row.is_valid and row.is_duplicate)
            ),
            records=records,
        )

        print(f"   ✅ Imported: {outcome.imported}")
        if outcome.skipped_invalid:
            print(f"   ⏭️  Skipped invalid: {outcome.skipped_invalid}")
        if outcome.skipped_duplicates:
            print(f"   ⏭️  Skipped duplicates: {outcome.skipped_duplicates}")

        self.rows = []
        self.duplicates = []

        return outcome

    def undo_last_import(self) -> bool:
        """
        Restore the month exactly as it was before the last commit

        Returns:
            False when there is nothing to undo
        """
        if self.last_import is None:
            return False

        snapshot = self.last_import
        self.store.replace_month(
            self.owner_id, snapshot.month_key, snapshot.previous_records
        )
        self.last_import = None

        print(
            f"↩️  Undid import of {snapshot.imported_count} record(s) in {snapshot.month_key}"
        )
        return True

    def cancel(self):
        """Discard parsed rows without committing"""
        self.rows = []
        self.duplicates = []
        self.month_key = None

    def run_full_import(
        self,
        source: Source,
        month_key: str,
        filename: Optional[str] = None,
        include_duplicates: bool = True,
        auto_confirm: bool = False,
    ) -> Dict:
        """
        Run the complete import workflow

        Args:
            source: Path to the spreadsheet or its raw bytes
            month_key: Target month (YYYY-MM)
            filename: Original file name when passing bytes
            include_duplicates: Whether duplicate rows are committed too
            auto_confirm: If True, skip confirmation and import automatically

        Returns:
            Dict with import summary
        """
        self.load_file(source, filename)
        self.check_duplicates(month_key)

        preview = self.get_preview_summary()
        print("\n" + "=" * 60)
        print("📋 IMPORT PREVIEW")
        print("=" * 60)
        print(f"   Target month: {preview['month_key']}")
        print(f"   Rows: {preview['total']}")
        print(f"   Valid: {preview['valid']}")
        print(f"   Invalid: {preview['invalid']}")
        print(f"   Duplicates: {preview['duplicates']}")
        print(f"   With warnings: {preview['with_warnings']}")
        print(f"   In installments: {preview['installments']}")
        print(f"   Total local: ${preview['total_local']:,.2f}")
        print(f"   Total foreign: US${preview['total_foreign']:,.2f}")

        for row in self.rows:
            for error in row.validation.errors:
                print(f"   ❌ Line {row.line_number}: {error}")
            for warning in row.validation.warnings:
                print(f"   ⚠️  Line {row.line_number}: {warning}")

        if not auto_confirm:
            print("\n" + "=" * 60)
            response = input("Proceed with import? (yes/no): ").strip().lower()
            if response != "yes":
                print("❌ Import cancelled")
                self.cancel()
                return {"imported": 0, "skipped": 0, "cancelled": True}

        outcome = self.commit(month_key=month_key, include_duplicates=include_duplicates)

        print("\n" + "=" * 60)
        print("✅ IMPORT COMPLETE!")
        print("=" * 60)

        return {
            "imported": outcome.imported,
            "skipped": outcome.skipped_invalid + outcome.skipped_duplicates,
            "cancelled": False,
        }


if __name__ == "__main__":
    import sys

    from database.config import DB_PATH, DEFAULT_OWNER
    from database.db import Database
    from database.store import SQLiteLedgerStore

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    flags = {a for a in sys.argv[1:] if a.startswith("--")}

    if len(args) != 2:
        print(
            "Usage: python -m import_pipeline.import_expenses <file.xlsx> <YYYY-MM> "
            "[--exclude-duplicates] [--yes]"
        )
        sys.exit(1)

    importer = ExpenseImporter(SQLiteLedgerStore(Database(DB_PATH)), DEFAULT_OWNER)
    try:
        result = importer.run_full_import(
            args[0],
            args[1],
            include_duplicates="--exclude-duplicates" not in flags,
            auto_confirm="--yes" in flags,
        )
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print("\n📊 Final Summary:")
    print(f"   Imported: {result['imported']}")
    print(f"   Skipped: {result['skipped']}")
