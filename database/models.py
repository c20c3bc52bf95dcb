"""
Database schema definitions and record types for the household ledger
"""

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

SCHEMA = """
-- Expense ledger, one row per imported or entered expense
CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    month_key TEXT NOT NULL,
    date DATE NOT NULL,
    description TEXT NOT NULL,
    payment_method TEXT NOT NULL,
    entity TEXT NOT NULL,
    installments_total INTEGER DEFAULT 1 CHECK(installments_total >= 1),
    installment_current INTEGER DEFAULT 1 CHECK(installment_current >= 1),
    amount_local NUMERIC(12, 2) DEFAULT 0,
    amount_foreign NUMERIC(12, 2),
    responsible TEXT NOT NULL,
    category TEXT,
    paid BOOLEAN DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_expenses_owner_month ON expenses(owner_id, month_key);

-- Base income sources
CREATE TABLE IF NOT EXISTS incomes (
    id TEXT NOT NULL,
    owner_id TEXT NOT NULL,
    description TEXT NOT NULL,
    amount NUMERIC(12, 2) NOT NULL,
    currency TEXT DEFAULT 'ARS' CHECK(currency IN ('ARS', 'USD')),
    responsible TEXT NOT NULL,
    recurring BOOLEAN DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (owner_id, id)
);

-- Month-specific income lists replacing the base list for that month
CREATE TABLE IF NOT EXISTS income_overrides (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    month_key TEXT NOT NULL,
    income_id TEXT NOT NULL,
    description TEXT NOT NULL,
    amount NUMERIC(12, 2) NOT NULL,
    currency TEXT DEFAULT 'ARS' CHECK(currency IN ('ARS', 'USD')),
    responsible TEXT NOT NULL,
    recurring BOOLEAN DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_income_overrides_owner_month ON income_overrides(owner_id, month_key);

-- Per-owner settings (exchange rate)
CREATE TABLE IF NOT EXISTS settings (
    owner_id TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (owner_id, key)
);
"""

DATE_FORMAT = "%d/%m/%Y"

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


class PaymentMethod(str, Enum):
    MASTERCARD = "Mastercard"
    VISA = "Visa"
    AMEX = "Amex"
    CASH = "Cash"


class Entity(str, Enum):
    GALICIA_MAS = "Galicia Mas"
    GALICIA = "Galicia"
    PATAGONIA = "Patagonia"
    CIUDAD = "Ciudad"
    MACRO = "Macro"
    HIPOTECARIO = "Hipotecario"
    AMEX_DIRECT = "Amex directa"


class Responsible(str, Enum):
    PERSON_A = "Person A"
    PERSON_B = "Person B"
    SHARED = "Shared"


class Currency(str, Enum):
    ARS = "ARS"
    USD = "USD"


def enum_values(enum_cls) -> Tuple[str, ...]:
    """Canonical string values of an enumeration, in declaration order"""
    return tuple(member.value for member in enum_cls)


def to_fixed_point(value: Optional[float]) -> Optional[float]:
    """Round an amount to the 2 fractional digits the ledger persists"""
    if value is None:
        return None
    quantized = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(quantized)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date_text(text: str) -> date:
    """Parse a DD/MM/YYYY string, raising ValueError if it is not a real date"""
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def month_key(year: int, month: int) -> str:
    """
    Build the canonical ledger period key

    Args:
        year: Four digit year
        month: 1-indexed month

    Returns:
        Key in YYYY-MM form
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"{year:04d}-{month:02d}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """Split a YYYY-MM key into (year, month)"""
    match = _MONTH_KEY_RE.match(key or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError(f"Invalid month key {key!r} (expected YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


@dataclass(frozen=True)
class ExpenseRecord:
    """
    A committed ledger entry.

    `installment_current` of `installments_total` encodes "payment N of M";
    a record with a single installment is a one-off expense. Unrecognized
    payment methods, entities and responsible parties are kept verbatim.
    """

    date: date
    description: str
    payment_method: str
    entity: str
    installments_total: int = 1
    installment_current: int = 1
    amount_local: float = 0.0
    amount_foreign: Optional[float] = None
    responsible: str = Responsible.SHARED.value
    category: Optional[str] = None
    paid: bool = False

    @property
    def is_installment(self) -> bool:
        return self.installments_total > 1

    @property
    def date_text(self) -> str:
        return format_date(self.date)

    @property
    def identity(self) -> Tuple:
        """Fields that make two entries the same expense"""
        return (
            self.description,
            self.date_text,
            to_fixed_point(self.amount_local or 0.0),
            self.entity,
        )

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["date"] = self.date_text
        return data

    @staticmethod
    def from_dict(d: Dict) -> "ExpenseRecord":
        return ExpenseRecord(
            date=parse_date_text(d["date"]),
            description=d["description"],
            payment_method=d["payment_method"],
            entity=d["entity"],
            installments_total=int(d.get("installments_total", 1)),
            installment_current=int(d.get("installment_current", 1)),
            amount_local=float(d.get("amount_local") or 0.0),
            amount_foreign=(
                float(d["amount_foreign"]) if d.get("amount_foreign") else None
            ),
            responsible=d.get("responsible", Responsible.SHARED.value),
            category=d.get("category"),
            paid=bool(d.get("paid", False)),
        )


@dataclass
class IncomeRecord:
    """A named income source, expressed in local or foreign currency"""

    id: str
    description: str
    amount: float
    currency: str = Currency.ARS.value
    responsible: str = Responsible.SHARED.value
    recurring: bool = True

    def to_dict(self) -> Dict:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict) -> "IncomeRecord":
        return IncomeRecord(
            id=str(d["id"]),
            description=d["description"],
            amount=float(d["amount"]),
            currency=d.get("currency", Currency.ARS.value),
            responsible=d.get("responsible", Responsible.SHARED.value),
            recurring=bool(d.get("recurring", True)),
        )
