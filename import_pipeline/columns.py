"""
Header detection for expense spreadsheets
Maps loosely labeled header cells to the canonical expense fields
"""

from dataclasses import dataclass, fields
from typing import List

NOT_FOUND = -1

GENERIC_AMOUNT_HEADERS = ("monto", "importe", "valor", "gasto", "total")
FOREIGN_TOKENS = ("usd", "dolar")


@dataclass
class ColumnMap:
    """Column index per canonical field, NOT_FOUND when absent"""

    description: int = NOT_FOUND
    date: int = NOT_FOUND
    installments_total: int = NOT_FOUND
    installment_current: int = NOT_FOUND
    amount_local: int = NOT_FOUND
    amount_foreign: int = NOT_FOUND
    payment_method: int = NOT_FOUND
    entity: int = NOT_FOUND
    responsible: int = NOT_FOUND
    category: int = NOT_FOUND

    def found(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) != NOT_FOUND]

    def missing(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) == NOT_FOUND]


def _is_description(h: str) -> bool:
    return "descrip" in h or h in ("concepto", "detalle", "nombre")


def _is_date(h: str) -> bool:
    return "fecha" in h or h in ("date", "dia", "día")


def _is_installments_total(h: str) -> bool:
    return ("cuota" in h and "actual" not in h and "monto" not in h) or h == "cuotas"


def _is_installment_current(h: str) -> bool:
    return "cuota" in h and "actual" in h


def _is_amount_local(h: str) -> bool:
    return "ars" in h or h in (
        "pesos",
        "monto ars",
        "gasto ars",
        "importe ars",
        "valor ars",
        "monto_ars",
    )


def _is_amount_foreign(h: str) -> bool:
    return (
        "usd" in h
        or "dolar" in h
        or "dólar" in h
        or h in ("monto usd", "gasto usd", "importe usd", "monto_usd")
    )


def _is_payment_method(h: str) -> bool:
    return (
        "medio" in h
        or "tarjeta" in h
        or h in ("pago", "forma de pago", "medio_pago")
    )


def _is_entity(h: str) -> bool:
    return "entidad" in h or "banco" in h or h == "emisor"


def _is_responsible(h: str) -> bool:
    return "responsable" in h or "persona" in h or h in ("quien", "quién")


def _is_category(h: str) -> bool:
    return "categoria" in h or "categoría" in h or h in ("rubro", "tipo")


# Checked in this order for every header
FIELD_MATCHERS = (
    ("description", _is_description),
    ("date", _is_date),
    ("installments_total", _is_installments_total),
    ("installment_current", _is_installment_current),
    ("amount_local", _is_amount_local),
    ("amount_foreign", _is_amount_foreign),
    ("payment_method", _is_payment_method),
    ("entity", _is_entity),
    ("responsible", _is_responsible),
    ("category", _is_category),
)


def clean_header(header) -> str:
    if header is None or header != header:
        return ""
    return str(header).lower().strip()


def detect_columns(headers) -> ColumnMap:
    """
    Detect which column holds each canonical field

    Every match overwrites the previous one, so when two headers satisfy
    the same field the rightmost wins.

    Args:
        headers: Header cells from the first sheet row

    Returns:
        ColumnMap with NOT_FOUND for undetected fields
    """
    cleaned = [clean_header(h) for h in headers]
    column_map = ColumnMap()

    for index, h in enumerate(cleaned):
        for field_name, matches in FIELD_MATCHERS:
            if matches(h):
                setattr(column_map, field_name, index)

    if column_map.amount_local == NOT_FOUND:
        for index, h in enumerate(cleaned):
            if h in GENERIC_AMOUNT_HEADERS and not any(t in h for t in FOREIGN_TOKENS):
                column_map.amount_local = index

    return column_map
