"""
Synonym tables used to normalize free-text spreadsheet values

Keys are lower-cased, trimmed cell values. Every canonical value is also
its own synonym so normalizing twice changes nothing.
"""

from database.models import Entity, PaymentMethod, Responsible, enum_values


def _with_canonical(enum_cls, synonyms):
    table = {value.lower(): value for value in enum_values(enum_cls)}
    table.update(synonyms)
    return table


PAYMENT_METHOD_SYNONYMS = _with_canonical(
    PaymentMethod,
    {
        "mc": "Mastercard",
        "master": "Mastercard",
        "mastercard": "Mastercard",
        "visa": "Visa",
        "amex": "Amex",
        "american express": "Amex",
        "efectivo": "Cash",
        "cash": "Cash",
        "debito": "Cash",
        "débito": "Cash",
    },
)

ENTITY_SYNONYMS = _with_canonical(
    Entity,
    {
        "galicia mas": "Galicia Mas",
        "galicia más": "Galicia Mas",
        "galiciamas": "Galicia Mas",
        "galicia": "Galicia",
        "bbva": "Galicia",
        "bbva frances": "Galicia",
        "frances": "Galicia",
        "patagonia": "Patagonia",
        "banco patagonia": "Patagonia",
        "ciudad": "Ciudad",
        "banco ciudad": "Ciudad",
        "macro": "Macro",
        "banco macro": "Macro",
        "hipotecario": "Hipotecario",
        "banco hipotecario": "Hipotecario",
        "amex directa": "Amex directa",
        "amex": "Amex directa",
    },
)

RESPONSIBLE_SYNONYMS = _with_canonical(
    Responsible,
    {
        "persona 1": "Person A",
        "persona1": "Person A",
        "p1": "Person A",
        "1": "Person A",
        "persona 2": "Person B",
        "persona2": "Person B",
        "p2": "Person B",
        "2": "Person B",
        "compartido": "Shared",
        "ambos": "Shared",
        "todos": "Shared",
        "otro": "Shared",
    },
)

SYNONYMS = {
    "payment_method": PAYMENT_METHOD_SYNONYMS,
    "entity": ENTITY_SYNONYMS,
    "responsible": RESPONSIBLE_SYNONYMS,
}

ENUMERATIONS = {
    "payment_method": enum_values(PaymentMethod),
    "entity": enum_values(Entity),
    "responsible": enum_values(Responsible),
}

TRUE_WORDS = ("true", "1", "si", "sí", "yes", "x", "verdadero")
