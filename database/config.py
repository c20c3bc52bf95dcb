"""
Application configuration

Values can be overridden through environment variables so the same code
serves a local single-user ledger and a shared deployment.
"""

import os

DB_PATH = os.getenv("LEDGER_DB_PATH", "data/ledger.db")

DEFAULT_OWNER = os.getenv("LEDGER_OWNER", "local")

DEFAULT_EXCHANGE_RATE = 1200.0

EXCHANGE_RATE_URL = os.getenv(
    "LEDGER_EXCHANGE_RATE_URL", "https://dolarapi.com/v1/dolares/oficial"
)

# Used when a committed row has no value for the field
FALLBACK_PAYMENT_METHOD = "Cash"
FALLBACK_ENTITY = "Galicia"
FALLBACK_RESPONSIBLE = "Shared"

ACCEPTED_EXTENSIONS = (".xlsx", ".xls")
