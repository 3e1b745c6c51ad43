"""
Human-readable invoice numbers.

Numbers look like ``INV-20260115-4821``. The four-digit suffix is random,
so two invoices issued the same day collide with probability 1/9000. This
module does not check uniqueness; the store holds a unique constraint and
the dispatcher retries with a fresh number on conflict.
"""

import random
import re
from datetime import UTC, date, datetime

SUFFIX_MIN = 1000
SUFFIX_MAX = 9999

INVOICE_NUMBER_PATTERN = re.compile(r"^(?P<prefix>[A-Z]+)-(?P<date>\d{8})-(?P<suffix>\d{4})$")


def build_invoice_number(
    today: date | None = None,
    rng: random.Random | None = None,
    prefix: str = "INV",
) -> str:
    """Build ``<prefix>-YYYYMMDD-####`` for the given (default: current UTC) date."""
    today = today or datetime.now(UTC).date()
    suffix = (rng or random).randint(SUFFIX_MIN, SUFFIX_MAX)
    return f"{prefix}-{today.strftime('%Y%m%d')}-{suffix}"
