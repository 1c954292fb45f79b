# utils/validators.py
from datetime import date


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)
    """
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def try_parse_int(x):
    """(ok, value) for whole numbers; '2.0' is accepted, '2.5' is not."""
    ok, val = try_parse_float(x)
    if not ok or val is None or val != int(val):
        return False, None
    return True, int(val)


def is_iso_date(text) -> bool:
    """True for 'YYYY-MM-DD' strings that name a real calendar day."""
    try:
        date.fromisoformat(str(text))
    except (TypeError, ValueError):
        return False
    return True
