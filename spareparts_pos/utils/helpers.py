# utils/helpers.py
from datetime import date
import logging
from typing import Union, Optional

from ..constants import MONEY_PLACES

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def round_money(v: float, places: int = MONEY_PLACES) -> float:
    """
    Round a money value to `places` decimals.

    Adds 0.0 so a negative zero never reaches the database or the UI.
    """
    return round(float(v), places) + 0.0


def fmt_money(
    v: NumberLike,
    places: int = MONEY_PLACES,
    *,
    currency: Optional[str] = None,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError.

    If `currency` is given it is prefixed, e.g. "USD 1,250.00".
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    text = f"{x:,.{places}f}"
    return f"{currency} {text}" if currency else text
