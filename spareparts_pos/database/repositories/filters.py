# database/repositories/filters.py
"""
Filter-to-predicate builder for list screens.

Listing methods describe their filters as small predicate objects instead
of concatenating SQL by hand. `Where` drops predicates whose value is
empty (None / "" / empty sequence), so callers can pass raw form values
straight through, then renders the rest as one parameterized conjunction.

    where = Where(
        DateRange("s.sale_date", date_from, date_to),
        Eq("s.customer_id", customer_id),
        Search(("s.invoice_number", "c.name"), text),
    )
    sql, params = where.sql(), where.params()
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence


def _empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def like_pattern(text: str) -> str:
    """Substring pattern for `LIKE ? ESCAPE '\\'`; `%` and `_` in `text` match literally."""
    escaped = text.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class Predicate:
    """One WHERE fragment with its parameters; inactive predicates render nothing."""

    def active(self) -> bool:
        raise NotImplementedError

    def render(self) -> tuple[str, list]:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    column: str
    value: Any

    def active(self) -> bool:
        return not _empty(self.value)

    def render(self) -> tuple[str, list]:
        return f"{self.column} = ?", [self.value]


@dataclass(frozen=True)
class In(Predicate):
    column: str
    values: Sequence[Any]

    def active(self) -> bool:
        return not _empty(self.values)

    def render(self) -> tuple[str, list]:
        vals = list(self.values)
        return f"{self.column} IN ({', '.join('?' for _ in vals)})", vals


@dataclass(frozen=True)
class DateRange(Predicate):
    """Inclusive on both ends; either bound may be omitted."""
    column: str
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    def active(self) -> bool:
        return not (_empty(self.date_from) and _empty(self.date_to))

    def render(self) -> tuple[str, list]:
        if not _empty(self.date_from) and not _empty(self.date_to):
            return f"DATE({self.column}) BETWEEN DATE(?) AND DATE(?)", [self.date_from, self.date_to]
        if not _empty(self.date_from):
            return f"DATE({self.column}) >= DATE(?)", [self.date_from]
        return f"DATE({self.column}) <= DATE(?)", [self.date_to]


@dataclass(frozen=True)
class Search(Predicate):
    """Case-insensitive substring match over any of `columns`."""
    columns: Sequence[str]
    text: Optional[str]

    def active(self) -> bool:
        return not _empty(self.text) and bool(self.columns)

    def render(self) -> tuple[str, list]:
        like = like_pattern(self.text)
        parts = [f"{c} LIKE ? ESCAPE '\\'" for c in self.columns]
        return "(" + " OR ".join(parts) + ")", [like] * len(parts)


@dataclass(frozen=True)
class Raw(Predicate):
    """Fixed fragment, e.g. 'i.quantity = 0'. Active unless `when` is False."""
    sql: str
    args: Sequence[Any] = ()
    when: bool = True

    def active(self) -> bool:
        return bool(self.when)

    def render(self) -> tuple[str, list]:
        return self.sql, list(self.args)


class Where:
    def __init__(self, *predicates: Predicate):
        self._predicates = [p for p in predicates if p is not None]

    def add(self, predicate: Predicate) -> "Where":
        self._predicates.append(predicate)
        return self

    def _rendered(self) -> list[tuple[str, list]]:
        return [p.render() for p in self._predicates if p.active()]

    def sql(self) -> str:
        """' WHERE a AND b' (leading space) or '' when nothing is active."""
        parts = [frag for frag, _ in self._rendered()]
        return (" WHERE " + " AND ".join(parts)) if parts else ""

    def params(self) -> list:
        out: list = []
        for _, args in self._rendered():
            out.extend(args)
        return out


@dataclass(frozen=True)
class PageResult:
    total: int
    page: int
    limit: int
    data: list

    @property
    def pages(self) -> int:
        return max(1, -(-self.total // self.limit))


def check_page(page: int, limit: int) -> tuple[int, int, int]:
    """Validate paging input; returns (page, limit, offset)."""
    page, limit = int(page), int(limit)
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be > 0")
    return page, limit, (page - 1) * limit
