from __future__ import annotations
from typing import Optional

from ....constants import PAYMENT_STATUSES

# ---------- Canonical set ----------
VALID_STATES: tuple[str, ...] = PAYMENT_STATUSES  # pending, partial, paid

# ---------- Human labels ----------
LABELS = {
    "pending": "Pending",
    "partial": "Partial",
    "paid":    "Paid",
}

# ---------- Descriptions (UI copy / tooltips) ----------
DESCRIPTIONS = {
    "pending": "Nothing paid yet; the full total is outstanding.",
    "partial": "Part of the total has been paid.",
    "paid":    "Settled in full.",
}

# Style tokens the UI can map to colors
STYLES = {
    "pending": {"badge": "danger",  "fg": "#991B1B", "bg": "#FEE2E2"},
    "partial": {"badge": "warning", "fg": "#92400E", "bg": "#FEF3C7"},
    "paid":    {"badge": "success", "fg": "#065F46", "bg": "#D1FAE5"},
}

# ---------- API ----------

def normalize(state: Optional[str]) -> Optional[str]:
    """Lowercase & strip; return None if empty."""
    if state is None:
        return None
    s = str(state).strip().lower()
    return s or None


def label(state: str) -> str:
    """Human label ('Partial'). If unknown, returns the original string title-cased."""
    s = normalize(state)
    if s in LABELS:
        return LABELS[s]  # type: ignore[index]
    return (state or "").strip().title()


def description(state: str) -> str:
    s = normalize(state)
    return DESCRIPTIONS.get(s, "")


def style_tokens(state: str) -> dict:
    """Unknown states fall back to the 'pending' style."""
    s = normalize(state)
    return STYLES.get(s, STYLES["pending"])
