"""Display helpers for raw field values."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from childcare_qa.config import EMPTY_CELL


def join_address(parts: Iterable[Optional[str]]) -> str:
    """Comma-join the non-empty address parts (may return '')."""
    return ", ".join(str(p) for p in parts if p)


def format_address(address: Optional[str], city: Optional[str], zip_code: Optional[str]) -> str:
    return join_address((address, city, zip_code)) or EMPTY_CELL


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(iso: Optional[str]) -> str:
    """Render an ISO-8601 timestamp as M/D/YYYY, or the placeholder."""
    d = parse_iso(iso)
    if d is None:
        return EMPTY_CELL
    return f"{d.month}/{d.day}/{d.year}"


def format_cell(value: Any) -> str:
    """Table cell text; None becomes the placeholder."""
    if value is None:
        return EMPTY_CELL
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
