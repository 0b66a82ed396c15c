# File: utils/id_utils.py
"""Deterministic identifier helpers for ParenTime.

Identifiers are pure functions of their inputs (no randomness), so the same
template on the same calendar day always yields the same key. Notification
scheduling relies on this for idempotence: activating twice replaces rather
than duplicates the pending alert.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
"""

from __future__ import annotations

from datetime import date, datetime

from .dt_utils import dt_to_date


def _iso_day(due: date | datetime) -> str:
    """Return the YYYY-MM-DD form of a date or datetime."""
    day = dt_to_date(due)
    if day is None:
        raise ValueError(f"Cannot derive a calendar date from {due!r}")
    return day.isoformat()


def occurrence_id(template_id: str, due: date | datetime) -> str:
    """Return the stable id of a template occurrence.

    Example:
        occurrence_id("dtp_series", date(2026, 3, 1)) -> "dtp_series_2026-03-01"
    """
    return f"{template_id}_{_iso_day(due)}"


def notification_id(child_id: str, template_id: str, due: date | datetime) -> str:
    """Return the stable id of the alert for a child/template/day triple."""
    return f"reminder_{child_id}_{template_id}_{_iso_day(due)}"


def suggestion_id(child_id: str, template_id: str) -> str:
    """Return the stable id of a suggestion shown for a child."""
    return f"{child_id}_{template_id}"
