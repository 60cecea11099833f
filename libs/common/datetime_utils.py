"""Timezone-aware timestamp helpers shared by models and services."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (column defaults, audit stamps)."""
    return datetime.now(timezone.utc)


def utc_date_stamp() -> str:
    """Today's UTC date as YYYYMMDD, used in human-readable reference numbers."""
    return utc_now().strftime("%Y%m%d")
