"""Freshness checks for cached forecasts."""

from datetime import UTC, datetime, timedelta

FRESHNESS_WINDOW_MINUTES = 30


def is_forecast_fresh(
    fetched_at: datetime | None,
    max_age_minutes: int = FRESHNESS_WINDOW_MINUTES,
    now: datetime | None = None,
) -> bool:
    """True iff the forecast was fetched strictly less than max_age_minutes ago.

    Exactly max_age_minutes old counts as stale; a missing timestamp is
    never fresh.
    """
    if fetched_at is None:
        return False
    if now is None:
        now = datetime.now(UTC)
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=UTC)
    return now - fetched_at < timedelta(minutes=max_age_minutes)


def forecast_age_minutes(
    fetched_at: datetime | None, now: datetime | None = None
) -> float:
    """Age of a cached forecast in minutes; inf when never fetched."""
    if fetched_at is None:
        return float("inf")
    if now is None:
        now = datetime.now(UTC)
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=UTC)
    return (now - fetched_at).total_seconds() / 60
