"""Visitor statistics: page view tracking and period counts.

Periods are calendar based in UTC: today, yesterday, the current week
(weeks start on Sunday), the current month and the current year.
"""

from datetime import UTC, datetime, timedelta

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace


@marketplace.aggregate
class Visit:
    ip_address = String(max_length=64)
    user_agent = String(max_length=512)
    path = String(required=True, max_length=1024)
    timestamp = DateTime()


@marketplace.command(part_of="Visit")
class TrackPageView:
    path = String(max_length=1024)
    ip_address = String(max_length=64)
    user_agent = String(max_length=512)


@marketplace.command_handler(part_of=Visit)
class TrackPageViewHandler:
    @handle(TrackPageView)
    def track_page_view(self, command):
        if not command.path:
            raise ValidationError({"path": ["Path is required"]})

        visit = Visit(
            path=command.path,
            ip_address=command.ip_address,
            user_agent=command.user_agent,
            timestamp=datetime.now(UTC),
        )
        current_domain.repository_for(Visit).add(visit)
        return str(visit.id)


def period_starts(now):
    """Start of each reporting period containing ``now``, plus the end of today."""
    now = now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # Monday is 0 in Python; count days back to the preceding Sunday
    week = today - timedelta(days=(today.weekday() + 1) % 7)
    return {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this_week": week,
        "this_month": today.replace(day=1),
        "this_year": today.replace(month=1, day=1),
        "tomorrow": today + timedelta(days=1),
    }


def _count_between(start, end):
    query = current_domain.repository_for(Visit)._dao.query
    return query.filter(timestamp__gte=start, timestamp__lt=end).all().total


def _next_month(moment):
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1)
    return moment.replace(month=moment.month + 1)


def visitor_stats(now=None):
    """Visit counts per period, with ``now`` defaulting to the current time."""
    starts = period_starts(now or datetime.now(UTC))
    this_year = starts["this_year"]

    return {
        "today": _count_between(starts["today"], starts["tomorrow"]),
        "yesterday": _count_between(starts["yesterday"], starts["today"]),
        "this_week": _count_between(starts["this_week"], starts["this_week"] + timedelta(days=7)),
        "this_month": _count_between(starts["this_month"], _next_month(starts["this_month"])),
        "this_year": _count_between(this_year, this_year.replace(year=this_year.year + 1)),
        "total": current_domain.repository_for(Visit)._dao.query.all().total,
    }
