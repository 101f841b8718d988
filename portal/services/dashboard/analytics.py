"""
Analytics Aggregator — Reduce a Contact collection to dashboard counts.

calculate_analytics(): scalar KPIs, weekly series, distributions, trend.
filter_contacts() / upcoming_appointments(): list views.

Pure functions — "now" is always passed in, never read from the clock.
All day and week windows are half-open: [start, end).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from portal.models.contact import Contact, PatientType, PatientTypePolicy, Urgency
from portal.models.dashboard import Analytics, LabeledSeries, TrendSeries, WeeklySeries
from portal.services.dashboard import demo
from portal.services.dashboard.normalizer import day_window

WEEK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
URGENCY_LABELS = [Urgency.HIGH.value, Urgency.MEDIUM.value, Urgency.LOW.value]
QUERY_TYPE_LABELS = ["Booking", "FAQs", "Follow-up", "Emergency", "Reports"]
TREND_WEEKS = ["Week 1", "Week 2", "Week 3", "Week 4"]


def _in_window(value: datetime | None, start: datetime, end: datetime) -> bool:
    return value is not None and start <= value < end


def _all_zero(values: Sequence[int]) -> bool:
    return not any(values)


# =============================================================================
# SERIES
# =============================================================================


def weekly_data(
    contacts: Sequence[Contact], now: datetime, policy: PatientTypePolicy
) -> WeeklySeries:
    """New/existing counts for each day of the current Monday-based week.

    explicit policy: both series count contacts created on that day,
    split by their stored type.
    recency policy: New = created on that day, Existing = created strictly
    before that day (running total), matching how recency classifies.
    """
    today_start, _ = day_window(now)
    week_start = today_start - timedelta(days=now.weekday())

    new_counts: list[int] = []
    existing_counts: list[int] = []
    for offset in range(len(WEEK_DAYS)):
        day_start = week_start + timedelta(days=offset)
        day_end = day_start + timedelta(days=1)

        created_that_day = [c for c in contacts if _in_window(c.created_at, day_start, day_end)]

        if policy == PatientTypePolicy.RECENCY:
            new_counts.append(len(created_that_day))
            existing_counts.append(sum(1 for c in contacts if c.created_at < day_start))
        else:
            new_counts.append(sum(1 for c in created_that_day if c.type == PatientType.NEW))
            existing_counts.append(
                sum(1 for c in created_that_day if c.type == PatientType.EXISTING)
            )

    return WeeklySeries(
        days=list(WEEK_DAYS),
        new_patients=new_counts,
        existing_patients=existing_counts,
    )


def _distribution(labels: list[str], values: Iterable[str]) -> LabeledSeries:
    # Values outside the fixed label set are not counted
    values = list(values)
    return LabeledSeries(labels=list(labels), data=[values.count(label) for label in labels])


def escalation_data(contacts: Sequence[Contact]) -> LabeledSeries:
    """Contact count per urgency level (High, Medium, Low)."""
    return _distribution(URGENCY_LABELS, (c.urgency.value for c in contacts))


def query_type_distribution(contacts: Sequence[Contact]) -> LabeledSeries:
    """Contact count per known query type."""
    return _distribution(QUERY_TYPE_LABELS, (c.query_type for c in contacts))


def appointments_trend(contacts: Sequence[Contact], now: datetime) -> TrendSeries:
    """Appointments in each of the last four 7-day windows, oldest first."""
    data: list[int] = []
    for index in range(len(TREND_WEEKS)):
        start = now - timedelta(days=(3 - index) * 7 + 7)
        end = start + timedelta(days=7)
        data.append(sum(1 for c in contacts if _in_window(c.appointment_date, start, end)))
    return TrendSeries(weeks=list(TREND_WEEKS), data=data)


# =============================================================================
# SUMMARY
# =============================================================================


def calculate_analytics(
    contacts: Sequence[Contact],
    now: datetime,
    *,
    policy: PatientTypePolicy = PatientTypePolicy.EXPLICIT,
    demo_mode: bool = False,
) -> Analytics:
    """Compute the full dashboard summary.

    With ``demo_mode`` an all-zero series is replaced by its sample
    counterpart and the result is flagged ``demo=True``. Live results are
    never padded.
    """
    today_start, today_end = day_window(now)

    weekly = weekly_data(contacts, now, policy)
    escalations_series = escalation_data(contacts)
    query_types = query_type_distribution(contacts)
    trend = appointments_trend(contacts, now)

    used_sample = False
    if demo_mode:
        if _all_zero(weekly.new_patients) and _all_zero(weekly.existing_patients):
            weekly = demo.sample_weekly_data()
            used_sample = True
        if _all_zero(escalations_series.data):
            escalations_series = demo.sample_escalation_data()
            used_sample = True
        if _all_zero(query_types.data):
            query_types = demo.sample_query_type_distribution()
            used_sample = True
        if _all_zero(trend.data):
            trend = demo.sample_appointments_trend()
            used_sample = True

    return Analytics(
        total_patients=len(contacts),
        new_patients_today=sum(
            1
            for c in contacts
            if c.type == PatientType.NEW and _in_window(c.created_at, today_start, today_end)
        ),
        existing_patients=sum(1 for c in contacts if c.type == PatientType.EXISTING),
        new_patients=sum(1 for c in contacts if c.type == PatientType.NEW),
        appointments_today=sum(
            1 for c in contacts if _in_window(c.appointment_date, today_start, today_end)
        ),
        escalations=sum(1 for c in contacts if c.urgency == Urgency.HIGH),
        weekly_data=weekly,
        escalation_data=escalations_series,
        query_type_distribution=query_types,
        appointments_trend=trend,
        demo=used_sample,
    )


# =============================================================================
# LIST VIEWS
# =============================================================================


def filter_contacts(contacts: Iterable[Contact], query: str | None) -> list[Contact]:
    """Case-insensitive name match or substring phone match."""
    if not query:
        return list(contacts)
    needle = query.strip().lower()
    return [c for c in contacts if needle in c.name.lower() or needle in c.phone]


def upcoming_appointments(contacts: Iterable[Contact]) -> list[Contact]:
    """Contacts with an appointment, earliest first."""
    scheduled = [c for c in contacts if c.appointment_date is not None]
    return sorted(scheduled, key=lambda c: c.appointment_date)  # type: ignore[arg-type, return-value]
