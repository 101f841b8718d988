"""Tests for the analytics aggregator."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from portal.models.contact import Contact, PatientType, PatientTypePolicy, Urgency
from portal.services.dashboard import demo
from portal.services.dashboard.analytics import (
    QUERY_TYPE_LABELS,
    WEEK_DAYS,
    appointments_trend,
    calculate_analytics,
    escalation_data,
    filter_contacts,
    query_type_distribution,
    upcoming_appointments,
    weekly_data,
)
from portal.services.dashboard.normalizer import urgency_for

UTC = timezone.utc
# Wednesday; the week starts Monday 2025-01-13
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)
TODAY = datetime(2025, 1, 15, tzinfo=UTC)

# =============================================================================
# HELPERS
# =============================================================================

_counter = iter(range(1, 10_000))


def _contact(
    *,
    created: datetime = NOW,
    type: PatientType = PatientType.NEW,
    query_type: str = "General",
    appointment: datetime | None = None,
    name: str = "Patient",
    phone: str = "N/A",
) -> Contact:
    """Build a Contact directly, bypassing the normalizer."""
    return Contact(
        id=f"c{next(_counter)}",
        name=name,
        phone=phone,
        type=type,
        query_type=query_type,
        urgency=urgency_for(query_type),
        created_at=created,
        appointment_date=appointment,
    )


# =============================================================================
# SCALARS
# =============================================================================


@pytest.mark.unit
class TestScalarCounts:
    def test_eight_contacts_three_today(self) -> None:
        contacts = [_contact(created=TODAY + timedelta(hours=h)) for h in (1, 9, 23)]
        contacts += [
            _contact(created=TODAY - timedelta(days=d), type=PatientType.EXISTING)
            for d in (1, 2, 3, 4, 5)
        ]

        result = calculate_analytics(contacts, NOW, policy=PatientTypePolicy.RECENCY)

        assert result.total_patients == 8
        assert result.new_patients_today == 3
        assert result.new_patients == 3
        assert result.existing_patients == 5

    def test_new_today_requires_new_type(self) -> None:
        contacts = [
            _contact(created=TODAY + timedelta(hours=2)),
            _contact(created=TODAY + timedelta(hours=3), type=PatientType.EXISTING),
        ]
        result = calculate_analytics(contacts, NOW)
        assert result.new_patients_today == 1

    def test_today_window_is_half_open(self) -> None:
        contacts = [
            _contact(appointment=TODAY),  # midnight belongs to today
            _contact(appointment=TODAY + timedelta(days=1)),  # next midnight does not
            _contact(appointment=TODAY - timedelta(microseconds=1)),
            _contact(appointment=None),
        ]
        result = calculate_analytics(contacts, NOW)
        assert result.appointments_today == 1

    def test_escalations_count_high_urgency(self) -> None:
        contacts = [
            _contact(query_type="Emergency"),
            _contact(query_type="Emergency"),
            _contact(query_type="Follow-up"),
            _contact(query_type="Booking"),
        ]
        assert calculate_analytics(contacts, NOW).escalations == 2

    def test_empty_collection(self) -> None:
        result = calculate_analytics([], NOW)
        assert result.total_patients == 0
        assert result.new_patients_today == 0
        assert result.appointments_today == 0
        assert result.weekly_data.new_patients == [0] * 7
        assert result.escalation_data.data == [0, 0, 0]
        assert result.appointments_trend.data == [0, 0, 0, 0]
        assert result.demo is False


# =============================================================================
# WEEKLY SERIES
# =============================================================================


@pytest.mark.unit
class TestWeeklyData:
    def test_seven_aligned_days(self) -> None:
        series = weekly_data([], NOW, PatientTypePolicy.EXPLICIT)
        assert series.days == WEEK_DAYS
        assert len(series.new_patients) == len(series.existing_patients) == 7

    def test_explicit_split_by_type(self) -> None:
        monday = datetime(2025, 1, 13, 10, 0, tzinfo=UTC)
        contacts = [
            _contact(created=monday),
            _contact(created=monday, type=PatientType.EXISTING),
            _contact(created=monday + timedelta(days=2)),
        ]
        series = weekly_data(contacts, NOW, PatientTypePolicy.EXPLICIT)
        assert series.new_patients == [1, 0, 1, 0, 0, 0, 0]
        assert series.existing_patients == [1, 0, 0, 0, 0, 0, 0]

    def test_sum_never_exceeds_collection(self) -> None:
        contacts = [
            _contact(created=datetime(2025, 1, 13, 9, tzinfo=UTC)),
            _contact(created=datetime(2025, 1, 14, 9, tzinfo=UTC), type=PatientType.EXISTING),
            _contact(created=datetime(2025, 1, 1, 9, tzinfo=UTC)),  # before the week
        ]
        series = weekly_data(contacts, NOW, PatientTypePolicy.EXPLICIT)
        total = sum(series.new_patients) + sum(series.existing_patients)
        assert total == 2
        assert total <= len(contacts)

    def test_equality_when_all_inside_week(self) -> None:
        contacts = [
            _contact(created=datetime(2025, 1, 13 + d, 8, tzinfo=UTC), type=t)
            for d, t in [(0, PatientType.NEW), (1, PatientType.EXISTING), (2, PatientType.NEW)]
        ]
        series = weekly_data(contacts, NOW, PatientTypePolicy.EXPLICIT)
        assert sum(series.new_patients) + sum(series.existing_patients) == len(contacts)

    def test_sunday_belongs_to_same_week(self) -> None:
        sunday_now = datetime(2025, 1, 19, 20, 0, tzinfo=UTC)
        contacts = [_contact(created=datetime(2025, 1, 19, 8, tzinfo=UTC))]
        series = weekly_data(contacts, sunday_now, PatientTypePolicy.EXPLICIT)
        assert series.new_patients == [0, 0, 0, 0, 0, 0, 1]

    def test_recency_existing_is_running_total(self) -> None:
        contacts = [
            _contact(created=datetime(2025, 1, 10, 9, tzinfo=UTC), type=PatientType.EXISTING),
            _contact(created=datetime(2025, 1, 13, 9, tzinfo=UTC), type=PatientType.EXISTING),
            _contact(created=datetime(2025, 1, 15, 9, tzinfo=UTC)),
        ]
        series = weekly_data(contacts, NOW, PatientTypePolicy.RECENCY)
        assert series.new_patients == [1, 0, 1, 0, 0, 0, 0]
        assert series.existing_patients == [1, 2, 2, 3, 3, 3, 3]


# =============================================================================
# DISTRIBUTIONS
# =============================================================================


@pytest.mark.unit
class TestDistributions:
    def test_escalation_labels_and_counts(self) -> None:
        contacts = [
            _contact(query_type="Emergency"),
            _contact(query_type="Follow-up"),
            _contact(query_type="Follow-up"),
            _contact(query_type="Booking"),
        ]
        series = escalation_data(contacts)
        assert series.labels == [Urgency.HIGH.value, Urgency.MEDIUM.value, Urgency.LOW.value]
        assert series.data == [1, 2, 1]

    def test_escalation_sums_to_collection(self) -> None:
        contacts = [_contact(query_type=q) for q in ("Emergency", "X", "FAQs", "Follow-up")]
        assert sum(escalation_data(contacts).data) == len(contacts)

    def test_query_types_exclude_unknown_labels(self) -> None:
        contacts = [
            _contact(query_type="Booking"),
            _contact(query_type="Booking"),
            _contact(query_type="Reports"),
            _contact(query_type="General"),
            _contact(query_type="booking"),
        ]
        series = query_type_distribution(contacts)
        assert series.labels == QUERY_TYPE_LABELS
        assert series.data == [2, 0, 0, 0, 1]


# =============================================================================
# APPOINTMENTS TREND
# =============================================================================


@pytest.mark.unit
class TestAppointmentsTrend:
    def test_labels(self) -> None:
        assert appointments_trend([], NOW).weeks == ["Week 1", "Week 2", "Week 3", "Week 4"]

    def test_buckets_oldest_first(self) -> None:
        contacts = [
            _contact(appointment=NOW - timedelta(days=1)),
            _contact(appointment=NOW - timedelta(days=10)),
            _contact(appointment=NOW - timedelta(days=27)),
            _contact(appointment=NOW - timedelta(days=40)),  # outside
            _contact(appointment=NOW + timedelta(days=1)),  # future
        ]
        assert appointments_trend(contacts, NOW).data == [1, 0, 1, 1]

    def test_boundary_counts_once_at_window_start(self) -> None:
        boundary = NOW - timedelta(days=7)
        result = appointments_trend([_contact(appointment=boundary)], NOW)
        assert result.data == [0, 0, 0, 1]

    def test_now_is_excluded(self) -> None:
        assert appointments_trend([_contact(appointment=NOW)], NOW).data == [0, 0, 0, 0]


# =============================================================================
# DEMO FALLBACK / PURITY
# =============================================================================


@pytest.mark.unit
class TestDemoFallback:
    def test_live_mode_keeps_zeros(self) -> None:
        result = calculate_analytics([], NOW, demo_mode=False)
        assert result.demo is False
        assert result.query_type_distribution.data == [0, 0, 0, 0, 0]

    def test_demo_mode_substitutes_empty_series(self) -> None:
        result = calculate_analytics([], NOW, demo_mode=True)
        assert result.demo is True
        assert result.weekly_data == demo.sample_weekly_data()
        assert result.escalation_data == demo.sample_escalation_data()
        assert result.query_type_distribution == demo.sample_query_type_distribution()
        assert result.appointments_trend == demo.sample_appointments_trend()
        # Scalars are never fabricated
        assert result.total_patients == 0

    def test_demo_mode_keeps_real_series(self) -> None:
        contacts = [
            _contact(query_type="Booking", appointment=NOW - timedelta(days=2)),
        ]
        result = calculate_analytics(contacts, NOW, demo_mode=True)
        assert result.escalation_data.data == [0, 0, 1]
        assert result.query_type_distribution.data == [1, 0, 0, 0, 0]
        assert result.appointments_trend.data == [0, 0, 0, 1]
        assert result.weekly_data.new_patients == [0, 0, 1, 0, 0, 0, 0]
        assert result.demo is False


@pytest.mark.unit
def test_idempotent() -> None:
    contacts = [
        _contact(created=NOW - timedelta(days=d), query_type=q, appointment=NOW - timedelta(days=d))
        for d, q in [(0, "Emergency"), (3, "Booking"), (9, "Follow-up")]
    ]
    assert calculate_analytics(contacts, NOW) == calculate_analytics(contacts, NOW)


@pytest.mark.unit
def test_serializes_with_camel_case_keys() -> None:
    data = calculate_analytics([], NOW).model_dump(by_alias=True)
    assert "newPatientsToday" in data
    assert set(data["weeklyData"]) == {"days", "newPatients", "existingPatients"}
    assert set(data["appointmentsTrend"]) == {"weeks", "data"}


# =============================================================================
# LIST VIEWS
# =============================================================================


@pytest.mark.unit
class TestListViews:
    def test_filter_by_name_case_insensitive(self) -> None:
        contacts = [_contact(name="Jane Doe"), _contact(name="John Smith")]
        assert [c.name for c in filter_contacts(contacts, "jane")] == ["Jane Doe"]

    def test_filter_by_phone(self) -> None:
        contacts = [_contact(name="A", phone="5551234"), _contact(name="B", phone="999")]
        assert [c.name for c in filter_contacts(contacts, "555")] == ["A"]

    def test_empty_query_returns_all(self) -> None:
        contacts = [_contact(), _contact()]
        assert len(filter_contacts(contacts, None)) == 2
        assert len(filter_contacts(contacts, "")) == 2

    def test_upcoming_appointments_sorted(self) -> None:
        later = _contact(name="later", appointment=NOW + timedelta(days=3))
        sooner = _contact(name="sooner", appointment=NOW - timedelta(days=1))
        none = _contact(name="none")
        assert [c.name for c in upcoming_appointments([later, none, sooner])] == [
            "sooner",
            "later",
        ]
