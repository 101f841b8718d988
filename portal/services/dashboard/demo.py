"""
Demo Data — Fixed illustrative contacts and chart series.

Only reachable when PORTAL_MODE=demo. Live mode never falls back to
anything in this module, not even after a failed fetch.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from portal.models.contact import Contact, PatientType, RawDocument, Urgency
from portal.models.dashboard import LabeledSeries, TrendSeries, WeeklySeries

_DOC_PREFIX = "projects/demo/databases/(default)/documents/contacts"

# name, number, type, patient_type, status, days_ago, appointment_in_days
_SAMPLE_ROWS: list[tuple[str, Any, str, str, str, int, float | None]] = [
    ("Jane Doe", 5551234, "Emergency", "new", "Pending", 0, 0.2),
    ("Arjun Mehta", "+1 555-0101", "Booking", "new", "Confirmed", 0, 2),
    ("Maria Garcia", "+1 555-0102", "Follow-up", "existing", "Completed", 1, -3),
    ("Liam Chen", "+1 555-0103", "FAQs", "existing", "Completed", 2, None),
    ("Fatima Khan", "+1 555-0104", "Reports", "new", "Pending", 3, -9),
    ("Noah Williams", "+1 555-0105", "Booking", "existing", "Confirmed", 5, -16),
    ("Sofia Rossi", "+1 555-0106", "Follow-up", "existing", "Cancelled", 8, None),
    ("Ethan Brown", "+1 555-0107", "Emergency", "new", "Pending", 12, -22),
]


def _ts(value: datetime) -> dict[str, str]:
    return {"timestampValue": value.astimezone(timezone.utc).isoformat()}


def sample_documents(now: datetime) -> list[RawDocument]:
    """Firestore-shaped documents dated relative to ``now``."""
    docs: list[RawDocument] = []
    for index, (name, number, query, ptype, status, days_ago, appt) in enumerate(
        _SAMPLE_ROWS, start=1
    ):
        created = now - timedelta(days=days_ago, minutes=index)
        fields: dict[str, Any] = {
            "name": {"stringValue": name},
            "number": (
                {"integerValue": str(number)}
                if isinstance(number, int)
                else {"stringValue": number}
            ),
            "type": {"stringValue": query},
            "patient_type": {"stringValue": ptype},
            "status": {"stringValue": status},
            "requested_booked_time": (
                _ts(now + timedelta(days=appt)) if appt is not None else {"stringValue": "null"}
            ),
        }
        docs.append(
            RawDocument(
                name=f"{_DOC_PREFIX}/demo-{index:03d}",
                fields=fields,
                create_time=created.astimezone(timezone.utc).isoformat(),
                update_time=created.astimezone(timezone.utc).isoformat(),
            )
        )
    return docs


def sample_patient(contact_id: str, now: datetime) -> Contact:
    """Stand-in patient for the details view when a demo id is unknown."""
    return Contact(
        id=contact_id,
        name="John Smith",
        phone="+1 555-1234",
        type=PatientType.EXISTING,
        query_type="Follow-up",
        status="Completed",
        urgency=Urgency.MEDIUM,
        created_at=now - timedelta(days=30),
        appointment_date=now + timedelta(days=7),
        last_interaction=now - timedelta(days=2),
        total_visits=5,
        keywords=["Consultation", "Follow-up", "Prescription"],
        doctor_id="demo-doctor",
    )


# =============================================================================
# SAMPLE SERIES
# =============================================================================


def sample_weekly_data() -> WeeklySeries:
    return WeeklySeries(
        days=["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        new_patients=[4, 6, 3, 7, 5, 2, 1],
        existing_patients=[8, 5, 9, 6, 7, 4, 2],
    )


def sample_escalation_data() -> LabeledSeries:
    return LabeledSeries(labels=["High", "Medium", "Low"], data=[3, 7, 15])


def sample_query_type_distribution() -> LabeledSeries:
    return LabeledSeries(
        labels=["Booking", "FAQs", "Follow-up", "Emergency", "Reports"],
        data=[12, 8, 6, 3, 4],
    )


def sample_appointments_trend() -> TrendSeries:
    return TrendSeries(weeks=["Week 1", "Week 2", "Week 3", "Week 4"], data=[9, 12, 10, 14])


# =============================================================================
# SOURCE
# =============================================================================


class DemoSource:
    """Contact source backed by the sample documents."""

    async def list_documents(self) -> list[RawDocument]:
        return sample_documents(datetime.now(timezone.utc))

    async def get_document(self, doc_id: str) -> RawDocument | None:
        for doc in await self.list_documents():
            if doc.name.rsplit("/", 1)[-1] == doc_id:
                return doc
        return None
