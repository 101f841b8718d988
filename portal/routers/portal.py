"""
Portal Router — Authenticated endpoints behind each dashboard view.

Endpoints:
  GET /portal/me                      — Logged-in doctor profile
  GET /portal/dashboard               — Analytics + patient list (searchable)
  GET /portal/reports                 — Analytics only
  GET /portal/reports/patients.csv    — Patient list export
  GET /portal/patients                — Patient list (searchable)
  GET /portal/patients/{id}           — Patient details
  GET /portal/appointments            — Scheduled appointments, earliest first
  GET /portal/settings/notifications  — Notification preferences
  PUT /portal/settings/notifications  — Update notification preferences
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from portal.models.contact import Contact, ContactList
from portal.models.dashboard import Analytics, DashboardResponse
from portal.models.portal import DoctorProfile, DoctorSession, NotificationPreferences
from portal.services.dashboard import demo
from portal.services.dashboard.analytics import (
    calculate_analytics,
    filter_contacts,
    upcoming_appointments,
)
from portal.services.dashboard.auth import verify_portal_token
from portal.services.dashboard.errors import ContactSourceError, ContactSourceTimeout
from portal.services.dashboard.preferences import get_preferences, save_preferences
from portal.services.dashboard.sources import (
    ContactSource,
    get_contact_source,
    is_demo_mode,
    load_contact,
    load_contacts,
    local_now,
    patient_type_policy,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# HELPERS
# =============================================================================


async def _fetch_contacts(
    source: ContactSource, session: DoctorSession, now: datetime
) -> list[Contact]:
    """Load contacts, mapping source failures to HTTP errors."""
    try:
        return await load_contacts(source, session, now=now)
    except ContactSourceTimeout:
        logger.warning("Portal: contact fetch timed out")
        raise HTTPException(status_code=504, detail="Timed out fetching contacts")
    except ContactSourceError:
        logger.exception("Portal: failed to fetch contacts")
        raise HTTPException(status_code=502, detail="Failed to fetch contacts")


def _analytics(contacts: list[Contact], now: datetime) -> Analytics:
    return calculate_analytics(
        contacts, now, policy=patient_type_policy(), demo_mode=is_demo_mode()
    )


# Characters that could trigger CSV formula injection
_CSV_INJECTION_CHARS = {"=", "+", "-", "@", "\t", "\r"}


def _sanitize_csv(value: str) -> str:
    """Sanitize a cell value to prevent CSV injection.

    Prefixes cells starting with dangerous characters with a single quote.
    """
    if value and value[0] in _CSV_INJECTION_CHARS:
        return f"'{value}"
    return value


# =============================================================================
# PROFILE
# =============================================================================


@router.get("/me")
async def get_profile(
    session: DoctorSession = Depends(verify_portal_token),
) -> DoctorProfile:
    """Get the logged-in doctor's profile."""
    return session.profile()


# =============================================================================
# DASHBOARD / REPORTS
# =============================================================================


@router.get("/dashboard")
async def get_dashboard(
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
    q: str | None = Query(default=None, max_length=200),
) -> DashboardResponse:
    """Stat cards, charts and the patient list for the main dashboard."""
    now = local_now()
    contacts = await _fetch_contacts(source, session, now)
    return DashboardResponse(
        analytics=_analytics(contacts, now),
        patients=filter_contacts(contacts, q),
    )


@router.get("/reports")
async def get_reports(
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
) -> Analytics:
    """Analytics for the reports view."""
    now = local_now()
    contacts = await _fetch_contacts(source, session, now)
    return _analytics(contacts, now)


@router.get("/reports/patients.csv")
async def export_patients_csv(
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
) -> StreamingResponse:
    """Export the patient list as CSV with injection protection."""
    now = local_now()
    contacts = await _fetch_contacts(source, session, now)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(
        [
            "ID",
            "Name",
            "Phone",
            "Type",
            "Query Type",
            "Urgency",
            "Status",
            "Created At",
            "Appointment",
        ]
    )

    for contact in contacts:
        writer.writerow(
            [
                contact.id,
                _sanitize_csv(contact.name),
                _sanitize_csv(contact.phone),
                contact.type.value,
                _sanitize_csv(contact.query_type),
                contact.urgency.value,
                _sanitize_csv(contact.status),
                contact.created_at.isoformat(),
                contact.appointment_date.isoformat() if contact.appointment_date else "",
            ]
        )

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": (
                f'attachment; filename="patients-{now.strftime("%Y-%m-%d")}.csv"'
            )
        },
    )


# =============================================================================
# PATIENTS / APPOINTMENTS
# =============================================================================


@router.get("/patients")
async def list_patients(
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
    q: str | None = Query(default=None, max_length=200),
) -> ContactList:
    """All patients, optionally filtered by name or phone."""
    contacts = await _fetch_contacts(source, session, local_now())
    items = filter_contacts(contacts, q)
    return ContactList(items=items, total=len(items))


@router.get("/patients/{patient_id}")
async def get_patient(
    patient_id: str,
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
) -> Contact:
    """Details for one patient."""
    now = local_now()
    try:
        contact = await load_contact(source, session, patient_id, now=now)
    except ContactSourceTimeout:
        logger.warning("Portal: patient fetch timed out")
        raise HTTPException(status_code=504, detail="Timed out fetching contact")
    except ContactSourceError:
        logger.exception("Portal: failed to fetch patient")
        raise HTTPException(status_code=502, detail="Failed to fetch contact")

    if contact is None:
        if is_demo_mode():
            return demo.sample_patient(patient_id, now)
        raise HTTPException(status_code=404, detail="Patient not found")
    return contact


@router.get("/appointments")
async def list_appointments(
    session: DoctorSession = Depends(verify_portal_token),
    source: ContactSource = Depends(get_contact_source),
) -> ContactList:
    """Patients with a scheduled appointment, earliest first."""
    contacts = await _fetch_contacts(source, session, local_now())
    items = upcoming_appointments(contacts)
    return ContactList(items=items, total=len(items))


# =============================================================================
# SETTINGS
# =============================================================================


@router.get("/settings/notifications")
async def get_notification_settings(
    session: DoctorSession = Depends(verify_portal_token),
) -> NotificationPreferences:
    return get_preferences(session.doctor_id)


@router.put("/settings/notifications")
async def update_notification_settings(
    body: NotificationPreferences,
    session: DoctorSession = Depends(verify_portal_token),
) -> NotificationPreferences:
    """Save the doctor's notification toggles."""
    logger.info("Notification settings updated for %s", session.doctor_id)
    return save_preferences(session.doctor_id, body)
