"""
Contact Models — Canonical patient record and the raw document it comes from.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PatientType(str, Enum):
    NEW = "New"
    EXISTING = "Existing"


class Urgency(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class PatientTypePolicy(str, Enum):
    """How a contact is classified as New or Existing.

    explicit: read the stored ``patient_type`` field.
    recency:  New when created today (local time), otherwise Existing.
    """

    EXPLICIT = "explicit"
    RECENCY = "recency"


# =============================================================================
# RAW DOCUMENT (source shape)
# =============================================================================


class RawDocument(BaseModel):
    """One document as delivered by a contact source.

    ``fields`` holds either Firestore REST tagged values
    (``{"stringValue": "..."}``) or native values from an SDK row.
    Timestamps stay unparsed here; the normalizer reads them leniently.
    """

    name: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    create_time: datetime | str | None = None
    update_time: datetime | str | None = None


# =============================================================================
# CONTACT (canonical record)
# =============================================================================


class Contact(BaseModel):
    """Normalized patient/interaction record served to the dashboard."""

    id: str
    name: str = "Unknown"
    phone: str = "N/A"
    email: str = ""
    type: PatientType = PatientType.NEW
    query_type: str = Field("General", alias="queryType")
    status: str = "Pending"
    urgency: Urgency = Urgency.LOW
    created_at: datetime = Field(alias="createdAt")
    appointment_date: datetime | None = Field(None, alias="appointmentDate")
    last_interaction: datetime | None = Field(None, alias="lastInteraction")
    total_visits: int = Field(1, alias="totalVisits")
    intent: str | None = None
    transcript: str | None = None
    keywords: list[str] = Field(default_factory=list)
    doctor_id: str | None = Field(None, alias="doctorId")

    class Config:
        frozen = True
        populate_by_name = True


class ContactList(BaseModel):
    """List response for the Patients and Appointments views."""

    items: list[Contact]
    total: int
