"""
Contact Sources — Transport selection and the fetch → normalize step.

The transport is chosen from settings (PORTAL_MODE, CONTACT_BACKEND) when
the app starts; a failed live fetch is always an error, never a reason to
switch to demo data.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from portal.config import settings
from portal.models.contact import Contact, PatientTypePolicy, RawDocument
from portal.models.portal import DoctorSession
from portal.services.dashboard.demo import DemoSource
from portal.services.dashboard.firestore import FirestoreRestSource
from portal.services.dashboard.normalizer import normalize_document, normalize_documents
from portal.services.dashboard.supabase_source import SupabaseSource

logger = logging.getLogger(__name__)


class ContactSource(Protocol):
    async def list_documents(self) -> list[RawDocument]: ...

    async def get_document(self, doc_id: str) -> RawDocument | None: ...


# =============================================================================
# SETTINGS HELPERS
# =============================================================================


def is_demo_mode() -> bool:
    return settings.portal_mode == "demo"


def patient_type_policy() -> PatientTypePolicy:
    return PatientTypePolicy(settings.patient_type_policy)


@lru_cache()
def portal_timezone() -> ZoneInfo:
    """Configured local timezone (falls back to UTC on an unknown name)."""
    try:
        return ZoneInfo(settings.portal_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown PORTAL_TIMEZONE %r, using UTC", settings.portal_timezone)
        return ZoneInfo("UTC")


def local_now() -> datetime:
    """Current time in the portal timezone."""
    return datetime.now(portal_timezone())


# =============================================================================
# SOURCE SELECTION
# =============================================================================


_source: ContactSource | None = None


def get_contact_source() -> ContactSource:
    """Get or create the configured contact source."""
    global _source
    if _source is None:
        if is_demo_mode():
            _source = DemoSource()
        elif settings.contact_backend == "supabase":
            _source = SupabaseSource(
                settings.supabase_contacts_table,
                timeout=settings.fetch_timeout_seconds,
            )
        else:
            _source = FirestoreRestSource(
                settings.firestore_base_url,
                settings.firestore_collection,
                api_key=settings.firestore_api_key,
                page_size=settings.firestore_page_size,
                timeout=settings.fetch_timeout_seconds,
            )
        logger.info(
            "Contact source: %s (%s mode)", type(_source).__name__, settings.portal_mode
        )
    return _source


def reset_contact_source() -> None:
    """Drop the cached source (for testing)."""
    global _source
    _source = None


# =============================================================================
# LOAD
# =============================================================================


def _visible_to(contact: Contact, session: DoctorSession) -> bool:
    # Documents written before the doctorId field existed stay visible
    return contact.doctor_id is None or contact.doctor_id == session.doctor_id


async def load_contacts(
    source: ContactSource,
    session: DoctorSession,
    *,
    now: datetime,
) -> list[Contact]:
    """Fetch every document and normalize it for ``session``."""
    docs = await source.list_documents()
    contacts = normalize_documents(
        docs, policy=patient_type_policy(), now=now, tz=portal_timezone()
    )
    if settings.scope_contacts_to_doctor:
        contacts = [c for c in contacts if _visible_to(c, session)]
    logger.debug("Loaded %d contacts for %s", len(contacts), session.doctor_id)
    return contacts


async def load_contact(
    source: ContactSource,
    session: DoctorSession,
    contact_id: str,
    *,
    now: datetime,
) -> Contact | None:
    """Fetch and normalize one contact; None when it does not exist."""
    doc = await source.get_document(contact_id)
    if doc is None:
        return None
    contact = normalize_document(
        doc, policy=patient_type_policy(), now=now, tz=portal_timezone()
    )
    if settings.scope_contacts_to_doctor and not _visible_to(contact, session):
        return None
    return contact
