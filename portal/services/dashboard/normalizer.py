"""
Record Normalizer — Raw contact documents to canonical Contact records.

The upstream store's schema has drifted across revisions (``patient_type``
vs. date-derived classification, with and without a ``doctorId`` field,
tagged REST values vs. native SDK values). Every field below has a total
mapping with a documented default, so normalize_document() never raises.

Pure functions — no I/O.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any

from portal.models.contact import (
    Contact,
    PatientType,
    PatientTypePolicy,
    RawDocument,
    Urgency,
)

logger = logging.getLogger(__name__)

# "2025-12-31 at 9.00" as written by the booking agent
_BOOKED_TIME_RE = re.compile(r"^\s*(\d{4}-\d{2}-\d{2})\s+at\s+(\d{1,2})\.(\d{2})\s*$")

_URGENCY_BY_QUERY_TYPE = {
    "Emergency": Urgency.HIGH,
    "Follow-up": Urgency.MEDIUM,
}


# =============================================================================
# VALUE DECODING
# =============================================================================


def decode_value(value: Any) -> Any:
    """Decode one Firestore REST tagged value into a plain Python value.

    Native values (anything that is not a single-key tag mapping) are
    returned unchanged, so SDK rows pass straight through. Unknown tags
    and malformed numbers decode to None. Array and map tags whose payload
    is not the expected mapping decode to an empty list or dict.
    """
    if not isinstance(value, dict) or len(value) != 1:
        return value

    tag, inner = next(iter(value.items()))
    if tag in ("stringValue", "timestampValue", "referenceValue"):
        return inner
    if tag == "nullValue":
        return None
    if tag == "booleanValue":
        return bool(inner)
    if tag == "integerValue":
        try:
            return int(inner)
        except (TypeError, ValueError):
            return None
    if tag == "doubleValue":
        try:
            return float(inner)
        except (TypeError, ValueError):
            return None
    if tag == "arrayValue":
        items = inner.get("values") if isinstance(inner, dict) else None
        if not isinstance(items, list):
            return []
        return [decode_value(item) for item in items]
    if tag == "mapValue":
        nested = inner.get("fields") if isinstance(inner, dict) else None
        if not isinstance(nested, dict):
            return {}
        return {k: decode_value(v) for k, v in nested.items()}
    # Not a tag we know: treat the mapping as a native value
    return value


def decode_fields(fields: dict[str, Any] | None) -> dict[str, Any]:
    """Decode every field of a document."""
    return {key: decode_value(val) for key, val in (fields or {}).items()}


# =============================================================================
# TIMESTAMPS
# =============================================================================


def parse_timestamp(value: Any, tz: tzinfo) -> datetime | None:
    """Parse a datetime or an ISO 8601 / RFC 3339 string.

    Naive values are read as local time in ``tz``. Returns None on any
    failure.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_appointment(value: Any, tz: tzinfo) -> datetime | None:
    """Parse ``requested_booked_time``.

    Accepts a native timestamp, the booking agent's ``"<date> at <h>.<mm>"``
    form (read as ``<date>T<h>:<mm>`` local time), or any ISO string.
    The literal string "null" means no appointment.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() == "null":
            return None
        match = _BOOKED_TIME_RE.match(text)
        if match:
            day, hour, minute = match.groups()
            try:
                return datetime.combine(
                    date.fromisoformat(day), time(int(hour), int(minute)), tzinfo=tz
                )
            except ValueError:
                return None
    return parse_timestamp(value, tz)


# =============================================================================
# FIELD RULES
# =============================================================================


def document_id(name: str | None) -> str:
    """Final path segment of the document name ("" when there is none)."""
    if not name:
        return ""
    return name.rstrip("/").split("/")[-1]


def urgency_for(query_type: str) -> Urgency:
    """Fixed urgency mapping: Emergency→High, Follow-up→Medium, else Low."""
    return _URGENCY_BY_QUERY_TYPE.get(query_type, Urgency.LOW)


def day_window(now: datetime) -> tuple[datetime, datetime]:
    """Return [local midnight, next local midnight) for ``now``'s day."""
    start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    return start, start + timedelta(days=1)


def classify_patient(
    fields: dict[str, Any],
    created_at: datetime,
    policy: PatientTypePolicy,
    now: datetime,
) -> PatientType:
    """Classify a decoded document as New or Existing under ``policy``."""
    if policy == PatientTypePolicy.RECENCY:
        start, end = day_window(now)
        return PatientType.NEW if start <= created_at < end else PatientType.EXISTING

    stored = fields.get("patient_type")
    if isinstance(stored, str) and stored.strip().lower() == "existing":
        return PatientType.EXISTING
    return PatientType.NEW


def _text(fields: dict[str, Any], *keys: str) -> str | None:
    """First non-empty value among ``keys``, coerced to str."""
    for key in keys:
        val = fields.get(key)
        if val is None or isinstance(val, (dict, list)):
            continue
        if isinstance(val, bool):
            continue
        if isinstance(val, float) and val.is_integer():
            val = int(val)
        text = str(val)
        if text:
            return text
    return None


def _visits(fields: dict[str, Any]) -> int:
    for key in ("totalVisits", "total_visits"):
        val = fields.get(key)
        if isinstance(val, bool):
            continue
        try:
            count = int(val)
        except (TypeError, ValueError):
            continue
        if count > 0:
            return count
    return 1


def _keywords(fields: dict[str, Any]) -> list[str]:
    raw = fields.get("keywords")
    if not isinstance(raw, list):
        return []
    return [str(k) for k in raw if isinstance(k, str) and k]


# =============================================================================
# NORMALIZE
# =============================================================================


def normalize_document(
    doc: RawDocument,
    *,
    policy: PatientTypePolicy,
    now: datetime,
    tz: tzinfo,
) -> Contact:
    """Map one raw document to a Contact. Never raises."""
    fields = decode_fields(doc.fields)

    created_at = (
        parse_timestamp(doc.create_time, tz)
        or parse_timestamp(fields.get("createdAt"), tz)
        or parse_timestamp(fields.get("created_at"), tz)
        or now
    )

    last_interaction = (
        parse_timestamp(fields.get("lastInteraction"), tz)
        or parse_timestamp(fields.get("updatedAt"), tz)
        or parse_timestamp(doc.update_time, tz)
    )

    query_type = _text(fields, "type") or "General"

    return Contact(
        id=document_id(doc.name),
        name=_text(fields, "name") or "Unknown",
        phone=_text(fields, "number", "phone") or "N/A",
        email=_text(fields, "email") or "",
        type=classify_patient(fields, created_at, policy, now),
        query_type=query_type,
        status=_text(fields, "status") or "Pending",
        urgency=urgency_for(query_type),
        created_at=created_at,
        appointment_date=parse_appointment(fields.get("requested_booked_time"), tz),
        last_interaction=last_interaction,
        total_visits=_visits(fields),
        intent=_text(fields, "intent"),
        transcript=_text(fields, "transcript"),
        keywords=_keywords(fields),
        doctor_id=_text(fields, "doctorId", "doctor_id"),
    )


def normalize_documents(
    docs: Iterable[RawDocument],
    *,
    policy: PatientTypePolicy,
    now: datetime,
    tz: tzinfo,
) -> list[Contact]:
    """Normalize a batch, skipping documents with no usable id."""
    contacts: list[Contact] = []
    for doc in docs:
        contact = normalize_document(doc, policy=policy, now=now, tz=tz)
        if not contact.id:
            logger.warning("Skipping contact document with no id: %r", doc.name)
            continue
        contacts.append(contact)
    return contacts
