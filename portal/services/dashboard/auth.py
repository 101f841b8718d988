"""
Portal Auth — Fixed-credential login and bearer token verification.

The portal has a single configured doctor account. A successful login
returns an HS256 JWT carrying the doctor's id, email and name; every
other endpoint resolves that token into an explicit DoctorSession.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import HTTPException, Request

from portal.config import settings
from portal.models.portal import DoctorSession

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
_AUDIENCE = "doctor-portal"


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


def authenticate(email: str, password: str) -> DoctorSession | None:
    """Check credentials against the configured pair."""
    email_ok = _same(email.strip().lower(), settings.portal_login_email.lower())
    password_ok = _same(password, settings.portal_login_password)
    if not (email_ok and password_ok):
        return None
    return DoctorSession(
        doctor_id=settings.portal_doctor_id,
        email=settings.portal_login_email,
        name=settings.portal_doctor_name,
    )


def issue_token(session: DoctorSession, *, now: datetime | None = None) -> str:
    """Sign a bearer token for ``session``."""
    issued = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": session.doctor_id,
        "email": session.email,
        "name": session.name,
        "aud": _AUDIENCE,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def decode_token(token: str) -> DoctorSession:
    """Verify a bearer token. Raises HTTPException(401) when it is not valid."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[_ALGORITHM],
            audience=_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Portal auth: invalid token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token")

    doctor_id = payload.get("sub")
    if not doctor_id:
        raise HTTPException(status_code=401, detail="Invalid token: no subject")

    return DoctorSession(
        doctor_id=doctor_id,
        email=payload.get("email") or "",
        name=payload.get("name") or "Doctor",
    )


async def verify_portal_token(request: Request) -> DoctorSession:
    """FastAPI dependency: Bearer token → DoctorSession.

    Raises 401 on a missing, expired or invalid token.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing authorization token")

    return decode_token(auth_header[7:])
