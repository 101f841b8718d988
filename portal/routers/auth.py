"""
Auth Router — Login screen backing endpoints.

Endpoints:
  POST /portal/auth/login   — Exchange the doctor credentials for a token
  POST /portal/auth/logout  — Client-side logout acknowledgement
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from portal.config import settings
from portal.models.portal import DoctorSession, LoginRequest, LoginResponse
from portal.services.dashboard.auth import authenticate, issue_token, verify_portal_token
from portal.services.dashboard.rate_limiter import get_rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client_ip(request: Request) -> str:
    """Extract client IP, respecting X-Forwarded-For behind proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> LoginResponse:
    """Validate the fixed credential pair and return a bearer token."""
    if not body.email.strip():
        raise HTTPException(status_code=422, detail="Please enter your email address")
    if not body.password.strip():
        raise HTTPException(status_code=422, detail="Please enter your password")

    ip = _get_client_ip(request)
    limiter = get_rate_limiter()
    if limiter.is_blocked(ip, settings.login_rate_limit_rpm):
        raise HTTPException(
            status_code=429,
            detail="Too many failed attempts. Please try again later",
        )

    session = authenticate(body.email, body.password)
    if session is None:
        limiter.record_failure(ip)
        logger.info("Login rejected for %s from %s", body.email, ip)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    limiter.clear(ip)
    logger.info("Doctor %s logged in", session.doctor_id)
    return LoginResponse(access_token=issue_token(session), doctor=session.profile())


@router.post("/logout")
async def logout(
    session: DoctorSession = Depends(verify_portal_token),
) -> dict[str, bool]:
    """Tokens are stateless; the client discards its copy."""
    logger.info("Doctor %s logged out", session.doctor_id)
    return {"success": True}
