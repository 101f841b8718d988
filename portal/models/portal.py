"""
Portal Models — Login, session and settings models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# =============================================================================
# AUTH
# =============================================================================


class LoginRequest(BaseModel):
    """Credentials posted by the login screen."""

    email: str = Field("", max_length=320)
    password: str = Field("", max_length=256)


class DoctorProfile(BaseModel):
    """Logged-in doctor as shown in the header and settings."""

    doctor_id: str = Field(alias="doctorId")
    email: str
    name: str

    class Config:
        populate_by_name = True


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    doctor: DoctorProfile


class DoctorSession(BaseModel):
    """Explicit session context passed into contact loading."""

    doctor_id: str
    email: str
    name: str

    class Config:
        frozen = True

    def profile(self) -> DoctorProfile:
        return DoctorProfile(doctor_id=self.doctor_id, email=self.email, name=self.name)


# =============================================================================
# SETTINGS
# =============================================================================


class NotificationPreferences(BaseModel):
    """Notification toggles on the settings view."""

    email: bool = True
    push: bool = True
    sms: bool = False
