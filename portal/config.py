"""
Doctor Portal Configuration

All environment variables and settings for the doctor portal API.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # APP
    # ==========================================================================
    app_name: str = "Doctor Portal"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # MODE
    # ==========================================================================
    # demo serves fixed illustrative data; live never fabricates
    portal_mode: Literal["live", "demo"] = "live"
    contact_backend: Literal["firestore", "supabase"] = "firestore"
    patient_type_policy: Literal["explicit", "recency"] = "explicit"
    portal_timezone: str = "UTC"  # IANA name used for "today" and week buckets

    # ==========================================================================
    # FIRESTORE (REST document list)
    # ==========================================================================
    firestore_base_url: str = (
        "https://firestore.googleapis.com/v1/projects/dutu-a3d9e"
        "/databases/(default)/documents"
    )
    firestore_collection: str = "contacts"
    firestore_api_key: str | None = None
    firestore_page_size: int = 300
    fetch_timeout_seconds: float = 10.0

    # ==========================================================================
    # SUPABASE (managed SDK variant)
    # ==========================================================================
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_contacts_table: str = "contacts"

    # ==========================================================================
    # AUTH
    # ==========================================================================
    portal_login_email: str = "doctor@clinic.com"
    portal_login_password: str = "password123"
    portal_doctor_id: str = "demo-doctor-001"
    portal_doctor_name: str = "Dr. John Smith"
    jwt_secret: str
    jwt_ttl_minutes: int = 720
    login_rate_limit_rpm: int = 10
    scope_contacts_to_doctor: bool = False

    # ==========================================================================
    # CORS
    # ==========================================================================
    cors_origins: str = "http://localhost:5173,http://localhost:8080"

    # ==========================================================================
    # SERVER
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
