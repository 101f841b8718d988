"""
Test configuration: required env vars are set before any portal import.
"""

import os

# Set dummy env vars so Settings() doesn't fail during test collection.
# No test talks to a real document store; sources are faked or mocked.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("PORTAL_MODE", "live")
os.environ.setdefault("PORTAL_TIMEZONE", "UTC")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
