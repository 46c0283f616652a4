"""Supabase client for the territory store."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

TERRITORIES_TABLE = "territories"
ASSIGNMENTS_TABLE = "postcode_assignments"
COMPLIANCE_ZONES_TABLE = "compliance_zones"
COMPANIES_TABLE = "companies"


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.info("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None
