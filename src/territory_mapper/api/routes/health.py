"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...data.workspace import get_workspace
from ...db.supabase import TERRITORIES_TABLE, get_supabase_client

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check whether the durable territory store is reachable."""
    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set TMAP_SUPABASE_URL and TMAP_SUPABASE_KEY environment variables.",
        }

    try:
        response = supabase.table(TERRITORIES_TABLE).select("id", count="exact").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "territories_count": response.count or 0,
    }


@router.get("/health/workspace", status_code=status.HTTP_200_OK)
def check_workspace() -> dict:
    """Report what the in-memory workspace has loaded."""
    workspace = get_workspace()
    boundaries = workspace.boundaries
    return {
        "postal_areas": len(workspace.postal_areas),
        "territories": len(workspace.registry),
        "companies": len(workspace.companies),
        "compliance_zones": len(workspace.compliance_zones),
        "boundaries_loaded": boundaries.loaded,
        "boundary_region": boundaries.loaded_region,
    }
