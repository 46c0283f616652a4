"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TMAP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Territory Mapper API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    postcode_file: Path = Field(
        default=Path("data/australian_postcodes.csv"),
        description="Reference postcode dataset with centroids and localities.",
    )
    boundary_dir: Path = Field(
        default=Path("data/postcode-boundaries"),
        description="Directory holding one <STATE>.geojson boundary file per state.",
    )
    company_file: Path = Field(
        default=Path("data/hubspot_companies.csv"),
        description="Flat company export used when the CRM-backed store is unavailable.",
    )
    state_file: Path = Field(
        default=Path("data/territory_state.json"),
        description="Local JSON snapshot of territories and postcode assignments.",
    )
    boundary_region: Optional[str] = Field(
        default=None,
        description="State whose boundary file is loaded at startup (None keeps the convex hull fallback).",
    )
    hull_buffer_km: float = Field(
        default=2.0,
        ge=0.0,
        description="Buffer applied to convex hull territory outlines when no boundary data is loaded.",
    )
    hubspot_account_id: str = Field(default="49213690", description="Portal id used to build company record links.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "postcode_file", "boundary_dir", "company_file", "state_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("boundary_region", mode="before")
    @classmethod
    def _normalize_region(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        normalized = str(value).strip().upper()
        if not normalized or normalized == "ALL":
            return None
        return normalized

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
