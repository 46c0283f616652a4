"""Route group exports."""

from . import companies, compliance, health, territories

__all__ = ["territories", "companies", "compliance", "health"]
