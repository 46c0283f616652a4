"""Territory outline compositing."""

from .compositor import (
    BoundarySource,
    BoundaryUnionStrategy,
    CompositeStrategy,
    ConvexHullStrategy,
    composite_boundaries,
    composite_boundary,
    in_region_group,
)

__all__ = [
    "BoundarySource",
    "BoundaryUnionStrategy",
    "CompositeStrategy",
    "ConvexHullStrategy",
    "composite_boundaries",
    "composite_boundary",
    "in_region_group",
]
