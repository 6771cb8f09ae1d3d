"""Administrative boundary lookups."""

from .boundary import GeoBoundaryFetcher

__all__ = ["GeoBoundaryFetcher"]
