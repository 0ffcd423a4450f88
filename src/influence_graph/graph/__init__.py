"""Graph construction: bounded breadth-first expansion over the artist store."""

from .builder import GraphBuilder, Neighbor, clamp_depth

__all__ = ["GraphBuilder", "Neighbor", "clamp_depth"]
