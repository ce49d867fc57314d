"""Process-level helpers shared by the service."""

from .cache import HierarchyCache

__all__ = ["HierarchyCache"]
