"""Profile hierarchy construction, folds and derived views."""

from .fold import FanOut, Path, fold, fold_async, visit, visit_async
from .graph import HierarchyGraph, HierarchyNode, NodeRecord
from .models import ProfileEntry
from .rendering import render_hierarchy, render_view
from .requirements import CapabilityRequirements, Diagnostic, SatisfactionResult
from .views import DerivedNode, filtered_view, simplified_view

__all__ = [
    "CapabilityRequirements",
    "DerivedNode",
    "Diagnostic",
    "FanOut",
    "HierarchyGraph",
    "HierarchyNode",
    "NodeRecord",
    "Path",
    "ProfileEntry",
    "SatisfactionResult",
    "filtered_view",
    "fold",
    "fold_async",
    "render_hierarchy",
    "render_view",
    "simplified_view",
    "visit",
    "visit_async",
]
