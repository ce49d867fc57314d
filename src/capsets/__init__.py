"""Capability descriptors and the three-valued capability set algebra."""

from .descriptor import CapabilityDescriptor
from .encoding import format_set, parse_set, try_parse_filter, try_parse_unit
from .sets import CapabilitySet, FilterSet, IntersectionSet, PlatformFilter, Tristate, UnitSet
from .versions import Version, format_version, parse_version

__all__ = [
    "CapabilityDescriptor",
    "CapabilitySet",
    "FilterSet",
    "IntersectionSet",
    "PlatformFilter",
    "Tristate",
    "UnitSet",
    "Version",
    "format_set",
    "format_version",
    "parse_set",
    "parse_version",
    "try_parse_filter",
    "try_parse_unit",
]
