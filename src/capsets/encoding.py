import logging
from typing import assert_never

from pydantic import ValidationError

from .descriptor import CapabilityDescriptor
from .sets import CapabilitySet, FilterSet, IntersectionSet, PlatformFilter, UnitSet
from .versions import Version, format_version, parse_version

logger = logging.getLogger(__name__)

# Intersections are written flat: nested members are spliced into the outer list
# and `empty_hint` is not written, so parsing yields a flat, hint-free intersection.
INTERSECTION_SEPARATOR = " & "
EMPTY_INTERSECTION = "{}"
ARCHITECTURE_SEPARATOR = "|"

_TEXT_KEYS = {
    "profile": "profile",
    "displayname": "display_name",
    "family": "family",
    "minimumversiondisplayname": "min_version_display_name",
}
_VERSION_KEYS = {
    "version": "min_version",
    "minimumversion": "min_version",
    "minimumtoolversion": "min_tool_version",
    "maximumtoolversion": "max_tool_version",
}


def format_set(capability_set: CapabilitySet) -> str:
    if isinstance(capability_set, UnitSet):
        return str(capability_set.descriptor)
    if isinstance(capability_set, FilterSet):
        return _format_filter(capability_set)
    if isinstance(capability_set, IntersectionSet):
        if not capability_set.members:
            return EMPTY_INTERSECTION
        return INTERSECTION_SEPARATOR.join(format_set(member) for member in capability_set.members)
    assert_never(capability_set)


def parse_set(text: str) -> CapabilitySet | None:
    """Parse any set encoding; returns ``None`` when the text is not one."""
    stripped = text.strip()
    if stripped == EMPTY_INTERSECTION:
        return IntersectionSet()
    if "&" in stripped:
        members: list[CapabilitySet] = []
        for piece in stripped.split("&"):
            member = _parse_single(piece)
            if member is None:
                return None
            members.append(member)
        return IntersectionSet(members=tuple(members))
    return _parse_single(stripped)


def try_parse_unit(text: str) -> UnitSet | None:
    # "+" marks a filter floor, "*" a filter pattern
    if "+" in text or "*" in text:
        return None
    descriptor = CapabilityDescriptor.try_parse(text)
    if descriptor is None:
        return None
    return UnitSet(descriptor=descriptor)


def try_parse_filter(text: str) -> FilterSet | None:
    parts = [part.strip() for part in text.split(",") if part.strip()]
    if not parts or "=" in parts[0]:
        return None

    fields: dict[str, object] = {"identifier": parts[0]}
    platform: dict[str, object] = {}
    for part in parts[1:]:
        key, sep, value = part.partition("=")
        if not sep:
            return None
        key = key.strip().casefold()
        value = value.strip()

        if key in _TEXT_KEYS:
            fields[_TEXT_KEYS[key]] = value
        elif key in _VERSION_KEYS:
            version = _parse_bound(value)
            if version is None:
                return None
            fields[_VERSION_KEYS[key]] = version
        elif key == "platformarchitectures":
            fields["platform_architectures"] = tuple(value.split(ARCHITECTURE_SEPARATOR))
        elif key == "platformidentifier":
            platform["identifier"] = value
        elif key == "platformminimumversion":
            version = _parse_bound(value)
            if version is None:
                return None
            platform["min_version"] = version
        else:
            logger.debug("Ignoring unknown filter key: %s", key)

    if platform:
        fields["platform"] = PlatformFilter(**platform)

    try:
        return FilterSet(**fields)
    except ValidationError as exc:
        logger.debug("Rejected filter text %r: %s", text, exc)
        return None


def _parse_single(text: str) -> CapabilitySet | None:
    text = text.strip()
    if not text:
        return None
    if text == EMPTY_INTERSECTION:
        return IntersectionSet()
    return try_parse_unit(text) or try_parse_filter(text)


def _parse_bound(value: str) -> Version | None:
    return parse_version(value.rstrip("+"))


def _format_filter(filter_set: FilterSet) -> str:
    parts = [filter_set.identifier]
    if filter_set.min_version is not None:
        parts.append(f"Version=v{format_version(filter_set.min_version)}+")
    if filter_set.profile:
        parts.append(f"Profile={filter_set.profile}")
    if filter_set.display_name:
        parts.append(f"DisplayName={filter_set.display_name}")
    if filter_set.family:
        parts.append(f"Family={filter_set.family}")
    if filter_set.min_version_display_name:
        parts.append(f"MinimumVersionDisplayName={filter_set.min_version_display_name}")
    if filter_set.min_tool_version is not None:
        parts.append(f"MinimumToolVersion={format_version(filter_set.min_tool_version)}")
    if filter_set.max_tool_version is not None:
        parts.append(f"MaximumToolVersion={format_version(filter_set.max_tool_version)}")
    if filter_set.platform_architectures:
        parts.append(f"PlatformArchitectures={ARCHITECTURE_SEPARATOR.join(filter_set.platform_architectures)}")
    if filter_set.platform is not None:
        if filter_set.platform.identifier:
            parts.append(f"PlatformIdentifier={filter_set.platform.identifier}")
        if filter_set.platform.min_version is not None:
            parts.append(f"PlatformMinimumVersion={format_version(filter_set.platform.min_version)}")
    return ",".join(parts)
