"""Capability sets queried with three-valued logic.

Every set question answers ``True``, ``False`` or ``None``; ``None`` means the
answer cannot be decided from the information carried by the sets, and callers
must treat it as "no proof either way" rather than guessing.
"""

from typing import Literal, Union, assert_never

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .descriptor import CapabilityDescriptor
from .patterns import glob_match, pattern_narrower, patterns_overlap
from .versions import Version, compare_ceilings, compare_floors, validate_version

Tristate = bool | None

_RESERVED_TEXT = (",", "&", "=")


class UnitSet(BaseModel):
    """Every descriptor of the same identifier, profile and major version, at or above ``descriptor.version``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unit"] = "unit"
    descriptor: CapabilityDescriptor

    def contains(self, item: CapabilityDescriptor) -> bool:
        return self.descriptor.same_line(item) and item.version >= self.descriptor.version

    def contains_set(self, other: "CapabilitySet") -> Tristate:
        if other.is_empty() is True:
            return True
        if isinstance(other, UnitSet):
            return self.contains(other.descriptor)
        if isinstance(other, FilterSet):
            # a pattern generally admits more than one point
            return False
        if isinstance(other, IntersectionSet):
            return self._contains_intersection(other)
        assert_never(other)

    def _contains_intersection(self, other: "IntersectionSet") -> Tristate:
        if any(self.contains_set(member) is True for member in other.members):
            return True
        if other.is_empty() is False and any(self.intersects(member) is False for member in other.members):
            return False
        return None

    def intersects(self, other: "CapabilitySet") -> Tristate:
        if other.is_empty() is True:
            return False
        if isinstance(other, UnitSet):
            return self.contains(other.descriptor) or other.contains(self.descriptor)
        if isinstance(other, FilterSet):
            return other.admits_line_of(self.descriptor)
        if isinstance(other, IntersectionSet):
            return None
        assert_never(other)

    def is_empty(self) -> Tristate:
        return False

    def __str__(self) -> str:
        return str(self.descriptor)


class PlatformFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = ""
    min_version: Version | None = None

    @field_validator("identifier")
    @classmethod
    def _text_encodable(cls, value: str) -> str:
        if any(reserved in value for reserved in _RESERVED_TEXT):
            raise ValueError(f"must not contain any of {', '.join(_RESERVED_TEXT)}: {value!r}")
        return value.strip()

    @field_validator("min_version")
    @classmethod
    def _version_in_range(cls, value: Version | None) -> Version | None:
        return None if value is None else validate_version(value)


class FilterSet(BaseModel):
    """Descriptors matched by glob patterns over identifier and profile plus optional version bounds.

    The conforming descriptors cannot be enumerated, so subset and intersection
    answers are structural and conservative.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["filter"] = "filter"
    identifier: str = Field(min_length=1)
    profile: str = ""
    min_version: Version | None = None
    min_tool_version: Version | None = None
    max_tool_version: Version | None = None
    platform_architectures: tuple[str, ...] = ()
    display_name: str = ""
    family: str = ""
    min_version_display_name: str = ""
    platform: PlatformFilter | None = None

    @field_validator("min_version", "min_tool_version", "max_tool_version")
    @classmethod
    def _version_in_range(cls, value: Version | None) -> Version | None:
        return None if value is None else validate_version(value)

    @field_validator("identifier", "profile", "display_name", "family", "min_version_display_name")
    @classmethod
    def _text_encodable(cls, value: str) -> str:
        if any(reserved in value for reserved in _RESERVED_TEXT):
            raise ValueError(f"must not contain any of {', '.join(_RESERVED_TEXT)}: {value!r}")
        return value.strip()

    @field_validator("identifier", mode="after")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("identifier pattern must be non-blank")
        return value

    @field_validator("platform_architectures")
    @classmethod
    def _architectures_trimmed(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any("|" in arch or "," in arch for arch in value):
            raise ValueError("platform architectures must not contain '|' or ','")
        return tuple(arch.strip() for arch in value if arch.strip())

    def contains(self, item: CapabilityDescriptor) -> bool:
        return (
            glob_match(item.identifier, self.identifier)
            and (self.min_version is None or item.version >= self.min_version)
            and glob_match(item.profile, self.profile)
        )

    def admits_line_of(self, item: CapabilityDescriptor) -> bool:
        """Looser membership used for intersection: only the major version is held against the floor."""
        return (
            glob_match(item.identifier, self.identifier)
            and (self.min_version is None or item.major >= self.min_version[0])
            and glob_match(item.profile, self.profile)
        )

    def contains_set(self, other: "CapabilitySet") -> Tristate:
        if other.is_empty() is True:
            return True
        if isinstance(other, UnitSet):
            return self.contains(other.descriptor)
        if isinstance(other, FilterSet):
            return self._contains_filter(other)
        if isinstance(other, IntersectionSet):
            return None
        assert_never(other)

    def _contains_filter(self, other: "FilterSet") -> bool:
        own_architectures = {arch.casefold() for arch in self.platform_architectures}
        return (
            pattern_narrower(other.identifier, self.identifier)
            and pattern_narrower(other.profile, self.profile)
            and compare_floors(other.min_version, self.min_version) >= 0
            and compare_floors(other.min_tool_version, self.min_tool_version) >= 0
            and compare_ceilings(other.max_tool_version, self.max_tool_version) <= 0
            and all(arch.casefold() in own_architectures for arch in other.platform_architectures)
        )

    def intersects(self, other: "CapabilitySet") -> Tristate:
        if other.is_empty() is True:
            return False
        if isinstance(other, UnitSet):
            return self.admits_line_of(other.descriptor)
        if isinstance(other, FilterSet):
            return patterns_overlap(self.identifier, other.identifier) and patterns_overlap(
                self.profile, other.profile
            )
        if isinstance(other, IntersectionSet):
            return None
        assert_never(other)

    def is_empty(self) -> Tristate:
        return False

    def __str__(self) -> str:
        from .encoding import format_set

        return format_set(self)


class IntersectionSet(BaseModel):
    """Logical AND of member sets.

    Emptiness is decided once at construction: provably empty when there are no
    members or every member is empty, otherwise the lone member's answer or the
    caller's hint. Two disjoint non-empty filters are not detected as empty.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["intersection"] = "intersection"
    members: tuple["CapabilitySet", ...] = ()
    empty_hint: bool | None = None

    _is_empty: Tristate = PrivateAttr(default=None)

    def model_post_init(self, __context: object) -> None:
        if not self.members or all(member.is_empty() is True for member in self.members):
            self._is_empty = True
        elif len(self.members) == 1 and self.members[0].is_empty() is not None:
            self._is_empty = self.members[0].is_empty()
        else:
            self._is_empty = self.empty_hint

    def contains(self, item: CapabilityDescriptor) -> bool:
        # the empty intersection holds nothing
        return bool(self.members) and all(member.contains(item) for member in self.members)

    def contains_set(self, other: "CapabilitySet") -> Tristate:
        if other.is_empty() is True:
            return True
        if isinstance(other, (UnitSet, FilterSet)):
            return None
        if isinstance(other, IntersectionSet):
            return self._contains_intersection(other)
        assert_never(other)

    def _contains_intersection(self, other: "IntersectionSet") -> Tristate:
        # each of our members contains at least one of theirs
        if all(any(own.contains_set(theirs) is True for theirs in other.members) for own in self.members):
            return True
        # one of our members is disjoint from one of theirs, and theirs is not empty
        if other.is_empty() is False and any(
            any(own.intersects(theirs) is False for theirs in other.members) for own in self.members
        ):
            return False
        return None

    def intersects(self, other: "CapabilitySet") -> Tristate:
        if self.is_empty() is True or other.is_empty() is True:
            return False
        return None

    def is_empty(self) -> Tristate:
        return self._is_empty

    def __str__(self) -> str:
        from .encoding import format_set

        return format_set(self)


CapabilitySet = Union[UnitSet, FilterSet, IntersectionSet]

IntersectionSet.model_rebuild()
