import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .versions import Version, format_version, parse_version, validate_version

# separators and filter markers of the set text form
_RESERVED_TEXT = (",", "&", "=", "+", "*")

_DESCRIPTOR_RE = re.compile(
    r"^(?P<identifier>[^,]+),\s*Version=(?P<version>[vV]?\d+(?:\.\d+){0,3})(?:,\s*Profile=(?P<profile>[^,]*))?$",
    re.IGNORECASE,
)


class CapabilityDescriptor(BaseModel):
    """One concrete platform profile: identifier, version and optional profile name.

    Identifier and profile compare case-insensitively, so ``.NETFramework`` and
    ``.netframework`` name the same platform.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(min_length=1)
    version: Version
    profile: str = ""

    @field_validator("identifier", "profile")
    @classmethod
    def _text_encodable(cls, value: str) -> str:
        if any(reserved in value for reserved in _RESERVED_TEXT):
            raise ValueError(f"must not contain any of {', '.join(_RESERVED_TEXT)}: {value!r}")
        return value.strip()

    @field_validator("identifier")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("identifier must be non-blank")
        return value

    @field_validator("version")
    @classmethod
    def _version_in_range(cls, value: Version) -> Version:
        return validate_version(value)

    @property
    def major(self) -> int:
        return self.version[0]

    @property
    def key(self) -> tuple[str, Version, str]:
        return (self.identifier.casefold(), self.version, self.profile.casefold())

    def same_line(self, other: "CapabilityDescriptor") -> bool:
        """True when both share identifier, profile and major version."""
        return (
            self.identifier.casefold() == other.identifier.casefold()
            and self.profile.casefold() == other.profile.casefold()
            and self.major == other.major
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CapabilityDescriptor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        text = f"{self.identifier},Version=v{format_version(self.version)}"
        if self.profile:
            text += f",Profile={self.profile}"
        return text

    @classmethod
    def try_parse(cls, text: str) -> "CapabilityDescriptor | None":
        match = _DESCRIPTOR_RE.match(text.strip())
        if match is None:
            return None
        version = parse_version(match.group("version"))
        if version is None:
            return None
        try:
            return cls(
                identifier=match.group("identifier"),
                version=version,
                profile=match.group("profile") or "",
            )
        except ValidationError:
            return None

    @classmethod
    def parse(cls, text: str) -> "CapabilityDescriptor":
        descriptor = cls.try_parse(text)
        if descriptor is None:
            raise ValueError(f"malformed capability descriptor: {text!r}")
        return descriptor
