import re

Version = tuple[int, ...]

MAX_VERSION_PARTS = 4
_VERSION_RE = re.compile(r"^[vV]?(\d+(?:\.\d+){0,3})$")


def parse_version(text: str) -> Version | None:
    match = _VERSION_RE.match(text.strip())
    if match is None:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def format_version(version: Version) -> str:
    return ".".join(str(part) for part in version)


def validate_version(version: Version) -> Version:
    if not 1 <= len(version) <= MAX_VERSION_PARTS:
        raise ValueError(f"version must have between 1 and {MAX_VERSION_PARTS} components, got {len(version)}")
    if any(part < 0 for part in version):
        raise ValueError(f"version components must be non-negative: {format_version(version)}")
    return version


def compare_floors(a: Version | None, b: Version | None) -> int:
    """Three-way compare of lower bounds; a missing floor is the loosest (lowest) one."""
    if a is None:
        return 0 if b is None else -1
    if b is None:
        return 1
    return (a > b) - (a < b)


def compare_ceilings(a: Version | None, b: Version | None) -> int:
    """Three-way compare of upper bounds; a missing ceiling is the loosest (highest) one."""
    if a is None:
        return 0 if b is None else 1
    if b is None:
        return -1
    return (a > b) - (a < b)
