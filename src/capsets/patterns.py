import re
from functools import lru_cache

PLACEHOLDER_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
WILDCARD = "*"


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    body = ".*".join(re.escape(literal) for literal in pattern.split(WILDCARD))
    return re.compile(f"^{body}$", re.IGNORECASE | re.DOTALL)


def glob_match(value: str, pattern: str) -> bool:
    return glob_to_regex(pattern).match(value) is not None


def strip_wildcards(pattern: str) -> str:
    return pattern.replace(WILDCARD, "")


def expand_wildcards(pattern: str, filler: str = PLACEHOLDER_ALPHABET) -> str:
    return pattern.replace(WILDCARD, filler)


def pattern_narrower(narrow: str, wide: str) -> bool:
    """Conservative check that every string matched by ``narrow`` is matched by ``wide``.

    Both the placeholder expansion and the literal-only form of ``narrow`` must match ``wide``.
    """
    return glob_match(expand_wildcards(narrow), wide) and glob_match(strip_wildcards(narrow), wide)


def patterns_overlap(a: str, b: str) -> bool:
    return glob_match(a, b) or glob_match(b, a) or strip_wildcards(a).casefold() == strip_wildcards(b).casefold()
