import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .graph import HierarchyNode
from .models import ProfileEntry

logger = logging.getLogger(__name__)


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    severity: Literal["error", "warning", "info"] = "error"


class SatisfactionResult(BaseModel):
    """Verdict of checking one profile against a set of requirements."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok", "unsupported_types", "compilation_errors"]
    unsupported_types: tuple[str, ...] = Field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    @classmethod
    def ok(cls) -> "SatisfactionResult":
        return cls(status="ok")

    @classmethod
    def unsupported(cls, types: Iterable[str]) -> "SatisfactionResult":
        return cls(status="unsupported_types", unsupported_types=tuple(types))

    @classmethod
    def compilation_errors(cls, diagnostics: Iterable[Diagnostic]) -> "SatisfactionResult":
        return cls(status="compilation_errors", diagnostics=tuple(diagnostics))

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    def reason(self) -> str:
        if self.status == "unsupported_types":
            return "missing: " + ", ".join(self.unsupported_types)
        if self.status == "compilation_errors":
            return "errors: " + "; ".join(f"{diag.code} {diag.message}" for diag in self.diagnostics)
        return "ok"


Compiler = Callable[[ProfileEntry], Awaitable[Sequence[Diagnostic]]]


class CapabilityRequirements:
    """What a library needs from a profile: capability names, plus an optional compile check.

    ``compiler`` is the external collaborator that builds the library against a
    profile; it reports diagnostics instead of raising for compile failures.
    """

    def __init__(self, required_names: Iterable[str], compiler: Compiler | None = None) -> None:
        self.required_names: tuple[str, ...] = tuple(
            sorted({name.strip() for name in required_names if name and name.strip()})
        )
        self.compiler = compiler

    async def satisfied_by(self, node: HierarchyNode) -> SatisfactionResult:
        entry = node.entry
        if entry is None:
            raise ValueError("the grouping node has no profile to check")

        missing = [name for name in self.required_names if name not in entry.capability_names]
        if missing:
            logger.debug("%s is missing %d required capabilities", entry, len(missing))
            return SatisfactionResult.unsupported(missing)

        if self.compiler is not None:
            diagnostics = await self.compiler(entry)
            errors = [diagnostic for diagnostic in diagnostics if diagnostic.severity == "error"]
            if errors:
                return SatisfactionResult.compilation_errors(errors)

        return SatisfactionResult.ok()

    async def __call__(self, node: HierarchyNode) -> SatisfactionResult:
        return await self.satisfied_by(node)
