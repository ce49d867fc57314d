from pydantic import BaseModel, ConfigDict

from capsets import CapabilityDescriptor, CapabilitySet, Tristate, UnitSet


class ProfileEntry(BaseModel):
    """A platform profile fed into hierarchy construction."""

    model_config = ConfigDict(frozen=True)

    descriptor: CapabilityDescriptor
    capability_names: frozenset[str] = frozenset()
    declared_set: CapabilitySet | None = None

    def supported_set(self) -> CapabilitySet:
        if self.declared_set is not None:
            return self.declared_set
        return UnitSet(descriptor=self.descriptor)

    def is_superset_of(self, other: "ProfileEntry", other_names: frozenset[str] | None = None) -> Tristate:
        """Whether this profile can stand in for ``other``.

        Declared sets decide when both profiles declare one. Otherwise the answer
        falls back to capability names: declaring every name ``other`` declares
        (``other_names`` when given, e.g. a whole subtree) is taken as support.
        That fallback is a heuristic, so it only ever answers ``True`` or ``None``.
        """
        if self.declared_set is not None and other.declared_set is not None:
            decision = self.declared_set.contains_set(other.declared_set)
            if decision is not None:
                return decision

        names = other.capability_names if other_names is None else other_names
        if names and names <= self.capability_names:
            return True
        return None

    def __str__(self) -> str:
        return str(self.descriptor)
