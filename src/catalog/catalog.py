import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from capsets import CapabilityDescriptor, CapabilitySet, IntersectionSet, parse_set
from hierarchy import ProfileEntry

from .models import ProfileManifestEntry

logger = logging.getLogger(__name__)


class ProfileCatalog:
    def __init__(self, manifest_path: Path) -> None:
        self.manifest_path = manifest_path
        self._entries: list[ProfileEntry] = []
        self._docs: dict[CapabilityDescriptor, ProfileManifestEntry] = {}
        self._by_descriptor: dict[CapabilityDescriptor, ProfileEntry] = {}
        self._load_manifest()

    def _load_manifest(self) -> None:
        with self.manifest_path.open("r", encoding="utf-8") as manifest_file:
            raw = yaml.safe_load(manifest_file) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"profile manifest must be a mapping: {self.manifest_path}")

        entries: list[ProfileEntry] = []
        docs: dict[CapabilityDescriptor, ProfileManifestEntry] = {}
        for index, item in enumerate(raw.get("profiles") or []):
            doc = self._item_to_doc(item, index)
            entry = self._doc_to_entry(doc, index)
            if entry.descriptor in docs:
                raise ValueError(f"profile #{index}: duplicate profile {entry.descriptor}")
            entries.append(entry)
            docs[entry.descriptor] = doc

        self._entries = entries
        self._docs = docs
        self._by_descriptor = {entry.descriptor: entry for entry in entries}
        logger.info("Loaded %d profiles from %s", len(entries), self.manifest_path)

    @staticmethod
    def _item_to_doc(item: Any, index: int) -> ProfileManifestEntry:
        if not isinstance(item, dict):
            raise ValueError(f"profile #{index}: expected a mapping, got {type(item).__name__}")
        try:
            return ProfileManifestEntry(
                name=str(item.get("name", "")),
                capabilities=[str(name) for name in item.get("capabilities") or []],
                supports=[str(text) for text in item.get("supports") or []],
                description=str(item.get("description") or ""),
            )
        except ValidationError as exc:
            raise ValueError(f"profile #{index}: {exc}") from exc

    @staticmethod
    def _doc_to_entry(doc: ProfileManifestEntry, index: int) -> ProfileEntry:
        descriptor = CapabilityDescriptor.try_parse(doc.name)
        if descriptor is None:
            raise ValueError(f"profile #{index}: malformed profile name {doc.name!r}")

        declared: list[CapabilitySet] = []
        for text in doc.supports:
            capability_set = parse_set(text)
            if capability_set is None:
                raise ValueError(f"profile #{index}: malformed supported set {text!r}")
            declared.append(capability_set)

        declared_set: CapabilitySet | None = None
        if len(declared) == 1:
            declared_set = declared[0]
        elif declared:
            declared_set = IntersectionSet(members=tuple(declared))

        return ProfileEntry(
            descriptor=descriptor,
            capability_names=frozenset(doc.capabilities),
            declared_set=declared_set,
        )

    def entries(self) -> list[ProfileEntry]:
        return list(self._entries)

    def read(self, descriptor_text: str) -> ProfileManifestEntry | None:
        descriptor = CapabilityDescriptor.try_parse(descriptor_text)
        if descriptor is None:
            return None
        return self._docs.get(descriptor)

    def entry(self, descriptor_text: str) -> ProfileEntry | None:
        descriptor = CapabilityDescriptor.try_parse(descriptor_text)
        if descriptor is None:
            return None
        return self._by_descriptor.get(descriptor)

    def __len__(self) -> int:
        return len(self._entries)
