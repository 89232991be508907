"""
Collection registry for generated sub-entity files.

Accumulates, per sub-entity kind, the files emitted during one model walk
so that the per-kind index files can be rendered once every item is known.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

from .core.model import EntityKind
from ..logging_config import get_logger

logger = get_logger(__name__)


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


@dataclass(frozen=True)
class CollectionEntry:
    """Summary of one emitted sub-entity file."""

    class_name: str
    file_name: str
    full_path: str

    def to_context(self) -> Dict[str, str]:
        return {
            "className": self.class_name,
            "fileName": self.file_name,
            "fullPath": self.full_path,
        }


@dataclass(frozen=True)
class KindCollection:
    """All entries registered for one kind."""

    kind: EntityKind
    folder: str
    items: List[CollectionEntry]

    def to_context(self) -> Dict[str, Any]:
        """Context for the sub-module index template."""
        return {
            "kind": self.kind.value,
            "folder": self.folder,
            "items": [item.to_context() for item in self.items],
        }


class CollectionRegistry:
    """Per-walk accumulator of generated items grouped by kind."""

    def __init__(self):
        """Initialize empty registry."""
        # Insertion order is first-registration order
        self._folders: Dict[EntityKind, str] = {}
        self._items: Dict[EntityKind, List[CollectionEntry]] = {}

    def register(self, kind: EntityKind, folder: str, entry: CollectionEntry):
        """
        Append an entry under a kind.

        Args:
            kind: Sub-entity kind
            folder: Output folder of the kind
            entry: Summary of the emitted file

        Raises:
            RegistryError: If the kind was registered with another folder
        """
        if kind not in self._folders:
            self._folders[kind] = folder
            self._items[kind] = []
            logger.debug("Registered new kind %s in folder %s", kind.value, folder)
        elif self._folders[kind] != folder:
            raise RegistryError(
                f"Kind '{kind.value}' already uses folder '{self._folders[kind]}', "
                f"cannot register '{entry.full_path}' in '{folder}'"
            )

        self._items[kind].append(entry)

    def kinds(self) -> Iterator[KindCollection]:
        """Yield every populated kind in first-registration order."""
        for kind, folder in self._folders.items():
            items = self._items[kind]
            if items:
                yield KindCollection(kind, folder, list(items))

    def items_for(self, kind: EntityKind) -> List[CollectionEntry]:
        return list(self._items.get(kind, []))

    def folder_for(self, kind: EntityKind) -> str:
        try:
            return self._folders[kind]
        except KeyError:
            raise RegistryError(f"Kind '{kind.value}' has not been registered") from None

    def total_items(self) -> int:
        return sum(len(items) for items in self._items.values())

    def __contains__(self, kind: object) -> bool:
        return bool(self._items.get(kind))

    def __len__(self) -> int:
        return sum(1 for items in self._items.values() if items)
