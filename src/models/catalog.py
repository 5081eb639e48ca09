"""
Class catalog: fixed ordered table from 1-based class index to label/color.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from .errors import UnknownClass


@dataclass(frozen=True)
class ClassEntry:
    """One class catalog row."""
    name: str
    color: str
    id: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClassEntry":
        return cls(name=str(d["name"]), color=str(d.get("color", "red")), id=int(d.get("id", 0)))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "color": self.color, "id": self.id}


class ClassCatalog:
    """
    Read-only class table.

    Lookups are positional: class index ``k`` resolves to the ``k - 1``-th row,
    whatever the row's own ``id`` says.
    """

    def __init__(self, entries: Iterable[ClassEntry]):
        self._entries: Tuple[ClassEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ClassEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ClassEntry:
        return self._entries[index]

    def lookup(self, class_id: int) -> ClassEntry:
        """Resolve a 1-based class index; raises UnknownClass when out of range."""
        if class_id < 1 or class_id > len(self._entries):
            raise UnknownClass(class_id, len(self._entries))
        return self._entries[class_id - 1]

    @classmethod
    def from_list(cls, rows: List[Dict[str, Any]]) -> "ClassCatalog":
        """Adapter: create from the `detection.classes` list in config.yaml."""
        return cls(ClassEntry.from_dict(r) for r in rows)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]

    def __repr__(self) -> str:
        return f"ClassCatalog({[e.name for e in self._entries]})"


DEFAULT_CLASSES: List[Dict[str, Any]] = [
    {"name": "MaskWhite", "id": 1, "color": "red"},
    {"name": "MaskBlue", "id": 2, "color": "blue"},
    {"name": "NoMask", "id": 2, "color": "black"},
]
