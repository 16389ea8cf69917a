"""Wire-format node record, the shape flows are persisted in."""

from typing import Any

from pydantic import BaseModel


# keys with a fixed meaning in a wire record; everything else is a custom property
STRUCTURAL_KEYS = frozenset({"id", "type", "name", "x", "y", "wires"})


class NodeRecord(BaseModel):
    """A node as the backend flow engine stores it.

    ``wires`` holds one slot per output port, each slot listing the ids of
    the downstream nodes fed by that port. Node-type specific configuration
    is carried as extra fields.
    """

    model_config = {"extra": "allow"}

    id: str
    type: str | None = None
    name: str = ""
    x: int | None = None
    y: int | None = None
    wires: list[list[str]] = []

    @property
    def properties(self) -> dict[str, Any]:
        """Custom (node-type specific) properties of this record."""
        return dict(self.model_extra or {})

    def edge_triples(self) -> list[tuple[str, int, str]]:
        """All (source, output index, target) triples this record wires."""
        return [
            (self.id, index, target)
            for index, slot in enumerate(self.wires)
            for target in slot
        ]
