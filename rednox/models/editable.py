"""Editor-facing node/edge list format.

The visual editor works on explicit nodes with a nested position and
explicit edges carrying named ports, instead of the ``wires`` adjacency
lists of the persisted format.
"""

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rednox.models.node_type import NodeUI


OUTPUT_HANDLE_PREFIX = "output-"
DEFAULT_TARGET_HANDLE = "input-0"
JSON_SIDECAR_SUFFIX = "_json"

_OUTPUT_HANDLE_RE = re.compile(r"^output-(\d+)$")


def output_handle(index: int) -> str:
    return f"{OUTPUT_HANDLE_PREFIX}{index}"


def parse_output_handle(handle: Any) -> int | None:
    """Output index of an ``output-N`` handle, or None if malformed."""
    if not isinstance(handle, str):
        return None
    match = _OUTPUT_HANDLE_RE.match(handle)
    return int(match.group(1)) if match else None


class Position(BaseModel):
    x: float
    y: float


class SanitizedObject(BaseModel):
    """An object-valued property made safe for display.

    ``display_value`` is what the editor shows; ``raw`` is the original
    object restored when the flow is saved. ``raw`` is None when the
    original could not be recovered.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    display_value: str
    raw: dict[str, Any] | None = None


def _is_sanitized_shape(value: Any) -> bool:
    if not isinstance(value, dict) or set(value) - {"display_value", "displayValue", "raw"}:
        return False
    return "display_value" in value or "displayValue" in value


class NodeData(BaseModel):
    """Everything the editor knows about a node besides its position."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    type: str | None = None
    name: str = ""
    label: str = ""
    inputs: int = 1
    outputs: int = 1
    ui: NodeUI = NodeUI()
    properties: dict[str, Any] = {}

    @model_validator(mode="before")
    @classmethod
    def collect_flat_properties(cls, data: Any) -> Any:
        """Accept the flat editor shape where custom keys sit beside structural ones."""
        if not isinstance(data, dict):
            return data
        known = set()
        for name, info in cls.model_fields.items():
            known.add(name)
            if info.alias:
                known.add(info.alias)
        extra = {k: v for k, v in data.items() if k not in known}
        if not extra:
            return data
        out = {k: v for k, v in data.items() if k in known}
        properties = dict(out.get("properties") or {})
        properties.update(extra)
        out["properties"] = properties
        return out

    @field_validator("properties", mode="before")
    @classmethod
    def restore_sanitized_objects(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {
            k: SanitizedObject.model_validate(v) if _is_sanitized_shape(v) else v
            for k, v in value.items()
        }

    def to_flat_dict(self) -> dict[str, Any]:
        """Flat editor shape; object properties expand into a placeholder and a ``_json`` sidecar."""
        flat: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "label": self.label,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "ui": self.ui.model_dump(by_alias=True),
        }
        for key, value in self.properties.items():
            if isinstance(value, SanitizedObject):
                flat[key] = value.display_value
                if value.raw is not None:
                    flat[key + JSON_SIDECAR_SUFFIX] = json.dumps(value.raw)
            else:
                flat[key] = value
        return flat


class EditableNode(BaseModel):
    id: str
    position: Position
    data: NodeData

    def to_flow_dict(self) -> dict[str, Any]:
        """The node as a React-Flow style presentation layer consumes it."""
        return {
            "id": self.id,
            "position": self.position.model_dump(),
            "data": self.data.to_flat_dict(),
        }


class EditableEdge(BaseModel):
    """A connection from one node's output port to another node's input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str = DEFAULT_TARGET_HANDLE

    @property
    def output_index(self) -> int | None:
        return parse_output_handle(self.source_handle)

    def triple(self) -> tuple[str, int | None, str]:
        return (self.source, self.output_index, self.target)
