"""Creation of new nodes dropped onto the canvas from the palette."""

from typing import Any, Mapping

from rednox.codec.sanitize import coerce_ui, safe_value, sanitize_property
from rednox.config import CodecSettings, get_settings
from rednox.models.editable import EditableNode, NodeData, Position
from rednox.models.node_type import NodeTypeDescriptor
from rednox.utils.identifiers import generate_node_id


def _descriptor_dict(type_descriptor: Any) -> dict[str, Any]:
    if isinstance(type_descriptor, NodeTypeDescriptor):
        return type_descriptor.model_dump(exclude_none=True)
    if isinstance(type_descriptor, Mapping):
        return dict(type_descriptor)
    return {}


def _port(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return 1


def _position(position: Any, settings: CodecSettings) -> Position:
    if position is None:
        return Position(x=settings.default_node_x, y=settings.default_node_y)
    if isinstance(position, Position):
        return position
    if isinstance(position, Mapping):
        return Position(x=position["x"], y=position["y"])
    x, y = position
    return Position(x=x, y=y)


def create_node(
    type_descriptor: NodeTypeDescriptor | Mapping[str, Any] | None,
    position: Position | Mapping[str, float] | tuple[float, float] | None = None,
    settings: CodecSettings | None = None,
) -> EditableNode:
    """Build a fully initialized editor node for a node type.

    The node gets a fresh id on every call. Uniqueness against an existing
    flow is not checked. A descriptor without a ``type`` still yields a node
    (with ``type=None``); validating it is left to conversion and storage.

    Values in the descriptor's ``defaults`` are merged last, so they may
    replace the seeded ``name``, ``label``, ports or ``ui``.
    """
    settings = settings or get_settings()
    descriptor = _descriptor_dict(type_descriptor)
    node_id = generate_node_id()

    node_type = descriptor.get("type")
    raw_ui = descriptor.get("ui") or {"icon": settings.default_icon, "color": settings.default_color}
    ui = coerce_ui(raw_ui, settings)

    seeded: dict[str, Any] = {
        "name": "",
        "label": ui.palette_label or (node_type if node_type is not None else ""),
        "inputs": _port(descriptor.get("inputs")),
        "outputs": _port(descriptor.get("outputs")),
        "ui": ui,
    }
    properties: dict[str, Any] = {}

    defaults = descriptor.get("defaults")
    if isinstance(defaults, Mapping):
        for key, value in defaults.items():
            if key in ("name", "label"):
                seeded[key] = str(safe_value(value))
            elif key in ("inputs", "outputs"):
                seeded[key] = _port(value)
            elif key == "ui":
                seeded[key] = coerce_ui(value, settings)
            elif key in ("id", "type"):
                continue
            else:
                properties[key] = sanitize_property(value, settings)

    return EditableNode(
        id=node_id,
        position=_position(position, settings),
        data=NodeData(
            id=node_id,
            type=node_type if node_type is None else str(node_type),
            properties=properties,
            **seeded,
        ),
    )
