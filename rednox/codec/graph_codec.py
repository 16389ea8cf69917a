"""Conversion between the wire format and the editor's node/edge lists.

Wire format: every node carries ``wires``, one slot per output port, each
slot listing downstream node ids.

Editor format: nodes with a nested position and a ``data`` mapping, plus
an explicit edge per (source, output port, target).

Conversions are best effort. Malformed pieces are skipped and reported
through ``Diagnostics`` (or ``ConversionWarning``) so the rest of the flow
stays editable. The one hard failure is saving an edge from an output port
the node does not declare, which raises ``PortIndexError``.
"""

import math
from collections import defaultdict
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from rednox.codec.sanitize import coerce_ui, restore_properties, safe_value, sanitize_properties
from rednox.config import CodecSettings, get_settings
from rednox.diagnostics import Diagnostics, report
from rednox.errors import PortIndexError
from rednox.models.editable import (
    DEFAULT_TARGET_HANDLE,
    EditableEdge,
    EditableNode,
    NodeData,
    Position,
    output_handle,
)
from rednox.models.node_record import STRUCTURAL_KEYS, NodeRecord
from rednox.models.node_type import NodeTypeDescriptor, build_catalog
from rednox.utils.identifiers import edge_id


# wire keys that are resolved into NodeData fields instead of custom properties
_RESOLVED_KEYS = STRUCTURAL_KEYS | {"inputs", "outputs", "ui", "label"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grid_position(index: int, settings: CodecSettings | None = None) -> Position:
    """Fallback position of the index-th node of a flow without coordinates."""
    settings = settings or get_settings()
    column = index % settings.grid_columns
    row = index // settings.grid_columns
    return Position(
        x=settings.grid_origin_x + column * settings.grid_column_width,
        y=settings.grid_origin_y + row * settings.grid_row_height,
    )


def _port_count(declared: int | None, stored: Any) -> int:
    """Catalog value first, then the record's own value, then 1."""
    if declared is not None:
        return declared
    if isinstance(stored, int) and not isinstance(stored, bool) and stored >= 0:
        return stored
    return 1


def _record_dict(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, NodeRecord):
        return raw.model_dump()
    if isinstance(raw, Mapping):
        return dict(raw)
    return None


class _EdgeIds:
    """Hands out edge ids unique within one conversion."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def next(self, source: str, output_index: int, target: str) -> str:
        base = edge_id(source, output_index, target)
        candidate = base
        suffix = 1
        while candidate in self._seen:
            candidate = f"{base}-{suffix}"
            suffix += 1
        self._seen.add(candidate)
        return candidate


def _wire_edges(
    node_id: str,
    wires: Any,
    outputs: int,
    ids: _EdgeIds,
    diagnostics: Diagnostics | None,
) -> list[EditableEdge]:
    if wires is None:
        return []
    if not isinstance(wires, (list, tuple)):
        report(diagnostics, "wires_invalid", f"node {node_id!r} has non-list wires", node_id=node_id)
        return []

    edges: list[EditableEdge] = []
    for output_index, slot in enumerate(wires):
        if not isinstance(slot, (list, tuple)):
            report(
                diagnostics,
                "wire_slot_invalid",
                f"node {node_id!r} output {output_index} is not a list",
                node_id=node_id,
            )
            continue
        if output_index >= outputs:
            if slot:
                report(
                    diagnostics,
                    "wire_slot_truncated",
                    f"node {node_id!r} declares {outputs} outputs, "
                    f"dropping {len(slot)} wire(s) from output {output_index}",
                    node_id=node_id,
                )
            continue

        seen_targets: set[str] = set()
        for target in slot:
            if target is None or target == "":
                report(
                    diagnostics,
                    "wire_target_empty",
                    f"node {node_id!r} output {output_index} has an empty target",
                    node_id=node_id,
                )
                continue
            target_id = str(target)
            if target_id in seen_targets:
                report(
                    diagnostics,
                    "wire_duplicate",
                    f"node {node_id!r} output {output_index} wires {target_id!r} twice",
                    node_id=node_id,
                )
                continue
            seen_targets.add(target_id)
            edges.append(EditableEdge(
                id=ids.next(node_id, output_index, target_id),
                source=node_id,
                target=target_id,
                source_handle=output_handle(output_index),
                target_handle=DEFAULT_TARGET_HANDLE,
            ))
    return edges


def to_editable(
    node_records: Any,
    catalog: Any = None,
    diagnostics: Diagnostics | None = None,
    settings: CodecSettings | None = None,
) -> tuple[list[EditableNode], list[EditableEdge]]:
    """Convert wire-format records into editor nodes and edges.

    Args:
        node_records: sequence of NodeRecord models or plain dicts.
        catalog: node type catalog, ``{type: descriptor}`` or a list of descriptors.
        diagnostics: optional collector for skipped or repaired pieces.
        settings: fallback values; defaults to the process settings.

    Returns:
        (nodes, edges). Anything that is not a sequence yields ``([], [])``,
        since "no flow loaded" is a valid empty state.
    """
    if not isinstance(node_records, (list, tuple)):
        if node_records is not None:
            report(
                diagnostics,
                "input_not_sequence",
                f"expected a list of node records, got {type(node_records).__name__}",
            )
        return [], []

    settings = settings or get_settings()
    types = build_catalog(catalog, diagnostics)
    ids = _EdgeIds()
    seen_node_ids: set[str] = set()

    nodes: list[EditableNode] = []
    edges: list[EditableEdge] = []

    for index, raw in enumerate(node_records):
        record = _record_dict(raw)
        if record is None:
            report(diagnostics, "node_invalid", f"skipping node #{index}: not an object")
            continue

        raw_id = record.get("id")
        if raw_id is None or raw_id == "":
            report(diagnostics, "node_missing_id", f"skipping node #{index}: no id")
            continue
        node_id = str(raw_id)
        if node_id in seen_node_ids:
            report(diagnostics, "node_duplicate_id", f"node id {node_id!r} is used twice", node_id=node_id)
        seen_node_ids.add(node_id)

        node_type = record.get("type")
        if node_type is not None and not isinstance(node_type, str):
            node_type = str(node_type)
        descriptor: NodeTypeDescriptor | None = types.get(node_type) if node_type else None

        inputs = _port_count(descriptor.inputs if descriptor else None, record.get("inputs"))
        outputs = _port_count(descriptor.outputs if descriptor else None, record.get("outputs"))

        name = record.get("name")
        name = str(safe_value(name)) if name is not None else ""
        label = name or (descriptor.palette_label if descriptor else None) or node_type or ""

        x, y = record.get("x"), record.get("y")
        if _is_number(x) and _is_number(y):
            position = Position(x=x, y=y)
        else:
            position = grid_position(index, settings)

        ui_source = descriptor.ui if descriptor and descriptor.ui else record.get("ui")
        custom = {k: v for k, v in record.items() if k not in _RESOLVED_KEYS}

        nodes.append(EditableNode(
            id=node_id,
            position=position,
            data=NodeData(
                id=node_id,
                type=node_type,
                name=name,
                label=label,
                inputs=inputs,
                outputs=outputs,
                ui=coerce_ui(ui_source, settings),
                properties=sanitize_properties(custom, settings, node_id, diagnostics),
            ),
        ))
        edges.extend(_wire_edges(node_id, record.get("wires"), outputs, ids, diagnostics))

    return nodes, edges


def _validated(items: Any, model: type, code: str, diagnostics: Diagnostics | None) -> list:
    if not isinstance(items, (list, tuple)):
        if items is not None:
            report(diagnostics, "input_not_sequence", f"expected a list, got {type(items).__name__}")
        return []
    out = []
    for index, item in enumerate(items):
        if isinstance(item, model):
            out.append(item)
            continue
        try:
            out.append(model.model_validate(item))
        except ValidationError as exc:
            report(diagnostics, code, f"skipping {model.__name__} #{index}: {exc.error_count()} error(s)")
    return out


def from_editable(
    editable_nodes: Sequence[EditableNode | Mapping[str, Any]],
    editable_edges: Sequence[EditableEdge | Mapping[str, Any]],
    diagnostics: Diagnostics | None = None,
) -> list[NodeRecord]:
    """Convert editor nodes and edges back into wire-format records.

    ``wires`` is rebuilt from the edges alone, with one slot per declared
    output of each node, keeping edge-list order inside a slot.

    Raises:
        PortIndexError: if an edge leaves a node from an output port beyond
            the node's declared output count.
    """
    nodes = _validated(editable_nodes, EditableNode, "node_invalid", diagnostics)
    edges = _validated(editable_edges, EditableEdge, "edge_invalid", diagnostics)

    node_ids = {node.id for node in nodes}
    edges_by_source: dict[str, list[tuple[int, EditableEdge]]] = defaultdict(list)
    for edge in edges:
        output_index = edge.output_index
        if output_index is None:
            report(
                diagnostics,
                "edge_handle_invalid",
                f"skipping edge {edge.id!r}: bad source handle {edge.source_handle!r}",
                node_id=edge.source,
            )
            continue
        if edge.source not in node_ids:
            report(
                diagnostics,
                "edge_source_missing",
                f"skipping edge {edge.id!r}: source {edge.source!r} is not in the flow",
                node_id=edge.source,
            )
            continue
        edges_by_source[edge.source].append((output_index, edge))

    records: list[NodeRecord] = []
    for node in nodes:
        data = node.data
        outputs = max(data.outputs, 0)
        wires: list[list[str]] = [[] for _ in range(outputs)]

        for output_index, edge in edges_by_source.get(node.id, []):
            if output_index >= outputs:
                raise PortIndexError(node.id, output_index, outputs)
            slot = wires[output_index]
            if edge.target in slot:
                report(
                    diagnostics,
                    "edge_duplicate",
                    f"node {node.id!r} output {output_index} already wires {edge.target!r}",
                    node_id=node.id,
                )
                continue
            slot.append(edge.target)

        custom = restore_properties(data.properties, node_id=node.id, diagnostics=diagnostics)
        fields: dict[str, Any] = {
            k: v for k, v in custom.items() if k not in STRUCTURAL_KEYS
        }
        fields.update(
            id=node.id,
            type=data.type,
            name=data.name or "",
            x=_round_half_up(node.position.x),
            y=_round_half_up(node.position.y),
            wires=wires,
        )
        records.append(NodeRecord.model_validate(fields))

    return records
