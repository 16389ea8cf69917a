"""Helpers tying flow documents from the persistence API to the codec.

The editor state (nodes, edges) is owned by the caller; these functions
only build it from a document and turn it back into a save payload.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from rednox.codec.graph_codec import from_editable, to_editable
from rednox.config import CodecSettings
from rednox.diagnostics import Diagnostics, report
from rednox.models.editable import EditableEdge, EditableNode
from rednox.models.flow_document import DEFAULT_FLOW_VERSION, FlowDocument
from rednox.models.node_record import NodeRecord


# node types that can start a debug execution, in order of preference
ENTRY_NODE_TYPES = ("http-in", "inject")


@dataclass
class FlowEditState:
    """An opened flow, ready to hand to the presentation layer."""

    document: FlowDocument
    nodes: list[EditableNode]
    edges: list[EditableEdge]
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def load_flow_document(
    raw: FlowDocument | Mapping[str, Any] | str,
    diagnostics: Diagnostics | None = None,
) -> FlowDocument:
    """Parse a flow document, accepting ``config`` as object or JSON string.

    A ``config`` string that is not valid JSON is replaced by an empty
    config and reported.

    Raises:
        pydantic.ValidationError: if the document itself is malformed
            (for example, it has no ``id``).
    """
    if isinstance(raw, FlowDocument):
        return raw
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)

    data = dict(raw)
    config = data.get("config")
    if isinstance(config, (str, bytes)) and config:
        try:
            data["config"] = json.loads(config)
        except ValueError:
            report(
                diagnostics,
                "config_json_invalid",
                f"flow {data.get('id')!r} has an unparseable config, opening it empty",
            )
            data["config"] = {}
    return FlowDocument.model_validate(data)


def open_flow(
    document: FlowDocument | Mapping[str, Any] | str,
    catalog: Any = None,
    settings: CodecSettings | None = None,
) -> FlowEditState:
    """Load a document and convert its nodes for editing."""
    diagnostics = Diagnostics()
    document = load_flow_document(document, diagnostics)
    nodes, edges = to_editable(document.nodes, catalog, diagnostics, settings)
    return FlowEditState(document=document, nodes=nodes, edges=edges, diagnostics=diagnostics)


def build_save_payload(
    document: FlowDocument,
    nodes: list[EditableNode],
    edges: list[EditableEdge],
    diagnostics: Diagnostics | None = None,
) -> dict[str, Any]:
    """Request body for storing the edited flow.

    Raises:
        PortIndexError: if an edge uses an output port its node lacks.
    """
    records = from_editable(nodes, edges, diagnostics)
    return {
        "name": document.name,
        "description": document.description or "",
        "version": document.version or DEFAULT_FLOW_VERSION,
        "nodes": [record.model_dump() for record in records],
    }


def _record_type(record: Any) -> Any:
    if isinstance(record, NodeRecord):
        return record.type
    if isinstance(record, Mapping):
        return record.get("type")
    return None


def find_entry_node(records: list[Any]) -> Any | None:
    """Pick the node a debug execution starts from.

    The first ``http-in`` node, else the first ``inject`` node, else the
    first node of the flow.
    """
    for entry_type in ENTRY_NODE_TYPES:
        for record in records:
            if _record_type(record) == entry_type:
                return record
    return records[0] if records else None


def parse_debug_payload(text: str | None) -> Any:
    """Interpret user-supplied debug input; non-JSON text is wrapped as ``{"value": text}``."""
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"value": text}


def build_debug_request(document: FlowDocument, payload_text: str | None = None) -> dict[str, Any] | None:
    """Body of a debug-execute request, or None if the flow has no nodes."""
    entry = find_entry_node(document.nodes)
    if entry is None:
        return None
    if isinstance(entry, NodeRecord):
        entry_id = entry.id
    elif isinstance(entry, Mapping):
        entry_id = entry.get("id")
    else:
        return None
    return {"nodeId": entry_id, "payload": parse_debug_payload(payload_text)}
