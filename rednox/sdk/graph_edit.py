"""Editing operations on editor node/edge lists.

All functions return new lists and leave the caller's lists untouched.
"""

from rednox.models.editable import (
    DEFAULT_TARGET_HANDLE,
    EditableEdge,
    EditableNode,
    output_handle,
)
from rednox.utils.identifiers import edge_id


def remove_node(
    nodes: list[EditableNode],
    edges: list[EditableEdge],
    node_id: str,
) -> tuple[list[EditableNode], list[EditableEdge]]:
    """Delete a node together with every edge that starts or ends at it."""
    kept_nodes = [node for node in nodes if node.id != node_id]
    kept_edges = [
        edge for edge in edges
        if edge.source != node_id and edge.target != node_id
    ]
    return kept_nodes, kept_edges


def connect(
    edges: list[EditableEdge],
    source: str,
    output_index: int,
    target: str,
) -> list[EditableEdge]:
    """Wire ``source``'s output port to ``target``.

    Connecting the same port to the same target twice is a no-op. Port
    bounds are checked when the flow is saved, not here.
    """
    handle = output_handle(output_index)
    for edge in edges:
        if edge.source == source and edge.source_handle == handle and edge.target == target:
            return list(edges)

    existing_ids = {edge.id for edge in edges}
    base = edge_id(source, output_index, target)
    new_id = base
    suffix = 1
    while new_id in existing_ids:
        new_id = f"{base}-{suffix}"
        suffix += 1

    return [*edges, EditableEdge(
        id=new_id,
        source=source,
        target=target,
        source_handle=handle,
        target_handle=DEFAULT_TARGET_HANDLE,
    )]


def disconnect(edges: list[EditableEdge], edge_id_to_remove: str) -> list[EditableEdge]:
    """Remove a single edge by id."""
    return [edge for edge in edges if edge.id != edge_id_to_remove]
