"""Editing SDK: node creation, graph edits and flow sessions."""

from rednox.sdk.flow_session import (
    FlowEditState,
    build_debug_request,
    build_save_payload,
    find_entry_node,
    load_flow_document,
    open_flow,
    parse_debug_payload,
)
from rednox.sdk.graph_edit import connect, disconnect, remove_node
from rednox.sdk.node_factory import create_node

__all__ = [
    "FlowEditState",
    "build_debug_request",
    "build_save_payload",
    "find_entry_node",
    "load_flow_document",
    "open_flow",
    "parse_debug_payload",
    "connect",
    "disconnect",
    "remove_node",
    "create_node",
]
