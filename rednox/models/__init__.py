"""Core data models for the rednox flow core."""

from rednox.models.debug_report import (
    DebugTraceReport,
    ExecutionMetadata,
    TraceError,
    TraceStep,
)
from rednox.models.editable import (
    EditableEdge,
    EditableNode,
    NodeData,
    Position,
    SanitizedObject,
)
from rednox.models.flow_document import FlowConfig, FlowDocument
from rednox.models.node_record import NodeRecord
from rednox.models.node_type import (
    NodeTypeCatalog,
    NodeTypeDescriptor,
    NodeUI,
    build_catalog,
)

__all__ = [
    # debug reports
    "DebugTraceReport",
    "ExecutionMetadata",
    "TraceError",
    "TraceStep",
    # editor format
    "EditableEdge",
    "EditableNode",
    "NodeData",
    "Position",
    "SanitizedObject",
    # persistence
    "FlowConfig",
    "FlowDocument",
    "NodeRecord",
    # node types
    "NodeTypeCatalog",
    "NodeTypeDescriptor",
    "NodeUI",
    "build_catalog",
]
