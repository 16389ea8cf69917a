"""RedNox flow core - conversion between persisted flows and the visual editor."""

from rednox.analysis.debug_summary import (
    load_debug_report,
    summarize,
    summarize_report,
    validate_report,
)
from rednox.codec.graph_codec import from_editable, to_editable
from rednox.config import CodecSettings, get_settings, load_settings
from rednox.diagnostics import Diagnostic, Diagnostics
from rednox.errors import ConversionError, ConversionWarning, PortIndexError
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
from rednox.models.flow_document import FlowDocument
from rednox.models.node_record import NodeRecord
from rednox.models.node_type import NodeTypeDescriptor, NodeUI, build_catalog
from rednox.sdk.flow_session import build_save_payload, open_flow
from rednox.sdk.graph_edit import connect, disconnect, remove_node
from rednox.sdk.node_factory import create_node

__all__ = [
    # Conversion
    "from_editable",
    "to_editable",
    # Node creation and editing
    "create_node",
    "connect",
    "disconnect",
    "remove_node",
    "open_flow",
    "build_save_payload",
    # Debug reports
    "load_debug_report",
    "summarize",
    "summarize_report",
    "validate_report",
    # Models
    "DebugTraceReport",
    "EditableEdge",
    "EditableNode",
    "ExecutionMetadata",
    "FlowDocument",
    "NodeData",
    "NodeRecord",
    "NodeTypeDescriptor",
    "NodeUI",
    "Position",
    "SanitizedObject",
    "TraceError",
    "TraceStep",
    "build_catalog",
    # Settings, diagnostics and errors
    "CodecSettings",
    "get_settings",
    "load_settings",
    "Diagnostic",
    "Diagnostics",
    "ConversionError",
    "ConversionWarning",
    "PortIndexError",
]
