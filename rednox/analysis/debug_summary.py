"""Aggregation rules for debug trace reports.

Reports come from the execution service and are treated as untrusted:
inconsistent pieces are reported, never allowed to break display.
"""

import json
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from rednox.diagnostics import Diagnostic, Diagnostics, report
from rednox.models.debug_report import (
    DebugTraceReport,
    ExecutionMetadata,
    TraceError,
    TraceStep,
)


@dataclass
class NodeExecutionStats:
    """How one node fared during an execution, re-entries folded together."""

    node_id: str
    node_name: str | None
    node_type: str | None
    call_count: int
    total_duration_ms: int
    final_status: str
    last_error: str | None = None


@dataclass
class DebugReportSummary:
    """Display-ready view of a debug report.

    ``metadata_source`` is "reported" when the service sent counts and
    "computed" when they were derived from the trace.
    """

    success: bool
    duration_ms: int
    metadata: ExecutionMetadata
    metadata_source: str
    step_count: int
    node_stats: list[NodeExecutionStats] = field(default_factory=list)
    errors: list[TraceError] = field(default_factory=list)
    slowest_step: TraceStep | None = None
    issues: list[Diagnostic] = field(default_factory=list)
    final_output: Any = None


def _as_step(item: TraceStep | Mapping[str, Any]) -> TraceStep:
    if isinstance(item, TraceStep):
        return item
    return TraceStep.model_validate(item)


def _final_statuses(trace: Iterable[TraceStep]) -> dict[str, str]:
    """node_id -> status of its latest step, in first-entry order."""
    statuses: dict[str, str] = {}
    for step in trace:
        statuses[step.node_id] = step.status
    return statuses


def summarize(
    trace: Iterable[TraceStep | Mapping[str, Any]],
    total_nodes: int | Iterable[str],
) -> ExecutionMetadata:
    """Compute node counts for an execution.

    Args:
        trace: steps in execution order; a node may appear several times.
        total_nodes: node count of the flow, or the flow's node ids. Skipped
            nodes never show up in a trace, so this has to come from the flow.

    Returns:
        ExecutionMetadata where each node counts once, by its final status.
    """
    statuses = _final_statuses(_as_step(item) for item in trace)

    if isinstance(total_nodes, int):
        total = total_nodes
    else:
        total = len(set(total_nodes))

    executed = len(statuses)
    return ExecutionMetadata(
        total_nodes=total,
        executed_nodes=executed,
        skipped_nodes=max(total - executed, 0),
        error_nodes=sum(1 for status in statuses.values() if status == "error"),
    )


def validate_report(debug_report: DebugTraceReport) -> list[Diagnostic]:
    """List the consistency problems of a report; empty means well formed."""
    diagnostics = Diagnostics()

    error_step_ids = {step.node_id for step in debug_report.trace if step.status == "error"}
    for err in debug_report.errors:
        if err.node_id not in error_step_ids:
            report(
                diagnostics,
                "error_without_trace",
                f"error for node {err.node_id!r} has no failing trace step",
                node_id=err.node_id,
            )

    metadata = debug_report.metadata
    if metadata is not None:
        if not metadata.is_consistent():
            report(
                diagnostics,
                "metadata_inconsistent",
                f"metadata counts do not add up: {metadata.model_dump()}",
            )
        computed = summarize(debug_report.trace, metadata.total_nodes)
        if (computed.executed_nodes, computed.error_nodes) != (
            metadata.executed_nodes,
            metadata.error_nodes,
        ):
            report(
                diagnostics,
                "metadata_mismatch",
                f"metadata reports {metadata.executed_nodes} executed / "
                f"{metadata.error_nodes} failed, trace shows "
                f"{computed.executed_nodes} / {computed.error_nodes}",
            )

    return list(diagnostics)


def is_well_formed(debug_report: DebugTraceReport) -> bool:
    return not validate_report(debug_report)


def _lenient_items(raw: Any, model: type, code: str, diagnostics: Diagnostics | None) -> list:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        report(diagnostics, code, f"expected a list of {model.__name__}, got {type(raw).__name__}")
        return []
    items = []
    for index, item in enumerate(raw):
        try:
            items.append(model.model_validate(item))
        except ValidationError as exc:
            report(diagnostics, code, f"dropping {model.__name__} #{index}: {exc.error_count()} error(s)")
    return items


def _pick(payload: Mapping[str, Any], camel: str, snake: str) -> Any:
    return payload[camel] if camel in payload else payload.get(snake)


def load_debug_report(
    payload: Mapping[str, Any] | str | bytes,
    diagnostics: Diagnostics | None = None,
) -> DebugTraceReport:
    """Parse a report from the execution service, keeping whatever is valid.

    Malformed steps, error entries and metadata are dropped one by one and
    reported; a payload that is not an object yields an empty failed report.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            report(diagnostics, "report_invalid", "debug report is not valid JSON")
            return DebugTraceReport()
    if not isinstance(payload, Mapping):
        report(diagnostics, "report_invalid", f"debug report must be an object, got {type(payload).__name__}")
        return DebugTraceReport()

    duration = payload.get("duration", 0)
    if (
        isinstance(duration, bool)
        or not isinstance(duration, (int, float))
        or (isinstance(duration, float) and not math.isfinite(duration))
    ):
        report(diagnostics, "duration_invalid", f"ignoring duration {duration!r}")
        duration = 0

    metadata = None
    raw_metadata = payload.get("metadata")
    if raw_metadata is not None:
        try:
            metadata = ExecutionMetadata.model_validate(raw_metadata)
        except ValidationError as exc:
            report(diagnostics, "metadata_invalid", f"dropping metadata: {exc.error_count()} error(s)")

    return DebugTraceReport(
        success=payload.get("success") is True,
        duration=round(duration),
        metadata=metadata,
        errors=tuple(_lenient_items(payload.get("errors"), TraceError, "error_entry_invalid", diagnostics)),
        trace=tuple(_lenient_items(payload.get("trace"), TraceStep, "trace_step_invalid", diagnostics)),
        final_output=_pick(payload, "finalOutput", "final_output"),
    )


def _node_stats(trace: Iterable[TraceStep]) -> list[NodeExecutionStats]:
    stats: OrderedDict[str, NodeExecutionStats] = OrderedDict()
    for step in trace:
        entry = stats.get(step.node_id)
        if entry is None:
            entry = NodeExecutionStats(
                node_id=step.node_id,
                node_name=step.node_name,
                node_type=step.node_type,
                call_count=0,
                total_duration_ms=0,
                final_status=step.status,
            )
            stats[step.node_id] = entry
        entry.call_count += 1
        entry.total_duration_ms += step.duration
        entry.final_status = step.status
        entry.node_name = step.node_name or entry.node_name
        entry.node_type = step.node_type or entry.node_type
        if step.status == "error":
            entry.last_error = step.error
    return list(stats.values())


def summarize_report(
    debug_report: DebugTraceReport,
    total_nodes: int | Iterable[str] | None = None,
) -> DebugReportSummary:
    """Build the display summary of a report.

    Reported metadata is shown as is; when the service sent none it is
    computed from the trace, using ``total_nodes`` if the caller knows the
    flow size.
    """
    if debug_report.metadata is not None:
        metadata = debug_report.metadata
        source = "reported"
    else:
        executed = len({step.node_id for step in debug_report.trace})
        metadata = summarize(debug_report.trace, executed if total_nodes is None else total_nodes)
        source = "computed"

    slowest = max(debug_report.trace, key=lambda step: step.duration, default=None)

    return DebugReportSummary(
        success=debug_report.success,
        duration_ms=debug_report.duration,
        metadata=metadata,
        metadata_source=source,
        step_count=len(debug_report.trace),
        node_stats=_node_stats(debug_report.trace),
        errors=list(debug_report.errors),
        slowest_step=slowest,
        issues=validate_report(debug_report),
        final_output=debug_report.final_output,
    )
