#!/usr/bin/env python3
"""CLI script to summarize a debug execution report.

Usage:
    python -m rednox.analysis.analyze_report <report.json>

    # JSON output, with the flow size known
    python -m rednox.analysis.analyze_report <report.json> --json --total-nodes 6
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from rednox.analysis.debug_summary import (
    DebugReportSummary,
    load_debug_report,
    summarize_report,
)
from rednox.diagnostics import Diagnostics


def format_summary(summary: DebugReportSummary) -> str:
    """Format a report summary for human-readable output."""
    lines = []
    lines.append("=" * 60)
    lines.append("DEBUG RESULTS")
    lines.append("=" * 60)
    lines.append("")

    status = "✓ Success" if summary.success else "✗ Failed"
    lines.append(f"Status:   {status}")
    lines.append(f"Duration: {summary.duration_ms}ms")
    lines.append("")

    # node counts
    meta = summary.metadata
    lines.append("-" * 40)
    lines.append(f"NODES ({summary.metadata_source})")
    lines.append("-" * 40)
    lines.append(f"  Total:    {meta.total_nodes}")
    lines.append(f"  Executed: {meta.executed_nodes}")
    lines.append(f"  Skipped:  {meta.skipped_nodes}")
    lines.append(f"  Errors:   {meta.error_nodes}")
    lines.append("")

    if summary.errors:
        lines.append("-" * 40)
        lines.append("ERRORS")
        lines.append("-" * 40)
        for err in summary.errors:
            lines.append(f"  [{err.node_id}] {err.message}")
        lines.append("")

    lines.append("-" * 40)
    lines.append(f"EXECUTION TRACE ({summary.step_count} steps)")
    lines.append("-" * 40)
    for stat in summary.node_stats:
        name = stat.node_name or stat.node_type or stat.node_id
        mark = "✗" if stat.final_status == "error" else "•"
        calls = f" x{stat.call_count}" if stat.call_count > 1 else ""
        lines.append(f"  {mark} {name}{calls} ({stat.total_duration_ms}ms)")
        if stat.last_error:
            lines.append(f"    Error: {stat.last_error}")
    if not summary.node_stats:
        lines.append("  (no steps recorded)")
    lines.append("")

    if summary.slowest_step is not None:
        slowest = summary.slowest_step
        lines.append(f"Slowest step: {slowest.display_name} ({slowest.duration}ms)")
        lines.append("")

    if summary.final_output is not None:
        lines.append("-" * 40)
        lines.append("FINAL OUTPUT")
        lines.append("-" * 40)
        lines.append(json.dumps(summary.final_output, indent=2, default=str))
        lines.append("")

    if summary.issues:
        lines.append("-" * 40)
        lines.append("⚠ REPORT INCONSISTENCIES")
        lines.append("-" * 40)
        for issue in summary.issues:
            lines.append(f"  [{issue.code}] {issue.message}")
        lines.append("")

    return "\n".join(lines)


def summary_to_dict(summary: DebugReportSummary) -> dict:
    """Convert a DebugReportSummary to a JSON-serializable dict."""
    d = asdict(summary)
    d["metadata"] = summary.metadata.model_dump(by_alias=True)
    d["errors"] = [err.model_dump(by_alias=True) for err in summary.errors]
    d["slowest_step"] = (
        summary.slowest_step.model_dump(by_alias=True) if summary.slowest_step else None
    )
    return d


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Summarize a debug execution report."
    )
    parser.add_argument(
        "report_file",
        type=Path,
        help="path to the JSON debug report",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="output summary as JSON instead of human-readable format",
    )
    parser.add_argument(
        "--total-nodes",
        type=int,
        default=None,
        help="node count of the executed flow, used when the report has no metadata",
    )

    args = parser.parse_args(argv)

    if not args.report_file.exists():
        print(f"Error: report file not found: {args.report_file}", file=sys.stderr)
        return 1

    diagnostics = Diagnostics()
    debug_report = load_debug_report(args.report_file.read_text(), diagnostics)
    for diagnostic in diagnostics:
        print(f"Warning: [{diagnostic.code}] {diagnostic.message}", file=sys.stderr)

    summary = summarize_report(debug_report, args.total_nodes)

    if args.json:
        print(json.dumps(summary_to_dict(summary), indent=2, default=str))
    else:
        print(format_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
