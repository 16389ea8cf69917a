"""Analysis utilities for debug trace reports."""

from rednox.analysis.debug_summary import (
    DebugReportSummary,
    NodeExecutionStats,
    is_well_formed,
    load_debug_report,
    summarize,
    summarize_report,
    validate_report,
)
from rednox.analysis.analyze_report import (
    format_summary,
    summary_to_dict,
)

__all__ = [
    # debug_summary exports
    "DebugReportSummary",
    "NodeExecutionStats",
    "is_well_formed",
    "load_debug_report",
    "summarize",
    "summarize_report",
    "validate_report",
    # analyze_report exports
    "format_summary",
    "summary_to_dict",
]
