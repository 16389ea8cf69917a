"""Debug trace report returned by a flow execution request.

A report is produced by the execution service and replaced wholesale on
the next request; it is never merged or mutated, so all models are frozen.
"""

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


_REPORT_CONFIG = ConfigDict(
    alias_generator=to_camel, populate_by_name=True, frozen=True
)

StepStatus = Literal["ok", "error"]


def _whole_ms(value: Any) -> Any:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"duration must be finite, got {value}")
        return round(value)
    return value


class TraceStep(BaseModel):
    """One entry of a node into execution, in the order it happened."""

    model_config = _REPORT_CONFIG

    node_id: str
    node_name: str | None = None
    node_type: str | None = None
    duration: int = 0  # milliseconds
    status: StepStatus = "ok"
    error: str | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def round_duration(cls, value: Any) -> Any:
        return _whole_ms(value)

    @property
    def display_name(self) -> str:
        return self.node_name or self.node_type or self.node_id


class TraceError(BaseModel):
    """A fatal condition raised by one node."""

    model_config = _REPORT_CONFIG

    node_id: str
    message: str = ""


class ExecutionMetadata(BaseModel):
    """Node counts for one execution.

    A consistent report satisfies ``executed + skipped <= total`` and
    ``errors <= executed``.
    """

    model_config = _REPORT_CONFIG

    total_nodes: int = 0
    executed_nodes: int = 0
    skipped_nodes: int = 0
    error_nodes: int = 0

    def is_consistent(self) -> bool:
        return (
            self.executed_nodes + self.skipped_nodes <= self.total_nodes
            and self.error_nodes <= self.executed_nodes
        )


class DebugTraceReport(BaseModel):
    """Result of a single debug execution of a flow."""

    model_config = _REPORT_CONFIG

    success: bool = False
    duration: int = 0  # milliseconds, whole execution
    metadata: ExecutionMetadata | None = None
    errors: tuple[TraceError, ...] = ()
    trace: tuple[TraceStep, ...] = ()
    final_output: Any = None

    @field_validator("duration", mode="before")
    @classmethod
    def round_duration(cls, value: Any) -> Any:
        return _whole_ms(value)
