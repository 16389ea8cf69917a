"""Collected warnings for best-effort conversions.

Conversions never stop on a malformed field; they drop or repair it and
report what happened here. Callers that do not pass a collector get the
same reports as ``ConversionWarning`` warnings.
"""

import warnings
from dataclasses import dataclass, field

from rednox.errors import ConversionError, ConversionWarning


@dataclass(frozen=True)
class Diagnostic:
    """One recoverable problem found while converting."""

    code: str
    message: str
    node_id: str | None = None
    key: str | None = None


@dataclass
class Diagnostics:
    """Collector passed into conversion functions.

    With ``strict=True`` the first reported problem raises
    ``ConversionError`` instead of being recorded.
    """

    strict: bool = False
    items: list[Diagnostic] = field(default_factory=list)

    def report(
        self,
        code: str,
        message: str,
        node_id: str | None = None,
        key: str | None = None,
    ) -> None:
        diagnostic = Diagnostic(code=code, message=message, node_id=node_id, key=key)
        if self.strict:
            raise ConversionError(f"[{code}] {message}")
        self.items.append(diagnostic)

    @property
    def codes(self) -> list[str]:
        return [d.code for d in self.items]

    def for_node(self, node_id: str) -> list[Diagnostic]:
        return [d for d in self.items if d.node_id == node_id]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def report(
    diagnostics: Diagnostics | None,
    code: str,
    message: str,
    node_id: str | None = None,
    key: str | None = None,
) -> None:
    """Send a problem to the collector, or warn when there is none."""
    if diagnostics is not None:
        diagnostics.report(code, message, node_id=node_id, key=key)
        return
    warnings.warn(f"[{code}] {message}", ConversionWarning, stacklevel=3)
