"""Exceptions and warnings raised by the flow conversion core."""


class ConversionError(ValueError):
    """A flow could not be converted between wire and editor formats."""


class PortIndexError(ConversionError):
    """An edge references an output port the node does not declare.

    Persisting such an edge would silently corrupt the wire format, so this
    is the one conversion problem that is always raised.
    """

    def __init__(self, node_id: str, index: int, outputs: int | None = None) -> None:
        self.node_id = node_id
        self.index = index
        self.outputs = outputs
        detail = f" (node declares {outputs} outputs)" if outputs is not None else ""
        super().__init__(f"node {node_id!r} has no output port {index}{detail}")


class ConversionWarning(UserWarning):
    """Emitted for recoverable problems when no diagnostics collector is given."""
