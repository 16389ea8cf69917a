"""Utility functions for the rednox core."""

from rednox.utils.identifiers import (
    edge_id,
    generate_node_id,
)

__all__ = [
    "edge_id",
    "generate_node_id",
]
