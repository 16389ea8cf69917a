"""ID generation utilities."""

import time
import uuid


def generate_node_id() -> str:
    """Generate a fresh node ID.

    Combines the wall clock in milliseconds with 9 hex chars of a UUID4, so
    ids created within one editing session are practically collision free.
    """
    return f"node_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def edge_id(source: str, output_index: int, target: str) -> str:
    """Base edge ID for a (source, output, target) triple."""
    return f"{source}-{output_index}-{target}"
