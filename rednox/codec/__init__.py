"""Wire format <-> editor format conversion."""

from rednox.codec.graph_codec import (
    from_editable,
    grid_position,
    to_editable,
)
from rednox.codec.sanitize import (
    coerce_ui,
    restore_properties,
    safe_value,
    sanitize_properties,
    sanitize_property,
)

__all__ = [
    "from_editable",
    "grid_position",
    "to_editable",
    "coerce_ui",
    "restore_properties",
    "safe_value",
    "sanitize_properties",
    "sanitize_property",
]
