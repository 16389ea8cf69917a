"""Codec settings.

Defaults mirror the editor's hardcoded fallbacks. Each value can be
overridden through a ``REDNOX_*`` environment variable (or a ``.env`` file).
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel


class CodecSettings(BaseModel):
    """Fallback values used when converting and creating nodes."""

    model_config = {"frozen": True}

    # node styling fallbacks
    default_icon: str = "⚙️"
    default_color: str = "#dddddd"

    # display text for object-valued properties
    object_placeholder: str = "[Object]"

    # grid layout for nodes without a stored position
    grid_origin_x: int = 100
    grid_origin_y: int = 100
    grid_column_width: int = 200
    grid_row_height: int = 150
    grid_columns: int = 5

    # drop point when a node is created without a position
    default_node_x: float = 250
    default_node_y: float = 150


# environment variable -> settings field
_ENV_FIELDS = {
    "REDNOX_DEFAULT_ICON": "default_icon",
    "REDNOX_DEFAULT_COLOR": "default_color",
    "REDNOX_OBJECT_PLACEHOLDER": "object_placeholder",
    "REDNOX_GRID_ORIGIN_X": "grid_origin_x",
    "REDNOX_GRID_ORIGIN_Y": "grid_origin_y",
    "REDNOX_GRID_COLUMN_WIDTH": "grid_column_width",
    "REDNOX_GRID_ROW_HEIGHT": "grid_row_height",
    "REDNOX_GRID_COLUMNS": "grid_columns",
    "REDNOX_DEFAULT_NODE_X": "default_node_x",
    "REDNOX_DEFAULT_NODE_Y": "default_node_y",
}

_settings: CodecSettings | None = None


def load_settings() -> CodecSettings:
    """Build settings from the environment, loading ``.env`` first."""
    load_dotenv()
    overrides = {}
    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value is not None and value != "":
            overrides[field_name] = value
    return CodecSettings.model_validate(overrides)


def get_settings() -> CodecSettings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call reloads the environment."""
    global _settings
    _settings = None
