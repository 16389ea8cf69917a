"""Flow document as served by the persistence API."""

import json
from typing import Any

from pydantic import BaseModel, field_validator


DEFAULT_FLOW_VERSION = "1.0.0"


class FlowConfig(BaseModel):
    """Engine configuration of a flow; only the node list is interpreted here."""

    model_config = {"extra": "allow"}

    nodes: list[Any] = []  # raw wire records, validated during conversion


class FlowDocument(BaseModel):
    """A stored flow.

    ``config`` arrives either as an object or as a JSON-encoded string,
    depending on the backend route.
    """

    model_config = {"extra": "ignore"}

    id: str
    name: str = ""
    description: str | None = ""
    config: FlowConfig = FlowConfig()
    enabled: bool = False
    version: str | None = DEFAULT_FLOW_VERSION
    updated_at: str | None = None

    @field_validator("config", mode="before")
    @classmethod
    def decode_config(cls, value: Any) -> Any:
        if value is None or value == "":
            return {}
        if isinstance(value, (str, bytes)):
            return json.loads(value)
        return value

    @property
    def nodes(self) -> list[Any]:
        return self.config.nodes
