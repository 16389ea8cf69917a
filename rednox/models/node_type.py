"""Node type descriptors as served by the node-type catalog.

A descriptor declares a node type's ports, styling and default property
values. Flows only reference types by name, so the catalog is looked up
during conversion and node creation.
"""

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from rednox.diagnostics import Diagnostics, report


class NodeUI(BaseModel):
    """Display metadata of a node, always plain strings once coerced."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    icon: str = "⚙️"
    color: str = "#dddddd"
    palette_label: str = ""
    description: str = ""


class NodeTypeDescriptor(BaseModel):
    """Capability declaration of one node type."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    type: str | None = None
    category: str | None = None
    inputs: int | None = None
    outputs: int | None = None
    ui: dict[str, Any] | None = None  # raw, coerced through sanitize.coerce_ui
    defaults: dict[str, Any] = {}

    @property
    def palette_label(self) -> str | None:
        if not self.ui:
            return None
        label = self.ui.get("paletteLabel", self.ui.get("palette_label"))
        return label if isinstance(label, str) and label else None


NodeTypeCatalog = dict[str, NodeTypeDescriptor]


def coerce_descriptor(entry: Any) -> NodeTypeDescriptor:
    """Accept a descriptor model or a plain dict.

    Raises:
        pydantic.ValidationError: if a dict entry has wrongly typed fields.
    """
    if isinstance(entry, NodeTypeDescriptor):
        return entry
    if isinstance(entry, Mapping):
        return NodeTypeDescriptor.model_validate(dict(entry))
    raise TypeError(f"node type descriptor must be a dict, got {type(entry).__name__}")


def build_catalog(
    entries: Mapping[str, Any] | Iterable[Any] | None,
    diagnostics: Diagnostics | None = None,
) -> NodeTypeCatalog:
    """Normalize a catalog given as ``{type: descriptor}`` or as a list.

    Malformed entries are skipped and reported.
    """
    if entries is None:
        return {}

    if isinstance(entries, Mapping):
        items = list(entries.items())
    else:
        items = [(None, entry) for entry in entries]

    catalog: NodeTypeCatalog = {}
    for key, entry in items:
        try:
            descriptor = coerce_descriptor(entry)
        except (TypeError, ValidationError) as exc:
            report(
                diagnostics,
                "catalog_entry_invalid",
                f"skipping node type {key or '?'}: {exc}",
                key=key,
            )
            continue

        type_name = key if key is not None else descriptor.type
        if not type_name:
            report(diagnostics, "catalog_entry_invalid", "skipping node type without a name")
            continue
        if descriptor.type is None:
            descriptor = descriptor.model_copy(update={"type": type_name})
        catalog[type_name] = descriptor

    return catalog
