"""Normalization of free-form node properties into display-safe values.

Custom node properties are arbitrary JSON. The editor can only show
primitives and arrays, so objects are wrapped in a ``SanitizedObject``
that keeps the original for the trip back to the wire format.

Objects of the form ``{"value": x}`` are unwrapped to ``x``. This unwrap
is one-directional: after a round trip the property holds the bare value.
"""

import json
from typing import Any, Mapping

from rednox.config import CodecSettings, get_settings
from rednox.diagnostics import Diagnostics, report
from rednox.models.editable import JSON_SIDECAR_SUFFIX, SanitizedObject
from rednox.models.node_type import NodeUI


# editor keys derived from the catalog or the node itself, never custom properties
PRESENTATION_KEYS = frozenset({"id", "type", "name", "label", "inputs", "outputs", "ui"})

Primitive = str | int | float | bool
PropertyValue = Primitive | list | SanitizedObject


def _is_primitive(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def safe_value(value: Any) -> Primitive:
    """Reduce any value to a primitive suitable for display.

    ``{"value": x}`` wrappers are unwrapped repeatedly; other containers are
    JSON encoded.
    """
    while isinstance(value, Mapping) and "value" in value:
        value = value["value"]
    if value is None:
        return ""
    if _is_primitive(value):
        return value
    if isinstance(value, Mapping):
        return _to_json(dict(value))
    if isinstance(value, (list, tuple)):
        return _to_json(list(value))
    return str(value)


def coerce_ui(ui: Any, settings: CodecSettings | None = None) -> NodeUI:
    """Coerce a raw ``ui`` object into a NodeUI, field by field."""
    settings = settings or get_settings()
    if isinstance(ui, NodeUI):
        ui = ui.model_dump(by_alias=True)
    if not isinstance(ui, Mapping):
        ui = {}
    palette_label = ui.get("paletteLabel", ui.get("palette_label"))
    return NodeUI(
        icon=str(safe_value(ui.get("icon")) or settings.default_icon),
        color=str(safe_value(ui.get("color")) or settings.default_color),
        palette_label=str(safe_value(palette_label) or ""),
        description=str(safe_value(ui.get("description")) or ""),
    )


def sanitize_property(value: Any, settings: CodecSettings | None = None) -> PropertyValue:
    """Apply the sanitization rule to one custom property value."""
    if _is_primitive(value) or isinstance(value, (list, SanitizedObject)):
        return value
    if value is None:
        return ""
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, Mapping):
        if "value" in value:
            return safe_value(value)
        settings = settings or get_settings()
        return SanitizedObject(display_value=settings.object_placeholder, raw=dict(value))
    return str(value)


def sanitize_properties(
    properties: Mapping[str, Any],
    settings: CodecSettings | None = None,
    node_id: str | None = None,
    diagnostics: Diagnostics | None = None,
) -> dict[str, PropertyValue]:
    """Sanitize every custom property; values with no JSON form are dropped and reported."""
    settings = settings or get_settings()
    sanitized: dict[str, PropertyValue] = {}
    for key, value in properties.items():
        if callable(value):
            report(
                diagnostics,
                "property_unsupported",
                f"dropping property {key!r} of node {node_id!r}: {type(value).__name__} is not a JSON value",
                node_id=node_id,
                key=key,
            )
            continue
        sanitized[key] = sanitize_property(value, settings)
    return sanitized


def _sidecar_owners(properties: Mapping[str, Any], placeholder: str) -> set[str]:
    """Keys holding the placeholder next to a ``key_json`` sidecar."""
    owners = set()
    for key in properties:
        if key.endswith(JSON_SIDECAR_SUFFIX) and len(key) > len(JSON_SIDECAR_SUFFIX):
            owner = key[: -len(JSON_SIDECAR_SUFFIX)]
            if properties.get(owner) == placeholder:
                owners.add(owner)
    return owners


def restore_properties(
    properties: Mapping[str, Any],
    node_id: str | None = None,
    diagnostics: Diagnostics | None = None,
    settings: CodecSettings | None = None,
) -> dict[str, Any]:
    """Turn editor properties back into wire-format custom properties.

    Understands both ``SanitizedObject`` values and the flat convention of a
    ``key_json`` string next to a ``key`` holding the object placeholder.
    A ``*_json`` key without that sibling is an ordinary property. Values
    that cannot be recovered are dropped and reported.
    """
    settings = settings or get_settings()
    restored: dict[str, Any] = {}
    sidecar_owners = _sidecar_owners(properties, settings.object_placeholder)

    for key, value in properties.items():
        if key in PRESENTATION_KEYS:
            continue

        if key in sidecar_owners:
            # placeholder sibling of a _json sidecar
            continue

        original_key = key[: -len(JSON_SIDECAR_SUFFIX)]
        if key.endswith(JSON_SIDECAR_SUFFIX) and original_key in sidecar_owners:
            if not isinstance(value, (str, bytes)):
                restored[original_key] = value
                continue
            try:
                restored[original_key] = json.loads(value)
            except ValueError:
                report(
                    diagnostics,
                    "property_json_invalid",
                    f"dropping property {original_key!r} of node {node_id!r}: unparseable JSON",
                    node_id=node_id,
                    key=original_key,
                )
            continue

        if isinstance(value, SanitizedObject):
            if value.raw is None:
                report(
                    diagnostics,
                    "property_unrecoverable",
                    f"dropping property {key!r} of node {node_id!r}: original value lost",
                    node_id=node_id,
                    key=key,
                )
                continue
            restored[key] = value.raw
            continue

        restored[key] = value

    return restored
