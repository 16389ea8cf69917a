"""Tests for wire format <-> editor format conversion."""

import json

import pytest

from rednox.codec.graph_codec import from_editable, grid_position, to_editable
from rednox.diagnostics import Diagnostics
from rednox.errors import ConversionError, ConversionWarning, PortIndexError
from rednox.models.editable import EditableEdge, EditableNode, SanitizedObject
from rednox.models.node_record import NodeRecord


def _edge_set(records: list[NodeRecord]) -> set[tuple[str, int, str]]:
    return {triple for record in records for triple in record.edge_triples()}


class TestToEditable:
    """Test conversion from wire records to editor nodes and edges."""

    def test_nodes_carry_identity_and_position(self, sample_flow, catalog, diagnostics):
        """Each record becomes one node with its id and stored coordinates."""
        nodes, _ = to_editable(sample_flow, catalog, diagnostics)

        assert [n.id for n in nodes] == ["in1", "fn1", "sw1", "out1"]
        assert nodes[0].position.x == 120
        assert nodes[0].position.y == 80
        assert nodes[0].data.id == "in1"

    def test_ports_come_from_catalog(self, sample_flow, catalog, diagnostics):
        """inputs/outputs are taken from the node type declaration."""
        nodes, _ = to_editable(sample_flow, catalog, diagnostics)
        by_id = {n.id: n for n in nodes}

        assert by_id["in1"].data.inputs == 0
        assert by_id["sw1"].data.outputs == 3
        assert by_id["out1"].data.outputs == 0

    def test_ports_fall_back_to_record_then_one(self, diagnostics):
        """Unknown types use the record's own port counts, else 1."""
        records = [
            {"id": "a", "type": "custom", "inputs": 2, "outputs": 4, "wires": []},
            {"id": "b", "type": "mystery", "wires": []},
        ]
        nodes, _ = to_editable(records, {}, diagnostics)

        assert (nodes[0].data.inputs, nodes[0].data.outputs) == (2, 4)
        assert (nodes[1].data.inputs, nodes[1].data.outputs) == (1, 1)
        assert nodes[1].data.ui.icon == "⚙️"
        assert nodes[1].data.ui.color == "#dddddd"
        assert len(diagnostics) == 0

    def test_label_precedence(self, sample_flow, catalog, diagnostics):
        """Label is the node name, else the palette label, else the type."""
        nodes, _ = to_editable(sample_flow, catalog, diagnostics)
        by_id = {n.id: n for n in nodes}

        assert by_id["in1"].data.label == "hello"
        assert by_id["fn1"].data.label == "function"
        assert by_id["out1"].data.label == "http-response"

        unnamed_switch = [{"id": "s", "type": "switch", "wires": [[], [], []]}]
        nodes, _ = to_editable(unnamed_switch, catalog, diagnostics)
        assert nodes[0].data.label == "Switch"

    def test_grid_layout_without_coordinates(self, diagnostics):
        """Records without x/y are laid out five per row."""
        records = [{"id": f"n{i}", "type": "t", "wires": []} for i in range(7)]
        nodes, _ = to_editable(records, None, diagnostics)

        assert (nodes[0].position.x, nodes[0].position.y) == (100, 100)
        assert (nodes[4].position.x, nodes[4].position.y) == (900, 100)
        assert (nodes[5].position.x, nodes[5].position.y) == (100, 250)
        assert grid_position(6) == nodes[6].position

    def test_one_edge_per_wire(self, sample_flow, catalog, diagnostics):
        """Every (source, output, target) in wires becomes an edge."""
        _, edges = to_editable(sample_flow, catalog, diagnostics)
        triples = {(e.source, e.output_index, e.target) for e in edges}

        assert triples == {
            ("in1", 0, "fn1"),
            ("fn1", 0, "sw1"),
            ("sw1", 0, "out1"),
            ("sw1", 1, "fn1"),
        }
        assert all(e.target_handle == "input-0" for e in edges)
        assert {e.source_handle for e in edges if e.source == "sw1"} == {"output-0", "output-1"}

    def test_edge_ids_are_unique_and_deterministic(self, diagnostics):
        """Edge ids derive from the triple and get a suffix on collision."""
        records = [
            {"id": "a", "type": "t", "outputs": 2, "wires": [["1-b"], []]},
            {"id": "a-0", "type": "t", "outputs": 2, "wires": [[], ["b"]]},
        ]
        _, edges = to_editable(records, None, diagnostics)
        ids = [e.id for e in edges]

        assert ids == ["a-0-1-b", "a-0-1-b-1"]
        _, again = to_editable(records, None, Diagnostics())
        assert [e.id for e in again] == ids

    def test_dangling_target_is_kept(self, diagnostics):
        """A wire to an unknown node still produces an edge."""
        records = [{"id": "a", "type": "t", "wires": [["missing-id"]]}]
        _, edges = to_editable(records, None, diagnostics)

        assert len(edges) == 1
        assert edges[0].target == "missing-id"
        assert len(diagnostics) == 0

    def test_duplicate_target_in_slot_collapses(self, diagnostics):
        """A target listed twice in one slot yields one edge."""
        records = [{"id": "a", "type": "t", "wires": [["b", "b"]]}]
        _, edges = to_editable(records, None, diagnostics)

        assert len(edges) == 1
        assert diagnostics.codes == ["wire_duplicate"]

    def test_extra_wire_slots_are_truncated(self, catalog, diagnostics):
        """Slots beyond the declared output count are dropped and reported."""
        records = [{"id": "f", "type": "function", "wires": [["x"], ["y"]]}]
        nodes, edges = to_editable(records, catalog, diagnostics)

        assert nodes[0].data.outputs == 1
        assert [(e.source_handle, e.target) for e in edges] == [("output-0", "x")]
        assert diagnostics.codes == ["wire_slot_truncated"]

    def test_malformed_wires_are_skipped(self, diagnostics):
        """Bad wire entries are skipped without losing the node."""
        records = [
            {"id": "a", "type": "t", "outputs": 3, "wires": ["oops", [None, "", "b"], [7]]},
            {"id": "c", "type": "t", "wires": "nope"},
        ]
        nodes, edges = to_editable(records, None, diagnostics)

        assert len(nodes) == 2
        assert [(e.output_index, e.target) for e in edges] == [(1, "b"), (2, "7")]
        assert diagnostics.codes == [
            "wire_slot_invalid",
            "wire_target_empty",
            "wire_target_empty",
            "wires_invalid",
        ]

    def test_non_sequence_input_yields_empty_result(self, diagnostics):
        """Non-list input means 'no flow loaded', not an exception."""
        assert to_editable({"id": "a"}, None, diagnostics) == ([], [])
        assert to_editable(None, None, diagnostics) == ([], [])
        assert diagnostics.codes == ["input_not_sequence"]

    def test_records_without_id_are_skipped(self, diagnostics):
        """Entries that are not objects or lack an id are dropped."""
        nodes, _ = to_editable(["junk", {"type": "t"}, {"id": "ok", "type": "t"}], None, diagnostics)

        assert [n.id for n in nodes] == ["ok"]
        assert diagnostics.codes == ["node_invalid", "node_missing_id"]

    def test_accepts_node_record_models(self, diagnostics):
        """NodeRecord instances convert like dicts, extras included."""
        record = NodeRecord(id="a", type="t", x=1, y=2, wires=[["b"]], topic="news")
        nodes, edges = to_editable([record], None, diagnostics)

        assert nodes[0].data.properties == {"topic": "news"}
        assert edges[0].target == "b"

    def test_catalog_as_mapping(self, diagnostics):
        """A {type: descriptor} catalog works like the list form."""
        catalog = {"split": {"inputs": 1, "outputs": 2}}
        nodes, _ = to_editable([{"id": "s", "type": "split", "wires": []}], catalog, diagnostics)

        assert nodes[0].data.outputs == 2

    def test_structural_keys_are_not_properties(self, sample_flow, catalog, diagnostics):
        """x, y, wires and name never leak into custom properties."""
        nodes, _ = to_editable(sample_flow, catalog, diagnostics)
        props = nodes[0].data.properties

        assert props == {"method": "post", "url": "/hello"}

    def test_warns_without_collector(self):
        """Without a collector, problems surface as ConversionWarning."""
        with pytest.warns(ConversionWarning, match="wire_duplicate"):
            to_editable([{"id": "a", "type": "t", "wires": [["b", "b"]]}])

    def test_strict_collector_raises(self):
        """A strict collector turns the first problem into ConversionError."""
        with pytest.raises(ConversionError, match="wire_duplicate"):
            to_editable(
                [{"id": "a", "type": "t", "wires": [["b", "b"]]}],
                diagnostics=Diagnostics(strict=True),
            )


class TestSanitizedProperties:
    """Test how custom properties are carried through the editor."""

    def test_object_property_is_wrapped(self, diagnostics):
        """Plain objects become a placeholder with the original kept."""
        records = [{"id": "a", "type": "t", "options": {"a": 1, "b": [2, 3]}}]
        nodes, _ = to_editable(records, None, diagnostics)
        value = nodes[0].data.properties["options"]

        assert isinstance(value, SanitizedObject)
        assert value.display_value == "[Object]"
        assert value.raw == {"a": 1, "b": [2, 3]}

    def test_value_wrapper_is_unwrapped(self, diagnostics):
        """{'value': x} is reduced to x."""
        records = [{"id": "a", "type": "t", "mode": {"value": {"value": "fast"}}}]
        nodes, _ = to_editable(records, None, diagnostics)

        assert nodes[0].data.properties["mode"] == "fast"

    def test_null_becomes_empty_string(self, diagnostics):
        """None properties become empty strings."""
        records = [{"id": "a", "type": "t", "topic": None}]
        nodes, _ = to_editable(records, None, diagnostics)

        assert nodes[0].data.properties["topic"] == ""

    def test_ui_is_coerced(self, diagnostics):
        """A record's own ui object is coerced to plain strings."""
        records = [{"id": "a", "type": "t", "ui": {"icon": {"value": "★"}, "color": None}}]
        nodes, _ = to_editable(records, None, diagnostics)
        ui = nodes[0].data.ui

        assert ui.icon == "★"
        assert ui.color == "#dddddd"
        assert ui.palette_label == ""

    def test_callable_property_is_reported(self, diagnostics):
        """Values with no JSON form are dropped with a diagnostic."""
        records = [{"id": "a", "type": "t", "hook": len, "topic": "x"}]
        nodes, _ = to_editable(records, None, diagnostics)

        assert nodes[0].data.properties == {"topic": "x"}
        assert diagnostics.codes == ["property_unsupported"]
        assert diagnostics.items[0].key == "hook"

    def test_json_suffixed_string_round_trips(self, diagnostics):
        """A plain ``*_json`` string is an ordinary property, not a sidecar."""
        records = [{
            "id": "a", "type": "t", "x": 1, "y": 2,
            "template": "Dear {{name}}",
            "template_json": "hello {{x}}",
            "wires": [[]],
        }]
        restored = from_editable(*to_editable(records, None, diagnostics), diagnostics)[0]

        assert restored.properties == {"template": "Dear {{name}}", "template_json": "hello {{x}}"}
        assert len(diagnostics) == 0


class TestFromEditable:
    """Test conversion from editor nodes and edges back to wire records."""

    def test_wires_are_rebuilt_from_edges(self, sample_flow, catalog, diagnostics):
        """wires are recomputed from the edge list."""
        nodes, edges = to_editable(sample_flow, catalog, diagnostics)
        records = from_editable(nodes, edges, diagnostics)
        by_id = {r.id: r for r in records}

        assert by_id["sw1"].wires == [["out1"], ["fn1"], []]
        assert by_id["out1"].wires == []
        assert by_id["in1"].wires == [["fn1"]]

    def test_positions_are_rounded(self, diagnostics):
        """Positions round half-up to integers."""
        node = EditableNode.model_validate({
            "id": "a",
            "position": {"x": 10.5, "y": 20.49},
            "data": {"type": "t", "outputs": 1},
        })
        records = from_editable([node], [], diagnostics)

        assert (records[0].x, records[0].y) == (11, 20)

    def test_edge_order_is_kept_within_slot(self, diagnostics):
        """Targets in one slot keep edge-list order."""
        node = EditableNode.model_validate({"id": "a", "position": {"x": 0, "y": 0}, "data": {"outputs": 1}})
        edges = [
            EditableEdge(id="e2", source="a", target="z", source_handle="output-0"),
            EditableEdge(id="e1", source="a", target="m", source_handle="output-0"),
        ]
        records = from_editable([node], edges, diagnostics)

        assert records[0].wires == [["z", "m"]]

    def test_port_beyond_outputs_raises(self, diagnostics):
        """Saving an edge from an undeclared port must fail loudly."""
        node = EditableNode.model_validate({"id": "a", "position": {"x": 0, "y": 0}, "data": {"outputs": 1}})
        edge = EditableEdge(id="e", source="a", target="b", source_handle="output-2")

        with pytest.raises(PortIndexError) as exc_info:
            from_editable([node], [edge], diagnostics)
        assert exc_info.value.node_id == "a"
        assert exc_info.value.index == 2

    def test_bad_handles_and_unknown_sources_are_skipped(self, diagnostics):
        """Edges with bad handles or unknown sources are skipped and reported."""
        node = EditableNode.model_validate({"id": "a", "position": {"x": 0, "y": 0}, "data": {"outputs": 1}})
        edges = [
            {"id": "e1", "source": "a", "target": "b", "sourceHandle": "out"},
            {"id": "e2", "source": "ghost", "target": "a", "sourceHandle": "output-0"},
            {"id": "e3", "source": "a", "target": "b", "sourceHandle": "output-0"},
        ]
        records = from_editable([node], edges, diagnostics)

        assert records[0].wires == [["b"]]
        assert diagnostics.codes == ["edge_handle_invalid", "edge_source_missing"]

    def test_presentation_keys_are_not_copied(self, sample_flow, catalog, diagnostics):
        """label, inputs, outputs and ui never become record fields."""
        nodes, edges = to_editable(sample_flow, catalog, diagnostics)
        dumped = from_editable(nodes, edges, diagnostics)[0].model_dump()

        for key in ("label", "inputs", "outputs", "ui"):
            assert key not in dumped
        assert dumped["method"] == "post"

    def test_legacy_json_sidecar(self, diagnostics):
        """Flat editor data with key/key_json pairs restores the object."""
        node = EditableNode.model_validate({
            "id": "a",
            "position": {"x": 0, "y": 0},
            "data": {
                "type": "t",
                "outputs": 1,
                "options": "[Object]",
                "options_json": json.dumps({"retry": 3}),
                "broken": "[Object]",
                "broken_json": "{not json",
            },
        })
        record = from_editable([node], [], diagnostics)[0]

        assert record.properties == {"options": {"retry": 3}}
        assert diagnostics.codes == ["property_json_invalid"]

    def test_sidecar_needs_placeholder_sibling(self, diagnostics):
        """key_json is only a sidecar when key holds the object placeholder."""
        node = EditableNode.model_validate({
            "id": "a",
            "position": {"x": 0, "y": 0},
            "data": {"type": "t", "outputs": 1, "query_json": "{not json", "body_json": "{}"},
        })
        record = from_editable([node], [], diagnostics)[0]

        assert record.properties == {"query_json": "{not json", "body_json": "{}"}
        assert len(diagnostics) == 0

    def test_unrecoverable_object_is_dropped(self, diagnostics):
        """An object whose original was lost is dropped and reported."""
        node = EditableNode.model_validate({
            "id": "a",
            "position": {"x": 0, "y": 0},
            "data": {"outputs": 1, "properties": {"cfg": {"displayValue": "[Object]", "raw": None}}},
        })
        record = from_editable([node], [], diagnostics)[0]

        assert "cfg" not in record.properties
        assert diagnostics.codes == ["property_unrecoverable"]

    def test_flow_dict_round_trip(self, sample_flow, catalog, diagnostics):
        """The flat presentation shape converts back like the models do."""
        nodes, edges = to_editable(sample_flow, catalog, diagnostics)
        flat_nodes = [n.to_flow_dict() for n in nodes]
        flat_edges = [e.model_dump(by_alias=True) for e in edges]

        assert flat_nodes[2]["data"]["options"] == "[Object]"
        assert json.loads(flat_nodes[2]["data"]["options_json"]) == {"checkall": True, "repair": False}

        records = from_editable(flat_nodes, flat_edges, diagnostics)
        assert records[2].properties["options"] == {"checkall": True, "repair": False}
        assert _edge_set(records) == _edge_set(from_editable(nodes, edges))
