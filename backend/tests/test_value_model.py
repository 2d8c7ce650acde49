"""Tests for the attribute value model and the attribute accumulator."""

import math

from models.graph import AttributeList, GraphRecord, NodeRecord, ParsedGraph
from models.value import (
    decode_structured,
    encode_structured,
    format_number,
    infer_scalar,
    is_missing,
    type_of,
    widen_type,
)


class TestInferScalar:
    """Number/text inference for unquoted GML tokens."""

    def test_integer(self):
        assert infer_scalar("3") == 3
        assert isinstance(infer_scalar("3"), int)

    def test_float(self):
        assert infer_scalar("3.14") == 3.14
        assert isinstance(infer_scalar("3.14"), float)

    def test_text(self):
        assert infer_scalar("hello") == "hello"

    def test_negative_number_is_float(self):
        """Only unsigned 32-bit integers are read as int."""
        value = infer_scalar("-5")
        assert isinstance(value, float)
        assert value == -5.0

    def test_integer_beyond_uint32_is_float(self):
        value = infer_scalar("4294967296")
        assert isinstance(value, float)
        assert infer_scalar("4294967295") == 4294967295

    def test_exponent_notation(self):
        assert infer_scalar("1e5") == 100000.0

    def test_nan_is_float(self):
        assert math.isnan(infer_scalar("NaN"))

    def test_underscore_digits_stay_text(self):
        assert infer_scalar("1_000") == "1_000"


class TestValueHelpers:
    """Type naming, widening and JSON encoding."""

    def test_type_of(self):
        assert type_of(3) == "int"
        assert type_of(3.5) == "float"
        assert type_of("x") == "string"
        assert type_of([1, 2]) == "string"
        assert type_of({"a": 1}) == "string"
        assert type_of(-1) == "float"

    def test_widen_type(self):
        assert widen_type("int", "int") == "int"
        assert widen_type("int", "float") == "float"
        assert widen_type("float", "int") == "float"
        assert widen_type("int", "string") == "string"
        assert widen_type("float", "string") == "string"

    def test_format_number(self):
        assert format_number(3) == "3"
        assert format_number(2.5) == "2.5"

    def test_encode_structured_is_compact(self):
        assert encode_structured({"a": 1, "b": 2}) == '{"a":1,"b":2}'
        assert encode_structured([1, "x"]) == '[1,"x"]'

    def test_decode_object_and_array(self):
        assert decode_structured('{"a":1,"b":[1,2]}') == {"a": 1, "b": [1, 2]}
        assert decode_structured("[1,2]") == [1, 2]

    def test_decode_strips_embedding_quotes(self):
        assert decode_structured('"{"a":1}"') == {"a": 1}

    def test_decode_rejects_non_json(self):
        assert decode_structured("[draft]") is None
        assert decode_structured("plain text") is None

    def test_decode_coerces_booleans_and_drops_nulls(self):
        assert decode_structured('{"on":true,"gone":null}') == {"on": 1}

    def test_decode_preserves_key_order(self):
        decoded = decode_structured('{"z":1,"a":2,"m":3}')
        assert list(decoded) == ["z", "a", "m"]

    def test_is_missing(self):
        assert is_missing("")
        assert is_missing('""')
        assert is_missing(float("nan"))
        assert not is_missing(0)
        assert not is_missing("x")


class TestAttributeList:
    """Repeated-name list promotion."""

    def test_distinct_names_stay_scalar(self):
        attrs = AttributeList()
        attrs.add("a", 1)
        attrs.add("b", 2)
        assert list(attrs) == [("a", 1), ("b", 2)]

    def test_repeated_name_promotes_to_list(self):
        attrs = AttributeList()
        attrs.add("weight", 1)
        attrs.add("weight", 2)
        assert list(attrs) == [("weight", [1, 2])]

    def test_run_extends_list(self):
        attrs = AttributeList([("w", 1), ("w", 2), ("w", 3)])
        assert list(attrs) == [("w", [1, 2, 3])]

    def test_repeat_of_list_value_nests(self):
        """A value that already is a list is an item, not a run."""
        attrs = AttributeList([("pts", [1, 2]), ("pts", [3, 4])])
        assert list(attrs) == [("pts", [[1, 2], [3, 4]])]

    def test_non_adjacent_repeat_is_separate_entry(self):
        attrs = AttributeList([("w", 1), ("x", 2), ("w", 3)])
        assert attrs.names() == ["w", "x", "w"]

    def test_grouped_merges_non_adjacent_runs(self):
        attrs = AttributeList([("w", 1), ("w", 2), ("x", 5), ("w", 3)])
        assert attrs.grouped() == {"w": [1, 2, 3], "x": 5}

    def test_get_and_len(self):
        attrs = AttributeList([("a", 1), ("b", "x")])
        assert attrs.get("b") == "x"
        assert attrs.get("missing") is None
        assert len(attrs) == 2

    def test_clear_resets_run_tracking(self):
        attrs = AttributeList([("a", 1)])
        attrs.clear()
        attrs.add("a", 2)
        assert list(attrs) == [("a", 2)]

    def test_equality_with_plain_list(self):
        assert AttributeList([("a", 1)]) == [("a", 1)]


class TestParsedGraph:
    """Collecting a record stream."""

    def test_from_records(self):
        records = [GraphRecord(directed=True), NodeRecord(id="0"), NodeRecord(id="1")]
        parsed = ParsedGraph.from_records(records)
        assert parsed.graph.directed is True
        assert [n.id for n in parsed.nodes] == ["0", "1"]
        assert parsed.edges == []
