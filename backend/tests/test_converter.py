"""Tests for the conversion service: end-to-end GML <-> GraphML behaviour."""

import io

import pytest

from exceptions import InvalidAttributeNameError, ParseError, UnsupportedFormatError
from parsers.gml import GmlParser
from parsers.graphml import GraphmlParser
from services.converter import (
    GML,
    GRAPHML,
    convert_bytes,
    convert_file,
    convert_text,
    detect_format,
    gml_to_graphml,
    graphml_to_gml,
    normalize_gml,
    read_chunks,
    resolve_target,
)

IGRAPH_GML = """Creator "igraph version 0.10"
Version 1
graph [
  directed 0
  node [
    id 0
    name "a"
    empty ""
    score NaN
    attrs "{"color": "red", "sizes": [1, 2]}"
  ]
]
"""


def _to_graphml(gml: str) -> str:
    out = io.StringIO()
    gml_to_graphml(gml.splitlines(), out)
    return out.getvalue()


def _to_gml(graphml: str) -> str:
    out = io.StringIO()
    graphml_to_gml([graphml.encode("utf-8")], out)
    return out.getvalue()


class TestRoundTrip:
    """GML -> GraphML -> GML -> GraphML."""

    def test_graphml_is_stable(self, sample_gml):
        first = _to_graphml(sample_gml)
        second = _to_graphml(_to_gml(first))
        assert second == first

    def test_structure_preserved(self, sample_gml):
        original = GmlParser().parse(sample_gml)
        back = GmlParser().parse(_to_gml(_to_graphml(sample_gml)))
        assert [n.id for n in back.nodes] == [n.id for n in original.nodes]
        assert [(e.source, e.target) for e in back.edges] == [
            (e.source, e.target) for e in original.edges
        ]
        for before, after in zip(original.nodes, back.nodes):
            assert set(after.attributes.names()) == set(before.attributes.names())

    def test_values_preserved(self, sample_gml):
        back = GmlParser().parse(_to_gml(_to_graphml(sample_gml)))
        router = back.nodes[0].attributes
        assert router.get("weight") == [1, 2]
        assert router.get("meta") == {"a": 1, "b": 2}
        assert back.edges[0].attributes.get("capacity") == 2.5
        assert back.graph.directed is True

    def test_nested_blocks_survive(self):
        gml = (
            "graph [\n  node [\n    id 0\n    graphics [\n      Line [\n"
            "        point [\n          x 1\n          y 2\n        ]\n"
            "        point [\n          x 3\n          y 4\n        ]\n"
            "      ]\n    ]\n  ]\n]\n"
        )
        back = GmlParser().parse(_to_gml(_to_graphml(gml)))
        assert back.nodes[0].attributes.get("graphics") == {
            "Line": {"point": [{"x": 1, "y": 2}, {"x": 3, "y": 4}]}
        }


class TestConversionProperties:
    """Behaviour visible across a whole conversion."""

    def test_repeated_weight_is_one_attribute(self):
        gml = "graph [\n  node [\n    id 0\n    weight 1\n    weight 2\n  ]\n]\n"
        output = _to_graphml(gml)
        assert output.count("<data ") == 1
        assert ">[1,2]</data>" in output

    def test_dict_encoded_as_json(self):
        gml = "graph [\n  node [\n    id 0\n    meta [\n      a 1\n      b 2\n    ]\n  ]\n]\n"
        output = _to_graphml(gml)
        assert '>{"a":1,"b":2}</data>' in output
        assert "    meta [\n      a 1\n      b 2\n    ]\n" in _to_gml(output)

    def test_empty_data_elided(self, sample_graphml):
        gml = _to_gml(sample_graphml)
        node_1 = gml.split("id 1\n", 1)[1].split("]", 1)[0]
        assert "label" not in node_1

    def test_missing_edgedefault_is_undirected(self):
        graphml = (
            '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">'
            '<graph><node id="n0"/></graph></graphml>'
        )
        assert "  directed 0\n" in _to_gml(graphml)

    def test_graphml_to_gml_sample(self, sample_graphml):
        assert _to_gml(sample_graphml) == (
            "graph [\n"
            "  directed 1\n"
            '  name "example"\n'
            "  node [\n"
            "    id 0\n"
            '    label "first"\n'
            "    weight 1.5\n"
            "    meta [\n"
            "      a 1\n"
            "      b 1\n"
            "      b 2\n"
            "    ]\n"
            "  ]\n"
            "  node [\n"
            "    id 1\n"
            "  ]\n"
            "  edge [\n"
            "    source 0\n"
            "    target 1\n"
            "    capacity 7\n"
            "  ]\n"
            "]\n"
        )

    def test_stats(self, sample_gml):
        stats = gml_to_graphml(sample_gml.splitlines(), io.StringIO())
        assert (stats.source_format, stats.target_format) == (GML, GRAPHML)
        assert (stats.nodes, stats.edges, stats.keys) == (2, 1, 5)
        assert stats.duration_ms >= 0



def _graphml_with_key(for_kind: str, attr_name: str, body: str) -> str:
    return (
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">'
        f'<key id="d0" for="{for_kind}" attr.name="{attr_name}" attr.type="int"/>'
        f'<graph edgedefault="undirected">{body}</graph></graphml>'
    )


class TestAttributeNamesToGml:
    """GraphML key names that GML cannot carry."""

    def test_name_with_space_rejected(self):
        graphml = _graphml_with_key(
            "node", "Modularity Class", '<node id="n0"><data key="d0">3</data></node>'
        )
        with pytest.raises(InvalidAttributeNameError) as exc_info:
            _to_gml(graphml)
        assert exc_info.value.attr_name == "Modularity Class"

    def test_node_key_named_id_rejected(self):
        graphml = _graphml_with_key(
            "node", "id", '<node id="n0"><data key="d0">7</data></node>'
        )
        with pytest.raises(InvalidAttributeNameError) as exc_info:
            _to_gml(graphml)
        assert exc_info.value.attr_name == "id"

    def test_edge_key_named_target_rejected(self):
        graphml = _graphml_with_key(
            "edge",
            "target",
            '<node id="n0"/><node id="n1"/><node id="n2"/>'
            '<edge source="n0" target="n1"><data key="d0">2</data></edge>',
        )
        with pytest.raises(InvalidAttributeNameError) as exc_info:
            _to_gml(graphml)
        assert exc_info.value.attr_name == "target"

    def test_valid_names_still_convert(self):
        graphml = _graphml_with_key(
            "node", "modularity_class", '<node id="n0"><data key="d0">3</data></node>'
        )
        assert "    modularity_class 3\n" in _to_gml(graphml)

class TestNormalize:

    def test_normalize_gml(self):
        out = io.StringIO()
        normalize_gml(IGRAPH_GML.splitlines(), out)
        assert out.getvalue() == (
            "graph [\n"
            "  directed 0\n"
            '  Creator "igraph version 0.10"\n'
            "  Version 1\n"
            "  node [\n"
            "    id 0\n"
            '    name "a"\n'
            "    attrs [\n"
            '      color "red"\n'
            "      sizes 1\n"
            "      sizes 2\n"
            "    ]\n"
            "  ]\n"
            "]\n"
        )

    def test_normalize_requires_gml(self, sample_graphml):
        with pytest.raises(UnsupportedFormatError):
            convert_text(sample_graphml, GRAPHML, normalize=True)


class TestFormatDispatch:

    def test_detect_format(self):
        assert detect_format("a/b/net.GML") == GML
        assert detect_format("net.graphml") == GRAPHML

    def test_detect_unknown_extension(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            detect_format("net.txt")
        assert ".txt" in str(exc_info.value)

    def test_default_targets(self):
        assert resolve_target(GML, None, False) == GRAPHML
        assert resolve_target(GML, None, True) == GML
        assert resolve_target(GRAPHML, None, False) == GML

    def test_graphml_to_graphml_rejected(self):
        with pytest.raises(UnsupportedFormatError):
            resolve_target(GRAPHML, GRAPHML, False)

    def test_unknown_target_rejected(self):
        with pytest.raises(UnsupportedFormatError):
            resolve_target(GML, "dot", False)

    def test_read_chunks(self):
        chunks = list(read_chunks(io.BytesIO(b"abcdefg"), chunk_size=3))
        assert chunks == [b"abc", b"def", b"g"]


class TestConvertBytes:

    def test_gml_upload(self, sample_gml):
        text, stats = convert_bytes(sample_gml.encode("utf-8"), GML)
        assert text.startswith('<?xml version="1.0"')
        assert stats.target_format == GRAPHML

    def test_graphml_upload(self, sample_graphml):
        text, stats = convert_bytes(sample_graphml.encode("utf-8"), GRAPHML)
        assert text.startswith("graph [\n")
        assert (stats.nodes, stats.edges) == (2, 1)

    def test_invalid_utf8(self):
        with pytest.raises(ParseError) as exc_info:
            convert_bytes(b"graph [\n  label \"\xff\"\n]\n", GML)
        assert exc_info.value.offset == 17


class TestConvertFile:
    """File-to-file conversion with extension dispatch."""

    def test_gml_to_graphml_file(self, tmp_path, sample_gml):
        src = tmp_path / "net.gml"
        dst = tmp_path / "net.graphml"
        src.write_text(sample_gml, encoding="utf-8")

        stats = convert_file(src, dst)

        assert stats.target_format == GRAPHML
        parsed = GraphmlParser().parse(dst.read_text(encoding="utf-8"))
        assert len(parsed.nodes) == 2

    def test_graphml_to_gml_file(self, tmp_path, sample_graphml):
        src = tmp_path / "net.graphml"
        dst = tmp_path / "net.gml"
        src.write_text(sample_graphml, encoding="utf-8")

        stats = convert_file(src, dst)

        assert stats.target_format == GML
        assert dst.read_text(encoding="utf-8") == _to_gml(sample_graphml)

    def test_gml_to_gml_normalizes(self, tmp_path):
        src = tmp_path / "igraph.gml"
        dst = tmp_path / "clean.gml"
        src.write_text(IGRAPH_GML, encoding="utf-8")

        convert_file(src, dst)

        output = dst.read_text(encoding="utf-8")
        assert "empty" not in output
        assert "score" not in output
        assert '      color "red"\n' in output

    def test_unknown_output_extension_uses_default(self, tmp_path, sample_gml):
        src = tmp_path / "net.gml"
        dst = tmp_path / "net.out"
        src.write_text(sample_gml, encoding="utf-8")

        stats = convert_file(src, dst)

        assert stats.target_format == GRAPHML
        assert dst.read_text(encoding="utf-8").startswith("<?xml")

    def test_unsupported_input_extension(self, tmp_path):
        src = tmp_path / "net.csv"
        src.write_text("a,b\n", encoding="utf-8")
        with pytest.raises(UnsupportedFormatError):
            convert_file(src, tmp_path / "net.gml")
        assert not (tmp_path / "net.gml").exists()

    def test_failed_conversion_removes_output(self, tmp_path):
        src = tmp_path / "broken.gml"
        dst = tmp_path / "broken.graphml"
        src.write_text("graph [\n  node [\n    id 0\n", encoding="utf-8")

        with pytest.raises(ParseError):
            convert_file(src, dst)
        assert not dst.exists()

    def test_invalid_attribute_name_removes_output(self, tmp_path):
        src = tmp_path / "gephi.graphml"
        dst = tmp_path / "gephi.gml"
        src.write_text(
            _graphml_with_key(
                "node", "Modularity Class", '<node id="n0"><data key="d0">3</data></node>'
            ),
            encoding="utf-8",
        )

        with pytest.raises(InvalidAttributeNameError):
            convert_file(src, dst)
        assert not dst.exists()

    def test_invalid_utf8_file(self, tmp_path):
        src = tmp_path / "latin1.gml"
        dst = tmp_path / "latin1.graphml"
        src.write_bytes(b'graph [\n  label "caf\xe9"\n]\n')

        with pytest.raises(ParseError):
            convert_file(src, dst)
        assert not dst.exists()

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            convert_file(tmp_path / "absent.gml", tmp_path / "absent.graphml")
        assert not (tmp_path / "absent.graphml").exists()
