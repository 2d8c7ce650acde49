"""
GML writer.

Renders the record stream as line-oriented GML::

    graph [
      directed 0
      label "example"
      node [
        id 0
        weight 1
        weight 2
        meta [
          a 1
        ]
      ]
    ]

Lists are written as the same name repeated once per item and dicts as
bracketed sub-blocks, which is exactly how ``GmlParser`` reads them back.
Attribute names must be GML keys (``[A-Za-z_][A-Za-z0-9_]*``) that do not
shadow ``id``, ``source``, ``target`` or ``directed``; other names raise
``InvalidAttributeNameError`` instead of being written ambiguously.
"""

import logging
import re
from typing import Iterable, Iterator, Optional, TextIO

from config import settings
from exceptions import InvalidAttributeNameError
from models.graph import EdgeRecord, GraphElement, GraphRecord, NodeRecord
from models.value import Value, encode_structured, format_number
from .base import BaseWriter, WriteResult

logger = logging.getLogger(__name__)

_BARE_ID_RE = re.compile(r"[+-]?\d+")
_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# names the parser reads as the element's own fields rather than attributes
_RESERVED_NAMES = {
    "graph": frozenset({"directed", "graph", "node", "edge"}),
    "node": frozenset({"id"}),
    "edge": frozenset({"source", "target"}),
}


def quote_text(text: str) -> str:
    """Quote a string for GML, escaping characters that would break the line."""
    escaped = (
        text.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("\n", "&#10;")
        .replace("\r", "&#13;")
    )
    return f'"{escaped}"'


class GmlWriter(BaseWriter):
    """Writer producing GML text."""

    target_type: str = "gml"

    def __init__(self, indent: Optional[int] = None):
        self.indent = settings.GML_INDENT if indent is None else indent

    def write(self, records: Iterable[GraphElement], out: TextIO) -> WriteResult:
        result = WriteResult(target_type=self.target_type)
        header_written = False

        out.write("graph [\n")
        for record in records:
            if isinstance(record, GraphRecord):
                if header_written:
                    logger.warning("Ignoring additional graph header in record stream")
                    continue
                self._write_lines(out, self._graph_lines(record))
                header_written = True
                continue

            if not header_written:
                self._write_lines(out, self._graph_lines(GraphRecord()))
                header_written = True

            if isinstance(record, NodeRecord):
                self._write_lines(out, self._node_lines(record))
                result.nodes += 1
            elif isinstance(record, EdgeRecord):
                self._write_lines(out, self._edge_lines(record))
                result.edges += 1

        if not header_written:
            self._write_lines(out, self._graph_lines(GraphRecord()))
        out.write("]\n")

        logger.debug(f"GML written: {result.nodes} nodes, {result.edges} edges")
        return result

    @staticmethod
    def _write_lines(out: TextIO, lines: Iterable[str]) -> None:
        for line in lines:
            out.write(line)
            out.write("\n")

    def _pad(self, depth: int) -> str:
        return " " * (self.indent * depth)

    def _graph_lines(self, graph: GraphRecord) -> Iterator[str]:
        yield f"{self._pad(1)}directed {1 if graph.directed else 0}"
        yield from self._element_attribute_lines(graph, 1)

    def _node_lines(self, node: NodeRecord) -> Iterator[str]:
        yield f"{self._pad(1)}node ["
        yield f"{self._pad(2)}id {self._id(node.id)}"
        yield from self._element_attribute_lines(node, 2)
        yield f"{self._pad(1)}]"

    def _edge_lines(self, edge: EdgeRecord) -> Iterator[str]:
        yield f"{self._pad(1)}edge ["
        yield f"{self._pad(2)}source {self._id(edge.source)}"
        yield f"{self._pad(2)}target {self._id(edge.target)}"
        yield from self._element_attribute_lines(edge, 2)
        yield f"{self._pad(1)}]"

    def _element_attribute_lines(self, element: GraphElement, depth: int) -> Iterator[str]:
        reserved = _RESERVED_NAMES[element.kind]
        for name, value in element.attributes:
            if name in reserved:
                raise InvalidAttributeNameError(
                    name, f"reserved for the {element.kind} itself"
                )
            yield from self.attribute_lines(name, value, depth)

    def attribute_lines(self, name: str, value: Value, depth: int) -> Iterator[str]:
        """GML lines for one attribute at the given nesting depth."""
        if not _KEY_RE.fullmatch(name):
            raise InvalidAttributeNameError(
                name, "GML keys are letters, digits and underscores"
            )
        pad = self._pad(depth)
        if isinstance(value, dict):
            yield f"{pad}{name} ["
            for key, item in value.items():
                yield from self.attribute_lines(key, item, depth + 1)
            yield f"{pad}]"
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, list):
                    # no GML form for a list directly inside a list
                    yield f"{pad}{name} {quote_text(encode_structured(item))}"
                else:
                    yield from self.attribute_lines(name, item, depth)
        else:
            yield f"{pad}{name} {self._literal(value)}"

    @staticmethod
    def _literal(value: Value) -> str:
        if isinstance(value, (int, float)):
            return format_number(value)
        return quote_text(str(value))

    @staticmethod
    def _id(raw_id: str) -> str:
        if _BARE_ID_RE.fullmatch(raw_id):
            return raw_id
        return quote_text(raw_id)
