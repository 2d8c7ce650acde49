"""Parser for line-oriented GML documents.

GML is read one line at a time with a small state machine::

    graph [
      directed 1
      label "example"
      node [
        id 0
        weight 1
        weight 2          <- repeated name: weight becomes [1, 2]
        meta [            <- sub-block: meta becomes a dict
          a 1
        ]
      ]
      edge [
        source 0
        target 0
      ]
    ]

Only one ``key value`` pair (or block opener / closer) per line is supported.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from exceptions import ParseError
from models.graph import (
    AttributeList,
    EdgeRecord,
    GraphElement,
    GraphRecord,
    NodeRecord,
)
from models.value import Value, decode_structured, infer_scalar, is_missing
from .base import BaseParser

logger = logging.getLogger(__name__)

_GRAPH = "graph"
_NODE = "node"
_EDGE = "edge"

_ELEMENT_OPEN_RE = re.compile(r"(graph|node|edge)\s*\[")
_DETECT_RE = re.compile(r"^\s*graph\s*\[", re.MULTILINE)

# Returned by _value() for attributes dropped in normalize mode
_DROP = object()


@dataclass
class _Block:
    """A ``name [ ... ]`` sub-block being accumulated into a dict."""

    name: str
    attributes: AttributeList = field(default_factory=AttributeList)


class GmlParser(BaseParser):
    """Parser for GML graph documents.

    With ``normalize=True`` the parser also cleans up GML written by other
    tools: empty and ``NaN`` values are dropped, and quoted JSON objects or
    arrays (``"{...}"``) are decoded into dicts and lists.
    """

    source_type: str = "gml"

    def __init__(self, normalize: bool = False):
        self.normalize = normalize

    def source_from_text(self, data: str) -> Iterable[str]:
        return data.splitlines()

    def detect_format(self, data: str) -> Optional[str]:
        if _DETECT_RE.search(data):
            return "gml"
        return None

    def iter_records(self, lines: Iterable[str]) -> Iterator[GraphElement]:
        state = _GRAPH
        graph = GraphRecord()
        graph_flushed = False
        node: Optional[NodeRecord] = None
        edge: Optional[EdgeRecord] = None
        blocks: List[_Block] = []
        node_count = 0
        edge_count = 0
        line_number = 0

        logger.debug("Starting GML parsing")

        for line_number, raw_line in enumerate(lines, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            # node/edge/graph openers only count outside an element
            if state == _GRAPH and not blocks:
                match = _ELEMENT_OPEN_RE.fullmatch(line)
                if match:
                    kind = match.group(1)
                    if kind == _GRAPH:
                        continue
                    if not graph_flushed:
                        graph_flushed = True
                        yield graph
                    if kind == _NODE:
                        node = NodeRecord()
                        state = _NODE
                    else:
                        edge = EdgeRecord()
                        state = _EDGE
                    continue

            if line == "]":
                if blocks:
                    block = blocks.pop()
                    if blocks or state != _GRAPH or not graph_flushed:
                        parent = self._target(blocks, state, graph, node, edge)
                        parent.add(block.name, block.attributes.grouped())
                elif state == _NODE:
                    node_count += 1
                    yield node
                    node = None
                    state = _GRAPH
                elif state == _EDGE:
                    edge_count += 1
                    yield edge
                    edge = None
                    state = _GRAPH
                # in graph state this is the closing bracket of the document
                continue

            name, token = self._split(line, line_number)

            if token == "[" or (token.endswith("[") and not token.startswith('"')):
                if state == _GRAPH and graph_flushed and not blocks:
                    logger.warning(
                        f"Graph attribute block '{name}' after the first node or "
                        f"edge is ignored (line {line_number})"
                    )
                blocks.append(_Block(name))
                continue

            if blocks:
                value = self._value(token)
                if value is not _DROP:
                    blocks[-1].attributes.add(name, value)
                continue

            if state == _GRAPH:
                if graph_flushed:
                    logger.warning(
                        f"Graph attribute '{name}' after the first node or edge "
                        f"is ignored (line {line_number})"
                    )
                elif name == "directed":
                    graph.directed = token == "1"
                else:
                    self._add(graph.attributes, name, token)
            elif state == _NODE:
                if name == "id":
                    node.id = self._unquote(token)
                else:
                    self._add(node.attributes, name, token)
            else:
                if name == "source":
                    edge.source = self._unquote(token)
                elif name == "target":
                    edge.target = self._unquote(token)
                else:
                    self._add(edge.attributes, name, token)

        if blocks or state != _GRAPH:
            open_name = blocks[-1].name if blocks else state
            raise ParseError(
                f"Unexpected end of input inside '{open_name}' block",
                line=line_number,
            )

        if not graph_flushed:
            yield graph

        logger.debug(
            f"GML parsing complete: {node_count} nodes, {edge_count} edges"
        )

    @staticmethod
    def _target(
        blocks: List[_Block],
        state: str,
        graph: GraphRecord,
        node: Optional[NodeRecord],
        edge: Optional[EdgeRecord],
    ) -> AttributeList:
        """Attribute list a finished block is stored into."""
        if blocks:
            return blocks[-1].attributes
        if state == _NODE:
            return node.attributes
        if state == _EDGE:
            return edge.attributes
        return graph.attributes

    @staticmethod
    def _split(line: str, line_number: int) -> Tuple[str, str]:
        parts = line.split(None, 1)
        if len(parts) != 2:
            raise ParseError(
                "Expected '<name> <value>'", line=line_number, text=line
            )
        return parts[0], parts[1]

    def _add(self, attributes: AttributeList, name: str, token: str) -> None:
        value = self._value(token)
        if value is not _DROP:
            attributes.add(name, value)

    def _value(self, token: str):
        """Typed value for a raw token, or ``_DROP`` in normalize mode."""
        if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
            value: Value = html.unescape(token[1:-1])
            if self.normalize:
                decoded = decode_structured(value)
                if decoded is not None:
                    value = decoded
        else:
            value = infer_scalar(token)

        if self.normalize and is_missing(value):
            return _DROP
        return value

    @staticmethod
    def _unquote(token: str) -> str:
        if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
            return html.unescape(token[1:-1])
        return token
