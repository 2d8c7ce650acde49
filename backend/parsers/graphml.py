"""Streaming parser for GraphML documents.

The document is fed to ``xml.etree.ElementTree.XMLPullParser`` in chunks and
handled one start/end event at a time, so node and edge records are yielded
as soon as their closing tag is read. Only the subset written by
``GraphmlWriter`` (and common exporters such as networkx) is understood:
``graphml``, ``key`` (with optional ``default``), ``graph``, ``node``,
``edge``, ``data`` and ``desc``.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union

from config import settings
from exceptions import ParseError, TypeMismatchError, UnsupportedTagError
from models.graph import EdgeRecord, GraphElement, GraphRecord, NodeRecord
from models.keys import GRAPHML_TYPE_ALIASES, TYPE_BOOLEAN, Key, KeyTable
from models.value import (
    TYPE_FLOAT,
    TYPE_INT,
    Value,
    decode_structured,
    parse_float,
)
from .base import BaseParser

logger = logging.getLogger(__name__)

SUPPORTED_TAGS = frozenset(
    {"graphml", "key", "default", "desc", "graph", "node", "edge", "data"}
)

_INT_RE = re.compile(r"[+-]?\d+")
_BOOLEANS = {"true": 1, "1": 1, "false": 0, "0": 0}
_CONTINUATION_BYTES = bytes(range(0x80, 0xC0))


@dataclass
class _ReadState:
    """Mutable state of one pass over a GraphML document."""

    graph: GraphRecord = field(default_factory=GraphRecord)
    graph_seen: bool = False
    graph_flushed: bool = False
    node: Optional[NodeRecord] = None
    edge: Optional[EdgeRecord] = None
    graph_element: Optional[ET.Element] = None
    last_key: Optional[Key] = None
    data_key: Optional[str] = None
    node_count: int = 0
    edge_count: int = 0


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tag names."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _char_count(data: bytes) -> int:
    """Number of UTF-8 characters in ``data``."""
    return len(data.translate(None, _CONTINUATION_BYTES))


class _ByteLocator:
    """Maps expat's (line, column) error positions to absolute byte offsets.

    Expat counts columns in characters, not bytes. Only the last two chunks
    fed are kept; a position before them has no known offset.
    """

    def __init__(self):
        self.window = b""
        self.base = 0  # absolute offset of window[0]
        self.line = 1  # line number at window[0]
        self.column = 0  # column at window[0], in characters
        self._older = 0  # length of the older chunk at the front of window

    def feed(self, chunk: bytes) -> None:
        dropped = self.window[:self._older]
        newline = dropped.rfind(b"\n")
        if newline >= 0:
            self.line += dropped.count(b"\n")
            self.column = _char_count(dropped[newline + 1:])
        else:
            self.column += _char_count(dropped)
        self.base += len(dropped)
        self.window = self.window[self._older:] + chunk
        self._older = len(self.window) - len(chunk)

    def offset(self, line: int, column: int) -> Optional[int]:
        if line < self.line:
            return None
        pos = 0
        if line == self.line:
            column -= self.column
            if column < 0:
                return None
        else:
            for _ in range(line - self.line):
                pos = self.window.find(b"\n", pos) + 1
                if pos == 0:
                    return None
        data = self.window
        while column > 0 and pos < len(data):
            pos += 1
            while pos < len(data) and data[pos] & 0xC0 == 0x80:
                pos += 1
            column -= 1
        return self.base + pos


class GraphmlParser(BaseParser):
    """Parser for GraphML documents."""

    source_type: str = "graphml"

    def __init__(
        self,
        strict_types: Optional[bool] = None,
        node_id_prefix: Optional[str] = None,
    ):
        self.strict_types = (
            settings.STRICT_TYPES if strict_types is None else strict_types
        )
        self.node_id_prefix = (
            settings.GRAPHML_NODE_ID_PREFIX if node_id_prefix is None else node_id_prefix
        )
        self.keys = KeyTable()

    def source_from_text(self, data: str) -> Iterable[bytes]:
        return [data.encode("utf-8")]

    def detect_format(self, data: str) -> Optional[str]:
        if "<graphml" in data[:4096]:
            return "graphml"
        return None

    def iter_records(
        self, chunks: Iterable[Union[bytes, str]]
    ) -> Iterator[GraphElement]:
        self.keys = KeyTable()
        state = _ReadState()
        pull = ET.XMLPullParser(events=("start", "end"))
        locator = _ByteLocator()
        self.state = state

        logger.debug("Starting GraphML parsing")

        for chunk in chunks:
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            locator.feed(chunk)
            try:
                pull.feed(chunk)
                yield from self._drain(pull, state)
            except ET.ParseError as e:
                raise self._xml_error(e, locator) from e

        try:
            pull.close()
            yield from self._drain(pull, state)
        except ET.ParseError as e:
            raise self._xml_error(e, locator) from e

        if not state.graph_flushed:
            yield state.graph

        logger.debug(
            f"GraphML parsing complete: {len(self.keys)} keys, "
            f"{state.node_count} nodes, {state.edge_count} edges"
        )

    @staticmethod
    def _xml_error(error: ET.ParseError, locator: _ByteLocator) -> ParseError:
        line, column = getattr(error, "position", (None, None))
        offset = locator.offset(line, column) if line is not None else None
        return ParseError(
            f"Malformed XML: {error}", line=line, column=column, offset=offset
        )

    def _drain(self, pull: ET.XMLPullParser, state: _ReadState) -> Iterator[GraphElement]:
        for event, elem in pull.read_events():
            tag = _local_name(elem.tag)
            if event == "start":
                yield from self._start(tag, elem, state)
            else:
                yield from self._end(tag, elem, state)

    def _start(
        self, tag: str, elem: ET.Element, state: _ReadState
    ) -> Iterator[GraphElement]:
        if tag not in SUPPORTED_TAGS:
            raise UnsupportedTagError(tag)

        if tag == "key":
            state.last_key = self._declare_key(elem)
        elif tag == "graph":
            if state.graph_seen:
                raise ParseError("Nested or multiple <graph> elements are not supported")
            state.graph_seen = True
            state.graph_element = elem
            edgedefault = elem.get("edgedefault")
            if edgedefault is not None:
                state.graph.directed = edgedefault == "directed"
        elif tag == "node":
            yield from self._flush_graph(state)
            state.node = NodeRecord(id=self._node_id(elem.get("id", "")))
        elif tag == "edge":
            yield from self._flush_graph(state)
            state.edge = EdgeRecord(
                source=self._node_id(elem.get("source", "")),
                target=self._node_id(elem.get("target", "")),
            )
        elif tag == "data":
            state.data_key = elem.get("key")
            if state.data_key is None:
                raise ParseError("<data> element without a key attribute")

    def _end(
        self, tag: str, elem: ET.Element, state: _ReadState
    ) -> Iterator[GraphElement]:
        if tag == "data":
            self._read_data(elem.text or "", state)
            state.data_key = None
            if state.node is None and state.edge is None:
                self._detach(elem, state)
            elem.clear()
        elif tag == "default":
            if state.last_key is not None:
                state.last_key.default = elem.text
        elif tag == "node":
            if state.node is not None:
                state.node_count += 1
                yield state.node
            state.node = None
            self._detach(elem, state)
            elem.clear()
        elif tag == "edge":
            if state.edge is not None:
                state.edge_count += 1
                yield state.edge
            state.edge = None
            self._detach(elem, state)
            elem.clear()
        elif tag == "desc":
            self._detach(elem, state)
        elif tag == "graph":
            yield from self._flush_graph(state)

    @staticmethod
    def _detach(elem: ET.Element, state: _ReadState) -> None:
        """Drop a finished child of <graph> so the tree does not grow with the input.

        Finished children are dropped in document order, so the one ending
        now is always the first child left.
        """
        parent = state.graph_element
        if parent is not None and len(parent) and parent[0] is elem:
            del parent[0]

    @staticmethod
    def _flush_graph(state: _ReadState) -> Iterator[GraphRecord]:
        if not state.graph_flushed:
            state.graph_flushed = True
            yield state.graph

    def _declare_key(self, elem: ET.Element) -> Key:
        key_id = elem.get("id")
        if not key_id:
            raise ParseError("<key> element without an id attribute")
        raw_type = elem.get("attr.type", "string")
        attr_type = GRAPHML_TYPE_ALIASES.get(raw_type)
        if attr_type is None:
            raise ParseError(f"Unsupported attr.type '{raw_type}' for key '{key_id}'")
        key = Key(
            id=key_id,
            attr_name=elem.get("attr.name") or key_id,
            for_kind=elem.get("for", "all"),
            attr_type=attr_type,
        )
        self.keys.declare(key)
        logger.debug(f"Declared key {key.id}: {key.for_kind}.{key.attr_name} ({raw_type})")
        return key

    def _node_id(self, raw_id: str) -> str:
        prefix = self.node_id_prefix
        if prefix and raw_id.startswith(prefix) and raw_id[len(prefix):].isdigit():
            return raw_id[len(prefix):]
        return raw_id

    def _read_data(self, text: str, state: _ReadState) -> None:
        key = self.keys.lookup(state.data_key)
        if text == "" or text == '""':
            return
        value = self._convert(key, text)

        if state.node is not None:
            state.node.attributes.add(key.attr_name, value)
        elif state.edge is not None:
            state.edge.attributes.add(key.attr_name, value)
        elif not state.graph_flushed:
            state.graph.attributes.add(key.attr_name, value)
        else:
            logger.warning(
                f"Graph attribute '{key.attr_name}' after the first node or edge is ignored"
            )

    def _convert(self, key: Key, text: str) -> Value:
        """Typed value for ``<data>`` text according to its key."""
        structured = decode_structured(text)
        if structured is not None:
            return structured

        stripped = text.strip()
        if key.attr_type == TYPE_INT:
            if _INT_RE.fullmatch(stripped):
                return int(stripped)
        elif key.attr_type == TYPE_FLOAT:
            number = parse_float(stripped)
            if number is not None:
                return number
        elif key.attr_type == TYPE_BOOLEAN:
            flag = _BOOLEANS.get(stripped.lower())
            if flag is not None:
                return flag
        else:
            return text

        if self.strict_types:
            raise TypeMismatchError(key.attr_name, key.attr_type, text)
        logger.warning(
            f"Value {text!r} for '{key.attr_name}' is not a valid {key.attr_type}, "
            f"keeping it as text"
        )
        return text
