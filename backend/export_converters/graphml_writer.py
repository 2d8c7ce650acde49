"""
GraphML writer.

Key ids (``d0``, ``d1``, ...) and their types are only final once every
record has been seen, yet the ``<key>`` declarations must come first in the
document. The writer therefore streams the ``<graph>`` body into a scratch
buffer, then writes the XML declaration, the root element and the keys, and
finally copies the buffered body behind them.

Usage
-----
::

    writer = GraphmlWriter()
    with open("out.graphml", "w", encoding="utf-8") as out:
        writer.write(GmlParser().iter_records(lines), out)

"""

import logging
import shutil
import tempfile
import xml.etree.ElementTree as ET
from typing import Iterable, Optional, TextIO

from config import settings
from models.graph import (
    EDGE,
    GRAPH,
    NODE,
    AttributeList,
    EdgeRecord,
    GraphElement,
    GraphRecord,
    NodeRecord,
)
from models.keys import KeyRegistry
from models.value import Value, encode_structured, format_number
from .base import BaseWriter, WriteResult

logger = logging.getLogger(__name__)

GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = (
    "http://graphml.graphdrawing.org/xmlns "
    "http://graphml.graphdrawing.org/xmlns/1.0/graphml.xsd"
)
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'


def data_text(value: Value) -> str:
    """Text stored in a ``<data>`` element for a value."""
    if isinstance(value, (list, dict)):
        return encode_structured(value)
    if isinstance(value, (int, float)):
        return format_number(value)
    return value


class GraphmlWriter(BaseWriter):
    """Writer producing GraphML XML."""

    target_type: str = "graphml"

    def __init__(
        self,
        indent: Optional[int] = None,
        node_id_prefix: Optional[str] = None,
        spool_max_bytes: Optional[int] = None,
        scratch_dir: Optional[str] = None,
    ):
        self.indent = settings.GRAPHML_INDENT if indent is None else indent
        self.node_id_prefix = (
            settings.GRAPHML_NODE_ID_PREFIX if node_id_prefix is None else node_id_prefix
        )
        self.spool_max_bytes = (
            settings.SCRATCH_SPOOL_MAX_BYTES if spool_max_bytes is None else spool_max_bytes
        )
        self.scratch_dir = settings.SCRATCH_DIR if scratch_dir is None else scratch_dir
        self.registry = KeyRegistry()
        self.ambiguous_ids = 0

    def write(self, records: Iterable[GraphElement], out: TextIO) -> WriteResult:
        registry = KeyRegistry()
        self.registry = registry
        result = WriteResult(target_type=self.target_type)
        self.ambiguous_ids = 0

        with tempfile.SpooledTemporaryFile(
            max_size=self.spool_max_bytes,
            mode="w+",
            encoding="utf-8",
            dir=self.scratch_dir,
        ) as scratch:
            header_written = False
            for record in records:
                if isinstance(record, GraphRecord):
                    if header_written:
                        logger.warning("Ignoring additional graph header in record stream")
                        continue
                    self._write_graph_open(scratch, record, registry)
                    header_written = True
                    continue

                if not header_written:
                    self._write_graph_open(scratch, GraphRecord(), registry)
                    header_written = True

                if isinstance(record, NodeRecord):
                    if self._reads_back_numeric(record.id):
                        self.ambiguous_ids += 1
                    element = ET.Element("node", id=self._node_id(record.id))
                    self._add_data(element, record.attributes, NODE, registry)
                    result.nodes += 1
                elif isinstance(record, EdgeRecord):
                    element = ET.Element(
                        "edge",
                        source=self._node_id(record.source),
                        target=self._node_id(record.target),
                    )
                    self._add_data(element, record.attributes, EDGE, registry)
                    result.edges += 1
                else:
                    continue
                self._write_element(scratch, element, level=2)

            if not header_written:
                self._write_graph_open(scratch, GraphRecord(), registry)
            scratch.write(f"{self._pad(1)}</graph>\n")

            # every key is known now: emit the header, then the buffered body
            self._write_preamble(out, registry)
            scratch.seek(0)
            shutil.copyfileobj(scratch, out)
            out.write("</graphml>\n")

        result.keys = len(registry)
        if self.ambiguous_ids:
            logger.warning(
                f"{self.ambiguous_ids} node ids look like '{self.node_id_prefix}<number>' "
                f"and will read back as numeric ids"
            )
        logger.debug(
            f"GraphML written: {result.keys} keys, {result.nodes} nodes, "
            f"{result.edges} edges"
        )
        return result

    def _pad(self, level: int) -> str:
        return " " * (self.indent * level)

    def _write_preamble(self, out: TextIO, registry: KeyRegistry) -> None:
        out.write(XML_DECLARATION + "\n")
        out.write(
            f'<graphml xmlns="{GRAPHML_NS}" xmlns:xsi="{XSI_NS}" '
            f'xsi:schemaLocation="{SCHEMA_LOCATION}">\n'
        )
        for key in registry.keys():
            element = ET.Element(
                "key",
                attrib={
                    "id": key.id,
                    "for": key.for_kind,
                    "attr.name": key.attr_name,
                    "attr.type": key.attr_type,
                },
            )
            self._write_element(out, element, level=1)

    def _write_graph_open(
        self, scratch: TextIO, graph: GraphRecord, registry: KeyRegistry
    ) -> None:
        direction = "directed" if graph.directed else "undirected"
        scratch.write(f'{self._pad(1)}<graph edgedefault="{direction}">\n')
        holder = ET.Element("graph")
        self._add_data(holder, graph.attributes, GRAPH, registry)
        for data in holder:
            self._write_element(scratch, data, level=2)

    def _write_element(self, out: TextIO, element: ET.Element, level: int) -> None:
        if self.indent:
            ET.indent(element, space=" " * self.indent, level=level)
        out.write(self._pad(level))
        out.write(ET.tostring(element, encoding="unicode"))
        out.write("\n")

    @staticmethod
    def _add_data(
        element: ET.Element,
        attributes: AttributeList,
        for_kind: str,
        registry: KeyRegistry,
    ) -> None:
        # one <data> per key: a name repeated within the element is written
        # once, as a JSON array, under a string-typed key
        for name, value in attributes.grouped().items():
            key = registry.observe(name, for_kind, value)
            data = ET.SubElement(element, "data", key=key.id)
            data.text = data_text(value)

    def _node_id(self, raw_id: str) -> str:
        if raw_id.isdigit():
            return f"{self.node_id_prefix}{raw_id}"
        return raw_id

    def _reads_back_numeric(self, raw_id: str) -> bool:
        """A text id such as ``n5`` is indistinguishable from the prefixed numeric id 5."""
        prefix = self.node_id_prefix
        return bool(prefix) and raw_id.startswith(prefix) and raw_id[len(prefix):].isdigit()
