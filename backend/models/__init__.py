from .graph import (
    GRAPH,
    NODE,
    EDGE,
    AttributeList,
    GraphRecord,
    NodeRecord,
    EdgeRecord,
    GraphElement,
    ParsedGraph,
)
from .keys import Key, KeyRegistry, KeyTable
from .value import Value, infer_scalar

__all__ = [
    "GRAPH",
    "NODE",
    "EDGE",
    "AttributeList",
    "GraphRecord",
    "NodeRecord",
    "EdgeRecord",
    "GraphElement",
    "ParsedGraph",
    "Key",
    "KeyRegistry",
    "KeyTable",
    "Value",
    "infer_scalar",
]
