"""In-memory graph records produced by the parsers and consumed by the writers."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .value import Value

GRAPH = "graph"
NODE = "node"
EDGE = "edge"


class AttributeList:
    """Ordered ``(name, value)`` pairs with repeated-name list detection.

    Adding a name equal to the most recently added one promotes that entry
    to a list (or extends the list it already became). Nothing in GML marks
    a list explicitly, so a one-element list and a scalar look the same.
    """

    def __init__(self, items: Optional[Iterable[Tuple[str, Value]]] = None):
        self._items: List[Tuple[str, Value]] = []
        self._last_name: Optional[str] = None
        self._run_length = 0
        for name, value in items or ():
            self.add(name, value)

    def add(self, name: str, value: Value) -> None:
        if self._items and name == self._last_name:
            _, current = self._items[-1]
            if self._run_length == 1:
                self._items[-1] = (name, [current, value])
            else:
                current.append(value)
            self._run_length += 1
            return
        self._items.append((name, value))
        self._last_name = name
        self._run_length = 1

    def clear(self) -> None:
        self._items.clear()
        self._last_name = None
        self._run_length = 0

    def names(self) -> List[str]:
        return [name for name, _ in self._items]

    def get(self, name: str, default: Optional[Value] = None) -> Optional[Value]:
        for item_name, value in self._items:
            if item_name == name:
                return value
        return default

    def grouped(self) -> Dict[str, Value]:
        """Collapse the pairs into a mapping, one entry per name.

        A name that appears in several non-adjacent runs has all its values
        merged into one list, in order.
        """
        result: Dict[str, Value] = {}
        merged = set()
        for name, value in self._items:
            if name not in result:
                result[name] = value
                continue
            if name not in merged:
                first = result[name]
                result[name] = list(first) if isinstance(first, list) else [first]
                merged.add(name)
            if isinstance(value, list):
                result[name].extend(value)
            else:
                result[name].append(value)
        return result

    def __iter__(self) -> Iterator[Tuple[str, Value]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"AttributeList({self._items!r})"


@dataclass
class GraphRecord:
    """Graph-level header: directedness and graph attributes."""

    directed: Optional[bool] = None
    attributes: AttributeList = field(default_factory=AttributeList)

    kind = GRAPH


@dataclass
class NodeRecord:
    """A single node and its attributes."""

    id: str = ""
    attributes: AttributeList = field(default_factory=AttributeList)

    kind = NODE


@dataclass
class EdgeRecord:
    """A single edge and its attributes."""

    source: str = ""
    target: str = ""
    attributes: AttributeList = field(default_factory=AttributeList)

    kind = EDGE


GraphElement = Union[GraphRecord, NodeRecord, EdgeRecord]


@dataclass
class ParsedGraph:
    """A fully materialized graph, for callers that do not need streaming."""

    graph: GraphRecord = field(default_factory=GraphRecord)
    nodes: List[NodeRecord] = field(default_factory=list)
    edges: List[EdgeRecord] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: Iterable[GraphElement]) -> "ParsedGraph":
        parsed = cls()
        for record in records:
            if isinstance(record, GraphRecord):
                parsed.graph = record
            elif isinstance(record, NodeRecord):
                parsed.nodes.append(record)
            else:
                parsed.edges.append(record)
        return parsed
