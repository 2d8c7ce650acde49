"""Base class shared by the GML and GraphML parsers."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator, Optional

from models.graph import GraphElement, ParsedGraph


class BaseParser(ABC):
    """Abstract base class for graph parsers.

    Parsers stream: ``iter_records`` yields exactly one ``GraphRecord``
    (before the first node or edge, or at the end for an empty graph),
    then ``NodeRecord``/``EdgeRecord`` objects in input order.
    """

    source_type: str = "unknown"

    @abstractmethod
    def iter_records(self, source: Iterable[Any]) -> Iterator[GraphElement]:
        """Yield graph, node and edge records from ``source``."""
        pass

    @abstractmethod
    def source_from_text(self, data: str) -> Iterable[Any]:
        """Wrap an in-memory document in the input shape ``iter_records`` reads."""
        pass

    def parse(self, data: str, **kwargs) -> ParsedGraph:
        """Parse a whole document held in memory."""
        return ParsedGraph.from_records(self.iter_records(self.source_from_text(data)))

    def detect_format(self, data: str) -> Optional[str]:
        """Detect the format of input data. Override in subclasses."""
        return None
