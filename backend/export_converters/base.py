"""Base class shared by the GML and GraphML writers."""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, TextIO

from models.graph import GraphElement


@dataclass
class WriteResult:
    """Counts reported by a writer after a document has been written."""

    target_type: str
    nodes: int = 0
    edges: int = 0
    keys: int = 0


class BaseWriter(ABC):
    """Abstract base class for graph writers.

    ``write`` consumes the record stream produced by a parser: one
    ``GraphRecord`` followed by node and edge records.
    """

    target_type: str = "unknown"

    @abstractmethod
    def write(self, records: Iterable[GraphElement], out: TextIO) -> WriteResult:
        """Render ``records`` to the text stream ``out``."""
        pass

    def dumps(self, records: Iterable[GraphElement]) -> str:
        """Render ``records`` to a string."""
        buffer = io.StringIO()
        self.write(records, buffer)
        return buffer.getvalue()
