"""
Graph writers.

Render the record stream produced by a parser as GML or GraphML text.
"""

from .base import BaseWriter, WriteResult
from .gml_writer import GmlWriter
from .graphml_writer import GraphmlWriter

# Writer registry mapping format names to writer classes
WRITERS = {
    "gml": GmlWriter,
    "graphml": GraphmlWriter,
}


def get_writer(format_name: str, **kwargs) -> BaseWriter:
    """Get a writer instance by format name.

    Raises:
        ValueError: If format_name is not registered
    """
    writer_class = WRITERS.get(format_name.lower())
    if writer_class is None:
        raise ValueError(
            f"Unknown writer: {format_name}. Available: {', '.join(WRITERS.keys())}"
        )
    return writer_class(**kwargs)


__all__ = [
    "BaseWriter",
    "WriteResult",
    "GmlWriter",
    "GraphmlWriter",
    "WRITERS",
    "get_writer",
]
