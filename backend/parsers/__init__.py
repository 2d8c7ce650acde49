"""Parser package for graph documents.

This package contains the streaming parsers for GML and GraphML input.
"""

from .base import BaseParser
from .gml import GmlParser
from .graphml import GraphmlParser

# Parser registry mapping format names to parser classes
PARSERS = {
    "gml": GmlParser,
    "graphml": GraphmlParser,
}


def get_parser(format_name: str, **kwargs) -> BaseParser:
    """Get a parser instance by format name.

    Args:
        format_name: Name of the format ('gml' or 'graphml')
        **kwargs: Passed to the parser constructor

    Returns:
        Parser instance

    Raises:
        ValueError: If format_name is not registered
    """
    parser_class = PARSERS.get(format_name.lower())
    if parser_class is None:
        raise ValueError(
            f"Unknown parser: {format_name}. Available: {', '.join(PARSERS.keys())}"
        )
    return parser_class(**kwargs)


__all__ = [
    "BaseParser",
    "GmlParser",
    "GraphmlParser",
    "PARSERS",
    "get_parser",
]
