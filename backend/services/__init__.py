"""Services package for the graph converter."""

from .converter import (
    GML,
    GRAPHML,
    ConversionStats,
    convert_bytes,
    convert_file,
    convert_stream,
    convert_text,
    detect_format,
    gml_to_graphml,
    graphml_to_gml,
    normalize_gml,
    resolve_target,
)

__all__ = [
    "GML",
    "GRAPHML",
    "ConversionStats",
    "convert_bytes",
    "convert_file",
    "convert_stream",
    "convert_text",
    "detect_format",
    "gml_to_graphml",
    "graphml_to_gml",
    "normalize_gml",
    "resolve_target",
]
