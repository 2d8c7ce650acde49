"""
Conversion service.

Connects a parser to a writer and supplies them with input and output:
GML is read as lines, GraphML as byte chunks, and both writers produce
text. Format dispatch is by file extension:

* ``.gml``     -> GraphML (or GML again when normalizing)
* ``.graphml`` -> GML
"""

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, TextIO, Tuple, Union

from config import settings
from exceptions import ParseError, UnsupportedFormatError
from export_converters import get_writer
from parsers import get_parser
from utils.logging_utils import LogTimer

logger = logging.getLogger(__name__)

GML = "gml"
GRAPHML = "graphml"

FORMAT_EXTENSIONS = {
    ".gml": GML,
    ".graphml": GRAPHML,
}

MEDIA_TYPES = {
    GML: "text/plain",
    GRAPHML: "application/xml",
}


@dataclass
class ConversionStats:
    """Summary of one conversion run."""

    source_format: str
    target_format: str
    nodes: int = 0
    edges: int = 0
    keys: int = 0
    duration_ms: float = 0.0


def detect_format(path: Union[str, Path]) -> str:
    """Return the graph format implied by a file name's extension."""
    suffix = Path(path).suffix.lower()
    fmt = FORMAT_EXTENSIONS.get(suffix)
    if fmt is None:
        raise UnsupportedFormatError(
            f"Unexpected file extension '{suffix or path}' "
            f"(only {', '.join(FORMAT_EXTENSIONS)} files are supported)"
        )
    return fmt


def resolve_target(source_format: str, target_format: Optional[str], normalize: bool) -> str:
    """Pick the output format and check the pair is supported.

    Without an explicit target, GML converts to GraphML (or to GML when
    normalizing) and GraphML converts to GML.
    """
    if target_format is None:
        if source_format == GML:
            target_format = GML if normalize else GRAPHML
        else:
            target_format = GML
    if target_format not in MEDIA_TYPES:
        raise UnsupportedFormatError(f"Unsupported target format '{target_format}'")
    if source_format == GRAPHML and target_format == GRAPHML:
        raise UnsupportedFormatError("GraphML to GraphML conversion is not supported")
    if normalize and source_format != GML:
        raise UnsupportedFormatError("Normalization is only available for GML input")
    return target_format


def read_chunks(handle: BinaryIO, chunk_size: Optional[int] = None) -> Iterator[bytes]:
    """Yield a binary file in fixed-size chunks."""
    chunk_size = chunk_size or settings.READ_CHUNK_BYTES
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            break
        yield chunk


def convert_stream(
    source: Iterable,
    out: TextIO,
    source_format: str,
    target_format: Optional[str] = None,
    normalize: bool = False,
) -> ConversionStats:
    """Convert one document from ``source`` into ``out``.

    ``source`` is an iterable of lines for GML input and of byte chunks for
    GraphML input. Errors propagate; nothing is retried.
    """
    target_format = resolve_target(source_format, target_format, normalize)
    parser_kwargs = {"normalize": normalize} if source_format == GML else {}
    parser = get_parser(source_format, **parser_kwargs)
    writer = get_writer(target_format)

    operation = f"Converting {source_format} to {target_format}"
    if normalize:
        operation = f"Normalizing {source_format}"

    with LogTimer(logger, operation) as timer:
        result = writer.write(parser.iter_records(source), out)
        timer.set_record_count(result.nodes + result.edges)
        if result.keys:
            timer.add_info("key_count", result.keys)

    return ConversionStats(
        source_format=source_format,
        target_format=target_format,
        nodes=result.nodes,
        edges=result.edges,
        keys=result.keys,
        duration_ms=timer.duration_ms or 0.0,
    )


def gml_to_graphml(lines: Iterable[str], out: TextIO) -> ConversionStats:
    return convert_stream(lines, out, GML, GRAPHML)


def graphml_to_gml(chunks: Iterable[bytes], out: TextIO) -> ConversionStats:
    return convert_stream(chunks, out, GRAPHML, GML)


def normalize_gml(lines: Iterable[str], out: TextIO) -> ConversionStats:
    """Rewrite GML from other tools in the canonical form this package reads."""
    return convert_stream(lines, out, GML, GML, normalize=True)


def convert_text(
    data: str,
    source_format: str,
    target_format: Optional[str] = None,
    normalize: bool = False,
) -> str:
    """Convert a document held in memory and return the result as a string."""
    converted, _ = convert_bytes(data.encode("utf-8"), source_format, target_format, normalize)
    return converted


def convert_bytes(
    data: bytes,
    source_format: str,
    target_format: Optional[str] = None,
    normalize: bool = False,
) -> Tuple[str, ConversionStats]:
    """Convert an uploaded document and return the text plus statistics."""
    if source_format == GML:
        try:
            source: Iterable = data.decode("utf-8").splitlines()
        except UnicodeDecodeError as e:
            raise ParseError("Input is not valid UTF-8", offset=e.start) from e
    else:
        source = [data]

    out = io.StringIO()
    stats = convert_stream(source, out, source_format, target_format, normalize)
    return out.getvalue(), stats


def convert_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    normalize: bool = False,
) -> ConversionStats:
    """Convert ``input_path`` into ``output_path``, dispatching on extensions.

    When the output extension is not a graph format the default target for
    the input format is used. A failed conversion removes the partially
    written output file.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    source_format = detect_format(input_path)
    target_format = FORMAT_EXTENSIONS.get(output_path.suffix.lower())
    if source_format == GML and target_format == GML:
        normalize = True
    target_format = resolve_target(source_format, target_format, normalize)

    logger.info(f"Using input file path: {input_path}")

    try:
        with open(output_path, "w", encoding="utf-8", newline="\n") as out:
            if source_format == GML:
                with open(input_path, encoding="utf-8") as src:
                    try:
                        return convert_stream(
                            src, out, source_format, target_format, normalize
                        )
                    except UnicodeDecodeError as e:
                        raise ParseError("Input is not valid UTF-8") from e
            with open(input_path, "rb") as src:
                return convert_stream(
                    read_chunks(src), out, source_format, target_format, normalize
                )
    except Exception:
        if output_path.exists():
            os.remove(output_path)
            logger.debug(f"Removed partial output {output_path}")
        raise
