"""
Graph conversion API endpoints.

Accepts an uploaded GML or GraphML document and returns it converted to the
other format as a file download.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from config import settings
from services.converter import MEDIA_TYPES, convert_bytes, detect_format, resolve_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/convert", tags=["convert"])


def output_filename(upload_name: str, target_format: str, normalize: bool) -> str:
    """Name of the converted download, derived from the uploaded file name."""
    stem = Path(upload_name).stem or "graph"
    if normalize:
        stem = f"{stem}_normalized"
    return f"{stem}.{target_format}"


@router.post("")
async def convert_upload(
    file: UploadFile = File(..., description="GML or GraphML document"),
    target: Optional[str] = Query(
        None, enum=["gml", "graphml"], description="Output format"
    ),
    normalize: bool = Query(
        False, description="Clean up GML written by other tools (GML input only)"
    ),
):
    """
    Convert an uploaded graph document.

    The input format is taken from the file extension. Without ``target``,
    GML converts to GraphML and GraphML converts to GML.
    """
    start_time = time.perf_counter()
    filename = file.filename or ""
    source_format = detect_format(filename)
    target_format = resolve_target(source_format, target, normalize)

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=(
                f"File size ({len(content) / 1024 / 1024:.1f} MB) exceeds limit "
                f"({settings.MAX_UPLOAD_BYTES / 1024 / 1024:.0f} MB)"
            ),
        )

    logger.info(
        f"CONVERT: {filename} ({len(content)} bytes) {source_format} -> {target_format}"
    )

    converted, stats = await run_in_threadpool(
        convert_bytes, content, source_format, target_format, normalize
    )

    logger.info(
        f"Conversion complete in {(time.perf_counter() - start_time) * 1000:.1f}ms: "
        f"{stats.nodes} nodes, {stats.edges} edges"
    )

    download_name = output_filename(filename, target_format, normalize)
    return Response(
        content=converted,
        media_type=MEDIA_TYPES[target_format],
        headers={
            "Content-Disposition": f"attachment; filename={download_name}",
            "X-Graph-Nodes": str(stats.nodes),
            "X-Graph-Edges": str(stats.edges),
            "X-Graph-Keys": str(stats.keys),
        },
    )
