"""
Health check service for the graph converter.

Checks that the scratch directory used by the GraphML writer is writable and
that a small document survives a GML -> GraphML -> GML round trip.
"""

import logging
import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config import settings
from exceptions import ConversionError
from parsers.gml import GmlParser
from services.converter import GML, GRAPHML, convert_text

logger = logging.getLogger(__name__)

# Captured at module load, used to compute uptime
_start_time = time.monotonic()

_SELF_TEST_GML = """graph [
  directed 1
  node [
    id 0
    weight 1
    weight 2
  ]
  node [
    id 1
    meta [
      a 1
    ]
  ]
  edge [
    source 0
    target 1
  ]
]
"""


class ComponentHealth(BaseModel):
    name: str
    status: str  # "ok" | "error"
    message: Optional[str] = None
    response_time_ms: Optional[float] = None


class HealthResponse(BaseModel):
    status: str  # "healthy" | "degraded" | "unhealthy"
    app: str
    version: str
    uptime_seconds: float
    checks: list[ComponentHealth]
    timestamp: str


def check_round_trip() -> ComponentHealth:
    """Convert a small graph to GraphML and back."""
    start = time.perf_counter()
    try:
        graphml = convert_text(_SELF_TEST_GML, GML, GRAPHML)
        gml = convert_text(graphml, GRAPHML, GML)
        elapsed = (time.perf_counter() - start) * 1000
        parser = GmlParser()
        if parser.parse(gml) != parser.parse(_SELF_TEST_GML):
            return ComponentHealth(
                name="round_trip",
                status="error",
                message="Round-tripped document differs from the original",
                response_time_ms=round(elapsed, 1),
            )
        return ComponentHealth(
            name="round_trip",
            status="ok",
            response_time_ms=round(elapsed, 1),
        )
    except ConversionError as e:
        elapsed = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            name="round_trip",
            status="error",
            message=str(e),
            response_time_ms=round(elapsed, 1),
        )


def check_scratch_dir() -> ComponentHealth:
    """Check that the scratch directory exists and is writable."""
    scratch_path = Path(settings.SCRATCH_DIR or tempfile.gettempdir())
    if not scratch_path.is_dir():
        return ComponentHealth(
            name="scratch_directory",
            status="error",
            message=f"Directory does not exist: {scratch_path}",
        )
    if not os.access(scratch_path, os.W_OK):
        return ComponentHealth(
            name="scratch_directory",
            status="error",
            message=f"Directory is not writable: {scratch_path}",
        )
    return ComponentHealth(name="scratch_directory", status="ok")


def run_health_checks() -> HealthResponse:
    """Run all health checks and return aggregated status."""
    checks = [
        check_round_trip(),
        check_scratch_dir(),
    ]

    # A broken round trip makes the service useless; a missing scratch
    # directory only matters for documents larger than the spool size.
    critical_names = {"round_trip"}
    has_critical_error = any(
        c.status == "error" and c.name in critical_names for c in checks
    )
    has_any_error = any(c.status == "error" for c in checks)

    if has_critical_error:
        overall = "unhealthy"
    elif has_any_error:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        uptime_seconds=round(time.monotonic() - _start_time, 1),
        checks=checks,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
