"""
Pytest configuration and fixtures for the graph converter tests.

Provides:
- AsyncClient for testing the FastAPI endpoints
- Small GML and GraphML sample documents
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from main import app


SAMPLE_GML = """# hand written sample
graph [
  directed 1
  label "Sample network"
  node [
    id 0
    label "router"
    weight 1
    weight 2
    meta [
      a 1
      b 2
    ]
  ]
  node [
    id 1
    label "switch"
    weight 3
  ]
  edge [
    source 0
    target 1
    capacity 2.5
  ]
]
"""

SAMPLE_GRAPHML = """<?xml version="1.0" encoding="UTF-8"?>
<graphml xmlns="http://graphml.graphdrawing.org/xmlns">
  <key id="d0" for="graph" attr.name="name" attr.type="string"/>
  <key id="d1" for="node" attr.name="label" attr.type="string"/>
  <key id="d2" for="node" attr.name="weight" attr.type="double"/>
  <key id="d3" for="edge" attr.name="capacity" attr.type="int"/>
  <key id="d4" for="node" attr.name="meta" attr.type="string"/>
  <graph edgedefault="directed">
    <data key="d0">example</data>
    <node id="n0">
      <data key="d1">first</data>
      <data key="d2">1.5</data>
      <data key="d4">{"a":1,"b":[1,2]}</data>
    </node>
    <node id="n1">
      <data key="d1"></data>
    </node>
    <edge source="n0" target="n1">
      <data key="d3">7</data>
    </edge>
  </graph>
</graphml>
"""


@pytest.fixture
def sample_gml() -> str:
    return SAMPLE_GML


@pytest.fixture
def sample_graphml() -> str:
    return SAMPLE_GRAPHML


@pytest_asyncio.fixture
async def async_client():
    """
    Create an AsyncClient pointing to the FastAPI app.

    Yields:
        httpx.AsyncClient: Async HTTP client for making requests to the app.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
