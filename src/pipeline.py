"""
Presence map pipeline
Loads both sources concurrently, aggregates rows by state and builds the map
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import plotly.graph_objects as go

from aggregate import StateSummary, aggregate_states
from config import PRESENCE_CSV, STATES_GEOJSON_URL
from ingest.presence_csv import PresenceCSVLoader
from ingest.states_geojson import StatesGeoJSONLoader
from viz.presence_map import PresenceMapVisualizer

logger = logging.getLogger(__name__)


@dataclass
class PresenceMapResult:
    """Everything produced by one rendering pass"""
    figure: go.Figure
    summaries: Dict[str, StateSummary]
    rows: List[Dict[str, str]]
    geojson: Dict[str, Any]


def load_sources(csv_source: Optional[str] = None,
                 geojson_source: Optional[str] = None) -> Tuple[List[Dict[str, str]], Dict[str, Any]]:
    """
    Fetch the presence CSV and the states GeoJSON in parallel

    Both fetches must succeed; the first failure is raised and nothing is
    returned.
    """
    csv_loader = PresenceCSVLoader(csv_source or PRESENCE_CSV)
    geojson_loader = StatesGeoJSONLoader(geojson_source or STATES_GEOJSON_URL)

    with ThreadPoolExecutor(max_workers=2) as executor:
        rows_future = executor.submit(csv_loader.load)
        geojson_future = executor.submit(geojson_loader.load)
        rows = rows_future.result()
        geojson = geojson_future.result()

    return rows, geojson


def build_presence_map(csv_source: Optional[str] = None,
                       geojson_source: Optional[str] = None,
                       visualizer: Optional[PresenceMapVisualizer] = None) -> PresenceMapResult:
    """Run the full load -> aggregate -> render pass"""
    rows, geojson = load_sources(csv_source, geojson_source)

    summaries = aggregate_states(rows)
    logger.info(f"Aggregated {len(rows)} rows into {len(summaries)} states")

    visualizer = visualizer or PresenceMapVisualizer()
    figure = visualizer.create_presence_map(geojson, summaries, rows)
    return PresenceMapResult(figure=figure, summaries=summaries, rows=rows, geojson=geojson)
