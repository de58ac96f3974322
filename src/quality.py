"""
Data quality report for the presence dataset
Reports problems that make rows invisible or unstyled on the map, never rejects rows
"""

import logging
from typing import Any, Dict, List

from aggregate import row_value
from geo import get_city_coordinates, get_covered_cities, is_known_state_name
from ingest.states_geojson import state_names
from presence import PresenceLevel

logger = logging.getLogger(__name__)


def build_quality_report(rows: List[Dict[str, str]], geojson: Dict[str, Any]) -> Dict[str, Any]:
    """
    Summarize how the dataset lines up with the map

    Returns:
        Dict with row counts, unknown presence values, states missing from
        the GeoJSON or the US list, and cities without coordinates
    """
    geojson_states = set(state_names(geojson))

    discarded_rows = 0
    usable_rows = 0
    unknown_presence: Dict[str, int] = {}
    states_not_in_geojson: List[str] = []
    unknown_state_names: List[str] = []
    cities_without_coordinates: List[str] = []

    for row in rows:
        state = row_value(row, 'state')
        if not state:
            discarded_rows += 1
            continue
        usable_rows += 1

        presence = row_value(row, 'presence')
        if presence and PresenceLevel.parse(presence) == PresenceLevel.NONE and presence != 'none':
            unknown_presence[presence] = unknown_presence.get(presence, 0) + 1

        if state not in geojson_states and state not in states_not_in_geojson:
            states_not_in_geojson.append(state)
        if not is_known_state_name(state) and state not in unknown_state_names:
            unknown_state_names.append(state)

        city = row_value(row, 'city')
        if city and get_city_coordinates(state, city) is None:
            label = f"{city}, {state}"
            if label not in cities_without_coordinates:
                cities_without_coordinates.append(label)

    return {
        'total_rows': len(rows),
        'usable_rows': usable_rows,
        'discarded_rows': discarded_rows,
        'unknown_presence': unknown_presence,
        'states_not_in_geojson': states_not_in_geojson,
        'unknown_state_names': unknown_state_names,
        'cities_without_coordinates': cities_without_coordinates,
    }


def log_quality_report(report: Dict[str, Any]) -> None:
    """Write the report to the log"""
    logger.info(f"Rows: {report['total_rows']} total, {report['usable_rows']} usable, "
                f"{report['discarded_rows']} discarded (no state)")

    if report['unknown_presence']:
        logger.warning(f"Unknown presence values shown as none: {report['unknown_presence']}")
    if report['states_not_in_geojson']:
        logger.warning(f"States with no GeoJSON feature: {report['states_not_in_geojson']}")
    if report['unknown_state_names']:
        logger.warning(f"Not US state names: {report['unknown_state_names']}")
    if report['cities_without_coordinates']:
        covered = [f"{c['city']}, {c['state']}" for c in get_covered_cities()]
        logger.warning(f"Cities without coordinates (no marker): {report['cities_without_coordinates']}")
        logger.info(f"Cities with coordinates: {covered}")

    problems = sum(1 for key in ('unknown_presence', 'states_not_in_geojson',
                                 'unknown_state_names', 'cities_without_coordinates')
                   if report[key])
    if problems == 0:
        logger.info("✓ All rows line up with the map")
