"""
US states GeoJSON loader
Fetches the state boundary feature collection used for the choropleth
"""

import json
from typing import Any, Dict, List

from .base import BaseLoader, DataSourceError


def state_names(geojson: Dict[str, Any]) -> List[str]:
    """List properties.name of every feature, in document order"""
    names = []
    for feature in geojson.get('features', []):
        name = (feature.get('properties') or {}).get('name')
        if name:
            names.append(name)
    return names


class StatesGeoJSONLoader(BaseLoader):
    """Loader for the US states polygon feature collection"""

    def __init__(self, location: str):
        super().__init__("STATES_GEOJSON", location)

    def fetch_data(self) -> str:
        """Fetch raw GeoJSON text"""
        return self.read_source()

    def transform_data(self, raw: str) -> Dict[str, Any]:
        """Parse and check the feature collection"""
        geojson = json.loads(raw)

        if not isinstance(geojson, dict) or geojson.get('type') != 'FeatureCollection':
            raise DataSourceError(self.source_name, self.location, "not a GeoJSON FeatureCollection")
        if not isinstance(geojson.get('features'), list):
            raise DataSourceError(self.source_name, self.location, "FeatureCollection has no features list")

        names = state_names(geojson)
        missing = len(geojson['features']) - len(names)
        if missing:
            self.logger.warning(f"{missing} features have no properties.name and cannot be matched")

        self.logger.info(f"Loaded {len(geojson['features'])} state features")
        return geojson
