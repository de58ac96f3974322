"""
Configuration for the presence map
Values come from the environment, with .env loaded first
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Data sources
PRESENCE_CSV = os.getenv("PRESENCE_CSV", "data.csv")
STATES_GEOJSON_URL = os.getenv(
    "STATES_GEOJSON_URL",
    "https://raw.githubusercontent.com/PublicaMundi/MappingAPI/master/data/geojson/us-states.json",
)

# HTTP
REQUESTS_TIMEOUT_SECONDS = int(os.getenv("REQUESTS_TIMEOUT_SECONDS", "30"))
REQUEST_RETRIES = max(1, int(os.getenv("REQUEST_RETRIES", "1")))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Dashboard
PORT = int(os.getenv("PORT", "8050"))
MAP_HEIGHT = int(os.getenv("MAP_HEIGHT", "700"))

# Base map (center of the contiguous US)
MAP_CENTER = {"lat": 39.82, "lon": -98.57}
MAP_ZOOM = 4
MAP_MIN_ZOOM = 3
MAP_MAX_ZOOM = 8
TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = "&copy; OpenStreetMap contributors"
