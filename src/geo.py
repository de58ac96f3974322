"""
Geographic reference data module
Handles US state names and the static city coordinate lookup
"""

from typing import Dict, List, Optional, Tuple

Coordinates = Tuple[float, float]

# State names mapping
STATE_NAMES = {
    'AL': 'Alabama', 'AK': 'Alaska', 'AZ': 'Arizona', 'AR': 'Arkansas', 'CA': 'California',
    'CO': 'Colorado', 'CT': 'Connecticut', 'DE': 'Delaware', 'DC': 'District of Columbia',
    'FL': 'Florida', 'GA': 'Georgia', 'HI': 'Hawaii', 'ID': 'Idaho', 'IL': 'Illinois',
    'IN': 'Indiana', 'IA': 'Iowa', 'KS': 'Kansas', 'KY': 'Kentucky', 'LA': 'Louisiana',
    'ME': 'Maine', 'MD': 'Maryland', 'MA': 'Massachusetts', 'MI': 'Michigan', 'MN': 'Minnesota',
    'MS': 'Mississippi', 'MO': 'Missouri', 'MT': 'Montana', 'NE': 'Nebraska', 'NV': 'Nevada',
    'NH': 'New Hampshire', 'NJ': 'New Jersey', 'NM': 'New Mexico', 'NY': 'New York',
    'NC': 'North Carolina', 'ND': 'North Dakota', 'OH': 'Ohio', 'OK': 'Oklahoma',
    'OR': 'Oregon', 'PA': 'Pennsylvania', 'RI': 'Rhode Island', 'SC': 'South Carolina',
    'SD': 'South Dakota', 'TN': 'Tennessee', 'TX': 'Texas', 'UT': 'Utah', 'VT': 'Vermont',
    'VA': 'Virginia', 'WA': 'Washington', 'WV': 'West Virginia', 'WI': 'Wisconsin', 'WY': 'Wyoming'
}

# Full state name to abbreviation mapping
STATE_NAME_TO_ABBR = {v: k for k, v in STATE_NAMES.items()}

# Largest cities per state, keyed by full state name.
# Only a handful are covered; anything else gets no marker.
CITY_COORDINATES: Dict[str, Dict[str, Coordinates]] = {
    'California': {
        'Los Angeles': (34.0522, -118.2437),
        'San Diego': (32.7157, -117.1611),
        'San Francisco': (37.7749, -122.4194),
    },
    'New York': {
        'New York': (40.7128, -74.0060),
        'Buffalo': (42.8864, -78.8784),
        'Rochester': (43.1566, -77.6088),
    },
    'Texas': {
        'Houston': (29.7604, -95.3698),
        'San Antonio': (29.4241, -98.4936),
        'Dallas': (32.7767, -96.7970),
    },
}

def get_city_coordinates(state: str, city: str) -> Optional[Coordinates]:
    """Get (lat, lon) for a city, or None if the pair is not in the table"""
    return CITY_COORDINATES.get(state, {}).get(city)

def is_known_state_name(state_name: str) -> bool:
    """Check a full state name against the 50 states + DC (exact match)"""
    return state_name in STATE_NAME_TO_ABBR

def get_covered_cities() -> List[Dict]:
    """Get list of all cities that have coordinates"""
    cities = []
    for state, state_cities in CITY_COORDINATES.items():
        for city, (lat, lon) in state_cities.items():
            cities.append({
                'state': state,
                'city': city,
                'lat': lat,
                'lon': lon
            })
    return cities
