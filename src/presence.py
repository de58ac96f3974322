"""
Presence classification module
Defines presence levels, their priority ordering and display colors
"""

from enum import IntEnum
from typing import Any, Dict, Union

DEFAULT_PRESENCE_COLOR = '#dddddd'


class PresenceLevel(IntEnum):
    """Market presence in a state, ordered from lowest to highest priority"""

    NONE = 0
    IMPORTER = 1
    DISTRIBUTOR = 2
    DIRECT = 3

    @classmethod
    def parse(cls, value: Any) -> 'PresenceLevel':
        """Parse a raw presence value; anything unrecognized is NONE"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.NONE
        return _PRESENCE_BY_NAME.get(value, cls.NONE)

    @property
    def label(self) -> str:
        """Lowercase name as it appears in the dataset"""
        return self.name.lower()


_PRESENCE_BY_NAME = {level.label: level for level in PresenceLevel}

# Fixed palette, must stay in sync with the published legend
PRESENCE_COLORS: Dict[PresenceLevel, str] = {
    PresenceLevel.DIRECT: '#3CB371',       # green
    PresenceLevel.DISTRIBUTOR: '#FFA500',  # orange
    PresenceLevel.IMPORTER: '#4682B4',     # blue
    PresenceLevel.NONE: DEFAULT_PRESENCE_COLOR,
}


def get_presence_color(presence: Union[PresenceLevel, str, None]) -> str:
    """Get display color for a presence level or raw presence string"""
    return PRESENCE_COLORS[PresenceLevel.parse(presence)]


def get_presence_legend() -> Dict[str, str]:
    """Get label -> color mapping ordered from highest to lowest priority"""
    return {level.label: PRESENCE_COLORS[level]
            for level in sorted(PresenceLevel, reverse=True)}
