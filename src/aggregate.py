"""
State aggregation module
Reduces presence records into one summary per state
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from presence import PresenceLevel

ROW_FIELDS = ['state', 'city', 'presence', 'contact']


@dataclass
class CityEntry:
    """A city listed for a state, with the presence and contact from its row"""
    city: str
    presence: str = ''
    contact: str = ''


@dataclass
class StateSummary:
    """Aggregated presence, contact and city list for one state"""
    presence: PresenceLevel = PresenceLevel.NONE
    contact: str = ''
    cities: List[CityEntry] = field(default_factory=list)


def row_value(row: Mapping[str, Any], key: str) -> str:
    """Read a row field as a string; missing, None and NaN read as ''"""
    value = row.get(key)
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value)


def aggregate_states(rows: Iterable[Mapping[str, Any]]) -> Dict[str, StateSummary]:
    """
    Build a summary per state from presence rows

    The first row of a state sets its initial presence and contact. A later
    row replaces both only when its presence ranks strictly higher, so among
    rows sharing the top level the first one wins. Every row with a city is
    listed under its state regardless of rank.

    Args:
        rows: Mappings with optional state, city, presence and contact keys

    Returns:
        Mapping of state name to StateSummary, in first-seen order
    """
    summaries: Dict[str, StateSummary] = {}

    for row in rows:
        state = row_value(row, 'state')
        if not state:
            continue

        presence_raw = row_value(row, 'presence')
        contact = row_value(row, 'contact')
        presence = PresenceLevel.parse(presence_raw)

        summary = summaries.get(state)
        if summary is None:
            summary = StateSummary(presence=presence, contact=contact)
            summaries[state] = summary

        city = row_value(row, 'city')
        if city:
            summary.cities.append(CityEntry(city=city, presence=presence_raw, contact=contact))

        if presence > summary.presence:
            summary.presence = presence
            summary.contact = contact

    return summaries


def rows_from_frame(df: pd.DataFrame) -> List[Dict[str, str]]:
    """Convert a DataFrame into row dicts with '' for missing cells"""
    if df.empty:
        return []
    df = df.copy()
    for column in ROW_FIELDS:
        if column not in df.columns:
            df[column] = ''
    df = df.fillna('').astype(str)
    return df.to_dict('records')
