"""
Interactive presence map module
Draws the state choropleth and city markers over OpenStreetMap tiles
"""

import html
import logging
from typing import Any, Dict, List, Mapping, Optional

import plotly.graph_objects as go

from aggregate import StateSummary, row_value
from config import (MAP_CENTER, MAP_HEIGHT, MAP_MAX_ZOOM, MAP_MIN_ZOOM, MAP_ZOOM,
                    TILE_ATTRIBUTION, TILE_URL)
from geo import get_city_coordinates
from presence import PresenceLevel, get_presence_color

logger = logging.getLogger(__name__)

STATE_BORDER_COLOR = '#aaa'
STATE_BORDER_WEIGHT = 1
STATE_FILL_OPACITY = 0.6

MARKER_RADIUS = 7
MARKER_BORDER_COLOR = '#333'
MARKER_BORDER_WEIGHT = 1
MARKER_OPACITY = 0.95


def _presence_span(label: str) -> str:
    color = get_presence_color(label)
    return f'<span style="color:{color};">{html.escape(label)}</span>'


def state_style(state_name: str, summaries: Mapping[str, StateSummary]) -> Dict[str, Any]:
    """Style for a state polygon; states without data get the default color"""
    summary = summaries.get(state_name)
    presence = summary.presence if summary else PresenceLevel.NONE
    return {
        'fill_color': get_presence_color(presence),
        'border_color': STATE_BORDER_COLOR,
        'border_weight': STATE_BORDER_WEIGHT,
        'fill_opacity': STATE_FILL_OPACITY,
    }


def state_popup(state_name: str, summary: Optional[StateSummary]) -> str:
    """
    Popup content for a state polygon

    Shows the state's presence in its color, the contact if any, and every
    city listed for the state with the city's own presence and contact.
    """
    summary = summary or StateSummary()
    lines = [
        f'<b>{html.escape(state_name)}</b>',
        f'Presence: {_presence_span(summary.presence.label)}',
    ]
    if summary.contact:
        lines.append(f'Contact: {html.escape(summary.contact)}')
    if summary.cities:
        lines.append('<b>Cities:</b>')
        for entry in summary.cities:
            item = f'• {html.escape(entry.city)} <i>({html.escape(entry.presence or "none")})</i>'
            if entry.contact:
                item += f' – {html.escape(entry.contact)}'
            lines.append(item)
    return '<br>'.join(lines)


def city_popup(row: Mapping[str, Any]) -> str:
    """Popup content for a city marker"""
    city = row_value(row, 'city')
    state = row_value(row, 'state')
    presence = row_value(row, 'presence')
    contact = row_value(row, 'contact')

    popup = (f'<b>{html.escape(city)}, {html.escape(state)}</b><br>'
             f'Presence: {_presence_span(presence)}')
    if contact:
        popup += f'<br>Contact: {html.escape(contact)}'
    return popup


def city_markers(rows: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Marker specs for rows whose (state, city) has known coordinates"""
    markers = []
    for row in rows:
        state = row_value(row, 'state')
        city = row_value(row, 'city')
        if not state or not city:
            continue
        coords = get_city_coordinates(state, city)
        if coords is None:
            continue
        lat, lon = coords
        markers.append({
            'state': state,
            'city': city,
            'lat': lat,
            'lon': lon,
            'fill_color': get_presence_color(row_value(row, 'presence')),
            'popup': city_popup(row),
        })
    return markers


class PresenceMapVisualizer:
    """Interactive US presence map visualizer"""

    def __init__(self, height: int = MAP_HEIGHT):
        self.height = height

    def _base_layout(self) -> Dict[str, Any]:
        """OpenStreetMap raster tiles centered on the contiguous US"""
        return dict(
            map=dict(
                style='white-bg',
                center=MAP_CENTER,
                zoom=MAP_ZOOM,
                layers=[dict(
                    below='traces',
                    sourcetype='raster',
                    source=[TILE_URL],
                    sourceattribution=TILE_ATTRIBUTION,
                    minzoom=MAP_MIN_ZOOM,
                    maxzoom=MAP_MAX_ZOOM,
                )],
            ),
            margin=dict(l=0, r=0, t=0, b=0),
            height=self.height,
            legend=dict(title=dict(text='Presence'), x=0.01, y=0.99,
                        bgcolor='rgba(255, 255, 255, 0.8)'),
            hoverlabel=dict(bgcolor='white', align='left'),
            clickmode='event',
        )

    def _state_traces(self, geojson: Dict[str, Any],
                      summaries: Mapping[str, StateSummary]) -> List[go.Choroplethmap]:
        """One choropleth trace per presence level, highest level first"""
        grouped: Dict[PresenceLevel, List[str]] = {level: [] for level in PresenceLevel}
        for feature in geojson.get('features', []):
            name = (feature.get('properties') or {}).get('name')
            if not name:
                continue
            summary = summaries.get(name)
            grouped[summary.presence if summary else PresenceLevel.NONE].append(name)

        traces = []
        for level in sorted(PresenceLevel, reverse=True):
            names = grouped[level]
            if not names:
                continue
            style = state_style(names[0], summaries)
            traces.append(go.Choroplethmap(
                geojson=geojson,
                locations=names,
                featureidkey='properties.name',
                z=[1] * len(names),
                colorscale=[[0.0, style['fill_color']], [1.0, style['fill_color']]],
                showscale=False,
                marker_opacity=style['fill_opacity'],
                marker_line_color=style['border_color'],
                marker_line_width=style['border_weight'],
                text=[state_popup(name, summaries.get(name)) for name in names],
                hovertemplate='%{text}<extra></extra>',
                customdata=[['state', name] for name in names],
                name=level.label,
                legendgroup=level.label,
                showlegend=True,
            ))
        return traces

    def _marker_traces(self, markers: List[Dict[str, Any]]) -> List[go.Scattermap]:
        """City markers: a dark outline circle under the colored fill"""
        if not markers:
            return []

        lats = [m['lat'] for m in markers]
        lons = [m['lon'] for m in markers]
        outline_size = 2 * (MARKER_RADIUS + MARKER_BORDER_WEIGHT)

        outline = go.Scattermap(
            lat=lats,
            lon=lons,
            mode='markers',
            marker=dict(size=outline_size, color=MARKER_BORDER_COLOR, opacity=MARKER_OPACITY),
            hoverinfo='skip',
            showlegend=False,
            name='city-outline',
        )
        fill = go.Scattermap(
            lat=lats,
            lon=lons,
            mode='markers',
            marker=dict(size=2 * MARKER_RADIUS,
                        color=[m['fill_color'] for m in markers],
                        opacity=MARKER_OPACITY),
            text=[m['popup'] for m in markers],
            hovertemplate='%{text}<extra></extra>',
            customdata=[['city', m['state'], m['city']] for m in markers],
            showlegend=False,
            name='cities',
        )
        return [outline, fill]

    def create_presence_map(self, geojson: Dict[str, Any],
                            summaries: Mapping[str, StateSummary],
                            rows: List[Mapping[str, Any]]) -> go.Figure:
        """
        Create interactive presence map

        Args:
            geojson: US states FeatureCollection keyed by properties.name
            summaries: Per-state summaries from aggregate_states
            rows: Parsed presence rows, used for city markers

        Returns:
            Plotly figure object
        """
        fig = go.Figure()
        for trace in self._state_traces(geojson, summaries):
            fig.add_trace(trace)
        markers = city_markers(rows)
        for trace in self._marker_traces(markers):
            fig.add_trace(trace)

        fig.update_layout(**self._base_layout())

        logger.info(f"Map created with {len(geojson.get('features', []))} states and {len(markers)} city markers")
        return fig

    def create_error_map(self, message: str = "Error loading map") -> go.Figure:
        """Empty base map with an error message"""
        fig = go.Figure(go.Scattermap(lat=[], lon=[], mode='markers', showlegend=False))
        fig.update_layout(**self._base_layout())
        fig.update_layout(
            annotations=[
                dict(
                    text=message,
                    xref="paper", yref="paper",
                    x=0.5, y=0.5,
                    showarrow=False,
                    font=dict(size=20, color="red")
                )
            ]
        )
        return fig
