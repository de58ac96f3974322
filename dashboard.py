#!/usr/bin/env python3
"""
US Presence Map Dashboard
Dash app with the presence map, a legend and a detail panel for the clicked state or city
"""

import sys
import logging
from datetime import datetime
from pathlib import Path

import dash
from dash import dcc, html
from dash.dependencies import Input, Output, State
from dotenv import load_dotenv

# Add src to path
sys.path.append(str(Path(__file__).parent / "src"))

from config import LOG_FORMAT, LOG_LEVEL, MAP_HEIGHT, PORT
from ingest.states_geojson import state_names
from pipeline import PresenceMapResult, build_presence_map
from presence import get_presence_legend
from viz.presence_map import PresenceMapVisualizer, city_markers, state_popup

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

visualizer = PresenceMapVisualizer(height=MAP_HEIGHT)

def build_popup_store(result: PresenceMapResult) -> dict:
    """Popup HTML per state name and per city marker, for the detail panel"""
    states = {name: state_popup(name, result.summaries.get(name))
              for name in state_names(result.geojson)}
    cities = [marker['popup'] for marker in city_markers(result.rows)]
    return {'states': states, 'cities': cities}

def popup_for_click(click_data, store) -> str:
    """Find popup HTML for a map click, '' when nothing matches"""
    if not click_data or not store:
        return ""
    points = click_data.get('points') or []
    if not points:
        return ""

    point = points[0]
    customdata = point.get('customdata') or []
    if not customdata:
        return ""

    if customdata[0] == 'state' and len(customdata) > 1:
        return store['states'].get(customdata[1], "")
    if customdata[0] == 'city':
        index = point.get('pointIndex', point.get('pointNumber'))
        if index is not None and 0 <= index < len(store['cities']):
            return store['cities'][index]
    return ""

# Markdown metacharacters as HTML entities; popup tags contain none of them
MARKDOWN_ENTITIES = {
    "\\": "&#92;", "*": "&#42;", "_": "&#95;", "`": "&#96;",
    "~": "&#126;", "[": "&#91;", "]": "&#93;",
}

def markdown_safe(popup: str) -> str:
    """Keep popup text literal when rendered through dcc.Markdown"""
    return "".join(MARKDOWN_ENTITIES.get(ch, ch) for ch in popup)

def legend_items():
    """Colored swatches for every presence level"""
    items = []
    for label, color in get_presence_legend().items():
        items.append(html.Span([
            html.Span(style={'display': 'inline-block', 'width': '14px', 'height': '14px',
                             'backgroundColor': color, 'border': '1px solid #aaa',
                             'marginRight': '6px', 'verticalAlign': 'middle'}),
            label
        ], style={'marginRight': '20px'}))
    return items

# Create Dash app
app = dash.Dash(__name__, title="US Presence Map")

app.layout = html.Div([
    # Header
    html.Div([
        html.H1("🗺️ US Presence Map",
                style={'textAlign': 'center', 'color': '#2c3e50', 'marginBottom': 10}),
        html.H3("Direct, distributor and importer presence by state",
                style={'textAlign': 'center', 'color': '#7f8c8d', 'marginBottom': 20})
    ]),

    # Legend and controls
    html.Div([
        html.Div(legend_items(), style={'display': 'inline-block'}),
        html.Button('Reload data', id='reload-button', n_clicks=0,
                    style={'marginLeft': '30px'})
    ], style={'textAlign': 'center', 'marginBottom': '20px'}),

    # Map and details
    html.Div([
        html.Div([
            dcc.Loading(dcc.Graph(id='presence-map', style={'height': f'{MAP_HEIGHT}px'}))
        ], style={'flex': '3'}),
        html.Div([
            html.H4("Details", style={'color': '#2c3e50'}),
            html.Div(id='detail-panel', children="Click a state or a city marker.")
        ], style={'flex': '1', 'padding': '20px', 'backgroundColor': '#f8f9fa',
                  'borderRadius': '10px', 'marginLeft': '10px'})
    ], style={'display': 'flex'}),

    dcc.Store(id='popup-store'),

    # Footer
    html.Div([
        html.Hr(),
        html.P(id='load-status', style={'textAlign': 'center', 'color': '#7f8c8d', 'fontSize': '12px'})
    ], style={'marginTop': '30px'})
])

@app.callback(
    [Output('presence-map', 'figure'),
     Output('popup-store', 'data'),
     Output('load-status', 'children')],
    [Input('reload-button', 'n_clicks')]
)
def update_map(n_clicks):
    """Load both sources and rebuild the map"""
    try:
        result = build_presence_map(visualizer=visualizer)
        status = (f"Loaded {len(result.rows)} rows, {len(result.summaries)} states with data | "
                  f"Last update: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        return result.figure, build_popup_store(result), status

    except Exception as e:
        logger.error(f"Error loading presence map: {e}")
        return visualizer.create_error_map(), None, f"❌ Error: {str(e)}"

@app.callback(
    Output('detail-panel', 'children'),
    [Input('presence-map', 'clickData')],
    [State('popup-store', 'data')]
)
def show_details(click_data, store):
    """Show the popup of the clicked state or city"""
    popup = popup_for_click(click_data, store)
    if not popup:
        return "Click a state or a city marker."
    return dcc.Markdown(markdown_safe(popup), dangerously_allow_html=True)

if __name__ == '__main__':
    print("🚀 Starting US Presence Map dashboard...")
    print(f"🌐 Open http://localhost:{PORT} in your browser")
    app.run(debug=True, host='0.0.0.0', port=PORT)
