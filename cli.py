#!/usr/bin/env python3
"""
Command Line Interface for the US Presence Map
Provides commands for rendering the map, checking the dataset and serving the dashboard
"""

import click
import logging
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add src to path
sys.path.append(str(Path(__file__).parent / "src"))

from config import LOG_FORMAT, LOG_LEVEL, PORT, PRESENCE_CSV, STATES_GEOJSON_URL
from pipeline import build_presence_map, load_sources
from quality import build_quality_report, log_quality_report

# Load environment variables
load_dotenv()

# Configure logging
os.makedirs('logs', exist_ok=True)
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler('logs/cli.log'),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

@click.group()
def cli():
    """US Presence Map CLI"""
    pass

@cli.command()
@click.option('--csv', 'csv_source', default=PRESENCE_CSV, show_default=True,
              help='Presence CSV file path or URL')
@click.option('--geojson', 'geojson_source', default=STATES_GEOJSON_URL, show_default=True,
              help='US states GeoJSON file path or URL')
@click.option('--output', default=None, help='Write standalone HTML here instead of opening a browser')
def render_map(csv_source, geojson_source, output):
    """Generate interactive presence map"""
    try:
        logger.info("Rendering presence map...")

        result = build_presence_map(csv_source, geojson_source)

        if output:
            result.figure.write_html(output, include_plotlyjs=True, full_html=True)
            logger.info(f"Map written to {output}")
        else:
            result.figure.show()

        logger.info(f"Map rendering completed: {len(result.summaries)} states with data")

    except Exception as e:
        logger.error(f"Map rendering failed: {str(e)}")
        raise

@cli.command()
@click.option('--csv', 'csv_source', default=PRESENCE_CSV, show_default=True,
              help='Presence CSV file path or URL')
@click.option('--geojson', 'geojson_source', default=STATES_GEOJSON_URL, show_default=True,
              help='US states GeoJSON file path or URL')
def check_data(csv_source, geojson_source):
    """Report how the dataset lines up with the map"""
    try:
        logger.info("Checking presence data...")

        rows, geojson = load_sources(csv_source, geojson_source)
        report = build_quality_report(rows, geojson)
        log_quality_report(report)

        logger.info("Data check completed")

    except Exception as e:
        logger.error(f"Data check failed: {str(e)}")
        raise

@cli.command()
@click.option('--port', default=PORT, show_default=True, help='Dashboard port')
@click.option('--debug', is_flag=True, help='Run Dash in debug mode')
def serve(port, debug):
    """Start the presence map dashboard"""
    from dashboard import app

    logger.info(f"Starting dashboard on http://0.0.0.0:{port}")
    app.run(debug=debug, host='0.0.0.0', port=port)

if __name__ == '__main__':
    cli()
