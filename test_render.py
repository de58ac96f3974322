#!/usr/bin/env python3
"""
Render tests for the US Presence Map
Loaders, pipeline, map figure, popups, CLI and dashboard helpers, without network access
"""

import json
import sys
from pathlib import Path

import pytest
import requests
from click.testing import CliRunner

sys.path.append(str(Path(__file__).parent / "src"))

import pipeline
from aggregate import aggregate_states
from config import TILE_URL
from ingest import base
from ingest.base import DataSourceError, is_remote
from ingest.presence_csv import PresenceCSVLoader
from ingest.states_geojson import StatesGeoJSONLoader, state_names
from presence import PresenceLevel
from quality import build_quality_report
from viz.presence_map import (PresenceMapVisualizer, city_markers, city_popup,
                              state_popup, state_style)

CSV_TEXT = """state,city,presence,contact,notes
California,Los Angeles,importer,LA Imports,x
California,San Francisco,direct,SF Office,
Texas,,direct,Acme,
Texas,Houston,importer,,
Ohio,Columbus,distributor,Buckeye,
,Nowhere,direct,Ghost,
Nevada,,,,
"""


def square(lon, lat):
    return [[[lon, lat], [lon + 1, lat], [lon + 1, lat + 1], [lon, lat + 1], [lon, lat]]]


GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "id": "06", "properties": {"name": "California"},
         "geometry": {"type": "Polygon", "coordinates": square(-120, 36)}},
        {"type": "Feature", "id": "48", "properties": {"name": "Texas"},
         "geometry": {"type": "Polygon", "coordinates": square(-99, 31)}},
        {"type": "Feature", "id": "39", "properties": {"name": "Ohio"},
         "geometry": {"type": "Polygon", "coordinates": square(-83, 40)}},
        {"type": "Feature", "id": "56", "properties": {"name": "Wyoming"},
         "geometry": {"type": "Polygon", "coordinates": square(-107, 43)}},
    ],
}


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code
        self.encoding = "utf-8"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def sources(tmp_path):
    csv_path = tmp_path / "data.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")
    geojson_path = tmp_path / "us-states.json"
    geojson_path.write_text(json.dumps(GEOJSON), encoding="utf-8")
    return str(csv_path), str(geojson_path)


def test_is_remote() -> None:
    assert is_remote("https://example.com/data.csv")
    assert is_remote("http://example.com/us-states.json")
    assert not is_remote("data.csv")
    assert not is_remote("/tmp/data.csv")


def test_csv_loader_local_file(sources) -> None:
    """Header required, extra columns kept, blanks read as empty strings"""
    csv_path, _ = sources
    rows = PresenceCSVLoader(csv_path).load()

    assert len(rows) == 7
    assert rows[0] == {"state": "California", "city": "Los Angeles", "presence": "importer",
                       "contact": "LA Imports", "notes": "x"}
    assert rows[3]["contact"] == ""
    assert rows[6] == {"state": "Nevada", "city": "", "presence": "", "contact": "", "notes": ""}


def test_csv_loader_adds_missing_columns(tmp_path) -> None:
    csv_path = tmp_path / "partial.csv"
    csv_path.write_text("state,presence\nTexas,direct\n", encoding="utf-8")

    rows = PresenceCSVLoader(str(csv_path)).load()
    assert rows == [{"state": "Texas", "presence": "direct", "city": "", "contact": ""}]


def test_csv_loader_empty_file(tmp_path) -> None:
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("", encoding="utf-8")

    with pytest.raises(DataSourceError):
        PresenceCSVLoader(str(csv_path)).load()


def test_csv_loader_missing_file(tmp_path) -> None:
    with pytest.raises(DataSourceError) as excinfo:
        PresenceCSVLoader(str(tmp_path / "missing.csv")).load()
    assert excinfo.value.source_name == "PRESENCE_CSV"


def test_csv_loader_over_http(monkeypatch) -> None:
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, timeout))
        return FakeResponse(CSV_TEXT)

    monkeypatch.setattr(base.requests, "get", fake_get)
    rows = PresenceCSVLoader("https://example.com/data.csv").load()

    assert len(rows) == 7
    assert calls[0][0] == "https://example.com/data.csv"
    assert calls[0][1] is not None


def test_geojson_loader_http_error(monkeypatch) -> None:
    monkeypatch.setattr(base.requests, "get", lambda *args, **kwargs: FakeResponse("", 404))

    with pytest.raises(DataSourceError):
        StatesGeoJSONLoader("https://example.com/us-states.json").load()


def test_geojson_loader_connection_error(monkeypatch) -> None:
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(base.requests, "get", fake_get)
    with pytest.raises(DataSourceError) as excinfo:
        StatesGeoJSONLoader("https://example.com/us-states.json").load()
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_geojson_loader_rejects_non_collection(tmp_path) -> None:
    path = tmp_path / "feature.json"
    path.write_text(json.dumps({"type": "Feature", "properties": {}}), encoding="utf-8")
    with pytest.raises(DataSourceError):
        StatesGeoJSONLoader(str(path)).load()

    path.write_text("not json", encoding="utf-8")
    with pytest.raises(DataSourceError):
        StatesGeoJSONLoader(str(path)).load()


def test_state_names() -> None:
    assert state_names(GEOJSON) == ["California", "Texas", "Ohio", "Wyoming"]
    assert state_names({"features": [{"properties": None}, {"properties": {"name": "Utah"}}]}) == ["Utah"]


def test_load_sources_fails_whole_pipeline(sources, tmp_path) -> None:
    """One failed source means no result at all"""
    csv_path, _ = sources
    with pytest.raises(DataSourceError):
        pipeline.load_sources(csv_path, str(tmp_path / "missing.json"))


def test_build_presence_map(sources) -> None:
    csv_path, geojson_path = sources
    result = pipeline.build_presence_map(csv_path, geojson_path)

    assert list(result.summaries) == ["California", "Texas", "Ohio", "Nevada"]
    assert result.summaries["Texas"].contact == "Acme"
    assert len(result.rows) == 7

    fig = result.figure
    choropleths = [trace for trace in fig.data if trace.type == "choroplethmap"]
    assert [trace.name for trace in choropleths] == ["direct", "distributor", "none"]
    locations = {trace.name: list(trace.locations) for trace in choropleths}
    assert locations["direct"] == ["California", "Texas"]
    assert locations["distributor"] == ["Ohio"]
    assert locations["none"] == ["Wyoming"]
    assert choropleths[0].featureidkey == "properties.name"
    assert choropleths[0].colorscale[0][1] == "#3CB371"
    assert choropleths[2].colorscale[0][1] == "#dddddd"


def test_city_markers_only_for_known_coordinates(sources) -> None:
    """Columbus is not in the lookup table so it gets no marker"""
    csv_path, geojson_path = sources
    result = pipeline.build_presence_map(csv_path, geojson_path)

    markers = city_markers(result.rows)
    assert [(m["state"], m["city"]) for m in markers] == [
        ("California", "Los Angeles"),
        ("California", "San Francisco"),
        ("Texas", "Houston"),
    ]
    assert [m["fill_color"] for m in markers] == ["#4682B4", "#3CB371", "#4682B4"]

    scatters = [trace for trace in result.figure.data if trace.type == "scattermap"]
    assert len(scatters) == 2
    assert list(scatters[1].lat) == [34.0522, 37.7749, 29.7604]
    assert scatters[0].hoverinfo == "skip"


def test_base_layout_tiles() -> None:
    fig = PresenceMapVisualizer(height=500).create_presence_map(GEOJSON, {}, [])

    layer = fig.layout.map.layers[0]
    assert layer.source[0] == TILE_URL
    assert layer.minzoom == 3
    assert layer.maxzoom == 8
    assert fig.layout.map.center.lat == 39.82
    assert fig.layout.map.zoom == 4
    assert fig.layout.height == 500
    assert [trace.name for trace in fig.data] == ["none"]


def test_state_style() -> None:
    summaries = aggregate_states([{"state": "Ohio", "presence": "distributor"}])

    assert state_style("Ohio", summaries) == {
        "fill_color": "#FFA500",
        "border_color": "#aaa",
        "border_weight": 1,
        "fill_opacity": 0.6,
    }
    assert state_style("Wyoming", summaries)["fill_color"] == "#dddddd"


def test_state_popup() -> None:
    summaries = aggregate_states([
        {"state": "Texas", "presence": "direct", "contact": "Acme"},
        {"state": "Texas", "city": "Houston", "presence": "importer", "contact": ""},
        {"state": "Texas", "city": "Dallas", "presence": "distributor", "contact": "North"},
    ])
    popup = state_popup("Texas", summaries["Texas"])

    assert popup.startswith("<b>Texas</b><br>Presence: ")
    assert '<span style="color:#3CB371;">direct</span>' in popup
    assert "Contact: Acme" in popup
    assert "<b>Cities:</b>" in popup
    assert "• Houston <i>(importer)</i><br>" in popup
    assert popup.endswith("• Dallas <i>(distributor)</i> – North")


def test_state_popup_without_data() -> None:
    popup = state_popup("Wyoming", None)
    assert popup == '<b>Wyoming</b><br>Presence: <span style="color:#dddddd;">none</span>'


def test_city_popup() -> None:
    popup = city_popup({"state": "Texas", "city": "Houston", "presence": "importer", "contact": "Gulf & Co"})
    assert popup == ('<b>Houston, Texas</b><br>Presence: '
                     '<span style="color:#4682B4;">importer</span><br>Contact: Gulf &amp; Co')
    assert "Contact" not in city_popup({"state": "Texas", "city": "Dallas", "presence": "direct"})


def test_error_map() -> None:
    fig = PresenceMapVisualizer().create_error_map("Boom")
    assert fig.layout.annotations[0].text == "Boom"


def test_quality_report(sources) -> None:
    csv_path, geojson_path = sources
    rows, geojson = pipeline.load_sources(csv_path, geojson_path)
    report = build_quality_report(rows + [{"state": "Texas", "presence": "Direct"},
                                          {"state": "CA", "city": "Fresno"}], geojson)

    assert report["total_rows"] == 9
    assert report["discarded_rows"] == 1
    assert report["usable_rows"] == 8
    assert report["unknown_presence"] == {"Direct": 1}
    assert report["states_not_in_geojson"] == ["Nevada", "CA"]
    assert report["unknown_state_names"] == ["CA"]
    assert report["cities_without_coordinates"] == ["Columbus, Ohio", "Fresno, CA"]


def test_cli_render_map_writes_html(sources, tmp_path) -> None:
    from cli import cli

    csv_path, geojson_path = sources
    output = tmp_path / "map.html"
    runner = CliRunner()
    result = runner.invoke(cli, ["render-map", "--csv", csv_path, "--geojson", geojson_path,
                                 "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert "California" in output.read_text(encoding="utf-8")


def test_cli_render_map_fails_on_missing_source(sources, tmp_path) -> None:
    from cli import cli

    csv_path, _ = sources
    runner = CliRunner()
    result = runner.invoke(cli, ["render-map", "--csv", csv_path,
                                 "--geojson", str(tmp_path / "missing.json"),
                                 "--output", str(tmp_path / "map.html")])

    assert result.exit_code != 0
    assert isinstance(result.exception, DataSourceError)
    assert not (tmp_path / "map.html").exists()


def test_cli_check_data(sources) -> None:
    from cli import cli

    csv_path, geojson_path = sources
    result = CliRunner().invoke(cli, ["check-data", "--csv", csv_path, "--geojson", geojson_path])
    assert result.exit_code == 0, result.output


def test_dashboard_popup_for_click(sources) -> None:
    from dashboard import build_popup_store, popup_for_click

    csv_path, geojson_path = sources
    store = build_popup_store(pipeline.build_presence_map(csv_path, geojson_path))

    assert set(store["states"]) == {"California", "Texas", "Ohio", "Wyoming"}
    assert len(store["cities"]) == 3

    state_click = {"points": [{"customdata": ["state", "Ohio"]}]}
    assert popup_for_click(state_click, store).startswith("<b>Ohio</b>")

    city_click = {"points": [{"customdata": ["city", "Texas", "Houston"], "pointIndex": 2}]}
    assert popup_for_click(city_click, store).startswith("<b>Houston, Texas</b>")

    assert popup_for_click(None, store) == ""
    assert popup_for_click({"points": [{}]}, store) == ""
    assert popup_for_click(state_click, None) == ""


def test_presence_level_of_summaries_is_enum(sources) -> None:
    csv_path, geojson_path = sources
    result = pipeline.build_presence_map(csv_path, geojson_path)
    assert result.summaries["Nevada"].presence is PresenceLevel.NONE
    assert result.summaries["Nevada"].cities == []


def test_csv_loader_extra_field_keeps_columns(tmp_path) -> None:
    """An unquoted comma in one row must not shift the state column of the file"""
    csv_path = tmp_path / "extra_field.csv"
    csv_path.write_text("state,city,presence,contact\n"
                        "Texas,Dallas,direct,Acme, Inc\n"
                        "Ohio,Columbus,importer,Bob\n", encoding="utf-8")

    rows = PresenceCSVLoader(str(csv_path)).load()

    assert [row["state"] for row in rows] == ["Texas", "Ohio"]
    assert rows[0]["city"] == "Dallas"
    assert rows[0]["presence"] == "direct"
    assert rows[1] == {"state": "Ohio", "city": "Columbus", "presence": "importer", "contact": "Bob"}
    assert list(aggregate_states(rows)) == ["Texas", "Ohio"]


def test_dashboard_detail_keeps_markdown_literal() -> None:
    """Contacts with * or _ are not rendered as emphasis in the detail panel"""
    from dashboard import markdown_safe

    popup = city_popup({"state": "Texas", "city": "Houston", "presence": "importer",
                        "contact": "A*B*C __x__ [link]"})
    safe = markdown_safe(popup)

    for ch in "*_[]":
        assert ch not in safe, f"{ch!r} left in {safe!r}"
    assert "A&#42;B&#42;C &#95;&#95;x&#95;&#95; &#91;link&#93;" in safe
    assert '<span style="color:#4682B4;">importer</span>' in safe
    assert markdown_safe(state_popup("Wyoming", None)) == state_popup("Wyoming", None)
