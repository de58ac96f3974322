#!/usr/bin/env python3
"""
Offline tests for the US Presence Map
Presence ordering and colors, state aggregation and city coordinate lookup
"""

import sys
from pathlib import Path

import pandas as pd

sys.path.append(str(Path(__file__).parent / "src"))

from aggregate import CityEntry, StateSummary, aggregate_states, rows_from_frame
from geo import get_city_coordinates, get_covered_cities, is_known_state_name
from presence import PresenceLevel, get_presence_color, get_presence_legend


def test_presence_colors() -> None:
    """Fixed palette for the three named levels"""
    assert get_presence_color("direct") == "#3CB371"
    assert get_presence_color("distributor") == "#FFA500"
    assert get_presence_color("importer") == "#4682B4"
    assert get_presence_color(PresenceLevel.DIRECT) == "#3CB371"


def test_presence_color_default() -> None:
    """Anything else falls back to light grey"""
    for value in ["none", "", None, "Direct", "partner", " direct", 3, PresenceLevel.NONE]:
        assert get_presence_color(value) == "#dddddd", f"Unexpected color for {value!r}"


def test_presence_ordering() -> None:
    """none < importer < distributor < direct"""
    assert PresenceLevel.NONE < PresenceLevel.IMPORTER < PresenceLevel.DISTRIBUTOR < PresenceLevel.DIRECT
    assert PresenceLevel.parse("distributor") is PresenceLevel.DISTRIBUTOR
    assert PresenceLevel.parse("unknown") is PresenceLevel.NONE
    assert PresenceLevel.parse(None) is PresenceLevel.NONE
    assert PresenceLevel.DIRECT.label == "direct"


def test_presence_legend_order() -> None:
    """Legend runs from highest to lowest priority"""
    legend = get_presence_legend()
    assert list(legend) == ["direct", "distributor", "importer", "none"]
    assert legend["none"] == "#dddddd"


def test_aggregate_highest_presence_wins() -> None:
    """California: importer, direct, distributor -> direct with SF contact"""
    rows = [
        {"state": "California", "city": "Los Angeles", "presence": "importer", "contact": "LA Imports"},
        {"state": "California", "city": "San Francisco", "presence": "direct", "contact": "SF Office"},
        {"state": "California", "city": "San Diego", "presence": "distributor", "contact": "SD Dist"},
    ]
    summaries = aggregate_states(rows)

    ca = summaries["California"]
    assert ca.presence is PresenceLevel.DIRECT
    assert ca.contact == "SF Office"
    assert [entry.city for entry in ca.cities] == ["Los Angeles", "San Francisco", "San Diego"]
    assert ca.cities[0] == CityEntry(city="Los Angeles", presence="importer", contact="LA Imports")


def test_aggregate_state_level_row_kept() -> None:
    """Texas: a state-level direct row is not overwritten by a lower city"""
    rows = [
        {"state": "Texas", "presence": "direct", "contact": "Acme"},
        {"state": "Texas", "city": "Houston", "presence": "importer"},
    ]
    tx = aggregate_states(rows)["Texas"]

    assert tx.presence is PresenceLevel.DIRECT
    assert tx.contact == "Acme"
    assert tx.cities == [CityEntry(city="Houston", presence="importer", contact="")]


def test_aggregate_missing_presence() -> None:
    """Nevada with no presence -> none, empty contact, no cities"""
    summaries = aggregate_states([{"state": "Nevada"}])
    assert summaries["Nevada"] == StateSummary(presence=PresenceLevel.NONE, contact="", cities=[])


def test_aggregate_skips_rows_without_state() -> None:
    """Rows without a state never create a key or a city"""
    rows = [
        {"state": "", "city": "Houston", "presence": "direct", "contact": "Ghost"},
        {"city": "Dallas", "presence": "importer"},
        {"state": None, "city": "Austin"},
        {"state": "Ohio", "city": "Columbus", "presence": "importer"},
    ]
    summaries = aggregate_states(rows)

    assert list(summaries) == ["Ohio"]
    all_cities = [entry.city for s in summaries.values() for entry in s.cities]
    assert all_cities == ["Columbus"]


def test_aggregate_tie_keeps_first_contact() -> None:
    """Equal presence later never replaces the contact"""
    rows = [
        {"state": "Oregon", "city": "Portland", "presence": "distributor", "contact": "First"},
        {"state": "Oregon", "city": "Salem", "presence": "distributor", "contact": "Second"},
        {"state": "Oregon", "city": "Eugene", "presence": "importer", "contact": "Third"},
    ]
    oregon = aggregate_states(rows)["Oregon"]
    assert oregon.presence is PresenceLevel.DISTRIBUTOR
    assert oregon.contact == "First"
    assert len(oregon.cities) == 3


def test_aggregate_upgrade_from_none() -> None:
    """A first row with no presence is upgraded by any recognized level"""
    rows = [
        {"state": "Utah", "contact": "Nobody"},
        {"state": "Utah", "city": "Provo", "presence": "importer", "contact": "Provo Co"},
        {"state": "Utah", "city": "Ogden", "presence": "partner", "contact": "Ignored"},
    ]
    utah = aggregate_states(rows)["Utah"]
    assert utah.presence is PresenceLevel.IMPORTER
    assert utah.contact == "Provo Co"
    assert utah.cities[1].presence == "partner"


def test_aggregate_unknown_first_presence_treated_as_none() -> None:
    """An unrecognized first value does not block a later importer"""
    rows = [
        {"state": "Iowa", "presence": "partner", "contact": "P"},
        {"state": "Iowa", "presence": "importer", "contact": "I"},
    ]
    iowa = aggregate_states(rows)["Iowa"]
    assert iowa.presence is PresenceLevel.IMPORTER
    assert iowa.contact == "I"


def test_aggregate_is_repeatable() -> None:
    """Same input, same result"""
    rows = [
        {"state": "New York", "city": "Buffalo", "presence": "importer", "contact": "B"},
        {"state": "New York", "city": "New York", "presence": "direct", "contact": "NYC"},
        {"state": "Texas", "city": "Dallas", "presence": "distributor", "contact": "D"},
    ]
    assert aggregate_states(rows) == aggregate_states(rows)
    assert rows[0] == {"state": "New York", "city": "Buffalo", "presence": "importer", "contact": "B"}


def test_aggregate_city_count_matches_rows() -> None:
    """One city entry per row with a city, in row order"""
    rows = [
        {"state": "Texas", "city": "Houston", "presence": "importer"},
        {"state": "Texas", "presence": "direct"},
        {"state": "Texas", "city": "Dallas"},
        {"state": "Texas", "city": "Houston", "presence": "distributor"},
    ]
    tx = aggregate_states(rows)["Texas"]
    assert [entry.city for entry in tx.cities] == ["Houston", "Dallas", "Houston"]
    assert tx.presence is PresenceLevel.DIRECT


def test_rows_from_frame_fills_missing() -> None:
    """NaN and absent columns become empty strings"""
    df = pd.DataFrame([
        {"state": "Texas", "city": None, "region": "South"},
        {"state": "Ohio", "city": "Columbus", "region": float("nan")},
    ])
    rows = rows_from_frame(df)

    assert rows[0]["city"] == ""
    assert rows[0]["presence"] == ""
    assert rows[0]["contact"] == ""
    assert rows[1]["region"] == ""
    assert aggregate_states(rows)["Texas"].cities == []
    assert rows_from_frame(pd.DataFrame()) == []


def test_city_coordinates_lookup() -> None:
    """Known pairs resolve, everything else is None"""
    assert get_city_coordinates("California", "Los Angeles") == (34.0522, -118.2437)
    assert get_city_coordinates("Texas", "Dallas") == (32.7767, -96.7970)
    assert get_city_coordinates("Ohio", "Columbus") is None
    assert get_city_coordinates("Texas", "Austin") is None
    assert get_city_coordinates("texas", "Houston") is None
    assert len(get_covered_cities()) == 9


def test_state_names() -> None:
    """Exact match against 50 states + DC"""
    assert is_known_state_name("California")
    assert is_known_state_name("District of Columbia")
    assert not is_known_state_name("california")
    assert not is_known_state_name("CA")


def main() -> None:
    """Run all tests"""
    print("🧪 Running offline tests...")

    tests = [obj for name, obj in sorted(globals().items())
             if name.startswith("test_") and callable(obj)]
    try:
        for test in tests:
            test()
            print(f"✓ {test.__name__}")

        print("\n✅ All tests passed!")

    except AssertionError as e:
        print(f"\n❌ Test failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
