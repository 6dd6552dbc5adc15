"""
Shared fixtures: small synthetic versions of the five source tables.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"

FLIGHT_COLUMNS = [
    "year", "month", "day", "dep_time", "sched_dep_time", "dep_delay", "arr_time",
    "sched_arr_time", "arr_delay", "carrier", "flight", "tailnum", "origin", "dest",
    "air_time", "distance", "hour", "minute", "time_hour",
]

# Rows 5 and 8 are cancelled (no dep_time, no arr_time); row 6 lacks only air_time;
# row 9 has no tailnum.
FLIGHT_ROWS = [
    (2013, 1, 1, 517, 515, 2, 830, 819, 11, "UA", 1545, "N14228", "EWR", "IAH", 227, 1400, 5, 15, "2013-01-01 05:00:00"),
    (2013, 1, 1, 533, 529, 4, 850, 830, 20, "UA", 1714, "N24211", "LGA", "IAH", 227, 1416, 5, 29, "2013-01-01 05:00:00"),
    (2013, 1, 1, 542, 540, 2, 923, 850, 33, "AA", 1141, "N619AA", "JFK", "MIA", 160, 1089, 5, 40, "2013-01-01 05:00:00"),
    (2013, 1, 1, 544, 545, -1, 1004, 1022, -18, "B6", 725, "N804JB", "JFK", "BQN", 183, 1576, 5, 45, "2013-01-01 05:00:00"),
    (2013, 1, 1, 554, 600, -6, 812, 837, -25, "DL", 461, "N668DN", "LGA", "ATL", 116, 762, 6, 0, "2013-01-01 06:00:00"),
    (2013, 1, 1, None, 1630, None, None, 1815, None, "EV", 4308, "N18120", "EWR", "RDU", None, 416, 16, 30, "2013-01-01 16:00:00"),
    (2013, 1, 1, 555, 600, -5, 913, 854, 19, "B6", 507, "N516JB", "EWR", "FLL", None, 1065, 6, 0, "2013-01-01 06:00:00"),
    (2013, 1, 1, 557, 600, -3, 709, 723, -14, "EV", 5708, "N829AS", "LGA", "IAD", 53, 229, 6, 0, "2013-01-01 06:00:00"),
    (2013, 1, 1, None, 1935, None, None, 2240, None, "AA", 791, "N3EHAA", "LGA", "DFW", None, 1389, 19, 35, "2013-01-01 19:00:00"),
    (2013, 1, 1, 558, 600, -2, 753, 745, 8, "AA", 301, None, "LGA", "ORD", 138, 733, 6, 0, "2013-01-01 06:00:00"),
]

WEATHER_COLUMNS = [
    "origin", "year", "month", "day", "hour", "temp", "dewp", "humid", "wind_dir",
    "wind_speed", "wind_gust", "precip", "pressure", "visib", "time_hour",
]

# Pressure uses decimal commas. The EWR 06:00 observation is mostly missing.
WEATHER_ROWS = [
    ("EWR", 2013, 1, 1, 5, 39.02, 26.06, 59.37, 270, 10.36, None, 0, "1012,0", 10, "2013-01-01 05:00:00"),
    ("LGA", 2013, 1, 1, 5, 39.92, 24.98, 54.81, 250, 14.96, 21.86, 0, "1011,4", 10, "2013-01-01 05:00:00"),
    ("JFK", 2013, 1, 1, 5, 39.02, 26.96, 61.63, 260, 14.96, None, None, "1012,1", 10, "2013-01-01 05:00:00"),
    ("LGA", 2013, 1, 1, 6, 39.92, 24.98, 54.81, 260, 16.11, 23.02, 0, "1012,5", 10, "2013-01-01 06:00:00"),
    ("EWR", 2013, 1, 1, 6, None, None, None, 240, None, None, 0, None, None, "2013-01-01 06:00:00"),
    ("JFK", 2013, 1, 1, 6, 39.02, 26.96, 61.63, None, 13.81, None, 0, "1012,6", 10, "2013-01-01 06:00:00"),
]

PLANE_COLUMNS = [
    "tailnum", "year", "type", "manufacturer", "model", "engines", "seats", "speed", "engine",
]

PLANE_ROWS = [
    ("N14228", 1999, "Fixed wing multi engine", "BOEING", "737-824", 2, 149, None, "Turbo-fan"),
    ("N24211", 1998, "Fixed wing multi engine", "BOEING", "737-824", 2, 149, None, "Turbo-fan"),
    ("N619AA", None, "Fixed wing multi engine", "BOEING", "757-223", 2, 178, None, "Turbo-fan"),
    ("N804JB", 2012, "Fixed wing multi engine", "AIRBUS", "A320-232", 2, 200, None, "Turbo-fan"),
    ("N668DN", 1991, "Fixed wing multi engine", "BOEING", "757-232", 2, 178, None, "Turbo-fan"),
    ("N201AA", 1959, "Fixed wing single engine", "CESSNA", "150", 1, 2, 90, "Reciprocating"),
    ("N999XX", None, None, None, None, 2, 55, None, None),
]

AIRPORT_COLUMNS = ["faa", "name", "lat", "lon", "alt", "tz", "dst", "tzone"]

AIRPORT_ROWS = [
    ("IAH", "George Bush Intercontinental", 29.984433, -95.341442, 97, -6, "A", "America/Chicago"),
    ("MIA", "Miami Intl", 25.79325, -80.290556, 8, -5, "A", "America/New_York"),
    ("ATL", "Hartsfield Jackson Atlanta Intl", 33.636719, -84.428067, 1026, -5, "A", "America/New_York"),
    ("BQN", "Rafael Hernandez", 18.494861, -67.129444, 237, -4, "N", None),
    ("ORD", "Chicago Ohare Intl", 41.978603, -87.904842, 668, -6, "A", "America/Chicago"),
    ("XXX", "Unlocated Field", None, None, None, None, None, None),
]

AIRLINE_ROWS = [
    ("UA", "United Air Lines Inc."),
    ("AA", "American Airlines Inc."),
    ("B6", "JetBlue Airways"),
    ("DL", "Delta Air Lines Inc."),
    ("EV", "ExpressJet Airlines Inc."),
    ("MQ", None),
]


def make_flights() -> pd.DataFrame:
    return pd.DataFrame(FLIGHT_ROWS, columns=FLIGHT_COLUMNS)


def make_weather() -> pd.DataFrame:
    return pd.DataFrame(WEATHER_ROWS, columns=WEATHER_COLUMNS)


def make_tables() -> dict:
    return {
        "airlines": pd.DataFrame(AIRLINE_ROWS, columns=["carrier", "name"]),
        "airports": pd.DataFrame(AIRPORT_ROWS, columns=AIRPORT_COLUMNS),
        "flights": make_flights(),
        "planes": pd.DataFrame(PLANE_ROWS, columns=PLANE_COLUMNS),
        "weather": make_weather(),
    }


@pytest.fixture
def config_path() -> str:
    return str(CONFIG_PATH)


@pytest.fixture
def flights() -> pd.DataFrame:
    return make_flights()


@pytest.fixture
def weather() -> pd.DataFrame:
    return make_weather()


@pytest.fixture
def raw_tables() -> dict:
    return make_tables()


@pytest.fixture
def raw_dir(tmp_path) -> Path:
    """The five tables written as ';'-separated files with NA markers."""
    for name, df in make_tables().items():
        df.to_csv(tmp_path / f"{name}.csv", sep=";", index=False, na_rep="NA")
    return tmp_path


@pytest.fixture
def sample_table() -> pd.DataFrame:
    """Generic table with a few gaps for cleaner unit tests."""
    return pd.DataFrame(
        {
            "a": [1.0, np.nan, 3.0, 4.0, np.nan, 6.0],
            "b": [10.0, 20.0, np.nan, 40.0, np.nan, 60.0],
            "c": ["x", "y", None, "y", "x", None],
            "d": [0.5, 0.7, 0.1, np.nan, np.nan, 0.3],
        }
    )
