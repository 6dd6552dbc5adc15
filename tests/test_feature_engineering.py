import warnings

import numpy as np
import pandas as pd
import pytest

from features.feature_engineering import (
    FeatureSpec,
    FlightFeatureBuilder,
    bucket_time_of_day,
    collapse_categories,
    denormalize,
    min_max_normalize,
    time_of_day,
)
from preprocessing.data_cleaner import TableCleaner
from preprocessing.errors import DataLossError, JoinCardinalityWarning, UnknownColumnError


@pytest.fixture
def builder(config_path):
    return FlightFeatureBuilder(config_path)


@pytest.fixture
def cleaned(config_path, raw_tables):
    tables, _ = TableCleaner(config_path).clean_all(raw_tables)
    return tables


@pytest.mark.parametrize(
    "hhmm, expected",
    [
        (0, "Night"),
        (559, "Night"),
        (599, "Night"),
        (600, "Morning"),
        (1159, "Morning"),
        (1200, "Afternoon"),
        (1799, "Afternoon"),
        (1800, "Evening"),
        (2359, "Evening"),
        (2400, "Night"),
    ],
)
def test_time_of_day_boundaries(hhmm, expected):
    assert time_of_day(hhmm) == expected


def test_time_of_day_compares_codes_as_integers():
    # the minute part is not range-checked; 599 and 1799 sit on bucket edges
    assert bucket_time_of_day(pd.Series([560, 1275, 2399])).tolist() == ["Night", "Afternoon", "Evening"]


def test_time_of_day_keeps_missing_and_rejects_invalid():
    buckets = bucket_time_of_day(pd.Series([600, None, 1830], dtype="Int64"))

    assert buckets.iloc[0] == "Morning"
    assert pd.isna(buckets.iloc[1])
    assert buckets.iloc[2] == "Evening"

    for bad in (-5, 2401, 612.5):
        with pytest.raises(ValueError):
            bucket_time_of_day(pd.Series([bad]))


def test_collapse_categories():
    values = pd.Series(["AA", "B6", "ZZ", "AA", "QQ", None])

    collapsed = collapse_categories(values, {"AA", "B6"})

    assert set(collapsed.dropna()) == {"AA", "B6", "Other"}
    assert collapsed.tolist()[:5] == ["AA", "B6", "Other", "AA", "Other"]
    assert pd.isna(collapsed.iloc[5])


def test_normalize_round_trip():
    values = pd.Series([3.0, 7.5, -2.0, 10.0])
    lo, hi = values.min(), values.max()

    scaled = min_max_normalize(values, lo, hi)

    assert scaled.min() == 0.0
    assert scaled.max() == 1.0
    assert min_max_normalize(lo, lo, hi) == 0.0
    assert min_max_normalize(hi, lo, hi) == 1.0
    np.testing.assert_allclose(denormalize(scaled, lo, hi), values)
    assert denormalize(min_max_normalize(7.5, lo, hi), lo, hi) == pytest.approx(7.5)


def test_normalize_constant_column():
    values = pd.Series([4.0, 4.0, np.nan])

    scaled = min_max_normalize(values, 4.0, 4.0)

    assert scaled.tolist()[:2] == [0.5, 0.5]
    assert np.isnan(scaled.iloc[2])
    assert min_max_normalize(4.0, 4.0, 4.0) == 0.5
    assert denormalize(0.5, 4.0, 4.0) == 4.0


def test_join_keeps_every_flight(builder, cleaned):
    joined = builder.join_weather(cleaned["flights"], cleaned["weather"])

    assert joined.index.equals(cleaned["flights"].index)
    assert len(joined) == len(cleaned["flights"])
    # EWR 06:00 weather was dropped during cleaning
    assert joined.loc[6, ["temp", "pressure"]].isna().all()
    assert joined.loc[0, "pressure"] == pytest.approx(1012.0)
    assert joined.loc[4, "temp"] == pytest.approx(39.92)


def test_join_truncates_timestamps_to_the_hour(builder, cleaned):
    flights = cleaned["flights"].copy()
    flights["time_hour"] = flights["time_hour"] + pd.Timedelta(minutes=40)

    joined = builder.join_weather(flights, cleaned["weather"])

    assert joined.loc[0, "pressure"] == pytest.approx(1012.0)


def test_join_duplicate_keys_first_match_wins(builder, cleaned):
    weather = cleaned["weather"]
    duplicate = weather.loc[[1]].assign(temp=99.0)
    weather = pd.concat([weather, duplicate], ignore_index=True)

    with pytest.warns(JoinCardinalityWarning):
        joined = builder.join_weather(cleaned["flights"], weather)

    assert len(joined) == len(cleaned["flights"])
    assert joined.loc[1, "temp"] == pytest.approx(39.92)


def test_join_missing_keys_never_match(builder, cleaned):
    flights = cleaned["flights"].copy()
    flights.loc[0, "origin"] = None
    keyless = cleaned["weather"].loc[[0]].assign(origin=None)
    keyless[builder.weather_columns] = 1.0
    weather = pd.concat([cleaned["weather"], keyless, keyless], ignore_index=True)

    with warnings.catch_warnings():
        warnings.simplefilter("error", JoinCardinalityWarning)
        joined = builder.join_weather(flights, weather)

    assert joined.loc[0, builder.weather_columns].isna().all()
    assert joined.loc[1, "temp"] == pytest.approx(39.92)


def test_lookup_ignores_missing_reference_keys(builder, cleaned):
    spec = FeatureSpec(source="carrier", target="airline", kind="lookup", table="airlines", key="carrier", value="name")
    airlines = pd.concat(
        [cleaned["airlines"], pd.DataFrame({"carrier": [None], "name": ["Nobody"]})],
        ignore_index=True,
    )

    names = builder.lookup(pd.Series(["AA", None]), spec, {"airlines": airlines})

    assert names.iloc[0] == "American Airlines Inc."
    assert pd.isna(names.iloc[1])


def test_join_requires_key_columns(builder, cleaned):
    with pytest.raises(UnknownColumnError):
        builder.join_weather(cleaned["flights"].drop(columns="time_hour"), cleaned["weather"])
    with pytest.raises(UnknownColumnError):
        builder.join_weather(cleaned["flights"], cleaned["weather"].drop(columns="visib"))


def test_post_join_filter(builder, cleaned):
    joined = builder.join_weather(cleaned["flights"], cleaned["weather"])

    filtered = builder.filter_missing_weather(joined)

    assert 6 not in filtered.index
    assert len(filtered) == len(joined) - 1
    assert filtered[builder.required_weather].notna().all().all()

    with pytest.raises(DataLossError):
        builder.filter_missing_weather(joined.assign(temp=np.nan))


def test_target_variable(builder):
    df = pd.DataFrame({"arr_delay": [15.0, 15.5, -3.0, 120.0]})

    result = builder.create_target_variable(df)

    assert result["late"].tolist() == [0, 1, 0, 1]
    assert "late" not in df.columns


def test_build(builder, cleaned):
    with warnings.catch_warnings():
        warnings.simplefilter("error", JoinCardinalityWarning)
        features = builder.build(cleaned["flights"], cleaned["weather"], cleaned)

    frame = features.frame
    assert frame.index.tolist() == [0, 1, 2, 3, 4, 7, 9]
    assert frame.loc[0, "time_of_day"] == "Night"
    assert frame.loc[4, "time_of_day"] == "Morning"
    assert frame.loc[2, "airline"] == "American Airlines Inc."
    assert frame.loc[0, "plane_year"] == 1999
    assert pd.isna(frame.loc[9, "plane_year"])
    assert frame.loc[2, "dest_name"] == "Miami Intl"
    assert frame.loc[1, "late"] == 1

    for column in ("dep_delay_norm", "distance_norm", "temp_norm"):
        assert frame[column].min() == 0.0
        assert frame[column].max() == 1.0

    params = features.normalization["distance_norm"]
    assert params.minimum == 229.0
    assert params.maximum == 1576.0
    np.testing.assert_allclose(
        denormalize(frame["distance_norm"], params.minimum, params.maximum),
        frame["distance"].astype(float),
    )


def test_build_does_not_modify_inputs(builder, cleaned):
    flights = cleaned["flights"].copy()
    weather = cleaned["weather"].copy()

    builder.build(cleaned["flights"], cleaned["weather"], cleaned)

    pd.testing.assert_frame_equal(cleaned["flights"], flights)
    pd.testing.assert_frame_equal(cleaned["weather"], weather)


def test_lookup_requires_table(builder, cleaned):
    spec = FeatureSpec(source="carrier", target="airline", kind="lookup", table="airlines", key="carrier", value="name")

    with pytest.raises(KeyError):
        builder.lookup(cleaned["flights"]["carrier"], spec, {})


def test_feature_spec_validation():
    with pytest.raises(ValueError):
        FeatureSpec(source="x", target="y", kind="bin")
    with pytest.raises(ValueError):
        FeatureSpec(source="x", target="y", kind="collapse")
    with pytest.raises(ValueError):
        FeatureSpec(source="x", target="y", kind="lookup", table="airlines")

    spec = FeatureSpec.from_config({"source": "carrier", "kind": "collapse", "allowed": ["AA"]})
    assert spec.target == "carrier"
    assert spec.allowed == ("AA",)
