"""
Main feature engineering module for the flight delay report.

Joins hourly weather onto flights and derives the model-ready columns.
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
import yaml

from preprocessing.errors import DataLossError, JoinCardinalityWarning, UnknownColumnError

TIME_OF_DAY_EDGES = [0, 600, 1200, 1800, 2400]
TIME_OF_DAY_LABELS = ["Night", "Morning", "Afternoon", "Evening"]
FEATURE_KINDS = ("time_of_day", "collapse", "lookup", "normalize")
JOIN_HOUR = "_join_hour"


@dataclass(frozen=True)
class FeatureSpec:
    """Declarative description of one derived column."""

    source: str
    target: str
    kind: str
    allowed: Tuple[str, ...] = ()
    other: str = "Other"
    table: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None

    def __post_init__(self):
        if self.kind not in FEATURE_KINDS:
            raise ValueError(f"Unknown feature kind: {self.kind}")
        if self.kind == "collapse" and not self.allowed:
            raise ValueError(f"Collapse feature '{self.target}' needs an allow-list")
        if self.kind == "lookup" and not (self.table and self.key and self.value):
            raise ValueError(f"Lookup feature '{self.target}' needs table, key and value")

    @classmethod
    def from_config(cls, spec: Mapping[str, Any]) -> "FeatureSpec":
        return cls(
            source=spec["source"],
            target=spec.get("target", spec["source"]),
            kind=spec["kind"],
            allowed=tuple(spec.get("allowed", ())),
            other=spec.get("other", "Other"),
            table=spec.get("table"),
            key=spec.get("key"),
            value=spec.get("value"),
        )


@dataclass(frozen=True)
class NormalizationParams:
    """Observed range used to min-max scale one column."""

    minimum: float
    maximum: float


@dataclass(frozen=True)
class FeatureSet:
    """Feature table plus the normalization ranges used to build it."""

    frame: pd.DataFrame
    normalization: Dict[str, NormalizationParams] = field(default_factory=dict)


def time_of_day(hhmm: int) -> str:
    """Bucket a single HHMM value; see ``bucket_time_of_day``."""
    return bucket_time_of_day(pd.Series([hhmm])).iloc[0]


def bucket_time_of_day(values: pd.Series) -> pd.Series:
    """
    Map HHMM clock codes to a time-of-day label.

    Buckets are half-open: Night [0, 600), Morning [600, 1200),
    Afternoon [1200, 1800), Evening [1800, 2400). 2400 is midnight.
    Missing values stay missing.

    Raises:
        ValueError: A value is negative, above 2400 or not a whole number
    """
    numeric = values.astype("float64")
    invalid = (numeric < 0) | (numeric > 2400) | (numeric != numeric.round())
    invalid &= numeric.notna()
    if invalid.any():
        raise ValueError(f"Invalid HHMM values: {sorted(values[invalid].unique().tolist())}")

    buckets = pd.cut(
        numeric % 2400,
        bins=TIME_OF_DAY_EDGES,
        right=False,
        labels=TIME_OF_DAY_LABELS,
    )
    return buckets.astype(object).where(numeric.notna(), np.nan)


def collapse_categories(values: pd.Series, allowed, other: str = "Other") -> pd.Series:
    """Replace every level outside ``allowed`` with ``other``; missing stays missing."""
    keep = values.isin(list(allowed)) | values.isna()
    return values.where(keep, other)


def min_max_normalize(values, minimum: float, maximum: float):
    """
    Scale ``values`` to [0, 1] given the observed range.

    A constant column (maximum == minimum) maps to 0.5.
    """
    if isinstance(values, pd.Series):
        values = values.astype("float64")
        if maximum == minimum:
            return pd.Series(0.5, index=values.index).where(values.notna(), np.nan)
        return (values - minimum) / (maximum - minimum)

    if maximum == minimum:
        return 0.5
    return (float(values) - minimum) / (maximum - minimum)


def denormalize(values, minimum: float, maximum: float):
    """Inverse of ``min_max_normalize``; a constant column maps back to its value."""
    if isinstance(values, pd.Series):
        values = values.astype("float64")
    else:
        values = float(values)
    return minimum + values * (maximum - minimum)


class FlightFeatureBuilder:
    """Creates features for flight delay prediction."""

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize feature builder.

        Args:
            config_path: Path to configuration file
        """
        self.logger = logging.getLogger(__name__)

        with open(config_path, "r") as f:
            self.config = yaml.safe_load(f)

        self.feature_config = self.config.get("features", {})
        join_config = self.feature_config.get("join", {})
        self.join_keys = list(join_config.get("keys", ["origin"]))
        self.timestamp = join_config.get("timestamp", "time_hour")
        self.weather_columns = list(join_config.get("weather_columns", []))
        self.required_weather = list(self.feature_config.get("required_weather", []))

        target_config = self.feature_config.get("target", {})
        self.target_source = target_config.get("source", "arr_delay")
        self.target_column = target_config.get("column", "late")
        self.delay_threshold = target_config.get("threshold_minutes", 15)

        self.specs = [FeatureSpec.from_config(spec) for spec in self.feature_config.get("derived", [])]

    def join_weather(self, flights: pd.DataFrame, weather: pd.DataFrame) -> pd.DataFrame:
        """
        Left join hourly weather onto flights.

        The key is (origin, timestamp floored to the hour). Every flight is
        kept with its index label. Flights with a missing key get missing
        weather. When weather holds several records for the
        same key the first one in weather order is used and a
        JoinCardinalityWarning is issued.

        Args:
            flights: Cleaned flights table
            weather: Cleaned weather table

        Returns:
            Flights with the weather columns appended
        """
        self.logger.info("Joining weather onto flights")

        key_cols = self.join_keys + [self.timestamp]
        missing_left = set(key_cols) - set(flights.columns)
        if missing_left:
            raise UnknownColumnError("flights", missing_left)
        missing_right = set(key_cols + self.weather_columns) - set(weather.columns)
        if missing_right:
            raise UnknownColumnError("weather", missing_right)
        overlap = set(self.weather_columns) & set(flights.columns)
        if overlap:
            raise ValueError(f"Weather columns already present in flights: {sorted(overlap)}")

        left = flights.assign(**{JOIN_HOUR: pd.to_datetime(flights[self.timestamp]).dt.floor("h")})
        right = weather[self.join_keys + self.weather_columns].assign(
            **{JOIN_HOUR: pd.to_datetime(weather[self.timestamp]).dt.floor("h")}
        )

        on = self.join_keys + [JOIN_HOUR]
        # pandas matches missing keys to each other
        right = right.dropna(subset=on)
        duplicated = right.duplicated(subset=on, keep="first")
        if duplicated.any():
            message = (
                f"Weather has {int(duplicated.sum()):,} duplicate keys on {on}; "
                "using the first match"
            )
            self.logger.warning(message)
            warnings.warn(message, JoinCardinalityWarning, stacklevel=2)
            right = right.loc[~duplicated]

        joined = left.merge(right, how="left", on=on, validate="many_to_one")
        joined.index = flights.index
        joined = joined.drop(columns=JOIN_HOUR)

        unmatched = int(joined[self.weather_columns].isna().all(axis=1).sum()) if self.weather_columns else 0
        self.logger.info(f"Joined {len(joined):,} flights ({unmatched:,} without weather)")
        return joined

    def filter_missing_weather(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Drop records missing any weather column required by the models.

        Raises:
            DataLossError: No record has complete weather
        """
        if not self.required_weather:
            return df

        missing = set(self.required_weather) - set(df.columns)
        if missing:
            raise UnknownColumnError("features", missing)

        incomplete = df[self.required_weather].isna().any(axis=1)
        removed = int(incomplete.sum())
        if removed == len(df):
            raise DataLossError("features", "required weather filter", removed)

        self.logger.info(
            f"Removed {removed:,} records missing required weather "
            f"({removed / len(df) * 100:.2f}%)"
        )
        return df.loc[~incomplete]

    def create_target_variable(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Create binary target variable for classification.

        A flight is late if its arrival delay is greater than the threshold
        (default 15 minutes).
        """
        if self.target_source not in df.columns:
            raise UnknownColumnError("features", [self.target_source])

        self.logger.info(
            f"Creating target variable (delay threshold: {self.delay_threshold} minutes)"
        )
        delay = df[self.target_source]
        late = (delay > self.delay_threshold).astype("Int64").mask(delay.isna())
        df = df.assign(**{self.target_column: late})

        for level, count in df[self.target_column].value_counts().sort_index().items():
            label = "Late" if level == 1 else "On-time"
            self.logger.info(f"  {label}: {count:,} ({count / len(df) * 100:.2f}%)")

        return df

    def apply_feature(
        self,
        df: pd.DataFrame,
        spec: FeatureSpec,
        lookups: Mapping[str, pd.DataFrame],
        normalization: Dict[str, NormalizationParams],
    ) -> pd.DataFrame:
        """Derive one column according to ``spec``; returns a new DataFrame."""
        if spec.source not in df.columns:
            raise UnknownColumnError("features", [spec.source])

        source = df[spec.source]

        if spec.kind == "time_of_day":
            derived = bucket_time_of_day(source)

        elif spec.kind == "collapse":
            derived = collapse_categories(source, spec.allowed, spec.other)
            self.logger.info(
                f"  {spec.target}: kept {sorted(spec.allowed)}, "
                f"{int((derived == spec.other).sum()):,} records set to '{spec.other}'"
            )

        elif spec.kind == "lookup":
            derived = self.lookup(source, spec, lookups)

        else:
            params = NormalizationParams(
                minimum=float(source.min()), maximum=float(source.max())
            )
            normalization[spec.target] = params
            derived = min_max_normalize(source, params.minimum, params.maximum)
            self.logger.info(
                f"  {spec.target}: min-max scaled from [{params.minimum}, {params.maximum}]"
            )

        return df.assign(**{spec.target: derived})

    def lookup(
        self, source: pd.Series, spec: FeatureSpec, lookups: Mapping[str, pd.DataFrame]
    ) -> pd.Series:
        """Map ``source`` through a reference table, first match per key."""
        if spec.table not in lookups:
            raise KeyError(f"Lookup table '{spec.table}' not provided")

        reference = lookups[spec.table]
        missing = {spec.key, spec.value} - set(reference.columns)
        if missing:
            raise UnknownColumnError(spec.table, missing)
        reference = reference.dropna(subset=[spec.key])

        duplicated = reference.duplicated(subset=[spec.key], keep="first")
        if duplicated.any():
            message = (
                f"'{spec.table}' has {int(duplicated.sum()):,} duplicate values of "
                f"'{spec.key}'; using the first match"
            )
            self.logger.warning(message)
            warnings.warn(message, JoinCardinalityWarning, stacklevel=3)

        mapping = reference.loc[~duplicated].set_index(spec.key)[spec.value]
        derived = source.map(mapping)

        unmatched = int((derived.isna() & source.notna()).sum())
        if unmatched:
            self.logger.info(f"  {spec.target}: {unmatched:,} records without a match in '{spec.table}'")
        return derived

    def build(
        self,
        flights: pd.DataFrame,
        weather: pd.DataFrame,
        lookups: Optional[Mapping[str, pd.DataFrame]] = None,
    ) -> FeatureSet:
        """
        Apply the complete feature pipeline.

        Args:
            flights: Cleaned flights table
            weather: Cleaned weather table
            lookups: Cleaned reference tables keyed by name

        Returns:
            FeatureSet with the model-ready table
        """
        self.logger.info("Starting feature engineering pipeline")
        lookups = lookups or {}
        normalization: Dict[str, NormalizationParams] = {}

        df = self.join_weather(flights, weather)
        df = self.filter_missing_weather(df)
        df = self.create_target_variable(df)

        for spec in self.specs:
            df = self.apply_feature(df, spec, lookups, normalization)

        self.logger.info(f"Feature engineering completed: {len(df):,} records, {len(df.columns)} columns")
        return FeatureSet(frame=df, normalization=normalization)

    @property
    def feature_columns(self) -> List[str]:
        return [spec.target for spec in self.specs]


def main():
    """Main function for standalone execution."""
    import argparse
    from pathlib import Path

    from preprocessing.data_cleaner import TableCleaner
    from preprocessing.data_ingestion import DatasetLoader

    parser = argparse.ArgumentParser(description="Build features for the flight delay models")
    parser.add_argument("--output", required=True, help="Output path for the feature table")
    parser.add_argument("--config", default="config/config.yaml", help="Config file path")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        loader = DatasetLoader(args.config)
        cleaned, _ = TableCleaner(args.config).clean_all(loader.load_all())

        builder = FlightFeatureBuilder(args.config)
        features = builder.build(cleaned["flights"], cleaned["weather"], cleaned)

        loader.save_table(features.frame, Path(args.output))

        logging.info("Feature engineering completed successfully")

    except Exception as e:
        logging.error(f"Error during feature engineering: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
