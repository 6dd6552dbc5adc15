"""
Feature engineering module for the flight delay report.

This module contains utilities for:
- Joining hourly weather onto flights
- Target derivation (late / on-time)
- Time-of-day bucketing
- Category collapsing and reference-table lookups
- Min-max normalization
"""

from .feature_engineering import (
    FeatureSet,
    FeatureSpec,
    FlightFeatureBuilder,
    NormalizationParams,
    bucket_time_of_day,
    collapse_categories,
    denormalize,
    min_max_normalize,
    time_of_day,
)

__all__ = [
    "FeatureSet",
    "FeatureSpec",
    "FlightFeatureBuilder",
    "NormalizationParams",
    "bucket_time_of_day",
    "collapse_categories",
    "denormalize",
    "min_max_normalize",
    "time_of_day",
]
