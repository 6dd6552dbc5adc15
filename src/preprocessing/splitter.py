"""
Train/test partitioning.

Stratified on the target column so each target level (or quantile group of a
real-valued target) keeps its share in both subsets.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from pandas.api import types as ptypes


@dataclass(frozen=True)
class Split:
    """Disjoint, exhaustive train/test partition of one table."""

    train: pd.DataFrame
    test: pd.DataFrame
    target: str
    seed: int
    train_fraction: float

    @property
    def train_index(self) -> pd.Index:
        return self.train.index

    @property
    def test_index(self) -> pd.Index:
        return self.test.index


class StratifiedSplitter:
    """Deterministic stratified train/test splitter."""

    def __init__(self, seed: int = 11111, train_fraction: float = 0.8, quantile_groups: int = 5):
        """
        Initialize splitter.

        Args:
            seed: Random seed for reproducibility
            train_fraction: Share of each stratum assigned to train, in (0, 1)
            quantile_groups: Number of quantile groups for real-valued targets
        """
        self.logger = logging.getLogger(__name__)
        self.seed = seed
        self.train_fraction = train_fraction
        self.quantile_groups = quantile_groups

    def strata(self, target: pd.Series) -> pd.Series:
        """
        Stratum label per record.

        Numeric targets with more levels than ``quantile_groups`` (delays in
        minutes, whether stored as float or integer) are grouped by quantiles;
        anything else is used as-is.
        """
        numeric = ptypes.is_numeric_dtype(target) and not ptypes.is_bool_dtype(target)
        if numeric and target.nunique() > self.quantile_groups:
            return pd.qcut(
                target.astype("float64"), q=self.quantile_groups, labels=False, duplicates="drop"
            )
        return target

    def split(
        self,
        df: pd.DataFrame,
        target: str,
        seed: int = None,
        train_fraction: float = None,
    ) -> Split:
        """
        Partition ``df`` into train and test.

        Args:
            df: Table to split
            target: Column whose levels are preserved in both subsets
            seed: Overrides the splitter's seed
            train_fraction: Overrides the splitter's fraction

        Returns:
            Split with train and test in original row order
        """
        seed = self.seed if seed is None else seed
        p = self.train_fraction if train_fraction is None else train_fraction

        if not 0.0 < p < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {p}")
        if target not in df.columns:
            raise KeyError(f"Target column '{target}' not in table")
        if df[target].isna().any():
            raise ValueError(f"Target column '{target}' has missing values")

        self.logger.info(f"Splitting {len(df):,} records on '{target}': train={p}, seed={seed}")

        codes = self.strata(df[target]).to_numpy()
        positions = np.arange(len(df))
        rng = np.random.default_rng(seed)
        in_train = np.zeros(len(df), dtype=bool)

        for level in sorted(pd.unique(codes)):
            members = positions[codes == level]
            n_train = int(np.floor(p * len(members) + 0.5))
            in_train[rng.permutation(members)[:n_train]] = True

        train_df = df.iloc[in_train]
        test_df = df.iloc[~in_train]

        self.logger.info(f"Train set: {len(train_df):,} records")
        self.logger.info(f"Test set: {len(test_df):,} records")

        return Split(train=train_df, test=test_df, target=target, seed=seed, train_fraction=p)
