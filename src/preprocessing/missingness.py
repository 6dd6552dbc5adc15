"""
Missing value diagnostics.

Counts missing values per column so each cleaning stage can be checked
against the one before it.
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Tuple

import pandas as pd

from .errors import ImputationError


class MissingnessReport(Mapping):
    """
    Read-only mapping of column name to missing-value count.

    Iteration covers only columns with at least one missing value. Indexing
    any column of the analysed table is allowed and yields 0 for complete
    columns; indexing a column the table does not have raises KeyError.
    Membership follows iteration, so ``col in report`` is False for a complete
    column even though ``report[col]`` is 0. Use ``columns`` for every column
    of the analysed table.
    """

    def __init__(self, table: str, n_rows: int, columns: Iterable[str], counts: Dict[str, int]):
        self.table = table
        self.n_rows = n_rows
        self._columns = tuple(columns)
        self._counts = {col: int(n) for col, n in counts.items() if n > 0}

    def __getitem__(self, column: str) -> int:
        if column not in self._columns:
            raise KeyError(column)
        return self._counts.get(column, 0)

    def __contains__(self, column) -> bool:
        return column in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    def __repr__(self) -> str:
        return f"MissingnessReport(table={self.table!r}, counts={self._counts!r})"

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def to_dict(self) -> Dict[str, int]:
        return dict(self._counts)

    def to_frame(self) -> pd.DataFrame:
        """Counts and percentages, one row per incomplete column."""
        frame = pd.DataFrame(
            {"count": pd.Series(self._counts, dtype="int64")},
            index=pd.Index(list(self._counts), name="column"),
        )
        frame["percent"] = frame["count"] / self.n_rows * 100 if self.n_rows else 0.0
        return frame.sort_values("count", ascending=False, kind="mergesort")


class MissingnessAnalyzer:
    """Computes missing-value reports for tables."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def analyze(self, df: pd.DataFrame, table: str = "table") -> MissingnessReport:
        """
        Count missing values per column.

        Args:
            df: Table to inspect
            table: Name used in logs and in the report

        Returns:
            MissingnessReport restricted to columns with missing values
        """
        counts = df.isna().sum()
        report = MissingnessReport(table, len(df), df.columns, counts.to_dict())

        if report:
            self.logger.info(f"Missing values in '{table}' ({len(df):,} rows):")
            for column, count in report.items():
                pct = count / len(df) * 100
                self.logger.info(f"  {column}: {count:,} ({pct:.2f}%)")
        else:
            self.logger.info(f"No missing values in '{table}' ({len(df):,} rows)")

        return report

    @staticmethod
    def compare(before: MissingnessReport, after: MissingnessReport) -> pd.DataFrame:
        """
        Side-by-side missing counts for two snapshots of the same table.

        Columns dropped between the snapshots are reported with 0 after.
        """
        columns = list(dict.fromkeys(list(before) + list(after)))
        rows = []
        for column in columns:
            n_before = before.to_dict().get(column, 0)
            n_after = after.to_dict().get(column, 0)
            rows.append(
                {
                    "column": column,
                    "before": n_before,
                    "after": n_after,
                    "resolved": n_before - n_after,
                }
            )
        return pd.DataFrame(rows, columns=["column", "before", "after", "resolved"])

    @staticmethod
    def verify_resolution(report: MissingnessReport, columns: Iterable[str]) -> None:
        """Raise ImputationError if any of ``columns`` still has missing values."""
        unresolved = {col: report.to_dict()[col] for col in columns if col in report}
        if unresolved:
            raise ImputationError(
                f"Columns of '{report.table}' still have missing values: {unresolved}"
            )
