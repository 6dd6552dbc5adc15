"""
Schema declaration and validation for the flight tables.

Declares the semantic type of every column and turns raw text columns into
typed columns, normalizing decimal commas before numeric parsing.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping

import pandas as pd
from pandas.api import types as ptypes

from .errors import TypeCoercionError, UnknownColumnError


class ColumnType(str, Enum):
    """Semantic column types."""

    INTEGER = "integer"
    REAL = "real"
    CATEGORICAL = "categorical"
    TIMESTAMP = "timestamp"

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnType.INTEGER, ColumnType.REAL)


@dataclass(frozen=True)
class TableSchema:
    """Mapping from column name to semantic type for one table."""

    name: str
    columns: Dict[str, ColumnType] = field(default_factory=dict)

    @classmethod
    def from_config(cls, name: str, mapping: Mapping[str, str]) -> "TableSchema":
        """
        Build a schema from a ``column: type`` mapping.

        Args:
            name: Table name
            mapping: Column names mapped to type names (integer, real, ...)

        Returns:
            TableSchema
        """
        try:
            columns = {col: ColumnType(str(kind)) for col, kind in mapping.items()}
        except ValueError as e:
            raise ValueError(f"Invalid column type in schema '{name}': {e}") from e
        return cls(name=name, columns=columns)

    @property
    def numeric_columns(self) -> List[str]:
        return [col for col, kind in self.columns.items() if kind.is_numeric]

    def __contains__(self, column: str) -> bool:
        return column in self.columns


def _parse_numeric(series: pd.Series, column: str, kind: ColumnType) -> pd.Series:
    if ptypes.is_numeric_dtype(series) and not ptypes.is_bool_dtype(series):
        parsed = series.astype("float64")
    else:
        # "1013,5" -> "1013.5"
        text = series.where(
            series.isna(),
            series.astype(str).str.strip().str.replace(",", ".", regex=False),
        )
        text = text.mask(text == "")
        parsed = pd.to_numeric(text, errors="coerce").astype("float64")

        bad = text.notna() & parsed.isna()
        if bad.any():
            row = bad.idxmax()
            raise TypeCoercionError(column, series.loc[row], row, kind.value)

    if kind is ColumnType.INTEGER:
        fractional = parsed.notna() & (parsed != parsed.round())
        if fractional.any():
            row = fractional.idxmax()
            raise TypeCoercionError(column, series.loc[row], row, kind.value)
        return parsed.astype("Int64")

    return parsed


def _parse_timestamp(series: pd.Series, column: str) -> pd.Series:
    if ptypes.is_datetime64_any_dtype(series):
        return series

    parsed = pd.to_datetime(series, errors="coerce")
    bad = series.notna() & (series.astype(str).str.strip() != "") & parsed.isna()
    if bad.any():
        row = bad.idxmax()
        raise TypeCoercionError(column, series.loc[row], row, ColumnType.TIMESTAMP.value)
    return parsed


def coerce_column(series: pd.Series, kind: ColumnType, column: str) -> pd.Series:
    """Parse one column as its declared type."""
    if kind.is_numeric:
        return _parse_numeric(series, column, kind)
    if kind is ColumnType.TIMESTAMP:
        return _parse_timestamp(series, column)
    if ptypes.is_object_dtype(series) or ptypes.is_string_dtype(series):
        return series.astype(object)
    return series.where(series.isna(), series.astype(str)).astype(object)


def coerce_table(df: pd.DataFrame, schema: TableSchema) -> pd.DataFrame:
    """
    Return a copy of ``df`` with every declared column parsed as its type.

    Args:
        df: Table read as text
        schema: Declared schema

    Returns:
        New DataFrame with typed columns

    Raises:
        UnknownColumnError: A declared column is absent from the table
        TypeCoercionError: A value cannot be parsed as its declared type
    """
    missing = set(schema.columns) - set(df.columns)
    if missing:
        raise UnknownColumnError(schema.name, missing)

    typed = df.copy()
    for column, kind in schema.columns.items():
        typed[column] = coerce_column(df[column], kind, column)
    return typed


_DTYPE_CHECKS = {
    ColumnType.INTEGER: ptypes.is_integer_dtype,
    ColumnType.REAL: ptypes.is_float_dtype,
    ColumnType.TIMESTAMP: ptypes.is_datetime64_any_dtype,
    ColumnType.CATEGORICAL: ptypes.is_object_dtype,
}


class SchemaValidator:
    """Validates DataFrame schemas for the flight tables."""

    def __init__(self):
        """Initialize schema validator."""
        self.logger = logging.getLogger(__name__)

    def require_columns(
        self, df: pd.DataFrame, required_columns: Iterable[str], table: str
    ) -> None:
        """Raise UnknownColumnError unless every required column is present."""
        missing_columns = set(required_columns) - set(df.columns)
        if missing_columns:
            raise UnknownColumnError(table, missing_columns)

    def generate_schema_report(self, df: pd.DataFrame, schema: TableSchema = None) -> Dict:
        """
        Describe the parsed columns of a table.

        Columns whose dtype does not match their declared type are listed
        under ``mismatches``.
        """
        declared = schema.columns if schema is not None else {}
        mismatches = [
            col
            for col, kind in declared.items()
            if col in df.columns and not _DTYPE_CHECKS[kind](df[col])
        ]
        if mismatches:
            self.logger.warning(f"Columns not parsed as declared: {mismatches}")

        return {
            "num_columns": len(df.columns),
            "columns": list(df.columns),
            "schema": {col: str(dtype) for col, dtype in df.dtypes.items()},
            "nullable_columns": [col for col in df.columns if df[col].isna().any()],
            "mismatches": mismatches,
        }
