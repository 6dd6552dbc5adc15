"""
Flight data cleaning module.

Applies declarative, per-table cleaning rules: records whose missing values
are too severe are dropped, remaining gaps are imputed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd
from pandas.api import types as ptypes
import yaml

from .errors import DataLossError, ImputationError, UnknownColumnError
from .missingness import MissingnessAnalyzer, MissingnessReport
from .schema_validator import TableSchema, coerce_table

DROP_PREDICATES = ("all_missing", "any_missing", "fraction_missing")
IMPUTE_STRATEGIES = ("median", "mean", "mode", "constant")


@dataclass(frozen=True)
class DropPredicate:
    """Criticality predicate deciding which records are removed."""

    kind: str
    columns: Tuple[str, ...]
    threshold: float = 0.5
    inclusive: bool = False

    def __post_init__(self):
        if self.kind not in DROP_PREDICATES:
            raise ValueError(f"Unknown drop predicate: {self.kind}")
        if not self.columns:
            raise ValueError(f"Drop predicate '{self.kind}' needs at least one column")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"Threshold must be within [0, 1], got {self.threshold}")

    @classmethod
    def from_config(cls, spec: Mapping[str, Any]) -> "DropPredicate":
        kinds = [key for key in spec if key in DROP_PREDICATES]
        if len(kinds) != 1:
            raise ValueError(f"Drop rule must name exactly one of {DROP_PREDICATES}: {spec}")

        kind = kinds[0]
        if kind == "fraction_missing":
            params = spec[kind]
            return cls(
                kind=kind,
                columns=tuple(params["columns"]),
                threshold=float(params.get("threshold", 0.5)),
                inclusive=bool(params.get("inclusive", False)),
            )
        return cls(kind=kind, columns=tuple(spec[kind]))

    def mask(self, df: pd.DataFrame) -> pd.Series:
        """Boolean Series, True where the record must be dropped."""
        missing = df[list(self.columns)].isna()

        if self.kind == "all_missing":
            return missing.all(axis=1)
        if self.kind == "any_missing":
            return missing.any(axis=1)

        fraction = missing.sum(axis=1) / len(self.columns)
        if self.inclusive:
            return fraction >= self.threshold
        return fraction > self.threshold


@dataclass(frozen=True)
class Imputation:
    """How one column's missing values are filled."""

    strategy: str
    value: Any = None

    def __post_init__(self):
        if self.strategy not in IMPUTE_STRATEGIES:
            raise ValueError(f"Unknown imputation strategy: {self.strategy}")
        if self.strategy == "constant" and self.value is None:
            raise ValueError("Constant imputation needs a value")

    @classmethod
    def from_config(cls, spec) -> "Imputation":
        if isinstance(spec, str):
            return cls(strategy=spec)
        return cls(strategy=spec["strategy"], value=spec.get("value"))


@dataclass(frozen=True)
class CleaningRule:
    """Named pair of an optional drop predicate and per-column imputations."""

    name: str
    drop: Optional[DropPredicate] = None
    impute: Dict[str, Imputation] = field(default_factory=dict)

    @classmethod
    def from_config(cls, spec: Mapping[str, Any]) -> "CleaningRule":
        drop = DropPredicate.from_config(spec["drop"]) if spec.get("drop") else None
        impute = {
            col: Imputation.from_config(how) for col, how in (spec.get("impute") or {}).items()
        }
        return cls(name=spec["name"], drop=drop, impute=impute)

    @property
    def columns(self) -> List[str]:
        cols = list(self.drop.columns) if self.drop else []
        return cols + [col for col in self.impute if col not in cols]


@dataclass(frozen=True)
class RuleSet:
    """Ordered cleaning rules for one table, plus its declared schema."""

    table: str
    rules: Tuple[CleaningRule, ...] = ()
    schema: Optional[TableSchema] = None

    @classmethod
    def from_config(
        cls,
        table: str,
        rules: Optional[List[Mapping[str, Any]]],
        schema: Optional[Mapping[str, str]] = None,
    ) -> "RuleSet":
        return cls(
            table=table,
            rules=tuple(CleaningRule.from_config(rule) for rule in (rules or [])),
            schema=TableSchema.from_config(table, schema) if schema else None,
        )

    @property
    def referenced_columns(self) -> List[str]:
        cols = []
        for rule in self.rules:
            cols.extend(col for col in rule.columns if col not in cols)
        if self.schema is not None:
            cols.extend(col for col in self.schema.columns if col not in cols)
        return cols

    @property
    def resolved_columns(self) -> List[str]:
        """Columns guaranteed to hold no missing values after cleaning."""
        cols = []
        for rule in self.rules:
            if rule.drop is not None and rule.drop.kind == "any_missing":
                cols.extend(col for col in rule.drop.columns if col not in cols)
            cols.extend(col for col in rule.impute if col not in cols)
        return cols


def mode_value(series: pd.Series):
    """
    Most frequent non-missing value.

    Ties go to the value that occurs first in table order.
    """
    values = series.dropna()
    if values.empty:
        raise ImputationError(f"Column '{series.name}' has no values to take a mode from")

    counts = values.value_counts()
    candidates = set(counts.index[counts == counts.max()])
    return values[values.isin(candidates)].iloc[0]


def compute_statistic(series: pd.Series, imputation: Imputation):
    """Fill value for ``series`` under ``imputation``."""
    if imputation.strategy == "constant":
        return imputation.value
    if imputation.strategy == "mode":
        return mode_value(series)

    if series.notna().sum() == 0:
        raise ImputationError(
            f"Column '{series.name}' has no values to take a {imputation.strategy} from"
        )
    if not (ptypes.is_numeric_dtype(series) or ptypes.is_datetime64_any_dtype(series)):
        raise ImputationError(
            f"Cannot take a {imputation.strategy} of non-numeric column '{series.name}'"
        )

    value = series.median() if imputation.strategy == "median" else series.mean()
    if ptypes.is_integer_dtype(series):
        value = int(round(float(value)))
    return value


class TableCleaner:
    """Cleans the flight tables according to their configured rule sets."""

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize data cleaner.

        Args:
            config_path: Path to configuration file
        """
        self.logger = logging.getLogger(__name__)
        self.analyzer = MissingnessAnalyzer()

        with open(config_path, "r") as f:
            self.config = yaml.safe_load(f)

        schemas = self.config.get("schemas", {})
        self.rule_sets = {
            table: RuleSet.from_config(table, rules, schemas.get(table))
            for table, rules in self.config.get("cleaning", {}).items()
        }

    def validate_columns(self, df: pd.DataFrame, rule_set: RuleSet) -> None:
        """Raise UnknownColumnError if the rule set names absent columns."""
        unknown = set(rule_set.referenced_columns) - set(df.columns)
        if unknown:
            raise UnknownColumnError(rule_set.table, unknown)

    def drop_records(self, df: pd.DataFrame, rule_set: RuleSet) -> pd.DataFrame:
        """
        Apply every drop predicate in declared order.

        Args:
            df: Parsed table
            rule_set: Rules for this table

        Returns:
            New DataFrame without the dropped records

        Raises:
            DataLossError: A predicate would remove every remaining record
        """
        if df.empty:
            raise DataLossError(rule_set.table, "empty input", 0)

        for rule in rule_set.rules:
            if rule.drop is None:
                continue

            drop_mask = rule.drop.mask(df)
            removed = int(drop_mask.sum())
            if removed == len(df):
                raise DataLossError(rule_set.table, f"rule '{rule.name}'", removed)

            if removed:
                self.logger.info(
                    f"  {rule.name}: removed {removed:,} records "
                    f"({removed / len(df) * 100:.2f}%)"
                )
            df = df.loc[~drop_mask]

        return df

    def impute_values(self, df: pd.DataFrame, rule_set: RuleSet) -> pd.DataFrame:
        """
        Fill missing values using statistics of the post-drop table.

        All statistics are computed before any column is filled.
        """
        statistics = []
        for rule in rule_set.rules:
            for col_name, imputation in rule.impute.items():
                value = compute_statistic(df[col_name], imputation)
                statistics.append((rule.name, col_name, imputation, value))

        imputed = df.copy()
        for rule_name, col_name, imputation, value in statistics:
            n_missing = int(imputed[col_name].isna().sum())
            if n_missing == 0:
                continue
            imputed[col_name] = imputed[col_name].fillna(value)
            self.logger.info(
                f"  {rule_name}: imputed {n_missing:,} values of {col_name} "
                f"with {imputation.strategy} {value!r}"
            )

        return imputed

    def clean(self, df: pd.DataFrame, rule_set: RuleSet) -> pd.DataFrame:
        """
        Apply the full cleaning pipeline for one table.

        Steps: column validation, declared parsing, drop phase, impute phase.
        The input DataFrame is not modified.

        Args:
            df: Raw table
            rule_set: Rules for this table

        Returns:
            Cleaned DataFrame, index labels preserved
        """
        self.logger.info(f"Cleaning '{rule_set.table}' ({len(df):,} records)")

        self.validate_columns(df, rule_set)
        if rule_set.schema is not None:
            df = coerce_table(df, rule_set.schema)

        df = self.drop_records(df, rule_set)
        df = self.impute_values(df, rule_set)

        self.logger.info(f"Finished '{rule_set.table}': {len(df):,} records")
        return df

    def clean_table(self, table: str, df: pd.DataFrame) -> pd.DataFrame:
        """Clean ``df`` with the rule set configured for ``table``."""
        if table not in self.rule_sets:
            raise KeyError(f"No cleaning rules configured for table '{table}'")
        return self.clean(df, self.rule_sets[table])

    def clean_all(
        self, tables: Mapping[str, pd.DataFrame]
    ) -> Tuple[Dict[str, pd.DataFrame], Dict[str, Dict[str, MissingnessReport]]]:
        """
        Clean every table and report missingness before and after.

        Tables without configured rules are passed through unchanged.

        Returns:
            Tuple of (cleaned tables, {table: {"before": ..., "after": ...}})
        """
        cleaned = {}
        reports = {}

        for name, df in tables.items():
            before = self.analyzer.analyze(df, name)
            if name in self.rule_sets:
                rule_set = self.rule_sets[name]
                cleaned[name] = self.clean(df, rule_set)
                after = self.analyzer.analyze(cleaned[name], name)
                self.analyzer.verify_resolution(after, rule_set.resolved_columns)
            else:
                self.logger.warning(f"No cleaning rules for '{name}', passing through")
                cleaned[name] = df
                after = before
            reports[name] = {"before": before, "after": after}

        return cleaned, reports


def main():
    """Main function for standalone execution."""
    import argparse
    from pathlib import Path

    from .data_ingestion import DatasetLoader

    parser = argparse.ArgumentParser(description="Clean the flight tables")
    parser.add_argument("--output", required=True, help="Output directory for cleaned tables")
    parser.add_argument("--config", default="config/config.yaml", help="Config file path")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        loader = DatasetLoader(args.config)
        tables = loader.load_all()

        cleaner = TableCleaner(args.config)
        cleaned, _ = cleaner.clean_all(tables)

        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        for name, df in cleaned.items():
            loader.save_table(df, output_dir / f"{name}.csv")

        logging.info("Data cleaning completed successfully")

    except Exception as e:
        logging.error(f"Error during data cleaning: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
