"""
Data preprocessing module for the flight delay report.

This module contains utilities for:
- Data ingestion from delimited sources
- Schema declaration and type parsing
- Missing value diagnostics
- Rule-based cleaning and imputation
- Train/test split
"""

from .data_ingestion import DatasetLoader
from .data_cleaner import CleaningRule, DropPredicate, Imputation, RuleSet, TableCleaner
from .errors import (
    DataLossError,
    ImputationError,
    JoinCardinalityWarning,
    PipelineError,
    TypeCoercionError,
    UnknownColumnError,
)
from .missingness import MissingnessAnalyzer, MissingnessReport
from .schema_validator import ColumnType, SchemaValidator, TableSchema, coerce_table
from .splitter import Split, StratifiedSplitter

__all__ = [
    "DatasetLoader",
    "CleaningRule",
    "DropPredicate",
    "Imputation",
    "RuleSet",
    "TableCleaner",
    "DataLossError",
    "ImputationError",
    "JoinCardinalityWarning",
    "PipelineError",
    "TypeCoercionError",
    "UnknownColumnError",
    "MissingnessAnalyzer",
    "MissingnessReport",
    "ColumnType",
    "SchemaValidator",
    "TableSchema",
    "coerce_table",
    "Split",
    "StratifiedSplitter",
]
