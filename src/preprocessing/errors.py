"""
Exceptions raised by the data preparation pipeline.

All fatal errors derive from PipelineError and abort the run.
JoinCardinalityWarning is informational only.
"""


class PipelineError(Exception):
    """Base class for fatal data preparation errors."""


class DataLossError(PipelineError):
    """Raised when a filtering step would leave a table without records."""

    def __init__(self, table: str, step: str, removed: int):
        self.table = table
        self.step = step
        self.removed = removed
        super().__init__(
            f"{step} leaves no records in '{table}' ({removed:,} removed)"
        )


class UnknownColumnError(PipelineError):
    """Raised when configuration references a column the table does not have."""

    def __init__(self, table: str, columns):
        self.table = table
        self.columns = sorted(columns)
        super().__init__(f"Unknown columns for '{table}': {self.columns}")


class TypeCoercionError(PipelineError):
    """Raised when a value cannot be parsed as its declared type."""

    def __init__(self, column: str, value, row, declared_type: str):
        self.column = column
        self.value = value
        self.row = row
        self.declared_type = declared_type
        super().__init__(
            f"Cannot parse {value!r} in column '{column}' (row {row}) as {declared_type}"
        )


class ImputationError(PipelineError):
    """Raised when a column cannot be imputed or is left with missing values."""


class JoinCardinalityWarning(UserWarning):
    """Right-hand side of a join has duplicate keys; the first match is used."""
