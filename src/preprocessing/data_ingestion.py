"""
Flight data ingestion module.

Loads the five delimited source tables (airlines, airports, flights, planes,
weather) with pandas and parses each column as its declared type.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import yaml

from .schema_validator import SchemaValidator, TableSchema, coerce_table

TABLE_NAMES = ("airlines", "airports", "flights", "planes", "weather")


class DatasetLoader:
    """Handles data ingestion for the flight delay report."""

    def __init__(self, config_path: str = "config/config.yaml", raw_path: Optional[str] = None):
        """
        Initialize data ingestion handler.

        Args:
            config_path: Path to configuration file
            raw_path: Directory holding the source files (overrides config)
        """
        self.logger = logging.getLogger(__name__)
        self.validator = SchemaValidator()

        # Load configuration
        with open(config_path, "r") as f:
            self.config = yaml.safe_load(f)

        self.data_config = self.config.get("data", {})
        self.raw_path = Path(raw_path or self.data_config.get("raw_path", "data/raw"))
        self.separator = self.data_config.get("separator", ";")
        self.missing_markers = self.data_config.get("missing_markers", ["", "NA"])
        self.files = self.data_config.get(
            "tables", {name: f"{name}.csv" for name in TABLE_NAMES}
        )
        self.schemas = {
            name: TableSchema.from_config(name, columns)
            for name, columns in self.config.get("schemas", {}).items()
        }

    def read_raw(self, file_path) -> pd.DataFrame:
        """
        Read a delimited file with every column as text.

        Args:
            file_path: Path to the file

        Returns:
            DataFrame of strings, missing markers as NaN
        """
        self.logger.info(f"Loading delimited data from: {file_path}")

        df = pd.read_csv(
            file_path,
            sep=self.separator,
            header=0,
            dtype=str,
            keep_default_na=False,
            na_values=self.missing_markers,
        )

        self.logger.info(f"Loaded {len(df):,} records")
        return df

    def load_table(self, name: str) -> pd.DataFrame:
        """
        Load one source table and parse it according to its schema.

        Args:
            name: Table name (key of ``data.tables`` in the config)

        Returns:
            Typed DataFrame
        """
        if name not in self.files:
            raise KeyError(f"No source file configured for table '{name}'")

        df = self.read_raw(self.raw_path / self.files[name])

        schema = self.schemas.get(name)
        if schema is None:
            self.logger.warning(f"No schema declared for '{name}', keeping text columns")
            return df

        self.validator.require_columns(df, schema.columns, name)
        return coerce_table(df, schema)

    def load_all(self) -> Dict[str, pd.DataFrame]:
        """Load every configured table, keyed by name."""
        return {name: self.load_table(name) for name in self.files}

    def save_table(self, df: pd.DataFrame, output_path) -> None:
        """
        Save a table in the same delimited format it was read in.

        Args:
            df: DataFrame to save
            output_path: Output file path
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Saving {len(df):,} records to: {output_path}")
        df.to_csv(output_path, sep=self.separator, index=True, index_label="row_id")

    def get_data_summary(self, df: pd.DataFrame, name: str = "table") -> dict:
        """
        Get summary statistics for a table.

        Args:
            df: Input DataFrame
            name: Table name, used for logging and the declared schema

        Returns:
            Dictionary with summary statistics
        """
        summary = self.validator.generate_schema_report(df, self.schemas.get(name))
        summary["num_records"] = len(df)

        self.logger.info(f"Data Summary ({name}):")
        self.logger.info(f"  Records: {summary['num_records']:,}")
        self.logger.info(f"  Columns: {summary['num_columns']}")

        return summary


def main():
    """Main function for standalone execution."""
    import argparse

    from .missingness import MissingnessAnalyzer

    parser = argparse.ArgumentParser(description="Load and inspect the flight tables")
    parser.add_argument("--input", help="Directory with the source files (overrides config)")
    parser.add_argument("--config", default="config/config.yaml", help="Config file path")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        loader = DatasetLoader(args.config, raw_path=args.input)
        analyzer = MissingnessAnalyzer()

        for name, df in loader.load_all().items():
            loader.get_data_summary(df, name)
            analyzer.analyze(df, name)

        logging.info("Data ingestion completed successfully")

    except Exception as e:
        logging.error(f"Error during data ingestion: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
