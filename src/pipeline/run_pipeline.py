"""
End-to-end data preparation for the flight delay report.

Runs load -> clean -> features -> split from a single configuration file and
writes the train/test tables for each modelling task.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import pandas as pd
import yaml

from features.feature_engineering import FeatureSet, FlightFeatureBuilder
from preprocessing.data_cleaner import TableCleaner
from preprocessing.data_ingestion import DatasetLoader
from preprocessing.missingness import MissingnessReport
from preprocessing.splitter import Split, StratifiedSplitter

DEFAULT_TASKS = {"regression": "arr_delay", "classification": "late"}


@dataclass
class PipelineResult:
    """Everything the model collaborator and the report consume."""

    cleaned: Dict[str, pd.DataFrame]
    missingness: Dict[str, Dict[str, MissingnessReport]]
    features: FeatureSet
    splits: Dict[str, Split] = field(default_factory=dict)


class FlightDelayPipeline:
    """Wires the preparation stages together."""

    def __init__(self, config_path: str = "config/config.yaml", raw_path: Optional[str] = None):
        """
        Initialize pipeline.

        Args:
            config_path: Path to configuration file
            raw_path: Directory holding the source files (overrides config)
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = config_path

        with open(config_path, "r") as f:
            self.config = yaml.safe_load(f)

        split_config = self.config.get("split", {})
        self.tasks = split_config.get("tasks", DEFAULT_TASKS)

        self.loader = DatasetLoader(config_path, raw_path=raw_path)
        self.cleaner = TableCleaner(config_path)
        self.builder = FlightFeatureBuilder(config_path)
        self.splitter = StratifiedSplitter(
            seed=split_config.get("seed", 11111),
            train_fraction=split_config.get("train_fraction", 0.8),
            quantile_groups=split_config.get("quantile_groups", 5),
        )

    def run(self, tables: Optional[Mapping[str, pd.DataFrame]] = None) -> PipelineResult:
        """
        Run every stage once.

        Args:
            tables: Typed source tables; loaded from disk when omitted

        Returns:
            PipelineResult
        """
        self.logger.info("Starting flight delay data preparation")

        if tables is None:
            tables = self.loader.load_all()

        cleaned, missingness = self.cleaner.clean_all(tables)
        features = self.builder.build(cleaned["flights"], cleaned["weather"], cleaned)

        splits = {
            task: self.splitter.split(features.frame, target)
            for task, target in self.tasks.items()
        }

        self.logger.info("Data preparation completed")
        return PipelineResult(
            cleaned=cleaned, missingness=missingness, features=features, splits=splits
        )

    def write_outputs(self, result: PipelineResult, output_dir) -> None:
        """
        Write train/test tables, missingness reports and normalization ranges.

        Args:
            result: Output of ``run``
            output_dir: Directory to write into
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        for task, split in result.splits.items():
            self.loader.save_table(split.train, output_dir / f"{task}_train.csv")
            self.loader.save_table(split.test, output_dir / f"{task}_test.csv")

        missingness = {
            table: {stage: report.to_dict() for stage, report in stages.items()}
            for table, stages in result.missingness.items()
        }
        with open(output_dir / "missingness.json", "w") as f:
            json.dump(missingness, f, indent=2)

        normalization = {
            column: {"min": params.minimum, "max": params.maximum}
            for column, params in result.features.normalization.items()
        }
        with open(output_dir / "normalization.json", "w") as f:
            json.dump(normalization, f, indent=2)

        self.logger.info(f"Outputs written to: {output_dir}")


def main():
    """Main function for standalone execution."""
    import argparse

    parser = argparse.ArgumentParser(description="Prepare flight delay model datasets")
    parser.add_argument("--input", help="Directory with the source files (overrides config)")
    parser.add_argument("--output", help="Output directory (overrides config)")
    parser.add_argument("--config", default="config/config.yaml", help="Config file path")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        pipeline = FlightDelayPipeline(args.config, raw_path=args.input)
        result = pipeline.run()

        output_dir = args.output or pipeline.config.get("output", {}).get("path", "output")
        pipeline.write_outputs(result, output_dir)

        logging.info("Pipeline completed successfully")

    except Exception as e:
        logging.error(f"Error during pipeline run: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
