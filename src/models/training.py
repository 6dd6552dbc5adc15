"""
Command-line driver shared by the model trainers.
"""

import argparse
import json
import logging
from pathlib import Path

import pandas as pd
from pyspark.sql import SparkSession


def read_split(path, separator: str) -> pd.DataFrame:
    """Read a train or test table written by the pipeline."""
    return pd.read_csv(path, sep=separator, index_col="row_id")


def run_training(trainer_cls, app_name: str, description: str, argv=None) -> dict:
    """
    Fit ``trainer_cls`` on a train table, evaluate it on a test table and
    optionally save the model and its metrics.

    Returns:
        The evaluation metrics
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--train", required=True, help="Training table written by the pipeline")
    parser.add_argument("--test", required=True, help="Test table written by the pipeline")
    parser.add_argument("--output", help="Output path for trained model")
    parser.add_argument("--config", default="config/config.yaml", help="Config file path")
    parser.add_argument("--metrics-output", help="Output path for metrics JSON")

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    spark = SparkSession.builder.appName(app_name).getOrCreate()

    try:
        trainer = trainer_cls(spark, args.config)
        separator = trainer.config.get("data", {}).get("separator", ";")

        model = trainer.train_model(read_split(args.train, separator))
        metrics = trainer.evaluate_model(model, read_split(args.test, separator))

        if args.output:
            logging.info(f"Saving model to: {args.output}")
            model.write().overwrite().save(args.output)

        if args.metrics_output:
            metrics_path = Path(args.metrics_output)
            metrics_path.parent.mkdir(parents=True, exist_ok=True)
            with open(metrics_path, "w") as f:
                json.dump(metrics, f, indent=2)
            logging.info(f"Metrics saved to: {args.metrics_output}")

        logging.info(f"{app_name} completed successfully")
        return metrics

    except Exception as e:
        logging.error(f"Error during training: {str(e)}", exc_info=True)
        raise

    finally:
        spark.stop()
