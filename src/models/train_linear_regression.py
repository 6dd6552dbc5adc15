"""
Linear Regression model training for the arrival delay regression task.
"""

import logging

import pandas as pd
from pyspark.sql import SparkSession
from pyspark.ml import Pipeline, PipelineModel
from pyspark.ml.evaluation import RegressionEvaluator
from pyspark.ml.regression import LinearRegression
import yaml

from .spark_features import feature_stages, log_metrics, to_spark_frame
from .training import run_training


class LinearRegressionTrainer:
    """Trains linear regression model for arrival delay in minutes."""

    def __init__(self, spark: SparkSession, config_path: str = "config/config.yaml"):
        """
        Initialize trainer.

        Args:
            spark: Active SparkSession
            config_path: Path to configuration file
        """
        self.spark = spark
        self.logger = logging.getLogger(__name__)

        with open(config_path, "r") as f:
            self.config = yaml.safe_load(f)

        models_config = self.config.get("models", {})
        self.model_config = models_config.get("linear_regression", {})
        self.categorical = list(models_config.get("features", {}).get("categorical", []))
        self.numeric = list(models_config.get("features", {}).get("numeric", []))
        self.label = self.model_config.get("label", "arr_delay")

    def build_pipeline(self) -> Pipeline:
        """Feature stages followed by the linear regression estimator."""
        lr = LinearRegression(
            featuresCol="features",
            labelCol=self.label,
            maxIter=self.model_config.get("max_iter", 100),
            regParam=self.model_config.get("reg_param", 0.0),
            elasticNetParam=self.model_config.get("elastic_net_param", 0.0),
        )
        return Pipeline(stages=feature_stages(self.categorical, self.numeric) + [lr])

    def train_model(self, train_df: pd.DataFrame) -> PipelineModel:
        """
        Train linear regression model.

        Args:
            train_df: Training table from the splitter

        Returns:
            Trained PipelineModel
        """
        self.logger.info(f"Training Linear Regression model on {len(train_df):,} records")

        train_sdf = to_spark_frame(self.spark, train_df, self.categorical, self.numeric, self.label)
        model = self.build_pipeline().fit(train_sdf)

        summary = model.stages[-1].summary
        self.logger.info(f"  Training RMSE: {summary.rootMeanSquaredError:.4f}")
        self.logger.info(f"  Training R2: {summary.r2:.4f}")

        self.logger.info("Model training completed")
        return model

    def evaluate_model(self, model: PipelineModel, test_df: pd.DataFrame) -> dict:
        """
        Evaluate trained model on test data.

        Args:
            model: Trained model
            test_df: Test table from the splitter

        Returns:
            Dictionary with RMSE, MAE and R2
        """
        self.logger.info("Evaluating model on test data")

        test_sdf = to_spark_frame(self.spark, test_df, self.categorical, self.numeric, self.label)
        predictions = model.transform(test_sdf)

        metrics = {}
        for metric_name in ("rmse", "mae", "r2"):
            evaluator = RegressionEvaluator(
                labelCol=self.label, predictionCol="prediction", metricName=metric_name
            )
            metrics[metric_name] = evaluator.evaluate(predictions)

        metrics["num_test_records"] = predictions.count()

        log_metrics(self.logger, metrics)
        return metrics


def main(argv=None):
    """Main function for standalone execution."""
    return run_training(
        LinearRegressionTrainer,
        app_name="LinearRegressionTraining",
        description="Train Linear Regression model",
        argv=argv,
    )


if __name__ == "__main__":
    main()
