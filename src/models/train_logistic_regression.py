"""
Logistic Regression model training for the late/on-time classification task.
"""

import logging

import pandas as pd
from pyspark.sql import SparkSession
from pyspark.ml import Pipeline, PipelineModel
from pyspark.ml.classification import LogisticRegression
from pyspark.ml.evaluation import BinaryClassificationEvaluator
import yaml

from .spark_features import (
    classification_metrics,
    confusion_counts,
    feature_stages,
    log_metrics,
    to_spark_frame,
)
from .training import run_training


class LogisticRegressionTrainer:
    """Trains logistic regression model for late arrival prediction."""

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
        self.model_config = models_config.get("logistic_regression", {})
        self.categorical = list(models_config.get("features", {}).get("categorical", []))
        self.numeric = list(models_config.get("features", {}).get("numeric", []))
        self.label = self.model_config.get("label", "late")

    def build_pipeline(self) -> Pipeline:
        """Feature stages followed by the logistic regression estimator."""
        lr = LogisticRegression(
            featuresCol="features",
            labelCol=self.label,
            maxIter=self.model_config.get("max_iter", 100),
            regParam=self.model_config.get("reg_param", 0.0),
            elasticNetParam=self.model_config.get("elastic_net_param", 0.0),
            threshold=self.model_config.get("threshold", 0.5),
            family="binomial",
        )
        return Pipeline(stages=feature_stages(self.categorical, self.numeric) + [lr])

    def train_model(self, train_df: pd.DataFrame) -> PipelineModel:
        """
        Train logistic regression model.

        Args:
            train_df: Training table from the splitter

        Returns:
            Trained PipelineModel
        """
        self.logger.info(f"Training Logistic Regression model on {len(train_df):,} records")

        train_sdf = to_spark_frame(self.spark, train_df, self.categorical, self.numeric, self.label)
        model = self.build_pipeline().fit(train_sdf)

        self.logger.info("Model training completed")
        return model

    def evaluate_model(self, model: PipelineModel, test_df: pd.DataFrame) -> dict:
        """
        Evaluate trained model on test data.

        Args:
            model: Trained model
            test_df: Test table from the splitter

        Returns:
            Dictionary with evaluation metrics
        """
        self.logger.info("Evaluating model on test data")

        test_sdf = to_spark_frame(self.spark, test_df, self.categorical, self.numeric, self.label)
        predictions = model.transform(test_sdf)

        evaluator_roc = BinaryClassificationEvaluator(
            labelCol=self.label, rawPredictionCol="rawPrediction", metricName="areaUnderROC"
        )
        evaluator_pr = BinaryClassificationEvaluator(
            labelCol=self.label, rawPredictionCol="rawPrediction", metricName="areaUnderPR"
        )

        counts = confusion_counts(predictions, self.label)
        metrics = classification_metrics(counts)
        metrics["auc_roc"] = evaluator_roc.evaluate(predictions)
        metrics["auc_pr"] = evaluator_pr.evaluate(predictions)
        metrics.update(counts)

        log_metrics(self.logger, metrics)
        return metrics


def main(argv=None):
    """Main function for standalone execution."""
    return run_training(
        LogisticRegressionTrainer,
        app_name="LogisticRegressionTraining",
        description="Train Logistic Regression model",
        argv=argv,
    )


if __name__ == "__main__":
    main()
