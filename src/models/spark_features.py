"""
Shared PySpark ML feature stages and metrics for the delay models.
"""

import logging
from typing import Dict, List

import pandas as pd
from pyspark.sql import DataFrame, SparkSession
from pyspark.ml.feature import OneHotEncoder, StringIndexer, VectorAssembler


def to_spark_frame(
    spark: SparkSession,
    df: pd.DataFrame,
    categorical: List[str],
    numeric: List[str],
    label: str,
) -> DataFrame:
    """
    Convert the model columns of a pandas table to a Spark DataFrame.

    Categorical columns become strings, numeric columns and the label become
    doubles. Nullable pandas dtypes are not passed to Spark.
    """
    missing = set(categorical + numeric + [label]) - set(df.columns)
    if missing:
        raise KeyError(f"Model columns not in table: {sorted(missing)}")

    subset = pd.DataFrame(index=df.index)
    for col in categorical:
        subset[col] = df[col].astype(str)
    for col in numeric + [label]:
        subset[col] = df[col].astype("float64")

    return spark.createDataFrame(subset.reset_index(drop=True))


def feature_stages(categorical: List[str], numeric: List[str], output_col: str = "features") -> list:
    """
    Index and one-hot encode categoricals, then assemble one feature vector.

    Levels unseen during fitting are kept in an extra bucket.
    """
    index_cols = [f"{col}_INDEX" for col in categorical]
    vector_cols = [f"{col}_VEC" for col in categorical]

    stages = [
        StringIndexer(inputCol=col, outputCol=index_col, handleInvalid="keep")
        for col, index_col in zip(categorical, index_cols)
    ]
    if categorical:
        stages.append(
            OneHotEncoder(inputCols=index_cols, outputCols=vector_cols, handleInvalid="keep")
        )
    stages.append(VectorAssembler(inputCols=vector_cols + numeric, outputCol=output_col))
    return stages


def confusion_counts(predictions: DataFrame, label: str) -> Dict[str, int]:
    """Count (prediction, label) pairs of a binary classifier in one pass."""
    rows = predictions.groupBy("prediction", label).count().collect()
    counts = {(int(row["prediction"]), int(row[label])): row["count"] for row in rows}
    return {
        "true_positives": counts.get((1, 1), 0),
        "false_positives": counts.get((1, 0), 0),
        "true_negatives": counts.get((0, 0), 0),
        "false_negatives": counts.get((0, 1), 0),
    }


def classification_metrics(counts: Dict[str, int]) -> Dict[str, float]:
    """Accuracy, precision, recall and F1 from confusion counts; 0.0 where undefined."""
    tp, fp = counts["true_positives"], counts["false_positives"]
    tn, fn = counts["true_negatives"], counts["false_negatives"]

    def ratio(num, den):
        return num / den if den else 0.0

    precision = ratio(tp, tp + fp)
    recall = ratio(tp, tp + fn)
    return {
        "accuracy": ratio(tp + tn, tp + fp + tn + fn),
        "precision": precision,
        "recall": recall,
        "f1_score": ratio(2 * precision * recall, precision + recall),
    }


def log_metrics(logger: logging.Logger, metrics: Dict[str, float]) -> None:
    logger.info("Evaluation Results:")
    for name, value in metrics.items():
        if isinstance(value, float):
            logger.info(f"  {name}: {value:.4f}")
        else:
            logger.info(f"  {name}: {value:,}")
