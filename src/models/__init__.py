"""
Machine learning models module for the flight delay report.

This module contains:
- Linear Regression for arrival delay in minutes
- Logistic Regression for late / on-time classification
- Shared Spark ML feature stages
"""

from .train_linear_regression import LinearRegressionTrainer
from .train_logistic_regression import LogisticRegressionTrainer

__all__ = [
    "LinearRegressionTrainer",
    "LogisticRegressionTrainer",
]
