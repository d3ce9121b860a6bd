"""Model wrappers for binary classification."""

from stratsplit.config import LogisticRegressionConfig, RandomForestConfig, XGBoostConfig
from stratsplit.models.logistic_regression import LogisticRegressionModel
from stratsplit.models.random_forest import RandomForestModel
from stratsplit.models.registry import MODELS, build_model
from stratsplit.models.xgboost_model import XGBoostModel

__all__ = [
    "LogisticRegressionConfig",
    "LogisticRegressionModel",
    "RandomForestConfig",
    "RandomForestModel",
    "XGBoostConfig",
    "XGBoostModel",
    "MODELS",
    "build_model",
]
