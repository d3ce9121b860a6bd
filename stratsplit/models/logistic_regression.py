"""
Penalized logistic regression model.

The glmnet-style workhorse of the workflow: ridge, lasso or elastic-net
depending on ``penalty``.
"""

from __future__ import annotations

import re

import numpy as np
import sklearn
from sklearn.linear_model import LogisticRegression

from stratsplit.config import LogisticRegressionConfig


class LogisticRegressionModel:
    """Penalized logistic regression for binary classification."""

    name = "logistic_regression"

    def __init__(self, cfg: LogisticRegressionConfig | None = None):
        """Initialize model with config.

        Args:
            cfg: Configuration. Uses defaults if None.
        """
        self.cfg = cfg or LogisticRegressionConfig()
        self._model = LogisticRegression(**estimator_params(self.cfg))
        self._fitted = False

    def fit(self, X: np.ndarray, y: np.ndarray) -> None:
        """Fit model on training data.

        Args:
            X: Feature matrix (n_samples, n_features).
            y: Binary labels (0/1).
        """
        self._model.fit(X, y)
        self._fitted = True

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Predict probability of class 1.

        Args:
            X: Feature matrix (n_samples, n_features).

        Returns:
            Probability of class 1 for each sample.
        """
        if not self._fitted:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.predict_proba(X)[:, 1]

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(X) >= threshold).astype(int)

    def coefficients(self) -> np.ndarray:
        """Fitted coefficients (n_features,)."""
        if not self._fitted:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.coef_[0]

    def feature_importances(self) -> np.ndarray:
        """Absolute coefficients, comparable across standardized features."""
        return np.abs(self.coefficients())


def _sklearn_version() -> tuple:
    major, minor = re.match(r"(\d+)\.(\d+)", sklearn.__version__).groups()
    return int(major), int(minor)


# scikit-learn 1.8 deprecated ``penalty`` in favour of l1_ratio / C=inf
PENALTY_AS_L1_RATIO = _sklearn_version() >= (1, 8)


def estimator_params(cfg: LogisticRegressionConfig) -> dict:
    """Keyword arguments for ``LogisticRegression`` on the installed scikit-learn.

    Newer releases express the penalty only through ``l1_ratio``
    (0 = ridge, 1 = lasso) and drop it entirely with ``C=inf``.
    """
    params = dict(
        C=cfg.C,
        solver=cfg.solver,
        max_iter=cfg.max_iter,
        random_state=cfg.random_seed,
    )
    if not PENALTY_AS_L1_RATIO:
        params["penalty"] = cfg.penalty
        if cfg.penalty == "elasticnet":
            params["l1_ratio"] = cfg.l1_ratio
        return params

    if cfg.penalty is None:
        params["C"] = np.inf
        params["l1_ratio"] = 0.0
    elif cfg.penalty == "l1":
        params["l1_ratio"] = 1.0
    elif cfg.penalty == "l2":
        params["l1_ratio"] = 0.0
    else:
        params["l1_ratio"] = cfg.l1_ratio
    return params
