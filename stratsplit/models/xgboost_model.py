"""
XGBoost model wrapper.

Boosted-tree alternative to the random forest, same interface.
"""

from __future__ import annotations

import numpy as np
import xgboost as xgb

from stratsplit.config import XGBoostConfig


class XGBoostModel:
    """XGBoost binary classifier wrapper.

    Wraps xgboost.XGBClassifier with the same fit / predict_proba interface
    as the scikit-learn models so the workflow can swap them freely.
    """

    name = "xgboost"

    def __init__(self, cfg: XGBoostConfig | None = None) -> None:
        self.cfg = cfg or XGBoostConfig()
        self._model: xgb.XGBClassifier | None = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> None:
        """Train the model on labeled data.

        Args:
            X: Feature matrix of shape (n_samples, n_features).
            y: Binary labels of shape (n_samples,).
        """
        self._model = xgb.XGBClassifier(
            n_estimators=self.cfg.n_estimators,
            max_depth=self.cfg.max_depth,
            learning_rate=self.cfg.learning_rate,
            subsample=self.cfg.subsample,
            colsample_bytree=self.cfg.colsample_bytree,
            random_state=self.cfg.random_seed,
            objective="binary:logistic",
            eval_metric="auc",
        )
        self._model.fit(X, y, verbose=False)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Return P(y=1|X) for each sample.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        # XGBClassifier.predict_proba returns (n_samples, 2) for binary
        return self._model.predict_proba(X)[:, 1]

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(X) >= threshold).astype(int)

    def feature_importances(self) -> np.ndarray:
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.feature_importances_
