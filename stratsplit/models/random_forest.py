"""
Random forest model wrapper.
"""

from __future__ import annotations

import numpy as np
from sklearn.ensemble import RandomForestClassifier

from stratsplit.config import RandomForestConfig


class RandomForestModel:
    """Random forest binary classifier.

    ``max_features`` plays the role of mtry and ``min_samples_leaf`` of
    min_n when tuning.
    """

    name = "random_forest"

    def __init__(self, cfg: RandomForestConfig | None = None) -> None:
        self.cfg = cfg or RandomForestConfig()
        self._model: RandomForestClassifier | None = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> None:
        self._model = RandomForestClassifier(
            n_estimators=self.cfg.n_estimators,
            max_features=self.cfg.max_features,
            min_samples_leaf=self.cfg.min_samples_leaf,
            n_jobs=self.cfg.n_jobs,
            random_state=self.cfg.random_seed,
        )
        self._model.fit(X, y)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Return probability of class 1 for each sample.

        Raises:
            RuntimeError: If model has not been fitted.
        """
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        proba = self._model.predict_proba(X)
        # A forest fit on a single class has one probability column
        if proba.shape[1] == 1:
            only = self._model.classes_[0]
            return np.full(len(X), 1.0 if only == 1 else 0.0)
        return proba[:, 1]

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(X) >= threshold).astype(int)

    def feature_importances(self) -> np.ndarray:
        """Impurity-based importances."""
        if self._model is None:
            raise RuntimeError("Model has not been fitted. Call fit() first.")
        return self._model.feature_importances_
