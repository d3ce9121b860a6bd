"""
Fixed-order modeling workflow: FeaturePipeline -> Estimator.

A Workflow is the unit that gets fit on analysis rows and scored on
assessment rows. Stages are not composable at runtime; the only variable
parts are the model name and its parameters.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from stratsplit.data.dataset import Dataset
from stratsplit.evaluation.metrics import compute_metrics, encode_binary
from stratsplit.models.registry import build_model
from stratsplit.preprocessing.feature_pipeline import FeaturePipeline

logger = logging.getLogger(__name__)


def default_positive_class(dataset: Dataset) -> Any:
    """Second of the sorted classes of a binary label.

    Raises:
        ValueError: If the label does not have exactly two classes.
    """
    classes = dataset.classes
    if len(classes) != 2:
        raise ValueError(
            f"Label {dataset.label_column!r} has {len(classes)} classes {classes}; "
            "pass positive_class explicitly for one-vs-rest"
        )
    return classes[1]


class Workflow:
    """Feature pipeline plus binary classifier.

    Args:
        model: Model name, see stratsplit.models.MODELS.
        params: Config overrides for the model.
        positive_class: Label treated as class 1. Defaults to the second
            sorted class.
        random_seed: Seed passed to the model unless ``params`` sets one.
    """

    def __init__(
        self,
        model: str,
        params: Optional[Dict[str, Any]] = None,
        positive_class: Any = None,
        random_seed: int = 42,
    ) -> None:
        self.model_name = model
        self.params = dict(params or {})
        self.positive_class = positive_class
        self.random_seed = random_seed
        self.pipeline: FeaturePipeline | None = None
        self.model = None
        # Fail on bad names / params before any fitting
        build_model(self.model_name, self.params, self.random_seed)

    def with_params(self, params: Dict[str, Any]) -> Workflow:
        """New, unfitted workflow with ``params`` merged over the current ones."""
        return Workflow(
            self.model_name,
            {**self.params, **params},
            self.positive_class,
            self.random_seed,
        )

    def _positive(self, dataset: Dataset) -> Any:
        if self.positive_class is None:
            self.positive_class = default_positive_class(dataset)
        return self.positive_class

    def fit(self, dataset: Dataset, indices: Sequence[int]) -> Workflow:
        """Fit preprocessing and model on the rows at ``indices``."""
        positive = self._positive(dataset)
        frame = dataset.subset(indices)
        y = encode_binary(frame[dataset.label_column], positive)
        if len(np.unique(y)) < 2:
            raise ValueError(
                f"Analysis set of {len(frame)} rows holds a single class; cannot fit"
            )

        self.pipeline = FeaturePipeline(dataset.schema, dataset.label_column)
        X = self.pipeline.fit_transform(frame)
        self.model = build_model(self.model_name, self.params, self.random_seed)
        self.model.fit(X, y)
        logger.debug("Fitted %s on %d rows, %d features", self.model_name, *X.shape)
        return self

    def predict_proba(self, dataset: Dataset, indices: Sequence[int]) -> np.ndarray:
        """Probability of the positive class for rows at ``indices``."""
        if self.pipeline is None or self.model is None:
            raise RuntimeError("Workflow has not been fitted. Call fit() first.")
        X = self.pipeline.transform(dataset.subset(indices))
        return self.model.predict_proba(X)

    def evaluate(
        self,
        dataset: Dataset,
        indices: Sequence[int],
        metrics: List[str],
    ) -> Dict[str, float]:
        """Score the fitted workflow on the rows at ``indices``."""
        scores = self.predict_proba(dataset, indices)
        y = encode_binary(dataset.subset(indices)[dataset.label_column], self.positive_class)
        return compute_metrics(y, scores, metrics)

    def feature_importances(self) -> Dict[str, float]:
        """Importance per encoded feature, largest first."""
        if self.pipeline is None or self.model is None:
            raise RuntimeError("Workflow has not been fitted. Call fit() first.")
        values = self.model.feature_importances()
        pairs = sorted(zip(self.pipeline.feature_names, values), key=lambda p: -p[1])
        return {name: float(v) for name, v in pairs}
