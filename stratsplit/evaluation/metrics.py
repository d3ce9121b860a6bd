"""
Classification metrics for assessment sets.

Implements:
- ROC AUC: Area under the ROC curve
- Accuracy: at a probability threshold (0.5 by default)
- Brier: Mean squared error of probability predictions
- Log loss: Cross-entropy of probability predictions
- ROC curve table: sensitivity / specificity per threshold
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    brier_score_loss,
    log_loss,
    roc_auc_score,
    roc_curve,
)

# Metrics where a larger value is better; used when ranking tuning candidates
MAXIMIZE = {"roc_auc": True, "accuracy": True, "brier": False, "log_loss": False}


def encode_binary(y: Sequence[Any], positive_class: Any) -> np.ndarray:
    """Map labels to 1 for ``positive_class`` and 0 otherwise."""
    return (np.asarray(y, dtype=object) == positive_class).astype(int)


def compute_auc(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Compute ROC AUC score.

    Returns NaN when ``y_true`` holds a single class, where AUC is
    undefined.
    """
    if len(np.unique(y_true)) < 2:
        return float("nan")
    return float(roc_auc_score(y_true, y_score))


def compute_accuracy(y_true: np.ndarray, y_score: np.ndarray, threshold: float = 0.5) -> float:
    return float(accuracy_score(y_true, (y_score >= threshold).astype(int)))


def compute_brier(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Compute Brier score (mean squared error of probabilities).

    Lower is better. Perfect calibration = 0.
    """
    return float(brier_score_loss(y_true, y_score))


def compute_log_loss(y_true: np.ndarray, y_score: np.ndarray) -> float:
    return float(log_loss(y_true, y_score, labels=[0, 1]))


def compute_metrics(
    y_true: np.ndarray,
    y_score: np.ndarray,
    metrics: List[str],
    threshold: float = 0.5,
) -> Dict[str, float]:
    """Compute multiple evaluation metrics.

    Args:
        y_true: True binary labels (0/1).
        y_score: Predicted probability of class 1.
        metrics: List of metric names to compute.
            Supported: "roc_auc", "accuracy", "brier", "log_loss".
        threshold: Probability cutoff for accuracy.

    Returns:
        Dictionary mapping metric name to value.
    """
    y_true = np.asarray(y_true)
    y_score = np.asarray(y_score, dtype=np.float64)
    results = {}

    metric_funcs = {
        "roc_auc": lambda: compute_auc(y_true, y_score),
        "accuracy": lambda: compute_accuracy(y_true, y_score, threshold),
        "brier": lambda: compute_brier(y_true, y_score),
        "log_loss": lambda: compute_log_loss(y_true, y_score),
    }

    for metric in metrics:
        metric_lower = metric.lower()
        if metric_lower in metric_funcs:
            results[metric_lower] = metric_funcs[metric_lower]()
        else:
            raise ValueError(f"Unknown metric: {metric}. Supported: {list(metric_funcs.keys())}")

    return results


def roc_curve_table(y_true: np.ndarray, y_score: np.ndarray) -> pd.DataFrame:
    """ROC curve as a table of threshold, sensitivity and specificity."""
    fpr, tpr, thresholds = roc_curve(y_true, y_score)
    return pd.DataFrame({
        "threshold": thresholds,
        "sensitivity": tpr,
        "specificity": 1.0 - fpr,
    })
