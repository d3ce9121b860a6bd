"""Evaluation module for classification metrics."""

from stratsplit.evaluation.metrics import (
    MAXIMIZE,
    compute_metrics,
    encode_binary,
    roc_curve_table,
)

__all__ = [
    "MAXIMIZE",
    "compute_metrics",
    "encode_binary",
    "roc_curve_table",
]
