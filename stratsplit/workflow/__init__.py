"""
Model workflows and tuning over resamples.

This module provides:
- Workflow: FeaturePipeline -> Estimator, fit on index subsets
- fit_resamples / tune_grid: resampled evaluation of one or many candidates
- last_fit: final fit on training rows, scored once on the test rows
"""

from stratsplit.workflow.tuning import (
    TuneResult,
    finalize,
    fit_resamples,
    last_fit,
    tune_grid,
)
from stratsplit.workflow.workflow import Workflow

__all__ = [
    "Workflow",
    "TuneResult",
    "fit_resamples",
    "tune_grid",
    "last_fit",
    "finalize",
]
