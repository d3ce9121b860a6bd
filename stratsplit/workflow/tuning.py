"""
Resampled evaluation and grid tuning.

For each candidate parameter set and each resample:
- fit the workflow on the analysis rows
- score it on the assessment rows
- write one row per metric (never aggregated in place)

Aggregation into mean / std per candidate happens in TuneResult.summary.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import ParameterGrid
from tqdm import tqdm

from stratsplit.data.dataset import Dataset
from stratsplit.data.resamples import ResampleSet
from stratsplit.data.splitters import Split, ThreeWaySplit
from stratsplit.evaluation.metrics import MAXIMIZE
from stratsplit.workflow.workflow import Workflow

logger = logging.getLogger(__name__)


@dataclass
class ResampleRow:
    """Single row of resampled evaluation output."""

    candidate: str
    params: str
    resample_id: str
    metric: str
    estimate: float
    n_analysis: int
    n_assessment: int


def fit_resamples(
    workflow: Workflow,
    dataset: Dataset,
    resamples: ResampleSet,
    metrics: List[str],
    candidate: str = "Preprocessor1_Model1",
) -> pd.DataFrame:
    """Fit ``workflow`` on every analysis set and score every assessment set.

    Args:
        workflow: Unfitted workflow; a fresh copy is fit per resample.
        dataset: Full dataset the resample indices point into.
        resamples: Resamples to evaluate over.
        metrics: Metric names, see stratsplit.evaluation.compute_metrics.
        candidate: Label for this parameter set in the output.

    Returns:
        DataFrame with one row per (resample, metric).
    """
    rows: List[ResampleRow] = []
    params = json.dumps(workflow.params, sort_keys=True, default=str)
    for resample in resamples:
        fitted = workflow.with_params({}).fit(dataset, resample.analysis)
        scores = fitted.evaluate(dataset, resample.assessment, metrics)
        for metric, value in scores.items():
            rows.append(ResampleRow(
                candidate=candidate,
                params=params,
                resample_id=resample.resample_id,
                metric=metric,
                estimate=value,
                n_analysis=len(resample.analysis),
                n_assessment=len(resample.assessment),
            ))
    return pd.DataFrame([asdict(r) for r in rows])


@dataclass
class TuneResult:
    """Per-resample metrics for every grid candidate."""

    rows: pd.DataFrame
    candidates: Dict[str, Dict[str, Any]]

    def summary(self) -> pd.DataFrame:
        """Mean, std error and resample count per (candidate, metric)."""
        grouped = self.rows.groupby(["candidate", "metric"])["estimate"]
        out = grouped.agg(mean="mean", std="std", n="count").reset_index()
        out["std_err"] = out["std"] / np.sqrt(out["n"])
        return out.drop(columns="std")

    def show_best(self, metric: str, n: int = 5) -> pd.DataFrame:
        """Top ``n`` candidates for ``metric`` with their parameters."""
        if metric not in MAXIMIZE:
            raise ValueError(f"Unknown metric: {metric}. Supported: {list(MAXIMIZE)}")
        table = self.summary()
        table = table[table["metric"] == metric]
        if table.empty:
            raise ValueError(f"Metric {metric!r} was not computed during tuning")
        table = table.sort_values(
            ["mean", "candidate"], ascending=[not MAXIMIZE[metric], True], na_position="last"
        )
        table = table.head(n).copy()
        table["params"] = [self.candidates[c] for c in table["candidate"]]
        return table.reset_index(drop=True)

    def select_best(self, metric: str) -> Dict[str, Any]:
        """Parameters of the best candidate for ``metric``."""
        best = self.show_best(metric, n=1).iloc[0]
        return dict(self.candidates[best["candidate"]])


def tune_grid(
    workflow: Workflow,
    dataset: Dataset,
    resamples: ResampleSet,
    grid: Dict[str, List[Any]],
    metrics: List[str],
    show_progress: bool = False,
) -> TuneResult:
    """Evaluate every combination in ``grid`` over ``resamples``.

    Args:
        workflow: Base workflow; grid values override its params.
        dataset: Full dataset the resample indices point into.
        resamples: Resamples shared by every candidate.
        grid: Parameter name -> list of values (expanded as a full grid).
        metrics: Metric names to compute.
        show_progress: Show a tqdm bar over candidates.

    Returns:
        TuneResult with per-resample rows and candidate parameters.
    """
    expanded = list(ParameterGrid(grid)) if grid else [{}]
    width = len(str(len(expanded)))
    candidates = {f"Model{i + 1:0{width}d}": params for i, params in enumerate(expanded)}
    logger.info(
        "Tuning %s: %d candidates x %d resamples (%s)",
        workflow.model_name, len(candidates), len(resamples), resamples.kind,
    )

    tables = []
    for name, params in tqdm(candidates.items(), desc="Tuning", disable=not show_progress):
        tables.append(fit_resamples(workflow.with_params(params), dataset, resamples, metrics, name))

    return TuneResult(rows=pd.concat(tables, ignore_index=True), candidates=candidates)


def last_fit(
    workflow: Workflow,
    dataset: Dataset,
    split: Split | ThreeWaySplit,
    metrics: List[str],
) -> Tuple[Workflow, Dict[str, float]]:
    """Fit once on the training side and score the held-out test set.

    For a ThreeWaySplit the model is fit on train and validation together,
    since validation has already served its purpose during tuning.

    Returns:
        (fitted workflow, test metrics).
    """
    if isinstance(split, ThreeWaySplit):
        train = np.sort(np.concatenate([split.train, split.validation]))
        test = split.test
    else:
        train, test = split.train, split.held_out

    fitted = workflow.with_params({}).fit(dataset, train)
    results = fitted.evaluate(dataset, test, metrics)
    logger.info("Last fit %s on %d rows: %s", workflow.model_name, len(train), results)
    return fitted, results


def finalize(workflow: Workflow, params: Optional[Dict[str, Any]]) -> Workflow:
    """Workflow with the selected tuning parameters fixed in."""
    return workflow.with_params(params or {})
