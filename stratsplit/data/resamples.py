"""
Resample sets for cross-validation, bootstrapping and validation splits.

A ResampleSet is an ordered list of (analysis, assessment) index pairs, the
unit the tuning layer iterates over. Builders:
- k_fold_resamples / repeated_k_fold: stratified folds, optionally repeated
- bootstrap: stratified bootstrap with out-of-bag assessment sets
- validation_split: a single stratified train/validation resample
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

import numpy as np

from stratsplit.data.splitters import (
    DatasetLike,
    class_groups,
    label_array,
    stratified_k_fold,
    stratified_split,
)
from stratsplit.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

# Redraws allowed before a bootstrap with an empty out-of-bag set is an error
MAX_BOOTSTRAP_REDRAWS = 100


@dataclass(frozen=True)
class Resample:
    """One analysis/assessment pair.

    Stores indices rather than data so the dataset is never copied.
    Bootstrap analysis sets may repeat indices.
    """

    resample_id: str
    analysis: np.ndarray
    assessment: np.ndarray


@dataclass
class ResampleSet:
    """Ordered resamples of one dataset produced by a single scheme."""

    kind: str
    resamples: List[Resample] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.resamples)

    def __iter__(self) -> Iterator[Resample]:
        return iter(self.resamples)

    def __getitem__(self, i: int) -> Resample:
        return self.resamples[i]

    @property
    def ids(self) -> List[str]:
        return [r.resample_id for r in self.resamples]

    def as_dict(self) -> Dict[str, Dict[str, List[int]]]:
        return {
            r.resample_id: {
                "analysis": r.analysis.tolist(),
                "assessment": r.assessment.tolist(),
            }
            for r in self.resamples
        }


def k_fold_resamples(
    dataset: DatasetLike,
    label_column: str,
    k: int = 10,
    seed: int = 42,
) -> ResampleSet:
    """Stratified k-fold cross-validation resamples."""
    return repeated_k_fold(dataset, label_column, k=k, repeats=1, seed=seed)


def repeated_k_fold(
    dataset: DatasetLike,
    label_column: str,
    k: int = 10,
    repeats: int = 1,
    seed: int = 42,
) -> ResampleSet:
    """Stratified k-fold repeated with seeds ``seed, seed+1, ...``.

    Resample ids are ``Fold01``.. for a single repeat and
    ``Repeat1/Fold01``.. otherwise.

    Raises:
        InvalidConfiguration: repeats < 1, or any k-fold error.
    """
    if repeats < 1:
        raise InvalidConfiguration(f"repeats must be >= 1, got {repeats}")

    resamples = []
    width = max(len(str(k)), 2)
    for repeat in range(repeats):
        folds = stratified_k_fold(dataset, label_column, k, seed + repeat)
        for fold_id, (analysis, assessment) in enumerate(folds.folds()):
            name = f"Fold{fold_id + 1:0{width}d}"
            if repeats > 1:
                name = f"Repeat{repeat + 1}/{name}"
            resamples.append(Resample(name, analysis, assessment))

    kind = "k_fold" if repeats == 1 else "repeated_k_fold"
    return ResampleSet(kind=kind, resamples=resamples)


def bootstrap(
    dataset: DatasetLike,
    label_column: str,
    times: int = 25,
    seed: int = 42,
) -> ResampleSet:
    """Stratified bootstrap resamples.

    Each class is sampled with replacement up to its own size, so the
    analysis set keeps the source class counts exactly. The assessment set
    is every record not drawn (out-of-bag).

    Args:
        dataset: Dataset, DataFrame, or sequence of record mappings.
        label_column: Column to stratify on.
        times: Number of bootstrap resamples.
        seed: Random seed for reproducibility.

    Raises:
        InvalidConfiguration: times < 1, or no out-of-bag records after
            MAX_BOOTSTRAP_REDRAWS attempts.
    """
    if times < 1:
        raise InvalidConfiguration(f"times must be >= 1, got {times}")

    labels = label_array(dataset, label_column)
    groups = class_groups(labels)
    n = len(labels)
    rng = np.random.default_rng(seed)

    resamples = []
    width = max(len(str(times)), 2)
    for b in range(times):
        for _ in range(MAX_BOOTSTRAP_REDRAWS):
            analysis = np.sort(np.concatenate(
                [rng.choice(idx, size=len(idx), replace=True) for _, idx in groups]
            ))
            in_bag = np.zeros(n, dtype=bool)
            in_bag[analysis] = True
            assessment = np.flatnonzero(~in_bag)
            if len(assessment) > 0:
                break
        else:
            raise InvalidConfiguration(
                f"Could not draw a bootstrap with out-of-bag records in "
                f"{MAX_BOOTSTRAP_REDRAWS} attempts (n={n})"
            )
        resamples.append(Resample(f"Bootstrap{b + 1:0{width}d}", analysis, assessment))

    logger.info("Built %d stratified bootstrap resamples (seed=%d)", times, seed)
    return ResampleSet(kind="bootstrap", resamples=resamples)


def validation_split(
    dataset: DatasetLike,
    label_column: str,
    validation_fraction: float = 0.25,
    seed: int = 42,
) -> ResampleSet:
    """A single stratified train/validation resample.

    Same cut as ``stratified_split`` but packaged so tuning can treat the
    validation set like one fold.
    """
    split = stratified_split(dataset, label_column, validation_fraction, seed)
    return ResampleSet(
        kind="validation",
        resamples=[Resample("validation", split.train, split.held_out)],
    )


def subset_resamples(resamples: ResampleSet, positions: np.ndarray) -> ResampleSet:
    """Map resamples built on a subset back onto original dataset indices.

    Args:
        resamples: Resamples whose indices are positions within ``positions``.
        positions: Original-dataset index for each subset row.
    """
    positions = np.asarray(positions, dtype=np.int64)
    return ResampleSet(
        kind=resamples.kind,
        resamples=[
            Resample(r.resample_id, positions[r.analysis], positions[r.assessment])
            for r in resamples
        ],
    )
