"""
Stratified splitting utilities.

Implements:
- Two-way stratified split (train / held-out)
- Stratified k-fold assignment
- Train / validation / test carving from two chained splits

Rounding rule: each class contributes round-half-up(fraction * class_size)
records to the held-out side, clamped to [0, class_size]. Classes are
visited in sorted label order and every call draws from its own
numpy Generator, so output depends only on (labels, configuration, seed).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from stratsplit.config import SplitterConfig
from stratsplit.data.dataset import Dataset, label_sort_key
from stratsplit.errors import InsufficientData, InvalidConfiguration

logger = logging.getLogger(__name__)

DatasetLike = Union[Dataset, pd.DataFrame, Sequence[Mapping[str, Any]]]

# Seed offset for the validation cut in train_validation_test
VALIDATION_SEED_OFFSET = 1


@dataclass(frozen=True)
class Split:
    """Two-way partition of record indices.

    Attributes:
        train: Sorted indices of the training partition.
        held_out: Sorted indices of the held-out partition.
    """

    train: np.ndarray
    held_out: np.ndarray

    def __iter__(self):
        """Allow ``train, held_out = split``."""
        yield self.train
        yield self.held_out

    def as_dict(self) -> Dict[str, List[int]]:
        return {"train": self.train.tolist(), "held_out": self.held_out.tolist()}

    def masks(self, n_records: int) -> Dict[str, np.ndarray]:
        """Boolean masks of length ``n_records`` per partition."""
        return {name: _mask(idx, n_records) for name, idx in
                (("train", self.train), ("held_out", self.held_out))}


@dataclass(frozen=True)
class FoldAssignment:
    """Fold number for every record.

    Attributes:
        assignment: Array of length n; ``assignment[i]`` is record i's fold.
        k: Number of folds.
    """

    assignment: np.ndarray
    k: int

    def indices_of(self, fold: int) -> np.ndarray:
        """Sorted indices assigned to ``fold``."""
        if not 0 <= fold < self.k:
            raise IndexError(f"Fold {fold} out of range [0, {self.k})")
        return np.flatnonzero(self.assignment == fold)

    def folds(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        """Yield (analysis, assessment) index pairs, one per fold."""
        for fold in range(self.k):
            assessment = self.assignment == fold
            yield np.flatnonzero(~assessment), np.flatnonzero(assessment)

    def as_dict(self) -> Dict[int, List[int]]:
        return {fold: self.indices_of(fold).tolist() for fold in range(self.k)}

    def fold_sizes(self) -> List[int]:
        return np.bincount(self.assignment, minlength=self.k).tolist()


@dataclass(frozen=True)
class ThreeWaySplit:
    """Train / validation / test partition of record indices."""

    train: np.ndarray
    validation: np.ndarray
    test: np.ndarray

    def __iter__(self):
        yield self.train
        yield self.validation
        yield self.test

    def as_dict(self) -> Dict[str, List[int]]:
        return {
            "train": self.train.tolist(),
            "validation": self.validation.tolist(),
            "test": self.test.tolist(),
        }

    def masks(self, n_records: int) -> Dict[str, np.ndarray]:
        return {name: _mask(idx, n_records) for name, idx in
                (("train", self.train), ("validation", self.validation), ("test", self.test))}


def label_array(dataset: DatasetLike, label_column: str) -> np.ndarray:
    """Extract the label column as an object array.

    Raises:
        InvalidConfiguration: If the column is missing, the dataset is
            empty, or any label is missing.
    """
    if isinstance(dataset, Dataset):
        frame = dataset.frame
    elif isinstance(dataset, pd.DataFrame):
        frame = dataset
    else:
        frame = pd.DataFrame.from_records(list(dataset))

    if len(frame) == 0:
        raise InvalidConfiguration("Dataset has no records")
    if label_column not in frame.columns:
        raise InvalidConfiguration(
            f"Label column {label_column!r} not in dataset columns {list(frame.columns)}"
        )
    labels = frame[label_column]
    n_missing = int(labels.isna().sum())
    if n_missing:
        raise InvalidConfiguration(
            f"Label column {label_column!r} has {n_missing} missing values"
        )
    return labels.to_numpy(dtype=object)


def class_groups(labels: np.ndarray, indices: Optional[np.ndarray] = None) -> List[Tuple[Any, np.ndarray]]:
    """Group positions by label, in sorted label order.

    Args:
        labels: Label per record of the full dataset.
        indices: Positions to group. All positions if None.

    Returns:
        List of (label, positions) with positions in ascending order.
    """
    if indices is None:
        indices = np.arange(len(labels), dtype=np.int64)
    groups: Dict[Any, List[int]] = defaultdict(list)
    for i in indices:
        groups[labels[i]].append(int(i))
    return [(label, np.asarray(groups[label], dtype=np.int64))
            for label in sorted(groups, key=label_sort_key)]


def held_out_count(fraction: float, group_size: int) -> int:
    """Round-half-up cut point for one class, clamped to [0, group_size]."""
    n = int(np.floor(fraction * group_size + 0.5))
    return min(max(n, 0), group_size)


def _check_fraction(fraction: float, name: str) -> None:
    if not 0.0 < fraction < 1.0:
        raise InvalidConfiguration(f"{name} must be in (0, 1), got {fraction}")


def _split_positions(
    labels: np.ndarray,
    positions: np.ndarray,
    fraction: float,
    seed: int,
) -> Split:
    """Stratified cut of ``positions`` (indices into ``labels``)."""
    groups = class_groups(labels, positions)
    too_small = {label: len(idx) for label, idx in groups if len(idx) < 2}
    if too_small:
        raise InsufficientData(
            f"Classes with fewer than 2 records cannot be split: {too_small}. "
            "Drop or merge them first."
        )

    rng = np.random.default_rng(seed)
    train_parts: List[np.ndarray] = []
    held_parts: List[np.ndarray] = []
    for label, idx in groups:
        shuffled = rng.permutation(idx)
        n_held = held_out_count(fraction, len(idx))
        held_parts.append(shuffled[:n_held])
        train_parts.append(shuffled[n_held:])
        logger.debug("class=%r size=%d held_out=%d", label, len(idx), n_held)

    train = np.sort(np.concatenate(train_parts))
    held_out = np.sort(np.concatenate(held_parts))
    if len(held_out) == 0 or len(train) == 0:
        raise InsufficientData(
            f"fraction={fraction} leaves an empty partition "
            f"(train={len(train)}, held_out={len(held_out)})"
        )
    return Split(train=train, held_out=held_out)


def stratified_split(
    dataset: DatasetLike,
    label_column: str,
    held_out_fraction: float,
    seed: int = 42,
) -> Split:
    """Split records into train / held-out, preserving class proportions.

    Each class is shuffled independently with a generator seeded by
    ``seed`` and its first round-half-up(held_out_fraction * size) records
    go to the held-out side.

    Args:
        dataset: Dataset, DataFrame, or sequence of record mappings.
        label_column: Column to stratify on.
        held_out_fraction: Fraction of each class to hold out, in (0, 1).
        seed: Random seed for reproducibility.

    Returns:
        Split with disjoint, sorted train and held-out indices whose union
        is every record.

    Raises:
        InvalidConfiguration: Fraction outside (0, 1) or bad label column.
        InsufficientData: A class has fewer than 2 records, or a side
            would be empty.
    """
    _check_fraction(held_out_fraction, "held_out_fraction")
    labels = label_array(dataset, label_column)
    split = _split_positions(labels, np.arange(len(labels), dtype=np.int64), held_out_fraction, seed)
    logger.info(
        "Stratified split: %d train / %d held out (fraction=%.3f, seed=%d)",
        len(split.train), len(split.held_out), held_out_fraction, seed,
    )
    return split


def stratified_k_fold(
    dataset: DatasetLike,
    label_column: str,
    k: int,
    seed: int = 42,
) -> FoldAssignment:
    """Assign every record to one of ``k`` folds, preserving class proportions.

    Each class is shuffled and dealt round-robin across folds. Dealing for a
    class resumes at the fold after the one where the previous class
    stopped, which keeps total fold sizes within one of each other.

    Args:
        dataset: Dataset, DataFrame, or sequence of record mappings.
        label_column: Column to stratify on.
        k: Number of folds, 2 <= k <= smallest class size.
        seed: Random seed for reproducibility.

    Raises:
        InvalidConfiguration: k not an integer, k < 2 or bad label column.
        InsufficientData: k exceeds the smallest class size.
    """
    if isinstance(k, (bool, np.bool_)) or not isinstance(k, (int, np.integer)):
        raise InvalidConfiguration(f"k must be an integer, got {k!r}")
    if k < 2:
        raise InvalidConfiguration(f"k must be >= 2, got {k}")
    k = int(k)
    labels = label_array(dataset, label_column)
    groups = class_groups(labels)
    smallest = min(len(idx) for _, idx in groups)
    if k > smallest:
        counts = {label: len(idx) for label, idx in groups}
        raise InsufficientData(
            f"k={k} exceeds the smallest class size ({smallest}); class counts: {counts}"
        )

    rng = np.random.default_rng(seed)
    assignment = np.full(len(labels), -1, dtype=np.int64)
    offset = 0
    for label, idx in groups:
        shuffled = rng.permutation(idx)
        assignment[shuffled] = (offset + np.arange(len(shuffled))) % k
        offset = (offset + len(shuffled)) % k

    folds = FoldAssignment(assignment=assignment, k=k)
    logger.info("Stratified %d-fold: fold sizes %s (seed=%d)", k, folds.fold_sizes(), seed)
    return folds


def train_validation_test(
    dataset: DatasetLike,
    label_column: str,
    test_fraction: float,
    validation_fraction: float,
    seed: int = 42,
) -> ThreeWaySplit:
    """Carve test, then validation from what remains.

    The first cut takes ``test_fraction`` of each class using ``seed``; the
    second takes ``validation_fraction`` of each class of the remaining pool
    using ``seed + 1``. All indices refer to the original dataset.

    Raises:
        InvalidConfiguration: Either fraction outside (0, 1).
        InsufficientData: A class is too small at either cut.
    """
    _check_fraction(test_fraction, "test_fraction")
    _check_fraction(validation_fraction, "validation_fraction")
    labels = label_array(dataset, label_column)

    outer = _split_positions(labels, np.arange(len(labels), dtype=np.int64), test_fraction, seed)
    inner = _split_positions(labels, outer.train, validation_fraction, seed + VALIDATION_SEED_OFFSET)

    result = ThreeWaySplit(train=inner.train, validation=inner.held_out, test=outer.held_out)
    logger.info(
        "Three-way split: %d train / %d validation / %d test (seed=%d)",
        len(result.train), len(result.validation), len(result.test), seed,
    )
    return result


class StratifiedSplitter:
    """Splitter bound to a fixed configuration and seed.

    Holds no mutable state; every method is a pure function of the
    dataset and the stored configuration.
    """

    def __init__(self, cfg: SplitterConfig | None = None) -> None:
        self.cfg = cfg or SplitterConfig()

    @property
    def seed(self) -> int:
        return self.cfg.random_seed

    def split(self, dataset: DatasetLike, held_out_fraction: float | None = None) -> Split:
        fraction = self.cfg.held_out_fraction if held_out_fraction is None else held_out_fraction
        return stratified_split(dataset, self.cfg.label_column, fraction, self.seed)

    def k_fold(self, dataset: DatasetLike, k: int | None = None) -> FoldAssignment:
        k = self.cfg.n_folds if k is None else k
        return stratified_k_fold(dataset, self.cfg.label_column, k, self.seed)

    def train_validation_test(self, dataset: DatasetLike) -> ThreeWaySplit:
        return train_validation_test(
            dataset,
            self.cfg.label_column,
            self.cfg.test_fraction,
            self.cfg.validation_fraction,
            self.seed,
        )


def _mask(indices: np.ndarray, n_records: int) -> np.ndarray:
    mask = np.zeros(n_records, dtype=bool)
    mask[indices] = True
    return mask
