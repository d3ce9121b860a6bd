"""
Dataset loading and stratified resampling.

This module provides:
- Schema / Dataset: explicit column types validated at load time
- Stratified splits: train/held-out, k-fold, train/validation/test
- Resample sets: (repeated) k-fold, bootstrap and validation resamples
"""

from stratsplit.data.dataset import Dataset
from stratsplit.data.resamples import (
    Resample,
    ResampleSet,
    bootstrap,
    k_fold_resamples,
    repeated_k_fold,
    subset_resamples,
    validation_split,
)
from stratsplit.data.schema import Schema
from stratsplit.data.splitters import (
    FoldAssignment,
    Split,
    StratifiedSplitter,
    ThreeWaySplit,
    stratified_k_fold,
    stratified_split,
    train_validation_test,
)

__all__ = [
    "Dataset",
    "Schema",
    "Split",
    "FoldAssignment",
    "ThreeWaySplit",
    "StratifiedSplitter",
    "stratified_split",
    "stratified_k_fold",
    "train_validation_test",
    "Resample",
    "ResampleSet",
    "k_fold_resamples",
    "repeated_k_fold",
    "bootstrap",
    "validation_split",
    "subset_resamples",
]
