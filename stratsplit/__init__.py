"""Stratified resampling and tuning workflow for binary classifiers."""

from stratsplit.data.splitters import (
    StratifiedSplitter,
    stratified_k_fold,
    stratified_split,
    train_validation_test,
)
from stratsplit.errors import InsufficientData, InvalidConfiguration, SchemaError, SplitError

__version__ = "0.1.0"

__all__ = [
    "StratifiedSplitter",
    "stratified_split",
    "stratified_k_fold",
    "train_validation_test",
    "SplitError",
    "InvalidConfiguration",
    "InsufficientData",
    "SchemaError",
]
