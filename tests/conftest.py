"""Shared fixtures for stratsplit tests."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from stratsplit.config import SyntheticDataConfig
from stratsplit.io.synthetic_generator import SyntheticGenerator


def make_frame(class_sizes: dict, seed: int = 0) -> pd.DataFrame:
    """Frame with one numeric feature and a label with exact class sizes."""
    rng = np.random.default_rng(seed)
    labels = np.concatenate([[label] * n for label, n in class_sizes.items()])
    rng.shuffle(labels)
    return pd.DataFrame({"x": rng.normal(size=len(labels)), "label": labels})


@pytest.fixture
def imbalanced() -> pd.DataFrame:
    """Classes A (100) and B (20)."""
    return make_frame({"A": 100, "B": 20})


@pytest.fixture
def balanced() -> pd.DataFrame:
    """Classes A (50) and B (50)."""
    return make_frame({"A": 50, "B": 50})


@pytest.fixture
def thousand() -> pd.DataFrame:
    """1000 records: A (700), B (300)."""
    return make_frame({"A": 700, "B": 300})


@pytest.fixture
def synthetic_dataset():
    """Small synthetic Dataset with numeric and categorical features."""
    cfg = SyntheticDataConfig(n_records=300, positive_rate=0.4, random_seed=3)
    return SyntheticGenerator(cfg).generate_dataset()
