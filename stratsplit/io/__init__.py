"""Synthetic data for examples and tests."""

from stratsplit.config import GaussianMixtureConfig, SyntheticDataConfig
from stratsplit.io.synthetic_generator import SyntheticGenerator

__all__ = [
    "GaussianMixtureConfig",
    "SyntheticDataConfig",
    "SyntheticGenerator",
]
