"""
Configuration management using pydantic.

All config classes use pydantic for validation and YAML loading.
Config files are stored in configs/ directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


# Base path for config files
CONFIGS_DIR = Path(__file__).parent.parent / "configs"


def load_yaml(path: Path | str) -> Dict[str, Any]:
    """Load a YAML file and return as dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _open_unit_interval(value: float, name: str) -> float:
    if not 0.0 < value < 1.0:
        raise ValueError(f"{name} must be in (0, 1), got {value}")
    return value


class _YAMLConfig(BaseModel):
    """Shared YAML loading and seed handling."""

    DEFAULT_FILE: ClassVar[str] = ""

    @classmethod
    def from_yaml(cls, path: Path | str | None = None):
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses the class default
                under configs/.
        """
        if path is None:
            path = CONFIGS_DIR / cls.DEFAULT_FILE
        return cls(**load_yaml(path))

    def with_seed(self, seed: int):
        """Return a copy with ``random_seed`` replaced."""
        return self.model_copy(update={"random_seed": seed})


class SplitterConfig(_YAMLConfig):
    """Configuration for stratified splitting and resampling."""

    DEFAULT_FILE: ClassVar[str] = "splitter.yaml"

    label_column: str = "y"
    random_seed: int = 42
    held_out_fraction: float = 0.25
    test_fraction: float = 0.25
    validation_fraction: float = 0.20
    n_folds: int = 10
    repeats: int = 1
    n_bootstraps: int = 25

    @field_validator("held_out_fraction", "test_fraction", "validation_fraction")
    @classmethod
    def _check_fraction(cls, v: float, info) -> float:
        return _open_unit_interval(v, info.field_name)

    @field_validator("n_folds")
    @classmethod
    def _check_folds(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"n_folds must be >= 2, got {v}")
        return v

    @field_validator("repeats", "n_bootstraps")
    @classmethod
    def _check_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1, got {v}")
        return v


class LogisticRegressionConfig(_YAMLConfig):
    """Configuration for penalized logistic regression.

    ``penalty`` and ``C`` stand in for the glmnet ``penalty`` /
    ``mixture`` pair: C is the inverse of the penalty amount.
    """

    DEFAULT_FILE: ClassVar[str] = "model_logistic.yaml"

    penalty: Optional[str] = "l2"
    C: float = 1.0  # Inverse regularization strength
    l1_ratio: Optional[float] = None  # Only used with elasticnet
    solver: str = "saga"  # Supports l1, l2 and elasticnet
    max_iter: int = 5000
    random_seed: int = 42

    @field_validator("penalty")
    @classmethod
    def _check_penalty(cls, v: Optional[str]) -> Optional[str]:
        if v not in (None, "l1", "l2", "elasticnet"):
            raise ValueError(f"penalty must be l1, l2, elasticnet or None, got {v!r}")
        return v

    @model_validator(mode="after")
    def _check_l1_ratio(self) -> LogisticRegressionConfig:
        if self.l1_ratio is None and self.penalty == "elasticnet":
            raise ValueError("elasticnet penalty needs an l1_ratio in [0, 1]")
        if self.l1_ratio is not None and not 0.0 <= self.l1_ratio <= 1.0:
            raise ValueError(f"l1_ratio must be in [0, 1], got {self.l1_ratio}")
        return self


class RandomForestConfig(_YAMLConfig):
    """Configuration for random forest (1000 trees by default)."""

    DEFAULT_FILE: ClassVar[str] = "model_random_forest.yaml"

    n_estimators: int = 1000
    max_features: Optional[Union[int, float, str]] = "sqrt"  # mtry
    min_samples_leaf: int = 1  # min_n
    n_jobs: Optional[int] = None
    random_seed: int = 42


class XGBoostConfig(_YAMLConfig):
    """Configuration for XGBoost boosted trees."""

    DEFAULT_FILE: ClassVar[str] = "model_xgboost.yaml"

    n_estimators: int = 100
    max_depth: int = 3
    learning_rate: float = 0.1
    subsample: float = 0.8
    colsample_bytree: float = 0.8
    random_seed: int = 42


class TuningConfig(_YAMLConfig):
    """Configuration for grid tuning over resamples."""

    DEFAULT_FILE: ClassVar[str] = "tuning.yaml"

    model: str = "logistic_regression"
    grid: Dict[str, List[Any]] = Field(default_factory=dict)
    metrics: List[str] = Field(default_factory=lambda: ["roc_auc", "accuracy"])
    select_metric: str = "roc_auc"
    resampling: str = "k_fold"  # k_fold | repeated_k_fold | validation | bootstrap
    random_seed: int = 42

    @field_validator("resampling")
    @classmethod
    def _check_resampling(cls, v: str) -> str:
        allowed = ("k_fold", "repeated_k_fold", "validation", "bootstrap")
        if v not in allowed:
            raise ValueError(f"resampling must be one of {allowed}, got {v!r}")
        return v


MODEL_CONFIGS = {
    "logistic_regression": LogisticRegressionConfig,
    "random_forest": RandomForestConfig,
    "xgboost": XGBoostConfig,
}


class GaussianMixtureConfig(BaseModel):
    """Configuration for Gaussian mixture components."""

    mu_negative_base: List[float] = Field(default=[0.0, 0.0])
    mu_positive_base: List[float] = Field(default=[2.0, 1.0])
    component_offset: float = 1.0
    sigma_max: float = 1.0


class SyntheticDataConfig(_YAMLConfig):
    """Configuration for synthetic labeled data.

    Class counts are exact: round(n_records * positive_rate) positives.
    """

    DEFAULT_FILE: ClassVar[str] = "synthetic_data.yaml"

    random_seed: int = 42
    n_records: int = 1000
    n_features: int = 2
    n_components: int = 2
    positive_rate: float = 0.30
    n_categories: int = 3  # Levels of the "segment" factor column; 0 disables it
    gaussian_mixture: GaussianMixtureConfig = Field(
        default_factory=GaussianMixtureConfig
    )

    @field_validator("positive_rate")
    @classmethod
    def _check_rate(cls, v: float) -> float:
        return _open_unit_interval(v, "positive_rate")
