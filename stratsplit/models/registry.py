"""Model lookup by name for configs and tuning grids."""

from __future__ import annotations

from typing import Any, Dict

from stratsplit.config import MODEL_CONFIGS
from stratsplit.models.logistic_regression import LogisticRegressionModel
from stratsplit.models.random_forest import RandomForestModel
from stratsplit.models.xgboost_model import XGBoostModel

MODELS = {
    "logistic_regression": LogisticRegressionModel,
    "random_forest": RandomForestModel,
    "xgboost": XGBoostModel,
}


def build_model(name: str, params: Dict[str, Any] | None = None, random_seed: int | None = None):
    """Instantiate model ``name`` with config overrides from ``params``.

    Raises:
        ValueError: Unknown model name or invalid parameter.
    """
    if name not in MODELS:
        raise ValueError(f"Unknown model: {name}. Supported: {list(MODELS)}")
    overrides = dict(params or {})
    if random_seed is not None:
        overrides.setdefault("random_seed", random_seed)
    cfg_cls = MODEL_CONFIGS[name]
    unknown = set(overrides) - set(cfg_cls.model_fields)
    if unknown:
        raise ValueError(f"Unknown parameters for {name}: {sorted(unknown)}")
    return MODELS[name](cfg_cls(**overrides))
