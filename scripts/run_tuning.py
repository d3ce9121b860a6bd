#!/usr/bin/env python
"""
Tune a model over stratified resamples and score the winner on a test set.

Steps:
1. Carve a stratified test set (test_fraction from splitter config)
2. Build resamples of the remaining training rows (k-fold, repeated k-fold,
   validation split or bootstrap)
3. Evaluate every grid candidate over the resamples
4. Refit the best candidate on all training rows and score the test set

Usage:
    python scripts/run_tuning.py --synthetic
    python scripts/run_tuning.py data.csv --schema schema.yaml --tuning configs/tuning.yaml
    python scripts/run_tuning.py --synthetic --model random_forest --resampling validation

Results saved to experiments/tuning_{timestamp}/.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from stratsplit.config import SplitterConfig, SyntheticDataConfig, TuningConfig
from stratsplit.data.dataset import Dataset
from stratsplit.data.resamples import (
    ResampleSet,
    bootstrap,
    repeated_k_fold,
    subset_resamples,
    validation_split,
)
from stratsplit.data.schema import Schema
from stratsplit.data.splitters import stratified_split
from stratsplit.errors import SplitError
from stratsplit.io.synthetic_generator import SyntheticGenerator
from stratsplit.workflow import Workflow, finalize, last_fit, tune_grid

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_resamples(
    dataset: Dataset,
    train_idx,
    split_cfg: SplitterConfig,
    tuning_cfg: TuningConfig,
) -> ResampleSet:
    """Resamples of the training rows, indexed into the full dataset."""
    train_frame = dataset.subset(train_idx)
    label = split_cfg.label_column
    seed = tuning_cfg.random_seed
    if tuning_cfg.resampling == "validation":
        local = validation_split(train_frame, label, split_cfg.validation_fraction, seed)
    elif tuning_cfg.resampling == "bootstrap":
        local = bootstrap(train_frame, label, split_cfg.n_bootstraps, seed)
    else:
        repeats = split_cfg.repeats if tuning_cfg.resampling == "repeated_k_fold" else 1
        local = repeated_k_fold(train_frame, label, split_cfg.n_folds, repeats, seed)
    return subset_resamples(local, train_idx)


def main() -> int:
    parser = argparse.ArgumentParser(description="Grid tuning over stratified resamples")
    parser.add_argument("csv", nargs="?", help="Input CSV file")
    parser.add_argument("--schema", type=str, help="YAML schema for the CSV")
    parser.add_argument("--synthetic", action="store_true", help="Use synthetic data instead of a CSV")
    parser.add_argument("--splitter", type=str, help="Splitter YAML (default configs/splitter.yaml)")
    parser.add_argument("--tuning", type=str, help="Tuning YAML (default configs/tuning.yaml)")
    parser.add_argument("--model", type=str, help="Model name (overrides tuning config)")
    parser.add_argument(
        "--resampling",
        choices=["k_fold", "repeated_k_fold", "validation", "bootstrap"],
        help="Resampling scheme (overrides tuning config)",
    )
    parser.add_argument("--seed", type=int, help="Random seed for splits and models")
    parser.add_argument("--name", type=str, default="", help="Optional run name suffix")
    args = parser.parse_args()

    if not args.csv and not args.synthetic:
        parser.error("provide a CSV path or --synthetic")

    split_cfg = SplitterConfig.from_yaml(args.splitter)
    tuning_cfg = TuningConfig.from_yaml(args.tuning)
    if args.model:
        # A grid written for another model would not apply
        tuning_cfg = tuning_cfg.model_copy(update={"model": args.model, "grid": {}})
    if args.resampling:
        tuning_cfg = TuningConfig(**{**tuning_cfg.model_dump(), "resampling": args.resampling})
    if args.seed is not None:
        split_cfg = split_cfg.with_seed(args.seed)
        tuning_cfg = tuning_cfg.with_seed(args.seed)

    try:
        if args.synthetic:
            data_cfg = SyntheticDataConfig.from_yaml().with_seed(split_cfg.random_seed)
            dataset = SyntheticGenerator(data_cfg).generate_dataset()
        else:
            schema = Schema.from_yaml(args.schema) if args.schema else None
            dataset = Dataset.load_csv(args.csv, split_cfg.label_column, schema)

        initial = stratified_split(
            dataset, split_cfg.label_column, split_cfg.test_fraction, split_cfg.random_seed
        )
        resamples = build_resamples(dataset, initial.train, split_cfg, tuning_cfg)
    except (SplitError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    logger.info("=" * 70)
    logger.info("Tuning %s", tuning_cfg.model)
    logger.info("  Records: %d (train %d / test %d)", len(dataset), len(initial.train), len(initial.held_out))
    logger.info("  Resamples: %d (%s)", len(resamples), resamples.kind)
    logger.info("  Grid: %s", tuning_cfg.grid)
    logger.info("=" * 70)

    workflow = Workflow(tuning_cfg.model, random_seed=tuning_cfg.random_seed)
    result = tune_grid(
        workflow, dataset, resamples, tuning_cfg.grid, tuning_cfg.metrics, show_progress=True
    )
    top = result.show_best(tuning_cfg.select_metric)
    logger.info("Top candidates by %s:\n%s", tuning_cfg.select_metric, top.to_string(index=False))

    best_params = result.select_best(tuning_cfg.select_metric)
    final = finalize(workflow, best_params)
    fitted, test_metrics = last_fit(final, dataset, initial, tuning_cfg.metrics)
    logger.info("Test metrics for %s: %s", best_params, test_metrics)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_name = f"tuning_{timestamp}"
    if args.name:
        run_name += f"_{args.name}"
    out_dir = PROJECT_ROOT / "experiments" / run_name
    out_dir.mkdir(parents=True, exist_ok=True)

    result.rows.to_csv(out_dir / "resample_metrics.csv", index=False)
    result.summary().to_csv(out_dir / "summary.csv", index=False)
    with open(out_dir / "results.json", "w") as f:
        json.dump({
            "model": tuning_cfg.model,
            "best_params": best_params,
            "test_metrics": test_metrics,
            "feature_importances": fitted.feature_importances(),
            "splitter_cfg": split_cfg.model_dump(),
            "tuning_cfg": tuning_cfg.model_dump(),
        }, f, indent=2, default=str)

    logger.info("Results saved to: %s", out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
