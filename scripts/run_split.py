#!/usr/bin/env python
"""
Split a CSV into stratified partitions and write the indices as JSON.

Modes:
- split: train / held_out
- kfold: fold number -> indices
- three-way: train / validation / test

Usage:
    python scripts/run_split.py data.csv --schema configs/schema_example.yaml
    python scripts/run_split.py data.csv --mode kfold --folds 5 --seed 7
    python scripts/run_split.py --synthetic --mode three-way

Results saved to splits/split_{timestamp}/ unless --output is given.
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

from stratsplit.config import SplitterConfig, SyntheticDataConfig
from stratsplit.data.dataset import Dataset
from stratsplit.data.schema import Schema
from stratsplit.data.splitters import StratifiedSplitter
from stratsplit.errors import SplitError
from stratsplit.io.synthetic_generator import SyntheticGenerator

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_dataset(args: argparse.Namespace, cfg: SplitterConfig) -> Dataset:
    """Load the CSV named on the command line, or generate synthetic data."""
    if args.synthetic:
        data_cfg = SyntheticDataConfig.from_yaml().with_seed(cfg.random_seed)
        generator = SyntheticGenerator(data_cfg)
        return generator.generate_dataset()

    schema = Schema.from_yaml(args.schema) if args.schema else None
    return Dataset.load_csv(args.csv, cfg.label_column, schema)


def class_count_report(dataset: Dataset, partitions: dict) -> dict:
    """Per-partition class counts, keyed like the partition dict."""
    return {
        str(name): {str(k): v for k, v in dataset.class_counts(idx).items()}
        for name, idx in partitions.items()
    }


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Stratified train/test, k-fold or train/validation/test split"
    )
    parser.add_argument("csv", nargs="?", help="Input CSV file")
    parser.add_argument("--schema", type=str, help="YAML schema for the CSV")
    parser.add_argument("--synthetic", action="store_true", help="Use synthetic data instead of a CSV")
    parser.add_argument("--config", type=str, help="Splitter YAML (default configs/splitter.yaml)")
    parser.add_argument(
        "--mode", choices=["split", "kfold", "three-way"], default="split",
        help="Partition scheme"
    )
    parser.add_argument("--label", type=str, help="Label column (overrides config)")
    parser.add_argument("--seed", type=int, help="Random seed (overrides config)")
    parser.add_argument("--fraction", type=float, help="Held-out fraction for --mode split")
    parser.add_argument("--folds", type=int, help="Number of folds for --mode kfold")
    parser.add_argument("--output", type=str, help="Output JSON path")
    args = parser.parse_args()

    if not args.csv and not args.synthetic:
        parser.error("provide a CSV path or --synthetic")

    cfg = SplitterConfig.from_yaml(args.config)
    overrides = {}
    if args.label:
        overrides["label_column"] = args.label
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    if args.fraction is not None:
        overrides["held_out_fraction"] = args.fraction
    if args.folds is not None:
        overrides["n_folds"] = args.folds
    if overrides:
        # Re-validate so CLI values get the same range checks as YAML
        cfg = SplitterConfig(**{**cfg.model_dump(), **overrides})

    try:
        dataset = load_dataset(args, cfg)
        splitter = StratifiedSplitter(cfg)
        if args.mode == "split":
            partitions = splitter.split(dataset).as_dict()
        elif args.mode == "kfold":
            partitions = splitter.k_fold(dataset).as_dict()
        else:
            partitions = splitter.train_validation_test(dataset).as_dict()
    except (SplitError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    counts = class_count_report(dataset, partitions)
    for name, per_class in counts.items():
        logger.info("  %-10s n=%-6d %s", name, len(partitions[name]), per_class)

    if args.output:
        out_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_path = PROJECT_ROOT / "splits" / f"split_{timestamp}" / "partitions.json"
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with open(out_path, "w") as f:
        json.dump({
            "mode": args.mode,
            "config": cfg.model_dump(),
            "n_records": len(dataset),
            "class_counts": counts,
            "partitions": {str(k): v for k, v in partitions.items()},
        }, f, indent=2)

    logger.info("Partitions saved to: %s", out_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
