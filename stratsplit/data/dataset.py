"""
Schema-validated dataset with a designated label column.

Loads a CSV (or wraps in-memory records / frames), validates it against an
explicit Schema and exposes labels and row subsets by positional index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from stratsplit.data.schema import Schema
from stratsplit.errors import InvalidConfiguration, SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    """Ordered, read-only table plus its schema and label column.

    Records are addressed by position ``0..n-1``; splitters return these
    positions and never touch the frame itself.

    Attributes:
        frame: Validated data. Treat as read-only.
        schema: Declared column types.
        label_column: Column used for stratification and as model target.
    """

    frame: pd.DataFrame
    schema: Schema
    label_column: str

    def __post_init__(self) -> None:
        """Validate label column integrity."""
        if self.label_column not in self.frame.columns:
            raise InvalidConfiguration(
                f"Label column {self.label_column!r} not in dataset columns "
                f"{list(self.frame.columns)}"
            )
        kind = self.schema.columns.get(self.label_column)
        if kind not in ("categorical", "integer", "boolean", "text"):
            raise SchemaError(
                f"Label column {self.label_column!r} must be categorical, "
                f"integer, boolean or text, got {kind!r}"
            )
        if len(self.frame) == 0:
            raise InvalidConfiguration("Dataset has no records")
        n_missing = int(self.frame[self.label_column].isna().sum())
        if n_missing:
            raise InvalidConfiguration(
                f"Label column {self.label_column!r} has {n_missing} missing values"
            )

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        label_column: str,
        schema: Optional[Schema] = None,
    ) -> Dataset:
        """Validate a frame against ``schema`` (inferred if None)."""
        if schema is None:
            schema = Schema.infer(df)
            # Labels are classes, not quantities
            if label_column in schema.columns:
                schema.columns[label_column] = "categorical"
        frame = schema.validate_frame(df).reset_index(drop=True)
        return cls(frame=frame, schema=schema, label_column=label_column)

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        label_column: str,
        schema: Optional[Schema] = None,
    ) -> Dataset:
        """Build from an ordered sequence of column -> value mappings."""
        return cls.from_frame(pd.DataFrame.from_records(list(records)), label_column, schema)

    @classmethod
    def load_csv(
        cls,
        path: Path | str,
        label_column: str,
        schema: Optional[Schema] = None,
    ) -> Dataset:
        """Load a CSV and validate it.

        Args:
            path: CSV file.
            label_column: Stratification / target column.
            schema: Declared schema. Inferred from pandas dtypes if None.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            SchemaError: If the file does not match the schema.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Required file not found: {path}")

        # Read everything as text when a schema is given so coercion is ours
        df = pd.read_csv(path, dtype=str if schema is not None else None, keep_default_na=True)
        dataset = cls.from_frame(df, label_column, schema)
        logger.info(
            "Loaded %d records, %d columns from %s", len(dataset), dataset.frame.shape[1], path
        )
        return dataset

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def labels(self) -> np.ndarray:
        """Label values as an object array."""
        return self.frame[self.label_column].to_numpy(dtype=object)

    @property
    def classes(self) -> List[Any]:
        """Distinct label values, sorted."""
        return sorted(pd.unique(self.frame[self.label_column]).tolist(), key=label_sort_key)

    @property
    def feature_names(self) -> List[str]:
        """All schema columns except the label."""
        return [c for c in self.schema.columns if c != self.label_column]

    def class_counts(self, indices: Optional[Sequence[int]] = None) -> Dict[Any, int]:
        """Per-class record counts, optionally restricted to ``indices``."""
        labels = self.frame[self.label_column]
        if indices is not None:
            labels = labels.iloc[np.asarray(indices, dtype=np.int64)]
        counts = labels.value_counts(sort=False)
        return {k: int(counts.get(k, 0)) for k in self.classes}

    def subset(self, indices: Sequence[int]) -> pd.DataFrame:
        """Rows at ``indices`` as a new frame (original index kept)."""
        return self.frame.iloc[np.asarray(indices, dtype=np.int64)]

    def get_summary(self) -> dict:
        """Return summary statistics about the loaded data."""
        return {
            "n_records": len(self),
            "n_features": len(self.feature_names),
            "label_column": self.label_column,
            "class_counts": {str(k): v for k, v in self.class_counts().items()},
            "feature_names": self.feature_names,
        }


def label_sort_key(value: Any):
    # Mixed label types (e.g. 1 and "1") still need a total order
    return (type(value).__name__, value)
