"""
Explicit column schema for tabular datasets.

Columns are declared up front (name -> type) and checked when the data is
loaded, instead of trusting whatever types pandas infers from a CSV.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd
from pydantic import BaseModel, Field, field_validator

from stratsplit.config import load_yaml
from stratsplit.errors import SchemaError

logger = logging.getLogger(__name__)

COLUMN_TYPES = ("numeric", "integer", "categorical", "text", "boolean")

_BOOL_VALUES = {
    "true": True, "false": False,
    "yes": True, "no": False,
    "1": True, "0": False,
    "t": True, "f": False,
}


class Schema(BaseModel):
    """Declared column types for a dataset.

    Attributes:
        columns: Column name -> one of COLUMN_TYPES. Order is preserved.
        allow_extra: If False, undeclared columns are a schema violation.
    """

    columns: Dict[str, str] = Field(default_factory=dict)
    allow_extra: bool = False

    @field_validator("columns")
    @classmethod
    def _check_types(cls, v: Dict[str, str]) -> Dict[str, str]:
        for name, kind in v.items():
            if kind not in COLUMN_TYPES:
                raise ValueError(
                    f"Column {name!r} has unknown type {kind!r}. "
                    f"Supported: {list(COLUMN_TYPES)}"
                )
        return v

    @classmethod
    def from_yaml(cls, path: Path | str) -> Schema:
        """Load a schema from YAML.

        Accepts either ``{columns: {...}, allow_extra: bool}`` or a bare
        ``{name: type}`` mapping.
        """
        raw = load_yaml(path)
        if "columns" not in raw:
            raw = {"columns": raw}
        return cls(**raw)

    @classmethod
    def infer(cls, df: pd.DataFrame) -> Schema:
        """Build a schema from a frame's dtypes.

        Convenience for in-memory frames; loaded files should declare theirs.
        """
        columns = {}
        for name, dtype in df.dtypes.items():
            if pd.api.types.is_bool_dtype(dtype):
                columns[str(name)] = "boolean"
            elif pd.api.types.is_integer_dtype(dtype):
                columns[str(name)] = "integer"
            elif pd.api.types.is_numeric_dtype(dtype):
                columns[str(name)] = "numeric"
            else:
                columns[str(name)] = "categorical"
        return cls(columns=columns)

    def names_of(self, kind: str) -> List[str]:
        """Column names declared with the given type."""
        return [name for name, k in self.columns.items() if k == kind]

    def validate_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """Check ``df`` against the schema and return a coerced copy.

        Raises:
            SchemaError: On missing or undeclared columns, or values that
                do not coerce to the declared type.
        """
        missing = [c for c in self.columns if c not in df.columns]
        if missing:
            raise SchemaError(f"Missing declared columns: {missing}")

        extra = [c for c in df.columns if c not in self.columns]
        if extra and not self.allow_extra:
            raise SchemaError(f"Undeclared columns: {extra}")

        out = df.copy()
        for name, kind in self.columns.items():
            out[name] = _coerce(out[name], kind, name)

        if extra:
            logger.debug("Keeping undeclared columns as-is: %s", extra)
        return out


def _coerce(series: pd.Series, kind: str, name: str) -> pd.Series:
    if kind == "numeric":
        coerced = pd.to_numeric(series, errors="coerce")
        _check_no_new_nans(series, coerced, name, kind)
        return coerced.astype("float64")

    if kind == "integer":
        coerced = pd.to_numeric(series, errors="coerce")
        _check_no_new_nans(series, coerced, name, kind)
        non_null = coerced.dropna()
        if not (non_null == non_null.round()).all():
            raise SchemaError(f"Column {name!r} declared integer has fractional values")
        return coerced.astype("Int64")

    if kind == "boolean":
        if pd.api.types.is_bool_dtype(series):
            return series.astype("boolean")
        lowered = series.map(lambda v: v if pd.isna(v) else str(v).strip().lower())
        coerced = lowered.map(_BOOL_VALUES)
        _check_no_new_nans(series, coerced, name, kind)
        return coerced.astype("boolean")

    if kind == "categorical":
        return series.astype("category")

    # text
    return series.astype("string")


def _check_no_new_nans(before: pd.Series, after: pd.Series, name: str, kind: str) -> None:
    bad = after.isna() & before.notna()
    if bad.any():
        examples = before[bad].unique()[:3].tolist()
        raise SchemaError(
            f"Column {name!r} declared {kind} has {int(bad.sum())} values that "
            f"do not coerce, e.g. {examples}"
        )
