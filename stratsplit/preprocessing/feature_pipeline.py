"""
Schema-driven feature pipeline.

Numeric, integer and boolean columns are median-imputed and standardized;
categorical columns are mode-imputed and one-hot encoded; text columns are
dropped. The label column never becomes a feature.
"""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from stratsplit.data.schema import Schema

NUMERIC_KINDS = ("numeric", "integer", "boolean")


class FeaturePipeline:
    """Fixed-order transform from a schema-typed frame to a float matrix.

    Fit on analysis rows only; assessment rows are transformed with the
    fitted statistics. Categories unseen at fit time encode as all zeros.
    """

    def __init__(self, schema: Schema, label_column: str):
        """Initialize pipeline.

        Args:
            schema: Declared column types.
            label_column: Target column, excluded from features.
        """
        self.schema = schema
        self.label_column = label_column
        self.numeric_cols: List[str] = [
            c for c, k in schema.columns.items() if k in NUMERIC_KINDS and c != label_column
        ]
        self.categorical_cols: List[str] = [
            c for c in schema.names_of("categorical") if c != label_column
        ]
        self._transformer: ColumnTransformer | None = None

    def _prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        # Nullable pandas dtypes -> plain float / object with NaN for sklearn
        out = {}
        for c in self.numeric_cols:
            out[c] = df[c].to_numpy(dtype="float64", na_value=np.nan)
        for c in self.categorical_cols:
            col = df[c].astype(object)
            out[c] = col.where(col.notna(), np.nan).to_numpy()
        return pd.DataFrame(out, index=df.index)

    def fit(self, df: pd.DataFrame, y: pd.Series | None = None) -> "FeaturePipeline":
        """Fit imputation, scaling and encoding statistics.

        Returns:
            Self for chaining.
        """
        if not self.numeric_cols and not self.categorical_cols:
            raise ValueError("Schema declares no usable feature columns")

        transformers = []
        if self.numeric_cols:
            transformers.append(("numeric", Pipeline([
                ("impute", SimpleImputer(strategy="median")),
                ("scale", StandardScaler()),
            ]), self.numeric_cols))
        if self.categorical_cols:
            transformers.append(("categorical", Pipeline([
                ("impute", SimpleImputer(strategy="most_frequent")),
                ("encode", OneHotEncoder(handle_unknown="ignore", sparse_output=False)),
            ]), self.categorical_cols))

        self._transformer = ColumnTransformer(transformers, remainder="drop")
        self._transformer.fit(self._prepare(df))
        return self

    def transform(self, df: pd.DataFrame) -> np.ndarray:
        """Transform dataframe to numpy array.

        Args:
            df: Input dataframe.

        Returns:
            Numpy array of features.
        """
        if self._transformer is None:
            raise RuntimeError("Pipeline not fitted. Call fit() first.")

        return np.asarray(self._transformer.transform(self._prepare(df)), dtype=np.float64)

    def fit_transform(self, df: pd.DataFrame, y: pd.Series | None = None) -> np.ndarray:
        """Fit and transform in one step."""
        return self.fit(df, y).transform(df)

    @property
    def feature_names(self) -> List[str]:
        """Get output feature names (one per encoded column)."""
        if self._transformer is None:
            raise RuntimeError("Pipeline not fitted.")
        return [str(n) for n in self._transformer.get_feature_names_out()]
