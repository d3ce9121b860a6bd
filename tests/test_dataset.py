"""Tests for Schema validation and Dataset loading."""

from __future__ import annotations

import pandas as pd
import pytest

from stratsplit.data.dataset import Dataset
from stratsplit.data.schema import Schema
from stratsplit.errors import InvalidConfiguration, SchemaError


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "cells.csv"
    path.write_text(
        "area,count,grade,flag,note,class\n"
        "1.5,3,a,yes,first,PS\n"
        "2.0,4,b,no,,WS\n"
        "0.7,1,a,true,x,PS\n"
        "3.1,,c,False,y,WS\n"
    )
    return path


@pytest.fixture
def schema():
    return Schema(columns={
        "area": "numeric",
        "count": "integer",
        "grade": "categorical",
        "flag": "boolean",
        "note": "text",
        "class": "categorical",
    })


def test_load_csv_coerces_declared_types(csv_path, schema):
    ds = Dataset.load_csv(csv_path, "class", schema)

    assert len(ds) == 4
    assert ds.frame["area"].dtype == "float64"
    assert str(ds.frame["count"].dtype) == "Int64"
    assert ds.frame["count"].isna().sum() == 1
    assert str(ds.frame["grade"].dtype) == "category"
    assert ds.frame["flag"].tolist() == [True, False, True, False]
    assert ds.classes == ["PS", "WS"]
    assert ds.class_counts() == {"PS": 2, "WS": 2}
    assert ds.feature_names == ["area", "count", "grade", "flag", "note"]


def test_missing_file(tmp_path, schema):
    with pytest.raises(FileNotFoundError):
        Dataset.load_csv(tmp_path / "missing.csv", "class", schema)


def test_missing_declared_column(csv_path):
    schema = Schema(columns={"area": "numeric", "class": "categorical", "weight": "numeric"})
    with pytest.raises(SchemaError, match="Missing declared columns"):
        Dataset.load_csv(csv_path, "class", schema)


def test_undeclared_column_rejected_unless_allowed(csv_path):
    schema = Schema(columns={"area": "numeric", "class": "categorical"})
    with pytest.raises(SchemaError, match="Undeclared"):
        Dataset.load_csv(csv_path, "class", schema)

    relaxed = Schema(columns={"area": "numeric", "class": "categorical"}, allow_extra=True)
    ds = Dataset.load_csv(csv_path, "class", relaxed)
    assert "grade" in ds.frame.columns


def test_non_numeric_value_rejected():
    df = pd.DataFrame({"v": ["1.0", "abc"], "y": ["a", "b"]})
    schema = Schema(columns={"v": "numeric", "y": "categorical"})
    with pytest.raises(SchemaError, match="do not coerce"):
        Dataset.from_frame(df, "y", schema)


def test_fractional_integer_rejected():
    df = pd.DataFrame({"v": [1.0, 2.5], "y": ["a", "b"]})
    schema = Schema(columns={"v": "integer", "y": "categorical"})
    with pytest.raises(SchemaError, match="fractional"):
        Dataset.from_frame(df, "y", schema)


def test_unknown_column_type():
    with pytest.raises(ValueError, match="unknown type"):
        Schema(columns={"v": "float32"})


def test_numeric_label_rejected():
    df = pd.DataFrame({"v": [1, 2], "y": [0.1, 0.2]})
    schema = Schema(columns={"v": "integer", "y": "numeric"})
    with pytest.raises(SchemaError, match="Label column"):
        Dataset.from_frame(df, "y", schema)


def test_missing_label_values_rejected():
    df = pd.DataFrame({"v": [1, 2, 3], "y": ["a", None, "b"]})
    with pytest.raises(InvalidConfiguration, match="missing values"):
        Dataset.from_frame(df, "y")


def test_label_column_must_exist():
    df = pd.DataFrame({"v": [1, 2]})
    with pytest.raises(InvalidConfiguration, match="not in dataset"):
        Dataset.from_frame(df, "y")


def test_from_records_infers_schema():
    records = [{"x": 1.5, "n": 2, "y": 1}, {"x": 0.5, "n": 3, "y": 0}]
    ds = Dataset.from_records(records, "y")

    assert ds.schema.columns == {"x": "numeric", "n": "integer", "y": "categorical"}
    assert ds.classes == [0, 1]


def test_schema_from_yaml_accepts_bare_mapping(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text("x: numeric\ny: categorical\n")

    schema = Schema.from_yaml(path)

    assert schema.columns == {"x": "numeric", "y": "categorical"}
    assert schema.allow_extra is False


def test_subset_and_summary(csv_path, schema):
    ds = Dataset.load_csv(csv_path, "class", schema)

    assert ds.subset([1, 3])["area"].tolist() == [2.0, 3.1]
    assert ds.class_counts([0, 2]) == {"PS": 2, "WS": 0}
    summary = ds.get_summary()
    assert summary["n_records"] == 4
    assert summary["class_counts"] == {"PS": 2, "WS": 2}
