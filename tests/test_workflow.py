"""Tests for workflows, resampled evaluation and grid tuning."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from stratsplit.data.resamples import k_fold_resamples, validation_split
from stratsplit.data.splitters import stratified_split, train_validation_test
from stratsplit.models.registry import build_model
from stratsplit.preprocessing.feature_pipeline import FeaturePipeline
from stratsplit.workflow import Workflow, finalize, fit_resamples, last_fit, tune_grid


def test_feature_pipeline_encodes_schema(synthetic_dataset):
    pipeline = FeaturePipeline(synthetic_dataset.schema, "y")
    X = pipeline.fit_transform(synthetic_dataset.frame)

    # x0, x1 scaled + three one-hot segment levels; label excluded
    assert X.shape == (300, 5)
    assert np.allclose(X[:, :2].mean(axis=0), 0.0)
    assert "numeric__x0" in pipeline.feature_names
    assert not any("y" == name.split("__")[-1] for name in pipeline.feature_names)


def test_feature_pipeline_unseen_category(synthetic_dataset):
    pipeline = FeaturePipeline(synthetic_dataset.schema, "y")
    pipeline.fit(synthetic_dataset.frame)
    frame = synthetic_dataset.frame.head(2).copy()
    frame["segment"] = pd.Categorical(["unseen", "s0"])

    X = pipeline.transform(frame)

    assert X[0, 2:].sum() == 0.0
    assert X[1, 2:].sum() == 1.0


def test_pipeline_transform_before_fit(synthetic_dataset):
    with pytest.raises(RuntimeError):
        FeaturePipeline(synthetic_dataset.schema, "y").transform(synthetic_dataset.frame)


def test_build_model_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown model"):
        build_model("svm")
    with pytest.raises(ValueError, match="Unknown parameters"):
        build_model("random_forest", {"depth": 3})


def test_workflow_fit_and_evaluate(synthetic_dataset):
    split = stratified_split(synthetic_dataset, "y", 0.25, seed=0)
    wf = Workflow("logistic_regression").fit(synthetic_dataset, split.train)

    scores = wf.predict_proba(synthetic_dataset, split.held_out)
    metrics = wf.evaluate(synthetic_dataset, split.held_out, ["roc_auc", "accuracy"])

    assert scores.shape == (len(split.held_out),)
    assert np.all((scores >= 0) & (scores <= 1))
    assert metrics["roc_auc"] > 0.6
    assert wf.positive_class == 1


def test_workflow_predict_before_fit(synthetic_dataset):
    with pytest.raises(RuntimeError, match="not been fitted"):
        Workflow("logistic_regression").predict_proba(synthetic_dataset, [0, 1])


def test_workflow_needs_positive_class_for_multiclass():
    from stratsplit.data.dataset import Dataset

    frame = pd.DataFrame({"x": np.arange(9.0), "y": ["a", "b", "c"] * 3})
    ds = Dataset.from_frame(frame, "y")
    with pytest.raises(ValueError, match="positive_class"):
        Workflow("logistic_regression").fit(ds, np.arange(9))

    fitted = Workflow("logistic_regression", positive_class="c").fit(ds, np.arange(9))
    assert fitted.predict_proba(ds, [0, 1, 2]).shape == (3,)


@pytest.mark.parametrize("model,params", [
    ("random_forest", {"n_estimators": 20}),
    ("xgboost", {"n_estimators": 10}),
])
def test_tree_models_report_importances(synthetic_dataset, model, params):
    split = stratified_split(synthetic_dataset, "y", 0.25, seed=1)
    wf = Workflow(model, params).fit(synthetic_dataset, split.train)

    importances = wf.feature_importances()

    assert len(importances) == 5
    values = list(importances.values())
    assert values == sorted(values, reverse=True)


def test_fit_resamples_one_row_per_fold_and_metric(synthetic_dataset):
    resamples = k_fold_resamples(synthetic_dataset, "y", k=3, seed=0)

    table = fit_resamples(
        Workflow("random_forest", {"n_estimators": 20}),
        synthetic_dataset,
        resamples,
        ["roc_auc", "accuracy"],
    )

    assert len(table) == 6
    assert set(table["resample_id"]) == {"Fold01", "Fold02", "Fold03"}
    assert (table["n_analysis"] + table["n_assessment"] == 300).all()


def test_tune_grid_and_select_best(synthetic_dataset):
    resamples = k_fold_resamples(synthetic_dataset, "y", k=3, seed=0)
    grid = {"penalty": ["l1"], "C": [0.001, 1.0]}

    result = tune_grid(
        Workflow("logistic_regression"), synthetic_dataset, resamples, grid, ["roc_auc", "brier"]
    )

    assert len(result.rows) == 2 * 3 * 2
    summary = result.summary()
    assert set(summary["candidate"]) == {"Model1", "Model2"}
    assert (summary["n"] == 3).all()

    best = result.select_best("roc_auc")
    assert best in [{"penalty": "l1", "C": 0.001}, {"penalty": "l1", "C": 1.0}]
    # C=0.001 with an l1 penalty zeroes every coefficient: constant scores, AUC 0.5
    assert best["C"] == 1.0

    top = result.show_best("brier", n=2)
    assert top["mean"].is_monotonic_increasing


def test_show_best_unknown_metric(synthetic_dataset):
    resamples = validation_split(synthetic_dataset, "y", 0.25, seed=0)
    result = tune_grid(
        Workflow("logistic_regression"), synthetic_dataset, resamples, {}, ["roc_auc"]
    )

    assert list(result.candidates) == ["Model1"]
    with pytest.raises(ValueError):
        result.show_best("accuracy")
    with pytest.raises(ValueError):
        result.show_best("f1")


def test_last_fit_on_three_way_split(synthetic_dataset):
    parts = train_validation_test(synthetic_dataset, "y", 0.25, 0.2, seed=0)
    wf = finalize(Workflow("logistic_regression"), {"C": 0.5})

    fitted, metrics = last_fit(wf, synthetic_dataset, parts, ["roc_auc", "accuracy"])

    assert fitted.params == {"C": 0.5}
    assert set(metrics) == {"roc_auc", "accuracy"}
    assert 0.0 <= metrics["accuracy"] <= 1.0


def test_synthetic_generator_exact_counts(synthetic_dataset):
    assert synthetic_dataset.class_counts() == {0: 180, 1: 120}
    assert list(synthetic_dataset.frame.columns) == ["x0", "x1", "segment", "y"]


@pytest.mark.filterwarnings("error::FutureWarning")
@pytest.mark.filterwarnings("error:Inconsistent values:UserWarning")
@pytest.mark.parametrize("params", [
    {"penalty": "l2"},
    {"penalty": "l1"},
    {"penalty": "elasticnet", "l1_ratio": 0.5},
    {"penalty": None},
])
def test_logistic_penalties_fit_without_deprecation(synthetic_dataset, params):
    pipeline = FeaturePipeline(synthetic_dataset.schema, "y")
    X = pipeline.fit_transform(synthetic_dataset.frame)
    y = synthetic_dataset.labels.astype(int)

    model = build_model("logistic_regression", params)
    model.fit(X, y)

    assert model.coefficients().shape == (X.shape[1],)


def test_logistic_l1_sparser_than_l2(synthetic_dataset):
    pipeline = FeaturePipeline(synthetic_dataset.schema, "y")
    X = pipeline.fit_transform(synthetic_dataset.frame)
    y = synthetic_dataset.labels.astype(int)

    lasso = build_model("logistic_regression", {"penalty": "l1", "C": 0.01})
    ridge = build_model("logistic_regression", {"penalty": "l2", "C": 0.01})
    lasso.fit(X, y)
    ridge.fit(X, y)

    assert np.sum(lasso.coefficients() == 0) > np.sum(ridge.coefficients() == 0)


@pytest.mark.parametrize("model,params", [
    ("logistic_regression", {}),
    ("random_forest", {"n_estimators": 20}),
    ("xgboost", {"n_estimators": 10}),
])
def test_predict_thresholds_probabilities(synthetic_dataset, model, params):
    pipeline = FeaturePipeline(synthetic_dataset.schema, "y")
    X = pipeline.fit_transform(synthetic_dataset.frame)
    y = synthetic_dataset.labels.astype(int)

    estimator = build_model(model, params, random_seed=0)
    estimator.fit(X, y)
    proba = estimator.predict_proba(X)

    np.testing.assert_array_equal(estimator.predict(X), (proba >= 0.5).astype(int))
    np.testing.assert_array_equal(estimator.predict(X, threshold=0.9), (proba >= 0.9).astype(int))
