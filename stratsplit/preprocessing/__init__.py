"""Preprocessing module for feature pipelines."""

from stratsplit.preprocessing.feature_pipeline import FeaturePipeline

__all__ = ["FeaturePipeline"]
