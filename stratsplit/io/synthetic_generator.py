"""
Synthetic labeled data for examples and tests.

Features come from a class-conditional Gaussian mixture: each record picks a
mixture component uniformly, then draws numeric features from that
component's Gaussian for its class. An optional categorical "segment" column
is correlated with the label so one-hot encoding has something to learn.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from stratsplit.config import SyntheticDataConfig
from stratsplit.data.dataset import Dataset
from stratsplit.data.schema import Schema

LABEL_COLUMN = "y"


class SyntheticGenerator:
    """Generates binary-labeled tabular data with exact class counts."""

    def __init__(self, cfg: SyntheticDataConfig | None = None):
        self.cfg = cfg or SyntheticDataConfig()
        self.rng = np.random.default_rng(self.cfg.random_seed)

        # Pre-generate GMM parameters at init for consistency across samples
        self._mu_negative, self._mu_positive = self._generate_means()
        self._sigma_negative, self._sigma_positive = self._generate_covariances()

    def _generate_means(self) -> tuple[np.ndarray, np.ndarray]:
        """Component means: base mean shifted by ``c * component_offset``.

        Returns:
            (mu_negative, mu_positive): Arrays of shape (n_components, n_features)
        """
        gm = self.cfg.gaussian_mixture
        n_feat = self.cfg.n_features
        mu_neg_base = _adjust_array_length(np.array(gm.mu_negative_base), n_feat)
        mu_pos_base = _adjust_array_length(np.array(gm.mu_positive_base), n_feat)

        shifts = np.arange(self.cfg.n_components)[:, None] * gm.component_offset
        return mu_neg_base + shifts, mu_pos_base + shifts

    def _generate_covariances(self) -> tuple[np.ndarray, np.ndarray]:
        """Covariances A @ A.T + eps*I with A ~ U(0, sigma_max).

        Returns:
            Arrays of shape (n_components, n_features, n_features)
        """
        n_comp = self.cfg.n_components
        n_feat = self.cfg.n_features
        sigma_max = self.cfg.gaussian_mixture.sigma_max
        eps = 1e-6

        out = []
        for _ in range(2):
            A = self.rng.uniform(0, sigma_max, size=(n_comp, n_feat, n_feat))
            out.append(A @ np.transpose(A, (0, 2, 1)) + eps * np.eye(n_feat))
        return out[0], out[1]

    def generate(self, n_records: int | None = None) -> pd.DataFrame:
        """Sample records.

        Args:
            n_records: Overrides cfg.n_records.

        Returns:
            DataFrame with features x0.., optional "segment" and label "y".
        """
        n = n_records or self.cfg.n_records
        n_pos = int(np.floor(n * self.cfg.positive_rate + 0.5))
        labels = np.zeros(n, dtype=int)
        labels[:n_pos] = 1
        self.rng.shuffle(labels)

        components = self.rng.integers(0, self.cfg.n_components, size=n)
        features = np.zeros((n, self.cfg.n_features))
        for c in range(self.cfg.n_components):
            for label, mu, sigma in ((0, self._mu_negative, self._sigma_negative),
                                     (1, self._mu_positive, self._sigma_positive)):
                mask = (components == c) & (labels == label)
                if mask.any():
                    features[mask] = self.rng.multivariate_normal(
                        mu[c], sigma[c], size=int(mask.sum())
                    )

        df = pd.DataFrame(features, columns=[f"x{i}" for i in range(self.cfg.n_features)])
        if self.cfg.n_categories > 0:
            df["segment"] = self._segments(labels)
        df[LABEL_COLUMN] = labels
        return df

    def _segments(self, labels: np.ndarray) -> np.ndarray:
        # Positives lean toward the last level, negatives toward the first
        k = self.cfg.n_categories
        levels = np.array([f"s{i}" for i in range(k)])
        weights = np.linspace(1.0, 2.0, k)
        p_pos = weights / weights.sum()
        p_neg = weights[::-1] / weights.sum()
        out = np.empty(len(labels), dtype=object)
        for label, p in ((0, p_neg), (1, p_pos)):
            mask = labels == label
            out[mask] = self.rng.choice(levels, size=int(mask.sum()), p=p)
        return out

    def schema(self) -> Schema:
        """Schema matching ``generate`` output."""
        columns = {f"x{i}": "numeric" for i in range(self.cfg.n_features)}
        if self.cfg.n_categories > 0:
            columns["segment"] = "categorical"
        columns[LABEL_COLUMN] = "categorical"
        return Schema(columns=columns)

    def generate_dataset(self, n_records: int | None = None) -> Dataset:
        """Sample records and wrap them as a validated Dataset."""
        return Dataset.from_frame(self.generate(n_records), LABEL_COLUMN, self.schema())


def _adjust_array_length(arr: np.ndarray, target_len: int) -> np.ndarray:
    """Pad with zeros or truncate array to target length."""
    if len(arr) < target_len:
        return np.pad(arr, (0, target_len - len(arr)))
    return arr[:target_len]
