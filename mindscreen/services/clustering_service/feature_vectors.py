"""Feature vectors and standardization for clustering.

A message becomes a 6-dimensional weighted vector; vectors are z-scored
with statistics captured once from the training set and reused for
every later assignment.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from mindscreen.shared.models import LinguisticFeatures
from .config import FEATURE_NAMES, ClusteringConfig


def build_feature_vector(
    features: LinguisticFeatures,
    config: Optional[ClusteringConfig] = None,
) -> np.ndarray:
    """Weighted 6-d vector for one message.

    Dimensions: first-person count, negation count, depression keyword
    density, valence, linguistic complexity in [0, 1], emotional
    intensity scalar.
    """
    config = config or ClusteringConfig()
    complexity = min(1.0, max(0.0,
        features.average_words_per_sentence / config.complexity_divisor
        + features.semantic_coherence * config.coherence_weight
    ))
    raw = np.array([
        features.first_person_count,
        features.negation_count,
        features.depression_keyword_density,
        features.valence_score,
        complexity,
        config.intensity_values[features.emotional_intensity],
    ], dtype=float)
    return raw * np.array(config.weights.as_tuple(), dtype=float)


def build_feature_matrix(
    features: Iterable[LinguisticFeatures],
    config: Optional[ClusteringConfig] = None,
) -> np.ndarray:
    rows = [build_feature_vector(f, config) for f in features]
    if not rows:
        return np.empty((0, len(FEATURE_NAMES)))
    return np.vstack(rows)


@dataclass(frozen=True, eq=False)
class Standardizer:
    """Per-dimension mean and population standard deviation."""
    mean: np.ndarray
    std: np.ndarray

    @classmethod
    def fit(cls, matrix: np.ndarray) -> "Standardizer":
        """Capture statistics from a training matrix.

        (Near-)zero deviation is replaced by 1 so constant dimensions map to 0
        instead of dividing by zero.
        """
        mean = matrix.mean(axis=0)
        std = matrix.std(axis=0)  # ddof=0: population deviation
        std = np.where(np.isclose(std, 0.0), 1.0, std)
        return cls(mean=mean, std=std)

    def transform(self, data: np.ndarray) -> np.ndarray:
        return (data - self.mean) / self.std

    def to_dict(self) -> dict:
        return {"mean": self.mean.tolist(), "std": self.std.tolist()}


def as_list(vector: np.ndarray) -> List[float]:
    return [float(v) for v in vector]
