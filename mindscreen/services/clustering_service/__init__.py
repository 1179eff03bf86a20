"""Clustering Service: k-means behavioural risk clusters.

Fits K clusters from a labelled seed set at warm-up, then assigns each
new message's feature vector to its nearest cluster. Cluster risk tier,
PHQ-9 estimate and intervention plan feed the analysis pipeline.
"""

from .config import ClusteringConfig, FeatureWeights, FEATURE_NAMES
from .feature_vectors import Standardizer, build_feature_vector, build_feature_matrix
from .kmeans import (
    KMeansClusteringEngine,
    ModelState,
    TrainedModel,
    InsufficientTrainingDataError,
)
from .recommendations import recommend, characteristics_for
from .seed_data import seed_training_examples

__all__ = [
    "ClusteringConfig",
    "FeatureWeights",
    "FEATURE_NAMES",
    "Standardizer",
    "build_feature_vector",
    "build_feature_matrix",
    "KMeansClusteringEngine",
    "ModelState",
    "TrainedModel",
    "InsufficientTrainingDataError",
    "recommend",
    "characteristics_for",
    "seed_training_examples",
]
