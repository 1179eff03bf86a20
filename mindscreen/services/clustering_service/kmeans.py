"""K-means clustering engine for behavioural risk clusters.

State machine with two states:

    UNTRAINED --fit()/ensure_trained()--> TRAINED

While untrained, assign() returns None and callers keep the rule-based
result. Training builds one immutable TrainedModel (clusters,
training-time standardization statistics, validation metrics) and
swaps it in with a single reference assignment, so concurrent readers
always see either no model or a complete one. Training runs are
serialized by a lock; ensure_trained() trains at most once.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from mindscreen.evaluation.metrics import compute_validation_metrics
from mindscreen.shared.models import (
    PHQ9_ITEM_MAX,
    PHQ9_MAX_SCORE,
    ClusterAssignment,
    ClusterData,
    LinguisticFeatures,
    PHQ9Estimation,
    PHQ9Item,
    RiskLevel,
    SeverityCategory,
    TrainingExample,
    ValidationMetrics,
)
from .config import ClusteringConfig
from .feature_vectors import Standardizer, as_list, build_feature_matrix, build_feature_vector
from .recommendations import characteristics_for
from .seed_data import seed_training_examples

logger = logging.getLogger(__name__)

UNKNOWN_CLUSTER_PHQ9_CONFIDENCE = 0.3


class ModelState(Enum):
    UNTRAINED = "untrained"
    TRAINED = "trained"


class InsufficientTrainingDataError(ValueError):
    """Raised when fewer training examples than clusters are supplied."""


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """Everything produced by one training run. Never mutated."""
    clusters: Tuple[ClusterData, ...]
    centroids: np.ndarray
    standardizer: Standardizer
    validation_metrics: ValidationMetrics
    training_size: int
    trained_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def distribute_phq9(total: int) -> List[int]:
    """Spread a total evenly over the nine items, remainder first."""
    items = len(PHQ9Item)
    base, remainder = divmod(total, items)
    scores = [base + (1 if i < remainder else 0) for i in range(items)]
    return [min(PHQ9_ITEM_MAX, max(0, s)) for s in scores]


class KMeansClusteringEngine:
    """Fits K risk clusters and assigns new messages to them.

    Construct one engine per application and pass it to consumers; each
    test can build its own for isolation.
    """

    def __init__(
        self,
        config: Optional[ClusteringConfig] = None,
    ):
        self.config = config or ClusteringConfig()
        self._model: Optional[TrainedModel] = None
        self._train_lock = threading.Lock()

        logger.info(
            "CLUSTERING_ENGINE_INITIALIZED",
            extra={
                "k": self.config.k,
                "iterations": self.config.iterations,
                "random_seed": self.config.random_seed,
            }
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ModelState:
        return ModelState.TRAINED if self._model is not None else ModelState.UNTRAINED

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Optional[TrainedModel]:
        return self._model

    @property
    def clusters(self) -> List[ClusterData]:
        model = self._model
        return list(model.clusters) if model else []

    @property
    def validation_metrics(self) -> Optional[ValidationMetrics]:
        model = self._model
        return model.validation_metrics if model else None

    def get_cluster(self, cluster_id: int) -> Optional[ClusterData]:
        model = self._model
        if model is None or not 0 <= cluster_id < len(model.clusters):
            return None
        return model.clusters[cluster_id]

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def ensure_trained(self, examples: Optional[Sequence[TrainingExample]] = None) -> bool:
        """Train once if no model exists yet.

        Safe to call from many threads: at most one training run happens
        and every caller returns with the model trained.

        Args:
            examples: Training set (defaults to the built-in seed set)

        Returns:
            True if this call performed the training
        """
        if self._model is not None:
            return False
        with self._train_lock:
            if self._model is not None:
                return False
            self._fit_locked(examples if examples is not None else seed_training_examples())
            return True

    def fit(self, examples: Sequence[TrainingExample]) -> TrainedModel:
        """Train (or retrain) the model from labelled examples.

        Args:
            examples: At least k labelled examples

        Returns:
            The newly installed TrainedModel

        Raises:
            InsufficientTrainingDataError: If len(examples) < k
        """
        with self._train_lock:
            return self._fit_locked(examples)

    def _fit_locked(self, examples: Sequence[TrainingExample]) -> TrainedModel:
        k = self.config.k
        if len(examples) < k:
            logger.error(
                "CLUSTERING_TRAINING_REJECTED",
                extra={"example_count": len(examples), "k": k}
            )
            raise InsufficientTrainingDataError(
                f"Need at least {k} training examples, got {len(examples)}"
            )

        start_time = time.perf_counter()
        logger.info("CLUSTERING_TRAINING_STARTED", extra={"example_count": len(examples), "k": k})

        matrix = build_feature_matrix([e.features for e in examples], self.config)
        standardizer = Standardizer.fit(matrix)
        data = standardizer.transform(matrix)

        centroids = self._run_kmeans(data)
        distances = self._distances(data, centroids)
        labels = np.argmin(distances, axis=1)
        confidences = [self._confidence(row) for row in distances]

        clusters = tuple(
            self._build_cluster(c, centroids[c], labels, confidences, examples)
            for c in range(k)
        )
        predicted = [clusters[int(label)].risk_level for label in labels]
        metrics = compute_validation_metrics([e.risk_level for e in examples], predicted)

        model = TrainedModel(
            clusters=clusters,
            centroids=centroids,
            standardizer=standardizer,
            validation_metrics=metrics,
            training_size=len(examples),
        )
        self._model = model

        logger.info(
            "CLUSTERING_TRAINING_COMPLETED",
            extra={
                "example_count": len(examples),
                "cluster_sizes": [c.size for c in clusters],
                "cluster_risk_levels": [c.risk_level.value for c in clusters],
                "accuracy": round(metrics.accuracy, 4),
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        )
        return model

    def _run_kmeans(self, data: np.ndarray) -> np.ndarray:
        """Fixed-budget Lloyd iterations from K distinct sampled rows.

        No convergence check: the iteration budget is the stopping rule.
        Clusters that lose all members keep their previous centroid.
        """
        k = self.config.k
        rng = np.random.default_rng(self.config.random_seed)
        initial = rng.choice(len(data), size=k, replace=False)
        centroids = data[initial].copy()

        for _ in range(self.config.iterations):
            labels = np.argmin(self._distances(data, centroids), axis=1)
            for c in range(k):
                members = data[labels == c]
                if len(members):
                    centroids[c] = members.mean(axis=0)
        return centroids

    @staticmethod
    def _distances(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """Euclidean distance of every row to every centroid, shape (n, k)."""
        return np.linalg.norm(data[:, np.newaxis, :] - centroids[np.newaxis, :, :], axis=2)

    def _build_cluster(
        self,
        index: int,
        centroid: np.ndarray,
        labels: np.ndarray,
        confidences: List[float],
        examples: Sequence[TrainingExample],
    ) -> ClusterData:
        members = [i for i, label in enumerate(labels) if label == index]
        scores = [examples[i].phq9_score for i in members if examples[i].phq9_score is not None]
        avg_phq9 = float(np.mean(scores)) if scores else self.config.default_phq9(index)
        avg_confidence = float(np.mean([confidences[i] for i in members])) if members else 0.0

        return ClusterData(
            id=index,
            centroid=as_list(centroid),
            size=len(members),
            risk_level=RiskLevel.from_phq9(
                avg_phq9,
                high=self.config.high_risk_phq9,
                medium=self.config.medium_risk_phq9,
            ),
            characteristics=characteristics_for(index),
            avg_phq9_score=avg_phq9,
            avg_confidence=avg_confidence,
        )

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def _confidence(self, distances: np.ndarray) -> float:
        """Margin between the two nearest centroids, relative to the second.

        Equal nearest distances (including both zero) give 1.0.
        """
        if len(distances) < 2:
            return 1.0
        nearest, second = np.partition(distances, 1)[:2]
        if math.isclose(nearest, second):
            return 1.0
        confidence = (second - nearest) / second
        return float(min(self.config.max_confidence, max(self.config.min_confidence, confidence)))

    def assign(self, features: LinguisticFeatures) -> Optional[ClusterAssignment]:
        """Assign one message's features to the nearest cluster.

        Uses the standardization statistics captured at training time.

        Returns:
            ClusterAssignment, or None while the model is untrained
        """
        model = self._model
        if model is None:
            logger.debug("CLUSTER_ASSIGN_SKIPPED", extra={"reason": "model_untrained"})
            return None

        vector = model.standardizer.transform(build_feature_vector(features, self.config))
        distances = np.linalg.norm(model.centroids - vector, axis=1)
        nearest = int(np.argmin(distances))

        return ClusterAssignment(
            cluster_id=nearest,
            confidence=self._confidence(distances),
            distance_to_center=float(distances[nearest]),
            features=as_list(vector),
        )

    def estimate_phq9(self, assignment: ClusterAssignment) -> PHQ9Estimation:
        """PHQ-9 estimate from the assigned cluster's mean score.

        The cluster mean is discounted by distance to the centroid
        (factor 1 - distance / 2), rounded and clamped to 0-27.
        """
        cluster = self.get_cluster(assignment.cluster_id)
        if cluster is None:
            return PHQ9Estimation(
                total_score=0,
                item_scores=[0] * len(PHQ9Item),
                confidence_level=UNKNOWN_CLUSTER_PHQ9_CONFIDENCE,
                severity_category=SeverityCategory.MINIMAL,
            )

        adjustment = 1 - assignment.distance_to_center / 2
        total = min(PHQ9_MAX_SCORE, max(0, _round_half_up(cluster.avg_phq9_score * adjustment)))
        return PHQ9Estimation(
            total_score=total,
            item_scores=distribute_phq9(total),
            confidence_level=assignment.confidence,
            severity_category=SeverityCategory.from_phq9(total),
        )

