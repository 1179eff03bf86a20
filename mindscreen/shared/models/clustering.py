"""Clustering domain models.

Clusters are fit once and then shared read-only between requests, so
every model here is frozen.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .risk import RiskLevel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ClusterAssignment:
    """Nearest-cluster assignment for one standardized feature vector.

    Confidence lies in [0.1, 0.99], or is exactly 1.0 when the two
    nearest centroids are equidistant.
    """
    cluster_id: int
    confidence: float
    distance_to_center: float
    features: List[float] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not 0.0 < self.confidence <= 1.0:
            raise ValueError(f"Assignment confidence must be in (0, 1], got {self.confidence}")
        if self.distance_to_center < 0.0:
            raise ValueError(f"Distance must be non-negative, got {self.distance_to_center}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster_id": self.cluster_id,
            "confidence": round(self.confidence, 4),
            "distance_to_center": round(self.distance_to_center, 4),
            "features": [round(v, 4) for v in self.features],
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ClusterData:
    """One learned behavioural cluster."""
    id: int
    centroid: List[float]
    size: int
    risk_level: RiskLevel
    characteristics: List[str] = field(default_factory=list)
    avg_phq9_score: float = 0.0
    avg_confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "centroid": [round(v, 4) for v in self.centroid],
            "size": self.size,
            "risk_level": self.risk_level.value,
            "characteristics": list(self.characteristics),
            "avg_phq9_score": round(self.avg_phq9_score, 2),
            "avg_confidence": round(self.avg_confidence, 3),
        }


@dataclass(frozen=True)
class ValidationMetrics:
    """Fit quality of a clustering model against labelled risk tiers."""
    sensitivity: float
    specificity: float
    precision: float
    recall: float
    f1_score: float
    accuracy: float
    confidence_interval: Tuple[float, float]
    area_under_curve: float
    sample_size: int
    confusion_matrix: List[List[int]] = field(default_factory=list)

    def __post_init__(self):
        for name in ("sensitivity", "specificity", "precision", "recall",
                     "f1_score", "accuracy", "area_under_curve"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be 0.0-1.0, got {value}")
        low, high = self.confidence_interval
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError(f"Invalid confidence interval: {self.confidence_interval}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sensitivity": round(self.sensitivity, 4),
            "specificity": round(self.specificity, 4),
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1_score": round(self.f1_score, 4),
            "accuracy": round(self.accuracy, 4),
            "confidence_interval": [round(v, 4) for v in self.confidence_interval],
            "area_under_curve": round(self.area_under_curve, 4),
            "sample_size": self.sample_size,
            "confusion_matrix": [list(row) for row in self.confusion_matrix],
        }


@dataclass(frozen=True)
class TrainingExample:
    """A labelled point in the clustering training set.

    ``features`` is typed loosely to keep this module free of the
    analysis models; it holds a LinguisticFeatures instance.
    """
    features: Any
    risk_level: RiskLevel
    phq9_score: Optional[int] = None
