"""Clustering Service configuration.

Feature weights are research-derived priors, not fitted values. They do
not need to sum to 1. Note that z-score standardization divides each
weight back out, so weights only matter for dimensions with zero
variance in the training set.
"""
from dataclasses import dataclass, field
from typing import Mapping, Tuple

from mindscreen.shared.models import EmotionalIntensity


@dataclass(frozen=True)
class FeatureWeights:
    """Per-dimension weights, in feature-vector order."""
    first_person_pronouns: float = 0.15
    negation_patterns: float = 0.18
    depression_keywords: float = 0.22
    sentiment_valence: float = 0.20
    linguistic_complexity: float = 0.12
    emotional_intensity: float = 0.13

    def as_tuple(self) -> Tuple[float, ...]:
        return (
            self.first_person_pronouns,
            self.negation_patterns,
            self.depression_keywords,
            self.sentiment_valence,
            self.linguistic_complexity,
            self.emotional_intensity,
        )


FEATURE_NAMES: Tuple[str, ...] = (
    "first_person_pronouns",
    "negation_patterns",
    "depression_keywords",
    "sentiment_valence",
    "linguistic_complexity",
    "emotional_intensity",
)


@dataclass(frozen=True)
class ClusteringConfig:
    """K-means training and inference parameters."""
    k: int = 4
    iterations: int = 10
    random_seed: int = 42

    min_confidence: float = 0.1
    max_confidence: float = 0.99

    # Cluster risk from mean PHQ-9
    high_risk_phq9: float = 15.0
    medium_risk_phq9: float = 10.0

    # Linguistic complexity = words_per_sentence / divisor + coherence * weight
    complexity_divisor: float = 20.0
    coherence_weight: float = 0.5

    intensity_values: Mapping[EmotionalIntensity, float] = field(default_factory=lambda: {
        EmotionalIntensity.LOW: 0.2,
        EmotionalIntensity.MODERATE: 0.5,
        EmotionalIntensity.HIGH: 0.8,
    })

    # Mean PHQ-9 assumed for a cluster whose members carry no label,
    # keyed by cluster index (wraps for k > 4).
    default_phq9_by_index: Tuple[float, ...] = (16.0, 12.0, 8.0, 4.0)

    weights: FeatureWeights = field(default_factory=FeatureWeights)

    def __post_init__(self):
        if self.k < 1:
            raise ValueError(f"k must be >= 1, got {self.k}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {self.iterations}")
        if not 0.0 < self.min_confidence <= self.max_confidence <= 1.0:
            raise ValueError("Confidence clamp must satisfy 0 < min <= max <= 1")

    def default_phq9(self, cluster_index: int) -> float:
        return self.default_phq9_by_index[cluster_index % len(self.default_phq9_by_index)]
