"""Analysis domain models: per-message results.

Everything produced for a single message is immutable.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .clustering import ClusterAssignment
from .risk import (
    PHQ9_CLINICAL_CUTOFF,
    PHQ9_ITEM_MAX,
    PHQ9_MAX_SCORE,
    EmotionalIntensity,
    PHQ9Item,
    RiskLevel,
    SentenceComplexity,
    Sentiment,
    SeverityCategory,
    SymptomCategory,
)


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be 0.0-1.0, got {value}")


@dataclass(frozen=True)
class LinguisticFeatures:
    """Per-message linguistic measurements."""
    first_person_count: int = 0
    negation_count: int = 0
    absolutist_count: int = 0
    intensifier_count: int = 0
    word_count: int = 0
    sentence_count: int = 0
    average_words_per_sentence: float = 0.0
    sentence_complexity: SentenceComplexity = SentenceComplexity.SIMPLE
    emotional_intensity: EmotionalIntensity = EmotionalIntensity.LOW
    depression_keyword_density: float = 0.0
    semantic_coherence: float = 0.0
    valence_score: float = 0.5

    def __post_init__(self):
        _check_unit_interval("semantic_coherence", self.semantic_coherence)
        _check_unit_interval("valence_score", self.valence_score)
        if self.depression_keyword_density < 0.0:
            raise ValueError(
                f"depression_keyword_density must be >= 0, got {self.depression_keyword_density}"
            )

    def with_valence(self, valence_score: float) -> "LinguisticFeatures":
        """Copy of these features with a sentiment-derived valence."""
        return replace(self, valence_score=min(1.0, max(0.0, valence_score)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_person_count": self.first_person_count,
            "negation_count": self.negation_count,
            "absolutist_count": self.absolutist_count,
            "intensifier_count": self.intensifier_count,
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "average_words_per_sentence": round(self.average_words_per_sentence, 3),
            "sentence_complexity": self.sentence_complexity.value,
            "emotional_intensity": self.emotional_intensity.value,
            "depression_keyword_density": round(self.depression_keyword_density, 4),
            "semantic_coherence": round(self.semantic_coherence, 3),
            "valence_score": round(self.valence_score, 3),
        }


@dataclass(frozen=True)
class KeywordAnalysisResult:
    """Vocabulary matches for one message.

    Lists are deduplicated and keep the order in which terms were found.
    Every risk keyword also appears in depression_keywords.
    """
    depression_keywords: List[str] = field(default_factory=list)
    positive_keywords: List[str] = field(default_factory=list)
    risk_keywords: List[str] = field(default_factory=list)
    categories: List[SymptomCategory] = field(default_factory=list)

    @property
    def has_risk_keywords(self) -> bool:
        return bool(self.risk_keywords)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "depression_keywords": list(self.depression_keywords),
            "positive_keywords": list(self.positive_keywords),
            "risk_keywords": list(self.risk_keywords),
            "categories": [c.value for c in self.categories],
        }


@dataclass(frozen=True)
class PHQ9Estimation:
    """PHQ-9 style estimate with per-item breakdown (items ordered 1-9)."""
    total_score: int
    item_scores: List[int]
    confidence_level: float
    severity_category: SeverityCategory

    def __post_init__(self):
        if not 0 <= self.total_score <= PHQ9_MAX_SCORE:
            raise ValueError(f"PHQ-9 total must be 0-{PHQ9_MAX_SCORE}, got {self.total_score}")
        if len(self.item_scores) != len(PHQ9Item):
            raise ValueError(f"Expected {len(PHQ9Item)} item scores, got {len(self.item_scores)}")
        if any(not 0 <= s <= PHQ9_ITEM_MAX for s in self.item_scores):
            raise ValueError(f"PHQ-9 item scores must be 0-{PHQ9_ITEM_MAX}")
        _check_unit_interval("confidence_level", self.confidence_level)

    @property
    def clinical_significance(self) -> bool:
        return self.total_score >= PHQ9_CLINICAL_CUTOFF

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_score": self.total_score,
            "item_scores": {
                item.name.lower(): score
                for item, score in zip(PHQ9Item, self.item_scores)
            },
            "confidence_level": round(self.confidence_level, 3),
            "severity_category": self.severity_category.value,
            "clinical_significance": self.clinical_significance,
        }


@dataclass(frozen=True)
class ClinicalIndicators:
    """Clinical summary attached to every analysis."""
    phq9_score: int = 0
    phq9_item_scores: List[int] = field(default_factory=lambda: [0] * len(PHQ9Item))
    symptom_clusters: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
    protective_factors: List[str] = field(default_factory=list)
    severity_level: SeverityCategory = SeverityCategory.MINIMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phq9_score": self.phq9_score,
            "phq9_item_scores": list(self.phq9_item_scores),
            "symptom_clusters": list(self.symptom_clusters),
            "risk_factors": list(self.risk_factors),
            "protective_factors": list(self.protective_factors),
            "severity_level": self.severity_level.value,
        }


@dataclass(frozen=True)
class LinguisticPatterns:
    first_person_count: int = 0
    negation_count: int = 0
    depression_keywords: List[str] = field(default_factory=list)
    positive_keywords: List[str] = field(default_factory=list)
    sentence_complexity: SentenceComplexity = SentenceComplexity.SIMPLE
    emotional_intensity: EmotionalIntensity = EmotionalIntensity.LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_person_count": self.first_person_count,
            "negation_count": self.negation_count,
            "depression_keywords": list(self.depression_keywords),
            "positive_keywords": list(self.positive_keywords),
            "sentence_complexity": self.sentence_complexity.value,
            "emotional_intensity": self.emotional_intensity.value,
        }


@dataclass(frozen=True)
class TherapeuticRecommendations:
    """Intervention plan for a risk tier."""
    primary_approach: str
    urgency: RiskLevel
    interventions: List[str] = field(default_factory=list)
    cb_techniques: List[str] = field(default_factory=list)
    behavioral_activation: List[str] = field(default_factory=list)
    mindfulness_exercises: List[str] = field(default_factory=list)
    coping_strategies: List[str] = field(default_factory=list)
    risk_mitigation: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_approach": self.primary_approach,
            "urgency": self.urgency.value,
            "interventions": list(self.interventions),
            "cb_techniques": list(self.cb_techniques),
            "behavioral_activation": list(self.behavioral_activation),
            "mindfulness_exercises": list(self.mindfulness_exercises),
            "coping_strategies": list(self.coping_strategies),
            "risk_mitigation": list(self.risk_mitigation),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Externally visible output of the analysis pipeline.

    Produced fresh per message and never persisted by the pipeline
    itself; callers own storage.
    """
    sentiment: Sentiment
    risk_level: RiskLevel
    confidence: float
    score: float
    keywords: List[str] = field(default_factory=list)
    clinical_indicators: ClinicalIndicators = field(default_factory=ClinicalIndicators)
    linguistic_patterns: LinguisticPatterns = field(default_factory=LinguisticPatterns)
    keyword_analysis: KeywordAnalysisResult = field(default_factory=KeywordAnalysisResult)
    features: Optional[LinguisticFeatures] = None
    cluster_assignment: Optional[ClusterAssignment] = None
    phq9_estimation: Optional[PHQ9Estimation] = None
    therapeutic_recommendations: Optional[TherapeuticRecommendations] = None

    def __post_init__(self):
        _check_unit_interval("confidence", self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary for API responses."""
        result = {
            "sentiment": self.sentiment.value,
            "risk_level": self.risk_level.value,
            "confidence": round(self.confidence, 3),
            "score": round(self.score, 3),
            "keywords": list(self.keywords),
            "clinical_indicators": self.clinical_indicators.to_dict(),
            "linguistic_patterns": self.linguistic_patterns.to_dict(),
            "keyword_analysis": self.keyword_analysis.to_dict(),
        }
        if self.features is not None:
            result["linguistic_features"] = self.features.to_dict()
        if self.cluster_assignment is not None:
            result["cluster_assignment"] = self.cluster_assignment.to_dict()
        if self.phq9_estimation is not None:
            result["phq9_estimation"] = self.phq9_estimation.to_dict()
        if self.therapeutic_recommendations is not None:
            result["therapeutic_recommendations"] = self.therapeutic_recommendations.to_dict()
        return result
