"""Shared domain models for mindscreen."""
from .risk import (
    RiskLevel,
    Sentiment,
    SentenceComplexity,
    EmotionalIntensity,
    SeverityCategory,
    SymptomCategory,
    PHQ9Item,
    PHQ9_MAX_SCORE,
    PHQ9_ITEM_MAX,
    PHQ9_CLINICAL_CUTOFF,
)
from .clustering import (
    ClusterAssignment,
    ClusterData,
    ValidationMetrics,
    TrainingExample,
)
from .analysis import (
    LinguisticFeatures,
    KeywordAnalysisResult,
    PHQ9Estimation,
    ClinicalIndicators,
    LinguisticPatterns,
    TherapeuticRecommendations,
    AnalysisResult,
)

__all__ = [
    "RiskLevel",
    "Sentiment",
    "SentenceComplexity",
    "EmotionalIntensity",
    "SeverityCategory",
    "SymptomCategory",
    "PHQ9Item",
    "PHQ9_MAX_SCORE",
    "PHQ9_ITEM_MAX",
    "PHQ9_CLINICAL_CUTOFF",
    "ClusterAssignment",
    "ClusterData",
    "ValidationMetrics",
    "TrainingExample",
    "LinguisticFeatures",
    "KeywordAnalysisResult",
    "PHQ9Estimation",
    "ClinicalIndicators",
    "LinguisticPatterns",
    "TherapeuticRecommendations",
    "AnalysisResult",
]
