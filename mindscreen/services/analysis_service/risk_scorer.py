"""Rule-based depression risk scorer.

Combines linguistic features, keyword hits and the keyword PHQ-9
estimate into a numeric score, a sentiment label and a risk tier. This
is the ground analysis that is always computed and the fallback used
whenever the clustering path is unavailable.

Policy, in priority order:
1. Any risk (suicidal/self-harm) keyword -> HIGH, unconditionally
2. PHQ-9 >= 15, score >= 7 or >= 4 depression keywords -> HIGH
3. PHQ-9 >= 10, score >= 3.5 or >= 2 depression keywords -> MEDIUM
4. PHQ-9 >= 5, score >= 1.5 or >= 1 depression keyword -> LOW,
   sentiment by keyword balance
5. Otherwise LOW, positive or neutral by keyword balance
"""
import logging
from typing import Optional, Tuple

from mindscreen.shared.models import (
    AnalysisResult,
    ClinicalIndicators,
    KeywordAnalysisResult,
    LinguisticFeatures,
    LinguisticPatterns,
    PHQ9Estimation,
    RiskLevel,
    Sentiment,
)
from .config import FeatureConfig, ScoringConfig
from .keyword_matcher import KeywordMatcher

logger = logging.getLogger(__name__)


class RuleBasedRiskScorer:
    """Deterministic scorer producing the base AnalysisResult."""

    def __init__(
        self,
        matcher: Optional[KeywordMatcher] = None,
        config: Optional[ScoringConfig] = None,
        feature_config: Optional[FeatureConfig] = None,
    ):
        self.matcher = matcher or KeywordMatcher()
        self.config = config or ScoringConfig()
        self.feature_config = feature_config or FeatureConfig()

    def compute_score(
        self,
        features: LinguisticFeatures,
        keywords: KeywordAnalysisResult,
        high_phrases: int = 0,
        medium_phrases: int = 0,
    ) -> float:
        """Weighted numeric depression score."""
        cfg = self.config
        score = (
            cfg.first_person_weight * features.first_person_count
            + cfg.negation_weight * features.negation_count
            + cfg.depression_keyword_weight * len(keywords.depression_keywords)
            + cfg.positive_keyword_weight * len(keywords.positive_keywords)
            + cfg.high_risk_phrase_bonus * high_phrases
            + cfg.medium_risk_phrase_bonus * medium_phrases
        )
        if keywords.has_risk_keywords:
            score += cfg.risk_keyword_bonus
        return score

    def classify(
        self,
        score: float,
        keywords: KeywordAnalysisResult,
        phq9_total: int,
    ) -> Tuple[RiskLevel, Sentiment]:
        """Apply the tier policy to a score."""
        cfg = self.config
        depression = len(keywords.depression_keywords)
        positive = len(keywords.positive_keywords)

        if keywords.has_risk_keywords:
            return RiskLevel.HIGH, Sentiment.CONCERNING
        if (phq9_total >= cfg.high_phq9 or score >= cfg.high_score
                or depression >= cfg.high_keywords):
            return RiskLevel.HIGH, Sentiment.CONCERNING
        if (phq9_total >= cfg.medium_phq9 or score >= cfg.medium_score
                or depression >= cfg.medium_keywords):
            return RiskLevel.MEDIUM, Sentiment.NEGATIVE
        if (phq9_total >= cfg.low_phq9 or score >= cfg.low_score
                or depression >= cfg.low_keywords):
            if positive > depression:
                return RiskLevel.LOW, Sentiment.POSITIVE
            if depression > positive:
                return RiskLevel.LOW, Sentiment.NEGATIVE
            return RiskLevel.LOW, Sentiment.NEUTRAL
        if positive > depression:
            return RiskLevel.LOW, Sentiment.POSITIVE
        return RiskLevel.LOW, Sentiment.NEUTRAL

    def score(
        self,
        text: Optional[str],
        features: LinguisticFeatures,
        keywords: KeywordAnalysisResult,
        phq9: Optional[PHQ9Estimation] = None,
    ) -> AnalysisResult:
        """Score one message.

        Args:
            text: Raw message text, used for risk-phrase matching
            features: Features from LinguisticFeatureExtractor
            keywords: Matches from KeywordMatcher.match
            phq9: Keyword PHQ-9 estimate (computed from text if omitted)

        Returns:
            Complete rule-based AnalysisResult
        """
        if phq9 is None:
            phq9 = self.matcher.estimate_phq9(text)
        high_phrases, medium_phrases = self.matcher.match_risk_phrases(text)

        score = self.compute_score(
            features, keywords, len(high_phrases), len(medium_phrases)
        )
        risk_level, sentiment = self.classify(score, keywords, phq9.total_score)

        indicator_count = (
            len(keywords.depression_keywords)
            + len(keywords.positive_keywords)
            + len(high_phrases)
            + len(medium_phrases)
        )
        cfg = self.config
        confidence = min(
            cfg.confidence_cap,
            cfg.confidence_base + cfg.confidence_step * indicator_count,
        )

        factors = self.matcher.clinical_factors(keywords)
        valence = self.feature_config.valence_by_sentiment[sentiment]

        return AnalysisResult(
            sentiment=sentiment,
            risk_level=risk_level,
            confidence=confidence,
            score=score,
            keywords=list(keywords.depression_keywords) + list(keywords.positive_keywords),
            clinical_indicators=ClinicalIndicators(
                phq9_score=phq9.total_score,
                phq9_item_scores=list(phq9.item_scores),
                symptom_clusters=factors.symptom_clusters,
                risk_factors=factors.risk_factors,
                protective_factors=factors.protective_factors,
                severity_level=phq9.severity_category,
            ),
            linguistic_patterns=LinguisticPatterns(
                first_person_count=features.first_person_count,
                negation_count=features.negation_count,
                depression_keywords=list(keywords.depression_keywords),
                positive_keywords=list(keywords.positive_keywords),
                sentence_complexity=features.sentence_complexity,
                emotional_intensity=features.emotional_intensity,
            ),
            keyword_analysis=keywords,
            features=features.with_valence(valence),
        )
