"""Reconciles the rule-based risk tier with the cluster assignment."""
import logging
from dataclasses import replace
from typing import Optional

from mindscreen.shared.models import (
    AnalysisResult,
    ClusterAssignment,
    ClusterData,
    RiskLevel,
    Sentiment,
)
from .config import BlendingConfig

logger = logging.getLogger(__name__)


class RiskBlender:
    """Blends base and cluster risk into the final tier and sentiment.

    - Confident assignment (> adoption threshold): cluster tier wins
    - Otherwise: 0.7 * cluster + 0.3 * base on the 1-3 scale
    - A risk keyword in the base analysis always yields HIGH
    """

    def __init__(self, config: Optional[BlendingConfig] = None):
        self.config = config or BlendingConfig()

    def blend(
        self,
        base: AnalysisResult,
        assignment: Optional[ClusterAssignment],
        cluster: Optional[ClusterData],
    ) -> AnalysisResult:
        if assignment is None or cluster is None:
            return base

        cfg = self.config
        if assignment.confidence > cfg.adoption_confidence:
            risk_level = cluster.risk_level
            method = "adopted"
        else:
            blended = (
                cfg.cluster_weight * cluster.risk_level.ordinal
                + cfg.base_weight * base.risk_level.ordinal
            )
            risk_level = RiskLevel.from_score(blended, cfg.high_cutoff, cfg.medium_cutoff)
            method = "weighted"

        if base.keyword_analysis.has_risk_keywords:
            risk_level = RiskLevel.HIGH

        logger.debug(
            "RISK_BLENDED",
            extra={
                "method": method,
                "base_risk": base.risk_level.value,
                "cluster_risk": cluster.risk_level.value,
                "final_risk": risk_level.value,
                "cluster_confidence": round(assignment.confidence, 3),
            }
        )

        return replace(
            base,
            risk_level=risk_level,
            sentiment=self._sentiment_for(risk_level, base.sentiment),
            confidence=min(1.0, max(base.confidence, assignment.confidence)),
            cluster_assignment=assignment,
        )

    @staticmethod
    def _sentiment_for(risk_level: RiskLevel, base_sentiment: Sentiment) -> Sentiment:
        if risk_level == RiskLevel.HIGH:
            return Sentiment.CONCERNING
        if risk_level == RiskLevel.MEDIUM:
            return Sentiment.NEUTRAL if base_sentiment == Sentiment.POSITIVE else Sentiment.NEGATIVE
        return base_sentiment
