"""Message analyzer - the end-to-end risk analysis pipeline.

    text -> KeywordMatcher + LinguisticFeatureExtractor
         -> RuleBasedRiskScorer (base result, always computed)
         -> KMeansClusteringEngine.assign
         -> RiskBlender
         -> cluster PHQ-9 estimate + intervention plan

Anything that goes wrong after the base result exists is logged and the
base result is returned instead; analyze() never raises.
"""
import logging
import time
from dataclasses import replace
from typing import Optional

from mindscreen.services.clustering_service import KMeansClusteringEngine, recommend
from mindscreen.shared.models import AnalysisResult
from mindscreen.shared.utils import hash_text_for_audit
from .config import DEFAULT_LOCALE, FeatureConfig, get_vocabulary
from .keyword_matcher import KeywordMatcher
from .linguistic_features import LinguisticFeatureExtractor
from .risk_blender import RiskBlender
from .risk_scorer import RuleBasedRiskScorer

logger = logging.getLogger(__name__)


class MessageAnalyzer:
    """Runs the full analysis pipeline for single messages.

    All collaborators are injectable; defaults are built for ``locale``.
    The clustering engine is shared, read-only state once trained.
    """

    def __init__(
        self,
        engine: Optional[KMeansClusteringEngine] = None,
        locale: str = DEFAULT_LOCALE,
        extractor: Optional[LinguisticFeatureExtractor] = None,
        matcher: Optional[KeywordMatcher] = None,
        scorer: Optional[RuleBasedRiskScorer] = None,
        blender: Optional[RiskBlender] = None,
        feature_config: Optional[FeatureConfig] = None,
    ):
        vocabulary = get_vocabulary(locale)
        self.locale = locale
        self.feature_config = feature_config or FeatureConfig()
        self.engine = engine or KMeansClusteringEngine()
        self.extractor = extractor or LinguisticFeatureExtractor(vocabulary, self.feature_config)
        self.matcher = matcher or KeywordMatcher(vocabulary, self.feature_config)
        self.scorer = scorer or RuleBasedRiskScorer(self.matcher, feature_config=self.feature_config)
        self.blender = blender or RiskBlender()

        logger.info(
            "MESSAGE_ANALYZER_INITIALIZED",
            extra={"locale": locale, "model_state": self.engine.state.value}
        )

    @property
    def is_ready(self) -> bool:
        return self.engine.is_trained

    def warm_up(self) -> bool:
        """Train the clustering model on the seed set if not yet trained."""
        return self.engine.ensure_trained()

    def analyze_base(self, text: Optional[str]) -> AnalysisResult:
        """Rule-based analysis only (no clustering)."""
        keywords = self.matcher.match(text)
        features = self.extractor.extract(text, len(keywords.depression_keywords))
        phq9 = self.matcher.estimate_phq9(text)
        return self.scorer.score(text, features, keywords, phq9)

    def analyze(self, text: Optional[str]) -> AnalysisResult:
        """Analyze one message.

        Args:
            text: Raw message text; None or empty is treated as zero signal

        Returns:
            AnalysisResult, cluster-blended when the model is trained

        Logs:
            - ANALYSIS_STARTED: Before analysis begins
            - CLUSTER_PATH_FAILED: If clustering/blending raised
            - ANALYSIS_COMPLETED: After analysis finishes
        """
        start_time = time.perf_counter()
        text_hash = hash_text_for_audit(text if isinstance(text, str) else "")

        logger.info(
            "ANALYSIS_STARTED",
            extra={
                "text_hash": text_hash,
                "text_length": len(text) if isinstance(text, str) else 0,
            }
        )

        base = self.analyze_base(text)
        result = self._with_clusters(base, text_hash)

        logger.info(
            "ANALYSIS_COMPLETED",
            extra={
                "text_hash": text_hash,
                "risk_level": result.risk_level.value,
                "base_risk_level": base.risk_level.value,
                "sentiment": result.sentiment.value,
                "confidence": round(result.confidence, 3),
                "cluster_id": (
                    result.cluster_assignment.cluster_id
                    if result.cluster_assignment else None
                ),
                "risk_keyword_count": len(result.keyword_analysis.risk_keywords),
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        )
        return result

    def _with_clusters(self, base: AnalysisResult, text_hash: str) -> AnalysisResult:
        try:
            assignment = self.engine.assign(base.features)
            cluster = self.engine.get_cluster(assignment.cluster_id) if assignment else None
            if assignment is None or cluster is None:
                return self._fallback(base)

            blended = self.blender.blend(base, assignment, cluster)
            return replace(
                blended,
                phq9_estimation=self.engine.estimate_phq9(assignment),
                therapeutic_recommendations=recommend(
                    blended.risk_level, cluster.characteristics, locale=self.locale
                ),
            )
        except Exception as e:
            logger.error(
                "CLUSTER_PATH_FAILED",
                extra={
                    "text_hash": text_hash,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return self._fallback(base)

    def _fallback(self, base: AnalysisResult) -> AnalysisResult:
        return replace(
            base,
            therapeutic_recommendations=recommend(base.risk_level, locale=self.locale),
        )
