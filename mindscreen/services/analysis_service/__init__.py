"""Analysis Service: per-message depression risk analysis.

Pipeline: keyword and clinical indicator matching, linguistic features,
rule-based risk score, then reconciliation with the k-means cluster
assignment. High-risk results are published as alert events.

Endpoints (handler.py):
- GET /health - Health check
- GET /ready - 503 until the clustering model is trained
- POST /analyze - Analyze a single message
- POST /respond - Analyze and generate a therapeutic reply
- GET /model - Cluster and validation details
- POST /sessions/summary - Summarize a session's messages
"""

from .config import (
    ScoringConfig,
    FeatureConfig,
    BlendingConfig,
    Vocabulary,
    ENGLISH_VOCABULARY,
    get_vocabulary,
    register_vocabulary,
    load_vocabulary,
)
from .linguistic_features import LinguisticFeatureExtractor
from .keyword_matcher import KeywordMatcher
from .risk_scorer import RuleBasedRiskScorer
from .risk_blender import RiskBlender
from .analyzer import MessageAnalyzer
from .alert_publisher import RiskAlertPublisher, RiskAlertEvent

__all__ = [
    "ScoringConfig",
    "FeatureConfig",
    "BlendingConfig",
    "Vocabulary",
    "ENGLISH_VOCABULARY",
    "get_vocabulary",
    "register_vocabulary",
    "load_vocabulary",
    "LinguisticFeatureExtractor",
    "KeywordMatcher",
    "RuleBasedRiskScorer",
    "RiskBlender",
    "MessageAnalyzer",
    "RiskAlertPublisher",
    "RiskAlertEvent",
]
