"""Per-user roll-up and process-wide counters."""
import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from mindscreen.shared.models import AnalysisResult, RiskLevel, ValidationMetrics
from .session_summarizer import phq9_score_of

logger = logging.getLogger(__name__)

SENTIMENT_HISTORY_SIZE = 10


@dataclass(frozen=True)
class UserProfile:
    """Rolling view of one user's recent analyses.

    Keyed by hashed user id only; never holds message text.
    """
    user_id_hash: str = ""
    risk_level: RiskLevel = RiskLevel.LOW
    session_count: int = 1
    total_messages: int = 0
    average_confidence: float = 0.0
    sentiment_history: List[str] = field(default_factory=list)
    cluster_history: List[int] = field(default_factory=list)
    phq9_estimated_score: Optional[int] = None
    trajectory_trend: str = "stable"
    risk_factors: List[str] = field(default_factory=list)
    protective_factors: List[str] = field(default_factory=list)
    last_interaction: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id_hash": self.user_id_hash,
            "risk_level": self.risk_level.value,
            "session_count": self.session_count,
            "total_messages": self.total_messages,
            "average_confidence": round(self.average_confidence, 3),
            "sentiment_history": list(self.sentiment_history),
            "cluster_history": list(self.cluster_history),
            "phq9_estimated_score": self.phq9_estimated_score,
            "trajectory_trend": self.trajectory_trend,
            "risk_factors": list(self.risk_factors),
            "protective_factors": list(self.protective_factors),
            "last_interaction": (
                self.last_interaction.isoformat() if self.last_interaction else None
            ),
        }


def _merge(existing: List[str], new: List[str]) -> List[str]:
    merged = list(existing)
    merged.extend(item for item in new if item not in merged)
    return merged


def _phq9_trend(previous: Optional[int], current: int) -> str:
    if previous is None or current == previous:
        return "stable"
    return "declining" if current > previous else "improving"


def update_user_profile(profile: UserProfile, analysis: AnalysisResult) -> UserProfile:
    """Fold one analysis into a profile, returning a new profile."""
    total = profile.total_messages + 1
    average_confidence = (
        profile.average_confidence * profile.total_messages + analysis.confidence
    ) / total
    phq9 = phq9_score_of(analysis)
    indicators = analysis.clinical_indicators

    cluster_history = list(profile.cluster_history)
    if analysis.cluster_assignment is not None:
        cluster_history.append(analysis.cluster_assignment.cluster_id)

    return replace(
        profile,
        risk_level=analysis.risk_level,
        total_messages=total,
        average_confidence=average_confidence,
        sentiment_history=(
            list(profile.sentiment_history) + [analysis.sentiment.value]
        )[-SENTIMENT_HISTORY_SIZE:],
        cluster_history=cluster_history,
        phq9_estimated_score=phq9,
        trajectory_trend=_phq9_trend(profile.phq9_estimated_score, phq9),
        risk_factors=_merge(profile.risk_factors, indicators.risk_factors),
        protective_factors=_merge(profile.protective_factors, indicators.protective_factors),
        last_interaction=datetime.now(timezone.utc),
    )


class SystemMetrics:
    """Process-wide counters, safe to update from request threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed_messages = 0
        self.alerts_generated = 0
        self._total_latency_ms = 0.0
        self.validation_metrics: Optional[ValidationMetrics] = None
        self.started_at = datetime.now(timezone.utc)

    def record(self, analysis: AnalysisResult, latency_ms: float) -> None:
        with self._lock:
            self.processed_messages += 1
            self._total_latency_ms += latency_ms
            if analysis.risk_level == RiskLevel.HIGH:
                self.alerts_generated += 1

    def set_validation_metrics(self, metrics: Optional[ValidationMetrics]) -> None:
        with self._lock:
            self.validation_metrics = metrics

    @property
    def average_latency_ms(self) -> float:
        if self.processed_messages == 0:
            return 0.0
        return self._total_latency_ms / self.processed_messages

    @property
    def clustering_accuracy(self) -> float:
        return self.validation_metrics.accuracy if self.validation_metrics else 0.0

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "processed_messages": self.processed_messages,
                "alerts_generated": self.alerts_generated,
                "average_latency_ms": round(self.average_latency_ms, 2),
                "clustering_accuracy": round(self.clustering_accuracy, 4),
                "uptime_seconds": round(
                    (datetime.now(timezone.utc) - self.started_at).total_seconds(), 1
                ),
            }
