"""Session summarizer - aggregation over a conversation.

Builds a SessionSummary from the analyses of a session's user messages
for counselor review. Message text is only used for topic detection;
the summary itself carries hashes, never raw text.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from mindscreen.services.analysis_service.config import DEFAULT_LOCALE, Vocabulary, get_vocabulary
from mindscreen.services.analysis_service.keyword_matcher import compile_terms
from mindscreen.shared.models import PHQ9_CLINICAL_CUTOFF, AnalysisResult, RiskLevel, Sentiment
from mindscreen.shared.utils import hash_text_for_audit

logger = logging.getLogger(__name__)

MAX_KEY_TOPICS = 6
TOPIC_MIN_MATCHES = 2
CRISIS_TOPIC = "crisis"
TRAJECTORY_DELTA = 0.2


@dataclass(frozen=True)
class SessionRecord:
    """One analysed user message."""
    text: str
    analysis: AnalysisResult
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    message_count: int
    average_risk_level: RiskLevel = RiskLevel.LOW
    dominant_sentiment: Sentiment = Sentiment.NEUTRAL
    key_topics: List[str] = field(default_factory=list)
    risk_trajectory: str = "stable"
    phq9_trajectory: List[int] = field(default_factory=list)
    cluster_evolution: List[int] = field(default_factory=list)
    risk_factor_trends: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    last_message_hash: str = ""
    follow_up_recommended: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "message_count": self.message_count,
            "average_risk_level": self.average_risk_level.value,
            "dominant_sentiment": self.dominant_sentiment.value,
            "key_topics": list(self.key_topics),
            "risk_trajectory": self.risk_trajectory,
            "phq9_trajectory": list(self.phq9_trajectory),
            "cluster_evolution": list(self.cluster_evolution),
            "risk_factor_trends": list(self.risk_factor_trends),
            "duration_seconds": round(self.duration_seconds, 3),
            "last_message_hash": self.last_message_hash,
            "follow_up_recommended": self.follow_up_recommended,
        }


def phq9_score_of(analysis: AnalysisResult) -> int:
    """Cluster-derived PHQ-9 estimate when present, else the keyword estimate."""
    if analysis.phq9_estimation is not None:
        return analysis.phq9_estimation.total_score
    return analysis.clinical_indicators.phq9_score


def average_risk_level(levels: Sequence[RiskLevel]) -> RiskLevel:
    """Mean of the 1/2/3 ordinals mapped back to a tier (LOW when empty)."""
    if not levels:
        return RiskLevel.LOW
    mean = sum(level.ordinal for level in levels) / len(levels)
    return RiskLevel.from_score(mean)


def dominant_sentiment(sentiments: Sequence[Sentiment]) -> Sentiment:
    """Most frequent sentiment; ties go to the one seen first."""
    if not sentiments:
        return Sentiment.NEUTRAL
    counts = Counter(sentiments)
    best = max(counts.values())
    return next(s for s in sentiments if counts[s] == best)


class SessionSummarizer:
    """Generates session summaries from analysed messages."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None, locale: str = DEFAULT_LOCALE):
        self.vocabulary = vocabulary or get_vocabulary(locale)
        self._topic_patterns = {
            topic: compile_terms(terms)
            for topic, terms in self.vocabulary.clinical_topics.items()
        }
        self._named_patterns = compile_terms(self.vocabulary.named_topics)

        logger.info("SESSION_SUMMARIZER_INITIALIZED", extra={"locale": self.vocabulary.locale})

    def summarize(self, records: Sequence[SessionRecord], session_id: str = "") -> SessionSummary:
        """Aggregate a session.

        Args:
            records: Analysed user messages, oldest first
            session_id: Session identifier

        Returns:
            SessionSummary

        Logs:
            - SESSION_SUMMARY_STARTED: Before summarization
            - SESSION_SUMMARY_COMPLETED: After summarization
        """
        logger.info(
            "SESSION_SUMMARY_STARTED",
            extra={"session_id": session_id, "record_count": len(records)}
        )

        if not records:
            return SessionSummary(session_id=session_id, message_count=0)

        analyses = [r.analysis for r in records]
        risk_levels = [a.risk_level for a in analyses]
        phq9_trajectory = [phq9_score_of(a) for a in analyses]
        trajectory = self._calculate_trajectory(risk_levels[0], risk_levels[-1])

        risk_factors: List[str] = []
        for analysis in analyses:
            for factor in analysis.clinical_indicators.risk_factors:
                if factor not in risk_factors:
                    risk_factors.append(factor)

        summary = SessionSummary(
            session_id=session_id,
            message_count=len(records),
            average_risk_level=average_risk_level(risk_levels),
            dominant_sentiment=dominant_sentiment([a.sentiment for a in analyses]),
            key_topics=self.extract_key_topics([r.text for r in records]),
            risk_trajectory=trajectory,
            phq9_trajectory=phq9_trajectory,
            cluster_evolution=[
                a.cluster_assignment.cluster_id for a in analyses if a.cluster_assignment
            ],
            risk_factor_trends=risk_factors,
            duration_seconds=(records[-1].timestamp - records[0].timestamp).total_seconds(),
            last_message_hash=hash_text_for_audit(records[-1].text),
            follow_up_recommended=self._should_follow_up(analyses, trajectory, phq9_trajectory),
        )

        logger.info(
            "SESSION_SUMMARY_COMPLETED",
            extra={
                "session_id": session_id,
                "message_count": summary.message_count,
                "average_risk_level": summary.average_risk_level.value,
                "trajectory": trajectory,
                "key_topic_count": len(summary.key_topics),
                "follow_up_recommended": summary.follow_up_recommended,
            }
        )
        return summary

    def extract_key_topics(self, texts: Sequence[str]) -> List[str]:
        """Clinical topics discussed across the messages, at most six.

        A topic needs two distinct term hits, except crisis which needs
        one. Named topics (therapy, support, ...) count on a single hit.
        """
        combined = " ".join(t for t in texts if isinstance(t, str))
        topics: List[str] = []

        for topic, patterns in self._topic_patterns.items():
            hits = sum(1 for _, pattern in patterns if pattern.search(combined))
            threshold = 1 if topic == CRISIS_TOPIC else TOPIC_MIN_MATCHES
            if hits >= threshold:
                topics.append(topic)

        for term, pattern in self._named_patterns:
            if pattern.search(combined) and term not in topics:
                topics.append(term)

        return topics[:MAX_KEY_TOPICS]

    def _calculate_trajectory(self, start: RiskLevel, end: RiskLevel) -> str:
        """Compare first and last tiers on a 0-1 scale."""
        delta = (end.ordinal - start.ordinal) / 2

        if delta > TRAJECTORY_DELTA:
            return "escalating"
        elif delta < -TRAJECTORY_DELTA:
            return "improving"
        else:
            return "stable"

    def _should_follow_up(
        self,
        analyses: Sequence[AnalysisResult],
        trajectory: str,
        phq9_trajectory: Sequence[int],
    ) -> bool:
        if analyses[-1].risk_level == RiskLevel.HIGH:
            return True
        if trajectory == "escalating":
            return True
        if any(score >= PHQ9_CLINICAL_CUTOFF for score in phq9_trajectory):
            return True
        return any(a.keyword_analysis.has_risk_keywords for a in analyses)
