"""Tests for SessionSummarizer."""
from datetime import datetime, timedelta, timezone

import pytest

from mindscreen.shared.models import (
    AnalysisResult,
    ClinicalIndicators,
    ClusterAssignment,
    KeywordAnalysisResult,
    PHQ9Estimation,
    RiskLevel,
    Sentiment,
    SeverityCategory,
)
from mindscreen.shared.utils import configure_pii_salt, hash_text_for_audit
from mindscreen.services.session_service import SessionRecord, SessionSummarizer
from mindscreen.services.session_service.session_summarizer import (
    average_risk_level,
    dominant_sentiment,
    phq9_score_of,
)

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def summarizer():
    return SessionSummarizer()


def make_analysis(
    risk_level=RiskLevel.LOW,
    sentiment=Sentiment.NEUTRAL,
    phq9=0,
    risk_keywords=None,
    cluster_id=None,
    risk_factors=None,
):
    return AnalysisResult(
        sentiment=sentiment,
        risk_level=risk_level,
        confidence=0.7,
        score=0.0,
        clinical_indicators=ClinicalIndicators(
            phq9_score=phq9,
            risk_factors=list(risk_factors or []),
        ),
        keyword_analysis=KeywordAnalysisResult(
            depression_keywords=list(risk_keywords or []),
            risk_keywords=list(risk_keywords or []),
        ),
        cluster_assignment=(
            ClusterAssignment(cluster_id=cluster_id, confidence=0.5, distance_to_center=0.3)
            if cluster_id is not None else None
        ),
    )


def make_record(text, minutes=0, **kwargs):
    return SessionRecord(
        text=text,
        analysis=make_analysis(**kwargs),
        timestamp=START + timedelta(minutes=minutes),
    )


class TestSummarize:
    """Session aggregation."""

    def test_empty_session(self, summarizer):
        summary = summarizer.summarize([], session_id="sess_1")
        assert summary.message_count == 0
        assert summary.average_risk_level == RiskLevel.LOW
        assert summary.follow_up_recommended is False

    def test_basic_fields(self, summarizer):
        records = [
            make_record("I had an okay morning", 0, cluster_id=3, phq9=2),
            make_record("work is stressful", 5, risk_level=RiskLevel.MEDIUM,
                        sentiment=Sentiment.NEGATIVE, cluster_id=1, phq9=6),
        ]
        summary = summarizer.summarize(records, session_id="sess_1")

        assert summary.session_id == "sess_1"
        assert summary.message_count == 2
        assert summary.phq9_trajectory == [2, 6]
        assert summary.cluster_evolution == [3, 1]
        assert summary.duration_seconds == 300.0

    def test_no_raw_text(self, summarizer):
        records = [make_record("my secret worry about exams")]
        summary = summarizer.summarize(records)

        assert summary.last_message_hash == hash_text_for_audit("my secret worry about exams")
        assert "secret worry" not in str(summary.to_dict())

    def test_risk_factors_deduplicated(self, summarizer):
        records = [
            make_record("a", risk_factors=["sleep disturbance"]),
            make_record("b", risk_factors=["sleep disturbance", "low mood"]),
        ]
        summary = summarizer.summarize(records)
        assert summary.risk_factor_trends == ["sleep disturbance", "low mood"]


class TestTrajectory:

    @pytest.mark.parametrize("start, end, expected", [
        (RiskLevel.LOW, RiskLevel.HIGH, "escalating"),
        (RiskLevel.LOW, RiskLevel.MEDIUM, "escalating"),
        (RiskLevel.HIGH, RiskLevel.LOW, "improving"),
        (RiskLevel.MEDIUM, RiskLevel.MEDIUM, "stable"),
    ])
    def test_first_versus_last(self, summarizer, start, end, expected):
        records = [
            make_record("first", risk_level=start),
            make_record("middle", risk_level=RiskLevel.HIGH),
            make_record("last", risk_level=end),
        ]
        assert summarizer.summarize(records).risk_trajectory == expected


class TestFollowUp:

    def test_low_stable_session(self, summarizer):
        records = [make_record("fine"), make_record("still fine")]
        assert summarizer.summarize(records).follow_up_recommended is False

    def test_last_message_high(self, summarizer):
        records = [make_record("x", risk_level=RiskLevel.HIGH)]
        assert summarizer.summarize(records).follow_up_recommended is True

    def test_clinical_phq9(self, summarizer):
        records = [make_record("x", phq9=10), make_record("y")]
        assert summarizer.summarize(records).follow_up_recommended is True

    def test_risk_keyword_anywhere(self, summarizer):
        records = [
            make_record("x", risk_level=RiskLevel.HIGH, risk_keywords=["end it all"]),
            make_record("y", risk_level=RiskLevel.HIGH),
            make_record("z", risk_level=RiskLevel.HIGH),
            make_record("w", risk_level=RiskLevel.LOW),
        ]
        # Improving trajectory, low last message, but a risk keyword was seen
        assert summarizer.summarize(records).follow_up_recommended is True


class TestKeyTopics:

    def test_topic_needs_two_terms(self, summarizer):
        assert summarizer.extract_key_topics(["I can't sleep and I'm tired"]) == ["sleep"]
        assert summarizer.extract_key_topics(["I feel sad"]) == []

    def test_terms_may_span_messages(self, summarizer):
        assert "mood" in summarizer.extract_key_topics(["I feel sad", "and hopeless"])

    def test_crisis_needs_one_term(self, summarizer):
        assert "crisis" in summarizer.extract_key_topics(["thinking about suicide"])

    def test_named_topics(self, summarizer):
        assert summarizer.extract_key_topics(["my therapy starts monday"]) == ["therapy"]

    def test_inflected_terms_count(self, summarizer):
        assert summarizer.extract_key_topics(["sadness, feeling down"]) == ["mood"]

    def test_mid_word_terms_do_not_count(self, summarizer):
        # "sad" inside "crusade", "down" inside "sundown"
        assert summarizer.extract_key_topics(["a crusade at sundown"]) == []

    def test_capped_at_six(self, summarizer):
        text = (
            "sad depressed anxious worried sleep tired friend family work job "
            "sick pain cope exercise worthless failure alcohol drugs"
        )
        assert len(summarizer.extract_key_topics([text])) == 6


class TestHelpers:

    def test_average_risk_level(self):
        assert average_risk_level([]) == RiskLevel.LOW
        assert average_risk_level([RiskLevel.LOW, RiskLevel.HIGH]) == RiskLevel.MEDIUM
        assert average_risk_level([RiskLevel.LOW, RiskLevel.LOW, RiskLevel.MEDIUM]) == RiskLevel.LOW
        assert average_risk_level([RiskLevel.HIGH, RiskLevel.HIGH, RiskLevel.MEDIUM]) == RiskLevel.HIGH

    def test_dominant_sentiment_tie_goes_to_first(self):
        assert dominant_sentiment([Sentiment.NEGATIVE, Sentiment.POSITIVE]) == Sentiment.NEGATIVE
        assert dominant_sentiment([]) == Sentiment.NEUTRAL

    def test_dominant_sentiment_majority(self):
        sentiments = [Sentiment.NEUTRAL, Sentiment.POSITIVE, Sentiment.POSITIVE]
        assert dominant_sentiment(sentiments) == Sentiment.POSITIVE

    def test_phq9_prefers_cluster_estimate(self):
        analysis = make_analysis(phq9=4)
        assert phq9_score_of(analysis) == 4

        estimated = AnalysisResult(
            sentiment=Sentiment.NEUTRAL,
            risk_level=RiskLevel.LOW,
            confidence=0.7,
            score=0.0,
            clinical_indicators=ClinicalIndicators(phq9_score=4),
            phq9_estimation=PHQ9Estimation(
                total_score=12,
                item_scores=[2, 2, 2, 2, 1, 1, 1, 1, 0],
                confidence_level=0.6,
                severity_category=SeverityCategory.MODERATE,
            ),
        )
        assert phq9_score_of(estimated) == 12
