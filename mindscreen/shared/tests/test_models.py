"""Tests for shared domain models."""
import pytest

from mindscreen.shared.models import (
    AnalysisResult,
    ClusterAssignment,
    LinguisticFeatures,
    PHQ9Estimation,
    PHQ9Item,
    RiskLevel,
    Sentiment,
    SeverityCategory,
    ValidationMetrics,
)


class TestRiskLevel:
    """Tests for RiskLevel helpers."""

    def test_ordinals(self):
        assert [r.ordinal for r in RiskLevel] == [1, 2, 3]

    @pytest.mark.parametrize("value,expected", [
        (1.0, RiskLevel.LOW),
        (1.49, RiskLevel.LOW),
        (1.5, RiskLevel.MEDIUM),
        (2.49, RiskLevel.MEDIUM),
        (2.5, RiskLevel.HIGH),
        (3.0, RiskLevel.HIGH),
    ])
    def test_from_score(self, value, expected):
        assert RiskLevel.from_score(value) == expected

    def test_from_phq9_boundaries(self):
        assert RiskLevel.from_phq9(9.9) == RiskLevel.LOW
        assert RiskLevel.from_phq9(10) == RiskLevel.MEDIUM
        assert RiskLevel.from_phq9(15) == RiskLevel.HIGH


class TestSeverityCategory:
    """PHQ-9 severity bands."""

    @pytest.mark.parametrize("score,expected", [
        (0, SeverityCategory.MINIMAL),
        (4, SeverityCategory.MINIMAL),
        (5, SeverityCategory.MILD),
        (10, SeverityCategory.MODERATE),
        (15, SeverityCategory.MODERATELY_SEVERE),
        (20, SeverityCategory.SEVERE),
        (27, SeverityCategory.SEVERE),
    ])
    def test_from_phq9(self, score, expected):
        assert SeverityCategory.from_phq9(score) == expected


class TestLinguisticFeatures:

    def test_defaults_are_zeroed(self):
        features = LinguisticFeatures()
        assert features.word_count == 0
        assert features.valence_score == 0.5
        assert features.semantic_coherence == 0.0

    def test_with_valence_clamps(self):
        features = LinguisticFeatures()
        assert features.with_valence(1.7).valence_score == 1.0
        assert features.with_valence(-0.2).valence_score == 0.0
        # Original instance unchanged
        assert features.valence_score == 0.5

    def test_rejects_out_of_range_coherence(self):
        with pytest.raises(ValueError):
            LinguisticFeatures(semantic_coherence=1.5)


class TestPHQ9Estimation:

    def test_rejects_total_above_max(self):
        with pytest.raises(ValueError):
            PHQ9Estimation(
                total_score=28,
                item_scores=[3] * 9,
                confidence_level=0.5,
                severity_category=SeverityCategory.SEVERE,
            )

    def test_rejects_wrong_item_count(self):
        with pytest.raises(ValueError):
            PHQ9Estimation(
                total_score=0,
                item_scores=[0] * 8,
                confidence_level=0.5,
                severity_category=SeverityCategory.MINIMAL,
            )

    def test_to_dict_names_items(self):
        estimate = PHQ9Estimation(
            total_score=12,
            item_scores=[2, 2, 2, 2, 1, 1, 1, 1, 0],
            confidence_level=0.6,
            severity_category=SeverityCategory.MODERATE,
        )
        data = estimate.to_dict()
        assert data["item_scores"]["anhedonia"] == 2
        assert data["item_scores"]["self_harm"] == 0
        assert set(data["item_scores"]) == {i.name.lower() for i in PHQ9Item}
        assert data["clinical_significance"] is True


class TestClusterAssignment:

    def test_rejects_zero_confidence(self):
        with pytest.raises(ValueError):
            ClusterAssignment(cluster_id=0, confidence=0.0, distance_to_center=1.0)

    def test_rejects_negative_distance(self):
        with pytest.raises(ValueError):
            ClusterAssignment(cluster_id=0, confidence=0.5, distance_to_center=-0.1)

    def test_to_dict_serializes_timestamp(self):
        data = ClusterAssignment(cluster_id=2, confidence=0.5, distance_to_center=1.0).to_dict()
        assert data["cluster_id"] == 2
        assert isinstance(data["timestamp"], str)


class TestValidationMetrics:

    def test_rejects_inverted_interval(self):
        with pytest.raises(ValueError):
            ValidationMetrics(
                sensitivity=0.5, specificity=0.5, precision=0.5, recall=0.5,
                f1_score=0.5, accuracy=0.5, confidence_interval=(0.6, 0.4),
                area_under_curve=0.5, sample_size=10,
            )


class TestAnalysisResult:

    def test_rejects_confidence_above_one(self):
        with pytest.raises(ValueError):
            AnalysisResult(
                sentiment=Sentiment.NEUTRAL,
                risk_level=RiskLevel.LOW,
                confidence=1.2,
                score=0.0,
            )

    def test_to_dict_omits_missing_optionals(self):
        result = AnalysisResult(
            sentiment=Sentiment.NEUTRAL,
            risk_level=RiskLevel.LOW,
            confidence=0.6,
            score=0.0,
        )
        data = result.to_dict()
        assert data["risk_level"] == "low"
        assert "cluster_assignment" not in data
        assert "phq9_estimation" not in data
        assert "linguistic_features" not in data
