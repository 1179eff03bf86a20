"""Tests for risk-tier validation metrics."""
import pytest

from mindscreen.shared.models import RiskLevel
from mindscreen.evaluation.metrics import (
    build_confusion_matrix,
    compute_validation_metrics,
    one_vs_rest_counts,
    pairwise_auc,
    wald_interval,
)

L, M, H = RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH


class TestConfusionMatrix:

    def test_rows_actual_columns_predicted(self):
        assert build_confusion_matrix([L, M, H], [L, L, H]) == [
            [1, 0, 0],
            [1, 0, 0],
            [0, 0, 1],
        ]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            build_confusion_matrix([L, M], [L])

    def test_one_vs_rest_counts(self):
        counts = one_vs_rest_counts([[1, 0, 0], [1, 0, 0], [0, 0, 1]])
        assert (counts.true_positives, counts.false_positives) == (2, 1)
        assert (counts.false_negatives, counts.true_negatives) == (1, 5)
        assert counts.total == 9


class TestComputeValidationMetrics:
    """Derived metric set."""

    def test_perfect_predictions(self):
        tiers = [L, M, H, H, L]
        metrics = compute_validation_metrics(tiers, tiers)

        assert metrics.accuracy == 1.0
        assert metrics.sensitivity == 1.0
        assert metrics.specificity == 1.0
        assert metrics.f1_score == 1.0
        assert metrics.area_under_curve == 1.0
        assert metrics.confidence_interval == (1.0, 1.0)
        assert metrics.sample_size == 5

    def test_one_mistake(self):
        metrics = compute_validation_metrics([L, M, H], [L, L, H])

        assert metrics.accuracy == pytest.approx(7 / 9)
        assert metrics.sensitivity == pytest.approx(2 / 3)
        assert metrics.recall == metrics.sensitivity
        assert metrics.specificity == pytest.approx(5 / 6)
        assert metrics.precision == pytest.approx(2 / 3)
        assert metrics.f1_score == pytest.approx(2 / 3)
        assert metrics.area_under_curve == pytest.approx(2.5 / 3)

    def test_empty_input(self):
        metrics = compute_validation_metrics([], [])

        assert metrics.accuracy == 0.0
        assert metrics.f1_score == 0.0
        assert metrics.area_under_curve == 0.5
        assert metrics.confidence_interval == (0.0, 0.0)
        assert metrics.sample_size == 0

    def test_to_dict_includes_matrix(self):
        data = compute_validation_metrics([L, H], [L, H]).to_dict()
        assert data["confusion_matrix"] == [[1, 0, 0], [0, 0, 0], [0, 0, 1]]
        assert data["sample_size"] == 2


class TestPairwiseAUC:

    def test_reversed_predictions(self):
        assert pairwise_auc([L, H], [H, L]) == 0.0

    def test_tied_predictions(self):
        assert pairwise_auc([L, H], [M, M]) == 0.5

    def test_no_comparable_pairs(self):
        assert pairwise_auc([M, M, M], [L, M, H]) == 0.5


class TestWaldInterval:

    def test_half_accuracy(self):
        low, high = wald_interval(0.5, 100)
        assert low == pytest.approx(0.402)
        assert high == pytest.approx(0.598)

    def test_clamped_to_unit_interval(self):
        low, high = wald_interval(0.9, 2)
        assert low >= 0.0
        assert high == 1.0

    def test_zero_samples(self):
        assert wald_interval(0.7, 0) == (0.0, 0.0)
