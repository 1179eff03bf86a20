"""Validation metrics for risk-tier predictions.

Builds a 3x3 confusion matrix over (low, medium, high) and derives
sensitivity, specificity, precision, F1 and accuracy from one-vs-rest
counts summed across the three classes. Accuracy carries a 95% Wald
interval; AUC is estimated by pairwise concordance on the ordinal tiers.

All metrics are deterministic and degrade to 0.0 (or 0.5 for AUC)
instead of dividing by zero.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from mindscreen.shared.models import RiskLevel, ValidationMetrics

logger = logging.getLogger(__name__)

RISK_ORDER: Tuple[RiskLevel, ...] = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)
Z_95 = 1.96


@dataclass(frozen=True)
class OneVsRestCounts:
    """True/false positive/negative counts summed over all classes."""
    true_positives: int
    false_positives: int
    false_negatives: int
    true_negatives: int

    @property
    def total(self) -> int:
        return (self.true_positives + self.false_positives
                + self.false_negatives + self.true_negatives)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def build_confusion_matrix(
    actual: Sequence[RiskLevel],
    predicted: Sequence[RiskLevel],
) -> List[List[int]]:
    """Rows are actual tiers, columns predicted tiers, both in RISK_ORDER.

    Raises:
        ValueError: If the two sequences differ in length
    """
    if len(actual) != len(predicted):
        raise ValueError(
            f"actual and predicted differ in length: {len(actual)} != {len(predicted)}"
        )
    index = {level: i for i, level in enumerate(RISK_ORDER)}
    matrix = [[0] * len(RISK_ORDER) for _ in RISK_ORDER]
    for truth, guess in zip(actual, predicted):
        matrix[index[truth]][index[guess]] += 1
    return matrix


def one_vs_rest_counts(matrix: List[List[int]]) -> OneVsRestCounts:
    """Sum per-class one-vs-rest counts, including true negatives."""
    n = sum(sum(row) for row in matrix)
    tp = fp = fn = tn = 0
    for c in range(len(matrix)):
        class_tp = matrix[c][c]
        class_fp = sum(matrix[r][c] for r in range(len(matrix)) if r != c)
        class_fn = sum(matrix[c][p] for p in range(len(matrix)) if p != c)
        tp += class_tp
        fp += class_fp
        fn += class_fn
        tn += n - class_tp - class_fp - class_fn
    return OneVsRestCounts(tp, fp, fn, tn)


def wald_interval(accuracy: float, sample_size: int, z: float = Z_95) -> Tuple[float, float]:
    """Normal-approximation interval for a proportion, clamped to [0, 1]."""
    if sample_size <= 0:
        return (0.0, 0.0)
    margin = z * math.sqrt(accuracy * (1 - accuracy) / sample_size)
    return (max(0.0, accuracy - margin), min(1.0, accuracy + margin))


def pairwise_auc(actual: Sequence[RiskLevel], predicted: Sequence[RiskLevel]) -> float:
    """Concordance over all pairs whose true tiers differ.

    A pair ordered the same way by prediction scores 1, a tied
    prediction scores 0.5. Returns 0.5 when no pair is comparable.
    """
    concordance = 0.0
    pairs = 0
    for i in range(len(actual)):
        for j in range(i + 1, len(actual)):
            true_delta = actual[i].ordinal - actual[j].ordinal
            if true_delta == 0:
                continue
            pairs += 1
            pred_delta = predicted[i].ordinal - predicted[j].ordinal
            if pred_delta == 0:
                concordance += 0.5
            elif (true_delta > 0) == (pred_delta > 0):
                concordance += 1.0
    return concordance / pairs if pairs else 0.5


def compute_validation_metrics(
    actual: Sequence[RiskLevel],
    predicted: Sequence[RiskLevel],
) -> ValidationMetrics:
    """Full metric set for one labelled prediction run.

    Args:
        actual: Ground-truth tiers
        predicted: Predicted tiers, aligned with ``actual``

    Returns:
        ValidationMetrics including the confusion matrix
    """
    matrix = build_confusion_matrix(actual, predicted)
    counts = one_vs_rest_counts(matrix)

    sensitivity = _ratio(counts.true_positives, counts.true_positives + counts.false_negatives)
    specificity = _ratio(counts.true_negatives, counts.true_negatives + counts.false_positives)
    precision = _ratio(counts.true_positives, counts.true_positives + counts.false_positives)
    accuracy = _ratio(counts.true_positives + counts.true_negatives, counts.total)
    f1 = _ratio(2 * precision * sensitivity, precision + sensitivity)

    metrics = ValidationMetrics(
        sensitivity=sensitivity,
        specificity=specificity,
        precision=precision,
        recall=sensitivity,
        f1_score=f1,
        accuracy=accuracy,
        confidence_interval=wald_interval(accuracy, len(actual)),
        area_under_curve=pairwise_auc(actual, predicted),
        sample_size=len(actual),
        confusion_matrix=matrix,
    )

    logger.info(
        "VALIDATION_METRICS_COMPUTED",
        extra={
            "sample_size": metrics.sample_size,
            "accuracy": round(metrics.accuracy, 4),
            "f1_score": round(metrics.f1_score, 4),
            "area_under_curve": round(metrics.area_under_curve, 4),
        }
    )
    return metrics
