"""Evaluation metrics for risk-tier predictions."""
from .validation_metrics import (
    RISK_ORDER,
    OneVsRestCounts,
    build_confusion_matrix,
    one_vs_rest_counts,
    wald_interval,
    pairwise_auc,
    compute_validation_metrics,
)

__all__ = [
    "RISK_ORDER",
    "OneVsRestCounts",
    "build_confusion_matrix",
    "one_vs_rest_counts",
    "wald_interval",
    "pairwise_auc",
    "compute_validation_metrics",
]
