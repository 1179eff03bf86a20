"""Evaluation harness for mindscreen models.

Components:
- metrics/: Confusion-matrix validation of clustering risk predictions
"""
from .metrics import compute_validation_metrics

__all__ = ["compute_validation_metrics"]
