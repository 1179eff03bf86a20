"""Seed training set used to warm up the clustering model.

Eight labelled profiles spanning low, medium and high risk, modelled on
published linguistic markers of depression (elevated first-person
pronoun use, negation, absolutist language, negative valence).
"""
from typing import List

from mindscreen.shared.models import (
    EmotionalIntensity,
    LinguisticFeatures,
    RiskLevel,
    SentenceComplexity,
    TrainingExample,
)

_S, _M, _C = SentenceComplexity.SIMPLE, SentenceComplexity.MODERATE, SentenceComplexity.COMPLEX
_LO, _MO, _HI = EmotionalIntensity.LOW, EmotionalIntensity.MODERATE, EmotionalIntensity.HIGH

# (first_person, negation, absolutist, intensifier, words, sentences,
#  words/sentence, complexity, intensity, keyword density, coherence,
#  valence, phq9, risk)
_SEED_ROWS = (
    (12, 8, 3, 4, 80, 4, 20.0, _S, _HI, 0.15, 0.40, 0.20, 18, RiskLevel.HIGH),
    (6, 4, 2, 2, 100, 5, 20.0, _M, _MO, 0.08, 0.60, 0.40, 12, RiskLevel.MEDIUM),
    (3, 1, 0, 1, 120, 6, 20.0, _C, _LO, 0.02, 0.80, 0.70, 4, RiskLevel.LOW),
    (10, 6, 4, 3, 90, 4, 22.0, _S, _HI, 0.12, 0.50, 0.30, 16, RiskLevel.HIGH),
    (5, 3, 1, 2, 110, 5, 22.0, _M, _MO, 0.06, 0.65, 0.45, 11, RiskLevel.MEDIUM),
    (2, 0, 0, 0, 130, 7, 18.0, _C, _LO, 0.01, 0.85, 0.80, 2, RiskLevel.LOW),
    (8, 5, 2, 3, 95, 4, 24.0, _M, _MO, 0.09, 0.55, 0.35, 13, RiskLevel.MEDIUM),
    (1, 0, 0, 1, 140, 8, 17.0, _C, _LO, 0.005, 0.90, 0.85, 1, RiskLevel.LOW),
)


def seed_training_examples() -> List[TrainingExample]:
    """Fresh list of the built-in labelled examples."""
    examples = []
    for (first_person, negation, absolutist, intensifier, words, sentences,
         average, complexity, intensity, density, coherence, valence,
         phq9, risk) in _SEED_ROWS:
        features = LinguisticFeatures(
            first_person_count=first_person,
            negation_count=negation,
            absolutist_count=absolutist,
            intensifier_count=intensifier,
            word_count=words,
            sentence_count=sentences,
            average_words_per_sentence=average,
            sentence_complexity=complexity,
            emotional_intensity=intensity,
            depression_keyword_density=density,
            semantic_coherence=coherence,
            valence_score=valence,
        )
        examples.append(TrainingExample(features=features, risk_level=risk, phq9_score=phq9))
    return examples
