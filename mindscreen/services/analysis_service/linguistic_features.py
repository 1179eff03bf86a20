"""Linguistic feature extraction.

Counts pronoun, negation, absolutist and intensifier usage per message
and derives sentence complexity and emotional intensity bands. Pure and
total: any input, including None, yields a LinguisticFeatures.
"""
import logging
import re
from typing import FrozenSet, Iterable, List, Optional

from mindscreen.shared.models import (
    EmotionalIntensity,
    LinguisticFeatures,
    SentenceComplexity,
)
from .config import FeatureConfig, Vocabulary, get_vocabulary

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_WORD = re.compile(r"[^\w]")


def normalize_token(token: str) -> str:
    """Case-fold a token and drop punctuation ("Can't," -> "cant")."""
    return _NON_WORD.sub("", token.lower())


def tokenize(text: Optional[str]) -> List[str]:
    """Whitespace tokens with punctuation stripped; empty tokens dropped."""
    if not isinstance(text, str):
        return []
    tokens = (normalize_token(t) for t in text.split())
    return [t for t in tokens if t]


def count_sentences(text: Optional[str]) -> int:
    if not isinstance(text, str):
        return 0
    return sum(1 for s in _SENTENCE_SPLIT.split(text) if s.strip())


def _normalized(words: Iterable[str]) -> FrozenSet[str]:
    return frozenset(normalize_token(w) for w in words)


class LinguisticFeatureExtractor:
    """Computes LinguisticFeatures for raw message text."""

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        config: Optional[FeatureConfig] = None,
    ):
        self.vocabulary = vocabulary or get_vocabulary()
        self.config = config or FeatureConfig()

        # Vocabulary entries are normalized the same way as tokens
        self._pronouns = _normalized(self.vocabulary.first_person_pronouns)
        self._negations = _normalized(self.vocabulary.negations)
        self._absolutist = _normalized(self.vocabulary.absolutist_words)
        self._intensifiers = _normalized(self.vocabulary.intensifiers)

    def extract(
        self,
        text: Optional[str],
        depression_keyword_count: int = 0,
    ) -> LinguisticFeatures:
        """Extract features from one message.

        Args:
            text: Raw message text
            depression_keyword_count: Matched depression keywords, used
                for keyword density

        Returns:
            LinguisticFeatures; zeroed for empty or non-text input
        """
        tokens = tokenize(text)
        if not tokens:
            return LinguisticFeatures()

        word_count = len(tokens)
        sentence_count = max(1, count_sentences(text))
        average = word_count / sentence_count

        first_person = sum(1 for t in tokens if t in self._pronouns)
        negations = sum(1 for t in tokens if t in self._negations)
        absolutist = sum(1 for t in tokens if t in self._absolutist)
        intensifiers = sum(1 for t in tokens if t in self._intensifiers)

        return LinguisticFeatures(
            first_person_count=first_person,
            negation_count=negations,
            absolutist_count=absolutist,
            intensifier_count=intensifiers,
            word_count=word_count,
            sentence_count=sentence_count,
            average_words_per_sentence=average,
            sentence_complexity=self._complexity(average),
            emotional_intensity=self._intensity(intensifiers + absolutist, word_count),
            depression_keyword_density=max(0, depression_keyword_count) / word_count,
            semantic_coherence=self.config.imputed_semantic_coherence,
        )

    def _complexity(self, words_per_sentence: float) -> SentenceComplexity:
        if words_per_sentence > self.config.complex_words_per_sentence:
            return SentenceComplexity.COMPLEX
        if words_per_sentence > self.config.moderate_words_per_sentence:
            return SentenceComplexity.MODERATE
        return SentenceComplexity.SIMPLE

    def _intensity(self, count: int, word_count: int) -> EmotionalIntensity:
        density = count / word_count if word_count else 0.0
        if count > self.config.high_intensity_count or (
            count > 1 and density >= self.config.high_intensity_density
        ):
            return EmotionalIntensity.HIGH
        if count > 0:
            return EmotionalIntensity.MODERATE
        return EmotionalIntensity.LOW
