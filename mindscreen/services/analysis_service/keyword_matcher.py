"""Keyword and clinical indicator matching.

Scans case-folded text against the locale's clinical vocabularies and
produces matched-term lists, risk/protective factors and a PHQ-9 style
point estimate. Deterministic and pure.

A term matches wherever a word starts with it, so inflections count
("self-harming", "hopelessness") while "joy" stays silent inside "enjoy".
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from mindscreen.shared.models import (
    PHQ9_ITEM_MAX,
    PHQ9_MAX_SCORE,
    KeywordAnalysisResult,
    PHQ9Estimation,
    PHQ9Item,
    SeverityCategory,
    SymptomCategory,
)
from .config import FeatureConfig, Vocabulary, get_vocabulary

logger = logging.getLogger(__name__)


def compile_terms(terms: Iterable[str]) -> List[Tuple[str, re.Pattern]]:
    """Compile terms into case-insensitive patterns anchored at a word start."""
    return [
        (term, re.compile(rf"\b{re.escape(term)}", re.IGNORECASE))
        for term in terms
    ]


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


@dataclass(frozen=True)
class ClinicalFactors:
    """Risk and protective factors derived from keyword matches."""
    risk_factors: List[str]
    protective_factors: List[str]
    symptom_clusters: List[str]


class KeywordMatcher:
    """Matches clinical vocabularies and estimates PHQ-9 from text."""

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        config: Optional[FeatureConfig] = None,
    ):
        self.vocabulary = vocabulary or get_vocabulary()
        self.config = config or FeatureConfig()

        self._categories: Dict[SymptomCategory, List[Tuple[str, re.Pattern]]] = {
            SymptomCategory(name): compile_terms(terms)
            for name, terms in self.vocabulary.clinical_categories.items()
        }
        self._positive = compile_terms(self.vocabulary.positive_terms)
        self._high_risk = compile_terms(self.vocabulary.high_risk_phrases)
        self._medium_risk = compile_terms(self.vocabulary.medium_risk_phrases)
        self._phq9 = {
            PHQ9Item[name.upper()]: compile_terms(terms)
            for name, terms in self.vocabulary.phq9_symptoms.items()
        }
        self._qualifiers = [
            (pattern, self.vocabulary.intensity_qualifiers[q])
            for q, pattern in compile_terms(self.vocabulary.intensity_qualifiers)
        ]

        logger.info(
            "KEYWORD_MATCHER_INITIALIZED",
            extra={
                "locale": self.vocabulary.locale,
                "category_count": len(self._categories),
                "phq9_item_count": len(self._phq9),
            }
        )

    @staticmethod
    def _prepare(text: Optional[str]) -> str:
        return text.lower() if isinstance(text, str) else ""

    def match(self, text: Optional[str]) -> KeywordAnalysisResult:
        """Match depression, risk and positive vocabularies.

        Args:
            text: Raw message text (None or non-text yields no matches)

        Returns:
            KeywordAnalysisResult with deduplicated matches
        """
        lowered = self._prepare(text)
        if not lowered.strip():
            return KeywordAnalysisResult()

        depression: List[str] = []
        risk: List[str] = []
        categories: List[SymptomCategory] = []

        for category, patterns in self._categories.items():
            hits = [term for term, pattern in patterns if pattern.search(lowered)]
            if not hits:
                continue
            categories.append(category)
            depression.extend(hits)
            if category == SymptomCategory.SUICIDAL:
                risk.extend(hits)

        positive = [term for term, pattern in self._positive if pattern.search(lowered)]

        return KeywordAnalysisResult(
            depression_keywords=_dedupe(depression),
            positive_keywords=_dedupe(positive),
            risk_keywords=_dedupe(risk),
            categories=categories,
        )

    def match_risk_phrases(self, text: Optional[str]) -> Tuple[List[str], List[str]]:
        """Return (high-risk phrases, medium-risk phrases) present in text."""
        lowered = self._prepare(text)
        high = [term for term, pattern in self._high_risk if pattern.search(lowered)]
        medium = [term for term, pattern in self._medium_risk if pattern.search(lowered)]
        return high, medium

    def estimate_phq9(self, text: Optional[str]) -> PHQ9Estimation:
        """Estimate a PHQ-9 score from symptom keywords.

        Each of the nine items scores 0 when none of its keywords occur,
        otherwise 1-3 depending on the strongest frequency qualifier
        within the configured window of a match ("every day" -> 3,
        "often" -> 2, "sometimes" -> 1, no qualifier -> 1).

        Args:
            text: Raw message text

        Returns:
            PHQ9Estimation with total capped at 27
        """
        lowered = self._prepare(text)
        item_scores = [0] * len(PHQ9Item)
        matched_items = 0

        for item in PHQ9Item:
            patterns = self._phq9.get(item, [])
            spans = [
                m.span()
                for _, pattern in patterns
                for m in pattern.finditer(lowered)
            ]
            if not spans:
                continue
            matched_items += 1
            item_scores[item.value - 1] = min(
                PHQ9_ITEM_MAX,
                max(self._qualifier_points(lowered, start, end) for start, end in spans),
            )

        total = min(PHQ9_MAX_SCORE, sum(item_scores))
        return PHQ9Estimation(
            total_score=total,
            item_scores=item_scores,
            confidence_level=min(0.9, 0.4 + 0.1 * matched_items) if matched_items else 0.0,
            severity_category=SeverityCategory.from_phq9(total),
        )

    def _qualifier_points(self, text: str, start: int, end: int) -> int:
        window = self.config.qualifier_window
        context = text[max(0, start - window):end + window]
        points = [p for pattern, p in self._qualifiers if pattern.search(context)]
        return max(points) if points else 1

    def clinical_factors(
        self,
        keywords: KeywordAnalysisResult,
    ) -> ClinicalFactors:
        """Map matched categories and positive terms onto named factors."""
        labels = self.vocabulary.risk_factor_labels
        risk_factors = _dedupe(
            labels[c.value] for c in keywords.categories if c.value in labels
        )
        matched_positive = set(keywords.positive_keywords)
        protective = [
            factor
            for factor, terms in self.vocabulary.protective_factors.items()
            if matched_positive.intersection(terms)
        ]
        return ClinicalFactors(
            risk_factors=risk_factors,
            protective_factors=protective,
            symptom_clusters=[c.value for c in keywords.categories],
        )

