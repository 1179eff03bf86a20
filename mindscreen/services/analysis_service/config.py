"""Analysis Service configuration: tunable thresholds and vocabularies.

Every constant the scorer, extractor and blender use lives here as a
frozen dataclass default. Word lists are locale data: the built-in
English table (and its en-MY variant) is registered at import time and further locales can be
loaded from JSON with load_vocabulary().

Source: PHQ-9 scoring guidelines
https://www.apa.org/depression-guideline/patient-health-questionnaire.pdf
"""
import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Tuple, Union

from mindscreen.shared.models import Sentiment

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and tier cutoffs for the rule-based risk scorer."""
    # Per-occurrence weights
    first_person_weight: float = 0.5
    negation_weight: float = 1.0
    depression_keyword_weight: float = 2.0
    positive_keyword_weight: float = -1.5
    high_risk_phrase_bonus: float = 5.0
    medium_risk_phrase_bonus: float = 1.5
    risk_keyword_bonus: float = 10.0

    # Tier cutoffs: (phq9, score, keyword count)
    high_phq9: int = 15
    high_score: float = 7.0
    high_keywords: int = 4
    medium_phq9: int = 10
    medium_score: float = 3.5
    medium_keywords: int = 2
    low_phq9: int = 5
    low_score: float = 1.5
    low_keywords: int = 1

    # Confidence = min(cap, base + step * indicators)
    confidence_base: float = 0.6
    confidence_step: float = 0.05
    confidence_cap: float = 0.95


@dataclass(frozen=True)
class FeatureConfig:
    """Thresholds for categorical linguistic features."""
    complex_words_per_sentence: float = 15.0
    moderate_words_per_sentence: float = 8.0
    high_intensity_count: int = 2           # count above this is high
    high_intensity_density: float = 0.2     # or this share of all words
    imputed_semantic_coherence: float = 0.7
    qualifier_window: int = 40              # characters either side of a match
    valence_by_sentiment: Mapping[Sentiment, float] = field(default_factory=lambda: {
        Sentiment.POSITIVE: 0.7,
        Sentiment.NEUTRAL: 0.5,
        Sentiment.NEGATIVE: 0.3,
        Sentiment.CONCERNING: 0.2,
    })


@dataclass(frozen=True)
class BlendingConfig:
    """How rule-based and cluster risk estimates are reconciled."""
    adoption_confidence: float = 0.7
    cluster_weight: float = 0.7
    base_weight: float = 0.3
    high_cutoff: float = 2.5
    medium_cutoff: float = 1.5


@dataclass(frozen=True)
class Vocabulary:
    """All word lists for one locale.

    Token lists (pronouns, negations, absolutist words, intensifiers)
    are matched per whitespace token. Phrase lists match anywhere a word
    of the case-folded message starts with them, so inflections count.
    """
    locale: str
    first_person_pronouns: FrozenSet[str]
    negations: FrozenSet[str]
    absolutist_words: FrozenSet[str]
    intensifiers: FrozenSet[str]
    clinical_categories: Mapping[str, Tuple[str, ...]]
    positive_terms: Tuple[str, ...]
    high_risk_phrases: Tuple[str, ...]
    medium_risk_phrases: Tuple[str, ...]
    phq9_symptoms: Mapping[str, Tuple[str, ...]]
    intensity_qualifiers: Mapping[str, int]
    risk_factor_labels: Mapping[str, str]
    protective_factors: Mapping[str, Tuple[str, ...]]
    clinical_topics: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    named_topics: Tuple[str, ...] = ()


ENGLISH_VOCABULARY = Vocabulary(
    locale="en",
    first_person_pronouns=frozenset({"i", "me", "my", "myself", "mine"}),
    # Contractions are matched after apostrophes are dropped ("can't" -> "cant")
    negations=frozenset({
        "not", "no", "never", "nothing", "nobody", "none",
        "nowhere", "neither", "nor", "cannot",
        "can't", "won't", "don't", "doesn't", "didn't",
        "isn't", "aren't", "wasn't", "weren't",
    }),
    absolutist_words=frozenset({
        "always", "never", "nothing", "everything", "everyone", "nobody",
        "completely", "totally", "entirely", "constantly", "definitely",
        "all", "every", "whole",
    }),
    intensifiers=frozenset({
        "very", "extremely", "really", "so", "too", "quite",
        "absolutely", "completely", "totally",
    }),
    clinical_categories={
        "cognitive": (
            "worthless", "hopeless", "helpless", "useless", "failure", "burden",
            "nothing matters", "pointless", "meaningless", "empty", "numb",
            "can't think", "confused", "forgetful", "indecisive", "overwhelmed",
        ),
        "emotional": (
            "sad", "depressed", "down", "blue", "miserable", "devastated",
            "heartbroken", "lonely", "isolated", "abandoned", "rejected",
            "angry", "irritated", "frustrated", "anxious", "worried", "scared",
        ),
        "behavioral": (
            "can't sleep", "insomnia", "sleeping too much", "tired", "exhausted",
            "no energy", "can't eat", "overeating", "withdrawn", "avoiding",
            "procrastinating", "can't concentrate", "restless", "agitated",
        ),
        "somatic": (
            "headache", "stomach ache", "chest pain", "muscle tension", "fatigue",
            "weakness", "dizzy", "nauseous", "appetite loss", "weight loss",
            "weight gain", "aches", "pains",
        ),
        "suicidal": (
            "want to die", "kill myself", "end it all", "not worth living",
            "better off dead", "suicide", "self-harm", "hurt myself",
            "disappear", "give up", "can't go on", "no point",
        ),
    },
    positive_terms=(
        "happy", "joy", "excited", "grateful", "thankful", "blessed", "hopeful",
        "optimistic", "confident", "proud", "accomplished", "loved", "supported",
        "connected", "peaceful", "calm", "relaxed", "motivated", "energetic",
        "focused", "clear", "determined", "great",
    ),
    high_risk_phrases=(
        "hate myself", "no reason to live", "can't take it anymore",
        "nobody would miss me", "better off without me", "no way out",
    ),
    medium_risk_phrases=(
        "can't sleep", "no energy", "lost interest", "don't care anymore",
        "no motivation", "feel empty", "always tired",
    ),
    phq9_symptoms={
        "anhedonia": (
            "lost interest", "no interest", "don't enjoy", "nothing is fun",
            "no pleasure", "don't care anymore", "not interested",
        ),
        "depressed_mood": (
            "depressed", "hopeless", "sad", "down", "miserable", "empty",
        ),
        "sleep": (
            "can't sleep", "insomnia", "sleeping too much", "trouble sleeping",
            "awake all night", "oversleeping",
        ),
        "fatigue": ("tired", "exhausted", "no energy", "fatigue", "drained"),
        "appetite": (
            "can't eat", "no appetite", "appetite loss", "overeating",
            "not eating", "weight loss", "weight gain",
        ),
        "guilt": (
            "worthless", "failure", "burden", "guilty", "hate myself",
            "useless", "let everyone down",
        ),
        "concentration": (
            "can't concentrate", "can't focus", "can't think", "forgetful",
            "indecisive", "confused",
        ),
        "psychomotor": (
            "restless", "agitated", "slowed down", "can't sit still",
            "moving slowly", "fidgety",
        ),
        "self_harm": (
            "want to die", "kill myself", "end it all", "better off dead",
            "hurt myself", "self-harm", "suicide", "not worth living",
        ),
    },
    intensity_qualifiers={
        "every day": 3, "everyday": 3, "always": 3, "all the time": 3,
        "constantly": 3, "often": 2, "usually": 2, "most days": 2,
        "a lot": 2, "sometimes": 1, "occasionally": 1,
    },
    risk_factor_labels={
        "cognitive": "negative cognitive patterns",
        "emotional": "persistent low mood",
        "behavioral": "behavioral withdrawal",
        "somatic": "somatic complaints",
        "suicidal": "suicidal ideation",
    },
    protective_factors={
        "social support": ("supported", "loved", "connected"),
        "hopefulness": ("hopeful", "optimistic"),
        "motivation": ("motivated", "determined", "focused", "energetic"),
        "emotional regulation": ("calm", "peaceful", "relaxed"),
        "gratitude": ("grateful", "thankful", "blessed"),
        "self-efficacy": ("confident", "proud", "accomplished"),
    },
    clinical_topics={
        "mood": ("sad", "depressed", "down", "hopeless", "empty", "miserable", "mood"),
        "anxiety": ("anxious", "worried", "panic", "nervous", "scared", "stress"),
        "sleep": ("sleep", "insomnia", "tired", "exhausted", "awake", "nightmare"),
        "relationships": ("friend", "family", "partner", "lonely", "alone", "isolated"),
        "work": ("work", "job", "boss", "school", "exam", "study"),
        "health": ("sick", "pain", "headache", "appetite", "weight", "doctor"),
        "coping": ("cope", "coping", "exercise", "meditate", "breathe", "journal"),
        "identity": ("worthless", "failure", "hate myself", "useless", "confidence"),
        "crisis": ("suicide", "kill myself", "end it all", "self-harm", "want to die"),
        "substance": ("alcohol", "drinking", "drunk", "drugs", "pills", "smoking"),
    },
    named_topics=("depression", "therapy", "counseling", "treatment", "support"),
)


# Malaysian English: the English lists plus the Malay negators common in chat
MALAYSIAN_VOCABULARY = replace(
    ENGLISH_VOCABULARY,
    locale="en-MY",
    negations=ENGLISH_VOCABULARY.negations | {"tak", "tidak", "bukan", "takde", "tiada"},
)


_REGISTRY: Dict[str, Vocabulary] = {
    DEFAULT_LOCALE: ENGLISH_VOCABULARY,
    MALAYSIAN_VOCABULARY.locale: MALAYSIAN_VOCABULARY,
}


def register_vocabulary(vocabulary: Vocabulary) -> None:
    """Make a vocabulary available under its locale code."""
    _REGISTRY[vocabulary.locale] = vocabulary
    logger.info("VOCABULARY_REGISTERED", extra={"locale": vocabulary.locale})


def get_vocabulary(locale: str = DEFAULT_LOCALE) -> Vocabulary:
    """Return the vocabulary for a locale, falling back to English."""
    vocabulary = _REGISTRY.get(locale)
    if vocabulary is None:
        logger.warning(
            "VOCABULARY_LOCALE_FALLBACK",
            extra={"requested_locale": locale, "fallback_locale": DEFAULT_LOCALE}
        )
        return _REGISTRY[DEFAULT_LOCALE]
    return vocabulary


def load_vocabulary(path: Union[str, Path], register: bool = True) -> Vocabulary:
    """Load a vocabulary from a JSON file.

    The JSON object uses the Vocabulary field names; lists become tuples
    (or frozensets for the token lists). Only clinical_topics and
    named_topics are optional and fall back to the dataclass defaults.

    Raises:
        KeyError: If a required field is missing
    """
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)

    token_fields = ("first_person_pronouns", "negations", "absolutist_words", "intensifiers")
    tuple_fields = ("positive_terms", "high_risk_phrases", "medium_risk_phrases")
    mapping_fields = ("clinical_categories", "phq9_symptoms", "protective_factors")

    kwargs = {"locale": raw["locale"]}
    for name in token_fields:
        kwargs[name] = frozenset(w.lower() for w in raw[name])
    for name in tuple_fields:
        kwargs[name] = tuple(raw[name])
    for name in mapping_fields:
        kwargs[name] = {key: tuple(terms) for key, terms in raw[name].items()}
    if "named_topics" in raw:
        kwargs["named_topics"] = tuple(raw["named_topics"])
    if "clinical_topics" in raw:
        kwargs["clinical_topics"] = {
            key: tuple(terms) for key, terms in raw["clinical_topics"].items()
        }
    kwargs["intensity_qualifiers"] = {k: int(v) for k, v in raw["intensity_qualifiers"].items()}
    kwargs["risk_factor_labels"] = dict(raw["risk_factor_labels"])

    vocabulary = Vocabulary(**kwargs)
    logger.info(
        "VOCABULARY_LOADED",
        extra={"locale": vocabulary.locale, "path": str(path)}
    )
    if register:
        register_vocabulary(vocabulary)
    return vocabulary
