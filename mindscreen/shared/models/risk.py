"""Risk tiers, clinical scales and categorical labels.

Enum values are the lowercase literals used in serialized output.
"""
from enum import Enum


class RiskLevel(Enum):
    """Depression risk tiers, ordered low < medium < high."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def ordinal(self) -> int:
        """Numeric rank used when blending tiers (1, 2, 3)."""
        return _RISK_ORDINALS[self]

    @classmethod
    def from_score(cls, value: float, high: float = 2.5, medium: float = 1.5) -> "RiskLevel":
        """Map a blended 1-3 score back onto a tier."""
        if value >= high:
            return cls.HIGH
        if value >= medium:
            return cls.MEDIUM
        return cls.LOW

    @classmethod
    def from_phq9(cls, score: float, high: float = 15, medium: float = 10) -> "RiskLevel":
        """Tier for a (mean) PHQ-9 score."""
        if score >= high:
            return cls.HIGH
        if score >= medium:
            return cls.MEDIUM
        return cls.LOW


_RISK_ORDINALS = {RiskLevel.LOW: 1, RiskLevel.MEDIUM: 2, RiskLevel.HIGH: 3}


class Sentiment(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    CONCERNING = "concerning"
    NEGATIVE = "negative"


class SentenceComplexity(Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class EmotionalIntensity(Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class SeverityCategory(Enum):
    """PHQ-9 severity bands.

    Source: Kroenke, Spitzer & Williams (2001), PHQ-9 scoring guide.
    """
    MINIMAL = "minimal"                        # 0-4
    MILD = "mild"                              # 5-9
    MODERATE = "moderate"                      # 10-14
    MODERATELY_SEVERE = "moderately_severe"    # 15-19
    SEVERE = "severe"                          # 20-27

    @classmethod
    def from_phq9(cls, score: int) -> "SeverityCategory":
        if score <= 4:
            return cls.MINIMAL
        if score <= 9:
            return cls.MILD
        if score <= 14:
            return cls.MODERATE
        if score <= 19:
            return cls.MODERATELY_SEVERE
        return cls.SEVERE


class SymptomCategory(Enum):
    """Clinical vocabulary categories scanned by the keyword matcher."""
    COGNITIVE = "cognitive"
    EMOTIONAL = "emotional"
    BEHAVIORAL = "behavioral"
    SOMATIC = "somatic"
    SUICIDAL = "suicidal"


class PHQ9Item(Enum):
    """PHQ-9 questionnaire items, one per DSM-5 depression criterion."""
    ANHEDONIA = 1           # Little interest or pleasure in doing things
    DEPRESSED_MOOD = 2      # Feeling down, depressed, or hopeless
    SLEEP = 3               # Trouble falling/staying asleep, or sleeping too much
    FATIGUE = 4             # Feeling tired or having little energy
    APPETITE = 5            # Poor appetite or overeating
    GUILT = 6               # Feeling bad about yourself
    CONCENTRATION = 7       # Trouble concentrating
    PSYCHOMOTOR = 8         # Moving/speaking slowly or being fidgety
    SELF_HARM = 9           # Thoughts that you would be better off dead


PHQ9_MAX_SCORE = 27
PHQ9_ITEM_MAX = 3
PHQ9_CLINICAL_CUTOFF = 10

