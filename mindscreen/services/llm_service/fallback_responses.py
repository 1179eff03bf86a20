"""Deterministic responses used when the text-completion model is bypassed
or fails.

Two kinds:
    - Crisis protocol: fixed text with crisis resources, used whenever the
      analysis found a risk keyword. The model is never consulted.
    - Fallback: chosen by conversational context x risk tier from the
      locale's table.
"""
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from mindscreen.shared.models import AnalysisResult, RiskLevel, Sentiment

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

CONTEXTS = ("greeting", "seeking_help", "struggling", "positive", "sharing", "general")

_GREETING_PATTERN = re.compile(
    r"^\s*(hi|hello|hey|hiya|good (morning|afternoon|evening))\b", re.IGNORECASE
)
_HELP_PATTERN = re.compile(
    r"\b(help|advice|what should i do|how (can|do) i|any (tips|ideas)|can you suggest)\b",
    re.IGNORECASE,
)
_SHARING_PATTERN = re.compile(
    r"\b(i feel|i'm feeling|i am feeling|i've been|i have been|today i|lately i)\b",
    re.IGNORECASE,
)
GREETING_MAX_WORDS = 6


@dataclass(frozen=True)
class ResponseTable:
    """Locale data for deterministic responses."""
    locale: str
    responses: Mapping[str, Mapping[RiskLevel, str]]
    crisis_message: str
    crisis_resources: Tuple[str, ...]
    supportive_elements: Mapping[RiskLevel, Tuple[str, ...]] = field(default_factory=dict)
    recommended_actions: Mapping[RiskLevel, Tuple[str, ...]] = field(default_factory=dict)


_ENGLISH_RESPONSES: Dict[str, Dict[RiskLevel, str]] = {
    "greeting": {
        RiskLevel.LOW: "Hello, it's good to hear from you. How are you feeling today?",
        RiskLevel.MEDIUM: (
            "Hi, thank you for reaching out. I'm here to listen. "
            "How have things been for you lately?"
        ),
        RiskLevel.HIGH: (
            "Hello, I'm really glad you reached out. I'm here with you. "
            "Would you like to tell me what's been weighing on you?"
        ),
    },
    "seeking_help": {
        RiskLevel.LOW: (
            "I'm glad you asked. Small steps like a short walk, a regular sleep "
            "routine or talking with someone you trust can make a real difference. "
            "What feels most manageable for you right now?"
        ),
        RiskLevel.MEDIUM: (
            "Asking for help takes courage. Let's look at this together: what has "
            "been hardest lately? A counselor or doctor can also help you build a "
            "plan that fits you."
        ),
        RiskLevel.HIGH: (
            "Thank you for asking for help. You deserve support right now. "
            "Please consider reaching out to a mental health professional or a "
            "crisis line today, and I'll stay here with you while you do."
        ),
    },
    "struggling": {
        RiskLevel.LOW: (
            "It sounds like something is bothering you. That's completely "
            "understandable. Would you like to talk more about it?"
        ),
        RiskLevel.MEDIUM: (
            "I can sense that things might feel challenging right now. It's okay "
            "to have difficult days. Would you like to explore what might help you "
            "feel a bit better?"
        ),
        RiskLevel.HIGH: (
            "I hear that you're going through a really difficult time. Your "
            "feelings are valid, and I'm here to support you. Would you like to "
            "talk about what's been weighing on you?"
        ),
    },
    "positive": {
        RiskLevel.LOW: (
            "That's wonderful to hear. What do you think helped things go well? "
            "Noticing that can help you come back to it on harder days."
        ),
        RiskLevel.MEDIUM: (
            "I'm glad there are some good moments in there. It's okay if things "
            "feel mixed. What has been helping you most?"
        ),
        RiskLevel.HIGH: (
            "I'm glad you can see some positives, and I also want to make sure "
            "you're okay. How are you really feeling right now?"
        ),
    },
    "sharing": {
        RiskLevel.LOW: (
            "Thank you for sharing that with me. I'm here to listen. "
            "How has your day been going?"
        ),
        RiskLevel.MEDIUM: (
            "Thank you for telling me this. It sounds like a lot to carry. "
            "What part of it feels heaviest right now?"
        ),
        RiskLevel.HIGH: (
            "Thank you for trusting me with this. What you're feeling matters. "
            "Is there someone you can be with or talk to right now?"
        ),
    },
    "general": {
        RiskLevel.LOW: (
            "Thank you for sharing with me. I'm here to listen and support you. "
            "How has your day been going?"
        ),
        RiskLevel.MEDIUM: (
            "I'm here for you. It's okay to take things one step at a time. "
            "What would feel supportive right now?"
        ),
        RiskLevel.HIGH: (
            "I'm here and I'm listening. Your wellbeing matters, and you don't "
            "have to go through this alone. Can you tell me more?"
        ),
    },
}

_ENGLISH_CRISIS_MESSAGE = """I'm really concerned about what you've shared with me. Your safety is the most important thing right now.

You don't have to face this alone. Please reach out to someone who can help immediately:

{resources}

If you are in immediate danger, please contact your local emergency services.

You matter, and there are people who want to support you through this."""

ENGLISH_TABLE = ResponseTable(
    locale=DEFAULT_LOCALE,
    responses=_ENGLISH_RESPONSES,
    crisis_message=_ENGLISH_CRISIS_MESSAGE,
    crisis_resources=(
        "Suicide & Crisis Lifeline: call or text 988 (24/7)",
        "Crisis Text Line: text HOME to 741741",
        "Emergency services: 911",
    ),
    supportive_elements={
        RiskLevel.LOW: ("gratitude", "presence", "gentle_inquiry"),
        RiskLevel.MEDIUM: ("normalization", "hope", "collaborative_approach"),
        RiskLevel.HIGH: ("validation", "empathy", "open_invitation"),
    },
    recommended_actions={
        RiskLevel.LOW: ("continued_engagement", "positive_reinforcement"),
        RiskLevel.MEDIUM: ("coping_strategies", "self_care", "monitoring"),
        RiskLevel.HIGH: ("professional_help", "crisis_resources", "continued_conversation"),
    },
)

MALAYSIAN_TABLE = replace(
    ENGLISH_TABLE,
    locale="en-MY",
    crisis_resources=(
        "Befrienders Kuala Lumpur: 03-7627 2929 (24/7)",
        "Talian Kasih: 15999",
        "Emergency services: 999",
    ),
)

_REGISTRY: Dict[str, ResponseTable] = {
    DEFAULT_LOCALE: ENGLISH_TABLE,
    MALAYSIAN_TABLE.locale: MALAYSIAN_TABLE,
}


def register_table(table: ResponseTable) -> None:
    """Add or replace the response table for ``table.locale``.

    Raises:
        ValueError: If a context or risk tier is missing
    """
    for context in CONTEXTS:
        tiers = table.responses.get(context, {})
        missing = [level.value for level in RiskLevel if level not in tiers]
        if missing:
            raise ValueError(f"Response table {table.locale} missing {context} tiers: {missing}")
    _REGISTRY[table.locale] = table


def get_table(locale: str = DEFAULT_LOCALE) -> ResponseTable:
    table = _REGISTRY.get(locale)
    if table is None:
        logger.warning(
            "RESPONSE_TABLE_LOCALE_FALLBACK",
            extra={"requested_locale": locale, "fallback_locale": DEFAULT_LOCALE}
        )
        return _REGISTRY[DEFAULT_LOCALE]
    return table


def classify_context(message: Optional[str], analysis: AnalysisResult) -> str:
    """Pick the conversational context used to choose a fallback response.

    Checked in order: a short greeting, an explicit request for help,
    signs of struggle (elevated risk or negative sentiment), positive
    sentiment, first-person sharing, otherwise general.
    """
    text = message if isinstance(message, str) else ""

    if _GREETING_PATTERN.search(text) and len(text.split()) <= GREETING_MAX_WORDS:
        return "greeting"
    if _HELP_PATTERN.search(text):
        return "seeking_help"
    if analysis.risk_level != RiskLevel.LOW or analysis.sentiment in (
        Sentiment.NEGATIVE, Sentiment.CONCERNING
    ):
        return "struggling"
    if analysis.sentiment == Sentiment.POSITIVE:
        return "positive"
    if _SHARING_PATTERN.search(text):
        return "sharing"
    return "general"


def fallback_text(context: str, risk_level: RiskLevel, locale: str = DEFAULT_LOCALE) -> str:
    table = get_table(locale)
    tiers = table.responses.get(context) or table.responses["general"]
    return tiers[risk_level]


def crisis_text(locale: str = DEFAULT_LOCALE) -> str:
    table = get_table(locale)
    resources = "\n".join(f"- {line}" for line in table.crisis_resources)
    return table.crisis_message.format(resources=resources)
