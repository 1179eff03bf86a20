"""Therapeutic recommendation tables.

A base plan per risk tier, extended with cluster-specific techniques
when the assigned cluster carries matching characteristic descriptors.
Plans are locale data; ``en`` is the default and ``en-MY`` adds
Malaysian crisis services and culturally adapted practices.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from mindscreen.shared.models import RiskLevel, TherapeuticRecommendations

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

# Characteristic descriptors attached to clusters by index
CLUSTER_CHARACTERISTICS: Tuple[Tuple[str, ...], ...] = (
    ("High self-referential language", "moderate linguistic complexity",
     "moderate emotional intensity"),
    ("Negative cognitive patterns", "simple linguistic complexity",
     "high emotional intensity"),
    ("Depression-related vocabulary", "complex linguistic complexity",
     "low emotional intensity"),
    ("Positive language patterns", "moderate linguistic complexity",
     "low emotional intensity"),
)

# descriptor substring -> {plan field: additions}
CUSTOMIZATIONS: Tuple[Tuple[str, Mapping[str, Tuple[str, ...]]], ...] = (
    ("self-referential", {
        "cb_techniques": ("Self-focus reduction techniques",),
        "behavioral_activation": ("Other-focused activities",),
    }),
    ("negative cognitive", {
        "cb_techniques": ("Negative thought challenging",),
        "coping_strategies": ("Cognitive defusion techniques",),
    }),
    ("depression-related vocabulary", {
        "cb_techniques": ("Language pattern awareness",),
        "mindfulness_exercises": ("Thought observation meditation",),
    }),
    ("simple linguistic complexity", {
        "interventions": ("Simplified therapeutic communication",),
        "coping_strategies": ("Visual and concrete coping tools",),
    }),
    ("high emotional intensity", {
        "mindfulness_exercises": ("Emotional regulation meditation",),
        "coping_strategies": ("Intensity management techniques",),
    }),
)

_ENGLISH_PLANS: Dict[RiskLevel, TherapeuticRecommendations] = {
    RiskLevel.LOW: TherapeuticRecommendations(
        primary_approach="Behavioral Activation and Psychoeducation",
        urgency=RiskLevel.LOW,
        interventions=[
            "Activity scheduling and monitoring",
            "Sleep hygiene education",
            "Stress management techniques",
            "Social connection encouragement",
        ],
        cb_techniques=[
            "Thought awareness exercises",
            "Mood tracking",
            "Pleasant activity planning",
        ],
        behavioral_activation=[
            "Daily routine establishment",
            "Small achievable goal setting",
            "Social activity engagement",
        ],
        mindfulness_exercises=[
            "Breathing exercises",
            "Progressive muscle relaxation",
            "Mindful walking",
        ],
        coping_strategies=[
            "Problem-solving skills",
            "Time management",
            "Healthy lifestyle habits",
        ],
        risk_mitigation=[
            "Regular mood monitoring",
            "Early warning sign identification",
        ],
    ),
    RiskLevel.MEDIUM: TherapeuticRecommendations(
        primary_approach="Cognitive Behavioral Therapy with Supportive Counseling",
        urgency=RiskLevel.MEDIUM,
        interventions=[
            "Structured CBT sessions",
            "Mental health professional referral",
            "Medication evaluation referral",
            "Collaborative safety planning",
        ],
        cb_techniques=[
            "Cognitive restructuring",
            "Thought challenging",
            "Behavioral experiments",
            "Core belief work",
        ],
        behavioral_activation=[
            "Graded task assignment",
            "Mastery and pleasure activities",
            "Social skills and communication training",
        ],
        mindfulness_exercises=[
            "Mindfulness-based cognitive therapy practices",
            "Body scan meditation",
            "Loving-kindness meditation",
        ],
        coping_strategies=[
            "Distress tolerance skills",
            "Emotional regulation techniques",
            "Interpersonal effectiveness",
        ],
        risk_mitigation=[
            "Weekly safety check-ins",
            "Crisis contact information",
            "Professional monitoring",
        ],
    ),
    RiskLevel.HIGH: TherapeuticRecommendations(
        primary_approach="Crisis Intervention with Intensive Care",
        urgency=RiskLevel.HIGH,
        interventions=[
            "Immediate professional intervention",
            "Crisis safety planning",
            "Emergency psychiatric evaluation",
            "Intensive case management",
        ],
        cb_techniques=[
            "Crisis-focused CBT",
            "Suicide risk assessment",
            "Dialectical behavior therapy skills",
        ],
        behavioral_activation=[
            "Safety-focused activities",
            "Supported social connection",
            "Crisis distraction techniques",
        ],
        mindfulness_exercises=[
            "Grounding techniques",
            "Crisis mindfulness protocols",
            "Distress tolerance exercises",
        ],
        coping_strategies=[
            "Crisis hotline utilization (988 Suicide & Crisis Lifeline)",
            "Emergency safety protocols",
            "Professional crisis support network",
        ],
        risk_mitigation=[
            "Daily safety monitoring",
            "24/7 crisis availability",
            "Means restriction counseling",
            "Emergency contact protocols",
        ],
    ),
}

_MALAYSIAN_PLANS: Dict[RiskLevel, TherapeuticRecommendations] = {
    RiskLevel.LOW: TherapeuticRecommendations(
        primary_approach="Culturally-Sensitive Behavioral Activation and Psychoeducation",
        urgency=RiskLevel.LOW,
        interventions=[
            "Family-inclusive activity scheduling and monitoring",
            "Sleep hygiene education with cultural considerations",
            "Stress management techniques for the Malaysian context",
            "Community and religious social connection encouragement",
        ],
        cb_techniques=[
            "Culturally-aware thought awareness exercises",
            "Mood tracking with cultural validation",
            "Pleasant activity planning (gotong-royong, family time)",
        ],
        behavioral_activation=[
            "Daily routine with prayer or meditation times",
            "Goal setting respecting family priorities",
            "Community social activity engagement",
        ],
        mindfulness_exercises=[
            "Zikir, meditation, or breathing exercises",
            "Progressive muscle relaxation",
            "Mindful walking (morning walks, park visits)",
        ],
        coping_strategies=[
            "Family consultation and problem-solving",
            "Time management balancing work and family",
            "Healthy lifestyle habits",
        ],
        risk_mitigation=[
            "Regular mood monitoring with family awareness",
            "Early warning sign identification",
        ],
    ),
    RiskLevel.MEDIUM: TherapeuticRecommendations(
        primary_approach="Culturally-Adapted CBT with Family-Inclusive Support",
        urgency=RiskLevel.MEDIUM,
        interventions=[
            "Structured CBT sessions with cultural sensitivity",
            "Malaysian mental health professional referral",
            "Medication evaluation with cultural considerations",
            "Family-involved safety planning",
        ],
        cb_techniques=[
            "Cognitive restructuring respecting cultural values",
            "Thought challenging with family and cultural context",
            "Behavioral experiments within cultural boundaries",
            "Core belief work",
        ],
        behavioral_activation=[
            "Graded task assignment with family consultation",
            "Cultural mastery and pleasure activities",
            "Social skills and communication training",
        ],
        mindfulness_exercises=[
            "Culturally-adapted mindfulness (Islamic, Buddhist, Hindu)",
            "Body scan meditation",
            "Loving-kindness meditation for family harmony",
        ],
        coping_strategies=[
            "Distress tolerance skills",
            "Family-supported emotional regulation techniques",
            "Interpersonal effectiveness",
        ],
        risk_mitigation=[
            "Weekly family and professional safety check-ins",
            "Crisis contacts (Befrienders, Talian Kasih)",
            "Local professional monitoring",
        ],
    ),
    RiskLevel.HIGH: TherapeuticRecommendations(
        primary_approach="Crisis Intervention with Family-Centered Intensive Care",
        urgency=RiskLevel.HIGH,
        interventions=[
            "Immediate professional intervention",
            "Family-inclusive crisis safety planning",
            "Emergency psychiatric evaluation",
            "Intensive culturally-sensitive case management",
        ],
        cb_techniques=[
            "Crisis-focused CBT with cultural adaptation",
            "Culturally-sensitive suicide risk assessment",
            "Faith-informed dialectical behavior therapy skills",
        ],
        behavioral_activation=[
            "Safety-focused family activities",
            "Religious community supported social connection",
            "Culturally-appropriate crisis distraction techniques",
        ],
        mindfulness_exercises=[
            "Grounding techniques (prayer, zikir, meditation)",
            "Crisis mindfulness protocols",
            "Faith-informed distress tolerance exercises",
        ],
        coping_strategies=[
            "Crisis hotlines (Befrienders: 03-7627 2929, Talian Kasih: 15999)",
            "Emergency safety protocols with family notification",
            "Local professional crisis support network",
        ],
        risk_mitigation=[
            "Daily family and professional safety monitoring",
            "24/7 crisis availability",
            "Means restriction counseling",
            "Emergency contact protocols including family",
        ],
    ),
}

_REGISTRY: Dict[str, Dict[RiskLevel, TherapeuticRecommendations]] = {
    DEFAULT_LOCALE: _ENGLISH_PLANS,
    "en-MY": _MALAYSIAN_PLANS,
}


def register_plans(locale: str, plans: Dict[RiskLevel, TherapeuticRecommendations]) -> None:
    """Add or replace the plan table for a locale.

    Raises:
        ValueError: If a risk tier is missing from ``plans``
    """
    missing = [level.value for level in RiskLevel if level not in plans]
    if missing:
        raise ValueError(f"Plan table for {locale} missing tiers: {missing}")
    _REGISTRY[locale] = dict(plans)


def characteristics_for(cluster_index: int) -> List[str]:
    """Descriptor strings for a cluster index (wraps for k > 4)."""
    return list(CLUSTER_CHARACTERISTICS[cluster_index % len(CLUSTER_CHARACTERISTICS)])


def base_plan(risk_level: RiskLevel, locale: str = DEFAULT_LOCALE) -> TherapeuticRecommendations:
    plans = _REGISTRY.get(locale)
    if plans is None:
        logger.warning(
            "RECOMMENDATION_LOCALE_FALLBACK",
            extra={"requested_locale": locale, "fallback_locale": DEFAULT_LOCALE}
        )
        plans = _REGISTRY[DEFAULT_LOCALE]
    return plans[risk_level]


def recommend(
    risk_level: RiskLevel,
    characteristics: Optional[Iterable[str]] = None,
    locale: str = DEFAULT_LOCALE,
) -> TherapeuticRecommendations:
    """Base plan for a tier, extended for the cluster's characteristics.

    The stored plan is never mutated; a new instance is returned.
    """
    plan = base_plan(risk_level, locale)
    fields = {
        "interventions": list(plan.interventions),
        "cb_techniques": list(plan.cb_techniques),
        "behavioral_activation": list(plan.behavioral_activation),
        "mindfulness_exercises": list(plan.mindfulness_exercises),
        "coping_strategies": list(plan.coping_strategies),
        "risk_mitigation": list(plan.risk_mitigation),
    }

    for descriptor in characteristics or ():
        lowered = descriptor.lower()
        for marker, additions in CUSTOMIZATIONS:
            if marker not in lowered:
                continue
            for name, items in additions.items():
                fields[name].extend(i for i in items if i not in fields[name])

    return TherapeuticRecommendations(
        primary_approach=plan.primary_approach,
        urgency=plan.urgency,
        **fields,
    )
