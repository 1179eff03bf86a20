"""Therapeutic response generation with deterministic guardrails.

Order of precedence:
    1. Risk keyword in the analysis -> crisis protocol, model bypassed
    2. Model output that parses and passes the safety check
    3. Deterministic fallback for the message context and risk tier

generate() never raises; every model failure ends in step 3.
"""
import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from mindscreen.services.clustering_service import recommend
from mindscreen.shared.models import AnalysisResult, RiskLevel
from mindscreen.shared.utils import hash_text_for_audit
from .base_llm import BaseLLM
from .fallback_responses import (
    DEFAULT_LOCALE,
    classify_context,
    crisis_text,
    fallback_text,
    get_table,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
RESPONSE_TEMPERATURE = 0.6
RESPONSE_MAX_TOKENS = 1200
HISTORY_TURNS = 3
FALLBACK_CONFIDENCE = 0.6
DEFAULT_MODEL_CONFIDENCE = 0.7

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*|\s*```")

HARMFUL_PATTERNS = (
    "kill yourself",
    "end your life",
    "you should die",
    "harm yourself",
    "commit suicide",
)

MEDICAL_PATTERNS = (
    "i diagnose",
    "you have depression",
    "you have anxiety disorder",
    "take this medication",
    "stop taking your medication",
)

SYSTEM_PROMPT = """You are a compassionate mental health support assistant trained in evidence-based approaches including:
- Cognitive Behavioral Therapy (CBT)
- Behavioral Activation
- Dialectical Behavior Therapy (DBT) skills
- Motivational Interviewing

Rules:
1. Validate the user's experience using reflective listening
2. NEVER provide medical advice or diagnoses
3. NEVER encourage harmful behaviors
4. Encourage professional support when risk is elevated

You are a supportive resource, not a replacement for professional care."""

RESPONSE_FORMAT = """Respond in this exact JSON format:
{
  "content": "Your empathetic response",
  "therapeutic_techniques": ["technique"],
  "supportive_elements": ["validation"],
  "recommended_actions": ["action"],
  "coping_strategies": ["strategy"],
  "risk_assessment": {"reasoning": "why", "confidence": 0.0, "safety_plan": ["step"]},
  "follow_up_suggestions": ["suggestion"],
  "resource_recommendations": ["resource"]
}"""

TIER_GUIDANCE = {
    RiskLevel.LOW: "Supportive, educational, skill-building focus",
    RiskLevel.MEDIUM: "Structured intervention, coping skills, professional resources",
    RiskLevel.HIGH: "Safety planning and immediate professional referral",
}


class ResponseSource(Enum):
    """Where the response text came from."""
    CRISIS_PROTOCOL = "crisis_protocol"
    LLM_GENERATED = "llm_generated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class TherapeuticResponse:
    """Assistant reply plus the reasoning metadata shown to clinicians."""
    content: str
    source: ResponseSource
    risk_level: RiskLevel
    confidence: float
    reasoning: str = ""
    context: str = "general"
    therapeutic_techniques: List[str] = field(default_factory=list)
    supportive_elements: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    coping_strategies: List[str] = field(default_factory=list)
    safety_plan: List[str] = field(default_factory=list)
    follow_up_suggestions: List[str] = field(default_factory=list)
    resource_recommendations: List[str] = field(default_factory=list)

    @property
    def llm_bypassed(self) -> bool:
        return self.source != ResponseSource.LLM_GENERATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "source": self.source.value,
            "llm_bypassed": self.llm_bypassed,
            "context": self.context,
            "therapeutic_techniques": list(self.therapeutic_techniques),
            "supportive_elements": list(self.supportive_elements),
            "recommended_actions": list(self.recommended_actions),
            "coping_strategies": list(self.coping_strategies),
            "risk_assessment": {
                "level": self.risk_level.value,
                "reasoning": self.reasoning,
                "confidence": round(self.confidence, 3),
                "safety_plan": list(self.safety_plan),
            },
            "follow_up_suggestions": list(self.follow_up_suggestions),
            "resource_recommendations": list(self.resource_recommendations),
        }


class UnsafeResponseError(ValueError):
    """Model output matched a harmful or medical-advice pattern."""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


def find_unsafe_pattern(text: str) -> Optional[str]:
    """Return the first harmful or medical-advice pattern in ``text``."""
    lowered = text.lower()
    for pattern in HARMFUL_PATTERNS + MEDICAL_PATTERNS:
        if pattern in lowered:
            return pattern
    return None


class ResponseGenerator:
    """Produces therapeutic replies for analysed messages.

    The model is optional: without one every non-crisis reply is the
    deterministic fallback.
    """

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        locale: str = DEFAULT_LOCALE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.llm = llm
        self.locale = locale
        self.timeout_seconds = timeout_seconds

        logger.info(
            "RESPONSE_GENERATOR_INITIALIZED",
            extra={
                "llm_configured": llm is not None,
                "locale": locale,
                "timeout_seconds": timeout_seconds,
            }
        )

    async def generate(
        self,
        message: Optional[str],
        analysis: AnalysisResult,
        history: Optional[Sequence[str]] = None,
    ) -> TherapeuticResponse:
        """Generate a reply for one message.

        Args:
            message: The user's message
            analysis: Its AnalysisResult
            history: Earlier turns, oldest first

        Returns:
            TherapeuticResponse (never raises)
        """
        text_hash = hash_text_for_audit(message if isinstance(message, str) else "")

        if analysis.keyword_analysis.has_risk_keywords:
            logger.critical(
                "CRISIS_DETECTED_LLM_BYPASSED",
                extra={
                    "text_hash": text_hash,
                    "risk_keyword_count": len(analysis.keyword_analysis.risk_keywords),
                }
            )
            return self._crisis_response()

        context = classify_context(message, analysis)
        if self.llm is None:
            return self._fallback_response(context, analysis.risk_level, text_hash, "llm_not_configured")

        prompt = self.build_prompt(message or "", analysis, history or [])
        try:
            llm_response = await asyncio.wait_for(
                self.llm.generate(
                    prompt,
                    system_prompt=SYSTEM_PROMPT,
                    temperature=RESPONSE_TEMPERATURE,
                    max_tokens=RESPONSE_MAX_TOKENS,
                ),
                timeout=self.timeout_seconds,
            )
            response = self.parse_response(llm_response.text, analysis.risk_level, context)
        except asyncio.TimeoutError:
            logger.error(
                "LLM_RESPONSE_TIMEOUT",
                extra={"text_hash": text_hash, "timeout_seconds": self.timeout_seconds}
            )
            return self._fallback_response(context, analysis.risk_level, text_hash, "timeout")
        except UnsafeResponseError as e:
            logger.critical(
                "LLM_RESPONSE_FAILED_SAFETY_CHECK",
                extra={"text_hash": text_hash, "pattern": str(e)}
            )
            return self._fallback_response(context, analysis.risk_level, text_hash, "unsafe_content")
        except Exception as e:
            logger.error(
                "LLM_RESPONSE_FAILED",
                extra={"text_hash": text_hash, "error": str(e), "error_type": type(e).__name__}
            )
            return self._fallback_response(context, analysis.risk_level, text_hash, "llm_error")

        logger.info(
            "LLM_RESPONSE_GENERATED",
            extra={
                "text_hash": text_hash,
                "context": context,
                "risk_level": analysis.risk_level.value,
                "latency_ms": llm_response.latency_ms,
                "tokens_used": llm_response.tokens_used,
            }
        )
        return response

    def build_prompt(
        self,
        message: str,
        analysis: AnalysisResult,
        history: Sequence[str],
    ) -> str:
        plan = analysis.therapeutic_recommendations or recommend(
            analysis.risk_level, locale=self.locale
        )
        indicators = analysis.clinical_indicators
        recent = " | ".join(list(history)[-HISTORY_TURNS:])

        return "\n".join([
            f'User message: "{message}"',
            f"Risk level: {analysis.risk_level.value}",
            f"Sentiment: {analysis.sentiment.value}",
            f"Confidence: {analysis.confidence:.2f}",
            f"PHQ-9 estimate: {indicators.phq9_score} ({indicators.severity_level.value})",
            f"Symptom clusters: {', '.join(indicators.symptom_clusters) or 'none'}",
            f"Risk factors: {', '.join(indicators.risk_factors) or 'none'}",
            f"Protective factors: {', '.join(indicators.protective_factors) or 'none'}",
            f"Conversation history: {recent or 'none'}",
            f"Recommended techniques: {', '.join(plan.cb_techniques)}",
            f"Suggested interventions: {', '.join(plan.interventions)}",
            f"Guidance for this risk level: {TIER_GUIDANCE[analysis.risk_level]}",
            "",
            RESPONSE_FORMAT,
        ])

    def parse_response(self, raw: str, risk_level: RiskLevel, context: str) -> TherapeuticResponse:
        """Parse model output into a TherapeuticResponse.

        Raises:
            ValueError: If the output is not a JSON object with content
            UnsafeResponseError: If the content fails the safety check
        """
        parsed = json.loads(_FENCE_PATTERN.sub("", raw or "").strip())
        if not isinstance(parsed, dict):
            raise ValueError("Model output is not a JSON object")

        content = str(parsed.get("content") or "").strip()
        if not content:
            raise ValueError("Model output has no content")

        unsafe = find_unsafe_pattern(content)
        if unsafe:
            raise UnsafeResponseError(unsafe)

        assessment = parsed.get("risk_assessment")
        if not isinstance(assessment, dict):
            assessment = {}
        try:
            confidence = float(assessment.get("confidence", DEFAULT_MODEL_CONFIDENCE))
        except (TypeError, ValueError):
            confidence = DEFAULT_MODEL_CONFIDENCE

        return TherapeuticResponse(
            content=content,
            source=ResponseSource.LLM_GENERATED,
            risk_level=risk_level,
            confidence=min(1.0, max(0.0, confidence)),
            reasoning=str(assessment.get("reasoning") or "Standard supportive response"),
            context=context,
            therapeutic_techniques=_string_list(parsed.get("therapeutic_techniques")),
            supportive_elements=_string_list(parsed.get("supportive_elements")),
            recommended_actions=_string_list(parsed.get("recommended_actions")),
            coping_strategies=_string_list(parsed.get("coping_strategies")),
            safety_plan=_string_list(assessment.get("safety_plan")),
            follow_up_suggestions=_string_list(parsed.get("follow_up_suggestions")),
            resource_recommendations=_string_list(parsed.get("resource_recommendations")),
        )

    def _crisis_response(self) -> TherapeuticResponse:
        table = get_table(self.locale)
        return TherapeuticResponse(
            content=crisis_text(self.locale),
            source=ResponseSource.CRISIS_PROTOCOL,
            risk_level=RiskLevel.HIGH,
            confidence=1.0,
            reasoning="Risk keyword detected; crisis protocol applied",
            context="crisis",
            supportive_elements=["validation", "safety_focus"],
            recommended_actions=list(table.recommended_actions.get(RiskLevel.HIGH, ())),
            safety_plan=["Contact a crisis line now", "Stay with someone you trust"],
            resource_recommendations=list(table.crisis_resources),
        )

    def _fallback_response(
        self,
        context: str,
        risk_level: RiskLevel,
        text_hash: str,
        reason: str,
    ) -> TherapeuticResponse:
        table = get_table(self.locale)
        logger.info(
            "FALLBACK_RESPONSE_USED",
            extra={
                "text_hash": text_hash,
                "context": context,
                "risk_level": risk_level.value,
                "reason": reason,
            }
        )
        return TherapeuticResponse(
            content=fallback_text(context, risk_level, self.locale),
            source=ResponseSource.FALLBACK,
            risk_level=risk_level,
            confidence=FALLBACK_CONFIDENCE,
            reasoning="Fallback assessment based on keyword and linguistic patterns",
            context=context,
            supportive_elements=list(table.supportive_elements.get(risk_level, ())),
            recommended_actions=list(table.recommended_actions.get(risk_level, ())),
            resource_recommendations=(
                list(table.crisis_resources) if risk_level == RiskLevel.HIGH else []
            ),
        )
