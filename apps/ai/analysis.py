"""Interaction analysis backed by an OpenAI-compatible chat API.

Without ``AI_API_KEY`` a fixed stub result is returned, so enrichment keeps
working in development and tests.
"""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

import requests
from django.conf import settings

from apps.leads.models import Interaction, LeadStatus

logger = logging.getLogger(__name__)


class AIAnalysisError(RuntimeError):
    """Raised for recoverable analysis errors; callers may retry."""


@dataclass
class InteractionAnalysis:
    sentiment: float
    key_topics: List[str] = field(default_factory=list)
    objections: List[str] = field(default_factory=list)
    motivations: List[str] = field(default_factory=list)
    next_best_action: str = ""
    summary: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "InteractionAnalysis":
        try:
            return cls(
                sentiment=float(payload["sentiment"]),
                key_topics=[str(item) for item in payload.get("key_topics", [])],
                objections=[str(item) for item in payload.get("objections", [])],
                motivations=[str(item) for item in payload.get("motivations", [])],
                next_best_action=str(payload.get("next_best_action", "")),
                summary=str(payload.get("summary", "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AIAnalysisError("ai_malformed_response") from exc


STUB_ANALYSIS = InteractionAnalysis(
    sentiment=0.7,
    key_topics=["pricing", "invisalign", "timeline"],
    objections=["concerned about cost"],
    motivations=["wedding in 6 months"],
    next_best_action="Send pricing breakdown email",
    summary=(
        "Positive call. Lead is highly motivated due to upcoming wedding. Main concern is "
        "pricing. Should follow up with detailed breakdown and payment plan options."
    ),
)

ANALYSIS_PROMPT = (
    "You analyse sales conversations for a dental practice. Reply with a JSON object "
    "with keys sentiment (number from -1 to 1), key_topics, objections, motivations "
    "(lists of short strings), next_best_action and summary (strings)."
)


class AIClient:
    def __init__(self) -> None:
        self.api_key = getattr(settings, "AI_API_KEY", "")
        self.api_base = getattr(settings, "AI_API_BASE", "").rstrip("/")
        self.model = getattr(settings, "AI_MODEL", "")
        self.timeout = getattr(settings, "AI_TIMEOUT_SECONDS", 15)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def complete_json(self, system: str, user: str) -> Dict[str, Any]:
        try:
            response = requests.post(
                f"{self.api_base}/v1/chat/completions",
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    "temperature": 0.1,
                    "response_format": {"type": "json_object"},
                },
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AIAnalysisError("ai_unreachable") from exc

        if response.status_code >= 400:
            # Provider bodies can echo the prompt, so only the status is logged.
            logger.error("ai.provider_error", extra={"status_code": response.status_code})
            raise AIAnalysisError("ai_provider_error")

        try:
            content = response.json()["choices"][0]["message"]["content"]
            return json.loads(content)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise AIAnalysisError("ai_malformed_response") from exc


def analyze_interaction(text: str) -> InteractionAnalysis:
    client = AIClient()
    if not client.enabled:
        logger.debug("ai.stub_analysis", extra={"chars": len(text or "")})
        return deepcopy(STUB_ANALYSIS)
    return InteractionAnalysis.from_payload(client.complete_json(ANALYSIS_PROMPT, text))


def analyze_sentiment(text: str) -> Dict[str, float]:
    if not AIClient().enabled:
        return {"score": 0.5, "confidence": 0.9}
    analysis = analyze_interaction(text)
    return {"score": analysis.sentiment, "confidence": 0.9}


def summarize_interactions(interactions: Iterable[Interaction]) -> str:
    """Summarize the given interactions, newest first."""
    items = list(interactions)
    latest = items[0].type if items else "none"
    return (
        f"AI Summary: {len(items)} interactions recorded. Latest: {latest}. "
        "Overall sentiment appears positive. Suggested next action: Follow up with pricing details."
    )


@dataclass(frozen=True)
class Recommendation:
    action: str
    reasoning: str
    suggested_script: str = ""


DEFAULT_RECOMMENDATION = Recommendation("NOTE", "Review lead status and plan next steps")

RECOMMENDATIONS: Dict[str, Recommendation] = {
    LeadStatus.ENQUIRY.value: Recommendation(
        "CALL_OUTBOUND",
        "New enquiry - speed to lead is critical",
        "Hi [name], thanks for your interest in [treatment]. I'd love to help you understand your options...",
    ),
    LeadStatus.NEW.value: Recommendation(
        "CALL_OUTBOUND",
        "Qualified lead, needs first contact",
        "Hi [name], I noticed you're interested in [treatment]. Many of our patients start with a free consultation...",
    ),
    LeadStatus.CONTACTED.value: Recommendation(
        "EMAIL_SENT",
        "Already spoken, send follow-up with details",
        "Great speaking with you! As discussed, here's more information about [treatment] pricing and process...",
    ),
    LeadStatus.QUALIFIED.value: Recommendation(
        "CALL_OUTBOUND",
        "Qualified and engaged - push for appointment",
        "I have availability this week for your consultation. Shall we get you booked in?",
    ),
    LeadStatus.NURTURING.value: Recommendation(
        "SMS_SENT",
        "Keep warm with gentle check-in",
        "Hi [name], just checking in! We have a special offer on [treatment] this month. Would you like to chat?",
    ),
}


def recommend_next_action(status: str) -> Recommendation:
    return RECOMMENDATIONS.get(status, DEFAULT_RECOMMENDATION)
