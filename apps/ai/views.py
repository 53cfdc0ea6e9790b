"""AI assistance endpoints."""

from __future__ import annotations

from rest_framework.views import APIView

from apps.accounts.decorators import with_account
from apps.accounts.policy import bind_lead
from apps.ai.analysis import analyze_sentiment, recommend_next_action
from apps.common.api import BudgetThrottle, ok_response
from apps.common.errors import ValidationError

RECOMMENDATION_CONFIDENCE = 0.85


class NextBestActionView(APIView):
    throttle_classes = [BudgetThrottle]
    rate_budget = "ai_context"

    @with_account
    def get(self, request, lead_id: int):
        db, lead = bind_lead(request.account, lead_id)
        recommendation = recommend_next_action(lead.status)
        recent = db.interactions().filter(lead=lead).order_by("-created_at")[:5]
        return ok_response(
            {
                "action": recommendation.action,
                "reasoning": recommendation.reasoning,
                "suggested_script": recommendation.suggested_script,
                "confidence": RECOMMENDATION_CONFIDENCE,
                "lead_status": lead.status,
                "interaction_count": len(recent),
            }
        )


class SentimentView(APIView):
    throttle_classes = [BudgetThrottle]
    rate_budget = "ai_context"

    def post(self, request):
        text = (request.data or {}).get("text")
        if not isinstance(text, str):
            raise ValidationError()
        return ok_response(analyze_sentiment(text))
