"""
Routines Router
Model selection, cost and validation for AI-generated routines
"""

from typing import Any, Dict, Union

from fastapi import APIRouter, Body, Query

from ..services import SubscriptionPlan, calculate_usage_cost, select_model, validate_generated_routine
from ..services.routine_contract import GeneratedRoutine

router = APIRouter(prefix="/routines", tags=["Routines"])


@router.get("/model/{plan}")
async def get_plan_model(
    plan: SubscriptionPlan,
    prompt_tokens: int = Query(default=0, ge=0, alias="promptTokens"),
    completion_tokens: int = Query(default=0, ge=0, alias="completionTokens"),
):
    """
    Which chat model a subscription plan uses, and what a call would cost.

    - **plan**: free, premium or pro
    - **promptTokens** / **completionTokens**: token counts to price (USD cents)
    """
    model = select_model(plan)
    return {
        "plan": plan.value,
        "model": model,
        "estimatedCost": calculate_usage_cost(model, prompt_tokens, completion_tokens),
    }


@router.post("/validate", response_model=GeneratedRoutine)
async def validate_routine(routine: Union[Dict[str, Any], str] = Body(...)):
    """
    Normalize a routine returned by the chat model.

    Accepts the JSON object itself or the raw text the model produced.
    """
    return validate_generated_routine(routine)
