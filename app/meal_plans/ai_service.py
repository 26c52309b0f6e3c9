import json
import logging
import re
from typing import Any, Dict, List, Type

import google.generativeai as genai
from pydantic import ValidationError as SchemaMismatch

from app.core.config import get_settings
from app.core.errors import GenerationError, UpstreamError, UpstreamSchemaError
from app.schemas.meal_plan import (
    ExistingMeal,
    GeneratedPlan,
    Meal,
    MealTarget,
    PlanInput,
    shopping_list_adapter,
)
from .prompts import (
    PLANNER_SYSTEM_PROMPT,
    SHOPPING_SYSTEM_PROMPT,
    build_meal_plan_prompt,
    build_regenerate_meal_prompt,
    build_shopping_list_prompt,
)

logger = logging.getLogger(__name__)


def _generate_text(system_prompt: str, prompt: str) -> str:
    """Single-shot Gemini call in JSON mode. No retries, no streaming."""
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        raise UpstreamError("GEMINI_API_KEY is not configured")
    genai.configure(api_key=settings.GEMINI_API_KEY)
    model = genai.GenerativeModel(settings.MODEL_NAME, system_instruction=system_prompt)
    response = model.generate_content(
        prompt,
        generation_config=genai.types.GenerationConfig(
            response_mime_type="application/json",
            temperature=settings.TEMPERATURE,
            max_output_tokens=settings.MAX_TOKENS,
        ),
    )
    return (response.text or "").strip()


def _extract_json(text: str) -> str:
    m = re.search(r"```(?:json)?\s*([\[{].*[\]}])\s*```", text, re.DOTALL | re.IGNORECASE)
    if m:
        return m.group(1)
    start = text.find("{"); end = text.rfind("}") + 1
    return text[start:end] if start != -1 and end > start else text


def complete_json(system_prompt: str, prompt: str, stage: str,
                  error_cls: Type[UpstreamError] = UpstreamError) -> Any:
    """Ask the model for JSON and parse it. Any failure surfaces as `error_cls`."""
    try:
        raw = _generate_text(system_prompt, prompt)
    except UpstreamError:
        raise
    except Exception as exc:
        logger.error("Gemini call failed during %s: %s", stage, exc)
        raise error_cls(f"AI request failed during {stage}") from exc
    try:
        return json.loads(_extract_json(raw))
    except json.JSONDecodeError as exc:
        logger.error("Gemini returned non-JSON during %s: %.200s", stage, raw)
        raise error_cls(f"AI returned malformed JSON during {stage}") from exc


def _system(template: str) -> str:
    return template.format(language=get_settings().RESPONSE_LANGUAGE)


def generate_meal_plan(plan_input: PlanInput) -> GeneratedPlan:
    language = get_settings().RESPONSE_LANGUAGE
    data = complete_json(
        _system(PLANNER_SYSTEM_PROMPT),
        build_meal_plan_prompt(plan_input, language),
        stage="generate",
        error_cls=GenerationError,
    )
    plan = data.get("plan") if isinstance(data, dict) else None
    if not isinstance(plan, dict) or "days" not in plan:
        logger.error("AI plan response is missing plan.days")
        raise GenerationError("Invalid AI response structure")
    try:
        return GeneratedPlan.model_validate(data)
    except SchemaMismatch as exc:
        logger.error("AI plan response failed schema validation: %s", exc)
        raise UpstreamSchemaError(detail=exc.errors()) from exc


def regenerate_meal(
    plan_input: PlanInput,
    target: MealTarget,
    existing_meals_for_day: List[ExistingMeal],
) -> Meal:
    language = get_settings().RESPONSE_LANGUAGE
    data = complete_json(
        _system(PLANNER_SYSTEM_PROMPT),
        build_regenerate_meal_prompt(plan_input, target, existing_meals_for_day, language),
        stage="regenerate",
        error_cls=GenerationError,
    )
    if not isinstance(data, dict):
        raise GenerationError("Invalid AI response structure")
    # slot is fixed by the caller, whatever the model echoes back
    data = {**data, "day": target.day, "type": target.type}
    try:
        return Meal.model_validate(data)
    except SchemaMismatch as exc:
        logger.error("AI meal response failed schema validation: %s", exc)
        raise UpstreamSchemaError(detail=exc.errors()) from exc


def categorize_ingredients(ingredient_lines: List[str]) -> Dict[str, List[Dict[str, str]]]:
    language = get_settings().RESPONSE_LANGUAGE
    data = complete_json(
        _system(SHOPPING_SYSTEM_PROMPT),
        build_shopping_list_prompt(ingredient_lines, language),
        stage="shopping-list",
    )
    try:
        content = shopping_list_adapter.validate_python(data)
    except SchemaMismatch as exc:
        logger.error("AI shopping list failed schema validation: %s", exc)
        raise UpstreamSchemaError(detail=exc.errors()) from exc
    return {category: [i.model_dump() for i in items] for category, items in content.items()}
