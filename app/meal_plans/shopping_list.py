import logging
from typing import Any, Dict, List

from supabase import Client

from app.core.errors import ConflictError, EmptyPlanError, NotFoundError
from . import repository
from .ai_service import categorize_ingredients

logger = logging.getLogger(__name__)


def flatten_ingredients(meals: List[Dict[str, Any]]) -> List[str]:
    """Every ingredient of every meal as an "item: quantity" line."""
    lines: List[str] = []
    for meal in meals:
        recipe = meal.get("recipe_data") or {}
        for ing in recipe.get("ingredients") or []:
            lines.append(f"{ing.get('item', '')}: {ing.get('quantity', '')}")
    return lines


def generate_shopping_list(sb: Client, owner_id: str, plan_id: str) -> Dict[str, Any]:
    if not repository.get_meal_plan(sb, owner_id, plan_id):
        raise NotFoundError()
    # fast path only; the unique constraint on plan_id is what rules out duplicates
    if repository.get_shopping_list(sb, plan_id):
        raise ConflictError()
    meals = repository.list_meals(sb, plan_id)
    if not meals:
        raise EmptyPlanError()

    lines = flatten_ingredients(meals)
    logger.info("Categorising %d ingredients for plan %s", len(lines), plan_id)
    content = categorize_ingredients(lines)
    return repository.insert_shopping_list(sb, plan_id, content)
