"""
Owner-scoped persistence for meal plans, their meals and shopping lists.

Every query filters on the caller's user id; a plan that exists but belongs
to someone else is indistinguishable from a missing one. Meals and shopping
lists are removed by the store's ON DELETE CASCADE, never by this module.

Expected tables (Postgres):
  meal_plans      id uuid pk, user_id uuid, created_at timestamptz default now(), plan_input jsonb
  meals           id uuid pk, plan_id uuid fk -> meal_plans on delete cascade, day int, type text, recipe_data jsonb
  shopping_lists  id uuid pk, plan_id uuid fk -> meal_plans on delete cascade UNIQUE, list_content jsonb,
                  created_at timestamptz default now()
"""
import logging
import math
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from app.core.errors import ConflictError, PersistenceError, ValidationError
from app.schemas.meal_plan import CreateMealPlanCommand

logger = logging.getLogger(__name__)

PLANS_TABLE = "meal_plans"
MEALS_TABLE = "meals"
SHOPPING_TABLE = "shopping_lists"
MAX_PAGE_SIZE = 100
UNIQUE_VIOLATION = "23505"


def _execute(query, action: str):
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as exc:
        logger.error("Supabase failed to %s: %s", action, getattr(exc, "message", exc))
        raise PersistenceError(f"Failed to {action}") from exc


def _rows(res) -> List[Dict[str, Any]]:
    return getattr(res, "data", []) or []


# ---------- Meal plans ----------
def create_meal_plan(sb: Client, owner_id: str, command: CreateMealPlanCommand) -> Dict[str, Any]:
    res = _execute(
        sb.table(PLANS_TABLE).insert({
            "user_id": owner_id,
            "plan_input": command.plan_input.model_dump(by_alias=True),
        }),
        "create meal plan",
    )
    rows = _rows(res)
    if not rows:
        raise PersistenceError("Failed to create meal plan")
    plan = rows[0]

    meal_rows = [
        {
            "plan_id": plan["id"],
            "day": m.day,
            "type": m.type,
            "recipe_data": m.recipe_data.model_dump(),
        }
        for m in command.meals
    ]
    try:
        _execute(sb.table(MEALS_TABLE).insert(meal_rows), "create meals for the plan")
    except PersistenceError:
        _discard_plan(sb, owner_id, plan["id"])
        raise
    logger.info("Created meal plan %s with %d meals", plan["id"], len(meal_rows))
    return plan


def _discard_plan(sb: Client, owner_id: str, plan_id: str) -> None:
    """Compensating delete after a failed meal insert. Safe to repeat."""
    try:
        sb.table(PLANS_TABLE).delete().eq("id", plan_id).eq("user_id", owner_id).execute()
        logger.warning("Rolled back meal plan %s after meal insert failure", plan_id)
    except (APIError, httpx.HTTPError) as exc:
        # the original insert failure is what the caller sees
        logger.error("Could not roll back meal plan %s, row is orphaned: %s", plan_id, exc)


def list_meal_plans(sb: Client, owner_id: str, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
    if page < 1 or page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError("Invalid pagination parameters")

    count_res = _execute(
        sb.table(PLANS_TABLE).select("id", count="exact").eq("user_id", owner_id).limit(1),
        "count meal plans",
    )
    total = getattr(count_res, "count", None) or 0

    start = (page - 1) * page_size
    items: List[Dict[str, Any]] = []
    if start < total:
        res = _execute(
            sb.table(PLANS_TABLE)
            .select("id, created_at, plan_input")
            .eq("user_id", owner_id)
            .order("created_at", desc=True)
            .range(start, start + page_size - 1),
            "list meal plans",
        )
        items = _rows(res)

    return {
        "data": items,
        "pagination": {
            "currentPage": page,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size),
            "totalItems": total,
        },
    }


def get_meal_plan(sb: Client, owner_id: str, plan_id: str) -> Optional[Dict[str, Any]]:
    res = _execute(
        sb.table(PLANS_TABLE).select("*").eq("id", plan_id).eq("user_id", owner_id).limit(1),
        "get meal plan",
    )
    rows = _rows(res)
    return rows[0] if rows else None


def list_meals(sb: Client, plan_id: str) -> List[Dict[str, Any]]:
    res = _execute(
        sb.table(MEALS_TABLE)
        .select("*")
        .eq("plan_id", plan_id)
        .order("day", desc=False)
        .order("type", desc=False),
        "get meals",
    )
    return _rows(res)


def get_meal_plan_details(sb: Client, owner_id: str, plan_id: str) -> Optional[Dict[str, Any]]:
    plan = get_meal_plan(sb, owner_id, plan_id)
    if not plan:
        return None
    meals = list_meals(sb, plan_id)
    try:
        shopping_list = get_shopping_list(sb, plan_id)
    except PersistenceError:
        # optional part of the view
        shopping_list = None
    return {**plan, "meals": meals, "shoppingList": shopping_list}


def delete_meal_plan(sb: Client, owner_id: str, plan_id: str) -> bool:
    if not get_meal_plan(sb, owner_id, plan_id):
        return False
    _execute(
        sb.table(PLANS_TABLE).delete().eq("id", plan_id).eq("user_id", owner_id),
        "delete meal plan",
    )
    logger.info("Deleted meal plan %s", plan_id)
    return True


# ---------- Shopping lists ----------
def get_shopping_list(sb: Client, plan_id: str) -> Optional[Dict[str, Any]]:
    res = _execute(
        sb.table(SHOPPING_TABLE).select("*").eq("plan_id", plan_id).limit(1),
        "get shopping list",
    )
    rows = _rows(res)
    return rows[0] if rows else None


def insert_shopping_list(sb: Client, plan_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
    query = sb.table(SHOPPING_TABLE).insert({"plan_id": plan_id, "list_content": content})
    try:
        res = query.execute()
    except APIError as exc:
        if exc.code == UNIQUE_VIOLATION:
            raise ConflictError() from exc
        logger.error("Supabase failed to save shopping list: %s", exc.message)
        raise PersistenceError("Failed to save shopping list") from exc
    except httpx.HTTPError as exc:
        logger.error("Supabase failed to save shopping list: %s", exc)
        raise PersistenceError("Failed to save shopping list") from exc
    rows = _rows(res)
    if not rows:
        raise PersistenceError("Failed to save shopping list")
    return rows[0]
