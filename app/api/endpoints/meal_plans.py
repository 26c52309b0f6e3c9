import logging
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response, status
from supabase import Client

from app.core.errors import NotFoundError
from app.core.security import CurrentUser, get_current_user
from app.db.database import get_supabase
from app.meal_plans import repository
from app.meal_plans.ai_service import generate_meal_plan
from app.meal_plans.shopping_list import generate_shopping_list
from app.schemas.meal_plan import CreateMealPlanCommand, MealPlanList, PlanInput

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------- Routes: AI Plan Generation ----------
@router.post("/generate")
def generate_plan(body: PlanInput, user: CurrentUser = Depends(get_current_user)):
    """Generate a plan with AI. Nothing is saved; the client keeps the draft."""
    logger.info("Generating %d-day plan for user %s", body.days_count, user.id)
    plan = generate_meal_plan(body)
    return plan.model_dump()


# ---------- Routes: Saved plans ----------
@router.post("", status_code=status.HTTP_201_CREATED)
def create_plan(
    body: CreateMealPlanCommand,
    user: CurrentUser = Depends(get_current_user),
    sb: Client = Depends(get_supabase),
):
    return repository.create_meal_plan(sb, user.id, body)


@router.get("", response_model=MealPlanList)
def list_plans(
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    user: CurrentUser = Depends(get_current_user),
    sb: Client = Depends(get_supabase),
):
    return repository.list_meal_plans(sb, user.id, page, page_size)


@router.get("/{plan_id}")
def get_plan(
    plan_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    sb: Client = Depends(get_supabase),
):
    details = repository.get_meal_plan_details(sb, user.id, str(plan_id))
    if not details:
        raise NotFoundError()
    return details


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    sb: Client = Depends(get_supabase),
) -> Response:
    if not repository.delete_meal_plan(sb, user.id, str(plan_id)):
        raise NotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Routes: Shopping list ----------
@router.post("/{plan_id}/shopping-list", status_code=status.HTTP_201_CREATED)
def create_shopping_list(
    plan_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    sb: Client = Depends(get_supabase),
):
    return generate_shopping_list(sb, user.id, str(plan_id))
