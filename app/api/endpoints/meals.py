from fastapi import APIRouter, Depends

from app.core.security import CurrentUser, get_current_user
from app.meal_plans.ai_service import regenerate_meal
from app.schemas.meal_plan import RegenerateMealCommand

router = APIRouter()


@router.post("/regenerate")
def regenerate(body: RegenerateMealCommand, user: CurrentUser = Depends(get_current_user)):
    """
    Regenerate one meal of an unsaved plan. The other meals of the day are
    passed in so the model can avoid repeating them; splicing the result back
    into the plan is up to the client.
    """
    meal = regenerate_meal(body.plan_input, body.meal_to_regenerate, body.existing_meals_for_day)
    return meal.model_dump()
