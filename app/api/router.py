from fastapi import APIRouter
from app.api.endpoints import meal_plans, meals

api_router = APIRouter()

api_router.include_router(meal_plans.router, prefix="/meal-plans", tags=["meal-plans"])
api_router.include_router(meals.router, prefix="/meals", tags=["meals"])
