from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, List, Optional

NonEmptyStr = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    """Accepts both camelCase (wire) and snake_case (Python) field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Plan input ----------
class CalorieTarget(CamelModel):
    person: int = Field(..., ge=1)
    calories: int = Field(..., ge=500, le=5000)

class PlanInput(CamelModel):
    people_count: int = Field(..., ge=1, le=20)
    days_count: int = Field(..., ge=1, le=14)
    cuisine: str = Field(..., min_length=1, max_length=100)
    excluded_ingredients: List[str] = Field(default_factory=list)
    # one entry per person by convention; not cross-checked against people_count
    calorie_targets: List[CalorieTarget]
    meals_to_plan: List[NonEmptyStr] = Field(..., min_length=1)


# ---------- Recipes & meals ----------
class Ingredient(BaseModel):
    item: str
    quantity: str

class Portion(BaseModel):
    person: int = Field(..., ge=1)
    grams: int = Field(..., ge=1)

class Recipe(BaseModel):
    name: NonEmptyStr
    ingredients: List[Ingredient]
    instructions: List[str]
    portions: List[Portion]

class Meal(BaseModel):
    day: int = Field(..., ge=1)
    type: NonEmptyStr
    recipe: Recipe

class PlanDay(BaseModel):
    day: int = Field(..., ge=1)
    meals: List[Meal]

    @model_validator(mode="before")
    @classmethod
    def _stamp_meal_days(cls, data: Any) -> Any:
        # meals are nested as {type, recipe}; their day is the enclosing one
        if not isinstance(data, dict) or not isinstance(data.get("meals"), list):
            return data
        day = data.get("day")
        meals = []
        for m in data["meals"]:
            if isinstance(m, Meal):
                m = m.model_dump()
            if isinstance(m, dict):
                m = {**m, "day": day}
            meals.append(m)
        return {**data, "meals": meals}

class PlanDays(BaseModel):
    days: List[PlanDay]

class GeneratedPlan(BaseModel):
    plan: PlanDays


# ---------- Commands ----------
class MealToSave(CamelModel):
    day: int = Field(..., ge=1)
    type: NonEmptyStr
    recipe_data: Recipe

class CreateMealPlanCommand(CamelModel):
    plan_input: PlanInput
    meals: List[MealToSave] = Field(..., min_length=1)

class MealTarget(BaseModel):
    day: int = Field(..., ge=1)
    type: NonEmptyStr

class PortionSummary(BaseModel):
    person: int
    grams: int

class RecipeSummary(BaseModel):
    name: str
    portions: List[PortionSummary] = Field(default_factory=list)

class ExistingMeal(BaseModel):
    type: str
    recipe: RecipeSummary

class RegenerateMealCommand(CamelModel):
    plan_input: PlanInput
    meal_to_regenerate: MealTarget
    existing_meals_for_day: List[ExistingMeal] = Field(default_factory=list)


# ---------- Responses ----------
ShoppingListContent = Dict[str, List[Ingredient]]
shopping_list_adapter = TypeAdapter(ShoppingListContent)

class Pagination(CamelModel):
    current_page: int
    page_size: int
    total_pages: int
    total_items: int

class MealPlanListItem(BaseModel):
    id: str
    created_at: Optional[str] = None
    plan_input: dict

class MealPlanList(BaseModel):
    data: List[MealPlanListItem]
    pagination: Pagination
