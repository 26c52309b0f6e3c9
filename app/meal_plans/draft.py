"""
Unsaved plan state for the generation view.

A generated plan lives on the client until the user saves it. The API itself
is stateless, so nothing in the request handlers holds a `PlanDraft`; this is
the client-side helper for Python callers of the API. It holds the input that
produced a plan together with the plan itself, builds the
`existingMealsForDay` context for a regeneration request, splices the
regenerated meal back into place, turns the result into the body for
`POST /api/meal-plans`, and serialises through an explicit
`to_json` / `from_json` pair instead of ambient storage.
"""
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.meal_plan import (
    CreateMealPlanCommand,
    ExistingMeal,
    GeneratedPlan,
    Meal,
    MealToSave,
    PlanDay,
    PlanDays,
    PlanInput,
)


class PlanDraft(BaseModel):
    plan_input: PlanInput
    plan: Optional[GeneratedPlan] = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "PlanDraft":
        return cls.model_validate_json(raw)

    def meals_for_day(self, day: int) -> List[Meal]:
        if self.plan is None:
            return []
        for d in self.plan.plan.days:
            if d.day == day:
                return list(d.meals)
        return []

    def existing_meals_for(self, day: int, meal_type: str) -> List[ExistingMeal]:
        """The other meals of `day`, reduced to what a regeneration prompt needs."""
        return [
            ExistingMeal.model_validate({
                "type": m.type,
                "recipe": {"name": m.recipe.name, "portions": [p.model_dump() for p in m.recipe.portions]},
            })
            for m in self.meals_for_day(day)
            if m.type != meal_type
        ]

    def replace_meal(self, meal: Meal) -> "PlanDraft":
        """Return a new draft with `meal` at its (day, type) slot."""
        if self.plan is None:
            raise ValueError("Draft has no generated plan")
        days: List[PlanDay] = []
        found = False
        for d in self.plan.plan.days:
            if d.day != meal.day:
                days.append(d)
                continue
            meals = []
            for m in d.meals:
                if m.type == meal.type:
                    meals.append(meal)
                    found = True
                else:
                    meals.append(m)
            days.append(PlanDay(day=d.day, meals=meals))
        if not found:
            raise KeyError(f"No {meal.type!r} meal on day {meal.day}")
        return self.model_copy(update={"plan": GeneratedPlan(plan=PlanDays(days=days))})

    def to_create_command(self) -> CreateMealPlanCommand:
        if self.plan is None:
            raise ValueError("Draft has no generated plan")
        meals = [
            MealToSave(day=m.day, type=m.type, recipe_data=m.recipe)
            for d in self.plan.plan.days
            for m in d.meals
        ]
        return CreateMealPlanCommand(plan_input=self.plan_input, meals=meals)
