import json
from typing import Iterable, List

from app.schemas.meal_plan import ExistingMeal, MealTarget, PlanInput

PLANNER_SYSTEM_PROMPT = (
    "You are a professional meal planner and dietitian. Respond only in {language}. "
    "All recipe names, ingredients and instructions must be written in {language}."
)

SHOPPING_SYSTEM_PROMPT = (
    "You are a helpful assistant that builds well organised shopping lists. Respond only in {language}. "
    "All category names and ingredient names must be written in {language}."
)

SHOPPING_CATEGORIES = [
    "Vegetables",
    "Fruit",
    "Dairy",
    "Meat & Fish",
    "Grains & Pasta",
    "Spices & Sauces",
    "Other",
]

RECIPE_SHAPE = """{
    "name": "Recipe name",
    "ingredients": [{"item": "ingredient", "quantity": "amount"}],
    "instructions": ["step 1", "step 2"],
    "portions": [{"person": 1, "grams": 250}]
  }"""


def _excluded(plan_input: PlanInput) -> str:
    return ", ".join(plan_input.excluded_ingredients) or "none"


def _calorie_targets(plan_input: PlanInput) -> str:
    return json.dumps([t.model_dump() for t in plan_input.calorie_targets])


def build_meal_plan_prompt(plan_input: PlanInput, language: str) -> str:
    return f"""
Generate a meal plan with the following requirements:
- Number of people: {plan_input.people_count}
- Number of days: {plan_input.days_count}
- Cuisine: {plan_input.cuisine}
- Excluded ingredients: {_excluded(plan_input)}
- Calorie targets per person: {_calorie_targets(plan_input)}
- Meals to plan: {", ".join(plan_input.meals_to_plan)}

Return a JSON object with exactly this structure:
{{
  "plan": {{
    "days": [
      {{
        "day": 1,
        "meals": [
          {{
            "type": "{plan_input.meals_to_plan[0]}",
            "recipe": {RECIPE_SHAPE}
          }}
        ]
      }}
    ]
  }}
}}

Make sure that:
1. Every meal matches the calorie target of each person
2. Portion sizes are given in grams for each person
3. None of the excluded ingredients are used
4. Recipes match the requested cuisine
5. All recipe names, ingredients and instructions are in {language}
""".strip()


def _summarise(existing: Iterable[ExistingMeal]) -> str:
    # name and portions only; full recipes would just inflate the prompt
    return json.dumps([m.model_dump() for m in existing], ensure_ascii=False)


def build_regenerate_meal_prompt(
    plan_input: PlanInput,
    target: MealTarget,
    existing_meals_for_day: List[ExistingMeal],
    language: str,
) -> str:
    return f"""
Regenerate a single meal using the following context:
- Day: {target.day}
- Meal type: {target.type}
- Cuisine: {plan_input.cuisine}
- Excluded ingredients: {_excluded(plan_input)}
- Calorie targets: {_calorie_targets(plan_input)}
- Existing meals for this day: {_summarise(existing_meals_for_day)}

Generate a NEW recipe that:
1. Differs from the existing meals
2. Fits the daily calorie distribution
3. Matches the cuisine
4. Avoids the excluded ingredients

Return a JSON object with exactly this structure:
{{
  "day": {target.day},
  "type": {json.dumps(target.type, ensure_ascii=False)},
  "recipe": {RECIPE_SHAPE}
}}

Make sure all recipe names, ingredients and instructions are in {language}.
""".strip()


def build_shopping_list_prompt(ingredient_lines: List[str], language: str) -> str:
    categories = "\n".join(f"- {c}" for c in SHOPPING_CATEGORIES)
    ingredients = "\n".join(ingredient_lines)
    return f"""
Create an organised shopping list from these ingredients:
{ingredients}

Merge duplicates and group them into categories such as:
{categories}

Return a JSON object whose keys are category names and whose values are arrays of items:
{{
  "Vegetables": [
    {{"item": "Onion", "quantity": "2 large"}},
    {{"item": "Tomato", "quantity": "500g"}}
  ],
  "Dairy": [
    {{"item": "Milk", "quantity": "1 litre"}}
  ]
}}

Make sure all category names and ingredient names are in {language}.
""".strip()
