from app.meal_plans import prompts
from app.schemas.meal_plan import ExistingMeal, MealTarget, PlanInput
from factories import make_plan_input

INPUT = PlanInput.model_validate(make_plan_input(
    peopleCount=2,
    daysCount=3,
    excludedIngredients=["orzechy", "grzyby"],
    mealsToPlan=["śniadanie", "kolacja"],
))


def test_plan_prompt_embeds_every_input_field():
    text = prompts.build_meal_plan_prompt(INPUT, "Polish")

    assert "Number of people: 2" in text
    assert "Number of days: 3" in text
    assert "Cuisine: Polska" in text
    assert "Excluded ingredients: orzechy, grzyby" in text
    assert '[{"person": 1, "calories": 2000}, {"person": 2, "calories": 1800}]' in text
    assert "Meals to plan: śniadanie, kolacja" in text
    assert '"days": [' in text
    assert "5. All recipe names, ingredients and instructions are in Polish" in text


def test_no_exclusions_marker():
    bare = PlanInput.model_validate(make_plan_input())
    assert "Excluded ingredients: none" in prompts.build_meal_plan_prompt(bare, "Polish")


def test_regenerate_prompt_summarises_day():
    existing = [ExistingMeal.model_validate({
        "type": "śniadanie",
        "recipe": {"name": "Jajecznica", "portions": [{"person": 1, "grams": 200}]},
    })]
    text = prompts.build_regenerate_meal_prompt(INPUT, MealTarget(day=2, type="kolacja"), existing, "Polish")

    assert "- Day: 2" in text
    assert "- Meal type: kolacja" in text
    assert '"name": "Jajecznica"' in text
    assert '"type": "kolacja"' in text
    assert "ingredients\": [{\"item\"" in text  # shape example only


def test_shopping_prompt_lists_lines_and_categories():
    text = prompts.build_shopping_list_prompt(["mąka: 200g", "mleko: 1 l"], "Polish")
    assert "mąka: 200g\nmleko: 1 l" in text
    for category in prompts.SHOPPING_CATEGORIES:
        assert f"- {category}" in text
