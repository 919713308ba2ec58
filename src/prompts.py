"""Prompts for OpenAI models."""

BLURRY_SENTINEL = "This image is too blurry"
NOT_A_FRIDGE_SENTINEL = "This is not a fridge"

IDENTIFY_PROMPT = (
    "Identify all the food items in the fridge. "
    "List as many as possible with only the name of the food, one per line. "
    f"If the image is too blurry or not a fridge say {BLURRY_SENTINEL} "
    f"or {NOT_A_FRIDGE_SENTINEL}"
)

NUTRITION_PROMPT = """
Provide nutritional facts for {item} with only the categories listed below. Do not generate anything else:

Calories: (Must be number or approximate)cal
Fat: (Must be number or approximate)g
Sodium: (Must be number or approximate)mg
Carbohydrates: (Must be number or approximate)g
Fiber: (Must be number or approximate)g
Protein: (Must be number or approximate)g
Note: This is a general guideline. Always check the nutrition label for the specific brand and variety of {item} you are using.
"""

RECIPES_PROMPT = (
    "Suggest 3 recipes that can be made using the following items: {items}. "
    "Number them 1., 2. and 3. "
    "For each recipe, provide the name, a short description, ingredients, and the instructions. "
    "For the instructions dont use numbers use words like First second"
)
