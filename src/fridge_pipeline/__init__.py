"""
Fridge pipeline package:
- state: PipelineState aggregate, per-flow status enums and gating rules
- pipeline: FridgePipeline intents (select image, identify, nutrition, recipes)
"""

from .pipeline import FridgePipeline
from .state import (
    IdentificationStatus,
    NutritionStatus,
    PipelineState,
    RecipeStatus,
    can_fetch_nutrition,
    can_generate_recipes,
    can_identify,
)

__all__ = [
    "FridgePipeline",
    "IdentificationStatus",
    "NutritionStatus",
    "PipelineState",
    "RecipeStatus",
    "can_fetch_nutrition",
    "can_generate_recipes",
    "can_identify",
]
