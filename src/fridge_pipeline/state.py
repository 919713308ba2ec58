from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from src.image_encoder import ImagePayload
from src.models import IdentificationResult, NutritionRecord, Recipe


class IdentificationStatus(str, Enum):
    NO_IMAGE = "no_image"
    IDLE = "idle"
    IDENTIFYING = "identifying"
    ITEMS_READY = "items_ready"
    REJECTED = "rejected"
    FAILED = "failed"


class NutritionStatus(str, Enum):
    NOT_FETCHED = "not_fetched"
    FETCHING = "fetching"
    AVAILABLE = "available"
    FAILED = "failed"


class RecipeStatus(str, Enum):
    DISABLED = "disabled"
    IDLE = "idle"
    GENERATING = "generating"
    AVAILABLE = "available"
    FAILED = "failed"


@dataclass
class NutritionEntry:
    status: NutritionStatus = NutritionStatus.NOT_FETCHED
    record: Optional[NutritionRecord] = None


@dataclass
class PipelineState:
    """
    Single source of truth for one session.

    `epoch` is bumped whenever upstream results are invalidated (new image,
    new identification run); in-flight calls compare it on completion.

    The `*_call_in_flight` flags mark model calls that have been issued and
    not yet returned. They outlive a new image selection, since a call can't
    be cancelled once issued.
    """

    image: Optional[ImagePayload] = None
    identification_status: IdentificationStatus = IdentificationStatus.NO_IMAGE
    identification: Optional[IdentificationResult] = None
    nutrition: Dict[str, NutritionEntry] = field(default_factory=dict)
    viewed_item: Optional[str] = None
    recipe_status: RecipeStatus = RecipeStatus.DISABLED
    recipes: List[Recipe] = field(default_factory=list)
    error: Optional[str] = None
    epoch: int = 0
    identify_call_in_flight: bool = False
    nutrition_call_in_flight: bool = False
    recipes_call_in_flight: bool = False

    @property
    def items(self) -> tuple:
        if self.identification is None or not self.identification.valid:
            return ()
        return self.identification.items

    def nutrition_status(self, item_name: str) -> NutritionStatus:
        entry = self.nutrition.get(item_name)
        return entry.status if entry else NutritionStatus.NOT_FETCHED

    def snapshot(self) -> Dict[str, Any]:
        image = None
        if self.image is not None:
            image = {
                "filename": self.image.filename,
                "media_type": self.image.media_type,
                "size": self.image.size,
            }

        return {
            "epoch": self.epoch,
            "image": image,
            "identification": {
                "status": self.identification_status.value,
                "in_flight": self.identify_call_in_flight,
                "items": list(self.items),
                "rejection_reason": (
                    self.identification.rejection_reason if self.identification else None
                ),
            },
            "nutrition": {
                "viewed_item": self.viewed_item,
                "in_flight": self.nutrition_call_in_flight,
                "entries": {
                    name: {
                        "status": entry.status.value,
                        "record": entry.record.to_dict() if entry.record else None,
                    }
                    for name, entry in self.nutrition.items()
                },
            },
            "recipes": {
                "status": self.recipe_status.value,
                "in_flight": self.recipes_call_in_flight,
                "items": [r.to_dict() for r in self.recipes],
            },
            "error": self.error,
            "actions": {
                "can_identify": can_identify(self),
                "can_fetch_nutrition": can_fetch_nutrition(self),
                "can_generate_recipes": can_generate_recipes(self),
            },
        }


# -----------------------------------
# Gating rules (pure functions of state)
# -----------------------------------


def can_identify(state: PipelineState) -> bool:
    return (
        state.image is not None
        and state.identification_status != IdentificationStatus.IDENTIFYING
        and not state.identify_call_in_flight
    )


def can_fetch_nutrition(state: PipelineState, item_name: Optional[str] = None) -> bool:
    if state.identification_status != IdentificationStatus.ITEMS_READY:
        return False
    if state.nutrition_call_in_flight:
        return False
    if item_name is None:
        return len(state.items) > 0
    return item_name in state.items


def can_generate_recipes(state: PipelineState) -> bool:
    return (
        state.identification_status == IdentificationStatus.ITEMS_READY
        and len(state.items) > 0
        and state.recipe_status != RecipeStatus.GENERATING
        and not state.recipes_call_in_flight
    )
