"""Structured results extracted from model text."""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

NOT_AVAILABLE = "N/A"

NUTRITION_FIELDS = ("Calories", "Fat", "Sodium", "Carbohydrates", "Fiber", "Protein")

REJECTED_BLURRY = "blurry"
REJECTED_NOT_A_FRIDGE = "not_a_fridge"


@dataclass(frozen=True)
class IdentificationResult:
    items: Tuple[str, ...] = ()
    valid: bool = True
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "items": list(self.items),
            "valid": self.valid,
            "rejection_reason": self.rejection_reason,
        }


@dataclass(frozen=True)
class NutritionRecord:
    item_name: str
    display_name: str
    text: str
    fields: Mapping[str, str]
    rows: Tuple[Tuple[str, str], ...] = ()

    def to_dict(self) -> dict:
        return {
            "item_name": self.item_name,
            "display_name": self.display_name,
            "text": self.text,
            "fields": dict(self.fields),
            "rows": [{"label": k, "value": v} for k, v in self.rows],
        }


@dataclass(frozen=True)
class Recipe:
    text: str

    @property
    def title(self) -> str:
        for line in self.text.splitlines():
            if line.strip():
                return line.strip()
        return ""

    def to_dict(self) -> dict:
        return {"title": self.title, "text": self.text}
