"""
Cleanup of free-text model output.

The model answers in loose natural language, so everything here is
best-effort: odd shapes degrade to placeholders or empty results and
never raise.
"""

import re
from types import MappingProxyType
from typing import List, Optional, Tuple

from src.models import (
    NOT_AVAILABLE,
    NUTRITION_FIELDS,
    REJECTED_BLURRY,
    REJECTED_NOT_A_FRIDGE,
    IdentificationResult,
    NutritionRecord,
    Recipe,
)
from src.prompts import BLURRY_SENTINEL, NOT_A_FRIDGE_SENTINEL

_SENTINELS = {
    BLURRY_SENTINEL.casefold(): REJECTED_BLURRY,
    NOT_A_FRIDGE_SENTINEL.casefold(): REJECTED_NOT_A_FRIDGE,
}

_BULLET_RE = re.compile(r"^[ \t]*(?:(?:[-+•]+|\d+[.)](?=\s))[ \t]*)+", re.M)
_FENCE_RE = re.compile(r"`{3,}\w*")
_RESIDUE_RE = re.compile(r"^[-+•`\s]*$")
_RECIPE_MARKER_RE = re.compile(r"\d+\.\s+")


def _sentinel_reason(line: str) -> Optional[str]:
    return _SENTINELS.get(line.rstrip(" .!").casefold())


def normalize_item_list(raw: str) -> IdentificationResult:
    """Turn the identification answer into an ordered list of distinct item names."""
    text = (raw or "").strip()
    text = _FENCE_RE.sub("", text).replace("`", "")
    text = text.replace("**", "").replace("*", "")
    text = _BULLET_RE.sub("", text)
    text = re.sub(r"\n\s*\n", "\n", text)

    items: List[str] = []
    seen = set()
    for line in text.split("\n"):
        line = line.strip()
        if _RESIDUE_RE.match(line):
            continue
        reason = _sentinel_reason(line)
        if reason:
            return IdentificationResult(items=(), valid=False, rejection_reason=reason)
        if line not in seen:
            seen.add(line)
            items.append(line)

    return IdentificationResult(items=tuple(items))


def capitalize_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def nutrition_rows(text: str) -> List[Tuple[str, str]]:
    """Split each non-empty line at its first colon into (label, value)."""
    rows = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        label, _, value = line.partition(":")
        rows.append((label.strip(), value.strip() or NOT_AVAILABLE))
    return rows


def _field_value(lines: List[str], label: str) -> str:
    marker = f"{label}:"
    candidates = [line for line in lines if marker in line]
    for line in candidates:
        if line.strip().startswith(marker):
            return line.split(marker, 1)[1].strip() or NOT_AVAILABLE
    if candidates:
        return candidates[0].split(marker, 1)[1].strip() or NOT_AVAILABLE
    return NOT_AVAILABLE


def normalize_nutrition(raw: str, item_name: str) -> NutritionRecord:
    """
    Clean the nutrition answer and guarantee all six fields.

    Missing labels (case-sensitive "<Label>:" substring) are appended as
    "<Label>: N/A" lines.
    """
    text = (raw or "").strip()
    text = re.sub(r"[#*]", "", text)
    text = re.sub(r":[ \t]*", ": ", text)

    for label in NUTRITION_FIELDS:
        if f"{label}:" not in text:
            text += f"\n{label}: {NOT_AVAILABLE}"
    text = text.strip()

    lines = text.split("\n")
    fields = MappingProxyType({label: _field_value(lines, label) for label in NUTRITION_FIELDS})

    return NutritionRecord(
        item_name=item_name,
        display_name=capitalize_words(item_name),
        text=text,
        fields=fields,
        rows=tuple(nutrition_rows(text)),
    )


def split_recipes(raw: str) -> List[Recipe]:
    """Split the recipe answer on "<n>. " markers, dropping the text before the first one."""
    text = (raw or "").strip().replace("*", "")
    segments = _RECIPE_MARKER_RE.split(text)[1:]
    return [Recipe(text=s.strip()) for s in segments if s.strip()]
