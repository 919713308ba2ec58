import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from src.errors import EncodingError, InferenceError, MissingCredentialError
from src.image_encoder import ImagePayload, encode_image
from src.services import InferenceClient
from src.utils import normalize_item_list, normalize_nutrition, split_recipes

from .state import (
    IdentificationStatus,
    NutritionEntry,
    NutritionStatus,
    PipelineState,
    RecipeStatus,
    can_fetch_nutrition,
    can_generate_recipes,
    can_identify,
)

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = (
    "The image is either too blurry or does not appear to be a fridge. "
    "Please try again with a clearer image."
)
IDENTIFICATION_ERROR_MESSAGE = "An error occurred while processing the image. Please try again."
NUTRITION_ERROR_MESSAGE = "Error fetching nutritional facts."
RECIPES_ERROR_MESSAGE = "Error fetching recipe suggestions."

Listener = Callable[[Dict[str, Any]], None]


def _ms(start: float) -> float:
    return round((time.time() - start) * 1000, 2)


class FridgePipeline:
    """
    Fridge photo → items → (nutrition per item | recipes)

    select_image
      ↓
    run_identification  (encode → model → normalize_item_list)
      ↓ ITEMS_READY
    fetch_nutrition(item)   generate_recipes()

    Intents return True when accepted and False when gated (state unchanged,
    no call issued). Model calls run in worker threads; state is only touched
    on the event loop. A completion whose epoch no longer matches the current
    state is dropped.
    """

    def __init__(self, inference: Optional[InferenceClient] = None):
        self.inference = inference or InferenceClient()
        self.state = PipelineState()
        self._listeners: List[Listener] = []

    # -----------------------------------
    # Observation
    # -----------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return self.state.snapshot()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snapshot = self.state.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _is_stale(self, epoch: int, flow: str) -> bool:
        if epoch != self.state.epoch:
            logger.info(
                "[PIPELINE] Discarding stale %s completion (epoch=%s, current=%s)",
                flow,
                epoch,
                self.state.epoch,
            )
            return True
        return False

    async def _call(self, flag: str, func, *args):
        """Run a blocking model call in a worker thread; `flag` is cleared when it returns."""
        try:
            return await asyncio.to_thread(func, *args)
        finally:
            setattr(self.state, flag, False)

    def _encode_and_identify(self, image: ImagePayload) -> str:
        return self.inference.identify_items(encode_image(image))

    # -----------------------------------
    # Intents
    # -----------------------------------

    def select_image(self, payload: ImagePayload) -> bool:
        """Replace the image and reset every downstream flow."""
        previous = self.state
        self.state = PipelineState(
            image=payload,
            identification_status=IdentificationStatus.IDLE,
            epoch=previous.epoch + 1,
            identify_call_in_flight=previous.identify_call_in_flight,
            nutrition_call_in_flight=previous.nutrition_call_in_flight,
            recipes_call_in_flight=previous.recipes_call_in_flight,
        )
        logger.info(
            "[PIPELINE] Image selected: %s (%s, %s bytes), epoch=%s",
            payload.filename,
            payload.media_type,
            payload.size,
            self.state.epoch,
        )
        self._notify()
        return True

    async def run_identification(self) -> bool:
        if not can_identify(self.state):
            logger.info(
                "[PIPELINE] Identification ignored (status=%s, image=%s, call_in_flight=%s)",
                self.state.identification_status.value,
                self.state.image is not None,
                self.state.identify_call_in_flight,
            )
            return False

        state = self.state
        state.epoch += 1
        epoch = state.epoch
        image = state.image
        state.identification_status = IdentificationStatus.IDENTIFYING
        state.identify_call_in_flight = True
        state.identification = None
        state.nutrition = {}
        state.viewed_item = None
        state.recipes = []
        state.recipe_status = RecipeStatus.DISABLED
        state.error = None
        self._notify()

        start = time.time()
        logger.info("[PIPELINE] Step 1: Starting identification for %s", image.filename)
        try:
            raw = await self._call("identify_call_in_flight", self._encode_and_identify, image)
        except (EncodingError, InferenceError):
            if self._is_stale(epoch, "identification"):
                self._notify()
                return True
            logger.exception("Error during identification")
            self.state.identification_status = IdentificationStatus.FAILED
            self.state.error = IDENTIFICATION_ERROR_MESSAGE
            self._notify()
            return True
        except MissingCredentialError:
            if not self._is_stale(epoch, "identification"):
                self.state.identification_status = IdentificationStatus.IDLE
            self._notify()
            raise

        if self._is_stale(epoch, "identification"):
            self._notify()
            return True

        result = normalize_item_list(raw)
        self.state.identification = result
        if not result.valid:
            self.state.identification_status = IdentificationStatus.REJECTED
            self.state.error = REJECTED_MESSAGE
            logger.info(
                "[PIPELINE] Identification rejected (%s) in %sms",
                result.rejection_reason,
                _ms(start),
            )
        else:
            self.state.identification_status = IdentificationStatus.ITEMS_READY
            if result.items:
                self.state.recipe_status = RecipeStatus.IDLE
            logger.info(
                "[PIPELINE] Identification completed in %sms, found %s items",
                _ms(start),
                len(result.items),
            )
        self._notify()
        return True

    async def fetch_nutrition(self, item_name: str) -> bool:
        if not can_fetch_nutrition(self.state, item_name):
            logger.info("[PIPELINE] Nutrition lookup for %r ignored", item_name)
            return False

        epoch = self.state.epoch
        previous = self.state.nutrition.get(item_name, NutritionEntry())
        self.state.nutrition[item_name] = replace(previous, status=NutritionStatus.FETCHING)
        self.state.nutrition_call_in_flight = True
        self.state.viewed_item = item_name
        self.state.error = None
        self._notify()

        start = time.time()
        try:
            raw = await self._call(
                "nutrition_call_in_flight", self.inference.lookup_nutrition, item_name
            )
        except InferenceError:
            if self._is_stale(epoch, "nutrition"):
                self._notify()
                return True
            logger.exception("Error fetching nutritional facts for %r", item_name)
            self.state.nutrition[item_name] = replace(
                self.state.nutrition[item_name], status=NutritionStatus.FAILED
            )
            self.state.error = NUTRITION_ERROR_MESSAGE
            self._notify()
            return True
        except MissingCredentialError:
            if not self._is_stale(epoch, "nutrition"):
                self.state.nutrition[item_name] = previous
            self._notify()
            raise

        if self._is_stale(epoch, "nutrition"):
            self._notify()
            return True

        record = normalize_nutrition(raw, item_name)
        self.state.nutrition[item_name] = NutritionEntry(
            status=NutritionStatus.AVAILABLE, record=record
        )
        logger.info("[PIPELINE] Nutrition for %r fetched in %sms", item_name, _ms(start))
        self._notify()
        return True

    def dismiss_nutrition_view(self) -> bool:
        if self.state.viewed_item is None:
            return False
        logger.info("[PIPELINE] Closing nutrition view for %r", self.state.viewed_item)
        self.state.viewed_item = None
        self._notify()
        return True

    async def generate_recipes(self) -> bool:
        if not can_generate_recipes(self.state):
            logger.info(
                "[PIPELINE] Recipe generation ignored (identification=%s, recipes=%s, call_in_flight=%s)",
                self.state.identification_status.value,
                self.state.recipe_status.value,
                self.state.recipes_call_in_flight,
            )
            return False

        epoch = self.state.epoch
        items = list(self.state.items)
        previous_status = self.state.recipe_status
        self.state.recipe_status = RecipeStatus.GENERATING
        self.state.recipes_call_in_flight = True
        self.state.error = None
        self._notify()

        start = time.time()
        try:
            raw = await self._call("recipes_call_in_flight", self.inference.suggest_recipes, items)
        except InferenceError:
            if self._is_stale(epoch, "recipes"):
                self._notify()
                return True
            logger.exception("Error fetching recipe suggestions")
            self.state.recipe_status = RecipeStatus.FAILED
            self.state.error = RECIPES_ERROR_MESSAGE
            self._notify()
            return True
        except MissingCredentialError:
            if not self._is_stale(epoch, "recipes"):
                self.state.recipe_status = previous_status
            self._notify()
            raise

        if self._is_stale(epoch, "recipes"):
            self._notify()
            return True

        self.state.recipes = split_recipes(raw)
        self.state.recipe_status = RecipeStatus.AVAILABLE
        logger.info(
            "[PIPELINE] Recipes generated in %sms, %s recipes",
            _ms(start),
            len(self.state.recipes),
        )
        self._notify()
        return True
