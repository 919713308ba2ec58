"""Services for OpenAI interactions."""

import logging
from typing import Sequence

from src import config
from src.errors import InferenceError
from src.image_encoder import EncodedImage
from src.openai_client import get_openai_client
from src.prompts import IDENTIFY_PROMPT, NUTRITION_PROMPT, RECIPES_PROMPT

logger = logging.getLogger(__name__)


class InferenceClient:
    """
    Thin wrapper over chat completions for the three fridge prompts.

    Every method is a single round trip and returns the raw model text.
    Failures surface as InferenceError with the cause chained; a missing
    API key surfaces as MissingCredentialError on the first call.
    """

    def __init__(self, client=None, model: str = None):
        self._client = client
        self.model = (model or config.GPT_MODEL or "gpt-4o-mini").strip() or "gpt-4o-mini"

    @property
    def client(self):
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def _complete(self, kind: str, content) -> str:
        client = self.client
        logger.info("Sending %s prompt to model=%s", kind, self.model)
        try:
            response = client.chat.completions.create(
                model=self.model,
                temperature=config.GPT_TEMPERATURE,
                max_tokens=config.GPT_MAX_TOKENS,
                messages=[{"role": "user", "content": content}],
            )
            text = response.choices[0].message.content or ""
        except Exception as e:
            logger.error("%s call via OpenAI failed: %s", kind, e)
            raise InferenceError(f"{kind} request failed: {e}") from e

        logger.info("%s response received, length: %s", kind, len(text))
        if not text.strip():
            raise InferenceError(f"Empty response from model for {kind}")
        return text

    def identify_items(self, image: EncodedImage) -> str:
        logger.info(
            "Identifying items with content_type=%s, b64_len=%s",
            image.media_type,
            len(image.b64),
        )
        return self._complete(
            "identification",
            [
                {"type": "text", "text": IDENTIFY_PROMPT},
                {"type": "image_url", "image_url": {"url": image.data_url()}},
            ],
        )

    def lookup_nutrition(self, item_name: str) -> str:
        return self._complete("nutrition", NUTRITION_PROMPT.format(item=item_name))

    def suggest_recipes(self, items: Sequence[str]) -> str:
        return self._complete("recipes", RECIPES_PROMPT.format(items=", ".join(items)))
