import logging
from functools import lru_cache

from openai import OpenAI

from src import config
from src.errors import MissingCredentialError

logger = logging.getLogger(__name__)


def ensure_credentials() -> None:
    if not config.OPENAI_API_KEY:
        raise MissingCredentialError("OPENAI_API_KEY is not set")


@lru_cache
def get_openai_client() -> OpenAI:
    ensure_credentials()
    logger.info("Initializing OpenAI client")
    return OpenAI(api_key=config.OPENAI_API_KEY)
