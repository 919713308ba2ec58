import os


def _parse_cors_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
CORS_ORIGINS = _parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))
ALLOW_ALL_ORIGINS = CORS_ORIGINS == ["*"]

# LOG_LEVEL: root log level for the service ("DEBUG", "INFO", "WARNING", ...)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -----------------------------------
# Upload / encoding configuration
# -----------------------------------

# ALLOWED_CONTENT_TYPES: media types accepted by the upload endpoint
ALLOWED_CONTENT_TYPES = tuple(
    t.strip()
    for t in os.getenv("ALLOWED_CONTENT_TYPES", "image/jpeg,image/png,image/gif").split(",")
    if t.strip()
)

# USE_BACKEND_RESIZE: downscale large photos before sending them to the model
USE_BACKEND_RESIZE = os.getenv("USE_BACKEND_RESIZE", "true").lower() == "true"

# BACKEND_MAX_SIDE_PX: longer side of the image after resize.
# Fridge shots carry many small labels, so this stays larger than a plate photo needs.
BACKEND_MAX_SIDE_PX = int(os.getenv("BACKEND_MAX_SIDE_PX", "1024"))

# -----------------------------------
# GPT / models configuration
# -----------------------------------

# GPT_MODEL: vision-capable chat model used for all three prompts
# Expected values: "gpt-4o-mini" (default) or "gpt-4o"
GPT_MODEL = os.getenv("GPT_MODEL", "gpt-4o-mini")

GPT_TEMPERATURE = float(os.getenv("GPT_TEMPERATURE", "0"))

GPT_MAX_TOKENS = int(os.getenv("GPT_MAX_TOKENS", "1500"))
