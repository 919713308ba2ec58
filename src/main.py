"""Main FastAPI application."""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import ALLOW_ALL_ORIGINS, ALLOWED_CONTENT_TYPES, CORS_ORIGINS, LOG_LEVEL
from src.errors import EncodingError, MissingCredentialError
from src.fridge_pipeline import FridgePipeline
from src.image_encoder import read_upload
from src.openai_client import ensure_credentials

logging.basicConfig(
    level=LOG_LEVEL,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)

# -----------------------------------
# Single in-process session
# -----------------------------------

_pipeline = FridgePipeline()


def get_pipeline() -> FridgePipeline:
    return _pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Refuse to start without credentials rather than failing on the first click
    try:
        ensure_credentials()
    except MissingCredentialError:
        logger.critical("OPENAI_API_KEY is not set; refusing to start")
        raise
    yield


# -----------------------------------
# Инициализация приложения
# -----------------------------------

app = FastAPI(title="Fridge Item Identifier", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=not ALLOW_ALL_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MissingCredentialError)
async def missing_credential_handler(request: Request, exc: MissingCredentialError):
    logger.critical("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Inference service is not configured"})


# -----------------------------------
# Тех. эндпоинты
# -----------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/state")
def get_state(pipeline: FridgePipeline = Depends(get_pipeline)):
    return pipeline.snapshot()


# -----------------------------------
# Intents
# -----------------------------------

@app.post("/image")
async def select_image(
    image: UploadFile = File(None),
    pipeline: FridgePipeline = Depends(get_pipeline),
):
    if not image:
        raise HTTPException(422, "Image field is required")

    if image.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(422, "Unsupported format (use jpeg/png/gif)")

    try:
        payload = await read_upload(image)
    except EncodingError as e:
        logger.warning("Could not read upload %s: %s", image.filename, e)
        raise HTTPException(422, f"Could not read image: {e}")

    pipeline.select_image(payload)
    return pipeline.snapshot()


@app.post("/identify")
async def identify(pipeline: FridgePipeline = Depends(get_pipeline)):
    start = time.time()
    if not await pipeline.run_identification():
        raise HTTPException(409, "Identification is not available right now")
    logger.info("[PIPELINE] /identify completed, total time: %sms", round((time.time() - start) * 1000, 2))
    return pipeline.snapshot()


@app.post("/items/{item_name}/nutrition")
async def nutrition(item_name: str, pipeline: FridgePipeline = Depends(get_pipeline)):
    if not await pipeline.fetch_nutrition(item_name):
        raise HTTPException(409, f"Nutrition lookup for {item_name!r} is not available right now")
    return pipeline.snapshot()


@app.delete("/nutrition")
def dismiss_nutrition(pipeline: FridgePipeline = Depends(get_pipeline)):
    pipeline.dismiss_nutrition_view()
    return pipeline.snapshot()


@app.post("/recipes")
async def recipes(pipeline: FridgePipeline = Depends(get_pipeline)):
    if not await pipeline.generate_recipes():
        raise HTTPException(409, "Recipe generation is not available right now")
    return pipeline.snapshot()
