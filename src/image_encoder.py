"""Image reading and encoding for the identification call.

- read_image / read_upload: capture the uploaded bytes as an ImagePayload
- encode_image: base64 + media type, with an optional Pillow downscale
  controlled by USE_BACKEND_RESIZE / BACKEND_MAX_SIDE_PX
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError

from src import config
from src.errors import EncodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    media_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class EncodedImage:
    b64: str
    media_type: str

    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.b64}"


def read_image(
    source: Union[bytes, BinaryIO],
    media_type: str,
    filename: Optional[str] = None,
) -> ImagePayload:
    """Read the whole source into memory. Raises EncodingError if it cannot be read."""
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        try:
            data = source.read()
        except (OSError, ValueError) as e:
            raise EncodingError(f"Could not read image {filename or ''}".strip()) from e

    if not data:
        raise EncodingError("Image is empty")

    return ImagePayload(data=data, media_type=media_type, filename=filename)


async def read_upload(upload) -> ImagePayload:
    """Read a FastAPI UploadFile into an ImagePayload."""
    try:
        data = await upload.read()
    except (OSError, ValueError) as e:
        raise EncodingError(f"Could not read upload {upload.filename}") from e
    return read_image(data, upload.content_type, filename=upload.filename)


def _resize(data: bytes, max_side: int) -> Optional[bytes]:
    """Return JPEG bytes with the longer side == max_side, or None if already small enough."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise EncodingError("Image data could not be decoded") from e

    if max(img.size) <= max_side:
        return None

    img.thumbnail((max_side, max_side))
    img = img.convert("RGB")  # PNG -> JPEG
    out = BytesIO()
    img.save(out, format="JPEG", quality=90)
    return out.getvalue()


def encode_image(payload: ImagePayload) -> EncodedImage:
    """
    Encode payload bytes for the vision request.

    GIFs are passed through untouched; other formats may be downscaled and
    re-encoded as JPEG when they exceed BACKEND_MAX_SIDE_PX.
    """
    data = payload.data
    media_type = payload.media_type

    if config.USE_BACKEND_RESIZE and media_type != "image/gif":
        resized = _resize(data, config.BACKEND_MAX_SIDE_PX)
        if resized is not None:
            logger.info(
                "Resized image %s from %.1fkb to %.1fkb (max_side=%s)",
                payload.filename,
                len(data) / 1024,
                len(resized) / 1024,
                config.BACKEND_MAX_SIDE_PX,
            )
            data = resized
            media_type = "image/jpeg"

    b64 = base64.b64encode(data).decode("utf-8")
    return EncodedImage(b64=b64, media_type=media_type)
