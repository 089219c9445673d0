from __future__ import annotations
import base64
import binascii
import logging
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .utils import round_half_up

logger = logging.getLogger(__name__)

# Por debajo de esto la imagen se guarda tal cual
MAX_INTAKE_BYTES = 0.3 * 1024 * 1024
MAX_DIM = 512
QUALITY = 50  # equivalente a 0.5

DEFAULT_MIME = "application/octet-stream"

# Formatos que aceptan calidad; el resto se reescribe como PNG
_QUALITY_FORMATS = {
    "image/jpeg": "JPEG",
    "image/webp": "WEBP",
}

_DATA_URL_RE = re.compile(r"^data:([^;,]*)(;base64)?,(.*)$", re.DOTALL)

class ImageIntakeError(Exception):
    pass

def to_data_url(data: bytes, content_type: Optional[str]) -> str:
    mime = content_type or DEFAULT_MIME
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"

def decode_data_url(url: str) -> Tuple[str, bytes]:
    """Devuelve (mime, bytes) de un data URL base64"""
    m = _DATA_URL_RE.match(url or "")
    if not m or not m.group(2):
        raise ValueError("Not a base64 data URL")
    try:
        return m.group(1) or DEFAULT_MIME, base64.b64decode(m.group(3), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e

def estimate_encoded_size(data_url: str) -> float:
    # inverso de la expansión base64
    return len(data_url) * 3 / 4

def fit_within(width: int, height: int, max_dim: int = MAX_DIM) -> Tuple[int, int]:
    """
    Ajusta (width, height) para que el lado mayor no pase de max_dim.
    Solo reduce: nunca amplía imágenes pequeñas.
    """
    if width > height:
        if width > max_dim:
            height = round_half_up(height * max_dim / width)
            width = max_dim
    else:
        if height > max_dim:
            width = round_half_up(width * max_dim / height)
            height = max_dim
    return width, height

def compress_image(data: bytes, content_type: Optional[str]) -> Optional[str]:
    """
    Convierte la imagen subida en un data URL de tamaño acotado.

    Si el tamaño estimado cabe en MAX_INTAKE_BYTES se devuelve sin tocar.
    Si no, se reescala (lado mayor a MAX_DIM) y se recodifica una sola vez
    con calidad QUALITY. No se comprueba de nuevo el resultado.
    """
    if not data:
        return None

    data_url = to_data_url(data, content_type)
    if estimate_encoded_size(data_url) <= MAX_INTAKE_BYTES:
        return data_url

    try:
        src = Image.open(BytesIO(data))
        src.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageIntakeError(f"Could not read image: {e}") from e

    width, height = fit_within(*src.size)
    resized = src.resize((width, height), Image.Resampling.LANCZOS)

    mime = (content_type or "").lower()
    fmt = _QUALITY_FORMATS.get(mime)
    buf = BytesIO()
    if fmt == "JPEG":
        if resized.mode != "RGB":
            resized = resized.convert("RGB")
        resized.save(buf, format="JPEG", quality=QUALITY)
    elif fmt == "WEBP":
        if resized.mode not in ("RGB", "RGBA"):
            resized = resized.convert("RGBA")
        resized.save(buf, format="WEBP", quality=QUALITY)
    else:
        mime = "image/png"
        if resized.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
            resized = resized.convert("RGBA")
        resized.save(buf, format="PNG")

    out = to_data_url(buf.getvalue(), mime)
    logger.info(
        f"Image compressed {src.size[0]}x{src.size[1]} -> {width}x{height} "
        f"({len(data)} -> {len(buf.getvalue())} bytes, {mime})"
    )
    return out
