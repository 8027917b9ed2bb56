"""Image optimization policy: format selection, resize bounds and output keys.

Everything in this module is pure; it operates on bytes and keys only.
"""

import io
from typing import Optional, Tuple

from PIL import Image

from .config import TransformSettings
from .exceptions import DecodeError, EncodeError
from .logging_config import get_logger
from .models import (
    PNG_CONTENT_TYPE,
    WEBP_CONTENT_TYPE,
    OptimizedImage,
    format_compression_ratio,
)

SUPPORTED_FORMATS = (".jpg", ".jpeg", ".png", ".webp", ".tiff", ".bmp")

ALPHA_MODES = ("RGBA", "RGBa", "LA", "La", "PA")


def get_extension(key: str) -> str:
    """Lower-cased trailing extension including the dot, or "" when there is none."""
    dot = key.rfind(".")
    if dot == -1:
        return ""
    return key[dot:].lower()


def is_supported_image(key: str) -> bool:
    """True when the key's trailing extension is in the allow-list (case-insensitive)."""
    return get_extension(key) in SUPPORTED_FORMATS


def generate_optimized_key(original_key: str, content_type: str) -> str:
    """
    Derive the destination key from the source key and the chosen content type.

    Args:
        original_key: Source object key
        content_type: Content type chosen by the optimization policy

    Returns:
        The key with its extension replaced by ``.webp`` or ``.png``; any other
        content type leaves the key unchanged.
    """
    dot = original_key.rfind(".")
    base_name = original_key[:dot] if dot != -1 else original_key

    if content_type == WEBP_CONTENT_TYPE:
        return f"{base_name}.webp"
    elif content_type == PNG_CONTENT_TYPE:
        return f"{base_name}.png"

    return original_key


def calculate_resize_dimensions(
    width: int, height: int, max_width: int
) -> Tuple[int, int]:
    """
    Bound the width to ``max_width`` keeping the aspect ratio. Never upscales.
    """
    if width <= max_width:
        return width, height
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def has_alpha_channel(img: "Image.Image") -> bool:
    """True if the decoded image carries an alpha channel or a transparency key."""
    return img.mode in ALPHA_MODES or "transparency" in img.info


def _decode(image_bytes: bytes) -> "Image.Image":
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        # UnidentifiedImageError is an OSError
        raise DecodeError(f"Cannot decode image: {e}") from e
    return img


def _encode(img: "Image.Image", format_type: str, **params) -> bytes:
    output = io.BytesIO()
    img.save(output, format=format_type, **params)
    return output.getvalue()


def optimize_image(
    image_bytes: bytes,
    original_key: str,
    settings: Optional[TransformSettings] = None,
) -> OptimizedImage:
    """
    Re-encode an image into its web-optimized form.

    PNG sources with an alpha channel stay PNG to keep transparency; every
    other input is converted to WebP. Width is bounded by
    ``settings.max_width`` without ever upscaling.

    Args:
        image_bytes: Raw source image
        original_key: Source object key, used to derive the output key
        settings: Encoder settings (defaults to TransformSettings())

    Returns:
        OptimizedImage with the encoded bytes, content type and derived key

    Raises:
        DecodeError: if the bytes are not a readable image
        EncodeError: if resizing or re-encoding fails
    """
    settings = settings or TransformSettings()
    logger = get_logger("transform")

    img = _decode(image_bytes)
    source_format = img.format
    keep_png = source_format == "PNG" and has_alpha_channel(img)

    logger.info(
        f"Original image: {original_key}, Format: {(source_format or 'unknown').lower()}, "
        f"Size: {img.width}x{img.height}"
    )

    try:
        if keep_png:
            working = img if img.mode in ("RGBA", "LA") else img.convert("RGBA")
        else:
            working = img.convert("RGBA" if has_alpha_channel(img) else "RGB")

        target_size = calculate_resize_dimensions(
            working.width, working.height, settings.max_width
        )
        if target_size != working.size:
            working = working.resize(target_size, Image.Resampling.LANCZOS)

        if keep_png:
            content_type = PNG_CONTENT_TYPE
            data = _encode(
                working,
                "PNG",
                optimize=True,
                compress_level=settings.png_compress_level,
            )
        else:
            content_type = WEBP_CONTENT_TYPE
            data = _encode(
                working,
                "WEBP",
                quality=settings.quality,
                method=settings.webp_method,
            )
    except (OSError, ValueError, KeyError) as e:
        # KeyError: encoder not registered in this Pillow build
        raise EncodeError(f"Cannot encode {original_key}: {e}") from e

    logger.info(
        f"Optimized image size: {len(data)} bytes "
        f"({format_compression_ratio(len(image_bytes), len(data))}% of original)"
    )

    return OptimizedImage(
        data=data,
        content_type=content_type,
        key=generate_optimized_key(original_key, content_type),
        width=working.width,
        height=working.height,
    )
