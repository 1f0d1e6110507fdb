from functools import partial
from io import BytesIO

from PIL import Image


class CompressionError(Exception):
    """Raised when an image cannot be decoded or re-encoded"""


QUALITY_POLICY = "quality"
SIZE_BUDGET_POLICY = "size-budget"

# Lowest JPEG quality the size-budget policy will step down to
MIN_QUALITY = 10
QUALITY_STEP = 5


def _open_rgb(source_bytes):
    """Decode bytes into an RGB image with metadata dropped"""
    img = Image.open(BytesIO(source_bytes))
    img.load()

    # JPEG has no alpha or palette; GIFs come through as their first frame
    if img.mode != "RGB":
        img = img.convert("RGB")

    # Remove metadata (EXIF) to save extra bytes
    img.info.pop("exif", None)
    return img


def _encode_jpeg(img, quality):
    output = BytesIO()
    img.save(output, format="JPEG", quality=quality, optimize=True)
    return output.getvalue()


def compress_quality(source_bytes, max_width=800, quality=80):
    """
    Resize to at most `max_width` pixels wide (aspect ratio preserved,
    never enlarged) and re-encode as JPEG at a fixed quality.
    """
    try:
        img = _open_rgb(source_bytes)

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize(
                (max_width, max(1, round(img.height * ratio))),
                Image.LANCZOS
            )

        return _encode_jpeg(img, quality)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CompressionError(str(e)) from e


def compress_size_budget(source_bytes, max_size_mb=1, max_width_or_height=800):
    """
    Fit the image inside a `max_width_or_height` square, then lower the
    JPEG quality until the output fits in `max_size_mb` megabytes.
    If the floor quality is still too large, that output is returned.
    """
    budget = max_size_mb * 1024 * 1024
    try:
        img = _open_rgb(source_bytes)
        img.thumbnail((max_width_or_height, max_width_or_height), Image.LANCZOS)

        quality = 90
        output = _encode_jpeg(img, quality)
        while len(output) > budget and quality > MIN_QUALITY:
            quality -= QUALITY_STEP
            output = _encode_jpeg(img, quality)

        return output
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CompressionError(str(e)) from e


def get_compressor(policy, max_dimension=800, quality=80, max_size_mb=1):
    """Return a `bytes -> bytes` compressor for the configured policy"""
    if policy == QUALITY_POLICY:
        return partial(compress_quality, max_width=max_dimension, quality=quality)
    if policy == SIZE_BUDGET_POLICY:
        return partial(compress_size_budget, max_size_mb=max_size_mb, max_width_or_height=max_dimension)
    raise ValueError(f"Unknown compression policy: {policy}")
