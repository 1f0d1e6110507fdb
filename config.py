import os

# =========================
# SERVER
# =========================
PORT = int(os.environ.get("PORT", 5000))
TEMP_FOLDER = os.environ.get("TEMP_FOLDER", os.path.join(os.path.dirname(os.path.abspath(__file__)), "temp"))

# Compressed files nobody fetched are swept after this many seconds
TEMP_FILE_TTL_SECONDS = int(os.environ.get("TEMP_FILE_TTL_SECONDS", 300))

# Batches nobody touched for this long are dropped from memory
BATCH_TTL_SECONDS = int(os.environ.get("BATCH_TTL_SECONDS", 3600))

# =========================
# UPLOAD LIMITS
# =========================
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))  # per file
MAX_REQUEST_BYTES = int(os.environ.get("MAX_REQUEST_BYTES", 100 * 1024 * 1024))  # whole multipart body

ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
)

# =========================
# COMPRESSION
# =========================
COMPRESSION_POLICY = os.environ.get("COMPRESSION_POLICY", "quality")  # "quality" or "size-budget"
TARGET_MAX_DIMENSION = int(os.environ.get("TARGET_MAX_DIMENSION", 800))
JPEG_QUALITY = int(os.environ.get("JPEG_QUALITY", 80))
MAX_SIZE_MB = float(os.environ.get("MAX_SIZE_MB", 1))


def as_dict():
    """Upper-case settings of this module, ready for app.config.update()"""
    return {key: value for key, value in globals().items() if key.isupper()}
