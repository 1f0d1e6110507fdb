from flask import Blueprint, Response, current_app, jsonify, request, send_file, url_for
from io import BytesIO
import traceback

from services.accounting import size_report
from services.batch import validate_upload

compress_image_bp = Blueprint("compress_image", __name__)


def text_response(message, status):
    return Response(message, status=status, mimetype="text/plain")


# =========================
# COMPRESS ONE IMAGE
# =========================
@compress_image_bp.route("/api/compress", methods=["POST"])
def compress_image():
    """Compress the uploaded `image` and return a one-time download URL plus sizes"""
    print("\n=== COMPRESS REQUEST ===")

    if "image" not in request.files:
        return text_response("No image uploaded", 400)

    source_bytes, error = validate_upload(
        request.files["image"],
        current_app.config["ALLOWED_MIME_TYPES"],
        current_app.config["MAX_UPLOAD_BYTES"],
    )
    if error:
        print("ERROR:", error)
        return text_response(error, 400)
    if source_bytes is None:
        return text_response("No image uploaded", 400)

    temp_store = current_app.extensions["temp_store"]
    temp_store.sweep(current_app.config["TEMP_FILE_TTL_SECONDS"])

    try:
        compress = current_app.extensions["compressor"]
        compressed_bytes = compress(source_bytes)

        report = size_report(len(source_bytes), len(compressed_bytes))
        print("Original Size (KB):", len(source_bytes) / 1024)
        print("Compressed Size (KB):", len(compressed_bytes) / 1024)
        print("Size Reduction (%):", report["sizeReduction"])

        # The file is removed again if anything below fails
        with temp_store.reserve(compressed_bytes) as temp_name:
            return jsonify({
                "compressedImageUrl": url_for("compress_image.serve_temp", filename=temp_name, _external=True),
                **report,
            })

    except Exception as e:
        print(f"Error compressing image: {e}")
        traceback.print_exc()
        return text_response("Error compressing image", 500)


# =========================
# SERVE COMPRESSED FILE (ONCE)
# =========================
@compress_image_bp.route("/temp/<filename>", methods=["GET"])
def serve_temp(filename):
    # Read and delete before sending
    data = current_app.extensions["temp_store"].take(filename)
    if data is None:
        return text_response("File not found", 404)

    return send_file(BytesIO(data), mimetype="image/jpeg", download_name=filename)
