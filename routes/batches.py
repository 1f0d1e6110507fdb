from flask import Blueprint, Response, current_app, jsonify, request, send_file, url_for
from io import BytesIO

from services.accounting import round_half_up, to_kib
from services.batch import accept_files
from services.delivery import build_archive, download_name
from services.notifications import Notifier
from services.workflow import BatchBusyError, compress_batch

batches_bp = Blueprint("batches", __name__, url_prefix="/api/batches")


def batch_state(batch, notifier=None):
    """JSON view of a batch; completion is recomputed on every call"""
    images = []
    for index, item in enumerate(batch.snapshot()):
        result = item.compression_result
        images.append({
            "index": index,
            "filename": item.filename,
            "mimeType": item.mime_type,
            "originalSize": round_half_up(to_kib(item.original_size_bytes)),
            "status": item.status,
            "previewUrl": url_for("batches.preview_image", batch_id=batch.id, index=index),
            "compressionDetails": result.details() if result else None,
            "downloadUrl": url_for("batches.download_image", batch_id=batch.id, index=index) if result else None,
        })

    return {
        "id": batch.id,
        "compressionComplete": batch.is_complete,
        "busy": batch.busy,
        "view": batch.view,
        "images": images,
        "notifications": notifier.messages if notifier else [],
    }


def get_batch_or_404(batch_id):
    batch = current_app.extensions["batch_store"].get(batch_id)
    if batch is None:
        return None, (jsonify({"error": "Batch not found"}), 404)
    return batch, None


# =========================
# BATCH LIFECYCLE
# =========================
@batches_bp.route("", methods=["POST"])
def create_batch():
    batch_store = current_app.extensions["batch_store"]
    batch_store.sweep(current_app.config["BATCH_TTL_SECONDS"])
    batch = batch_store.create()
    print(f"Batch {batch.id} created ({len(batch_store)} open)")
    return jsonify(batch_state(batch)), 201


@batches_bp.route("/<batch_id>", methods=["GET"])
def get_batch(batch_id):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error
    return jsonify(batch_state(batch))


@batches_bp.route("/<batch_id>", methods=["DELETE"])
def delete_batch(batch_id):
    """Forget the batch and free its images"""
    if not current_app.extensions["batch_store"].remove(batch_id):
        return jsonify({"error": "Batch not found"}), 404
    return "", 204


@batches_bp.route("/<batch_id>/clear", methods=["POST"])
def clear_batch(batch_id):
    """Start over: drop every image, keep the batch"""
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error
    batch.clear()
    return jsonify(batch_state(batch))


# =========================
# IMAGES
# =========================
@batches_bp.route("/<batch_id>/images", methods=["POST"])
def upload_images(batch_id):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    files = request.files.getlist("images")
    if not files:
        return Response("No images uploaded", status=400, mimetype="text/plain")

    notifier = Notifier()
    accepted = accept_files(
        batch,
        files,
        notifier,
        current_app.config["ALLOWED_MIME_TYPES"],
        current_app.config["MAX_UPLOAD_BYTES"],
    )
    print(f"Batch {batch.id}: accepted {len(accepted)} of {len(files)} files")
    return jsonify(batch_state(batch, notifier))


@batches_bp.route("/<batch_id>/images/<int:index>", methods=["DELETE"])
def remove_image(batch_id, index):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    try:
        batch.remove(index)
    except IndexError:
        return jsonify({"error": "Image not found"}), 404
    return jsonify(batch_state(batch))


@batches_bp.route("/<batch_id>/images/<int:index>/preview", methods=["GET"])
def preview_image(batch_id, index):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    item = batch.get(index)
    if item is None:
        return jsonify({"error": "Image not found"}), 404
    return send_file(BytesIO(item.source_bytes), mimetype=item.mime_type)


# =========================
# COMPRESS
# =========================
@batches_bp.route("/<batch_id>/compress", methods=["POST"])
def compress_images(batch_id):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    print(f"\n=== BATCH COMPRESS {batch.id} ({len(batch)} images) ===")
    notifier = Notifier()
    try:
        completed = compress_batch(batch, current_app.extensions["compressor"], notifier)
    except BatchBusyError:
        notifier.error("Compression is already in progress.")
        return jsonify(batch_state(batch, notifier)), 409

    # An empty batch is a no-op, not a failure
    if not completed and not batch.is_empty:
        return jsonify(batch_state(batch, notifier)), 500
    return jsonify(batch_state(batch, notifier))


# =========================
# DOWNLOAD
# =========================
@batches_bp.route("/<batch_id>/images/<int:index>/download", methods=["GET"])
def download_image(batch_id, index):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    item = batch.get(index)
    if item is None or item.compression_result is None:
        return jsonify({"error": "Compressed image not found"}), 404

    return send_file(
        BytesIO(item.compression_result.compressed_bytes),
        mimetype="image/jpeg",
        as_attachment=True,
        download_name=download_name(index),
    )


@batches_bp.route("/<batch_id>/download", methods=["GET"])
def download_all(batch_id):
    batch, error = get_batch_or_404(batch_id)
    if error:
        return error

    items = batch.snapshot()
    if not items or not all(item.compression_result for item in items):
        return Response("Compress the images before downloading", status=400, mimetype="text/plain")

    return send_file(
        build_archive(items),
        mimetype="application/zip",
        as_attachment=True,
        download_name="compressed_images.zip",
    )
