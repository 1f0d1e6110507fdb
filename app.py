from flask import Flask, Response, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

import config
from routes.batches import batches_bp
from routes.compress_image import compress_image_bp
from services.batch_store import BatchStore
from services.compressor import get_compressor
from services.temp_store import TempStore


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.update(config.as_dict())
    if overrides:
        app.config.update(overrides)
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_REQUEST_BYTES"]

    CORS(app)

    app.extensions["compressor"] = get_compressor(
        app.config["COMPRESSION_POLICY"],
        max_dimension=app.config["TARGET_MAX_DIMENSION"],
        quality=app.config["JPEG_QUALITY"],
        max_size_mb=app.config["MAX_SIZE_MB"],
    )
    app.extensions["temp_store"] = TempStore(app.config["TEMP_FOLDER"])
    app.extensions["batch_store"] = BatchStore()

    app.register_blueprint(compress_image_bp)
    app.register_blueprint(batches_bp)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return Response("File too large", status=400, mimetype="text/plain")

    # =========================
    # HEALTH CHECK
    # =========================
    @app.route("/", methods=["GET"])
    def health():
        return jsonify({
            "status": "Image compressor backend running",
            "compressionPolicy": app.config["COMPRESSION_POLICY"],
            "endpoints": ["/api/compress", "/temp/<filename>", "/api/batches"]
        })

    return app


app = create_app()


# =========================
# START SERVER
# =========================
if __name__ == "__main__":
    print(f"Server running at http://localhost:{config.PORT}")
    app.run(host="0.0.0.0", port=config.PORT, debug=True)
