import logging
from io import BytesIO

from flask import Flask, jsonify, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

import config
from errors import GenerationFailed, RequestValidationError
from qr_pipeline import generate, get_encoder
from validation import validate

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = config.MAX_BODY_BYTES

# Encoders hold no per-request state, so one instance serves every request.
encoder = get_encoder(config.QR_ENCODER)


@app.errorhandler(RequestEntityTooLarge)
def body_too_large(exc):
    logger.info("Rejected request body over %s bytes", config.MAX_BODY_BYTES)
    return jsonify({"message": "Request body too large"}), 413


@app.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "ok"}), 200


@app.route("/api/qrcode", methods=["POST"])
def create_qr_code():
    """
    Input:  {"link": str, "size"?: number}
    Output: {"dataUrl": "data:image/png;base64,..."}
    """
    # Parsed whatever the Content-Type; malformed JSON becomes None and
    # fails validation as a non-object body.
    payload = request.get_json(force=True, silent=True)

    try:
        validated = validate(payload)
    except RequestValidationError as exc:
        return jsonify(exc.to_dict()), 400

    try:
        image = generate(validated, encoder)
    except GenerationFailed as exc:
        return jsonify(exc.to_dict()), 500

    return jsonify({"dataUrl": image.to_data_url()}), 200


@app.route("/qr", methods=["GET"])
def serve_qr_code():
    """Same as /api/qrcode, but takes query parameters and returns the PNG itself."""
    try:
        validated = validate(request.args.to_dict())
    except RequestValidationError as exc:
        return jsonify(exc.to_dict()), 400

    try:
        image = generate(validated, encoder)
    except GenerationFailed as exc:
        return jsonify(exc.to_dict()), 500

    return send_file(
        BytesIO(image.png),
        mimetype="image/png",
        as_attachment=False,
        download_name="qrcode.png",
    )


if __name__ == "__main__":
    logger.info("Starting QR link server with the %s encoder", config.QR_ENCODER)
    app.run(host=config.HOST, port=config.PORT)
