"""Configuration read from the environment."""

import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Which QR encoding backend to use: "qrcode" or "segno".
QR_ENCODER = os.getenv("QR_ENCODER", "qrcode")

# Request bodies only ever carry a link and a size.
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(64 * 1024)))
