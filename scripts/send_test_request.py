import argparse
import base64
import json
from pathlib import Path
from typing import Any, Dict

import requests

DATA_URL_PREFIX = "data:image/png;base64,"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ask a running QR link server for a QR code and save it."
    )
    parser.add_argument("link", help="URL to encode.")
    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Image width and height in pixels, 128-1024 (server default: 320).",
    )
    parser.add_argument(
        "--host",
        default="http://127.0.0.1:5000",
        help="Server host (default: http://127.0.0.1:5000).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("qrcode.png"),
        help="Path to save the QR code image (default: qrcode.png).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload instead of sending the request.",
    )
    return parser.parse_args()


def save_data_url(data_url: str, output_path: Path) -> None:
    if not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("Response is not a PNG data URL")
    output_path.write_bytes(base64.b64decode(data_url[len(DATA_URL_PREFIX):]))


def main() -> None:
    args = parse_args()
    payload: Dict[str, Any] = {"link": args.link}
    if args.size is not None:
        payload["size"] = args.size

    if args.dry_run:
        print(json.dumps(payload, indent=2))
        return

    response = requests.post(
        f"{args.host.rstrip('/')}/api/qrcode",
        json=payload,
        timeout=10,
    )

    print(f"Status: {response.status_code}")
    data = response.json()
    if response.status_code != 200:
        print(json.dumps(data, indent=2))
        response.raise_for_status()

    save_data_url(data["dataUrl"], args.output)
    print(f"Saved QR code to {args.output.resolve()}")


if __name__ == "__main__":
    main()
