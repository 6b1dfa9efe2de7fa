import argparse
import json
from pathlib import Path
from typing import Any, Dict, Optional

import requests


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Request a QR code from the generate endpoint."
    )
    parser.add_argument("url", help="Content to encode in the QR code.")
    parser.add_argument(
        "--size",
        type=int,
        default=256,
        help="QR code width and height in pixels (default: 256).",
    )
    parser.add_argument(
        "--watermark",
        type=Path,
        default=None,
        help="Optional PNG image to center over the QR code.",
    )
    parser.add_argument(
        "--host",
        default="http://127.0.0.1:8080",
        help="Server host (default: http://127.0.0.1:8080).",
    )
    parser.add_argument(
        "--qr-output",
        type=Path,
        default=Path("qr_code.png"),
        help="Path to save the QR code image (default: qr_code.png).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the form fields instead of sending the request.",
    )
    return parser.parse_args()


def send_request(
    host: str, url: str, size: int, watermark: Optional[Path] = None
) -> requests.Response:
    fields: Dict[str, Any] = {"url": (None, url), "size": (None, str(size))}
    if watermark is not None:
        fields["watermark"] = (watermark.name, watermark.read_bytes(), "image/png")
    return requests.post(f"{host.rstrip('/')}/generate", files=fields, timeout=10)


def main() -> None:
    args = parse_args()

    if args.dry_run:
        payload = {
            "url": args.url,
            "size": args.size,
            "watermark": str(args.watermark) if args.watermark else None,
        }
        print(json.dumps(payload, indent=2))
        return

    response = send_request(args.host, args.url, args.size, args.watermark)
    print(f"Status: {response.status_code}")

    if response.headers.get("Content-Type", "").startswith("image/png"):
        args.qr_output.write_bytes(response.content)
        print(f"Saved QR code to {args.qr_output.resolve()}")
    else:
        print(json.dumps(response.json(), indent=2))


if __name__ == "__main__":
    main()
