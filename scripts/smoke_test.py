#!/usr/bin/env python3
"""
Dev helper: exercise a running contact-relay backend end to end.

Hits /test, then optionally /send-email and /upload-cv with a sample
message and a small generated (or user-supplied) CV file. Real provider
credentials must be configured on the backend for the last two to succeed.

Usage
-----
# Health check only
python scripts/smoke_test.py

# Also send a contact-form email
python scripts/smoke_test.py --email

# Upload a specific file
python scripts/smoke_test.py --upload --file path/to/cv.pdf

# Target a different backend URL
python scripts/smoke_test.py --url https://api.example.com --email --upload
"""

import argparse
import json
import os
import sys
import textwrap
from pathlib import Path

import httpx
from dotenv import load_dotenv


_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".png": "image/png",
    ".jpg": "image/jpeg",
}


def _detect_content_type(filename: str) -> str:
    return _CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def _print_response(label: str, response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"\n[{symbol}] {label}: HTTP {status}")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    parser = argparse.ArgumentParser(
        prog="smoke_test.py",
        description="Exercise /test, /send-email and /upload-cv on a running backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/smoke_test.py
              python scripts/smoke_test.py --email --from-email me@example.com
              python scripts/smoke_test.py --upload --file cv.pdf
        """),
    )
    parser.add_argument(
        "--url",
        default=f"http://localhost:{os.getenv('PORT', '5000')}",
        help="Backend base URL (default: http://localhost:$PORT, PORT defaults to 5000)",
    )
    parser.add_argument("--email", action="store_true", help="POST a sample message to /send-email")
    parser.add_argument("--upload", action="store_true", help="POST a file to /upload-cv")
    parser.add_argument("--from-name", default="Smoke Test", help='Sender name (default: "Smoke Test")')
    parser.add_argument("--from-email", default="smoke@example.com", help="Sender email address")
    parser.add_argument("--message", default="Hello from the smoke test.", help="Message body")
    parser.add_argument(
        "--file",
        default=None,
        metavar="PATH",
        help="File to upload. A small generated text file is used if omitted.",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds")

    args = parser.parse_args()
    base_url = args.url.rstrip("/")
    failures = 0

    try:
        with httpx.Client(base_url=base_url, timeout=args.timeout) as client:
            response = client.get("/test")
            _print_response("GET /test", response)
            failures += response.status_code != 200

            cv_link = ""
            if args.upload:
                if args.file:
                    file_path = Path(args.file)
                    if not file_path.exists():
                        print(f"ERROR: File not found: {file_path}", file=sys.stderr)
                        return 1
                    content = file_path.read_bytes()
                    filename = file_path.name
                else:
                    content = b"Smoke test CV\n"
                    filename = "smoke_test_cv.txt"

                print(f"\nUploading {filename} ({len(content):,} bytes)")
                response = client.post(
                    "/upload-cv",
                    files={"file": (filename, content, _detect_content_type(filename))},
                )
                _print_response("POST /upload-cv", response)
                if response.status_code == 200:
                    cv_link = response.json().get("secure_url", "")
                else:
                    failures += 1

            if args.email:
                response = client.post(
                    "/send-email",
                    json={
                        "from_name": args.from_name,
                        "from_email": args.from_email,
                        "message": args.message,
                        "cv_link": cv_link,
                    },
                )
                _print_response("POST /send-email", response)
                failures += response.status_code != 200
    except httpx.ConnectError:
        print(
            f"\nERROR: Could not connect to {base_url}\n"
            "Is the backend running? Start it with:\n"
            "  cd backend && uvicorn app.main:app --reload --port 5000",
            file=sys.stderr,
        )
        return 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
