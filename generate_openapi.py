#!/usr/bin/env python3
"""Write the MediVoice OpenAPI document to disk.

Usage:
    python generate_openapi.py [--output openapi.json]
"""

import argparse
import json
import tempfile
from pathlib import Path

from medivoice.api.application import create_app
from medivoice.api.settings import Settings

DEFAULT_OUTPUT = Path(__file__).parent / "openapi.json"


def build_schema() -> dict:
    """Return the OpenAPI document without touching the configured storage areas."""
    with tempfile.TemporaryDirectory(prefix="medivoice-openapi-") as scratch:
        settings = Settings(
            staging_dir=str(Path(scratch) / "staging"),
            content_dir=str(Path(scratch) / "uploads"),
        )
        return create_app(settings).openapi()


def main(argv: list[str] | None = None) -> Path:
    parser = argparse.ArgumentParser(description="Export the MediVoice OpenAPI schema as JSON")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Destination file")
    args = parser.parse_args(argv)

    schema = build_schema()
    with args.output.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2)

    routes = sorted(schema.get("paths", {}))
    print(f"✅ Wrote {len(routes)} routes to {args.output}")
    for route in routes:
        print(f"   {route}")
    return args.output


if __name__ == "__main__":
    main()
