#!/usr/bin/env python3
"""Dump the execution API's OpenAPI schema.

The editor front end generates its client types from this file.

Usage:
    python scripts/generate_openapi.py --output docs/api/openapi.json
"""
import argparse
import json
import sys
from pathlib import Path

from loguru import logger

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from autograder.api import app


def write_schema(output_path: str = "openapi.json") -> dict:
    schema = app.openapi()

    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(schema, indent=2, ensure_ascii=False), encoding="utf-8")

    operations = sum(len(methods) for methods in schema.get("paths", {}).values())
    logger.info("openapi_schema_written", path=str(target.absolute()), operations=operations)
    return schema


def main() -> None:
    parser = argparse.ArgumentParser(description="Write the LTI Code Execution API schema")
    parser.add_argument("--output", "-o", default="openapi.json", help="Schema file path")
    args = parser.parse_args()
    write_schema(args.output)


if __name__ == "__main__":
    main()
