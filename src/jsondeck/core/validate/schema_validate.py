from __future__ import annotations

import argparse
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft202012Validator

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "presentation.schema.json"


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    return Draft202012Validator(schema)


def _json_path(e: Any) -> str:
    path = "$"
    for p in e.path:
        path += f"[{p!r}]" if isinstance(p, str) else f"[{p}]"
    return path


def validate_document(instance: Any) -> list[str]:
    """
    Validate a parsed presentation document against the bundled schema.
    Returns a list of human-readable error strings (empty if valid).
    Each error is formatted as: "- <jsonpath>: <message>"
    """
    errors = sorted(_validator().iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    return [f"- {_json_path(e)}: {e.message}" for e in errors]


def validate_document_file(instance_path: Path) -> list[str]:
    if not instance_path.exists():
        return [f"[ERR] instance not found: {instance_path}"]
    try:
        inst = load_json(instance_path)
    except orjson.JSONDecodeError as e:
        return [f"[ERR] invalid JSON in {instance_path}: {e}"]
    return validate_document(inst)


def main() -> int:
    ap = argparse.ArgumentParser(prog="schema_validate")
    ap.add_argument("--instance", required=True, help="path to presentation json to validate")
    args = ap.parse_args()

    instance_path = Path(args.instance)

    errors = validate_document_file(instance_path)
    if not errors:
        print(f"[OK] {instance_path} conforms to {SCHEMA_PATH.name}")
        return 0
    if errors[0].startswith("[ERR]"):
        print(errors[0])
        return 2
    print(f"[NG] {instance_path} does NOT conform to {SCHEMA_PATH.name}")
    for err in errors:
        print(err)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
