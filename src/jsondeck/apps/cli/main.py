from __future__ import annotations

import argparse
import logging
from pathlib import Path

import orjson

from jsondeck.core.compile import DeckCompiler, generate_presentation
from jsondeck.core.errors import DocumentError, EncoderError
from jsondeck.core.model import extract_title, load_document_bytes
from jsondeck.core.plan import PageStatus
from jsondeck.core.render import PptxEncoder
from jsondeck.core.validate import SCHEMA_PATH, validate_document

MAX_PRINTED_ERRORS = 30


def _read_document(path: Path) -> bytes | None:
    if not path.exists():
        print(f"[NG] input not found: {path}")
        return None
    return path.read_bytes()


def _print_schema_errors(path: Path, errs: list[str]) -> None:
    print(f"[NG] {path} does NOT conform to {SCHEMA_PATH.name}")
    for m in errs[:MAX_PRINTED_ERRORS]:
        print(f"  {m}")
    if len(errs) > MAX_PRINTED_ERRORS:
        print(f"  ... ({len(errs)} errors)")


def _check_schema(path: Path, data: bytes) -> bool:
    try:
        inst = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        print(f"[NG] invalid JSON in {path}: {e}")
        return False
    errs = validate_document(inst)
    if errs:
        _print_schema_errors(path, errs)
        return False
    return True


def cmd_paths(_: argparse.Namespace) -> int:
    print(f"schema.presentation: {SCHEMA_PATH}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    path = Path(args.input).resolve()
    data = _read_document(path)
    if data is None:
        return 2
    if not _check_schema(path, data):
        return 2
    print(f"[OK] {path} conforms to {SCHEMA_PATH.name}")
    return 0


def cmd_title(args: argparse.Namespace) -> int:
    path = Path(args.input).resolve()
    data = _read_document(path)
    if data is None:
        return 2
    print(extract_title(data))
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Compile the document and dump the emission plan (no .pptx is written)."""
    path = Path(args.input).resolve()
    data = _read_document(path)
    if data is None:
        return 2
    try:
        document = load_document_bytes(data)
    except DocumentError as e:
        print(f"[NG] {e}")
        return 2

    plan = DeckCompiler(document).compile()
    dumped = orjson.dumps(plan, option=orjson.OPT_INDENT_2)
    if args.out:
        out_path = Path(args.out).resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(dumped)
        print(f"[OK] plan written: {out_path}")
    else:
        print(dumped.decode("utf-8"))

    failed = [s for s in plan.slides if s.status is PageStatus.FAILED]
    if failed:
        print(f"[NG] {len(failed)} page(s) failed to compile")
        return 2
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    path = Path(args.input).resolve()
    data = _read_document(path)
    if data is None:
        return 2

    if not args.skip_validate:
        if not _check_schema(path, data):
            print("[NG] validation failed; render aborted")
            return 2

    try:
        document = load_document_bytes(data)
    except DocumentError as e:
        print(f"[NG] {e}")
        return 2

    base_dir = Path(args.base_dir).resolve() if args.base_dir else path.parent
    try:
        result = generate_presentation(document, PptxEncoder(base_dir=base_dir))
    except EncoderError as e:
        print("[NG] render failed")
        print(f"      detail: {e}")
        return 2

    if args.out:
        out_path = Path(args.out).resolve()
        if out_path.suffix.lower() != ".pptx":
            out_path = out_path / result.filename
    else:
        out_path = path.parent / result.filename
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.data)

    if not result.ok:
        print(f"[NG] presentation failed; error deck written: {out_path}")
        print(f"      detail: {result.error}")
        return 2

    failed = [s for s in result.plan.slides if s.status is PageStatus.FAILED]
    for s in failed:
        print(f"[NG] page {s.index + 1} ({s.title or 'untitled'}) replaced by an error slide")
    print(f"[OK] rendered: {out_path} ({len(result.plan.slides)} slides)")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(prog="jsondeck")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_paths = sub.add_parser("paths", help="show bundled schema path")
    p_paths.set_defaults(func=cmd_paths)

    p_val = sub.add_parser("validate", help="validate a presentation json against the schema")
    p_val.add_argument("input", help="path to presentation .json")
    p_val.set_defaults(func=cmd_validate)

    p_title = sub.add_parser("title", help="print the presentation title")
    p_title.add_argument("input", help="path to presentation .json")
    p_title.set_defaults(func=cmd_title)

    p_plan = sub.add_parser("plan", help="compile and dump the per-slide emission plan as json")
    p_plan.add_argument("input", help="path to presentation .json")
    p_plan.add_argument("--out", required=False, help="output plan .json path (default: stdout)")
    p_plan.set_defaults(func=cmd_plan)

    p_rnd = sub.add_parser("render", help="render a .pptx from a presentation json")
    p_rnd.add_argument("input", help="path to presentation .json")
    p_rnd.add_argument("--out", required=False, help="output .pptx path or directory (default: next to input)")
    p_rnd.add_argument("--base-dir", required=False, help="directory for relative image paths (default: input dir)")
    p_rnd.add_argument("--skip-validate", action="store_true", help="render without the schema check")
    p_rnd.set_defaults(func=cmd_render)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
