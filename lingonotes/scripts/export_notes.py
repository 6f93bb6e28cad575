from __future__ import annotations

import argparse
from pathlib import Path

from lingonotes.export import EXPORT_FORMATS, NothingToExportError, export_notes
from lingonotes.internal_core.config import load_config
from lingonotes.internal_core.note_store import JsonFileNoteStore


def build_parser() -> argparse.ArgumentParser:
    cfg = load_config()
    parser = argparse.ArgumentParser(description="Export the stored LingoNotes history.")
    parser.add_argument("--format", dest="fmt", choices=EXPORT_FORMATS, default="txt")
    parser.add_argument(
        "--store",
        type=Path,
        default=cfg.store_path(),
        help="Path to the JSON history file.",
    )
    parser.add_argument("--out", type=Path, default=Path("."), help="Output directory.")
    parser.add_argument("--source-lang", default=cfg.LINGONOTES_DEFAULT_SOURCE_LANG)
    parser.add_argument("--target-lang", default=cfg.LINGONOTES_DEFAULT_TARGET_LANG)
    parser.add_argument("--slot", default=cfg.LINGONOTES_STORAGE_SLOT)
    return parser


def main(argv: list[str] | None = None) -> Path:
    args = build_parser().parse_args(argv)
    store = JsonFileNoteStore(args.store, slot=args.slot)
    try:
        artifact = export_notes(
            store.load(),
            args.fmt,
            source_lang=args.source_lang,
            target_lang=args.target_lang,
        )
    except NothingToExportError as exc:
        raise SystemExit(exc.message) from exc

    args.out.mkdir(parents=True, exist_ok=True)
    output_path = args.out / artifact.filename
    output_path.write_bytes(artifact.content)
    print(f"exported: {output_path}")
    return output_path


if __name__ == "__main__":
    main()
