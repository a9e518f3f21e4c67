"""Design HD44780 custom characters and generate Arduino sketches."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from .bitmap import decode_token, encode_token, normalize_rows, render_rows
from .codegen import sketch_text
from .config import ConfigError, GlyphConfig, resolve_config
from .editor import GlyphEditor
from .records import GlyphCharacter, ImportShapeError, dumps_payload
from .settings import DataType, Interfacing, LcdColor
from .store import FileBlobStore, SavedGlyphStore

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _add_glyph_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--token",
        default=None,
        help="Eight-character glyph token (one base-32 digit per row)",
    )
    source.add_argument(
        "--rows",
        nargs="+",
        type=float,
        default=None,
        metavar="VALUE",
        help="Row values 0-31, top row first; missing rows are blank",
    )
    parser.add_argument(
        "--link",
        default=None,
        help="Share link or query string to load glyph and settings from",
    )
    parser.add_argument(
        "--color",
        choices=[item.value for item in LcdColor],
        default=None,
        help="LCD backlight colour",
    )
    parser.add_argument(
        "--interfacing",
        choices=[item.value for item in Interfacing],
        default=None,
        help="Direct pin wiring or PCF8574 I2C backpack",
    )
    parser.add_argument(
        "--datatype",
        choices=[item.value for item in DataType],
        default=None,
        help="Render row literals as binary or hexadecimal",
    )


def _add_output_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("--output", "-o", type=Path, default=None, help=help_text)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed arguments for the ``lcdglyph`` command."""

    parser = argparse.ArgumentParser(prog="lcdglyph", description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML configuration file",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Directory holding the saved glyph list",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=_LOG_LEVELS,
        help="Logging verbosity",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    code = commands.add_parser("code", help="Print the generated Arduino sketch")
    _add_glyph_arguments(code)
    _add_output_argument(code, "Write the sketch to this .ino file")

    token = commands.add_parser("token", help="Print the share token for a glyph")
    _add_glyph_arguments(token)

    decode = commands.add_parser("decode", help="Print the row values of a token")
    decode.add_argument("value", help="Eight-character glyph token")

    preview = commands.add_parser("preview", help="Draw the glyph as text")
    _add_glyph_arguments(preview)

    share = commands.add_parser("share", help="Print a share link for a glyph")
    share.add_argument("base_url", help="Page URL the share fields are added to")
    _add_glyph_arguments(share)

    export = commands.add_parser("export", help="Export the glyph as JSON")
    _add_glyph_arguments(export)
    _add_output_argument(export, "Write the export to this file")

    import_cmd = commands.add_parser(
        "import", help="Load a character export or merge a saves export"
    )
    import_cmd.add_argument("path", type=Path, help="Export file to import")

    saves = commands.add_parser("saves", help="Manage the saved glyph list")
    saves_commands = saves.add_subparsers(dest="saves_command", required=True)
    saves_list = saves_commands.add_parser("list", help="List saved glyphs")
    saves_list.add_argument(
        "--json", action="store_true", help="Emit the list export as JSON"
    )
    saves_show = saves_commands.add_parser("show", help="Show one saved glyph")
    saves_show.add_argument("id", help="Saved glyph identifier")
    saves_save = saves_commands.add_parser("save", help="Save a glyph under a name")
    saves_save.add_argument("name", help="Display name for the saved glyph")
    _add_glyph_arguments(saves_save)
    saves_rename = saves_commands.add_parser("rename", help="Rename a saved glyph")
    saves_rename.add_argument("id", help="Saved glyph identifier")
    saves_rename.add_argument("name", help="New display name")
    saves_overwrite = saves_commands.add_parser(
        "overwrite", help="Replace a saved glyph's bitmap and settings"
    )
    saves_overwrite.add_argument("id", help="Saved glyph identifier")
    _add_glyph_arguments(saves_overwrite)
    saves_delete = saves_commands.add_parser("delete", help="Delete a saved glyph")
    saves_delete.add_argument("id", help="Saved glyph identifier")
    saves_export = saves_commands.add_parser("export", help="Export all saved glyphs")
    _add_output_argument(saves_export, "Write the export to this file")

    return parser.parse_args(argv)


def build_editor(
    args: argparse.Namespace,
    config: GlyphConfig,
    *,
    base: GlyphCharacter | None = None,
) -> GlyphEditor:
    """Return an editor loaded from ``base`` and the glyph options in ``args``."""

    editor = GlyphEditor(
        settings=config.defaults,
        pins=config.pins,
        history_limit=config.history_limit,
    )
    if base is not None:
        editor.load_character(base)
    if args.link:
        if not editor.load_share(args.link):
            LOGGER.info("share link did not contain a valid glyph token")
    if args.token is not None:
        rows = decode_token(args.token)
        if rows is None:
            raise SystemExit(f"invalid glyph token: {args.token!r}")
        editor.load_character(GlyphCharacter.from_settings(rows, editor.settings))
    elif args.rows is not None:
        if len(args.rows) > 8:
            LOGGER.warning("ignoring %d extra row values", len(args.rows) - 8)
        editor.load_character(
            GlyphCharacter.from_settings(normalize_rows(args.rows), editor.settings)
        )
    if args.color is not None:
        editor.set_color(LcdColor(args.color))
    if args.interfacing is not None:
        editor.set_interfacing(Interfacing(args.interfacing))
    if args.datatype is not None:
        editor.set_datatype(DataType(args.datatype))
    return editor


def open_store(args: argparse.Namespace, config: GlyphConfig) -> SavedGlyphStore:
    directory = args.store.expanduser() if args.store is not None else config.store_dir
    LOGGER.debug("using saved glyph store in %s", directory)
    return SavedGlyphStore(FileBlobStore(directory))


def _write(text: str, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    LOGGER.info("wrote %s", output)


def _cmd_code(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    editor = build_editor(args, config)
    if args.output is not None:
        _write(sketch_text(editor.code), args.output)
        return []
    return [editor.code]


def _cmd_token(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    return [build_editor(args, config).token]


def _cmd_decode(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    rows = decode_token(args.value)
    if rows is None:
        raise SystemExit(f"invalid glyph token: {args.value!r}")
    return [json.dumps(list(rows))]


def _cmd_preview(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    return render_rows(build_editor(args, config).rows)


def _cmd_share(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    return [build_editor(args, config).share_url(args.base_url)]


def _cmd_export(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    text = build_editor(args, config).export_text()
    if args.output is not None:
        _write(text, args.output)
        return []
    return [text.rstrip("\n")]


def _cmd_import(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    path: Path = args.path
    if not path.exists():
        raise SystemExit(f"import file not found: {path}")
    editor = GlyphEditor(
        settings=config.defaults,
        pins=config.pins,
        history_limit=config.history_limit,
    )
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ImportShapeError(f"import is not valid UTF-8: {exc.reason}") from exc
    imported = editor.import_text(text, open_store(args, config))
    if imported.character is not None:
        return [f"loaded character {editor.token}", *render_rows(editor.rows)]
    lines = [f"imported {len(imported.saves)} saved glyph(s)"]
    lines.extend(f"{record.id}  {record.name}" for record in imported.saves)
    return lines


def _cmd_saves(args: argparse.Namespace, config: GlyphConfig) -> List[str]:
    store = open_store(args, config)
    action = args.saves_command
    if action == "list":
        if args.json:
            return [dumps_payload(store.export()).rstrip("\n")]
        return [
            f"{record.id}  {encode_token(record.rows)}  {record.name}"
            for record in store.records()
        ]
    if action == "show":
        record = store.get(args.id)
        editor = GlyphEditor(pins=config.pins)
        editor.load_character(record.character)
        return [
            f"{record.name} ({editor.token})",
            *render_rows(record.rows),
            "",
            editor.code,
        ]
    if action == "save":
        record = store.save_new(args.name, build_editor(args, config).character)
        return [f"saved {record.id}  {record.name}"]
    if action == "rename":
        record = store.rename(args.id, args.name)
        return [f"renamed {record.id} to {record.name}"]
    if action == "overwrite":
        editor = build_editor(args, config, base=store.get(args.id).character)
        record = store.overwrite(args.id, editor.character)
        return [f"updated {record.id}  {encode_token(record.rows)}"]
    if action == "delete":
        record = store.delete(args.id)
        return [f"deleted {record.id}  {record.name}"]
    text = dumps_payload(store.export())
    if args.output is not None:
        _write(text, args.output)
        return []
    return [text.rstrip("\n")]


_COMMANDS: Dict[str, Callable[[argparse.Namespace, GlyphConfig], List[str]]] = {
    "code": _cmd_code,
    "token": _cmd_token,
    "decode": _cmd_decode,
    "preview": _cmd_preview,
    "share": _cmd_share,
    "export": _cmd_export,
    "import": _cmd_import,
    "saves": _cmd_saves,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``lcdglyph`` command."""

    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    try:
        config = resolve_config(args.config)
        lines = _COMMANDS[args.command](args, config)
    except (ConfigError, ImportShapeError) as exc:
        raise SystemExit(str(exc)) from exc
    except KeyError as exc:
        raise SystemExit(exc.args[0] if exc.args else str(exc)) from exc
    if lines:
        print("\n".join(lines))
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
