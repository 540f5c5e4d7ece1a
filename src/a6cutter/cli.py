#!/usr/bin/env python3
"""
A6Cutter CLI: cut PDF pages into A6 tiles from the terminal.

Usage:
    python -m a6cutter <command> [options]

Commands:
    cut         Cut a PDF into A6 tiles (skip list applied)
    preview     Render a PNG contact sheet of all tiles
    plan        Show the tile grid and crop rectangles without rendering
    presets     List, show, add, delete or apply presets

Examples:
    # Cut with the current settings
    a6cutter cut labels.pdf -o labels-a6.pdf

    # Cut with a preset and an extra offset
    a6cutter cut labels.pdf -o out.pdf --preset FedEx --vshift 20

    # Rotate landscape pages counter-clockwise, no cutting
    a6cutter cut scan.pdf -o out.pdf --rotate --counter-clockwise --no-cut

    # Preview
    a6cutter preview labels.pdf -o preview.png --columns 6

    # Presets
    a6cutter presets list
    a6cutter presets add Shop --hshift -10 --skip 2,4
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from a6cutter.config import (
    APP_DESCRIPTION,
    APP_ID,
    APP_NAME,
    APP_VERSION,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    LOG_LEVEL,
)
from a6cutter.utils.exceptions import A6CutterError
from a6cutter.utils.i18n import _

# ---------------------------------------------------------------------------
# Argument parser construction
# ---------------------------------------------------------------------------


def _add_parameter_options(p: argparse.ArgumentParser) -> None:
    """Options that override the stored cutting settings."""
    g = p.add_argument_group(_("Cutting parameters"))
    g.add_argument("--preset", type=str, default=None, help=_("Start from this preset"))
    g.add_argument(
        "--hshift", type=float, default=None, help=_("Horizontal cut offset in points")
    )
    g.add_argument("--vshift", type=float, default=None, help=_("Vertical cut offset in points"))
    g.add_argument(
        "--skip",
        type=str,
        default=None,
        help=_("Output positions to leave out (e.g. '2,4,5,6')"),
    )
    g.add_argument(
        "--no-skip", action="store_true", default=False, help=_("Do not leave out any position")
    )
    g.add_argument(
        "--rotate",
        dest="rotate",
        action="store_true",
        default=None,
        help=_("Turn landscape pages to portrait"),
    )
    g.add_argument(
        "--no-rotate", dest="rotate", action="store_false", help=_("Keep page orientation")
    )
    g.add_argument(
        "--counter-clockwise",
        dest="clockwise",
        action="store_false",
        default=None,
        help=_("Turn counter-clockwise"),
    )
    g.add_argument("--clockwise", dest="clockwise", action="store_true", help=_("Turn clockwise"))
    g.add_argument(
        "--no-cut",
        dest="cut",
        action="store_false",
        default=None,
        help=_("Pass pages through without cutting"),
    )
    g.add_argument("--cut", dest="cut", action="store_true", help=_("Cut pages into tiles"))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with subcommands."""
    p = argparse.ArgumentParser(
        prog=APP_ID,
        description=f"{APP_NAME}: {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-v", "--verbose", action="store_true", help=_("Verbose logging (DEBUG)"))
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    p.add_argument(
        "--config", type=Path, default=None, help=_("Settings file (default: ~/.config/a6cutter)")
    )

    sub = p.add_subparsers(dest="command", help=_("Available commands"))

    # --- cut ---
    cut_p = sub.add_parser("cut", help=_("Cut a PDF into A6 tiles"))
    cut_p.add_argument("input", type=Path, help=_("Input PDF file"))
    cut_p.add_argument("-o", "--output", type=Path, required=True, help=_("Output PDF file"))
    _add_parameter_options(cut_p)

    # --- preview ---
    preview_p = sub.add_parser("preview", help=_("Render a contact sheet of all tiles"))
    preview_p.add_argument("input", type=Path, help=_("Input PDF file"))
    preview_p.add_argument("-o", "--output", type=Path, required=True, help=_("Output PNG file"))
    preview_p.add_argument(
        "--width", type=int, default=200, help=_("Thumbnail width in pixels (default: 200)")
    )
    preview_p.add_argument(
        "--columns", type=int, default=4, help=_("Thumbnails per row (default: 4)")
    )
    _add_parameter_options(preview_p)

    # --- plan ---
    plan_p = sub.add_parser("plan", help=_("Show tile grid and crop rectangles"))
    plan_p.add_argument("input", type=Path, help=_("Input PDF file"))
    _add_parameter_options(plan_p)

    # --- presets ---
    presets_p = sub.add_parser("presets", help=_("Manage presets"))
    presets_sub = presets_p.add_subparsers(dest="preset_command", help=_("Preset actions"))
    presets_sub.add_parser("list", help=_("List presets"))
    show_p = presets_sub.add_parser("show", help=_("Show preset settings"))
    show_p.add_argument("name", type=str)
    add_p = presets_sub.add_parser("add", help=_("Save the current settings as a preset"))
    add_p.add_argument("name", type=str)
    _add_parameter_options(add_p)
    delete_p = presets_sub.add_parser("delete", help=_("Delete a custom preset"))
    delete_p.add_argument("name", type=str)
    use_p = presets_sub.add_parser("use", help=_("Make a preset current"))
    use_p.add_argument("name", type=str)

    return p


# ---------------------------------------------------------------------------
# Settings resolution
# ---------------------------------------------------------------------------


def _open_store(args):
    from a6cutter.services.settings import PresetStore
    from a6cutter.utils.config_manager import ConfigManager, get_config_manager

    config = ConfigManager(str(args.config)) if args.config else get_config_manager()
    return PresetStore(config)


def _resolve_settings(args, store):
    """Stored (or preset) settings with command-line overrides applied."""
    from a6cutter.services.settings import parse_skip_pages

    settings = store.get(args.preset).settings if args.preset else store.load_settings()

    overrides = {}
    if args.hshift is not None:
        overrides["horizontal_shift"] = args.hshift
    if args.vshift is not None:
        overrides["vertical_shift"] = args.vshift
    if args.skip is not None:
        parse_skip_pages(args.skip, strict=True)
        overrides["skip_pages"] = args.skip
        overrides["skip_pages_enabled"] = True
    if args.no_skip:
        overrides["skip_pages_enabled"] = False
    if args.rotate is not None:
        overrides["rotation_enabled"] = args.rotate
        overrides["rotate_to_portrait"] = args.rotate
    if args.clockwise is not None:
        overrides["rotate_clockwise"] = args.clockwise
    if args.cut is not None:
        overrides["cutting_enabled"] = True
        overrides["disable_cutting"] = not args.cut

    return replace(settings, **overrides)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_cut(args, logger) -> int:
    """Handle the 'cut' command."""
    from a6cutter.services.assembler import cut_pdf

    store = _open_store(args)
    params = _resolve_settings(args, store).to_parameters()
    logger.debug("Parameters: %s", params.to_dict())

    result = cut_pdf(args.input, args.output, params)
    if result.success:
        print(f"{result.message} → {result.output_path}")
        return 0
    print(f"Error: {result.message}", file=sys.stderr)
    return 1


def _cmd_preview(args, logger) -> int:
    """Handle the 'preview' command."""
    from a6cutter.services.document import SourceDocument
    from a6cutter.services.preview import write_preview

    if args.width < 16 or args.columns < 1:
        print("Error: --width must be at least 16 and --columns at least 1", file=sys.stderr)
        return 1

    store = _open_store(args)
    params = _resolve_settings(args, store).to_parameters()

    with SourceDocument.open(args.input) as source:
        count = write_preview(source, params, args.output, width=args.width, columns=args.columns)

    skipped = sorted(p for p in params.skip_pages if p <= count)
    print(f"Preview of {count} tiles → {args.output}")
    if skipped:
        print(f"  skipped on export: {', '.join(str(p) for p in skipped)}")
    return 0


def _cmd_plan(args, logger) -> int:
    """Handle the 'plan' command."""
    from a6cutter.services.document import SourceDocument
    from a6cutter.services.geometry import A6_LANDSCAPE, grid_size, plan_crops, tile_spec_for
    from a6cutter.services.page_transform import transform_page

    store = _open_store(args)
    params = _resolve_settings(args, store).to_parameters()

    total = 0
    with SourceDocument.open(args.input) as source:
        for page in source:
            effective = transform_page(page, params.rotate_to_portrait, params.rotate_clockwise)
            bounds = effective.bounds
            crops = plan_crops(
                bounds, params.horizontal_shift, params.vertical_shift, params.disable_cutting
            )
            header = f"Page {page.index + 1}: {bounds.width:.1f} x {bounds.height:.1f} pt"
            if effective.applied_rotation:
                header += f", rotated {effective.applied_rotation:+d}°"
            if params.disable_cutting:
                print(f"{header} → pass-through")
            else:
                tile = tile_spec_for(bounds)
                cols, rows = grid_size(bounds, tile)
                kind = "landscape" if tile == A6_LANDSCAPE else "portrait"
                print(f"{header} → {cols} x {rows} tiles (A6 {kind})")
            for crop in crops:
                total += 1
                print(
                    f"  #{total:<4} x={crop.x:8.2f} y={crop.y:8.2f} "
                    f"w={crop.width:7.2f} h={crop.height:7.2f}"
                )

    skipped = len([p for p in params.skip_pages if 1 <= p <= total])
    print(f"Total: {total} tiles, {total - skipped} after skipping {skipped}")
    return 0


def _cmd_presets(args, logger) -> int:
    """Handle the 'presets' command."""
    store = _open_store(args)
    action = args.preset_command or "list"

    if action == "list":
        current = store.current
        for name in store.names():
            marker = "*" if name == current else " "
            suffix = " (built-in)" if store.get(name).builtin else ""
            print(f"{marker} {name}{suffix}")
        return 0

    if action == "show":
        preset = store.get(args.name)
        for key, value in preset.settings.to_dict().items():
            print(f"{key}: {value}")
        return 0

    if action == "add":
        preset = store.add(args.name, _resolve_settings(args, store))
        store.save_settings(preset.settings)
        print(f"Added preset {preset.name}")
        return 0

    if action == "delete":
        store.delete(args.name)
        print(f"Deleted preset {args.name}")
        return 0

    if action == "use":
        store.select(args.name)
        print(f"Current preset: {args.name}")
        return 0

    return 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Configure logging
    level = logging.DEBUG if args.verbose else LOG_LEVEL
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logger = logging.getLogger("a6cutter.cli")

    if hasattr(args, "input") and args.input and not args.input.exists():
        print(f"Error: {args.input} not found", file=sys.stderr)
        return 1

    handlers = {
        "cut": _cmd_cut,
        "preview": _cmd_preview,
        "plan": _cmd_plan,
        "presets": _cmd_presets,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, logger)
    except A6CutterError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
