"""CLI tool for rendering slips to previews, ESC/POS jobs, or a printer."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from slipprint.config import AppConfig, load_config, load_templates, read_template_file, settings
from slipprint.models.template import DEFAULT_TEMPLATE, PrintTemplate, TextOptions
from slipprint.printers import PrinterError, create_printer
from slipprint.store import TemplateStore
from slipprint.templates import PillowRasterizer, SlipTemplateEngine, TemplateError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a slip template to a preview PNG, an ESC/POS job, or a printer.",
        prog="slipprint-render",
    )
    parser.add_argument(
        "template",
        type=Path,
        nargs="?",
        help="Path to template YAML/JSON file (default: the store's active template)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: preview.png or slip.bin)",
    )
    parser.add_argument(
        "-d",
        "--data",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Field value (can be specified multiple times)",
    )
    parser.add_argument(
        "--json",
        type=Path,
        dest="json_file",
        help="JSON file with field values",
    )
    parser.add_argument(
        "--text",
        type=Path,
        dest="text_file",
        help="Render a plain text file instead of a template",
    )
    parser.add_argument(
        "--format",
        choices=["png", "escpos"],
        default="png",
        help="Output format (default: png)",
    )
    parser.add_argument(
        "--print",
        dest="printer",
        metavar="NAME",
        help="Send the job to a configured printer instead of writing a file",
    )
    parser.add_argument(
        "--font-path",
        action="append",
        default=[],
        dest="font_paths",
        help="Additional font search path (can be specified multiple times)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default: {settings.config_file})",
    )
    return parser


def _parse_context(args: argparse.Namespace) -> dict[str, str]:
    """Collect field values from --json and -d arguments.

    Raises:
        ValueError: If a -d item has no '=' or the JSON file is not an object.
    """
    context: dict[str, str] = {}

    if args.json_file:
        with open(args.json_file, encoding="utf-8") as f:
            json_data = json.load(f)
        if not isinstance(json_data, dict):
            raise ValueError(f"{args.json_file} must contain a JSON object")
        context.update(json_data)

    for item in args.data:
        if "=" not in item:
            raise ValueError(f"Invalid data format '{item}'. Use KEY=VALUE")
        key, value = item.split("=", 1)
        context[key] = value

    return context


def _resolve_template(args: argparse.Namespace, config: AppConfig) -> PrintTemplate:
    if args.template is not None:
        if not args.template.exists():
            raise FileNotFoundError(f"Template file not found: {args.template}")
        return read_template_file(args.template)

    result = load_templates(config.templates_dir, config.fonts_dir)
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    name = config.active_template or TemplateStore(config.templates_dir).active_name()
    if name in result.templates:
        return result.templates[name]
    if name and name != DEFAULT_TEMPLATE.name:
        print(f"Warning: active template '{name}' not found, using default", file=sys.stderr)
    return DEFAULT_TEMPLATE


async def _send(config: AppConfig, name: str, job: bytes) -> None:
    printer_config = config.get_printer(name)
    if printer_config is None:
        raise PrinterError(f"Printer '{name}' is not configured or disabled")
    async with create_printer(printer_config) as printer:
        await printer.print_raw(job)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for slipprint-render CLI."""
    args = _build_parser().parse_args(argv)
    config = load_config(args.config or settings.config_file)

    font_paths = list(args.font_paths)
    if config.fonts_dir.exists():
        font_paths.insert(0, str(config.fonts_dir))
    engine = SlipTemplateEngine(
        rasterizer=PillowRasterizer(font_paths=font_paths or None),
        feed_lines=config.feed_lines,
    )

    try:
        context = _parse_context(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.text_file:
            text = args.text_file.read_text(encoding="utf-8")
            if args.format == "png" and not args.printer:
                layout = engine.layout_text(text, TextOptions())
                output = engine.preview_layout(layout)
            else:
                output = engine.render_text(text, TextOptions())
        else:
            template = _resolve_template(args, config)
            if args.format == "png" and not args.printer:
                output = engine.render_preview(template, context, format="PNG")
            else:
                output = engine.render(template, context)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error loading template: {e}", file=sys.stderr)
        return 1
    except TemplateError as e:
        print(f"Error rendering template: {e}", file=sys.stderr)
        return 1

    if args.printer:
        try:
            asyncio.run(_send(config, args.printer, output))
        except (ConnectionError, PrinterError) as e:
            print(f"Error printing: {e}", file=sys.stderr)
            return 1
        print(f"Sent {len(output)} bytes to {args.printer}")
        return 0

    output_path = args.output or Path("preview.png" if args.format == "png" else "slip.bin")
    try:
        with open(output_path, "wb") as f:
            f.write(output)
        print(f"Rendered to {output_path}")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
