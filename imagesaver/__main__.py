"""CLI entrypoint for saving an image.

Usage:
    python -m imagesaver <url> --target-dir <dir> [--name NAME] [--config config.yaml]
                         [--ext jpg --ext png] [--resize W H] [--rotate DEG]
                         [--format FMT] [--text TEXT ...] [--json]
    python -m imagesaver <body-file> --content-type "multipart/form-data; boundary=..."
                         --target-dir <dir> [...]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from imagesaver.config import ImageSaverConfig
from imagesaver.errors import ImageSaverError
from imagesaver.process.pipeline import Pipeline
from imagesaver.saver import ImageSaver
from imagesaver.types import TextOverlay, UploadRequest
from imagesaver.utils.image import get_image_dimensions, probe_format

console = Console()


def _build_pipeline(args: argparse.Namespace) -> Pipeline:
    pipeline = Pipeline()
    if args.resize:
        pipeline.resize(width=args.resize[0], height=args.resize[1])
    if args.rotate:
        pipeline.rotate(args.rotate)
    if args.format:
        pipeline.to_format(args.format)
    return pipeline


def _result_to_dict(saver: ImageSaver) -> dict:
    """Convert the stored target to a JSON-serializable dict."""
    width, height = get_image_dimensions(saver.target.path)
    return {
        "file_name": saver.target.file_name,
        "path": str(saver.target.path),
        "format": probe_format(saver.target.path),
        "width": width,
        "height": height,
    }


def _build_summary_panel(result: dict) -> Panel:
    lines = [
        f"[bold]File:[/bold] {result['file_name']}",
        f"[bold]Path:[/bold] {result['path']}",
        f"[bold]Format:[/bold] {result['format']}",
        f"[bold]Size:[/bold] {result['width']}x{result['height']}",
    ]
    return Panel("\n".join(lines), title="Image Saved", border_style="green")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Download or unpack an image, validate it and store it.",
        prog="python -m imagesaver",
    )
    parser.add_argument("source", help="Image URL, or a multipart body file with --content-type")
    parser.add_argument(
        "--target-dir", "-d", type=Path, required=True,
        help="Directory the image is stored in",
    )
    parser.add_argument("--name", default=None, help="Output file name without extension")
    parser.add_argument("--config", type=Path, default=None, help="ImageSaver config YAML")
    parser.add_argument(
        "--ext", action="append", default=None,
        help="Accepted extension (repeatable, default from config)",
    )
    parser.add_argument(
        "--content-type", default=None,
        help="Treat SOURCE as a raw multipart body with this Content-Type",
    )
    parser.add_argument("--resize", type=int, nargs=2, metavar=("W", "H"), help="Resize to W x H")
    parser.add_argument("--rotate", type=float, default=None, help="Rotate clockwise by degrees")
    parser.add_argument("--format", default=None, help="Convert to this format (png, jpg, webp...)")
    parser.add_argument("--text", action="append", default=None, help="Centred text overlay (repeatable)")
    parser.add_argument("--json", action="store_true", help="Output JSON summary")
    args = parser.parse_args(argv)

    if not args.json:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_time=True, show_path=False)],
        )
    else:
        logging.basicConfig(level=logging.WARNING)

    if not args.target_dir.is_dir():
        console.print(f"[red]Error: {args.target_dir} is not a directory[/red]")
        return 1

    config = ImageSaverConfig.from_yaml(args.config) if args.config else ImageSaverConfig.default()
    saver = ImageSaver(args.target_dir, valid_extensions=args.ext, config=config)

    try:
        if args.content_type:
            body_path = Path(args.source)
            with open(body_path, "rb") as body:
                request = UploadRequest(headers={"Content-Type": args.content_type}, body=body)
                saver.acquire(request, args.name)
        else:
            saver.acquire(args.source, args.name)

        pipeline = _build_pipeline(args)
        overlays = [TextOverlay(text=t, background="white", padding=4) for t in args.text or []]
        if len(pipeline) or args.format or overlays:
            saver.process(pipeline, overlays)
    except ImageSaverError as e:
        if args.json:
            print(json.dumps({"error": e.code, "message": e.message}, indent=2))
        else:
            console.print(f"[red]Error ({e.code}): {e.message}[/red]")
        return 1
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    result = _result_to_dict(saver)
    if args.json:
        print(json.dumps(result, indent=2))
    else:
        console.print()
        console.print(_build_summary_panel(result))

    return 0


if __name__ == "__main__":
    sys.exit(main())
