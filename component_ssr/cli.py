"""CLI for server-side rendering components in an HTML file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from jinja2 import TemplateError

from .config import load_config
from .io_utils import read_text, warn, write_text
from .renderer import RenderDepthExceeded, Renderer
from .styles import StylesheetError


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render template-backed custom elements in an HTML file")
    parser.add_argument("--config", type=Path, required=True, help="Path to the components YAML config")
    parser.add_argument("--input", type=Path, required=True, help="HTML file to render")
    parser.add_argument("--out", type=Path, help="Write rendered HTML here instead of stdout")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Report which components were rendered on stderr",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    renderer = Renderer.from_config(load_config(args.config))

    try:
        html = read_text(args.input)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc

    try:
        result = renderer.render_document(html)
    except (RenderDepthExceeded, StylesheetError, TemplateError) as exc:
        raise SystemExit(f"Failed to render {args.input}: {exc}") from exc

    if args.verbose:
        tags = ", ".join(result.rendered_tags) or "none"
        warn(f"rendered {result.instances} component(s): {tags}")
        if result.discarded:
            warn(f"discarded {result.discarded} child node(s) with no matching slot")

    if args.out:
        write_text(args.out, result.html + "\n")
        return
    sys.stdout.write(result.html + "\n")


if __name__ == "__main__":
    main()
