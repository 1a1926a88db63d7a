"""Command-line entry point: dedent and highlight the code blocks of an HTML file.

Engines are not built in.  Each ``--engine`` names an importable module
exposing ``register(registry)``, which adds its languages to the registry.

Usage:
    notex page.html -e mysite.highlighters -o page.out.html
    cat page.html | notex - -e mysite.highlighters > page.out.html
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console

from notex import setup_logging
from notex.config import Settings, get_settings
from notex.dom import parse_html
from notex.engines import EngineRegistry, load_engine_module
from notex.pipeline import process_document, serialize_like

console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notex",
        description="Dedent and syntax-tag <code> blocks in an HTML document.",
    )
    parser.add_argument(
        "input",
        help="HTML file to process, or '-' to read standard input.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the result here instead of standard output.",
    )
    parser.add_argument(
        "-e",
        "--engine",
        dest="engines",
        action="append",
        default=[],
        metavar="MODULE",
        help="Import MODULE and call its register(registry). Repeatable.",
    )
    parser.add_argument(
        "--collapse-blank-lines",
        action="store_true",
        help="Drop line breaks met at the start of a line while dedenting.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level on the console.",
    )
    return parser


def _apply_flags(settings: Settings, args: argparse.Namespace) -> Settings:
    """Overlay command-line flags on the loaded settings."""
    if args.collapse_blank_lines:
        reindent = settings.reindent.model_copy(update={"collapse_blank_lines": True})
        settings = settings.model_copy(update={"reindent": reindent})
    if args.verbose:
        log = settings.log.model_copy(update={"level": "DEBUG"})
        settings = settings.model_copy(update={"log": log})
    return settings


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``notex``."""
    args = _build_parser().parse_args(argv)
    settings = _apply_flags(get_settings(), args)
    setup_logging(settings)

    try:
        html = _read_input(args.input)
    except OSError as exc:
        console.print(f"[red]Error:[/] can't read {args.input}: {exc}")
        return 1

    registry = EngineRegistry()
    for module_name in args.engines:
        if not load_engine_module(registry, module_name):
            console.print(f"[yellow]Warning:[/] no engines loaded from {module_name}")

    root = parse_html(html)
    blocks = process_document(root, registry, settings)
    result = serialize_like(root, html) if html else html

    if args.output is None:
        sys.stdout.write(result)
    else:
        args.output.write_text(result, encoding="utf-8")

    languages = ", ".join(registry.languages()) or "none"
    console.print(
        f"Processed [bold]{len(blocks)}[/] code block(s); "
        f"languages registered: {languages}"
    )
    return 0
