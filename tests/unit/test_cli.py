"""Tests for the notex command-line entry point."""

from __future__ import annotations

import io
import textwrap
from pathlib import Path

import pytest
from rich.console import Console

import notex.cli as cli_module
from notex.cli import _apply_flags, _build_parser, main
from notex.config import Settings

ENGINE_MODULE = """
def register(registry):
    registry.add("demo", [(r"\\d+", "num")])
"""


@pytest.fixture
def console_output(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Route CLI status output to a buffer and keep logging untouched."""
    buffer = io.StringIO()
    monkeypatch.setattr(cli_module, "console", Console(file=buffer, width=200))
    monkeypatch.setattr(cli_module, "setup_logging", lambda settings=None: None)
    monkeypatch.setattr(
        cli_module,
        "get_settings",
        lambda: Settings(_env_file=None),  # type: ignore[call-arg]
    )
    return buffer


@pytest.fixture
def engine_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    name = "notex_cli_test_engines"
    (tmp_path / f"{name}.py").write_text(textwrap.dedent(ENGINE_MODULE))
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestArguments:
    def test_flags_overlay_settings(self, settings: Settings) -> None:
        args = _build_parser().parse_args(
            ["in.html", "--collapse-blank-lines", "-v", "-e", "a", "-e", "b"]
        )
        updated = _apply_flags(settings, args)
        assert updated.reindent.collapse_blank_lines is True
        assert updated.log.level == "DEBUG"
        assert args.engines == ["a", "b"]
        assert settings.reindent.collapse_blank_lines is False

    def test_no_flags_keep_settings(self, settings: Settings) -> None:
        args = _build_parser().parse_args(["in.html"])
        assert _apply_flags(settings, args) is settings
        assert args.output is None


class TestMain:
    """End-to-end runs over files and standard input."""

    def test_file_to_output_file(
        self,
        tmp_path: Path,
        console_output: io.StringIO,
        engine_module: str,
    ) -> None:
        source = tmp_path / "page.html"
        source.write_text('<code data-hl="demo">\n    x = 10\n</code>')
        target = tmp_path / "out.html"

        code = main([str(source), "-o", str(target), "-e", engine_module])

        assert code == 0
        result = target.read_text()
        assert '<span class="num">10</span>' in result
        assert "\nx = " in result
        status = console_output.getvalue()
        assert "Processed 1 code block(s)" in status
        assert "languages registered: demo" in status

    def test_stdin_to_stdout(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        console_output: io.StringIO,
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("<p><code>\n  a\n</code></p>"))

        assert main(["-"]) == 0

        out = capsys.readouterr().out
        assert out == (
            '<p><code style="display: block; white-space: pre-wrap">\na\n</code></p>'
        )
        assert "languages registered: none" in console_output.getvalue()

    def test_collapse_flag(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        console_output: io.StringIO,
    ) -> None:
        source = tmp_path / "page.html"
        source.write_text("<code>\n  a\n\n  b\n</code>")

        assert main([str(source), "--collapse-blank-lines"]) == 0
        assert ">a\nb</code>" in capsys.readouterr().out

    def test_missing_input(self, tmp_path: Path, console_output: io.StringIO) -> None:
        assert main([str(tmp_path / "absent.html")]) == 1
        assert "can't read" in console_output.getvalue()

    def test_unloadable_engine_warns_and_continues(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        console_output: io.StringIO,
    ) -> None:
        source = tmp_path / "page.html"
        source.write_text("<code>x</code>")

        assert main([str(source), "-e", "notex_no_such_engines"]) == 0
        assert capsys.readouterr().out == "<code>x</code>"
        assert "no engines loaded from notex_no_such_engines" in (
            console_output.getvalue()
        )
