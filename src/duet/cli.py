"""duet command-line interface."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path

import click

from duet import __version__
from duet.config import DuetConfig, load_nearest_config
from duet.errors import DiagnosticRenderer, ParseError, format_parse_error
from duet.formatter import DuetFormatter
from duet.parser import parse_module, parse_source
from duet.roundtrip import roundtrip_report
from duet.source import KNOWN_EXTENSIONS

logger = logging.getLogger(__name__)


def _source_files(path: str) -> tuple[list[Path], DuetConfig]:
    """Resolve PATH to the module files it names, plus the governing config."""
    target = Path(path)
    config, project_dir = load_nearest_config(target)
    if target.is_file():
        return [target], config

    src_dir = target / config.source.root
    if project_dir is not None and target.resolve() == project_dir and src_dir.is_dir():
        target = src_dir

    files: set[Path] = set()
    for ext in config.source.extensions:
        files.update(target.rglob(f"*{ext}"))
    return sorted(files), config


def _extensions(config: DuetConfig) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*config.source.extensions, *KNOWN_EXTENSIONS]))


def _report(error: ParseError, filename: str, source: str, pretty: bool) -> None:
    if pretty:
        renderer = DiagnosticRenderer(color=sys.stderr.isatty(), sources={filename: source})
        for diag in error.diagnostics:
            click.echo(renderer.render(diag), err=True)
    else:
        click.echo(format_parse_error(filename, error), err=True)


@click.group()
@click.version_option(__version__, prog_name="duet")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """The duet interface-description language toolchain."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--pretty", is_flag=True, help="Show errors as annotated source excerpts.")
def check(path: str, pretty: bool) -> None:
    """Parse module files and report the first error in each."""
    files, config = _source_files(path)
    if not files:
        click.echo("warning: no module files found", err=True)
        return

    failed = 0
    for file in files:
        source = file.read_text()
        try:
            parse_source(str(file), source, _extensions(config))
        except ParseError as e:
            failed += 1
            _report(e, str(file), source, pretty)

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) failed to parse", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s), no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Rewrite module files in canonical form."""
    if use_stdin:
        config, _ = load_nearest_config(Path(path))
        formatter = DuetFormatter(indent=config.format.indent)
        source = sys.stdin.read()
        try:
            module = parse_module(source, "<stdin>")
        except ParseError as e:
            _report(e, "<stdin>", source, pretty=False)
            raise SystemExit(1)
        formatted = formatter.format(module)
        if check:
            if formatted != source:
                click.echo("would reformat <stdin>", err=True)
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    files, config = _source_files(path)
    if not files:
        click.echo("no module files found", err=True)
        return

    formatter = DuetFormatter(indent=config.format.indent)

    needs_formatting = False
    had_errors = False
    for file in files:
        source = file.read_text()
        try:
            module = parse_module(source, str(file))
        except ParseError as e:
            had_errors = True
            _report(e, str(file), source, pretty=False)
            continue

        formatted = formatter.format(module)
        if formatted != source:
            if check:
                click.echo(f"would reformat {file}")
                needs_formatting = True
            else:
                file.write_text(formatted)
                click.echo(f"formatted {file}")

    if had_errors or (check and needs_formatting):
        raise SystemExit(1)


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def roundtrip(path: str) -> None:
    """Check that rendering each module is stable under re-parsing."""
    files, config = _source_files(path)
    if not files:
        click.echo("warning: no module files found", err=True)
        return

    render = DuetFormatter(indent=config.format.indent).format
    failed = 0
    for file in files:
        source = file.read_text()
        try:
            module = parse_source(str(file), source, _extensions(config)).value
        except ParseError as e:
            failed += 1
            _report(e, str(file), source, pretty=False)
            continue
        try:
            result = roundtrip_report(module, render, filename=f"{file} (rendered)")
        except ParseError as e:
            failed += 1
            click.echo(f"{file}: rendered text does not re-parse: {e}", err=True)
            continue
        if not result.ok:
            failed += 1
            click.echo(f"{file}: rendering is not stable", err=True)
            click.echo(result.diff(module.name), err=True)
        else:
            logger.debug("%s round-trips", file)

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) failed the round trip", err=True)
        raise SystemExit(1)
    click.echo(f"round-tripped {len(files)} file(s)")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a module file."""
    config, _ = load_nearest_config(Path(file))
    source = Path(file).read_text()
    try:
        module = parse_source(file, source, _extensions(config)).value
    except ParseError as e:
        _report(e, file, source, pretty=True)
        raise SystemExit(1)

    _dump_ast(module, 0)


@main.command()
def lsp() -> None:
    """Start the duet language server."""
    from duet.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            if field_name == "position":
                continue
            value = getattr(node, field_name)
            if isinstance(value, tuple):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_ast(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_ast(value, depth + 2)
            elif isinstance(value, Enum):
                click.echo(f"{indent}  {field_name}: {value.value}")
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    else:
        click.echo(f"{indent}{name}: {node!r}")
