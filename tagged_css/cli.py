"""
Lists the stylesheets embedded in tagged templates of a JavaScript or TypeScript file.
With --check, verifies that the file is reproduced exactly from its parsed form.
"""

from __future__ import annotations

from pathlib import Path

import click
from .config import ConfigError, build_config
from .exceptions import ParseFileError
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    normalize_filepath,
)
from .parser import parse_file
from .syntax import create_syntax

__all__ = ["cli"]


def _warn(message: str) -> None:
    click.echo(message, err=True)


@click.command()
@click.version_option()
@click.option("--tag", "tags", multiple=True, help="Template tag to extract (repeatable, `*` suffix allowed)")
@click.option("--id", "syntax_id", help="Syntax identifier used in placeholders and disable comments")
@click.option("--check", is_flag=True, help="Fail unless the file round-trips unchanged")
@click.option("--show-css", is_flag=True, help="Print each extracted stylesheet")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    tags: tuple[str, ...] = (),
    syntax_id: str | None = None,
    check: bool = False,
    show_css: bool = False,
):
    """
    Entry point for inspecting the stylesheets of a source file.

    Args:
        filepath: Path to the JavaScript or TypeScript file to process.
        tags: Template tags to extract, overriding configured tag names.
        syntax_id: Override for the syntax identifier.
        check: Whether to verify that the file round-trips unchanged.
        show_css: Whether to print the normalized CSS of each stylesheet.

    Returns:
        None.

    Raises:
        click.BadParameter: If CLI parameters reference invalid paths or contain
            invalid configuration values.
        click.ClickException: If the file cannot be read or scanned, exceeds the
            size limit, or does not round-trip under --check.

    Examples:
        tagged-css src/button.ts --tag css --tag "styled*" --check
    """
    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    try:
        config = build_config(filepath.parent, id=syntax_id, tag_names=tags)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        stat_result = collect_file_stat(filepath)
        enforce_file_size(stat_result, max_file_size, filepath)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    try:
        document = parse_file(filepath, config, warn=_warn)
    except ParseFileError as error:
        raise click.ClickException(str(error)) from error

    for root in document:
        stylesheet = root.state
        start = root.source.start
        line = f"{start.line}:{start.column} {stylesheet.region.tag} placeholders={len(stylesheet.replacements)}"
        if stylesheet.nested:
            line += " nested"
        click.echo(line)
        if show_css:
            click.echo(stylesheet.normalized_source)

    # Round-trip check
    if check:
        if create_syntax(config, warn=_warn).to_string(document) != document.source.input:
            raise click.ClickException(f"{filepath} does not round-trip through the stylesheet tree.")
        click.echo(f"{filepath}: round-trip OK")


if __name__ == "__main__":
    cli()
