"""Extraction of stylesheets from host source text."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .config import ConfigError, SyntaxConfig, validate_config
from .constants import BEFORE_START_RAW, CODE_AFTER_RAW, CODE_BEFORE_RAW, IMPLEMENTATION_NAME
from .css_nodes import Document, Position, Root, Source
from .css_parser import parse_stylesheet
from .exceptions import HostSyntaxError, ParseFileError, StylesheetSyntaxError
from .extract import disable_marker, extract_regions
from .filesystem import safe_read
from .host import host_language, scan_module
from .location import correct_locations
from .models import ExtractedStylesheet, Region
from .normalize import compute_normalized_source
from .placeholders import create_placeholder_func
from .replacements import compute_replaced_source

logger = logging.getLogger(__name__)

WarnFunc = Callable[[str], None]


def skipped_template_message(filename: str, region: Region, syntax_id: str) -> str:
    """Build the warning emitted when a template's CSS cannot be parsed."""
    line = region.template.quasi.loc.start.line
    return (
        f"[{IMPLEMENTATION_NAME}] {filename}: Skipping template (Line {line}) as it included "
        "either invalid syntax or complex expressions the plugin could not interpret. "
        f'Consider using a "// {disable_marker(syntax_id)}" comment to disable this message'
    )


def parse_styles(
    source: str,
    config: SyntaxConfig | None = None,
    *,
    filename: str | None = None,
    warn: WarnFunc | None = None,
) -> Document:
    """Parse the stylesheets embedded in a host source.

    Every tagged template whose tag matches the configuration becomes a
    `Root` of the returned document, with positions in host coordinates.
    Templates whose CSS fails to parse are skipped with one warning each.

    Args:
        source: JavaScript or TypeScript source text.
        config: Configuration controlling extraction. Defaults to a new
            `SyntaxConfig`, which extracts nothing until tag names are set.
        filename: Name of the source, used in warnings and to pick the host
            grammar when the configuration names none.
        warn: Callback receiving non-fatal warnings. Defaults to the module
            logger.

    Returns:
        Document: One root per parsed template, in source order. The document
            stringifies back to `source` while unmodified.

    Raises:
        ConfigError: If the configuration fails validation.
        HostSyntaxError: If the host source does not parse.

    Examples:
        document = parse_styles("css`.foo { color: red; }`", SyntaxConfig(tag_names=("css",)))
        document.first.first.selector  # ".foo"
    """
    config = config or SyntaxConfig()
    validate_config(config)
    warn = warn or logger.warning
    language = config.language or host_language(filename)
    filename = filename or "<input>"

    module = scan_module(source, language=language)
    regions = extract_regions(module, config.tag_names, config.id)
    placeholder = config.placeholder or create_placeholder_func(config.id, config.evaluator)
    parse_css = config.parser or parse_stylesheet

    document = Document()
    document.source = Source(start=Position(1, 1, 0), input=source)

    current_offset = 0
    last_root: Root | None = None
    for region in regions:
        start_index = region.start + 1
        replaced = compute_replaced_source(region, source, placeholder)
        normalized = compute_normalized_source(replaced.text, region)

        try:
            root = parse_css(normalized.text)
        except StylesheetSyntaxError as error:
            logger.debug("%s: template at offset %d failed to parse: %s", filename, region.start, error)
            warn(skipped_template_message(filename, region, config.id))
            continue

        # Templates inside a parsed template are written out by their parent
        nested = region.nested and region.start < current_offset
        stylesheet = ExtractedStylesheet(
            region=region,
            replacements=replaced.replacements,
            normalized_source=normalized.text,
            prefix_offset=normalized.prefix_offset,
            indentation_map=normalized.indentation_map,
            nested=nested,
            indentation_text=normalized.indentation_text,
        )
        root.state = stylesheet
        root.raws.setdefault(BEFORE_START_RAW, "")

        if nested:
            root.raws[CODE_BEFORE_RAW] = ""
        else:
            root.raws[CODE_BEFORE_RAW] = source[
                current_offset : start_index + normalized.prefix_offset.offset
            ]
            current_offset = region.end - 1
            last_root = root

        correct_locations(root, stylesheet, config.id)
        document.append(root)

    if last_root is not None:
        last_root.raws[CODE_AFTER_RAW] = source[current_offset:]

    return document


def parse_file(
    filepath: Path,
    config: SyntaxConfig | None = None,
    *,
    warn: WarnFunc | None = None,
) -> Document:
    """Parse the stylesheets embedded in a source file.

    Args:
        filepath: Path to the JavaScript or TypeScript file to parse.
        config: Configuration controlling extraction; defaults to a new
            `SyntaxConfig` when omitted.
        warn: Callback receiving non-fatal warnings.

    Returns:
        Document: Parsed document for the file content. The text read from
            the file is kept as `document.source.input`.

    Raises:
        ParseFileError: If configuration is invalid, the file cannot be read or
            decoded, or the host source does not parse.

    Examples:
        document = parse_file(Path("src/button.ts"), config)
    """
    config = config or SyntaxConfig()
    try:
        validate_config(config)
    except ConfigError as error:
        raise ParseFileError(str(error)) from error

    try:
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise ParseFileError(error_message) from error
    except IOError as error:
        raise ParseFileError(str(error)) from error

    try:
        return parse_styles(content, config, filename=str(filepath), warn=warn)
    except HostSyntaxError as error:
        error_message = f"{filepath}: {error}"
        raise ParseFileError(error_message) from error
