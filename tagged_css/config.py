"""Configuration loading and management."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any
import tomllib

from .constants import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_SYNTAX_ID,
    HOST_LANGUAGES,
    SYNTAX_ID_PATTERN,
    TAG_WILDCARD,
)
from .css_stringifier import Stringifier


@dataclass
class SyntaxConfig:
    """Configuration for extracting stylesheets from tagged templates.

    Attributes:
        id: Identifier used in placeholders, disable comments and raw keys.
        tag_names: Template tags to extract; a trailing ``*`` matches any tag
            with that prefix. Nothing is extracted while empty.
        placeholder: Callable choosing substitution text, taking the
            interpolation index, expression, preceding text and following
            fragment. Defaults to `create_placeholder_func(id, evaluator)`.
        evaluator: Callable folding an expression to constant text, or
            returning None. Defaults to `evaluate_constant`.
        parser: Callable parsing normalized CSS text into a `Root`. Defaults
            to `parse_stylesheet`.
        stringifier: `Stringifier` subclass the template stringifier is built
            on. Defaults to `Stringifier`.
        language: tree-sitter grammar of the host source, one of
            ``"javascript"``, ``"typescript"`` and ``"tsx"``. Picked from the
            file extension when unset.
        max_file_size: Maximum file size in bytes that will be processed.

    Examples:
        SyntaxConfig(tag_names=("css", "styled*"))
    """

    # Syntax identity
    id: str = DEFAULT_SYNTAX_ID
    tag_names: tuple[str, ...] = ()

    # Pluggable steps
    placeholder: Callable[..., str] | None = None
    evaluator: Callable[..., str | None] | None = None
    parser: Callable[..., Any] | None = None
    stringifier: type[Stringifier] | None = None

    # Host parsing
    language: str | None = None

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


# Only plain values can come from TOML files.
FILE_KEYS = frozenset({"id", "tag_names", "language", "max_file_size"})


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`id` must not be empty")
    """


def load_config(search_path: Path) -> SyntaxConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.tagged-css]`` table from `pyproject.toml` and the
    ``[tagged-css]`` or ``[tool.tagged-css]`` table from `.tagged-css.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        SyntaxConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("src"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "tagged-css")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".tagged-css.toml",
            table_paths=[("tagged-css",), ("tool", "tagged-css")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return SyntaxConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> SyntaxConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> SyntaxConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return SyntaxConfig()

    if not isinstance(raw_config, dict) or not set(raw_config) <= FILE_KEYS:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return SyntaxConfig()

    return SyntaxConfig(**raw_config)


def normalize_config(config: SyntaxConfig) -> SyntaxConfig:
    tag_names = config.tag_names
    if isinstance(tag_names, str):
        tag_names = (tag_names,)
    elif isinstance(tag_names, (list, tuple)):
        tag_names = tuple(tag_names)

    return replace(config, tag_names=tag_names)


def validate_config(config: SyntaxConfig) -> None:
    """Validate a `SyntaxConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the identifier is empty or contains characters outside
            ``[A-Za-z0-9_-]``, tag names are not non-empty strings with at most
            a trailing wildcard, pluggable steps are not callable, the stringifier
            is not a `Stringifier` subclass, the language is unknown, or the
            size limit is not a positive integer.

    Examples:
        validate_config(SyntaxConfig(id="styled", tag_names=("styled*",)))
    """
    config = normalize_config(config)

    if not isinstance(config.id, str) or not config.id:
        raise ConfigError("`id` must not be empty")
    if not SYNTAX_ID_PATTERN.match(config.id):
        raise ConfigError("`id` may only contain letters, digits, `_` and `-`")

    if not isinstance(config.tag_names, tuple):
        raise ConfigError("`tag_names` must be a list of strings")
    for tag_name in config.tag_names:
        if not isinstance(tag_name, str) or not tag_name.rstrip(TAG_WILDCARD):
            raise ConfigError("`tag_names` entries must be non-empty strings")
        if TAG_WILDCARD in tag_name[:-1]:
            raise ConfigError(f"`{tag_name}`: the `*` wildcard is only allowed at the end")

    for name in ("placeholder", "evaluator", "parser"):
        value = getattr(config, name)
        if value is not None and not callable(value):
            raise ConfigError(f"`{name}` must be callable")

    stringifier = config.stringifier
    if stringifier is not None and not (
        isinstance(stringifier, type) and issubclass(stringifier, Stringifier)
    ):
        raise ConfigError("`stringifier` must be a `Stringifier` subclass")

    languages = sorted(set(HOST_LANGUAGES.values()))
    if config.language is not None and config.language not in languages:
        raise ConfigError(f"`language` must be one of: {', '.join(languages)}")

    _ensure_integers({"max_file_size": config.max_file_size})
    _ensure_positive({"max_file_size": config.max_file_size})


def apply_overrides(config: SyntaxConfig, **overrides: object) -> SyntaxConfig:
    """Apply override values to a `SyntaxConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set
            to None or empty sequences are ignored.

    Returns:
        SyntaxConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `SyntaxConfig`.

    Examples:
        updated = apply_overrides(config, id="styled", tag_names=("styled*",))
    """
    known = {item.name for item in fields(SyntaxConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

    changes = {key: value for key, value in overrides.items() if value is not None and value != ()}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> SyntaxConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        SyntaxConfig: Validated configuration ready for parsing.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), tag_names=("css",))
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
