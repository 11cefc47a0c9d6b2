from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from tagged_css.config import (
    ConfigError,
    SyntaxConfig,
    apply_overrides,
    build_config,
    load_config,
    normalize_config,
    validate_config,
)
from tagged_css.css_stringifier import Stringifier


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".tagged-css.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "styled"
        tag_names = ["css", "styled*"]
        language = "typescript"
        max_file_size = 1
        """,
    )

    config = load_config(tmp_path)

    assert config == SyntaxConfig(
        id="styled",
        tag_names=("css", "styled*"),
        language="typescript",
        max_file_size=1,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tagged-css]
        tag_names = ["html"]
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.tag_names == ("html",)


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.tagged-css]
        id = "dot"
        """,
    )

    assert load_config(tmp_path).id == "dot"


def test_pyproject_wins_over_dotfile_in_same_directory(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "project"
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [tagged-css]
        id = "dotfile"
        """,
    )

    assert load_config(tmp_path).id == "project"


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        tag_names = ["css"]
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.tag_names == ("css",)


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "root"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [project]
        name = "unrelated"
        """,
    )

    assert load_config(child).id == "root"


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "root"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.tagged-css]
        """,
    )

    config = load_config(child)

    assert config.id == SyntaxConfig().id


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    config = load_config(tmp_path)

    assert config == SyntaxConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "parent"
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()
    config = load_config(nested)

    assert config.id == "parent"


def test_load_config_errors_on_invalid_table(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "lit"
        placeholder = "POSTCSS"
        """,
    )

    with pytest.raises(ConfigError, match="tool.tagged-css"):
        load_config(tmp_path)


def test_load_config_errors_on_non_table(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        tagged-css = "css"
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_normalize_config_turns_tag_names_into_tuple():
    assert normalize_config(SyntaxConfig(tag_names="css")).tag_names == ("css",)
    assert normalize_config(SyntaxConfig(tag_names=["a", "b"])).tag_names == ("a", "b")


def test_apply_overrides_ignores_unset_values():
    config = SyntaxConfig(id="lit", tag_names=("css",))

    assert apply_overrides(config, id=None, tag_names=()) is config
    assert apply_overrides(config, id="foo").id == "foo"


def test_apply_overrides_rejects_unknown_fields():
    with pytest.raises(TypeError, match="Unknown configuration fields: colour"):
        apply_overrides(SyntaxConfig(), colour="red")


def test_build_config_applies_overrides_to_loaded_config(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.tagged-css]
        id = "file"
        tag_names = ["css"]
        """,
    )

    config = build_config(tmp_path, tag_names=("styled*",))

    assert config.id == "file"
    assert config.tag_names == ("styled*",)


def test_build_config_validates_result(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_config(tmp_path, id="has space")


@pytest.mark.parametrize(
    "config",
    [
        SyntaxConfig(id=""),
        SyntaxConfig(id="with space"),
        SyntaxConfig(id="dot.ted"),
        SyntaxConfig(tag_names=("",)),
        SyntaxConfig(tag_names=("*",)),
        SyntaxConfig(tag_names=("st*led",)),
        SyntaxConfig(tag_names=(1,)),  # type: ignore[arg-type]
        SyntaxConfig(tag_names=5),  # type: ignore[arg-type]
        SyntaxConfig(placeholder="POSTCSS"),  # type: ignore[arg-type]
        SyntaxConfig(parser=42),  # type: ignore[arg-type]
        SyntaxConfig(language="coffeescript"),
        SyntaxConfig(language=["tsx"]),  # type: ignore[arg-type]
        SyntaxConfig(stringifier=lambda node, builder: None),  # type: ignore[arg-type]
        SyntaxConfig(stringifier=str),  # type: ignore[arg-type]
        SyntaxConfig(max_file_size=0),
    ],
)
def test_validate_config_rejects_invalid_values(config: SyntaxConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize(
    "config",
    [
        SyntaxConfig(max_file_size="big"),  # type: ignore[arg-type]
        SyntaxConfig(max_file_size=True),  # type: ignore[arg-type]
        SyntaxConfig(max_file_size=1.5),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_non_numeric_limits(config: SyntaxConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


def test_validate_config_accepts_wildcard_suffix():
    validate_config(SyntaxConfig(id="styled-components", tag_names=("styled*", "css")))


def test_validate_config_accepts_stringifier_subclass_and_language():
    class QuietStringifier(Stringifier):
        pass

    validate_config(SyntaxConfig(stringifier=QuietStringifier, language="javascript"))
