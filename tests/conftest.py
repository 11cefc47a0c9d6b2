from __future__ import annotations

import textwrap

import pytest
from click.testing import CliRunner

from tagged_css.config import SyntaxConfig
from tagged_css.extract import extract_regions
from tagged_css.host import scan_module


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def css_config() -> SyntaxConfig:
    """Configuration extracting templates tagged `css`."""
    return SyntaxConfig(tag_names=("css",))


def dedent(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


def regions_of(source: str, tag_names=("css",), syntax_id="lit"):
    return extract_regions(scan_module(source), tag_names, syntax_id)


def region_of(source: str, tag_names=("css",), syntax_id="lit"):
    regions = regions_of(source, tag_names, syntax_id)
    assert len(regions) == 1
    return regions[0]
