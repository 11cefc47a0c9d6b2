"""
tagged-css: stylesheets embedded in JavaScript tagged template literals.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    tagged-css src/button.ts --tag css --check

Library Usage:
    from tagged_css import SyntaxConfig, create_syntax

    syntax = create_syntax(SyntaxConfig(tag_names=("css",)))
    document = syntax.parse(source, filename="button.ts")
    for root in document:
        for node in root.walk():
            print(node.type, node.source.start)
    assert syntax.to_string(document) == source
"""

from .config import ConfigError, SyntaxConfig, build_config, load_config
from .css_nodes import AtRule, Comment, Declaration, Document, Position, Root, Rule, Source
from .css_parser import parse_stylesheet
from .css_stringifier import Stringifier
from .evaluate import evaluate_constant
from .exceptions import ExtractionError, HostSyntaxError, ParseFileError, StylesheetSyntaxError
from .extract import extract_regions
from .host import scan_module
from .location import correct_position
from .models import ExtractedStylesheet, PlaceholderPosition, Replacement
from .normalize import compute_normalized_source
from .parser import parse_file, parse_styles
from .placeholders import compute_possible_position, create_placeholder_func
from .replacements import compute_replaced_source
from .stringify import TemplateStringifier, create_stringifier_class, stringify
from .syntax import Syntax, create_syntax

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "parse_styles",
    "parse_file",
    "stringify",
    "create_syntax",
    "Syntax",
    # Pipeline steps
    "scan_module",
    "extract_regions",
    "compute_possible_position",
    "create_placeholder_func",
    "evaluate_constant",
    "compute_replaced_source",
    "compute_normalized_source",
    "parse_stylesheet",
    "correct_position",
    # Stringifiers
    "Stringifier",
    "TemplateStringifier",
    "create_stringifier_class",
    # Configuration
    "SyntaxConfig",
    "build_config",
    "load_config",
    # Data models
    "ExtractedStylesheet",
    "PlaceholderPosition",
    "Replacement",
    "Document",
    "Root",
    "Rule",
    "AtRule",
    "Declaration",
    "Comment",
    "Position",
    "Source",
    # Exceptions
    "ConfigError",
    "ExtractionError",
    "HostSyntaxError",
    "ParseFileError",
    "StylesheetSyntaxError",
    # Version
    "__version__",
]
