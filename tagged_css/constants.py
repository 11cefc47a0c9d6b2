"""Constants used across the tagged-css package."""

from __future__ import annotations

import re

IMPLEMENTATION_NAME = "tagged-css"

# Syntax identity
DEFAULT_SYNTAX_ID = "lit"
SYNTAX_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
PLACEHOLDER_PREFIX = "POSTCSS"
DISABLE_MARKER_TEMPLATE = "postcss-{id}-disable-next-line"
TAG_WILDCARD = "*"

# Normalization
EMPTY_LINE_PATTERN = re.compile(r"^[ \t\r]*$")

# Raw keys shared between the parser and the stringifier
CODE_BEFORE_RAW = "codeBefore"
CODE_AFTER_RAW = "codeAfter"
BEFORE_START_RAW = "beforeStart"
PARSED_VALUES_RAW = "parsed"
TEXT_PROPERTIES = ("prop", "name", "selector", "value", "params", "text")

# Host grammars, by file extension
HOST_LANGUAGES = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}
DEFAULT_HOST_LANGUAGE = "tsx"

# Files and limits
SOURCE_EXTENSIONS = tuple(HOST_LANGUAGES)
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
