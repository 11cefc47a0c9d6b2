"""Selection of the tagged templates that carry CSS."""

from __future__ import annotations

from collections.abc import Iterable

from .constants import DISABLE_MARKER_TEMPLATE, TAG_WILDCARD
from .host import HostModule, TaggedTemplate
from .models import Region


def tag_matches(tag: str, matcher: str) -> bool:
    """Check a template tag against a configured tag name.

    A matcher ending with ``*`` accepts any tag starting with the text before
    the wildcard; any other matcher requires an exact match.

    Examples:
        tag_matches("css", "css")  # True
        tag_matches("styled.div", "styled*")  # True
        tag_matches("css.global", "css")  # False
    """
    if matcher.endswith(TAG_WILDCARD):
        return tag.startswith(matcher[: -len(TAG_WILDCARD)])
    return tag == matcher


def disable_marker(syntax_id: str) -> str:
    """Return the comment text that opts the next statement out of extraction."""
    return DISABLE_MARKER_TEMPLATE.format(id=syntax_id)


def is_disabled(template: TaggedTemplate, syntax_id: str) -> bool:
    """Check whether a template's statement carries a disable comment.

    Only the last comment leading the enclosing statement counts, and it must
    be a line comment.

    Examples:
        # // postcss-lit-disable-next-line
        # css`.foo {}`;
        is_disabled(template, "lit")  # True
    """
    if not template.leading_comments:
        return False
    comment = template.leading_comments[-1]
    return comment.kind == "line" and disable_marker(syntax_id) in comment.value


def contains(outer: TaggedTemplate, inner: TaggedTemplate) -> bool:
    """Check whether `inner` lies strictly inside `outer`'s template literal."""
    return outer.quasi.start < inner.quasi.start and outer.quasi.end > inner.quasi.end


def _has_ranges(template: TaggedTemplate) -> bool:
    literal = template.quasi
    return literal.end > literal.start and len(literal.quasis) == len(literal.expressions) + 1


def extract_regions(module: HostModule, tag_names: Iterable[str], syntax_id: str) -> list[Region]:
    """Select the tagged templates whose tag matches one of `tag_names`.

    Args:
        module: Scanned host source.
        tag_names: Exact tag names or wildcard-suffixed prefixes.
        syntax_id: Identifier used in the disable comment.

    Returns:
        list[Region]: Selected templates in order of their opening backtick.
            Templates found inside another selected template are flagged as
            nested.

    Examples:
        extract_regions(scan_module("css`a{}`; html`b`"), ["css"], "lit")
    """
    matchers = tuple(tag_names)
    if not matchers:
        return []

    selected = [
        template
        for template in module.templates
        if _has_ranges(template)
        and any(tag_matches(template.tag, matcher) for matcher in matchers)
        and not is_disabled(template, syntax_id)
    ]
    return [
        Region(
            template=template,
            nested=any(contains(other, template) for other in selected if other is not template),
        )
        for template in selected
    ]
