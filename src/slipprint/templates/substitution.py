"""Placeholder substitution for print templates."""

import re
from collections.abc import Mapping
from typing import Any

from slipprint.models.slip import Segment, StyledLine
from slipprint.models.template import PrintTemplate

# {{key}} with exact delimiters; the key itself may not contain braces
PLACEHOLDER_RE = re.compile(r"\{\{([^{}]*)\}\}")


def _value(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value)


def substitute_line(
    line: str,
    index: int,
    record: Mapping[str, Any],
    placeholder_sizes: Mapping[str, float],
) -> StyledLine:
    """Substitute placeholders in one line and split it into segments.

    A placeholder with an entry in ``placeholder_sizes`` becomes a segment
    of its own carrying that size. Everything else is merged into the
    surrounding plain-text segment.
    """
    segments: list[Segment] = []
    plain: list[str] = []

    def flush() -> None:
        if plain:
            text = "".join(plain)
            if text:
                segments.append(Segment(text=text))
            plain.clear()

    pos = 0
    for match in PLACEHOLDER_RE.finditer(line):
        plain.append(line[pos : match.start()])
        key = match.group(1)
        value = _value(record, key)
        if key in placeholder_sizes:
            flush()
            segments.append(Segment(text=value, font_size=placeholder_sizes[key]))
        else:
            plain.append(value)
        pos = match.end()
    plain.append(line[pos:])
    flush()

    if not segments:
        # Blank lines still take up a line box
        segments.append(Segment(text=""))

    return StyledLine(index=index, segments=tuple(segments))


def substitute(template: PrintTemplate, record: Mapping[str, Any]) -> list[StyledLine]:
    """Merge a data record into a template.

    Never raises: unknown placeholders substitute to the empty string.

    Args:
        template: Template whose content is substituted.
        record: Placeholder values keyed by placeholder name.

    Returns:
        One styled line per ``\\n``-separated line of the template content.
    """
    sizes = template.placeholder_sizes or {}
    return [
        substitute_line(line, index, record, sizes)
        for index, line in enumerate(template.content.split("\n"))
    ]


def substitute_text(content: str, record: Mapping[str, Any]) -> str:
    """Substitute placeholders into plain text, ignoring any styling."""
    return PLACEHOLDER_RE.sub(lambda m: _value(record, m.group(1)), content)


def placeholder_keys(content: str) -> list[str]:
    """List the placeholder keys used in the content, in first-seen order."""
    keys: list[str] = []
    for match in PLACEHOLDER_RE.finditer(content):
        if match.group(1) not in keys:
            keys.append(match.group(1))
    return keys
