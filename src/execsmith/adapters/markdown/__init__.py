"""Markdown rendering for documents carrying executable fragments.

A document may open with a YAML front matter block delimited by ``---`` and
closed by ``---`` or ``...``. The block is parsed with PyYAML and stripped
before Python-Markdown renders the body. ``fenced_code`` and ``attr_list``
must stay enabled: they put the marker classes and the ``exec``/``include``
attributes on the rendered code elements.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
import re
from typing import Any

import markdown
import yaml


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "MarkdownConversionError",
    "MarkdownDocument",
    "render_markdown",
    "resolve_markdown_extensions",
    "split_extension_names",
    "split_front_matter",
]


DEFAULT_MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "attr_list",
    "abbr",
    "admonition",
    "def_list",
    "footnotes",
    "md_in_html",
    "tables",
]

_FRONT_MATTER = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<yaml>.*?)^(?:---|\.\.\.)[ \t]*\r?$\n?",
    re.DOTALL | re.MULTILINE,
)
_NAME_SEPARATORS = re.compile(r"[\s,]+")


class MarkdownConversionError(Exception):
    """Raised when Python-Markdown cannot be set up for a document."""


@dataclass(slots=True)
class MarkdownDocument:
    """Rendered HTML of a document and its parsed front matter."""

    html: str
    front_matter: dict[str, Any] = field(default_factory=dict)


def split_front_matter(source: str) -> tuple[dict[str, Any], str]:
    """Return the front matter mapping and the Markdown body of ``source``.

    Without a well-formed block the source comes back whole with empty
    metadata. A block holding anything but a mapping is stripped and yields
    no metadata.
    """
    match = _FRONT_MATTER.match(source)
    if match is None:
        return {}, source
    try:
        metadata = yaml.safe_load(match.group("yaml"))
    except yaml.YAMLError:
        return {}, source
    return (metadata if isinstance(metadata, dict) else {}), source[match.end() :]


def split_extension_names(values: Iterable[str] | str | None) -> list[str]:
    """Flatten CLI values such as ``"toc, tables"`` into extension names."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    return [name for value in values for name in _NAME_SEPARATORS.split(value) if name]


def resolve_markdown_extensions(
    enabled: Iterable[str] | str | None = None,
    disabled: Iterable[str] | str | None = None,
) -> list[str]:
    """Return the default extensions plus ``enabled`` minus ``disabled``.

    Names compare case-insensitively and the first spelling of a name wins.
    """
    dropped = {name.lower() for name in split_extension_names(disabled)}
    resolved: dict[str, str] = {}
    for name in [*DEFAULT_MARKDOWN_EXTENSIONS, *split_extension_names(enabled)]:
        if name.lower() not in dropped:
            resolved.setdefault(name.lower(), name)
    return list(resolved.values())


def render_markdown(source: str, extensions: Sequence[str] | None = None) -> MarkdownDocument:
    """Render ``source`` to HTML after removing its front matter."""
    metadata, body = split_front_matter(source)
    names = list(DEFAULT_MARKDOWN_EXTENSIONS if extensions is None else extensions)
    try:
        processor = markdown.Markdown(extensions=names)
    except (ImportError, TypeError) as exc:
        raise MarkdownConversionError(
            f"Cannot load Markdown extensions {', '.join(names)}: {exc}"
        ) from exc
    return MarkdownDocument(html=processor.convert(body), front_matter=metadata)
