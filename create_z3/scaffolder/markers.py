"""Marker substitution for copied template files.

A *marker* is a unique literal string (``// {{OAUTH_PROVIDERS}}``,
``<!-- {{OAUTH_SETUP_GUIDE}} -->`` ...) sitting on its own line inside a
template file. :func:`replace_marker` rewrites the first line containing the
marker with a generated fragment, or deletes that line entirely.

The engine is purely line-oriented: target files are TypeScript, JSX,
Markdown, CSS and dotenv, so nothing here parses any of those formats.

Replacement values:

* ``Keep(text)`` or a non-empty ``str`` -- substitute *text*, re-indented to
  the marker line's indentation.
* ``Remove()``, ``Keep("")``, ``""`` or a ``str`` starting with
  ``"__REMOVE_"`` -- delete the marker line (no blank line is left behind).
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from create_z3.utils import print_warning

REMOVAL_PREFIX = "__REMOVE_"

EMAIL_PASSWORD_AUTH = "// {{EMAIL_PASSWORD_AUTH}}"
OAUTH_PROVIDERS = "// {{OAUTH_PROVIDERS}}"
OAUTH_UI_PROVIDERS = "// {{OAUTH_UI_PROVIDERS}}"
EMAIL_PASSWORD_CREDENTIALS = "/* {{EMAIL_PASSWORD_CREDENTIALS}} */"
ENV_OAUTH_VARS = "# {{ENV_OAUTH_VARS}}"
OAUTH_ENV_SERVER_SCHEMA = "// {{OAUTH_ENV_SERVER_SCHEMA}}"
OAUTH_ENV_RUNTIME_MAPPING = "// {{OAUTH_ENV_RUNTIME_MAPPING}}"
OAUTH_SETUP_GUIDE = "<!-- {{OAUTH_SETUP_GUIDE}} -->"
TWEAKCN_THEME = "/* {{TWEAKCN_THEME}} */"

ALL_MARKERS = (
    EMAIL_PASSWORD_AUTH,
    OAUTH_PROVIDERS,
    OAUTH_UI_PROVIDERS,
    EMAIL_PASSWORD_CREDENTIALS,
    ENV_OAUTH_VARS,
    OAUTH_ENV_SERVER_SCHEMA,
    OAUTH_ENV_RUNTIME_MAPPING,
    OAUTH_SETUP_GUIDE,
    TWEAKCN_THEME,
)

_INDENT_RE = re.compile(r"^[ \t]*")


class MarkerNotFoundError(LookupError):
    """Raised when a required marker is absent from its target file."""

    def __init__(self, marker: str, path: str | Path) -> None:
        self.marker = marker
        self.path = Path(path)
        super().__init__(f'Marker "{marker}" not found in file: {path}')


@dataclass(frozen=True)
class Keep:
    """Substitute the marker line with ``text``."""

    text: str


@dataclass(frozen=True)
class Remove:
    """Delete the marker line (and, by template convention, the construct it stands for)."""

    reason: str = ""


Replacement = Union[Keep, Remove]


def as_replacement(value: Union[str, Keep, Remove]) -> Replacement:
    """Normalise a plain string into the tagged replacement type."""
    if isinstance(value, Remove):
        return value
    if isinstance(value, Keep):
        return value if value.text else Remove()
    if value == "" or value.startswith(REMOVAL_PREFIX):
        return Remove()
    return Keep(value)


def detect_indentation(line: str) -> str:
    """Return the run of spaces/tabs that starts *line*."""
    match = _INDENT_RE.match(line)
    return match.group(0) if match else ""


def indent_block(text: str, indent: str) -> list[str]:
    """Prefix every line of *text* with *indent*, leaving empty lines empty.

    The first line is always prefixed since it takes the marker's place.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    out = [indent + lines[0]]
    out.extend(indent + line if line else "" for line in lines[1:])
    return out


def substitute_text(content: str, marker: str, replacement: Union[str, Keep, Remove]) -> str | None:
    """Apply one substitution to *content* in memory.

    Returns:
        The rewritten text, or ``None`` if no line contains *marker*.
    """
    newline = "\r\n" if "\r\n" in content else "\n"
    lines = content.split(newline)

    for index, line in enumerate(lines):
        if marker in line:
            break
    else:
        return None

    value = as_replacement(replacement)
    if isinstance(value, Remove):
        new_lines: list[str] = []
    else:
        new_lines = indent_block(value.text, detect_indentation(line))

    return newline.join(lines[:index] + new_lines + lines[index + 1:])


def _rewrite_file(path: Path, marker: str, replacement: Union[str, Keep, Remove]) -> bool:
    content = path.read_bytes().decode("utf-8")
    updated = substitute_text(content, marker, replacement)
    if updated is None:
        return False
    path.write_bytes(updated.encode("utf-8"))
    return True


async def replace_marker(
    path: str | Path,
    marker: str,
    replacement: Union[str, Keep, Remove],
    *,
    graceful: bool = False,
) -> bool:
    """Rewrite the first line of *path* that contains *marker*.

    Args:
        path: File to edit in place.
        marker: Literal substring identifying the line.
        replacement: Fragment to insert, or a removal signal (see module docs).
        graceful: When ``True`` a missing marker only prints a warning and
            leaves the file untouched. Used for markers older templates lack.

    Returns:
        ``True`` if the file was rewritten, ``False`` if a graceful miss.

    Raises:
        MarkerNotFoundError: Marker absent and ``graceful`` is ``False``.
        OSError: The file cannot be read or written.
    """
    file_path = Path(path)
    replaced = await asyncio.to_thread(_rewrite_file, file_path, marker, replacement)
    if replaced:
        return True
    if graceful:
        print_warning(
            f'Marker "{marker}" not found in file: {file_path}. Skipping replacement.'
        )
        return False
    raise MarkerNotFoundError(marker, file_path)
