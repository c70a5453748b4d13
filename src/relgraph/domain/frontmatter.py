"""YAML frontmatter parsing for markdown content files (``.deck.md``)."""

from __future__ import annotations

from typing import Any

from ruamel.yaml import YAML

_FRONTMATTER_DELIMITER = "---"


def _new_yaml() -> YAML:
    """Create a fresh safe YAML parser.

    ruamel.yaml's YAML object is stateful, so each parse gets its own.
    """
    return YAML(typ="safe")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split markdown *content* into ``(frontmatter, body)``.

    Expects ``---`` on the first line; the next ``---`` closes the YAML
    block. Without valid delimiters, returns ``({}, content)``.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return {}, content

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return {}, content

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])
    if body.startswith("\n"):
        body = body[1:]

    loaded = _new_yaml().load(yaml_block) or {}
    if not isinstance(loaded, dict):
        msg = "Frontmatter must be a YAML mapping"
        raise ValueError(msg)
    return dict(loaded), body
