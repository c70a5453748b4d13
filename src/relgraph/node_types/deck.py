"""Deck: a named evaluation deck owned by an organization, holding samples."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from relgraph.domain.errors import ValidationError
from relgraph.domain.frontmatter import parse_frontmatter
from relgraph.domain.props import validate_props
from relgraph.domain.spec import NodeSpec
from relgraph.nodes.base import Node, props_model
from relgraph.nodes.registry import NODE_REGISTRY

DEMO_DECKS_DIR = Path(__file__).parent / "demo_decks"


@NODE_REGISTRY.register
class Deck(Node):
    node_spec = (
        NodeSpec.define()
        .string("name")
        .string("slug")
        .string("description")
        .string("content")
        .many("sample", "Sample")
    )

    @classmethod
    def read_props_from_file(cls, path: Path) -> dict[str, Any]:
        """Build Deck props from a ``.deck.md`` file.

        Frontmatter supplies ``name``, ``slug`` and ``description``; the
        markdown body becomes ``content``. A missing slug defaults to the
        file name without its ``.deck.md`` suffix.

        Raises:
            OSError: The file cannot be read.
            ValidationError: The frontmatter does not yield valid Deck props.
        """
        text = path.read_text(encoding="utf-8")
        try:
            frontmatter, body = parse_frontmatter(text)
        except ValueError as exc:
            msg = f"Invalid deck frontmatter in {path}: {exc}"
            raise ValidationError(msg, detail={"path": str(path)}) from exc

        props = {
            "name": frontmatter.get("name"),
            "slug": frontmatter.get("slug") or path.name.removesuffix(".deck.md"),
            "description": frontmatter.get("description", ""),
            "content": body.strip(),
        }
        return validate_props(props_model(cls), props, class_name=cls.__name__)
