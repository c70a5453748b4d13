"""Organization: the top-level owner of decks.

New organizations are provisioned with a demo deck from
``demo_decks/fastpitch-demo.deck.md``. When the file is unavailable (for
example in a zipped install), an inline copy is used instead.
"""

from __future__ import annotations

import logging

from relgraph.domain.errors import ValidationError
from relgraph.domain.spec import NodeSpec
from relgraph.node_types.deck import DEMO_DECKS_DIR, Deck
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NODE_REGISTRY

logger = logging.getLogger(__name__)

DEMO_DECK_FILE = DEMO_DECKS_DIR / "fastpitch-demo.deck.md"

FALLBACK_DEMO_DECK = {
    "name": "Fastpitch Story Selection",
    "slug": "fastpitch",
    "description": (
        "Evaluates the quality of curated AI news story selections from the latest articles"
    ),
    "content": (
        "# Fastpitch Story Selection\n\n"
        "Evaluates the quality of curated AI news story selections from the latest articles."
    ),
}


@NODE_REGISTRY.register
class Organization(Node):
    node_spec = NodeSpec.define().string("name").string("domain").many("deck", "Deck")

    async def after_create(self) -> None:
        await self.add_demo_deck()

    async def add_demo_deck(self) -> Node:
        """Create the demo deck under this organization's ``deck`` role."""
        try:
            props = Deck.read_props_from_file(DEMO_DECK_FILE)
        except (OSError, ValidationError):
            logger.info("Could not load demo deck file, using the built-in copy", exc_info=True)
            props = dict(FALLBACK_DEMO_DECK)
        return await self.create_target_node(Deck, props, "deck")
