from __future__ import annotations
from conduit.channels.base import RenderContext, Renderer
from conduit.domain.models import PayloadType

CARD_FIELDS = ("title", "subtitle", "image", "actions")

class CardToCarouselRenderer(Renderer[RenderContext]):
    """Rewrites a single ``card`` payload into a one-item ``carousel``.

    Adds no fragment; the platform carousel renderer further down the chain
    picks the rewritten payload up.
    """
    id = "card"

    def handles(self, context: RenderContext) -> bool:
        return context.payload.get("type") == PayloadType.card

    def render(self, context: RenderContext) -> None:
        card = context.payload
        item = {k: card[k] for k in CARD_FIELDS if k in card}
        rest = {k: v for k, v in card.items() if k not in CARD_FIELDS and k != "type"}
        context.payload = {**rest, "type": PayloadType.carousel.value, "items": [item]}
