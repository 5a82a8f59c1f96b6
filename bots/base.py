"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import Sequence

from engine.cards import Card, Suit
from engine.state import HokmSession


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def on_hand_start(self, session: HokmSession) -> None:
        """Optional hook invoked once the hakim has been dealt in."""
        return None

    def choose_hokm(self, cards: Sequence[Card]) -> Suit:
        """Return the trump suit given the hakim's first five cards."""
        raise NotImplementedError

    def play_card(self, session: HokmSession, player: str) -> Card:
        """Return a legal card for ``player``."""
        raise NotImplementedError
