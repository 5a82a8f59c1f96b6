"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from engine.cards import Card, Suit
from engine.state import HokmSession

from .base import BotStrategy


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_hokm(self, cards: Sequence[Card]) -> Suit:
        return self._rng.choice(list(Suit))

    def play_card(self, session: HokmSession, player: str) -> Card:
        legal = list(session.available_moves(player))
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return self._rng.choice(legal)
