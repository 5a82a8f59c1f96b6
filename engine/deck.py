"""Deck creation utilities for Hokm."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence

from .cards import MAX_RANK, MIN_RANK, Card, Suit

DECK_SIZE = 52


class DeckError(RuntimeError):
    """Raised when the deck cannot satisfy a deal."""


def build_deck() -> List[Card]:
    """Return the ordered 52-card deck."""
    return [Card(rank, suit) for suit in Suit for rank in range(MIN_RANK, MAX_RANK + 1)]


class Deck:
    """Shuffled stack of cards, dealt from the top (end of the list)."""

    def __init__(self, cards: Optional[Sequence[Card]] = None, *, rng: Optional[Random] = None) -> None:
        if cards is not None:
            self.cards = list(cards)
        else:
            self.cards = build_deck()
            (rng or Random()).shuffle(self.cards)
        if len(self.cards) != DECK_SIZE or len(set(self.cards)) != DECK_SIZE:
            raise DeckError("Deck must contain the 52 distinct cards.")
        self.dealt = 0

    def __len__(self) -> int:
        return len(self.cards)

    def draw(self, count: int = 1) -> List[Card]:
        if count < 0:
            raise DeckError("Cannot draw a negative number of cards.")
        if count > len(self.cards):
            raise DeckError(f"Cannot draw {count} cards, only {len(self.cards)} remain.")
        drawn = [self.cards.pop() for _ in range(count)]
        self.dealt += count
        return drawn

    def is_empty(self) -> bool:
        return not self.cards
