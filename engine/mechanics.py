"""Legal move generation for Hokm."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .cards import Card, Suit, card_sort_key, cards_of_suit


def legal_moves(hand: Iterable[Card], led_suit: Optional[Suit]) -> List[Card]:
    """Return the cards that may be played given the suit led in the current trick.

    A player holding the led suit must follow it; a player void in it may
    play anything, trump or discard.
    """
    cards = sorted(hand, key=card_sort_key)
    if led_suit is None:
        return cards
    following = cards_of_suit(cards, led_suit)
    return following if following else cards


def must_follow(hand: Iterable[Card], led_suit: Optional[Suit], card: Card) -> bool:
    """True when ``card`` breaks the follow-suit rule for ``hand``."""
    if led_suit is None or card.suit is led_suit:
        return False
    return bool(cards_of_suit(hand, led_suit))
