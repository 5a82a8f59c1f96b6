"""Heuristic bot used for bot seats and for stalled human turns."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from engine.cards import ACE, JACK, KING, QUEEN, Card, Suit, card_sort_key
from engine.mechanics import legal_moves
from engine.state import HokmSession

from .base import BotStrategy

# Honour weights for trump selection; other ranks weigh rank / 14.
HONOUR_WEIGHTS: Dict[int, float] = {
    ACE: 5.0,
    KING: 4.0,
    QUEEN: 3.0,
    JACK: 2.0,
}


def card_weight(card: Card) -> float:
    return HONOUR_WEIGHTS.get(card.rank, card.rank / 14)


def suit_strengths(cards: Iterable[Card]) -> Dict[Suit, tuple[int, float]]:
    """Return (count, weight) per suit."""
    strengths: Dict[Suit, tuple[int, float]] = {suit: (0, 0.0) for suit in Suit}
    for card in cards:
        count, weight = strengths[card.suit]
        strengths[card.suit] = (count + 1, weight + card_weight(card))
    return strengths


def bot_pick_hokm(cards: Sequence[Card]) -> Suit:
    """Longest suit wins, ties broken by weight and then by suit order."""
    strengths = suit_strengths(cards)
    return max(Suit, key=lambda suit: strengths[suit])


def fallback_card(hand: Iterable[Card], led_suit: Optional[Suit]) -> Card:
    """Lowest-ranked card that the follow-suit rule allows."""
    legal = legal_moves(hand, led_suit)
    if not legal:
        raise RuntimeError("No legal plays available for bot.")
    return min(legal, key=card_sort_key)


class HeuristicBot(BotStrategy):
    name = "Heuristic"

    def choose_hokm(self, cards: Sequence[Card]) -> Suit:
        return bot_pick_hokm(cards)

    def play_card(self, session: HokmSession, player: str) -> Card:
        return fallback_card(session.hands[player], session.lead_suit)
