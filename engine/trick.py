"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cards import Card, Suit

PLAYERS_PER_TRICK = 4


class TrickError(RuntimeError):
    """Raised when trick play breaks ordering constraints."""


@dataclass
class Trick:
    leader: str
    plays: List[Tuple[str, Card]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.plays

    def add_play(self, player: str, card: Card) -> None:
        if self.is_full():
            raise TrickError("Trick already complete.")
        if not self.plays and player != self.leader:
            raise TrickError("Only the leader can start the trick.")
        if any(seen == player for seen, _ in self.plays):
            raise TrickError("A player cannot play twice in the same trick.")
        self.plays.append((player, card))

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0][1].suit if self.plays else None

    def is_full(self) -> bool:
        return len(self.plays) == PLAYERS_PER_TRICK

    def cards(self) -> List[Card]:
        return [card for _, card in self.plays]

    def winning_play(self, trump: Optional[Suit]) -> Tuple[str, Card]:
        """Highest trump if any was played, otherwise highest card of the led suit."""
        if not self.plays:
            raise TrickError("Cannot determine winner on empty trick.")
        led = self.led_suit()
        assert led is not None
        trumps = [play for play in self.plays if trump is not None and play[1].suit is trump]
        contenders = trumps or [play for play in self.plays if play[1].suit is led]
        return max(contenders, key=lambda play: play[1].rank)


@dataclass(frozen=True)
class CompletedTrick:
    leader: str
    plays: Tuple[Tuple[str, Card], ...]
    winner: str
    winning_card: Card
