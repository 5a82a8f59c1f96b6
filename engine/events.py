"""Outbound notifications consumed by the presentation layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Tuple

from .cards import Card, Suit, card_label

if TYPE_CHECKING:
    from .state import HokmSession, Phase, Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSnapshot:
    """What a guild's game looked like when an event fired.

    Events are delivered after the guild lock is released, by which time
    bot seats may have moved the live session on.
    """

    guild_id: str
    phase: "Phase"
    hand_number: int
    hakim: Optional[str]
    hokm: Optional[Suit]
    current_player: Optional[str]
    lead_suit: Optional[Suit]
    table: Tuple[Tuple[str, Card], ...]
    tricks: Dict["Team", int]
    hands_won: Dict["Team", int]
    turn_token: int

    @classmethod
    def capture(cls, session: "HokmSession") -> "GameSnapshot":
        return cls(
            guild_id=session.guild_id,
            phase=session.phase,
            hand_number=session.hand_number,
            hakim=session.hakim,
            hokm=session.hokm,
            current_player=session.actor,
            lead_suit=session.lead_suit,
            table=tuple(session.table.plays),
            tricks=dict(session.tricks_team),
            hands_won=dict(session.hands_won),
            turn_token=session.turn_token,
        )


class GameListener:
    """Base class for event consumers. Every hook is optional."""

    async def on_hand_started(self, snapshot: GameSnapshot) -> None:
        return None

    async def on_hokm_chosen(self, snapshot: GameSnapshot) -> None:
        return None

    async def on_turn_changed(self, snapshot: GameSnapshot) -> None:
        return None

    async def on_trick_resolved(
        self,
        snapshot: GameSnapshot,
        winner: str,
        winning_cards: Sequence[Tuple[str, Card]],
    ) -> None:
        return None

    async def on_hand_over(self, snapshot: GameSnapshot, winning_team: "Team", tricks: Dict["Team", int]) -> None:
        return None

    async def on_game_over(self, snapshot: GameSnapshot, winning_team: "Team") -> None:
        return None

    async def on_game_cancelled(self, snapshot: GameSnapshot) -> None:
        return None


class LoggingListener(GameListener):
    async def on_hand_started(self, snapshot: GameSnapshot) -> None:
        logger.info("Guild %s: hand %d dealt, hakim %s", snapshot.guild_id, snapshot.hand_number, snapshot.hakim)

    async def on_hokm_chosen(self, snapshot: GameSnapshot) -> None:
        suit = snapshot.hokm.value if snapshot.hokm else "nothing"
        logger.info("Guild %s: %s chose %s", snapshot.guild_id, snapshot.hakim, suit)

    async def on_turn_changed(self, snapshot: GameSnapshot) -> None:
        logger.info("Guild %s: %s to play", snapshot.guild_id, snapshot.current_player)

    async def on_trick_resolved(
        self,
        snapshot: GameSnapshot,
        winner: str,
        winning_cards: Sequence[Tuple[str, Card]],
    ) -> None:
        played = ", ".join(f"{player}: {card_label(card)}" for player, card in winning_cards)
        logger.info("Guild %s: %s took the trick (%s)", snapshot.guild_id, winner, played)

    async def on_hand_over(self, snapshot: GameSnapshot, winning_team: "Team", tricks: Dict["Team", int]) -> None:
        tally = ", ".join(f"{team.value}={won}" for team, won in tricks.items())
        logger.info(
            "Guild %s: hand %d over, %s wins (%s)", snapshot.guild_id, snapshot.hand_number, winning_team.value, tally
        )

    async def on_game_over(self, snapshot: GameSnapshot, winning_team: "Team") -> None:
        logger.info("Guild %s: game over, %s wins the match", snapshot.guild_id, winning_team.value)

    async def on_game_cancelled(self, snapshot: GameSnapshot) -> None:
        logger.info("Guild %s: game cancelled", snapshot.guild_id)
