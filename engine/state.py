"""Game state management for Hokm."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from random import Random
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, Suit
from .deck import Deck
from .mechanics import legal_moves, must_follow
from .policies import SEATS, HakimPolicy, MatchPolicy, policies_from_config
from .rules_schema import TRICKS_PER_HAND, HokmConfig
from .trick import CompletedTrick, Trick, TrickError

logger = logging.getLogger(__name__)

HAKIM_FIRST_DEAL = 5
DEAL_ROUNDS = (4, 4)


class Phase(Enum):
    AWAITING_HAKIM = "awaiting_hakim"
    CHOOSING_HOKM = "choosing_hokm"
    PLAYING = "playing"
    HAND_OVER = "hand_over"
    GAME_OVER = "game_over"


class Team(Enum):
    A = "team_a"
    B = "team_b"

    @classmethod
    def for_seat(cls, seat: int) -> "Team":
        return cls.A if seat % 2 == 0 else cls.B


class InvalidPlay(RuntimeError):
    """Raised when an illegal card play is attempted."""


class NotYourTurn(InvalidPlay):
    """Raised when a player acts out of turn."""


class CardNotHeld(InvalidPlay):
    """Raised when a player plays a card they do not hold."""


class MustFollowSuit(InvalidPlay):
    """Raised when a player holding the led suit plays another suit."""


class InvalidStateError(RuntimeError):
    """Raised when an operation is attempted in the wrong phase."""


@dataclass(frozen=True)
class HandResult:
    hand_number: int
    winning_team: Team
    tricks: Dict[Team, int]


@dataclass(frozen=True)
class PlayOutcome:
    player: str
    card: Card
    trick: Optional[CompletedTrick] = None
    hand_result: Optional[HandResult] = None
    match_winner: Optional[Team] = None

    @property
    def trick_complete(self) -> bool:
        return self.trick is not None


@dataclass
class HokmSession:
    """One guild's game: the hand in progress plus match-scoped tallies."""

    guild_id: str
    order: Sequence[str]
    config: HokmConfig = field(default_factory=HokmConfig)
    rng: Optional[Random] = None
    hakim_policy: Optional[HakimPolicy] = None
    match_policy: Optional[MatchPolicy] = None
    initial_deck: Optional[Sequence[Card]] = None

    teams: Dict[str, Team] = field(init=False)
    phase: Phase = field(init=False, default=Phase.AWAITING_HAKIM)
    hakim: Optional[str] = field(init=False, default=None)
    hokm: Optional[Suit] = field(init=False, default=None)
    deck: Deck = field(init=False)
    hands: Dict[str, List[Card]] = field(init=False)
    leader_index: int = field(init=False, default=0)
    turn_index: int = field(init=False, default=0)
    table: Trick = field(init=False)
    tricks_team: Dict[Team, int] = field(init=False)
    tricks_by_player: Dict[str, int] = field(init=False)
    completed_tricks: List[CompletedTrick] = field(init=False)
    turn_token: int = field(init=False, default=0)
    hand_number: int = field(init=False, default=1)
    hands_won: Dict[Team, int] = field(init=False)
    last_hand_winner: Optional[Team] = field(init=False, default=None)
    hand_results: List[HandResult] = field(init=False)

    def __post_init__(self) -> None:
        self.order = tuple(self.order)
        if len(self.order) != SEATS:
            raise ValueError("A Hokm session needs exactly four players.")
        if len(set(self.order)) != SEATS:
            raise ValueError("Player ids must be distinct.")
        if self.rng is None:
            self.rng = Random(self.config.seed)
        default_hakim, default_match = policies_from_config(self.config)
        self.hakim_policy = self.hakim_policy or default_hakim
        self.match_policy = self.match_policy or default_match
        self.teams = {player: Team.for_seat(seat) for seat, player in enumerate(self.order)}
        self.hands_won = {Team.A: 0, Team.B: 0}
        self.hand_results = []
        self._reset_hand(self.initial_deck)

    # Queries -----------------------------------------------------------

    @property
    def current_player(self) -> str:
        return self.order[self.turn_index]

    @property
    def leader(self) -> str:
        return self.order[self.leader_index]

    @property
    def lead_suit(self) -> Optional[Suit]:
        return self.table.led_suit()

    @property
    def tricks_team1(self) -> int:
        return self.tricks_team[Team.A]

    @property
    def tricks_team2(self) -> int:
        return self.tricks_team[Team.B]

    def seat_of(self, player: str) -> int:
        return self.order.index(player)

    def members(self, team: Team) -> List[str]:
        return [player for player in self.order if self.teams[player] is team]

    @property
    def actor(self) -> Optional[str]:
        """The player the game is waiting on: the hakim, then whoever is to play."""
        if self.phase is Phase.CHOOSING_HOKM:
            return self.hakim
        if self.phase is Phase.PLAYING:
            return self.current_player
        return None

    def available_moves(self, player: str) -> List[Card]:
        if self.phase is not Phase.PLAYING:
            raise InvalidStateError(f"No moves available in phase {self.phase.value}.")
        if player != self.current_player:
            raise NotYourTurn("Not this player's turn.")
        return legal_moves(self.hands[player], self.lead_suit)

    # Hokm selection ----------------------------------------------------

    def choose_hakim(self) -> str:
        """Pick the hakim and deal them the first five cards."""
        self._ensure_phase(Phase.AWAITING_HAKIM)
        assert self.hakim_policy is not None
        seat = self.hakim_policy.select(self)
        self.hakim = self.order[seat]
        self.hands[self.hakim].extend(self.deck.draw(HAKIM_FIRST_DEAL))
        self.leader_index = self.turn_index = seat
        self.phase = Phase.CHOOSING_HOKM
        self._advance_token()
        logger.info("Guild %s hand %d: hakim is %s", self.guild_id, self.hand_number, self.hakim)
        return self.hakim

    def set_hokm(self, suit: Suit, player: Optional[str] = None) -> None:
        """Record trump and deal the remaining cards, then open play."""
        self._ensure_phase(Phase.CHOOSING_HOKM)
        assert self.hakim is not None
        if player is not None and player != self.hakim:
            raise NotYourTurn("Only the hakim may choose hokm.")
        self.hokm = suit
        self._deal_remaining()

        seat = self.seat_of(self.hakim)
        self.table = Trick(leader=self.hakim)
        self.tricks_team = {Team.A: 0, Team.B: 0}
        self.tricks_by_player = {p: 0 for p in self.order}
        self.completed_tricks = []
        self.leader_index = self.turn_index = seat
        self.phase = Phase.PLAYING
        self._advance_token()
        logger.info("Guild %s hand %d: hokm is %s", self.guild_id, self.hand_number, suit.value)

    def _deal_remaining(self) -> None:
        assert self.hakim is not None
        start = self.seat_of(self.hakim)
        seating = [self.order[(start + offset) % SEATS] for offset in range(SEATS)]
        for player in seating[1:]:
            self.hands[player].extend(self.deck.draw(HAKIM_FIRST_DEAL))
        for count in DEAL_ROUNDS:
            for player in seating:
                self.hands[player].extend(self.deck.draw(count))

    # Trick play --------------------------------------------------------

    def play_card(self, player: str, card: Card) -> PlayOutcome:
        if self.phase is not Phase.PLAYING:
            raise InvalidStateError(f"Cannot play a card in phase {self.phase.value}.")
        if player != self.current_player:
            raise NotYourTurn("Not this player's turn.")
        hand = self.hands[player]
        if card not in hand:
            raise CardNotHeld(f"{card} is not in {player}'s hand.")
        if must_follow(hand, self.lead_suit, card):
            assert self.lead_suit is not None
            raise MustFollowSuit(f"{player} must follow {self.lead_suit.value}.")

        try:
            self.table.add_play(player, card)
        except TrickError as exc:
            raise InvalidPlay(str(exc)) from exc
        hand.remove(card)

        if not self.table.is_full():
            self.turn_index = (self.turn_index + 1) % SEATS
            self._advance_token()
            return PlayOutcome(player=player, card=card)

        completed = self._complete_trick()
        hand_result = self._check_hand_over()
        self._advance_token()
        return PlayOutcome(
            player=player,
            card=card,
            trick=completed,
            hand_result=hand_result,
            match_winner=self.match_winner() if hand_result is not None else None,
        )

    def _complete_trick(self) -> CompletedTrick:
        winner, winning_card = self.table.winning_play(self.hokm)
        completed = CompletedTrick(
            leader=self.table.leader,
            plays=tuple(self.table.plays),
            winner=winner,
            winning_card=winning_card,
        )
        self.completed_tricks.append(completed)
        self.tricks_team[self.teams[winner]] += 1
        self.tricks_by_player[winner] += 1

        self.leader_index = self.turn_index = self.seat_of(winner)
        self.table = Trick(leader=winner)
        logger.debug("Guild %s: %s took the trick with %s", self.guild_id, winner, winning_card)
        return completed

    def _check_hand_over(self) -> Optional[HandResult]:
        threshold = self.config.tricks_to_win_hand
        reached = [team for team, won in self.tricks_team.items() if won >= threshold]
        if reached:
            winning_team = reached[0]
        elif len(self.completed_tricks) == TRICKS_PER_HAND:
            winning_team = max(self.tricks_team, key=lambda team: self.tricks_team[team])
        else:
            return None
        return self._finish_hand(winning_team)

    def _finish_hand(self, winning_team: Team) -> HandResult:
        result = HandResult(
            hand_number=self.hand_number,
            winning_team=winning_team,
            tricks=dict(self.tricks_team),
        )
        self.hands_won[winning_team] += 1
        self.last_hand_winner = winning_team
        self.hand_results.append(result)
        self.phase = Phase.HAND_OVER
        logger.info(
            "Guild %s hand %d won by %s with tricks %d-%d",
            self.guild_id,
            self.hand_number,
            winning_team.value,
            self.tricks_team1,
            self.tricks_team2,
        )
        if self.match_winner() is not None:
            self.phase = Phase.GAME_OVER
            logger.info("Guild %s match won by %s", self.guild_id, winning_team.value)
        return result

    def match_winner(self) -> Optional[Team]:
        assert self.match_policy is not None
        return self.match_policy.winner(self.hands_won)

    # Hand progression --------------------------------------------------

    def start_next_hand(self) -> str:
        """Reset hand-scoped state, rotate the hakim and deal their five cards."""
        self._ensure_phase(Phase.HAND_OVER)
        self.hand_number += 1
        self._reset_hand(None)
        return self.choose_hakim()

    def cancel(self) -> None:
        self.phase = Phase.GAME_OVER
        self._advance_token()

    def _reset_hand(self, cards: Optional[Sequence[Card]]) -> None:
        self.deck = Deck(cards, rng=self.rng)
        self.hands = {player: [] for player in self.order}
        self.hokm = None
        self.table = Trick(leader=self.order[self.leader_index])
        self.tricks_team = {Team.A: 0, Team.B: 0}
        self.tricks_by_player = {player: 0 for player in self.order}
        self.completed_tricks = []
        self.phase = Phase.AWAITING_HAKIM

    def _advance_token(self) -> None:
        self.turn_token += 1

    def _ensure_phase(self, expected: Phase) -> None:
        if self.phase is not expected:
            raise InvalidStateError(
                f"Action not allowed in phase {self.phase.value}. Expected {expected.value}."
            )

    # Diagnostics -------------------------------------------------------

    def cards_accounted(self) -> Tuple[int, int, int, int]:
        """Return (in hands, on table, in completed tricks, in deck)."""
        in_hands = sum(len(hand) for hand in self.hands.values())
        on_table = len(self.table.plays)
        played = sum(len(trick.plays) for trick in self.completed_tricks)
        return in_hands, on_table, played, len(self.deck)
