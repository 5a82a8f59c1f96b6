"""Hakim selection and match-length policies."""

from __future__ import annotations

from random import Random
from typing import TYPE_CHECKING, Hashable, Mapping, Optional, TypeVar

from .cards import ACE
from .deck import build_deck

if TYPE_CHECKING:
    from .rules_schema import HokmConfig
    from .state import HokmSession

T = TypeVar("T", bound=Hashable)

SEATS = 4


class HakimPolicy:
    """Pick the hakim seat for the first hand and rotate it between hands."""

    def __init__(self, selection: str = "random", rotation: str = "next_seat") -> None:
        if selection not in {"random", "first_seat", "first_ace"}:
            raise ValueError(f"Unknown hakim selection: {selection!r}")
        if rotation not in {"next_seat", "winner_keeps"}:
            raise ValueError(f"Unknown hakim rotation: {rotation!r}")
        self.selection = selection
        self.rotation = rotation

    def select(self, session: "HokmSession") -> int:
        if session.hakim is None:
            return self.initial_seat(session.rng)
        return self.next_seat(session)

    def initial_seat(self, rng: Random) -> int:
        if self.selection == "first_seat":
            return 0
        if self.selection == "first_ace":
            return _first_ace_seat(rng)
        return rng.randrange(SEATS)

    def next_seat(self, session: "HokmSession") -> int:
        assert session.hakim is not None
        current = session.seat_of(session.hakim)
        if self.rotation == "winner_keeps" and session.last_hand_winner is session.teams[session.hakim]:
            return current
        return (current + 1) % SEATS


def _first_ace_seat(rng: Random) -> int:
    # Deal face up around the table from seat 0 until an ace shows.
    cards = build_deck()
    rng.shuffle(cards)
    for index, card in enumerate(cards):
        if card.rank == ACE:
            return index % SEATS
    raise AssertionError("A full deck always holds an ace.")


class MatchPolicy:
    """First team to ``hands_to_win`` hands takes the match."""

    def __init__(self, hands_to_win: int = 7) -> None:
        if hands_to_win < 1:
            raise ValueError("hands_to_win must be at least 1.")
        self.hands_to_win = hands_to_win

    def winner(self, hands_won: Mapping[T, int]) -> Optional[T]:
        for team, won in hands_won.items():
            if won >= self.hands_to_win:
                return team
        return None


def policies_from_config(config: "HokmConfig") -> tuple[HakimPolicy, MatchPolicy]:
    return (
        HakimPolicy(selection=config.hakim_selection, rotation=config.hakim_rotation),
        MatchPolicy(hands_to_win=config.hands_to_win_match),
    )
