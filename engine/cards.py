"""Card-related data structures and helpers for Hokm."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Union


class Suit(Enum):
    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"

    def __str__(self) -> str:
        return self.value


# Suit order used to break ties deterministically.
SUIT_ORDER: dict[Suit, int] = {suit: index for index, suit in enumerate(Suit)}

MIN_RANK = 2
MAX_RANK = 14

JACK = 11
QUEEN = 12
KING = 13
ACE = 14

RANK_NAMES: dict[int, str] = {
    JACK: "jack",
    QUEEN: "queen",
    KING: "king",
    ACE: "ace",
}

_RANK_ALIASES: dict[str, int] = {
    "j": JACK,
    "jack": JACK,
    "q": QUEEN,
    "queen": QUEEN,
    "k": KING,
    "king": KING,
    "a": ACE,
    "ace": ACE,
}


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    rank: int
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, int) or not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Card rank must be between {MIN_RANK} and {MAX_RANK}, got {self.rank!r}.")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Unknown suit: {self.suit!r}")

    def __str__(self) -> str:
        return card_label(self)


def rank_name(rank: int) -> str:
    return RANK_NAMES.get(rank, str(rank))


def parse_suit(value: Union[str, Suit]) -> Suit:
    if isinstance(value, Suit):
        return value
    normalized = value.strip().lower()
    for suit in Suit:
        if normalized in (suit.value, suit.value[0]):
            return suit
    raise ValueError(f"Unknown suit: {value!r}")


def parse_rank(value: Union[str, int]) -> int:
    if isinstance(value, int):
        return value
    normalized = value.strip().lower()
    if normalized in _RANK_ALIASES:
        return _RANK_ALIASES[normalized]
    if normalized.isdigit():
        return int(normalized)
    raise ValueError(f"Unknown rank: {value!r}")


def card_sort_key(card: Card) -> tuple[int, int]:
    """Order cards by rank, then by suit order."""
    return card.rank, SUIT_ORDER[card.suit]


def cards_of_suit(cards: Iterable[Card], suit: Suit) -> list[Card]:
    return [card for card in cards if card.suit is suit]


def serialize_card(card: Card) -> dict[str, object]:
    return {"suit": card.suit.value, "rank": card.rank}


def deserialize_card(payload: Mapping[str, object]) -> Card:
    return Card(parse_rank(payload["rank"]), parse_suit(payload["suit"]))  # type: ignore[arg-type]


def card_label(card: Card) -> str:
    return f"{rank_name(card.rank).title()} of {card.suit.value.title()}"
