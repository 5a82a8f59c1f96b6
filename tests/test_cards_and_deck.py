import pytest

from engine.cards import ACE, Card, Suit, card_label, deserialize_card, parse_suit, serialize_card
from engine.deck import DECK_SIZE, Deck, DeckError, build_deck


def test_build_deck_has_52_distinct_cards():
    deck = build_deck()
    assert len(deck) == DECK_SIZE
    assert len(set(deck)) == DECK_SIZE
    assert {card.rank for card in deck} == set(range(2, 15))


def test_card_rejects_out_of_range_rank():
    with pytest.raises(ValueError):
        Card(1, Suit.SPADES)
    with pytest.raises(ValueError):
        Card(15, Suit.HEARTS)


def test_card_payloads_accept_names():
    assert deserialize_card({"suit": "Spades", "rank": "ace"}) == Card(ACE, Suit.SPADES)
    assert deserialize_card({"suit": "h", "rank": "10"}) == Card(10, Suit.HEARTS)
    assert serialize_card(Card(12, Suit.CLUBS)) == {"suit": "clubs", "rank": 12}
    assert card_label(Card(13, Suit.DIAMONDS)) == "King of Diamonds"
    with pytest.raises(ValueError):
        parse_suit("stars")


def test_deck_draws_from_the_top_and_tracks_dealt():
    cards = build_deck()
    deck = Deck(cards)
    drawn = deck.draw(5)
    assert drawn == list(reversed(cards[-5:]))
    assert deck.dealt + len(deck) == DECK_SIZE


def test_deck_refuses_to_overdraw():
    deck = Deck(build_deck())
    deck.draw(50)
    with pytest.raises(DeckError):
        deck.draw(3)


def test_deck_rejects_duplicates():
    cards = build_deck()
    cards[0] = cards[1]
    with pytest.raises(DeckError):
        Deck(cards)
