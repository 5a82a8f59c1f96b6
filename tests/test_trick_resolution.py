import pytest

from bots.random_bot import RandomBot
from engine.cards import ACE, KING, Card, Suit
from engine.rules_schema import HokmConfig
from engine.state import HokmSession, Phase
from engine.trick import Trick, TrickError


def test_only_trump_wins_over_higher_lead_cards():
    trick = Trick(leader="a")
    trick.add_play("a", Card(10, Suit.HEARTS))
    trick.add_play("b", Card(KING, Suit.HEARTS))
    trick.add_play("c", Card(7, Suit.SPADES))
    trick.add_play("d", Card(ACE, Suit.HEARTS))

    assert trick.winning_play(Suit.SPADES) == ("c", Card(7, Suit.SPADES))


def test_highest_trump_wins_among_trumps():
    trick = Trick(leader="a")
    trick.add_play("a", Card(ACE, Suit.CLUBS))
    trick.add_play("b", Card(3, Suit.DIAMONDS))
    trick.add_play("c", Card(9, Suit.DIAMONDS))
    trick.add_play("d", Card(2, Suit.CLUBS))

    assert trick.winning_play(Suit.DIAMONDS) == ("c", Card(9, Suit.DIAMONDS))


def test_off_suit_discard_never_wins_without_trump():
    trick = Trick(leader="a")
    trick.add_play("a", Card(4, Suit.HEARTS))
    trick.add_play("b", Card(ACE, Suit.CLUBS))
    trick.add_play("c", Card(6, Suit.HEARTS))
    trick.add_play("d", Card(KING, Suit.DIAMONDS))

    assert trick.winning_play(Suit.SPADES) == ("c", Card(6, Suit.HEARTS))


def _expected_winner(plays, trump, led):
    trumps = [play for play in plays if play[1].suit is trump]
    pool = trumps or [play for play in plays if play[1].suit is led]
    return max(pool, key=lambda play: play[1].rank)


def test_random_hands_resolve_every_trick_by_the_rule():
    for seed in range(15):
        session = HokmSession(guild_id="g", order=("a", "b", "c", "d"), config=HokmConfig(seed=seed))
        bots = RandomBot(seed=seed)
        session.choose_hakim()
        session.set_hokm(bots.choose_hokm(session.hands[session.hakim]))
        while session.phase is Phase.PLAYING:
            player = session.current_player
            session.play_card(player, bots.play_card(session, player))

        for trick in session.completed_tricks:
            led = trick.plays[0][1].suit
            assert (trick.winner, trick.winning_card) == _expected_winner(trick.plays, session.hokm, led)
            winning_suit = trick.winning_card.suit
            assert winning_suit is session.hokm or winning_suit is led


def test_trick_refuses_a_fifth_card():
    trick = Trick(leader="a")
    for player, rank in zip("abcd", (2, 3, 4, 5)):
        trick.add_play(player, Card(rank, Suit.CLUBS))
    assert trick.is_full()
    with pytest.raises(TrickError):
        trick.add_play("a", Card(9, Suit.CLUBS))
