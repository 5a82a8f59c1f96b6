from typing import Dict, List

import pytest

from bots.heuristic import fallback_card
from engine.cards import ACE, KING, Card, Suit
from engine.policies import HakimPolicy, MatchPolicy
from engine.rules_schema import HokmConfig
from engine.state import (
    CardNotHeld,
    HokmSession,
    InvalidStateError,
    MustFollowSuit,
    NotYourTurn,
    Phase,
    Team,
)

PLAYERS = ("a", "b", "c", "d")


def rigged_session(hands: Dict[str, List[Card]], hokm: Suit = Suit.SPADES, **config) -> HokmSession:
    config.setdefault("hakim_selection", "first_seat")
    session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(**config))
    session.choose_hakim()
    session.set_hokm(hokm)
    session.hands = {player: list(hands[player]) for player in PLAYERS}
    return session


def autoplay_hand(session: HokmSession) -> None:
    while session.phase is Phase.PLAYING:
        player = session.current_player
        session.play_card(player, fallback_card(session.hands[player], session.lead_suit))
        assert session.tricks_team1 + session.tricks_team2 == len(session.completed_tricks)


def test_trump_seven_takes_trick_led_in_hearts():
    session = rigged_session(
        {
            "a": [Card(10, Suit.HEARTS), Card(2, Suit.CLUBS)],
            "b": [Card(KING, Suit.HEARTS), Card(3, Suit.CLUBS)],
            "c": [Card(7, Suit.SPADES), Card(4, Suit.CLUBS)],
            "d": [Card(ACE, Suit.HEARTS), Card(5, Suit.CLUBS)],
        }
    )
    session.play_card("a", Card(10, Suit.HEARTS))
    session.play_card("b", Card(KING, Suit.HEARTS))
    session.play_card("c", Card(7, Suit.SPADES))
    outcome = session.play_card("d", Card(ACE, Suit.HEARTS))

    assert outcome.trick is not None
    assert outcome.trick.winner == "c"
    assert session.tricks_team[Team.A] == 1
    assert session.tricks_by_player["c"] == 1
    assert session.current_player == "c"
    assert session.leader == "c"
    assert session.lead_suit is None
    assert session.table.is_empty()


def test_must_follow_suit_when_holding_it():
    session = rigged_session(
        {
            "a": [Card(10, Suit.HEARTS)],
            "b": [Card(2, Suit.HEARTS), Card(ACE, Suit.SPADES)],
            "c": [Card(3, Suit.CLUBS)],
            "d": [Card(4, Suit.CLUBS)],
        }
    )
    session.play_card("a", Card(10, Suit.HEARTS))
    with pytest.raises(MustFollowSuit):
        session.play_card("b", Card(ACE, Suit.SPADES))
    assert Card(ACE, Suit.SPADES) in session.hands["b"]
    assert len(session.table.plays) == 1

    session.play_card("b", Card(2, Suit.HEARTS))
    session.play_card("c", Card(3, Suit.CLUBS))


def test_turn_and_holding_are_checked_first():
    session = rigged_session(
        {
            "a": [Card(10, Suit.HEARTS)],
            "b": [Card(2, Suit.HEARTS)],
            "c": [Card(3, Suit.CLUBS)],
            "d": [Card(4, Suit.CLUBS)],
        }
    )
    with pytest.raises(NotYourTurn):
        session.play_card("b", Card(2, Suit.HEARTS))
    with pytest.raises(NotYourTurn):
        session.play_card("stranger", Card(2, Suit.HEARTS))
    with pytest.raises(CardNotHeld):
        session.play_card("a", Card(ACE, Suit.HEARTS))


def test_cannot_play_before_hokm():
    session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(hakim_selection="first_seat"))
    session.choose_hakim()
    with pytest.raises(InvalidStateError):
        session.play_card("a", session.hands["a"][0])


def test_hand_ends_when_team_reaches_seven_tricks():
    spades = [Card(rank, Suit.SPADES) for rank in range(ACE, 7, -1)]
    session = rigged_session(
        {
            "a": spades + [Card(ACE, Suit.HEARTS)],
            "b": [Card(rank, Suit.CLUBS) for rank in range(2, 10)],
            "c": [Card(rank, Suit.DIAMONDS) for rank in range(2, 10)],
            "d": [Card(rank, Suit.HEARTS) for rank in range(3, 11)],
        }
    )
    outcomes = []
    while session.phase is Phase.PLAYING:
        player = session.current_player
        outcomes.append(session.play_card(player, fallback_card(session.hands[player], session.lead_suit)))

    assert session.phase is Phase.HAND_OVER
    assert len(session.completed_tricks) == 7
    assert session.tricks_team[Team.A] == 7
    assert session.tricks_team[Team.B] == 0
    assert all(len(hand) == 1 for hand in session.hands.values())
    final = outcomes[-1]
    assert final.hand_result is not None
    assert final.hand_result.winning_team is Team.A
    assert final.hand_result.tricks == {Team.A: 7, Team.B: 0}
    assert session.hands_won == {Team.A: 1, Team.B: 0}
    with pytest.raises(InvalidStateError):
        session.play_card("a", Card(ACE, Suit.HEARTS))


def test_full_random_hand_keeps_invariants():
    for seed in range(10):
        session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(seed=seed))
        session.choose_hakim()
        session.set_hokm(Suit.DIAMONDS)
        autoplay_hand(session)

        assert session.phase is Phase.HAND_OVER
        assert max(session.tricks_team.values()) == 7
        assert sum(session.tricks_by_player.values()) == len(session.completed_tricks)
        assert sum(session.cards_accounted()) == 52
        assert session.cards_accounted()[1] == 0


def test_lower_threshold_ends_hand_earlier():
    session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(seed=4, tricks_to_win_hand=3))
    session.choose_hakim()
    session.set_hokm(Suit.CLUBS)
    autoplay_hand(session)
    assert max(session.tricks_team.values()) == 3
    assert len(session.completed_tricks) <= 5


def test_start_next_hand_resets_hand_but_keeps_match_tally():
    session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(seed=8, hakim_selection="first_seat"))
    session.choose_hakim()
    session.set_hokm(Suit.HEARTS)
    autoplay_hand(session)
    won = dict(session.hands_won)

    hakim = session.start_next_hand()

    assert hakim == "b"
    assert session.hand_number == 2
    assert session.phase is Phase.CHOOSING_HOKM
    assert session.hokm is None
    assert session.hands_won == won
    assert session.completed_tricks == []
    assert session.tricks_team == {Team.A: 0, Team.B: 0}
    assert len(session.hands["b"]) == 5
    assert len(session.deck) == 47


def test_start_next_hand_requires_hand_over():
    session = HokmSession(guild_id="guild", order=PLAYERS)
    with pytest.raises(InvalidStateError):
        session.start_next_hand()


def test_winner_keeps_rotation():
    policy = HakimPolicy(selection="first_seat", rotation="winner_keeps")
    session = HokmSession(guild_id="guild", order=PLAYERS, config=HokmConfig(seed=2), hakim_policy=policy)
    session.choose_hakim()
    session.set_hokm(Suit.SPADES)
    autoplay_hand(session)

    hakim = session.start_next_hand()
    if session.last_hand_winner is Team.A:
        assert hakim == "a"
    else:
        assert hakim == "b"


def test_match_ends_when_policy_is_met():
    session = HokmSession(
        guild_id="guild",
        order=PLAYERS,
        config=HokmConfig(seed=6),
        match_policy=MatchPolicy(hands_to_win=2),
    )
    session.choose_hakim()
    while True:
        session.set_hokm(Suit.HEARTS)
        autoplay_hand(session)
        if session.phase is Phase.GAME_OVER:
            break
        session.start_next_hand()

    winner = session.match_winner()
    assert winner is not None
    assert session.hands_won[winner] == 2
    assert len(session.hand_results) == sum(session.hands_won.values())
    with pytest.raises(InvalidStateError):
        session.start_next_hand()


def test_session_requires_four_distinct_players():
    with pytest.raises(ValueError):
        HokmSession(guild_id="guild", order=("a", "b", "c"))
    with pytest.raises(ValueError):
        HokmSession(guild_id="guild", order=("a", "b", "c", "a"))
