"""Simple bot arena for Hokm."""

from __future__ import annotations

import argparse
from typing import Dict, Iterable, Optional, Sequence

from engine.rules_schema import HokmConfig
from engine.state import HokmSession, Phase

from .base import BotStrategy
from .heuristic import HeuristicBot
from .random_bot import RandomBot

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "heuristic": HeuristicBot,
    "random": RandomBot,
}

SEAT_NAMES = ("north", "east", "south", "west")


def play_hand(session: HokmSession, bots: Sequence[BotStrategy]) -> None:
    """Play the current hand to completion, starting from whatever phase it is in."""
    if session.phase is Phase.AWAITING_HAKIM:
        session.choose_hakim()
    if session.phase is Phase.CHOOSING_HOKM:
        assert session.hakim is not None
        hakim_bot = bots[session.seat_of(session.hakim)]
        for bot in bots:
            bot.on_hand_start(session)
        session.set_hokm(hakim_bot.choose_hokm(session.hands[session.hakim]))
    while session.phase is Phase.PLAYING:
        player = session.current_player
        card = bots[session.seat_of(player)].play_card(session, player)
        session.play_card(player, card)


def run_match(
    bots: Sequence[BotStrategy],
    *,
    config: Optional[HokmConfig] = None,
    max_hands: int = 100,
) -> dict:
    if len(bots) != 4:
        raise ValueError("A Hokm match needs four bots.")
    session = HokmSession(guild_id="arena", order=SEAT_NAMES, config=config or HokmConfig())
    history = []
    for _ in range(max_hands):
        play_hand(session, bots)
        result = session.hand_results[-1]
        history.append(
            {
                "hand": result.hand_number,
                "hakim": session.hakim,
                "hokm": session.hokm.value if session.hokm else None,
                "winning_team": result.winning_team.value,
                "tricks": {team.value: won for team, won in result.tricks.items()},
            }
        )
        if session.phase is Phase.GAME_OVER:
            break
        session.start_next_hand()
    winner = session.match_winner()
    return {
        "hands_won": {team.value: won for team, won in session.hands_won.items()},
        "winner": winner.value if winner else None,
        "history": history,
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a four-bot Hokm match.")
    parser.add_argument("--team-a", default="heuristic", choices=BOT_REGISTRY.keys())
    parser.add_argument("--team-b", default="random", choices=BOT_REGISTRY.keys())
    parser.add_argument("--hands", type=int, default=7, help="Hands needed to win the match.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    team_a = BOT_REGISTRY[args.team_a]
    team_b = BOT_REGISTRY[args.team_b]
    bots = [team_a(), team_b(), team_a(), team_b()]
    config = HokmConfig(hands_to_win_match=args.hands, seed=args.seed)
    results = run_match(bots, config=config)

    print(f"Hands won: {results['hands_won']}")
    print(f"Winner: {results['winner']} after {len(results['history'])} hands")


if __name__ == "__main__":
    main()
