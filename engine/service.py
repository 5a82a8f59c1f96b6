"""Async service layer: the inbound interface used by transports and chat front ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from bots.base import BotStrategy
from bots.heuristic import HeuristicBot, bot_pick_hokm, fallback_card

from .cards import Card, Suit, card_label, deserialize_card, parse_suit, serialize_card
from .events import GameListener, GameSnapshot
from .rules_schema import HokmConfig
from .state import HokmSession, InvalidPlay, InvalidStateError, Phase
from .store import SessionStore
from .timer import TurnTimer

logger = logging.getLogger(__name__)

Event = Tuple[str, tuple]

_TIMED_PHASES = (Phase.CHOOSING_HOKM, Phase.PLAYING)


@dataclass
class TrickPlayView:
    player: str
    card: dict
    label: str


@dataclass
class GameView:
    guild_id: str
    phase: str
    order: list[str]
    teams: dict[str, str]
    hand_number: int
    hakim: Optional[str]
    hokm: Optional[str]
    current_player: Optional[str]
    lead_suit: Optional[str]
    table: list[TrickPlayView]
    tricks: dict[str, int]
    tricks_by_player: dict[str, int]
    hands_won: dict[str, int]
    remaining_cards: dict[str, int]
    hand: list[dict]
    hand_labels: list[str]
    legal_moves: list[dict]
    turn_token: int


class HokmService:
    """Facade around the session store for chat front ends and the HTTP server.

    Every mutation of a guild's session runs under that guild's lock.
    Notifications are captured as snapshots while the lock is held and
    dispatched to the listener after it is released. ``bot`` drives bot seats;
    stalled humans always get the heuristic trump pick and fallback card.
    """

    def __init__(
        self,
        *,
        listener: Optional[GameListener] = None,
        store: Optional[SessionStore] = None,
        default_config: Optional[HokmConfig] = None,
        bot: Optional[BotStrategy] = None,
    ) -> None:
        self.store = store or SessionStore()
        self.listener = listener or GameListener()
        self.default_config = default_config or HokmConfig()
        self.bot = bot or HeuristicBot()
        self.timer = TurnTimer(self._on_deadline)
        self._bot_seats: Dict[str, FrozenSet[str]] = {}

    # Session lifecycle -------------------------------------------------

    async def start_game(
        self,
        guild_id: str,
        order: Sequence[str],
        *,
        bots: Iterable[str] = (),
        config: Optional[HokmConfig] = None,
        rng: Optional[Random] = None,
        initial_deck: Optional[Sequence[Card]] = None,
    ) -> GameView:
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = HokmSession(
                guild_id=guild_id,
                order=order,
                config=config or self.default_config,
                rng=rng,
                initial_deck=initial_deck,
            )
            bot_seats = frozenset(bots)
            unknown = bot_seats - set(session.order)
            if unknown:
                raise ValueError(f"Bot seats not at the table: {sorted(unknown)}")
            self.store.add(session)
            self._bot_seats[guild_id] = bot_seats
            logger.info("Guild %s: game started with %s", guild_id, ", ".join(session.order))

            session.choose_hakim()
            self._notify_hand_started(session, events)
            self._advance(session, events)
        await self._dispatch(events)
        return self.build_view(session)

    async def cancel_game(self, guild_id: str) -> None:
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = self.store.remove(guild_id)
            self.timer.cancel(guild_id)
            self._bot_seats.pop(guild_id, None)
            session.cancel()
            events.append(("on_game_cancelled", (GameSnapshot.capture(session),)))
        await self._dispatch(events)

    async def shutdown(self) -> None:
        self.timer.cancel_all()

    # Actions -----------------------------------------------------------

    async def choose_hokm(self, guild_id: str, suit: Union[Suit, str], *, player_id: Optional[str] = None) -> GameView:
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = self.store.get(guild_id)
            self._apply_hokm(session, parse_suit(suit), player_id, events)
            self._advance(session, events)
        await self._dispatch(events)
        return self.build_view(session, player_id)

    async def play_card(self, guild_id: str, player_id: str, card: Union[Card, Mapping[str, object]]) -> GameView:
        if not isinstance(card, Card):
            card = deserialize_card(card)
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = self.store.get(guild_id)
            self._apply_play(session, player_id, card, events)
            self._advance(session, events)
        await self._dispatch(events)
        return self.build_view(session, player_id)

    async def start_next_hand(self, guild_id: str) -> GameView:
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = self.store.get(guild_id)
            session.start_next_hand()
            self._notify_hand_started(session, events)
            self._advance(session, events)
        await self._dispatch(events)
        return self.build_view(session)

    # Views -------------------------------------------------------------

    def get_view(self, guild_id: str, perspective: Optional[str] = None) -> GameView:
        return self.build_view(self.store.get(guild_id), perspective)

    def build_view(self, session: HokmSession, perspective: Optional[str] = None) -> GameView:
        visible: list[Card] = []
        legal: list[Card] = []
        if perspective is not None and perspective in session.hands:
            visible = sorted(session.hands[perspective], key=lambda c: (c.suit.value, c.rank))
            if session.phase is Phase.PLAYING and session.current_player == perspective:
                legal = session.available_moves(perspective)
        return GameView(
            guild_id=session.guild_id,
            phase=session.phase.value,
            order=list(session.order),
            teams={player: team.value for player, team in session.teams.items()},
            hand_number=session.hand_number,
            hakim=session.hakim,
            hokm=session.hokm.value if session.hokm else None,
            current_player=session.actor,
            lead_suit=session.lead_suit.value if session.lead_suit else None,
            table=[
                TrickPlayView(player=player, card=serialize_card(card), label=card_label(card))
                for player, card in session.table.plays
            ],
            tricks={team.value: won for team, won in session.tricks_team.items()},
            tricks_by_player=dict(session.tricks_by_player),
            hands_won={team.value: won for team, won in session.hands_won.items()},
            remaining_cards={player: len(hand) for player, hand in session.hands.items()},
            hand=[serialize_card(card) for card in visible],
            hand_labels=[card_label(card) for card in visible],
            legal_moves=[serialize_card(card) for card in legal],
            turn_token=session.turn_token,
        )

    def is_bot(self, guild_id: str, player_id: str) -> bool:
        return player_id in self._bot_seats.get(guild_id, frozenset())

    # Internals ---------------------------------------------------------

    def _apply_hokm(self, session: HokmSession, suit: Suit, player_id: Optional[str], events: List[Event]) -> None:
        session.set_hokm(suit, player_id)
        snapshot = GameSnapshot.capture(session)
        events.append(("on_hokm_chosen", (snapshot,)))
        events.append(("on_turn_changed", (snapshot,)))

    def _apply_play(self, session: HokmSession, player_id: str, card: Card, events: List[Event]) -> None:
        outcome = session.play_card(player_id, card)
        snapshot = GameSnapshot.capture(session)
        if outcome.trick is not None:
            events.append(("on_trick_resolved", (snapshot, outcome.trick.winner, list(outcome.trick.plays))))
        if outcome.hand_result is not None:
            result = outcome.hand_result
            events.append(("on_hand_over", (snapshot, result.winning_team, dict(result.tricks))))
        elif session.phase is Phase.PLAYING:
            events.append(("on_turn_changed", (snapshot,)))

    def _act_for_bot(self, session: HokmSession, actor: str, events: List[Event]) -> None:
        if session.phase is Phase.CHOOSING_HOKM:
            self._apply_hokm(session, self.bot.choose_hokm(session.hands[actor]), actor, events)
        else:
            self._apply_play(session, actor, self.bot.play_card(session, actor), events)

    def _act_on_timeout(self, session: HokmSession, actor: str, events: List[Event]) -> None:
        if session.phase is Phase.CHOOSING_HOKM:
            self._apply_hokm(session, bot_pick_hokm(session.hands[actor]), actor, events)
        else:
            self._apply_play(session, actor, fallback_card(session.hands[actor], session.lead_suit), events)

    def _notify_hand_started(self, session: HokmSession, events: List[Event]) -> None:
        self.bot.on_hand_start(session)
        events.append(("on_hand_started", (GameSnapshot.capture(session),)))

    def _advance(self, session: HokmSession, events: List[Event]) -> None:
        """Run instant bot seats, roll hands over and arm the next deadline."""
        guild_id = session.guild_id
        while True:
            if session.phase is Phase.HAND_OVER and session.config.auto_next_hand:
                session.start_next_hand()
                self._notify_hand_started(session, events)
                continue
            if session.phase is Phase.GAME_OVER:
                self._finish(session, events)
                return
            actor = session.actor
            if actor is not None and self.is_bot(guild_id, actor) and session.config.bot_delay == 0:
                self._act_for_bot(session, actor, events)
                continue
            break

        actor = session.actor
        if session.phase in _TIMED_PHASES and actor is not None:
            delay = session.config.bot_delay if self.is_bot(guild_id, actor) else session.config.turn_timeout
            self.timer.schedule(guild_id, session.turn_token, delay)
        else:
            self.timer.cancel(guild_id)

    def _finish(self, session: HokmSession, events: List[Event]) -> None:
        guild_id = session.guild_id
        self.timer.cancel(guild_id)
        if self.store.find(guild_id) is session:
            self.store.remove(guild_id)
        self._bot_seats.pop(guild_id, None)
        winner = session.match_winner()
        assert winner is not None
        events.append(("on_game_over", (GameSnapshot.capture(session), winner)))

    async def _on_deadline(self, guild_id: str, token: int) -> None:
        events: List[Event] = []
        async with self.store.lock(guild_id):
            session = self.store.find(guild_id)
            if session is None or session.turn_token != token or session.phase not in _TIMED_PHASES:
                logger.debug("Guild %s: ignoring stale deadline for turn %d", guild_id, token)
                return
            actor = session.actor
            assert actor is not None
            try:
                if self.is_bot(guild_id, actor):
                    self._act_for_bot(session, actor, events)
                else:
                    logger.info("Guild %s: %s ran out of time, playing for them", guild_id, actor)
                    self._act_on_timeout(session, actor, events)
            except (InvalidPlay, InvalidStateError) as exc:
                logger.warning("Guild %s: timed play for %s rejected: %s", guild_id, actor, exc)
                return
            self._advance(session, events)
        await self._dispatch(events)

    async def _dispatch(self, events: List[Event]) -> None:
        for name, args in events:
            try:
                await getattr(self.listener, name)(*args)
            except Exception:
                logger.exception("Listener failed handling %s", name)
