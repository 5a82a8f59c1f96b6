"""Bot strategies for Hokm."""

from .base import BotStrategy
from .heuristic import HeuristicBot, bot_pick_hokm, fallback_card
from .random_bot import RandomBot

__all__ = ["BotStrategy", "HeuristicBot", "RandomBot", "bot_pick_hokm", "fallback_card"]
