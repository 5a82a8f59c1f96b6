"""Validation schema for Hokm session configuration."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, validator

TRICKS_PER_HAND = 13

_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Return a duration in seconds.

    Numbers and bare digit strings are seconds; strings may carry one of the
    ``ms``, ``s``, ``m``, ``h`` or ``d`` suffixes ("45", "30s", "2m").
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip().lower()
        if re.fullmatch(r"\d+(?:\.\d+)?", text):
            seconds = float(text)
        else:
            match = _DURATION_RE.match(text)
            if match is None:
                raise ValueError(f"Invalid duration: {value!r}")
            seconds = float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
    if seconds < 0:
        raise ValueError(f"Duration must not be negative: {value!r}")
    return seconds


class HokmConfig(BaseModel):
    turn_timeout: float = Field(30.0, gt=0, description="Seconds a seat has to act before the bot plays for it.")
    bot_delay: float = Field(0.0, ge=0, description="Seconds a bot-controlled seat waits before acting.")
    tricks_to_win_hand: int = Field(
        7,
        ge=1,
        le=TRICKS_PER_HAND,
        description="Tricks a team needs to take the hand.",
    )
    hands_to_win_match: int = Field(7, ge=1, description="Hands a team needs to take the match.")
    hakim_selection: Literal["random", "first_seat", "first_ace"] = Field(
        "random",
        description="How the hakim of the first hand is picked.",
    )
    hakim_rotation: Literal["next_seat", "winner_keeps"] = Field(
        "next_seat",
        description="How the hakim moves between hands.",
    )
    auto_next_hand: bool = Field(True, description="Deal the next hand as soon as one is over.")
    seed: Optional[int] = Field(None, description="Seed for reproducible shuffles.")

    @validator("turn_timeout", "bot_delay", pre=True)
    def parse_durations(cls, value: Union[str, int, float]) -> float:
        return parse_duration(value)


def load_config(path: Union[str, Path]) -> HokmConfig:
    """Read a JSON configuration file."""
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return HokmConfig(**payload)


__all__ = ["HokmConfig", "TRICKS_PER_HAND", "load_config", "parse_duration"]
