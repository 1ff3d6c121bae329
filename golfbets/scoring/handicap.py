"""
Handicap stroke allocation and net scoring.

The allocator only ever hands out strokes. Plus handicaps (negative playing
handicaps) receive nothing from it; converting a plus handicap into strokes
is a separate, explicit step chosen by the game (see ``game_handicaps``).
"""

from __future__ import annotations

import math
from typing import Dict, Iterable

from golfbets.models import HandicapMode, Player


HOLES_PER_ALLOCATION = 18

FORMAT_ALLOWANCES: Dict[str, int] = {
    "stroke_play": 95,
    "best_ball": 85,
    "scramble": 35,
    "match_play": 100,
}


def strokes_received(playing_handicap: int, stroke_index: int) -> int:
    if playing_handicap < 0:
        return 0
    base = playing_handicap // HOLES_PER_ALLOCATION
    remainder = playing_handicap % HOLES_PER_ALLOCATION
    return base + (1 if stroke_index <= remainder else 0)


def strokes_given_back(playing_handicap: int, stroke_index: int) -> int:
    """Strokes a plus player adds to gross, easiest holes (SI 18, 17, ...) first."""
    if playing_handicap >= 0:
        return 0
    plus = -playing_handicap
    base = plus // HOLES_PER_ALLOCATION
    remainder = plus % HOLES_PER_ALLOCATION
    return base + (1 if HOLES_PER_ALLOCATION + 1 - stroke_index <= remainder else 0)


def net_score(gross: int, playing_handicap: int, stroke_index: int, give_back: bool = False) -> int:
    net = gross - strokes_received(playing_handicap, stroke_index)
    if give_back:
        net += strokes_given_back(playing_handicap, stroke_index)
    return net


def game_handicaps(players: Iterable[Player], mode: HandicapMode = HandicapMode.FULL) -> Dict[str, int]:
    handicaps = {player.id: player.playing_handicap for player in players}
    if mode == HandicapMode.OFF_LOW and handicaps:
        low = min(handicaps.values())
        return {player_id: value - low for player_id, value in handicaps.items()}
    return handicaps


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def course_handicap(handicap_index: float, slope: float, course_rating: float, par: int) -> int:
    return _round_half_up(handicap_index * (slope / 113) + (course_rating - par))


def playing_handicap(course_hcp: int, format: str = "stroke_play", allowance: int = 100) -> int:
    effective = allowance if allowance != 100 else FORMAT_ALLOWANCES.get(format, 100)
    return _round_half_up(course_hcp * (effective / 100))


_SCORE_NAMES = {
    -3: "Albatross",
    -2: "Eagle",
    -1: "Birdie",
    0: "Par",
    1: "Bogey",
    2: "Double Bogey",
    3: "Triple Bogey",
}


def score_name(gross: int, par: int) -> str:
    delta = gross - par
    if delta in _SCORE_NAMES:
        return _SCORE_NAMES[delta]
    if delta < 0:
        return f"{abs(delta)} under par"
    return f"{delta} over par"


def format_score_delta(delta: int) -> str:
    if delta == 0:
        return "E"
    if delta > 0:
        return f"+{delta}"
    return str(delta)
