"""
Team points formats for two 2-player teams.

Points hi/lo: each hole pits the teams' low nets against each other and their
high nets against each other, one point apiece, half a point each on a tie.
Stableford: each player scores points from net score against par and a team
scores the sum of its players.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from golfbets.formats.match_play import validate_sides
from golfbets.models import (
    PointsHiLoConfig,
    PointsHoleResult,
    PointsState,
    RoundSnapshot,
    SettlementLine,
    StablefordConfig,
)
from golfbets.scoring.netscores import NetScoreTable


POINTS_HILO_WIN = 1.0
POINTS_HILO_TIE = 0.5


def stableford_points(net: int, par: int) -> int:
    diff = net - par
    if diff <= -3:
        return 8
    if diff == -2:
        return 5
    if diff == -1:
        return 3
    if diff == 0:
        return 1
    if diff == 1:
        return 0
    return -1


def _head_to_head(a: int, b: int) -> Tuple[float, float]:
    if a < b:
        return POINTS_HILO_WIN, 0.0
    if b < a:
        return 0.0, POINTS_HILO_WIN
    return POINTS_HILO_TIE, POINTS_HILO_TIE


def points_hilo_hole(team_a_nets: Sequence[int], team_b_nets: Sequence[int]) -> Tuple[float, float]:
    a_low, a_high = sorted(team_a_nets)
    b_low, b_high = sorted(team_b_nets)
    low = _head_to_head(a_low, b_low)
    high = _head_to_head(a_high, b_high)
    return low[0] + high[0], low[1] + high[1]


def evaluate_points(snapshot: RoundSnapshot, config: Union[PointsHiLoConfig, StablefordConfig]) -> PointsState:
    validate_sides(config.team_a, config.team_b, sizes=(2,))
    table = NetScoreTable(
        snapshot,
        config.team_a.player_ids + config.team_b.player_ids,
        mode=config.handicap_mode,
        use_net=config.use_net,
    )
    state = PointsState(format=config.format, team_a=config.team_a, team_b=config.team_b)

    for hole in snapshot.sorted_holes():
        a_nets = list(table.nets_for(config.team_a.player_ids, hole.number).values())
        b_nets = list(table.nets_for(config.team_b.player_ids, hole.number).values())
        result = PointsHoleResult(hole_number=hole.number)
        if any(net is None for net in a_nets + b_nets):
            state.hole_results.append(result)
            continue
        if config.format == "points_hilo":
            a_points, b_points = points_hilo_hole(a_nets, b_nets)
        else:
            a_points = float(sum(stableford_points(net, hole.par) for net in a_nets))
            b_points = float(sum(stableford_points(net, hole.par) for net in b_nets))
        result.team_a_points = a_points
        result.team_b_points = b_points
        result.complete = True
        state.team_a_total += a_points
        state.team_b_total += b_points
        state.holes_played += 1
        state.hole_results.append(result)

    incomplete = [r.hole_number for r in state.hole_results if not r.complete]
    if incomplete:
        state.current_hole = incomplete[0]
    elif state.hole_results:
        state.current_hole = state.hole_results[-1].hole_number
    return state


def settle_points(state: PointsState, stake_per_point: float, game: str = "") -> List[SettlementLine]:
    game = game or state.format
    amount = (state.team_a_total - state.team_b_total) * stake_per_point
    if amount == 0:
        return []
    lines = [
        SettlementLine(player_id=pid, format=state.format, game=game, bet="points", amount=amount)
        for pid in state.team_a.player_ids
    ]
    lines.extend(
        SettlementLine(player_id=pid, format=state.format, game=game, bet="points", amount=-amount)
        for pid in state.team_b.player_ids
    )
    return lines
