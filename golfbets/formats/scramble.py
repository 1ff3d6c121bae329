from __future__ import annotations

from typing import List

from golfbets.formats.match_play import validate_sides
from golfbets.models import FormatConfigError, RoundSnapshot, ScrambleConfig, ScrambleState, SettlementLine


def evaluate_scramble(snapshot: RoundSnapshot, config: ScrambleConfig) -> ScrambleState:
    validate_sides(config.team_a, config.team_b, sizes=(1, 2, 3, 4))
    known = set(snapshot.player_ids())
    unknown = [pid for pid in config.team_a.player_ids + config.team_b.player_ids if pid not in known]
    if unknown:
        raise FormatConfigError(f"unknown player ids: {', '.join(unknown)}")
    # each team's score lives on its captain, the first listed player
    captain_a = config.team_a.player_ids[0]
    captain_b = config.team_b.player_ids[0]
    state = ScrambleState(team_a=config.team_a, team_b=config.team_b)

    holes = snapshot.sorted_holes()
    for hole in holes:
        a_score = snapshot.gross(captain_a, hole.number)
        b_score = snapshot.gross(captain_b, hole.number)
        if a_score is None or b_score is None:
            continue
        state.team_a_total += a_score
        state.team_b_total += b_score
        state.holes_completed += 1

    if state.holes_completed == 0:
        return state
    state.complete = state.holes_completed == len(holes)
    state.margin = abs(state.team_a_total - state.team_b_total)
    if state.team_a_total < state.team_b_total:
        state.winner = "A"
    elif state.team_b_total < state.team_a_total:
        state.winner = "B"
    else:
        state.winner = "halved"
    return state


def settle_scramble(state: ScrambleState, stake_per_man: float, game: str = "scramble") -> List[SettlementLine]:
    if not state.complete or state.winner not in ("A", "B") or stake_per_man == 0:
        return []
    winners, losers = (state.team_a, state.team_b) if state.winner == "A" else (state.team_b, state.team_a)
    lines = [
        SettlementLine(player_id=pid, format="scramble", game=game, bet="match", amount=stake_per_man)
        for pid in winners.player_ids
    ]
    lines.extend(
        SettlementLine(player_id=pid, format="scramble", game=game, bet="match", amount=-stake_per_man)
        for pid in losers.player_ids
    )
    return lines
