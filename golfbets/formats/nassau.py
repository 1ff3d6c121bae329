"""
Nassau: three independent best-ball matches (front nine, back nine, overall)
over the same two 2-player teams, with optional auto-presses.

Auto-press rule: after every decided hole, a segment that is still open and
where the trailing side is down by at least the threshold spawns a press
starting on the next hole of that segment, unless the segment already has an
open press. Presses triggered on the same hole are ordered front, back,
overall.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple
import logging

from golfbets.formats.match_play import (
    HoleOutcome,
    evaluate_segment,
    score_holes,
    settle_segment,
    validate_sides,
)
from golfbets.models import MatchState, NassauConfig, NassauState, RoundSnapshot, SettlementLine
from golfbets.scoring.netscores import NetScoreTable


SEGMENTS: Tuple[Tuple[str, int, int], ...] = (
    ("front", 1, 9),
    ("back", 10, 18),
    ("overall", 1, 18),
)


def _outcomes_through(outcomes: Sequence[HoleOutcome], through_hole: int) -> List[HoleOutcome]:
    return [
        outcome if outcome.hole_number <= through_hole else HoleOutcome(outcome.hole_number, None, None, None)
        for outcome in outcomes
    ]


def _press_starts(
    outcomes: Sequence[HoleOutcome],
    parent: MatchState,
    threshold: int,
) -> List[int]:
    segment_holes = [o.hole_number for o in outcomes if parent.start_hole <= o.hole_number <= parent.end_hole]
    starts: List[int] = []
    open_start: Optional[int] = None

    for result in parent.hole_results:
        if not result.complete:
            continue
        if parent.closed_on_hole is not None and result.hole_number >= parent.closed_on_hole:
            break
        if open_start is not None:
            press = evaluate_segment(
                _outcomes_through(outcomes, result.hole_number),
                "press",
                open_start,
                parent.end_hole,
                0.0,
            )
            if press.closed:
                open_start = None
        if open_start is not None or abs(result.lead) < threshold:
            continue
        following = [number for number in segment_holes if number > result.hole_number]
        if not following:
            continue
        open_start = following[0]
        starts.append(open_start)
    return starts


def evaluate_nassau(snapshot: RoundSnapshot, config: NassauConfig) -> NassauState:
    logger = logging.getLogger("golfbets.nassau")
    validate_sides(config.team_a, config.team_b, sizes=(2,))
    table = NetScoreTable(
        snapshot,
        config.team_a.player_ids + config.team_b.player_ids,
        mode=config.handicap_mode,
        use_net=config.use_net,
    )
    outcomes = score_holes(
        table,
        snapshot.sorted_holes(),
        config.team_a.player_ids,
        config.team_b.player_ids,
        config.high_ball_tiebreak,
    )

    segments = {
        name: evaluate_segment(outcomes, name, start, end, config.stake_per_man)
        for name, start, end in SEGMENTS
    }

    spawned: List[Tuple[int, int, str]] = []
    if config.auto_press:
        for order, (name, _, _) in enumerate(SEGMENTS):
            for start in _press_starts(outcomes, segments[name], config.auto_press_threshold):
                spawned.append((start, order, name))
    spawned.sort()

    presses: List[MatchState] = []
    counts = {name: 0 for name, _, _ in SEGMENTS}
    for start, _, name in spawned:
        counts[name] += 1
        parent = segments[name]
        logger.debug("nassau_press_spawned segment=%s starting_hole=%s", name, start)
        presses.append(
            evaluate_segment(
                outcomes,
                f"{name} press {counts[name]} ({start}-{parent.end_hole})",
                start,
                parent.end_hole,
                config.stake_per_man,
                press_number=counts[name],
                parent=name,
            )
        )

    incomplete = [o.hole_number for o in outcomes if o.winner is None]
    if incomplete:
        current_hole = incomplete[0]
    else:
        current_hole = outcomes[-1].hole_number if outcomes else 1

    return NassauState(
        team_a=config.team_a,
        team_b=config.team_b,
        stake_per_man=config.stake_per_man,
        front=segments["front"],
        back=segments["back"],
        overall=segments["overall"],
        presses=presses,
        current_hole=current_hole,
        holes_played=sum(1 for o in outcomes if o.winner is not None),
    )


def settle_nassau(state: NassauState, game: str = "nassau") -> List[SettlementLine]:
    lines: List[SettlementLine] = []
    for match in [state.front, state.back, state.overall] + state.presses:
        lines.extend(settle_segment(match, state.team_a, state.team_b, match.stake, "nassau", game))
    return lines


def nassau_exposure(state: NassauState) -> float:
    return state.stake_per_man * 3 + len(state.presses) * state.stake_per_man
