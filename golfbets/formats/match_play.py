"""
Head-to-head match play.

A match is always recomputed from the full score snapshot: each side's
best-ball net decides a hole, the lead moves by one per decided hole and the
match closes as soon as the lead exceeds the holes left to play. Nothing
about a match is stored between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from golfbets.models import (
    Exposure,
    FormatConfigError,
    Hole,
    HoleResult,
    HoleStake,
    MatchPlayConfig,
    MatchPlayState,
    MatchState,
    RoundSnapshot,
    SettlementLine,
    Team,
)
from golfbets.scoring.netscores import NetScoreTable


@dataclass(frozen=True)
class HoleOutcome:
    hole_number: int
    side_a_net: Optional[int]
    side_b_net: Optional[int]
    winner: Optional[str]


def best_ball(nets: Iterable[Optional[int]]) -> Optional[int]:
    scored = [net for net in nets if net is not None]
    if not scored:
        return None
    return min(scored)


def compare_sides(side_a: Sequence[int], side_b: Sequence[int], high_ball_tiebreak: bool = False) -> str:
    a_sorted = sorted(side_a)
    b_sorted = sorted(side_b)
    if a_sorted[0] < b_sorted[0]:
        return "A"
    if b_sorted[0] < a_sorted[0]:
        return "B"
    if high_ball_tiebreak and len(a_sorted) > 1 and len(b_sorted) > 1:
        # low balls tied: the better second ball takes the hole
        if a_sorted[1] < b_sorted[1]:
            return "A"
        if b_sorted[1] < a_sorted[1]:
            return "B"
    return "halved"


def score_holes(
    table: NetScoreTable,
    holes: Iterable[Hole],
    side_a: Sequence[str],
    side_b: Sequence[str],
    high_ball_tiebreak: bool = False,
) -> List[HoleOutcome]:
    outcomes: List[HoleOutcome] = []
    for hole in sorted(holes, key=lambda h: h.number):
        a_nets = [net for net in table.nets_for(side_a, hole.number).values() if net is not None]
        b_nets = [net for net in table.nets_for(side_b, hole.number).values() if net is not None]
        if not a_nets or not b_nets:
            outcomes.append(HoleOutcome(hole.number, best_ball(a_nets), best_ball(b_nets), None))
            continue
        winner = compare_sides(a_nets, b_nets, high_ball_tiebreak)
        outcomes.append(HoleOutcome(hole.number, min(a_nets), min(b_nets), winner))
    return outcomes


def format_lead(lead: int) -> str:
    if lead == 0:
        return "AS"
    if lead > 0:
        return f"{lead} UP"
    return f"{abs(lead)} DN"


def format_lead_for_side(lead: int, side: str) -> str:
    return format_lead(lead if side == "A" else -lead)


def evaluate_segment(
    outcomes: Sequence[HoleOutcome],
    label: str,
    start_hole: int,
    end_hole: int,
    stake: float,
    press_number: Optional[int] = None,
    parent: Optional[str] = None,
) -> MatchState:
    logger = logging.getLogger("golfbets.match_play")
    in_segment = [o for o in outcomes if start_hole <= o.hole_number <= end_hole]
    total = len(in_segment)

    lead = 0
    played = 0
    closed_on: Optional[int] = None
    results: List[HoleResult] = []

    for outcome in in_segment:
        complete = outcome.winner is not None
        if complete and closed_on is None:
            played += 1
            if outcome.winner == "A":
                lead += 1
            elif outcome.winner == "B":
                lead -= 1
            if abs(lead) > total - played:
                closed_on = outcome.hole_number
                logger.debug(
                    "match_closed label=%s hole=%s lead=%s remaining=%s",
                    label,
                    outcome.hole_number,
                    lead,
                    total - played,
                )
        results.append(
            HoleResult(
                hole_number=outcome.hole_number,
                side_a_net=outcome.side_a_net,
                side_b_net=outcome.side_b_net,
                winner=outcome.winner,
                lead=lead,
                complete=complete,
            )
        )

    remaining = total - played
    closed = abs(lead) > remaining
    halved = not closed and remaining == 0
    dormie = not closed and remaining > 0 and abs(lead) == remaining

    state = MatchState(
        label=label,
        start_hole=start_hole,
        end_hole=end_hole,
        stake=stake,
        lead=lead,
        holes_played=played,
        holes_remaining=remaining,
        closed=closed,
        halved=halved,
        dormie=dormie,
        finished=closed or remaining == 0,
        status=format_lead(lead),
        closed_on_hole=closed_on,
        press_number=press_number,
        parent=parent,
        hole_results=results,
    )
    if closed:
        state.winner = "A" if lead > 0 else "B"
        state.result = f"{abs(lead)} & {remaining}" if remaining > 0 else f"{abs(lead)} UP"
        state.description = f"{abs(lead)} UP with {remaining} to play"
        state.status = state.result
    elif halved:
        state.winner = "halved"
        state.result = "Halved"
    return state


def _segment_holes(snapshot: RoundSnapshot, start_hole: int, end_hole: int) -> List[Hole]:
    return [hole for hole in snapshot.sorted_holes() if start_hole <= hole.number <= end_hole]


def validate_sides(team_a: Team, team_b: Team, sizes: Iterable[int] = (1, 2)) -> None:
    allowed = set(sizes)
    if len(team_a.player_ids) not in allowed or len(team_b.player_ids) not in allowed:
        raise FormatConfigError(
            f"teams must have {' or '.join(str(s) for s in sorted(allowed))} players, "
            f"got {len(team_a.player_ids)} and {len(team_b.player_ids)}"
        )
    if len(team_a.player_ids) != len(team_b.player_ids):
        raise FormatConfigError("both sides must field the same number of players")
    overlap = set(team_a.player_ids) & set(team_b.player_ids)
    if overlap:
        raise FormatConfigError(f"players on both teams: {', '.join(sorted(overlap))}")


def evaluate_match(snapshot: RoundSnapshot, config: MatchPlayConfig) -> MatchPlayState:
    validate_sides(config.team_a, config.team_b)
    if config.start_hole > config.end_hole:
        raise FormatConfigError("match start hole is after its end hole")
    table = NetScoreTable(
        snapshot,
        config.team_a.player_ids + config.team_b.player_ids,
        mode=config.handicap_mode,
        use_net=config.use_net,
    )
    holes = _segment_holes(snapshot, config.start_hole, config.end_hole)
    outcomes = score_holes(
        table,
        holes,
        config.team_a.player_ids,
        config.team_b.player_ids,
        config.high_ball_tiebreak,
    )
    main = evaluate_segment(outcomes, "match", config.start_hole, config.end_hole, config.stake_per_hole)

    presses: List[MatchState] = []
    for number, request in enumerate(sorted(config.presses, key=lambda p: p.starting_hole), start=1):
        if not config.start_hole < request.starting_hole <= config.end_hole:
            raise FormatConfigError(
                f"press starting hole {request.starting_hole} is outside holes "
                f"{config.start_hole}-{config.end_hole}"
            )
        stake = request.stake if request.stake is not None else config.stake_per_hole
        presses.append(
            evaluate_segment(
                outcomes,
                f"press {number} ({request.starting_hole}-{config.end_hole})",
                request.starting_hole,
                config.end_hole,
                stake,
                press_number=number,
                parent="match",
            )
        )

    return MatchPlayState(team_a=config.team_a, team_b=config.team_b, main=main, presses=presses)


def hole_at_stake(state: MatchPlayState, hole_number: int) -> HoleStake:
    main = 0.0 if state.main.finished else state.main.stake
    presses: Dict[int, float] = {}
    for press in state.presses:
        if press.start_hole <= hole_number and not press.finished:
            presses[press.press_number] = press.stake
    return HoleStake(hole_number=hole_number, total=main + sum(presses.values()), main=main, presses=presses)


def exposure(state: MatchPlayState) -> Exposure:
    def _exposure(match: MatchState) -> float:
        if match.finished:
            return abs(match.lead) * match.stake
        return match.holes_remaining * match.stake

    main = _exposure(state.main)
    presses = {press.press_number: _exposure(press) for press in state.presses}
    position = state.main.lead * state.main.stake + sum(p.lead * p.stake for p in state.presses)
    return Exposure(total=main + sum(presses.values()), main=main, presses=presses, position=position)


def settle_segment(
    match: MatchState,
    team_a: Team,
    team_b: Team,
    amount: float,
    format: str,
    game: str,
) -> List[SettlementLine]:
    if not match.finished or match.winner not in ("A", "B") or amount == 0:
        return []
    winners, losers = (team_a, team_b) if match.winner == "A" else (team_b, team_a)
    lines = [
        SettlementLine(player_id=pid, format=format, game=game, bet=match.label, amount=amount)
        for pid in winners.player_ids
    ]
    lines.extend(
        SettlementLine(player_id=pid, format=format, game=game, bet=match.label, amount=-amount)
        for pid in losers.player_ids
    )
    return lines


def settle_match(state: MatchPlayState, game: str = "match_play") -> List[SettlementLine]:
    lines: List[SettlementLine] = []
    for match in [state.main] + state.presses:
        lines.extend(
            settle_segment(match, state.team_a, state.team_b, match.stake * abs(match.lead), "match_play", game)
        )
    return lines
